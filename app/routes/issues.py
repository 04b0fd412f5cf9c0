import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.config import get_db
from app.database.store import InvalidIdentifier, ProjectCollection, ProjectRegistry, get_registry
from app.errors import (
    CouldNotDelete,
    CouldNotUpdate,
    MissingIdentifier,
    NoUpdateFields,
    ProjectNotFound,
    RequiredFieldsMissing,
)
from app.schemas import IssueCreate, IssueResponse, IssueUpdate, MutationResult
from app.tasks.notifications import notify_issue_creation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/issues", tags=["issues"])


async def read_payload(request: Request) -> dict[str, Any]:
    """Request body as a dict, from either a JSON object or a form."""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return dict(form)

    return {}


def collect_filters(query: Mapping[str, Any]) -> dict[str, Any]:
    """Query parameters with a value; empty ones are ignored, not matched."""
    return {key: value for key, value in query.items() if value}


def collect_fields(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Body fields with a value; falsy ones count as not sent."""
    return {key: value for key, value in payload.items() if value}


def collect_updates(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Body fields to change: everything truthy except the _id itself."""
    return {key: value for key, value in collect_fields(payload).items() if key != "_id"}


async def get_project(
    project: str,
    db: AsyncSession = Depends(get_db),
    registry: ProjectRegistry = Depends(get_registry),
) -> ProjectCollection:
    """Resolve an existing project or stop the request."""
    collection = await registry.lookup(db, project)
    if collection is None:
        raise ProjectNotFound()
    return collection


@router.get("/{project}", response_model=list[IssueResponse])
async def list_issues(
    request: Request,
    collection: ProjectCollection = Depends(get_project),
    db: AsyncSession = Depends(get_db),
):
    """List a project's issues, filtered by exact match on the query parameters."""
    filters = collect_filters(request.query_params)
    return await collection.find(db, filters)


@router.post("/{project}", response_model=IssueResponse)
async def create_issue(
    project: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    registry: ProjectRegistry = Depends(get_registry),
):
    """Create an issue, creating the project first if it is new."""
    collection = await registry.ensure(db, project)

    payload = await read_payload(request)
    try:
        fields = IssueCreate.model_validate(collect_fields(payload))
    except ValidationError:
        raise RequiredFieldsMissing()
    if not fields.has_required_fields():
        raise RequiredFieldsMissing()

    issue = await collection.create(db, fields.model_dump())
    logger.info("Issue created", extra={"issue_id": issue.id, "project": project})

    background_tasks.add_task(notify_issue_creation, project, issue)

    return issue


@router.put("/{project}", response_model=MutationResult)
async def update_issue(
    request: Request,
    collection: ProjectCollection = Depends(get_project),
    db: AsyncSession = Depends(get_db),
):
    """Partially update an issue by _id. updated_on is always refreshed."""
    payload = await read_payload(request)
    issue_id = payload.get("_id")
    if not issue_id:
        raise MissingIdentifier()

    changes = collect_updates(payload)
    if not changes:
        raise NoUpdateFields(issue_id)

    try:
        values = IssueUpdate.model_validate(changes).model_dump(exclude_unset=True)
    except ValidationError:
        raise CouldNotUpdate(issue_id)
    values["updated_on"] = datetime.now(timezone.utc)

    try:
        updated_id = await collection.update_by_id(db, issue_id, values)
    except InvalidIdentifier:
        raise CouldNotUpdate(issue_id)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(
            "Store error while updating issue",
            extra={"issue_id": issue_id, "project": collection.name},
        )
        raise CouldNotUpdate(issue_id)

    if updated_id is None:
        raise CouldNotUpdate(issue_id)

    logger.info(
        "Issue updated",
        extra={"issue_id": updated_id, "project": collection.name, "fields": sorted(values)},
    )
    return MutationResult(result="successfully updated", id=updated_id)


@router.delete("/{project}", response_model=MutationResult)
async def delete_issue(
    request: Request,
    collection: ProjectCollection = Depends(get_project),
    db: AsyncSession = Depends(get_db),
):
    """Hard delete an issue by _id."""
    payload = await read_payload(request)
    issue_id = payload.get("_id")
    if not issue_id:
        raise MissingIdentifier()

    try:
        deleted_id = await collection.delete_by_id(db, issue_id)
    except InvalidIdentifier:
        raise CouldNotDelete(issue_id)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(
            "Store error while deleting issue",
            extra={"issue_id": issue_id, "project": collection.name},
        )
        raise CouldNotDelete(issue_id)

    if deleted_id is None:
        raise CouldNotDelete(issue_id)

    logger.info("Issue deleted", extra={"issue_id": deleted_id, "project": collection.name})
    return MutationResult(result="successfully deleted", id=deleted_id)
