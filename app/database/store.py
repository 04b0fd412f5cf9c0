"""Per-project issue collections and the registry that hands them out.

Every project shares the same issue schema. A project comes into existence on
the first issue created under its name and stays for as long as its row in
the ``projects`` table does.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import models

logger = logging.getLogger(__name__)

STRING_FIELDS = ("issue_title", "issue_text", "created_by", "assigned_to", "status_text")

_bool_adapter = TypeAdapter(bool)
_datetime_adapter = TypeAdapter(datetime)


class InvalidIdentifier(ValueError):
    """Raised when an ``_id`` is not a well-formed issue identifier."""


def parse_issue_id(value: Any) -> str:
    """Normalize an issue identifier or raise InvalidIdentifier."""
    try:
        return str(uuid.UUID(str(value)))
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdentifier(f"Malformed issue id: {value!r}")


def _filter_condition(field: str, value: Any):
    """Build one equality condition, or None when the value can never match."""
    if field == "_id":
        try:
            return models.Issue.id == parse_issue_id(value)
        except InvalidIdentifier:
            return None
    if field in STRING_FIELDS:
        return getattr(models.Issue, field) == str(value)
    try:
        if field == "open":
            return models.Issue.open == _bool_adapter.validate_python(value)
        if field in ("created_on", "updated_on"):
            return getattr(models.Issue, field) == _datetime_adapter.validate_python(value)
    except ValidationError:
        return None
    return None


class ProjectCollection:
    """Handle on the issues of a single project."""

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"ProjectCollection({self.name!r})"

    async def create(self, db: AsyncSession, fields: dict) -> models.Issue:
        now = datetime.now(timezone.utc)
        issue = models.Issue(
            id=str(uuid.uuid4()),
            project=self.name,
            issue_title=fields["issue_title"],
            issue_text=fields["issue_text"],
            created_by=fields["created_by"],
            assigned_to=fields.get("assigned_to") or "",
            status_text=fields.get("status_text") or "",
            open=True,
            created_on=now,
            updated_on=now,
        )
        db.add(issue)
        await db.commit()
        await db.refresh(issue)
        return issue

    async def find(self, db: AsyncSession, filters: dict) -> list[models.Issue]:
        """Return issues matching every filter, in insertion order."""
        stmt = select(models.Issue).where(models.Issue.project == self.name)
        for field, value in filters.items():
            condition = _filter_condition(field, value)
            if condition is None:
                return []
            stmt = stmt.where(condition)

        result = await db.execute(stmt.order_by(models.Issue.seq))
        return list(result.scalars().all())

    async def update_by_id(self, db: AsyncSession, issue_id: Any, values: dict) -> Optional[str]:
        """Apply ``values`` to one issue. Returns its id, or None if it does not exist.

        Raises InvalidIdentifier for malformed ids.
        """
        normalized = parse_issue_id(issue_id)
        result = await db.execute(
            update(models.Issue)
            .where(models.Issue.project == self.name, models.Issue.id == normalized)
            .values(**values)
        )
        await db.commit()
        return normalized if result.rowcount else None

    async def delete_by_id(self, db: AsyncSession, issue_id: Any) -> Optional[str]:
        """Hard delete one issue. Returns its id, or None if it does not exist.

        Raises InvalidIdentifier for malformed ids.
        """
        normalized = parse_issue_id(issue_id)
        result = await db.execute(
            delete(models.Issue)
            .where(models.Issue.project == self.name, models.Issue.id == normalized)
        )
        await db.commit()
        return normalized if result.rowcount else None


class ProjectRegistry:
    """Append-only map of project name to ProjectCollection.

    Reads are lock-free; appends are serialized by an asyncio lock.
    """

    def __init__(self):
        self._collections: dict[str, ProjectCollection] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, name: str) -> bool:
        return name in self._collections

    def __len__(self) -> int:
        return len(self._collections)

    async def _register(self, name: str) -> ProjectCollection:
        async with self._lock:
            collection = self._collections.get(name)
            if collection is None:
                collection = ProjectCollection(name)
                self._collections[name] = collection
            return collection

    async def lookup(self, db: AsyncSession, name: str) -> Optional[ProjectCollection]:
        """Find the collection for ``name`` without creating it."""
        collection = self._collections.get(name)
        if collection is not None:
            return collection

        project = await db.get(models.Project, name)
        if project is None:
            return None
        return await self._register(name)

    async def ensure(self, db: AsyncSession, name: str) -> ProjectCollection:
        """Find the collection for ``name``, creating the project on a miss."""
        collection = await self.lookup(db, name)
        if collection is not None:
            return collection

        db.add(models.Project(name=name, created_on=datetime.now(timezone.utc)))
        try:
            await db.commit()
            logger.info("Project created", extra={"project": name})
        except IntegrityError:
            # Another request created it first
            await db.rollback()
        return await self._register(name)


registry = ProjectRegistry()


def get_registry() -> ProjectRegistry:
    return registry
