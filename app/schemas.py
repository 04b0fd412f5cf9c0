from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

STRING_FIELDS = ("issue_title", "issue_text", "created_by", "assigned_to", "status_text")


def bool_to_str(value):
    """Render JSON booleans the way a string field stores them."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class IssueCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    issue_title: Optional[str] = None
    issue_text: Optional[str] = None
    created_by: Optional[str] = None
    assigned_to: Optional[str] = None
    status_text: Optional[str] = None

    @field_validator(*STRING_FIELDS, mode="before")
    @classmethod
    def coerce_bools(cls, value):
        return bool_to_str(value)

    def has_required_fields(self) -> bool:
        return bool(self.issue_title and self.issue_text and self.created_by)


class IssueUpdate(BaseModel):
    """Fields an update may write. Anything else in the body is ignored."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    issue_title: Optional[str] = None
    issue_text: Optional[str] = None
    created_by: Optional[str] = None
    assigned_to: Optional[str] = None
    status_text: Optional[str] = None
    open: Optional[bool] = None

    @field_validator(*STRING_FIELDS, mode="before")
    @classmethod
    def coerce_bools(cls, value):
        return bool_to_str(value)


class IssueResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(serialization_alias="_id")
    issue_title: str
    issue_text: str
    created_on: datetime
    updated_on: datetime
    created_by: str
    assigned_to: str
    open: bool
    status_text: str

    @field_validator("created_on", "updated_on")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands timestamps back without their offset; they are stored in UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class MutationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result: str
    id: str = Field(alias="_id")
