"""Business errors of the issue API.

All of them are reported to the client as HTTP 200 with a JSON error body.
"""

from typing import Any


class IssueTrackerError(Exception):
    """Base error carrying the JSON body sent back to the client."""

    message = "unexpected error"

    def __init__(self, _id: Any = None):
        super().__init__(self.message)
        self._id = _id

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self._id is not None:
            body["_id"] = self._id
        return body


class ProjectNotFound(IssueTrackerError):
    message = "could not find project"


class RequiredFieldsMissing(IssueTrackerError):
    message = "required field(s) missing"


class MissingIdentifier(IssueTrackerError):
    message = "missing _id"


class NoUpdateFields(IssueTrackerError):
    message = "no update field(s) sent"


class CouldNotUpdate(IssueTrackerError):
    """Target issue is absent or its id is malformed."""

    message = "could not update"


class CouldNotDelete(IssueTrackerError):
    """Target issue is absent or its id is malformed."""

    message = "could not delete"
