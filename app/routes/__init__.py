"""HTTP routes of the issue API, mounted under /api/issues."""

from app.routes.issues import router as issues_router, get_project, read_payload

__all__ = ["issues_router", "get_project", "read_payload"]
