"""Background tasks run after the response has been sent.

These are FastAPI BackgroundTasks: quick, fire-and-forget operations such as
notifications that must not hold up the request.
"""

from app.tasks.notifications import notify_issue_creation

__all__ = ["notify_issue_creation"]
