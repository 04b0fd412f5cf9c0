"""
Pytest fixtures for the Issue Tracker API tests.

The app runs against a throwaway SQLite database, wired in through
DATABASE_URL before the application modules are imported.
"""

import os
import tempfile
import uuid

_TEST_DB_DIR = tempfile.mkdtemp(prefix="issue_tracker_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'issues.db')}"
os.environ.pop("SLACK_WEBHOOK_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402


@pytest.fixture(scope="session")
def client():
    """One client for the whole run; the lifespan creates the tables."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def project_url():
    """URL of a project name no other test uses."""
    return f"/api/issues/pytest_{uuid.uuid4().hex[:12]}"


@pytest.fixture
def create_issue(client):
    """Post an issue and return the created record."""

    def _create(url, **overrides):
        payload = {
            "issue_title": "Test Title",
            "issue_text": "Test Text",
            "created_by": "Creator",
        }
        payload.update(overrides)
        response = client.post(url, json=payload)
        assert response.status_code == 200
        return response.json()

    return _create
