"""Non-blocking background tasks for outbound notifications."""

import logging
import os

import httpx

from app.database import models

logger = logging.getLogger(__name__)


def build_issue_message(project: str, issue: models.Issue) -> dict:
    """Slack block payload announcing a new issue."""
    fields = [
        {"type": "mrkdwn", "text": f"*Project:*\n{project}"},
        {"type": "mrkdwn", "text": f"*Title:*\n{issue.issue_title}"},
        {"type": "mrkdwn", "text": f"*Created by:*\n{issue.created_by}"},
    ]
    if issue.assigned_to:
        fields.append({"type": "mrkdwn", "text": f"*Assigned to:*\n{issue.assigned_to}"})

    return {
        "blocks": [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": "🆕 New Issue Created",
                },
            },
            {"type": "section", "fields": fields},
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f"*Text:*\n{issue.issue_text}",
                },
            },
        ]
    }


def notify_issue_creation(project: str, issue: models.Issue) -> None:
    """Send a Slack notification when a new issue is created.

    Runs as a FastAPI BackgroundTask after the response is sent, so failures
    here are logged and never reach the client.
    """
    slack_webhook_url = os.environ.get("SLACK_WEBHOOK_URL")
    if not slack_webhook_url:
        logger.warning("SLACK_WEBHOOK_URL not set, skipping notification")
        return

    try:
        with httpx.Client(timeout=5.0) as client:
            response = client.post(slack_webhook_url, json=build_issue_message(project, issue))
            response.raise_for_status()

        logger.info(
            "Slack notification sent successfully",
            extra={"issue_id": issue.id, "project": project},
        )

    except httpx.HTTPError:
        logger.exception(
            "Failed to send Slack notification",
            extra={"issue_id": issue.id, "project": project},
        )
