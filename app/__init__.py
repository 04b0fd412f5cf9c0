"""FastAPI Issue Tracker Application.

A minimal issue tracker API scoped by project name:
- Create, list/filter, update and delete issues under /api/issues/{project}
- Projects created on the first issue posted to them
- SQLAlchemy async store backing, one shared issue schema for every project
- Slack notifications on issue creation
"""
