from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from app.database.config import Base


class Project(Base):
    __tablename__ = "projects"

    name = Column(String, primary_key=True)
    created_on = Column(DateTime(timezone=True), nullable=False)


class Issue(Base):
    __tablename__ = "issues"

    # Insertion order, used as the natural order of a project's issues
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, unique=True, index=True, nullable=False)
    project = Column(String, ForeignKey("projects.name"), index=True, nullable=False)

    issue_title = Column(String, nullable=False)
    issue_text = Column(String, nullable=False)
    created_by = Column(String, nullable=False)
    assigned_to = Column(String, nullable=False, default="")
    status_text = Column(String, nullable=False, default="")
    open = Column(Boolean, nullable=False, default=True)

    created_on = Column(DateTime(timezone=True), nullable=False)
    updated_on = Column(DateTime(timezone=True), nullable=False)
