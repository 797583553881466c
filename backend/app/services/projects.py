"""Project lookups and rate configuration checks."""

from sqlalchemy.orm import Session

from backend.app.core.exceptions import NotFoundError
from backend.app.models.project import Project
from backend.app.services.rates import rate_model_for_project


def get_project(db: Session, project_id: int) -> Project:
    project = db.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


def validate_rate_configuration(project: Project) -> None:
    rate_model_for_project(project)
