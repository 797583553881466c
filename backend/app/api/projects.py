"""Project routes."""

from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.models.project import Project
from backend.app.schemas.project import ConvertedAmount, ProjectCreate, ProjectRead, ProjectUpdate
from backend.app.schemas.task import TaskRead
from backend.app.services.exchange_rates import ExchangeRateProvider, get_exchange_rate_provider
from backend.app.services.projects import get_project, validate_rate_configuration
from backend.app.services.rates import convert_for_display
from backend.app.services.tasks import list_billable_tasks

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(project_in: ProjectCreate, db: Session = Depends(get_db)):
    project = Project(**project_in.model_dump())
    validate_rate_configuration(project)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@router.get("/", response_model=List[ProjectRead])
async def list_projects(status: str | None = None, db: Session = Depends(get_db)):
    query = db.query(Project)
    if status:
        query = query.filter(Project.status == status)
    return query.order_by(Project.created_at.desc(), Project.id.desc()).all()


@router.get("/{project_id}", response_model=ProjectRead)
async def read_project(project_id: int, db: Session = Depends(get_db)):
    return get_project(db, project_id)


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project(project_id: int, payload: ProjectUpdate, db: Session = Depends(get_db)):
    project = get_project(db, project_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(project, field, value)
    try:
        validate_rate_configuration(project)
    except Exception:
        db.rollback()
        raise
    db.commit()
    db.refresh(project)
    return project


@router.get("/{project_id}/billable-tasks", response_model=List[TaskRead])
async def billable_tasks(project_id: int, db: Session = Depends(get_db)):
    return list_billable_tasks(db, project_id)


@router.get("/{project_id}/convert", response_model=ConvertedAmount)
def convert_amount(
    project_id: int,
    amount: Decimal = Query(...),
    db: Session = Depends(get_db),
    provider: ExchangeRateProvider = Depends(get_exchange_rate_provider),
):
    project = get_project(db, project_id)
    rate = provider.get_rate()
    return ConvertedAmount(
        project_id=project.id,
        amount=amount,
        currency=rate.currency,
        exchange_rate=rate.rate,
        conversion_factor=project.conversion_factor,
        display_amount=convert_for_display(amount, rate.rate, project.conversion_factor),
        rate_source=rate.source,
    )
