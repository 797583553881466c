"""Administrative purge endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.schemas.cleanup import PurgeRequest
from backend.app.services.cleanup import count_records, purge_all

router = APIRouter(prefix="/admin/cleanup", tags=["admin"])


@router.get("/")
async def record_counts(db: Session = Depends(get_db)):
    return count_records(db)


@router.post("/")
async def purge(payload: PurgeRequest, db: Session = Depends(get_db)):
    return {"status": "purged", "deleted": purge_all(db, payload.confirm)}
