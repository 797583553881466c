"""Revenue endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.services.revenue import get_ytd_revenue

router = APIRouter(prefix="/revenue", tags=["revenue"])


@router.get("/ytd")
async def get_ytd(db: Session = Depends(get_db)):
    now = datetime.now(timezone.utc)
    ytd_total = get_ytd_revenue(db, now=now)
    return {"year": now.year, "ytd_revenue": str(ytd_total)}
