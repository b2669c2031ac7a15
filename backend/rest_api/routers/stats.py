"""
Stats router - /api/stats
Public dashboard counters.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from rest_api.routers.schemas import DashboardStats
from rest_api.services.domain import StatsService

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/dashboard", response_model=DashboardStats)
def dashboard_stats(db: Session = Depends(get_db)):
    return StatsService(db).dashboard_stats()
