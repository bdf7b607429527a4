"""
Health and service banner endpoints
"""
from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from veggie_shop import __version__
from veggie_shop.config import settings
from veggie_shop.database import get_db
from veggie_shop.models import Vegetable

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(response: Response, db: Session = Depends(get_db)):
    """
    Report database connectivity and how much of the catalog can be ordered

    Answers 503 while the database is unreachable.
    """
    report = {
        "service": settings.SERVICE_NAME,
        "events": "enabled" if settings.EVENTS_ENABLED else "disabled",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    try:
        db.execute(text("SELECT 1"))
        report["vegetables_in_stock"] = db.query(func.count(Vegetable.id)).filter(Vegetable.in_stock.is_(True)).scalar()
        report["database"] = "healthy"
    except SQLAlchemyError as e:
        logger.error("Health check failed", error=str(e))
        report["database"] = f"unhealthy: {e}"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    report["status"] = "healthy" if report["database"] == "healthy" else "unhealthy"
    return report


@router.get("/")
def root():
    return {
        "service": settings.SERVICE_NAME,
        "version": __version__,
        "docs": "/docs"
    }
