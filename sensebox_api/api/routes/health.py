"""
Health check endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sensebox_api.database.connection import get_engine
import structlog

logger = structlog.get_logger(__name__)
router = APIRouter()

@router.get("/health")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": "senseBox API",
        "version": "1.0.0"
    }

@router.get("/health/detailed")
async def detailed_health_check(engine: Engine = Depends(get_engine)):
    """Detailed health check with database connectivity"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        db_status = "disconnected"

    return {
        "status": "healthy" if db_status == "connected" else "unhealthy",
        "database": db_status,
        "service": "senseBox API",
        "version": "1.0.0"
    }
