"""
Health check endpoints
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from folio import __version__
from folio.core.config import get_settings
from folio.core.database import get_db
from folio.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint

    Returns:
        dict: Health status
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": get_settings().app_name,
    }


@router.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Detailed health check with component status

    Returns:
        dict: Database and outbound integration configuration status
    """
    settings = get_settings()
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.app_name,
        "version": __version__,
        "environment": settings.app_env,
        "components": {},
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["components"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful",
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["components"]["database"] = {
            "status": "unhealthy",
            "message": f"Database connection failed: {str(e)}",
            "error": type(e).__name__,
        }

    # Integrations only report whether they are configured
    health_status["components"]["integrations"] = {
        "ai_gateway": bool(settings.lovable_api_key),
        "openai": bool(settings.openai_api_key),
        "gemini": bool(settings.gemini_api_key),
        "resend": bool(settings.resend_api_key),
        "unsplash": bool(settings.unsplash_access_key),
        "firecrawl": bool(settings.firecrawl_api_key),
    }
    return health_status
