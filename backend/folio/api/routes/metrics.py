"""
Prometheus metrics endpoint
"""
from fastapi import APIRouter
from fastapi.responses import Response

from folio.core.logging_config import LoggingConfig
from folio.core.metrics import get_metrics_response

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
async def metrics():
    """
    Prometheus metrics endpoint

    Returns metrics in Prometheus text format
    """
    try:
        content, content_type = get_metrics_response()
        return Response(content=content, media_type=content_type)
    except Exception as e:
        logger.error(f"Error generating metrics: {e}", exc_info=True)
        return Response(
            content="# Error generating metrics\n",
            media_type="text/plain",
            status_code=500
        )
