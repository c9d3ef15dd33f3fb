"""
Signal ingest: pages and notes captured by the browser extension
"""
import hmac
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from folio.core.errors import (FunctionError, UnauthorizedError,
                               ValidationError)
from folio.core.logging_config import LoggingConfig
from folio.models.agent_task import AgentTask, AgentTaskStatus
from folio.services.module_service import ModuleService

logger = LoggingConfig.get_logger(__name__)

FIELD_LIMITS = {
    "url": 2048,
    "title": 500,
    "content": 10000,
    "note": 1000,
    "source_type": 50,
}


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Token from `Authorization: Bearer <token>`"""
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Missing token")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise UnauthorizedError("Empty token")
    return token


def _clean(value: Any, limit: int) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()[:limit]


class SignalIngestService:
    def __init__(self, db: Session):
        self.db = db

    def authenticate(self, authorization: Optional[str]) -> None:
        """
        Check the bearer token against the api_tokens module.

        Raises:
            UnauthorizedError: missing, empty or wrong bearer token
        """
        token = extract_bearer_token(authorization)
        config = ModuleService(self.db).get_config("api_tokens")
        expected = config.get("signal_ingest_token")
        if not expected:
            logger.warning("Signal ingest called but no token is configured")
            raise UnauthorizedError("Unauthorized")
        if not hmac.compare_digest(str(expected), token):
            raise UnauthorizedError("Invalid token")

    def store(self, body: Dict[str, Any]) -> AgentTask:
        """
        Store one signal as a pending agent task; call after authenticate().

        Raises:
            ValidationError: neither url nor content given
        """
        signal = {field: _clean(body.get(field), limit) for field, limit in FIELD_LIMITS.items()}
        signal["source_type"] = signal["source_type"] or "web"
        if not signal["url"] and not signal["content"]:
            raise ValidationError("Either url or content is required")

        task = AgentTask(
            task_type="signal",
            status=AgentTaskStatus.PENDING.value,
            input_data=signal,
        )
        try:
            self.db.add(task)
            self.db.commit()
            self.db.refresh(task)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store signal: {e}", exc_info=True)
            raise FunctionError("Failed to save signal", 500) from e

        logger.info(
            "Signal ingested",
            extra={"task_id": str(task.id), "source_type": signal["source_type"]}
        )
        return task
