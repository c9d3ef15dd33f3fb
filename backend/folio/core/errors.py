"""
Domain exceptions carrying an HTTP status
"""
from typing import Any, Dict, Optional


class FolioError(Exception):
    """Base exception for folio errors"""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message}


class NotFoundError(FolioError):
    status_code = 404


class ValidationError(FolioError):
    status_code = 400


class UnauthorizedError(FolioError):
    status_code = 401


class FunctionError(FolioError):
    """Edge function failure with an arbitrary status"""

    def __init__(self, message: str, status_code: int = 500, include_success: bool = False):
        super().__init__(message, status_code)
        self.include_success = include_success

    def to_body(self) -> Dict[str, Any]:
        if self.include_success:
            return {"success": False, "error": self.message}
        return {"error": self.message}


class AIGatewayError(FolioError):
    """Upstream AI provider failure (401/402/429/500)"""

    def __init__(self, message: str, status_code: int = 500, provider: Optional[str] = None):
        super().__init__(message, status_code)
        self.provider = provider
