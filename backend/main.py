"""
Development server entry point
"""
from folio.core.config import get_settings
from folio.main import app  # noqa: F401

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "folio.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.app_env == "development",
    )
