"""
Configuration management using Pydantic Settings
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/folio/core/config.py
_current_file = Path(__file__).resolve()
_backend_dir = _current_file.parent.parent.parent
_project_root = _backend_dir.parent
ENV_FILE = _project_root / ".env"
# Fallback: backend/.env
if not ENV_FILE.exists():
    ENV_FILE = _backend_dir / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE, override=False)


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Folio CMS"
    app_env: str = Field(default="development", description="Application environment")
    log_level: str = Field(default="INFO", description="Logging level")
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="*",
        description="Allowed CORS origins (comma-separated)"
    )
    admin_api_key: Optional[str] = Field(
        default=None,
        description="Shared key required in X-Admin-Key for /api write routes (unset = open)"
    )

    # Logging
    log_sqlalchemy: bool = Field(default=False, description="Enable SQLAlchemy query logging")
    log_uvicorn_access: bool = Field(default=False, description="Enable Uvicorn access logging")
    log_module_levels: Optional[str] = Field(
        default=None,
        description='Module-specific log levels (JSON string, e.g., {"folio.api": "DEBUG"})'
    )
    log_format: str = Field(
        default="json",
        description="Log format: 'json' for structured logging, 'text' for plain text"
    )
    log_file_enabled: bool = Field(default=False, description="Enable file logging")
    log_file_path: str = Field(
        default="logs/folio.log",
        description="Path to log file (relative to project root)"
    )
    log_file_rotation: str = Field(
        default="midnight",
        description="Log file rotation: 'midnight' or weekday 'W0'..'W6'"
    )
    log_file_retention: int = Field(
        default=30,
        ge=1,
        description="Number of days to keep log files"
    )
    log_sensitive_data: bool = Field(
        default=False,
        description="Enable logging of sensitive data (passwords, tokens) - NOT RECOMMENDED"
    )

    # Database
    database_url_override: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full SQLAlchemy URL; takes precedence over POSTGRES_* parts"
    )
    postgres_host: Optional[str] = Field(default=None, description="PostgreSQL host")
    postgres_db: Optional[str] = Field(default=None, description="PostgreSQL database name")
    postgres_user: Optional[str] = Field(default=None, description="PostgreSQL user")
    postgres_password: Optional[str] = Field(default=None, description="PostgreSQL password")
    postgres_port: int = Field(default=5432, ge=1, le=65535, description="PostgreSQL port")
    database_pool_size: int = Field(default=10, ge=1, description="Database pool size")
    database_max_overflow: int = Field(default=10, ge=0, description="Database max overflow")

    # AI providers
    lovable_api_key: Optional[str] = Field(default=None, description="AI gateway API key")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API key")
    ai_gateway_url: str = Field(
        default="https://ai.gateway.lovable.dev/v1/chat/completions",
        description="OpenAI-compatible chat completions endpoint of the AI gateway"
    )
    openai_url: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="OpenAI chat completions endpoint"
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST base URL"
    )
    chat_default_model: str = Field(default="google/gemini-3-flash-preview", description="Default chat model")
    admin_default_model: str = Field(default="google/gemini-2.5-flash", description="Default admin tools model")
    openai_default_model: str = Field(default="gpt-4o-mini", description="Default OpenAI model")
    gemini_default_model: str = Field(default="gemini-1.5-flash", description="Default Gemini model")
    agent_max_tool_iterations: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum model calls per agent run when the model keeps requesting tools"
    )
    http_timeout_seconds: float = Field(default=60.0, ge=1.0, le=600.0, description="Outbound HTTP timeout")

    # Third-party services
    resend_api_key: Optional[str] = Field(default=None, description="Resend API key")
    resend_api_url: str = Field(default="https://api.resend.com/emails", description="Resend send endpoint")
    newsletter_from: str = Field(
        default="Newsletter <newsletter@example.com>",
        description="From address for newsletter emails"
    )
    newsletter_batch_size: int = Field(default=50, ge=1, le=500, description="Emails sent concurrently per batch")
    unsplash_access_key: Optional[str] = Field(default=None, description="Unsplash access key")
    unsplash_api_url: str = Field(default="https://api.unsplash.com", description="Unsplash API base URL")
    firecrawl_api_key: Optional[str] = Field(default=None, description="Firecrawl API key")
    firecrawl_api_url: str = Field(default="https://api.firecrawl.dev/v1", description="Firecrawl API base URL")
    airtable_api_url: str = Field(default="https://api.airtable.com/v0", description="Airtable API base URL")

    # Site
    site_url: str = Field(default="https://www.example.com", description="Public site URL")
    site_name: str = Field(default="Folio", description="Site name used in Open Graph tags")
    owner_name: str = Field(default="the site owner", description="Person the chat assistant represents")
    default_og_title: str = Field(default="Folio - Portfolio & Blog", description="Fallback page title")
    default_og_description: str = Field(
        default="Projects, writing and experiments.",
        description="Fallback page description"
    )
    default_og_image: str = Field(default="/og-image.png", description="Fallback Open Graph image")

    # Media storage
    media_root: str = Field(default="media", description="Directory for uploaded media (relative to project root)")
    media_base_url: str = Field(default="/media", description="Public URL prefix for media files")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Only json and text formats are supported"""
        if v.lower() not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v.lower()

    @property
    def database_url(self) -> str:
        """Construct database URL"""
        if self.database_url_override:
            return self.database_url_override
        if self.postgres_host and self.postgres_db and self.postgres_user:
            return (
                f"postgresql://{self.postgres_user}:{self.postgres_password or ''}"
                f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
            )
        return f"sqlite:///{_project_root / 'folio.db'}"

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def media_path(self) -> Path:
        """Absolute media directory"""
        path = Path(self.media_root)
        if not path.is_absolute():
            path = _project_root / path
        return path

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
