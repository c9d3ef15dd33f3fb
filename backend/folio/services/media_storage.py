"""
Local media storage for uploaded images
"""
from pathlib import Path
from typing import Optional, Tuple

from folio.core.config import Settings, get_settings
from folio.core.errors import ValidationError
from folio.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)


class MediaStorage:
    """Files live under <media_root>/<bucket>/ and are served from <media_base_url>/<bucket>/"""

    def __init__(self, settings: Optional[Settings] = None, root: Optional[Path] = None):
        self.settings = settings or get_settings()
        self.root = Path(root) if root else self.settings.media_path

    def save(self, bucket: str, file_name: str, data: bytes) -> Tuple[str, str]:
        """
        Write a new file; existing files are never overwritten.

        Returns:
            (storage path relative to the bucket, public URL)
        """
        if "/" in file_name or "\\" in file_name or file_name.startswith("."):
            raise ValidationError(f"Invalid file name: {file_name}")
        directory = self.root / bucket
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / file_name
        if target.exists():
            raise ValidationError(f"File already exists: {bucket}/{file_name}")
        target.write_bytes(data)
        logger.debug(f"Stored media file {bucket}/{file_name} ({len(data)} bytes)")
        return file_name, self.public_url(bucket, file_name)

    def public_url(self, bucket: str, file_name: str) -> str:
        return f"{self.settings.media_base_url.rstrip('/')}/{bucket}/{file_name}"
