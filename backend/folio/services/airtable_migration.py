"""
One-shot import of projects (and their images) from an Airtable table
"""
import time
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.orm import Session

from folio.core.config import Settings, get_settings
from folio.core.errors import FunctionError, ValidationError
from folio.core.logging_config import LoggingConfig
from folio.models.project import Project, ProjectImage
from folio.services.media_storage import MediaStorage
from folio.services.ordering import next_order_index

logger = LoggingConfig.get_logger(__name__)

IMAGE_BUCKET = "project-images"

# Airtable column spellings accepted for each project field
FIELD_VARIANTS = {
    "title": ("title", "Title"),
    "description": ("description", "Description"),
    "demo_link": ("demoLink", "DemoLink", "demolink"),
    "problem_statement": ("problemStatement", "ProblemStatement", "problem", "Problem"),
    "why_built": ("whyBuilt", "WhyBuilt", "reason", "Reason", "whyItMatters", "WhyItMatters"),
    "images": ("image", "Image"),
}


def pick_field(fields: Dict[str, Any], name: str) -> Any:
    """First non-empty value among the accepted spellings"""
    for key in FIELD_VARIANTS[name]:
        value = fields.get(key)
        if value:
            return value
    return None


class AirtableMigration:
    def __init__(
        self,
        db: Session,
        storage: Optional[MediaStorage] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.storage = storage or MediaStorage(self.settings)
        self._transport = transport

    async def run(self, api_key: Optional[str], base_id: Optional[str], table_id: Optional[str]) -> Dict[str, Any]:
        """
        Import every record; per-record failures are collected, not raised.

        Returns:
            {success, projectsCreated, imagesUploaded, errors, projects}
        """
        if not api_key or not base_id or not table_id:
            raise ValidationError("Missing required parameters")

        result: Dict[str, Any] = {
            "success": True,
            "projectsCreated": 0,
            "imagesUploaded": 0,
            "errors": [],
            "projects": [],
        }

        async with httpx.AsyncClient(
            timeout=self.settings.http_timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.get(
                f"{self.settings.airtable_api_url}/{base_id}/{table_id}",
                headers={"Authorization": f"Bearer {api_key}"},
            )
            if response.status_code >= 400:
                raise FunctionError(f"Airtable API error: {response.reason_phrase}", 500)

            records: List[Dict[str, Any]] = response.json().get("records") or []
            logger.info(f"Found {len(records)} project(s) in Airtable")

            order_index = next_order_index(self.db, Project)
            for record in records:
                created = await self._import_record(client, record, order_index, result)
                if created:
                    order_index += 1

        logger.info(
            f"Airtable migration complete: {result['projectsCreated']} project(s), "
            f"{result['imagesUploaded']} image(s), {len(result['errors'])} error(s)"
        )
        return result

    async def _import_record(
        self,
        client: httpx.AsyncClient,
        record: Dict[str, Any],
        order_index: int,
        result: Dict[str, Any],
    ) -> bool:
        fields = record.get("fields") or {}
        title = pick_field(fields, "title") or ""
        description = pick_field(fields, "description") or ""
        if not title or not description:
            result["errors"].append(f"Skipped project {record.get('id')}: missing title or description")
            return False

        project = Project(
            title=title,
            description=description,
            demo_link=pick_field(fields, "demo_link") or "#",
            problem_statement=pick_field(fields, "problem_statement"),
            why_built=pick_field(fields, "why_built"),
            order_index=order_index,
            enabled=True,
        )
        try:
            self.db.add(project)
            self.db.commit()
            self.db.refresh(project)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating project {title}: {e}", exc_info=True)
            result["errors"].append(f"Failed to create project \"{title}\": {e}")
            return False
        result["projectsCreated"] += 1

        image_count = 0
        images = pick_field(fields, "images")
        if isinstance(images, list):
            for index, image in enumerate(images):
                if await self._import_image(client, project, index, image, result):
                    image_count += 1

        result["projects"].append({"title": title, "imageCount": image_count})
        return True

    async def _import_image(
        self,
        client: httpx.AsyncClient,
        project: Project,
        index: int,
        image: Dict[str, Any],
        result: Dict[str, Any],
    ) -> bool:
        title = project.title
        try:
            response = await client.get(image["url"])
            if response.status_code >= 400:
                result["errors"].append(f"Failed to download image for \"{title}\"")
                return False

            content_type = response.headers.get("content-type") or "image/jpeg"
            extension = content_type.split(";")[0].split("/")[-1] or "jpg"
            file_name = f"{project.id}-{index}-{int(time.time() * 1000)}.{extension}"
            path, url = self.storage.save(IMAGE_BUCKET, file_name, response.content)

            self.db.add(ProjectImage(
                project_id=project.id,
                image_url=url,
                image_path=path,
                order_index=index,
            ))
            self.db.commit()
        except (httpx.HTTPError, KeyError, TypeError, OSError, ValidationError) as e:
            self.db.rollback()
            logger.warning(f"Image processing error for {title}: {e}")
            result["errors"].append(f"Image processing error for \"{title}\": {e}")
            return False

        result["imagesUploaded"] += 1
        return True
