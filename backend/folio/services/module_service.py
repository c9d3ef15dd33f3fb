"""
Feature module configuration access
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from folio.core.logging_config import LoggingConfig
from folio.models.module import Module

logger = LoggingConfig.get_logger(__name__)


class ModuleService:
    """Read and write per-module JSON configuration (ai, api_tokens, autopilot, ...)"""

    def __init__(self, db: Session):
        self.db = db

    def list_modules(self) -> List[Module]:
        return self.db.query(Module).order_by(Module.module_type).all()

    def get_module(self, module_type: str) -> Optional[Module]:
        return self.db.query(Module).filter(Module.module_type == module_type).first()

    def get_config(self, module_type: str) -> Dict[str, Any]:
        """Module config as a plain dict (empty when the module is missing)"""
        module = self.get_module(module_type)
        if module is None or not module.module_config:
            return {}
        return dict(module.module_config)

    def upsert(self, module_type: str, config: Dict[str, Any], enabled: Optional[bool] = None) -> Module:
        """Create the module or replace its config"""
        module = self.get_module(module_type)
        try:
            if module is None:
                module = Module(module_type=module_type, module_config=config, enabled=True if enabled is None else enabled)
                self.db.add(module)
            else:
                module.module_config = config
                if enabled is not None:
                    module.enabled = enabled
            self.db.commit()
            self.db.refresh(module)
            logger.info(f"Saved module config: {module_type}")
            return module
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error saving module {module_type}: {e}", exc_info=True)
            raise

    def merge_config(self, module_type: str, updates: Dict[str, Any]) -> Module:
        """Shallow-merge keys into the existing config"""
        config = self.get_config(module_type)
        config.update(updates)
        return self.upsert(module_type, config)
