"""Plugin settings - which plugins are enabled and where each one looks for updates."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class SettingsDocument(BaseModel):
    """Shape of ``plugins/config.json``.

    Example:
        {
            "enabled": ["wp-plugin-self-hosted-test"],
            "plugins": {
                "wp-plugin-self-hosted-test": {
                    "github_username": "thore-hph",
                    "github_repository": "wp-plugin-self-hosted-test"
                }
            }
        }
    """

    enabled: List[str] = Field(default_factory=list)
    plugins: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class PluginSettings:
    """Reads and writes the settings document.

    An unreadable document is logged and treated as empty; it is only
    overwritten by the next change.
    """

    def __init__(self, path: Path):
        self.path = path
        self.document = self._read()

    def _read(self) -> SettingsDocument:
        if not self.path.exists():
            return SettingsDocument()
        try:
            return SettingsDocument.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.error(f"Ignoring unreadable plugin settings {self.path}: {e}")
            return SettingsDocument()

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.document.model_dump_json(indent=2), encoding="utf-8")

    def enabled_ids(self) -> List[str]:
        return list(self.document.enabled)

    def is_enabled(self, plugin_id: str) -> bool:
        return plugin_id in self.document.enabled

    def set_enabled(self, plugin_id: str, enabled: bool) -> bool:
        """Add or remove ``plugin_id`` from the enabled list. Returns True if it changed."""
        if enabled == self.is_enabled(plugin_id):
            return False
        if enabled:
            self.document.enabled.append(plugin_id)
        else:
            self.document.enabled.remove(plugin_id)
        self._write()
        logger.info(f"Plugin '{plugin_id}' {'enabled' if enabled else 'disabled'}")
        return True

    def settings_for(self, plugin_id: str) -> Dict[str, Any]:
        """Copy of the plugin's settings, e.g. its GitHub username and repository."""
        return dict(self.document.plugins.get(plugin_id, {}))

    def replace(self, plugin_id: str, settings: Dict[str, Any]) -> None:
        self.document.plugins[plugin_id] = dict(settings)
        self._write()
        logger.info(f"Replaced settings of plugin '{plugin_id}'")


def missing_required(settings: Dict[str, Any], schema: Optional[Dict[str, Any]]) -> List[str]:
    """Keys the plugin's config schema requires that are absent or empty in ``settings``."""
    if not schema:
        return []
    return [key for key in schema.get("required", []) if not settings.get(key)]
