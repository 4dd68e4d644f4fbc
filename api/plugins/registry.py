"""Installed plugins as the host sees them."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from api.plugins.host import HostPlugin
from api.plugins.manifest import PluginManifest

logger = logging.getLogger(__name__)


class PluginState(str, Enum):
    DISCOVERED = "discovered"
    STARTED = "started"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass
class PluginInstance:
    """One installed plugin directory and its runtime state."""

    manifest: PluginManifest
    path: Path
    source: str  # "bundled" | "installed" | "external"
    state: PluginState = PluginState.DISCOVERED
    enabled: bool = False
    plugin: Optional[HostPlugin] = field(default=None, repr=False)
    error: Optional[str] = None

    @property
    def id(self) -> str:
        return self.manifest.id

    @property
    def slug(self) -> str:
        """Directory name; the slug plugin-information requests ask for."""
        return self.path.name

    @property
    def basename(self) -> str:
        """'<directory>/<entry module>.py', the key used in update transients."""
        return f"{self.slug}/{self.manifest.entry_module}.py"

    @property
    def installed_version(self) -> str:
        return self.manifest.version

    def mark_failed(self, error: Exception) -> None:
        self.state = PluginState.ERROR
        self.error = str(error)
        self.plugin = None

    def describe(self) -> dict:
        """Summary for the plugin API and CLI; includes the plugin's own metadata once started."""
        return {
            "id": self.id,
            "name": self.manifest.name,
            "version": self.installed_version,
            "author": self.manifest.author,
            "description": self.manifest.description,
            "slug": self.slug,
            "basename": self.basename,
            "source": self.source,
            "state": self.state.value,
            "enabled": self.enabled,
            "error": self.error,
            "config_schema": self.manifest.config_schema,
            "meta": asdict(self.plugin.get_meta()) if self.plugin is not None else None,
        }


class PluginRegistry:
    """Plugins by id, in discovery order. The first plugin seen with an id wins."""

    def __init__(self):
        self._by_id: Dict[str, PluginInstance] = {}

    def add(self, instance: PluginInstance) -> bool:
        existing = self._by_id.get(instance.id)
        if existing is not None:
            logger.warning(
                f"Ignoring plugin '{instance.id}' at {instance.path}, "
                f"already found at {existing.path}"
            )
            return False
        self._by_id[instance.id] = instance
        return True

    def get(self, plugin_id: str) -> Optional[PluginInstance]:
        return self._by_id.get(plugin_id)

    def by_slug(self, slug: str) -> Optional[PluginInstance]:
        return next((p for p in self._by_id.values() if p.slug == slug), None)

    def started(self) -> List[PluginInstance]:
        return [p for p in self._by_id.values() if p.state == PluginState.STARTED]

    def __contains__(self, plugin_id: str) -> bool:
        return plugin_id in self._by_id

    def __iter__(self) -> Iterator[PluginInstance]:
        return iter(list(self._by_id.values()))

    def __len__(self) -> int:
        return len(self._by_id)
