"""Finding installed plugins on disk."""

import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple

from pydantic import ValidationError

from api.plugins.manifest import PluginManifest
from api.plugins.registry import PluginInstance

logger = logging.getLogger(__name__)

MANIFEST_FILE = "plugin.json"


def read_plugin_dir(plugin_dir: Path, source: str) -> Optional[PluginInstance]:
    """Build a PluginInstance from ``plugin_dir``, or None if it is not a usable plugin."""
    manifest_file = plugin_dir / MANIFEST_FILE
    if not manifest_file.is_file():
        return None

    try:
        manifest = PluginManifest.model_validate_json(manifest_file.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.error(f"Skipping {plugin_dir}: bad {MANIFEST_FILE}: {e}")
        return None

    if not (plugin_dir / f"{manifest.entry_module}.py").is_file():
        logger.error(f"Skipping {plugin_dir}: entry module '{manifest.entry_module}.py' not found")
        return None

    return PluginInstance(manifest=manifest, path=plugin_dir, source=source)


def discover_plugins(search_paths: Iterable[Tuple[Path, str]]) -> Iterator[PluginInstance]:
    """Yield plugins from each ``(directory, source label)`` in order.

    Every subdirectory holding a valid ``plugin.json`` is one plugin; missing
    search directories are skipped.
    """
    for root, source in search_paths:
        if not root.is_dir():
            logger.debug(f"No plugin directory at {root}")
            continue
        for plugin_dir in sorted(p for p in root.iterdir() if p.is_dir()):
            instance = read_plugin_dir(plugin_dir, source)
            if instance is not None:
                logger.debug(f"Found plugin {instance.id} ({instance.basename}) in {source}")
                yield instance
