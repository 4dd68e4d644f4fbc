"""Process-wide services shared by the routers."""

import logging
import os
from pathlib import Path
from typing import List, Optional

from api.constants import BUNDLED_PLUGINS_DIR, INSTALLED_PLUGINS_DIR, PLUGIN_CONFIG_FILE
from api.plugins.manager import PluginManager
from api.services.transient_cache import TransientCache

logger = logging.getLogger(__name__)

# Created on first use; reset_services() drops them between tests
_transient_cache: Optional[TransientCache] = None
_plugin_manager: Optional[PluginManager] = None


def extra_plugin_paths() -> List[Path]:
    """Directories listed in PLUGIN_PATHS (colon-separated)."""
    return [Path(p.strip()) for p in os.getenv("PLUGIN_PATHS", "").split(":") if p.strip()]


def get_transient_cache() -> TransientCache:
    """Cache holding every plugin's fetched update metadata."""
    global _transient_cache
    if _transient_cache is None:
        _transient_cache = TransientCache()
    return _transient_cache


def get_plugin_manager() -> PluginManager:
    global _plugin_manager
    if _plugin_manager is None:
        _plugin_manager = PluginManager(
            bundled_dir=BUNDLED_PLUGINS_DIR,
            installed_dir=INSTALLED_PLUGINS_DIR,
            config_file=PLUGIN_CONFIG_FILE,
            cache=get_transient_cache(),
            extra_paths=extra_plugin_paths(),
        )
        logger.info(f"Plugin manager ready, search paths: {_plugin_manager.search_paths}")
    return _plugin_manager


def reset_services() -> None:
    """Forget the cache and plugin manager so the next call builds new ones."""
    global _transient_cache, _plugin_manager
    _transient_cache = None
    _plugin_manager = None
