"""PluginAPI - the API object passed to each plugin's register() function."""

import logging
from typing import Any, Dict, Optional

from api.services.transient_cache import TransientCache


class PluginAPI:
    """API object provided to plugins during registration.

    Gives a plugin its identity as the host sees it, its configuration and
    access to shared host services.
    """

    def __init__(
        self,
        plugin_id: str,
        plugin_basename: str,
        plugin_version: str,
        config: Dict[str, Any],
        cache: TransientCache,
    ):
        self.plugin_id = plugin_id
        self.plugin_basename = plugin_basename
        self.plugin_version = plugin_version
        self.config = config
        self.cache = cache
        self._logger = logging.getLogger(f"plugin.{plugin_id}")

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        """Get a logger for this plugin.

        Args:
            name: Optional sub-logger name (appended to plugin.{plugin_id})

        Returns:
            Logger instance
        """
        if name:
            return logging.getLogger(f"plugin.{self.plugin_id}.{name}")
        return self._logger
