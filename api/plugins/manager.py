"""Plugin manager - runs the installed plugins and their update hooks."""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from api.plugins.api import PluginAPI
from api.plugins.discovery import discover_plugins
from api.plugins.hooks import HookRegistry
from api.plugins.lifecycle import start_plugin, stop_plugin
from api.plugins.registry import PluginInstance, PluginRegistry, PluginState
from api.plugins.settings import PluginSettings, missing_required
from api.services.transient_cache import TransientCache
from api.updater.checker import PLUGIN_INFORMATION_ACTION
from api.updater.models import PluginsApiArgs, UpdateTransient, UpgradeOptions

logger = logging.getLogger(__name__)


class PluginManager:
    """Owns the installed plugins and answers update requests through their hooks.

    Every request builds a fresh HookRegistry from the started plugins, so
    per-request state in a plugin (such as a forced check) never leaks into
    the next request. The transient cache is shared by all of them.
    """

    def __init__(
        self,
        bundled_dir: Path,
        installed_dir: Path,
        config_file: Path,
        cache: TransientCache,
        extra_paths: Optional[List[Path]] = None,
    ):
        self.cache = cache
        self.settings = PluginSettings(config_file)
        self.registry = PluginRegistry()
        self.search_paths = [(bundled_dir, "bundled"), (installed_dir, "installed")]
        # PLUGIN_PATHS entries
        self.search_paths += [(p, "external") for p in extra_paths or []]

    async def load_all(self) -> None:
        """Find every installed plugin and start the enabled ones."""
        for instance in discover_plugins(self.search_paths):
            self.registry.add(instance)

        for instance in self.registry:
            instance.enabled = self.settings.is_enabled(instance.id)
            if instance.enabled:
                await self._start(instance)

        logger.info(
            f"{len(self.registry.started())} of {len(self.registry)} plugin(s) started"
        )

    async def stop_all(self) -> None:
        for instance in self.registry.started():
            await stop_plugin(instance)

    async def enable_plugin(self, plugin_id: str) -> Optional[PluginInstance]:
        """Enable ``plugin_id`` and start it if it is not running. None if unknown."""
        instance = self.registry.get(plugin_id)
        if instance is None:
            return None

        self.settings.set_enabled(plugin_id, True)
        instance.enabled = True
        if instance.state != PluginState.STARTED:
            await self._start(instance)
        return instance

    async def disable_plugin(self, plugin_id: str) -> Optional[PluginInstance]:
        """Disable and stop ``plugin_id``. None if unknown."""
        instance = self.registry.get(plugin_id)
        if instance is None:
            return None

        self.settings.set_enabled(plugin_id, False)
        instance.enabled = False
        await stop_plugin(instance)
        return instance

    def update_plugin_settings(self, plugin_id: str, settings: Dict[str, Any]) -> bool:
        """Replace the stored settings; a running plugin picks them up when restarted."""
        if plugin_id not in self.registry:
            return False
        self.settings.replace(plugin_id, settings)
        return True

    def missing_settings(self, instance: PluginInstance) -> List[str]:
        """Required settings the plugin's config schema names but the store lacks."""
        return missing_required(self.settings.settings_for(instance.id), instance.manifest.config_schema)

    def get_plugin_info(self, plugin_id: str) -> Optional[dict]:
        instance = self.registry.get(plugin_id)
        if instance is None:
            return None
        info = instance.describe()
        info["config"] = self.settings.settings_for(plugin_id)
        info["missing_settings"] = self.missing_settings(instance)
        return info

    def list_plugins(self) -> List[dict]:
        return [instance.describe() for instance in self.registry]

    def build_hooks(self) -> HookRegistry:
        """Hook registry for one request, filled by every started plugin."""
        hooks = HookRegistry()
        for instance in self.registry.started():
            try:
                instance.plugin.setup_hooks(hooks)
            except Exception as e:
                logger.error(f"Plugin '{instance.id}' failed to set up hooks: {e}", exc_info=True)
        return hooks

    async def plugin_information(self, slug: str, force_check: bool = False) -> Any:
        """Run the ``plugins_api`` filter for ``slug``. None if no plugin answered."""
        return await self.build_hooks().apply_filters(
            "plugins_api",
            None,
            PLUGIN_INFORMATION_ACTION,
            PluginsApiArgs(slug=slug),
            force_check=force_check,
        )

    async def check_updates(self, force_check: bool = False) -> UpdateTransient:
        """Run ``site_transient_update_plugins`` over a fresh transient of the started plugins."""
        transient = UpdateTransient(
            last_checked=time.time(),
            checked={p.basename: p.installed_version for p in self.registry.started()},
            response={},
            no_update={},
        )
        return await self.build_hooks().apply_filters(
            "site_transient_update_plugins", transient, force_check=force_check
        )

    async def upgrade_complete(self, options: UpgradeOptions) -> None:
        await self.build_hooks().do_action("upgrader_process_complete", None, options)

    async def _start(self, instance: PluginInstance) -> bool:
        api = PluginAPI(
            plugin_id=instance.id,
            plugin_basename=instance.basename,
            plugin_version=instance.installed_version,
            config=self.settings.settings_for(instance.id),
            cache=self.cache,
        )
        return await start_plugin(instance, api)
