"""Starting and stopping plugins."""
from __future__ import annotations

import importlib.util
import logging
from types import ModuleType
from typing import Callable, TYPE_CHECKING

from api.plugins.host import HostPlugin
from api.plugins.registry import PluginInstance, PluginState

if TYPE_CHECKING:
    from api.plugins.api import PluginAPI

logger = logging.getLogger(__name__)


class PluginLoadError(Exception):
    """The plugin's entry point could not be imported or did not return a HostPlugin."""


def _import_module(instance: PluginInstance) -> ModuleType:
    module_file = instance.path / f"{instance.manifest.entry_module}.py"
    module_name = f"update_host_plugin_{instance.slug.replace('-', '_')}"
    spec = importlib.util.spec_from_file_location(module_name, module_file)
    if spec is None or spec.loader is None:
        raise PluginLoadError(f"Cannot import {module_file}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def resolve_entry_point(instance: PluginInstance) -> Callable[[PluginAPI], HostPlugin]:
    """Import the entry module and return its ``module:function`` callable."""
    _, _, func_name = instance.manifest.entry_point.partition(":")
    module = _import_module(instance)
    entry = getattr(module, func_name, None)
    if not callable(entry):
        raise PluginLoadError(f"{instance.manifest.entry_point} is not a callable in {instance.path}")
    return entry


async def start_plugin(instance: PluginInstance, api: PluginAPI) -> bool:
    """Import, construct and start a plugin. Failures leave it in ERROR.

    Returns:
        True if the plugin is running
    """
    try:
        plugin = resolve_entry_point(instance)(api)
        if not isinstance(plugin, HostPlugin):
            raise PluginLoadError(
                f"entry point returned {type(plugin).__name__}, expected a HostPlugin"
            )
        await plugin.on_start()
    except Exception as e:
        instance.mark_failed(e)
        logger.error(f"Plugin '{instance.id}' failed to start: {e}")
        return False

    instance.plugin = plugin
    instance.state = PluginState.STARTED
    instance.error = None
    logger.info(f"Started plugin {instance.id} {instance.installed_version} as {instance.basename}")
    return True


async def stop_plugin(instance: PluginInstance) -> None:
    """Stop a running plugin. A failing ``on_stop`` is logged; the plugin is stopped regardless."""
    if instance.state != PluginState.STARTED:
        return
    try:
        await instance.plugin.on_stop()
    except Exception as e:
        logger.error(f"Plugin '{instance.id}' failed to stop cleanly: {e}")
    instance.plugin = None
    instance.state = PluginState.STOPPED
    logger.info(f"Stopped plugin {instance.id}")
