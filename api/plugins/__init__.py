"""Plugin system for the update service.

Imports are lazy so lightweight pieces like PluginSettings or
discover_plugins can be used without importing the update checker.
"""

__all__ = [
    "PluginManifest",
    "PluginAPI",
    "PluginRegistry",
    "PluginInstance",
    "PluginState",
    "discover_plugins",
    "start_plugin",
    "stop_plugin",
    "PluginManager",
    "PluginSettings",
    "HookRegistry",
    "HostPlugin",
    "PluginMeta",
]

_LOCATIONS = {
    "PluginManifest": "api.plugins.manifest",
    "PluginAPI": "api.plugins.api",
    "PluginRegistry": "api.plugins.registry",
    "PluginInstance": "api.plugins.registry",
    "PluginState": "api.plugins.registry",
    "discover_plugins": "api.plugins.discovery",
    "start_plugin": "api.plugins.lifecycle",
    "stop_plugin": "api.plugins.lifecycle",
    "PluginManager": "api.plugins.manager",
    "PluginSettings": "api.plugins.settings",
    "HookRegistry": "api.plugins.hooks",
    "HostPlugin": "api.plugins.host",
    "PluginMeta": "api.plugins.host",
}


def __getattr__(name):
    if name not in _LOCATIONS:
        raise AttributeError(f"module 'api.plugins' has no attribute {name!r}")
    import importlib

    return getattr(importlib.import_module(_LOCATIONS[name]), name)
