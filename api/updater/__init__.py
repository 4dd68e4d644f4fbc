"""Self-hosted update checking for host plugins."""

from api.updater.checker import PLUGIN_INFORMATION_ACTION, UpdateChecker
from api.updater.client import MetadataClient
from api.updater.errors import (
    HttpStatusError,
    InvalidMetadataError,
    TransportError,
    UpdateCheckError,
)
from api.updater.models import (
    PluginInformation,
    PluginUpdateData,
    PluginsApiArgs,
    RemoteMetadata,
    UpdateTransient,
    UpgradeOptions,
)
from api.updater.version import is_version_newer

__all__ = [
    "PLUGIN_INFORMATION_ACTION",
    "UpdateChecker",
    "MetadataClient",
    "UpdateCheckError",
    "TransportError",
    "HttpStatusError",
    "InvalidMetadataError",
    "PluginInformation",
    "PluginUpdateData",
    "PluginsApiArgs",
    "RemoteMetadata",
    "UpdateTransient",
    "UpgradeOptions",
    "is_version_newer",
]
