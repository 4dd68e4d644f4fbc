"""Host plugin abstract base class and related types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from api.plugins.hooks import HookRegistry


@dataclass
class PluginMeta:
    """Plugin metadata."""

    id: str
    name: str
    version: str
    basename: str  # e.g. "my-plugin/plugin.py"
    description: str = ""


class HostPlugin(ABC):
    """Abstract base class for plugins running inside the host.

    The host builds a fresh HookRegistry for every request and calls
    setup_hooks() on each started plugin, so anything a plugin creates there
    lives for one request only.
    """

    @abstractmethod
    def get_meta(self) -> PluginMeta:
        """Return plugin metadata."""
        ...

    @abstractmethod
    def setup_hooks(self, hooks: HookRegistry) -> None:
        """Subscribe this plugin's callbacks for the current request."""
        ...

    async def on_start(self) -> None:
        """Called when the plugin is started. Override for initialization."""
        pass

    async def on_stop(self) -> None:
        """Called when the plugin is stopped. Override for cleanup."""
        pass
