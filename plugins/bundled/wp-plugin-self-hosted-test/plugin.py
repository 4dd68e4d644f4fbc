"""WP Plugin Self Hosted Test - updates itself from its GitHub repository."""

import logging

from api.plugins.api import PluginAPI
from api.plugins.hooks import HookRegistry
from api.plugins.host import HostPlugin, PluginMeta
from api.updater.checker import UpdateChecker

logger = logging.getLogger(__name__)


class SelfHostedTestPlugin(HostPlugin):
    """Test plugin whose updates are published in its own repository."""

    def __init__(self, api: PluginAPI):
        self.api = api
        self.logger = api.get_logger()
        self.github_username = api.config.get("github_username", "")
        self.github_repository = api.config.get("github_repository", "")

    def get_meta(self) -> PluginMeta:
        return PluginMeta(
            id=self.api.plugin_id,
            name="WP Plugin Self Hosted Test",
            version=self.api.plugin_version,
            basename=self.api.plugin_basename,
            description="Test plugin for self hosted plugin updates",
        )

    def setup_hooks(self, hooks: HookRegistry) -> None:
        """Attach a fresh update checker for this request."""
        updater = UpdateChecker(
            self.github_username,
            self.github_repository,
            self.api.plugin_basename,
            self.api.plugin_version,
            cache=self.api.cache,
        )
        updater.set_hooks(hooks)

    async def on_start(self) -> None:
        if not self.github_username or not self.github_repository:
            self.logger.warning(
                "github_username / github_repository not configured, update checks will fail"
            )
        self.logger.info(
            f"Checking {self.github_username}/{self.github_repository} "
            f"for updates of {self.api.plugin_basename} {self.api.plugin_version}"
        )


def register(api: PluginAPI) -> SelfHostedTestPlugin:
    """Entry point named in plugin.json; called once when the plugin starts."""
    plugin = SelfHostedTestPlugin(api)
    logger.info(f"Self hosted test plugin registered with config: {api.config}")
    return plugin
