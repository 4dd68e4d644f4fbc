"""Update checker for plugins hosted in a GitHub repository.

The checker answers the host's plugin-update hooks from a ``data.json`` file
published in the plugin's repository. Fetched metadata is kept in the shared
transient cache so most requests never reach GitHub.
"""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from api.constants import CACHE_TIME, REPOSITORY_BASE_URL
from api.plugins.hooks import HookRegistry
from api.services.transient_cache import TransientCache
from api.updater.client import MetadataClient
from api.updater.errors import HttpStatusError, InvalidMetadataError, UpdateCheckError
from api.updater.models import (
    PluginInformation,
    PluginUpdateData,
    PluginsApiArgs,
    RemoteMetadata,
    UpdateTransient,
    UpgradeOptions,
)
from api.updater.version import is_version_newer

logger = logging.getLogger(__name__)

PLUGIN_INFORMATION_ACTION = "plugin_information"


class UpdateChecker:
    """Checks a self-hosted repository for newer versions of one plugin.

    One instance is built per host request. The cache key, directory name and
    repository URL are derived once from the constructor arguments.
    """

    def __init__(
        self,
        github_username: str,
        github_repository: str,
        plugin_basename: str,
        plugin_current_version: str,
        cache: TransientCache,
        client: Optional[MetadataClient] = None,
        cache_time: int = CACHE_TIME,
        repository_base_url: str = REPOSITORY_BASE_URL,
    ):
        """Initialize the checker.

        Args:
            github_username: GitHub user or organization owning the repository
            github_repository: Repository containing ``wp-dist/data.json``
            plugin_basename: Plugin identifier, e.g. 'plugin-slug/plugin.py'
            plugin_current_version: Installed version, e.g. '1.0.0'
            cache: Shared transient cache
            client: HTTP client for the metadata file
            cache_time: Seconds fetched metadata stays cached
            repository_base_url: URL template with {{username}} and {{repository}}
        """
        self.github_username = github_username
        self.github_repository = github_repository
        self.plugin_basename = plugin_basename
        self.plugin_current_version = plugin_current_version
        self.cache = cache
        self.client = client or MetadataClient()
        self.cache_time = cache_time
        self.already_forced = False

        # 'plugin-slug/plugin.py' -> 'plugin-slug'; no directory part -> ''
        dirname, sep, _ = plugin_basename.partition("/")
        self.plugin_dirname = dirname if sep else ""
        self.repository_url = (
            repository_base_url
            .replace("{{username}}", github_username)
            .replace("{{repository}}", github_repository)
        )
        self.cache_key = f"{self.plugin_dirname}_update_data"

    def set_hooks(self, hooks: HookRegistry) -> None:
        """Subscribe the checker to the host's update hooks."""
        hooks.add_filter(
            "plugins_api", self.get_plugin_info, priority=20, accepted_args=3, owner=self.plugin_dirname
        )
        hooks.add_filter(
            "site_transient_update_plugins", self.check_for_update, owner=self.plugin_dirname
        )
        hooks.add_action(
            "upgrader_process_complete", self.purge, priority=10, accepted_args=2, owner=self.plugin_dirname
        )

    async def get_plugin_info(
        self,
        result: Any,
        action: Optional[str] = None,
        args: Optional[PluginsApiArgs] = None,
        *,
        force_check: bool = False,
    ) -> Any:
        """Answer a ``plugins_api`` request for this plugin.

        Requests for other actions or other plugins, and requests for which no
        valid metadata can be loaded, get ``result`` back untouched.
        """
        slug = args.slug if args is not None else None
        if action != PLUGIN_INFORMATION_ACTION or slug != self.plugin_dirname:
            return result

        metadata = await self._load_metadata(force_check)
        if metadata is None:
            return result

        return PluginInformation(
            name=metadata.name,
            slug=metadata.slug,
            version=metadata.version,
            tested=metadata.tested,
            requires=metadata.requires,
            requires_php=metadata.requires_php,
            author=metadata.author,
            author_profile=metadata.author_profile,
            download_link=metadata.download_url,
            trunk=metadata.download_url,
            last_updated=metadata.last_updated,
            sections=metadata.sections.model_dump(),
        )

    async def check_for_update(
        self, transient: UpdateTransient, *, force_check: bool = False
    ) -> UpdateTransient:
        """Record this plugin's update state in the host's update transient.

        Goes to ``response`` when the remote version is newer than the installed
        one, otherwise to ``no_update`` if the host tracks that collection.
        """
        if transient.response is None:
            return transient

        metadata = await self._load_metadata(force_check)
        if metadata is None:
            return transient

        update_data = self.prepare_plugin_update_data(metadata)
        if is_version_newer(self.plugin_current_version, metadata.version):
            transient.response[self.plugin_basename] = update_data
            logger.info(
                f"Update available for {self.plugin_basename}: "
                f"{self.plugin_current_version} -> {metadata.version}"
            )
        elif transient.no_update is not None:
            transient.no_update[self.plugin_basename] = update_data

        return transient

    def prepare_plugin_update_data(self, metadata: RemoteMetadata) -> PluginUpdateData:
        return PluginUpdateData(
            slug=self.plugin_dirname,
            plugin=self.plugin_basename,
            new_version=metadata.version,
            tested=metadata.tested,
            package=metadata.download_url,
        )

    def purge(self, upgrader: Any, options: UpgradeOptions) -> None:
        """Drop cached metadata once the host has updated this plugin."""
        if (
            options.action == "update"
            and options.type == "plugin"
            and options.plugins
            and self.plugin_basename in options.plugins
        ):
            self.cache.delete(self.cache_key)
            logger.info(f"Purged cached update data for {self.plugin_basename}")

    async def fetch_update_metadata(self, force_check: bool = False) -> Any:
        """Return update metadata from the cache or from the repository.

        ``force_check`` skips the cache, but only the first time this instance
        sees it. A 200 body that is not UTF-8 JSON gives None and is not cached.

        Raises:
            TransportError: the repository could not be reached
            HttpStatusError: the repository answered with a non-200 status
        """
        data = self.cache.get(self.cache_key)

        if force_check and not self.already_forced:
            data = None
            self.already_forced = True

        if data is not None:
            return data

        status, body = await self.client.get(self.repository_url)
        if status != 200:
            raise HttpStatusError(status, body.decode("utf-8", errors="replace"))

        try:
            data = json.loads(body.decode("utf-8"))
        except UnicodeDecodeError as e:
            logger.warning(f"Update metadata from {self.repository_url} is not valid UTF-8: {e}")
            return None
        except json.JSONDecodeError as e:
            logger.warning(f"Update metadata from {self.repository_url} is not valid JSON: {e}")
            return None

        if isinstance(data, dict):
            self.cache.set(self.cache_key, data, self.cache_time)
        return data

    def validate_metadata(self, metadata: Any) -> Optional[RemoteMetadata]:
        """Return usable metadata, or None after logging why it is not.

        ``metadata`` is whatever the fetch produced, including a fetch error.
        """
        try:
            return self._parse_metadata(metadata)
        except InvalidMetadataError as e:
            logger.error(f"Invalid update metadata: {e}")
        except UpdateCheckError as e:
            logger.error(f"Update metadata fetch error: {e}")
        return None

    @staticmethod
    def _parse_metadata(metadata: Any) -> RemoteMetadata:
        if isinstance(metadata, UpdateCheckError):
            raise metadata
        if not isinstance(metadata, dict):
            raise InvalidMetadataError(f"Expected mapping, got {type(metadata).__name__}")
        try:
            return RemoteMetadata.model_validate(metadata)
        except ValidationError as e:
            raise InvalidMetadataError(f"Unusable fields: {e}") from e

    async def _load_metadata(self, force_check: bool) -> Optional[RemoteMetadata]:
        try:
            metadata = await self.fetch_update_metadata(force_check)
        except UpdateCheckError as e:
            metadata = e
        return self.validate_metadata(metadata)
