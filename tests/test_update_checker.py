"""Tests for the UpdateChecker."""

import asyncio

import pytest

from api.plugins.hooks import HookRegistry
from api.updater.checker import UpdateChecker
from api.updater.errors import HttpStatusError, TransportError
from api.updater.models import (
    PluginInformation,
    PluginsApiArgs,
    RemoteMetadata,
    UpdateTransient,
    UpgradeOptions,
)

BASENAME = "wp-plugin-self-hosted-test/plugin.py"
DIRNAME = "wp-plugin-self-hosted-test"
CACHE_KEY = "wp-plugin-self-hosted-test_update_data"
NOT_UTF8 = b'\xff\xfe{"version": "2"}'


def make_checker(cache, client, version="1.0.1", basename=BASENAME, cache_time=86400):
    return UpdateChecker(
        "thore-hph",
        "wp-plugin-self-hosted-test",
        basename,
        version,
        cache=cache,
        client=client,
        cache_time=cache_time,
    )


def fresh_transient(no_update=True):
    return UpdateTransient(response={}, no_update={} if no_update else None)


class TestConstruction:
    """Identity derived at construction."""

    def test_derived_identity(self, cache, make_client):
        """Dirname, cache key and repository URL come from basename and repository."""
        checker = make_checker(cache, make_client())

        assert checker.plugin_dirname == DIRNAME
        assert checker.cache_key == CACHE_KEY
        assert checker.already_forced is False
        assert checker.repository_url == (
            "https://api.github.com/repos/thore-hph/wp-plugin-self-hosted-test"
            "/contents/wp-dist/data.json"
        )

    def test_basename_without_separator_gives_empty_dirname(self, cache, make_client):
        """A bare file name has no directory part, so the key is '_update_data'."""
        checker = make_checker(cache, make_client(), basename="plugin.py")

        assert checker.plugin_dirname == ""
        assert checker.cache_key == "_update_data"

    def test_custom_url_template(self, cache, make_client):
        """Both placeholders are substituted in a custom template."""
        checker = UpdateChecker(
            "acme", "widgets", BASENAME, "1.0.0",
            cache=cache,
            client=make_client(),
            repository_base_url="https://git.example.com/{{username}}/{{repository}}/data.json",
        )

        assert checker.repository_url == "https://git.example.com/acme/widgets/data.json"

    def test_set_hooks_registers_update_hooks(self, cache, make_client):
        """The checker subscribes to both filters and the upgrade action."""
        hooks = HookRegistry()
        make_checker(cache, make_client()).set_hooks(hooks)

        assert hooks.has_filter("plugins_api")
        assert hooks.has_filter("site_transient_update_plugins")
        assert hooks.has_action("upgrader_process_complete")


class TestFetchUpdateMetadata:
    """Cache-or-network metadata lookup."""

    def test_cache_miss_fetches_and_caches(self, cache, make_client, sample_metadata):
        """An empty cache triggers one request whose result is stored."""
        client = make_client(sample_metadata)
        checker = make_checker(cache, client)

        data = asyncio.run(checker.fetch_update_metadata())

        assert data == sample_metadata
        assert client.calls == [checker.repository_url]
        assert cache.get(CACHE_KEY) == sample_metadata

    def test_cache_hit_skips_network(self, cache, make_client, sample_metadata):
        """A second lookup is answered from the cache."""
        client = make_client(sample_metadata)
        checker = make_checker(cache, client)

        first = asyncio.run(checker.fetch_update_metadata())
        second = asyncio.run(checker.fetch_update_metadata())

        assert first == second
        assert len(client.calls) == 1

    def test_cached_value_is_shared_between_instances(self, cache, make_client, sample_metadata):
        """Checkers of later requests read what earlier ones cached."""
        cache.set(CACHE_KEY, sample_metadata, 86400)
        client = make_client({"version": "9.9.9"})

        data = asyncio.run(make_checker(cache, client).fetch_update_metadata())

        assert data == sample_metadata
        assert client.calls == []

    def test_expired_cache_fetches_again(self, cache, clock, make_client, sample_metadata):
        """Once cache_time has passed the repository is asked again."""
        client = make_client(sample_metadata)
        checker = make_checker(cache, client, cache_time=60)

        asyncio.run(checker.fetch_update_metadata())
        clock.advance(61)
        asyncio.run(checker.fetch_update_metadata())

        assert len(client.calls) == 2

    def test_force_check_bypasses_cache_once(self, cache, make_client, sample_metadata):
        """force_check skips the cache on the first call only."""
        cache.set(CACHE_KEY, {"version": "1.0.0"}, 86400)
        client = make_client(sample_metadata)
        checker = make_checker(cache, client)

        forced = asyncio.run(checker.fetch_update_metadata(force_check=True))
        again = asyncio.run(checker.fetch_update_metadata(force_check=True))

        assert forced == sample_metadata
        assert again == sample_metadata
        assert len(client.calls) == 1
        assert checker.already_forced is True

    def test_force_check_is_per_instance(self, cache, make_client, sample_metadata):
        """Each new checker may force one refetch of its own."""
        client = make_client(sample_metadata)

        asyncio.run(make_checker(cache, client).fetch_update_metadata(force_check=True))
        asyncio.run(make_checker(cache, client).fetch_update_metadata(force_check=True))

        assert len(client.calls) == 2

    def test_http_error_raises_and_is_not_cached(self, cache, make_client):
        """A non-200 answer raises HttpStatusError carrying the status."""
        checker = make_checker(cache, make_client(status=404, body="Not Found"))

        with pytest.raises(HttpStatusError) as exc_info:
            asyncio.run(checker.fetch_update_metadata())

        assert exc_info.value.status_code == 404
        assert exc_info.value.body == "Not Found"
        assert cache.get(CACHE_KEY) is None

    def test_http_error_with_undecodable_body(self, cache, make_client):
        """The status is reported even when the error body is not UTF-8."""
        checker = make_checker(cache, make_client(status=404, body=b"\xff\xfe not found"))

        with pytest.raises(HttpStatusError) as exc_info:
            asyncio.run(checker.fetch_update_metadata())

        assert exc_info.value.status_code == 404

    def test_transport_error_raises_and_is_not_cached(self, cache, make_client):
        """An unreachable repository raises TransportError."""
        checker = make_checker(cache, make_client(error=True))

        with pytest.raises(TransportError):
            asyncio.run(checker.fetch_update_metadata())

        assert cache.get(CACHE_KEY) is None

    def test_invalid_json_is_not_cached(self, cache, make_client):
        """A body that is not JSON gives None and the next lookup refetches."""
        client = make_client(body="<html>rate limited</html>")
        checker = make_checker(cache, client)

        assert asyncio.run(checker.fetch_update_metadata()) is None
        assert cache.get(CACHE_KEY) is None

        asyncio.run(checker.fetch_update_metadata())
        assert len(client.calls) == 2

    def test_undecodable_body_is_not_cached(self, cache, make_client):
        """A 200 body that is not UTF-8 gives None instead of raising."""
        checker = make_checker(cache, make_client(body=NOT_UTF8))

        assert asyncio.run(checker.fetch_update_metadata()) is None
        assert cache.get(CACHE_KEY) is None

    def test_non_object_json_is_returned_but_not_cached(self, cache, make_client):
        """Valid JSON that is not an object is handed on but never cached."""
        checker = make_checker(cache, make_client(body='["1.0.2"]'))

        assert asyncio.run(checker.fetch_update_metadata()) == ["1.0.2"]
        assert cache.get(CACHE_KEY) is None


class TestValidateMetadata:
    """Validation boundary between fetch results and hook callbacks."""

    def test_error_is_rejected(self, cache, make_client):
        """Fetch errors validate to None."""
        checker = make_checker(cache, make_client())

        assert checker.validate_metadata(HttpStatusError(404)) is None
        assert checker.validate_metadata(TransportError("timeout")) is None

    @pytest.mark.parametrize("value", [None, "1.0.2", ["1.0.2"], 42])
    def test_non_mapping_is_rejected(self, cache, make_client, value):
        """Only mappings are usable metadata."""
        checker = make_checker(cache, make_client())

        assert checker.validate_metadata(value) is None

    def test_mapping_becomes_metadata_with_defaults(self, cache, make_client):
        """Missing and null fields become empty strings; unknown keys are dropped."""
        checker = make_checker(cache, make_client())

        metadata = checker.validate_metadata({"version": "1.0.2", "tested": None, "extra": 1})

        assert isinstance(metadata, RemoteMetadata)
        assert metadata.version == "1.0.2"
        assert metadata.tested == ""
        assert metadata.download_url == ""
        assert metadata.sections.changelog == ""

    def test_numeric_version_is_coerced(self, cache, make_client):
        """A JSON number version is read as text."""
        checker = make_checker(cache, make_client())

        assert checker.validate_metadata({"version": 2}).version == "2"

    def test_uncoercible_field_is_rejected(self, cache, make_client):
        """A list where text is expected makes the whole document invalid."""
        checker = make_checker(cache, make_client())

        assert checker.validate_metadata({"version": ["1.0.2"]}) is None


class TestGetPluginInfo:
    """plugins_api filter callback."""

    @pytest.mark.parametrize(
        "action, slug",
        [
            ("query_plugins", DIRNAME),
            ("plugin_information", "some-other-plugin"),
            ("hot_tags", "some-other-plugin"),
        ],
    )
    def test_pass_through_for_other_requests(self, cache, make_client, action, slug):
        """Other actions and other slugs get the incoming result back without a fetch."""
        client = make_client()
        checker = make_checker(cache, client)
        default = object()

        result = asyncio.run(checker.get_plugin_info(default, action, PluginsApiArgs(slug=slug)))

        assert result is default
        assert client.calls == []

    def test_builds_plugin_information(self, cache, make_client, sample_metadata):
        """The download URL serves as both download_link and trunk."""
        checker = make_checker(cache, make_client(sample_metadata))

        info = asyncio.run(
            checker.get_plugin_info(False, "plugin_information", PluginsApiArgs(slug=DIRNAME))
        )

        assert isinstance(info, PluginInformation)
        assert info.name == "WP Plugin Self Hosted Test"
        assert info.version == "1.0.2"
        assert info.requires_php == "8.0"
        assert info.download_link == sample_metadata["download_url"]
        assert info.trunk == sample_metadata["download_url"]
        assert info.sections == sample_metadata["sections"]

    def test_missing_fields_default_to_empty(self, cache, make_client):
        """Sparse metadata still yields a complete answer."""
        checker = make_checker(cache, make_client({"version": "1.0.2"}))

        info = asyncio.run(
            checker.get_plugin_info(None, "plugin_information", PluginsApiArgs(slug=DIRNAME))
        )

        assert info.name == ""
        assert info.trunk == ""
        assert info.sections == {
            "description": "",
            "installation": "",
            "changelog": "",
            "upgrade_notice": "",
        }

    def test_http_error_returns_default(self, cache, make_client):
        """Upstream failure returns the incoming result."""
        checker = make_checker(cache, make_client(status=404))
        default = {"default": True}

        result = asyncio.run(
            checker.get_plugin_info(default, "plugin_information", PluginsApiArgs(slug=DIRNAME))
        )

        assert result is default

    @pytest.mark.parametrize("status", [200, 404])
    def test_undecodable_body_returns_default(self, cache, make_client, status):
        """A body that is not UTF-8 returns the incoming result, whatever the status."""
        checker = make_checker(cache, make_client(status=status, body=NOT_UTF8))
        default = {"default": True}

        result = asyncio.run(
            checker.get_plugin_info(default, "plugin_information", PluginsApiArgs(slug=DIRNAME))
        )

        assert result is default


class TestCheckForUpdate:
    """site_transient_update_plugins filter callback."""

    def test_newer_version_goes_to_response(self, cache, make_client, sample_metadata):
        """A newer remote version is recorded under response."""
        checker = make_checker(cache, make_client(sample_metadata), version="1.0.1")

        transient = asyncio.run(checker.check_for_update(fresh_transient()))

        update = transient.response[BASENAME]
        assert update.new_version == "1.0.2"
        assert update.slug == DIRNAME
        assert update.plugin == BASENAME
        assert update.tested == "6.4"
        assert update.package == sample_metadata["download_url"]
        assert transient.no_update == {}

    def test_tagged_remote_version_goes_to_response(self, cache, make_client, sample_metadata):
        """A hotfix-tagged remote release still counts as an update."""
        sample_metadata["version"] = "1.0.2-hotfix"
        checker = make_checker(cache, make_client(sample_metadata), version="1.0.1")

        transient = asyncio.run(checker.check_for_update(fresh_transient()))

        assert transient.response[BASENAME].new_version == "1.0.2-hotfix"

    @pytest.mark.parametrize("installed", ["1.0.2", "1.0.3", "2.0"])
    def test_same_or_older_remote_goes_to_no_update(self, cache, make_client, sample_metadata, installed):
        """Same or older remote versions are recorded under no_update."""
        checker = make_checker(cache, make_client(sample_metadata), version=installed)

        transient = asyncio.run(checker.check_for_update(fresh_transient()))

        assert transient.response == {}
        assert transient.no_update[BASENAME].new_version == "1.0.2"

    def test_up_to_date_without_no_update_collection(self, cache, make_client, sample_metadata):
        """No no_update collection means nothing is recorded."""
        checker = make_checker(cache, make_client(sample_metadata), version="1.0.2")

        transient = asyncio.run(checker.check_for_update(fresh_transient(no_update=False)))

        assert transient.response == {}
        assert transient.no_update is None

    def test_transient_without_response_is_untouched(self, cache, make_client, sample_metadata):
        """A transient not yet collecting results skips the fetch."""
        client = make_client(sample_metadata)
        checker = make_checker(cache, client)
        transient = UpdateTransient()

        result = asyncio.run(checker.check_for_update(transient))

        assert result is transient
        assert result.response is None
        assert client.calls == []

    def test_invalid_metadata_leaves_transient_unchanged(self, cache, make_client):
        """Upstream failure leaves both collections empty."""
        checker = make_checker(cache, make_client(status=500))

        transient = asyncio.run(checker.check_for_update(fresh_transient()))

        assert transient.response == {}
        assert transient.no_update == {}

    @pytest.mark.parametrize("status", [200, 404])
    def test_undecodable_body_leaves_transient_unchanged(self, cache, make_client, status):
        """A body that is not UTF-8 means no update information, not an exception."""
        checker = make_checker(cache, make_client(status=status, body=NOT_UTF8))

        transient = asyncio.run(checker.check_for_update(fresh_transient()))

        assert transient.response == {}
        assert transient.no_update == {}
        assert cache.get(CACHE_KEY) is None

    def test_force_check_refreshes_cached_metadata(self, cache, make_client, sample_metadata):
        """A forced check sees the newer release despite stale cache."""
        cache.set(CACHE_KEY, {"version": "1.0.1"}, 86400)
        checker = make_checker(cache, make_client(sample_metadata), version="1.0.1")

        transient = asyncio.run(checker.check_for_update(fresh_transient(), force_check=True))

        assert BASENAME in transient.response


class TestPurge:
    """upgrader_process_complete action callback."""

    def test_matching_update_deletes_cache(self, cache, make_client, sample_metadata):
        """Updating this plugin drops its cached metadata."""
        cache.set(CACHE_KEY, sample_metadata, 86400)
        checker = make_checker(cache, make_client())

        checker.purge(None, UpgradeOptions(action="update", type="plugin", plugins=["other/x.py", BASENAME]))

        assert cache.get(CACHE_KEY) is None

    @pytest.mark.parametrize(
        "options",
        [
            UpgradeOptions(action="install", type="plugin", plugins=[BASENAME]),
            UpgradeOptions(action="update", type="theme", plugins=[BASENAME]),
            UpgradeOptions(action="update", type="plugin", plugins=["other/x.py"]),
            UpgradeOptions(action="update", type="plugin"),
            UpgradeOptions(),
        ],
    )
    def test_other_upgrades_keep_cache(self, cache, make_client, sample_metadata, options):
        """Installs, themes and other plugins leave the cache alone."""
        cache.set(CACHE_KEY, sample_metadata, 86400)
        checker = make_checker(cache, make_client())

        checker.purge(None, options)

        assert cache.get(CACHE_KEY) == sample_metadata

    def test_purge_without_cache_entry_is_noop(self, cache, make_client):
        """Purging an empty cache does nothing."""
        checker = make_checker(cache, make_client())

        checker.purge(None, UpgradeOptions(action="update", type="plugin", plugins=[BASENAME]))

        assert cache.get(CACHE_KEY) is None

    def test_next_fetch_after_purge_goes_to_network(self, cache, make_client, sample_metadata):
        """After a purge the repository is asked again."""
        client = make_client(sample_metadata)
        checker = make_checker(cache, client)

        asyncio.run(checker.fetch_update_metadata())
        checker.purge(None, UpgradeOptions(action="update", type="plugin", plugins=[BASENAME]))
        asyncio.run(checker.fetch_update_metadata())

        assert len(client.calls) == 2
