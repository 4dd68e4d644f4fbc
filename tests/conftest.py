"""Shared fixtures for the update service tests."""

import json

import pytest

from api.services.transient_cache import TransientCache
from api.updater.errors import TransportError


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeMetadataClient:
    """Stands in for MetadataClient and records every requested URL."""

    def __init__(self, status=200, body=b"{}", error=None):
        self.status = status
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.error = error
        self.calls = []

    async def get(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.status, self.body


SAMPLE_METADATA = {
    "name": "WP Plugin Self Hosted Test",
    "slug": "wp-plugin-self-hosted-test",
    "version": "1.0.2",
    "tested": "6.4",
    "requires": "6.0",
    "requires_php": "8.0",
    "author": "Thore Janke",
    "author_profile": "https://github.com/thore-hph",
    "download_url": "https://example.com/wp-plugin-self-hosted-test-1.0.2.zip",
    "last_updated": "2024-05-01 10:00:00",
    "sections": {
        "description": "Test plugin",
        "installation": "Upload and activate",
        "changelog": "1.0.2: fixes",
        "upgrade_notice": "Please update",
    },
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TransientCache(clock=clock)


@pytest.fixture
def sample_metadata():
    return json.loads(json.dumps(SAMPLE_METADATA))


@pytest.fixture
def make_client():
    """Factory for FakeMetadataClient.

    make_client(payload) answers 200 with ``payload`` as JSON,
    make_client(status=404) answers with that status,
    make_client(error=True) fails like an unreachable host.
    """

    def _make(payload=None, status=200, body=None, error=False):
        if body is None:
            body = json.dumps(payload if payload is not None else {})
        return FakeMetadataClient(
            status=status,
            body=body,
            error=TransportError("Connection refused") if error else None,
        )

    return _make
