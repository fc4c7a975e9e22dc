"""Shared fixtures for i18n-hub tests."""

from unittest.mock import MagicMock

import pytest

from i18n_hub.i18n.cloud import CloudClient, HttpResponse
from i18n_hub.i18n.registry import Registry
from i18n_hub.i18n.store import DictionaryStore, PreferenceStore
from i18n_hub.i18n.translator import create_translator
from i18n_hub.storage import MemoryStorage
from tests.factories.i18n import FIXED_TIME_MS, MIRROR_PREFIX, RAW_PREFIX


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def registry():
    """Fresh registry, cleared after the test."""
    instance = Registry()
    yield instance
    instance.clear()


@pytest.fixture
def demo_translator():
    """Translator for namespace "demo" with an English base dictionary."""
    return create_translator(
        "demo",
        {
            "hello": "Hello",
            "greeting": "Hello {name}",
            "save": "Save",
            "save_menu": "Save file",
        },
    )


@pytest.fixture
def store(memory_storage, registry):
    """DictionaryStore over in-memory storage with a fixed clock."""
    return DictionaryStore(
        memory_storage,
        registry,
        base_path="dictionaries",
        preferences=PreferenceStore(memory_storage, "settings.json"),
        preferred_locale="",
        debug_mode=False,
        clock=lambda: FIXED_TIME_MS,
    )


@pytest.fixture
def mock_http_get():
    """HTTP GET double returning a 200 with an empty manifest by default."""
    http_get = MagicMock()
    http_get.return_value = HttpResponse(status=200, body={"plugins": [], "themes": []})
    return http_get


@pytest.fixture
def cloud_client(mock_http_get):
    return CloudClient(
        manifest_url="https://example.test/manifest.json",
        http_get=mock_http_get,
        raw_prefix=RAW_PREFIX,
        mirror_prefix=MIRROR_PREFIX,
    )
