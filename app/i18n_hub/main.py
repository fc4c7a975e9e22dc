"""i18n-hub startup.

I18nCore builds the registry, store and cloud client and wires them
together. Plugins that start before or after the core obtain the registry
through when_ready() instead of a global slot.

Usage:
    core = I18nCore()  # storage rooted at I18N_STORAGE_ROOT
    core.when_ready(lambda registry: registry.register("demo", translator))
    core.start()
"""

from typing import Callable, Optional

from i18n_hub.core.config import settings
from i18n_hub.core.logging import get_module_logger
from i18n_hub.events import EventBus
from i18n_hub.i18n.cloud import CloudClient
from i18n_hub.i18n.registry import LOCALE_CHANGED, PLUGIN_REGISTERED, Registry
from i18n_hub.i18n.store import DictionaryStore
from i18n_hub.storage import FileSystemStorage, Storage

logger = get_module_logger()

CORE_READY = "core-ready"

ReadyCallback = Callable[[Registry], None]


class I18nCore:
    """Owns the i18n components for one host process.

    Storage defaults to the I18N_STORAGE_ROOT directory on disk.
    """

    def __init__(
        self,
        storage: Optional[Storage] = None,
        registry: Optional[Registry] = None,
        store: Optional[DictionaryStore] = None,
        cloud: Optional[CloudClient] = None,
    ):
        self.storage = (
            storage if storage is not None else FileSystemStorage(settings.storage.root)
        )
        self.lifecycle = EventBus()
        self.registry = registry or Registry()
        self.store = store or DictionaryStore(self.storage, self.registry)
        self.cloud = cloud or CloudClient()
        self._ready = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    def start(self) -> Registry:
        """Wire the store to registry events and announce readiness.

        Dictionaries of plugins registered before start() are loaded here;
        later registrations are handled by the plugin-registered listener.

        Returns:
            The registry.
        """
        if self._ready:
            return self.registry

        self.registry.on(PLUGIN_REGISTERED, self.store.load_for_namespace)
        self.registry.on(LOCALE_CHANGED, self.store.remember_locale)

        for namespace_id in self.registry.get_registered_ids():
            self.store.load_for_namespace(namespace_id)
        self.store.auto_load_themes()

        self._ready = True
        logger.info("i18n_core_started", registered=self.registry.get_registered_ids())
        self.lifecycle.emit(CORE_READY, self.registry)
        return self.registry

    def when_ready(self, callback: ReadyCallback) -> None:
        """Call back with the registry once the core has started.

        Called immediately when the core is already running.
        """
        if self._ready:
            callback(self.registry)
            return
        self.lifecycle.once(CORE_READY, callback)

    def stop(self) -> None:
        """Tear down the registry and forget pending ready callbacks."""
        self.registry.clear()
        self.lifecycle.clear()
        self._ready = False
        logger.info("i18n_core_stopped")
