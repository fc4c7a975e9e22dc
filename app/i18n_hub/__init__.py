"""i18n-hub - runtime translation registry for plugin ecosystems.

Main components:
- i18n: Translator, Registry, DictionaryStore, CloudClient, theme extraction
- events: EventBus used by the registry for broadcasts
- storage: Storage capability and its filesystem/in-memory adapters
"""

__version__ = "0.1.0"
