"""i18n-hub configuration settings - main aggregator."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HubSettings(BaseSettings):
    """Base class for i18n-hub settings sections.

    All sections inherit from this class to ensure consistent configuration
    behavior (env file loading, case sensitivity).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


class StorageSettings(HubSettings):
    """Dictionary storage configuration.

    Environment Variables:
        I18N_STORAGE_ROOT: Root directory of the host storage (default: ".")
        I18N_DICTIONARIES_DIR: Directory under the root holding dictionaries
    """

    root: str = Field(default=".", alias="I18N_STORAGE_ROOT")
    dictionaries_dir: str = Field(
        default="dictionaries", alias="I18N_DICTIONARIES_DIR"
    )
    preferences_file: str = Field(
        default="settings.json", alias="I18N_PREFERENCES_FILE"
    )


class CloudSettings(HubSettings):
    """Remote dictionary catalog configuration.

    Environment Variables:
        CLOUD_MANIFEST_URL: URL of the remote manifest document
        CLOUD_RAW_PREFIX: Canonical raw-file host prefix found in download URLs
        CLOUD_MIRROR_PREFIX: Mirror prefix substituted for CLOUD_RAW_PREFIX
        CLOUD_TIMEOUT_SECONDS: HTTP timeout for catalog and downloads
        CLOUD_REFRESH_MINUTES: Interval of the scheduled catalog refresh
    """

    manifest_url: str = Field(
        default="https://cdn.jsdelivr.net/gh/open-obsidian-i18n/dictionaries@main/manifest.json",
        alias="CLOUD_MANIFEST_URL",
    )
    raw_prefix: str = Field(
        default="https://raw.githubusercontent.com/open-obsidian-i18n/dictionaries/main/",
        alias="CLOUD_RAW_PREFIX",
    )
    mirror_prefix: str = Field(
        default="https://cdn.jsdelivr.net/gh/open-obsidian-i18n/dictionaries@main/",
        alias="CLOUD_MIRROR_PREFIX",
    )
    timeout_seconds: int = Field(default=15, alias="CLOUD_TIMEOUT_SECONDS")
    refresh_minutes: int = Field(default=60, alias="CLOUD_REFRESH_MINUTES")

    @field_validator("refresh_minutes", mode="before")
    @classmethod
    def validate_refresh_minutes(cls, v):
        """Fall back to hourly refresh for empty or non-positive values."""
        if v in (None, ""):
            return 60
        if int(v) <= 0:
            return 60
        return int(v)


class LocaleSettings(HubSettings):
    """Locale preference configuration.

    Environment Variables:
        I18N_CURRENT_LOCALE: Preferred locale applied to every registered
            translator. Empty means "keep each translator's own locale".
        I18N_DEBUG: Verbose debug logging of store scans
    """

    current_locale: str = Field(default="", alias="I18N_CURRENT_LOCALE")
    debug_mode: bool = Field(default=False, alias="I18N_DEBUG")


class Settings(BaseSettings):
    """i18n-hub configuration settings - main aggregator.

    Environment Variables:
        PREFIX: Environment prefix, empty in production
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        ```python
        from i18n_hub.core.config import get_settings

        settings = get_settings()
        manifest_url = settings.cloud.manifest_url
        ```
    """

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"

    storage: StorageSettings
    cloud: CloudSettings
    locale: LocaleSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            "storage": StorageSettings,
            "cloud": CloudSettings,
            "locale": LocaleSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings instance.

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


settings = get_settings()
