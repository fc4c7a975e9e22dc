"""Core configuration and logging for i18n-hub."""
