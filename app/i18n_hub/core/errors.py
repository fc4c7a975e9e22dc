"""Exception types raised by i18n-hub.

Most operations report failure through ValidationResult or None/empty
returns. Only the remote download and the storage adapters' path guard
raise.
"""


class I18nError(Exception):
    """Base class for i18n-hub exceptions."""


class CloudDownloadError(I18nError):
    """A remote dictionary could not be downloaded or is malformed.

    Attributes:
        url: The URL that was requested.
        status: HTTP status, when a response was received.
    """

    def __init__(self, message: str, url: str = "", status: int = 0):
        super().__init__(message)
        self.url = url
        self.status = status


class StorageError(I18nError):
    """A storage path escapes the storage root."""
