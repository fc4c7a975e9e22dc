"""Client for the remote dictionary catalog.

Fetches the manifest listing downloadable dictionaries, rewrites raw-file
download URLs to the CDN mirror, compares versions and installs remote
dictionaries through the store and registry.

Usage:
    client = CloudClient()
    client.fetch_manifest()
    for remote in client.get_entries_for("demo"):
        client.install(remote, store, registry)
"""

import json
import re
from concurrent.futures import Future
from dataclasses import dataclass, replace
from threading import Lock
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Tuple,
    Union,
)

import requests

from i18n_hub.core.config import settings
from i18n_hub.core.errors import CloudDownloadError
from i18n_hub.core.logging import get_module_logger
from i18n_hub.i18n.models import (
    Dictionary,
    DictionaryFileInfo,
    DictionaryKind,
    Manifest,
    RemoteDictionaryInfo,
    ValidationResult,
    get_meta,
)

if TYPE_CHECKING:
    from i18n_hub.i18n.registry import RegistryProtocol
    from i18n_hub.i18n.store import DictionaryStore

logger = get_module_logger()

_DIGITS = re.compile(r"[0-9]+")


@dataclass
class HttpResponse:
    """Minimal HTTP response.

    Attributes:
        status: HTTP status code.
        body: Parsed JSON body, None if the body is empty or not JSON.
    """

    status: int
    body: Any = None


HttpGet = Callable[[str, Optional[Dict[str, str]]], HttpResponse]


class RequestsHttpClient:
    """HTTP GET over a pooled requests.Session."""

    def __init__(self, timeout: int = 15) -> None:
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update(
            {
                "User-Agent": "i18n-hub/0.1",
                "Accept": "application/json",
            }
        )
        self._logger = logger.bind(component="requests_http_client")

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        """Send a GET request.

        Raises:
            requests.RequestException: On connection errors and timeouts.
        """
        log = self._logger.bind(url=url)
        log.debug("http_get")

        response = self._session.get(url, headers=headers, timeout=self.timeout)

        body = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                log.warning("non_json_response", status_code=response.status_code)

        return HttpResponse(status=response.status_code, body=body)

    __call__ = get


def is_newer(
    local_version: Union[str, int, None], remote_version: Union[str, int, None]
) -> bool:
    """Check whether a remote dictionary version is newer than a local one.

    Digit-only versions on both sides are compared as integers (millisecond
    timestamps). Anything else is compared as dot-separated numbers, the
    shorter side padded with zeros; a non-numeric component counts as 0. A
    missing local version is always older. Numeric versions are compared as
    their decimal text.

    Examples:
        is_newer("5", "12") -> True
        is_newer("1.2.0", "1.10.0") -> True
        is_newer("", "1") -> True
    """
    local_version = "" if local_version is None else str(local_version)
    remote_version = "" if remote_version is None else str(remote_version)
    if not local_version:
        return True

    if _DIGITS.fullmatch(local_version) and _DIGITS.fullmatch(remote_version):
        return int(remote_version) > int(local_version)

    local_parts = [_component(part) for part in local_version.split(".")]
    remote_parts = [_component(part) for part in remote_version.split(".")]

    for i in range(max(len(local_parts), len(remote_parts))):
        local = local_parts[i] if i < len(local_parts) else 0
        remote = remote_parts[i] if i < len(remote_parts) else 0
        if remote > local:
            return True
        if remote < local:
            return False
    return False


def _component(part: str) -> int:
    try:
        return int(part)
    except ValueError:
        return 0


class CloudClient:
    """Remote catalog client.

    Attributes:
        manifest_url: URL of the manifest document.
        raw_prefix: Download URL prefix rewritten to mirror_prefix.
        mirror_prefix: Replacement prefix.
    """

    def __init__(
        self,
        manifest_url: Optional[str] = None,
        http_get: Optional[HttpGet] = None,
        timeout: Optional[int] = None,
        raw_prefix: Optional[str] = None,
        mirror_prefix: Optional[str] = None,
    ):
        cloud_settings = settings.cloud
        self.manifest_url = manifest_url or cloud_settings.manifest_url
        self.raw_prefix = raw_prefix or cloud_settings.raw_prefix
        self.mirror_prefix = mirror_prefix or cloud_settings.mirror_prefix
        self._http_get: HttpGet = http_get or RequestsHttpClient(
            timeout=timeout or cloud_settings.timeout_seconds
        ).get

        self._entries: List[RemoteDictionaryInfo] = []
        self._manifest: Optional[Manifest] = None
        self._has_loaded = False
        self._lock = Lock()
        self._pending: Optional["Future[List[RemoteDictionaryInfo]]"] = None

    @property
    def has_loaded(self) -> bool:
        """True once a manifest fetch has succeeded."""
        return self._has_loaded

    @property
    def is_fetching(self) -> bool:
        return self._pending is not None

    @property
    def manifest(self) -> Optional[Manifest]:
        """Last successfully fetched manifest, None after a failure."""
        return self._manifest

    @property
    def entries(self) -> List[RemoteDictionaryInfo]:
        return list(self._entries)

    def fetch_manifest(self, force: bool = False) -> List[RemoteDictionaryInfo]:
        """Fetch the remote catalog.

        Concurrent callers share one in-flight request unless force is set.
        Failed requests and unparseable catalogs are logged and leave an
        empty catalog. Other errors propagate to every waiting caller.

        Args:
            force: Start a new request even if one is in flight.

        Returns:
            Plugin and theme entries, plugins first.
        """
        with self._lock:
            pending = self._pending
            owner = pending is None or force
            if owner:
                pending = Future()
                self._pending = pending

        if not owner:
            return pending.result()

        try:
            entries = self._fetch()
        except Exception as e:
            pending.set_exception(e)
            raise
        else:
            pending.set_result(entries)
        finally:
            with self._lock:
                if self._pending is pending:
                    self._pending = None
        return entries

    def _fetch(self) -> List[RemoteDictionaryInfo]:
        log = logger.bind(url=self.manifest_url)
        log.debug("fetching_manifest")
        try:
            response = self._http_get(self.manifest_url, {"Cache-Control": "no-cache"})
            if response.status != 200:
                raise CloudDownloadError(
                    f"Failed to fetch manifest: {response.status}",
                    url=self.manifest_url,
                    status=response.status,
                )
            manifest = Manifest.from_dict(response.body)
        except (requests.RequestException, OSError, CloudDownloadError, ValueError) as e:
            log.warning("manifest_fetch_failed", error=str(e))
            self._entries = []
            self._manifest = None
            return []

        manifest.plugins = [self._rewrite(entry) for entry in manifest.plugins]
        manifest.themes = [self._rewrite(entry) for entry in manifest.themes]

        self._manifest = manifest
        self._entries = manifest.entries
        self._has_loaded = True
        log.info(
            "manifest_fetched",
            plugin_count=len(manifest.plugins),
            theme_count=len(manifest.themes),
        )
        return list(self._entries)

    def _rewrite(self, entry: RemoteDictionaryInfo) -> RemoteDictionaryInfo:
        url = self.rewrite_url(entry.download_url)
        if url == entry.download_url:
            return entry
        return replace(entry, download_url=url)

    def rewrite_url(self, url: str) -> str:
        """Point a raw-file URL at the CDN mirror. Other URLs are unchanged."""
        if url and self.raw_prefix and url.startswith(self.raw_prefix):
            return self.mirror_prefix + url[len(self.raw_prefix):]
        return url

    def get_entries_for(self, namespace_id: str) -> List[RemoteDictionaryInfo]:
        return [
            entry
            for entry in self._entries
            if entry.kind is DictionaryKind.PLUGINS and entry.namespace_id == namespace_id
        ]

    def get_entries_for_theme(self, theme_name: str) -> List[RemoteDictionaryInfo]:
        return [
            entry
            for entry in self._entries
            if entry.kind is DictionaryKind.THEMES and entry.namespace_id == theme_name
        ]

    def download(self, url: str) -> Dictionary:
        """Download a dictionary document.

        Args:
            url: Download URL.

        Returns:
            The dictionary document.

        Raises:
            CloudDownloadError: On a non-200 status, a body that is not a
                JSON object, a missing `$meta.locale` or a transport error.
        """
        log = logger.bind(url=url)
        log.debug("downloading_dictionary")
        try:
            response = self._http_get(url, None)
        except requests.RequestException as e:
            log.error("dictionary_download_failed", error=str(e))
            raise CloudDownloadError(f"Download failed: {e}", url=url) from e

        if response.status != 200:
            log.error("dictionary_download_failed", status_code=response.status)
            raise CloudDownloadError(
                f"Download failed with status {response.status}",
                url=url,
                status=response.status,
            )

        dictionary = response.body
        if isinstance(dictionary, (str, bytes)):
            try:
                dictionary = json.loads(dictionary)
            except ValueError as e:
                raise CloudDownloadError(f"Invalid dictionary JSON: {e}", url=url) from e

        if not isinstance(dictionary, dict) or not get_meta(dictionary).get("locale"):
            log.error("dictionary_download_invalid", reason="missing $meta.locale")
            raise CloudDownloadError(
                "Invalid dictionary format: missing $meta.locale",
                url=url,
                status=response.status,
            )

        return dictionary

    is_newer = staticmethod(is_newer)

    def check_updates(
        self, store: "DictionaryStore"
    ) -> List[Tuple[DictionaryFileInfo, RemoteDictionaryInfo]]:
        """Pair installed dictionaries with newer catalog entries.

        Args:
            store: Store listing the installed dictionaries.

        Returns:
            (installed, remote) pairs where the remote version is newer.
        """
        remote_by_key = {
            (entry.kind, entry.namespace_id, entry.locale): entry
            for entry in self._entries
        }

        updates = []
        for kind in DictionaryKind:
            for info in store.list_all(kind):
                remote = remote_by_key.get((kind, info.namespace_id, info.locale))
                if remote and is_newer(info.dict_version or "0.0.0", remote.dict_version):
                    updates.append((info, remote))

        logger.info("checked_dictionary_updates", update_count=len(updates))
        return updates

    def install(
        self,
        remote: RemoteDictionaryInfo,
        store: "DictionaryStore",
        registry: "RegistryProtocol",
    ) -> ValidationResult:
        """Download a catalog entry, persist it and load it.

        The downloaded `dictVersion` is kept so later update checks compare
        against the catalog version.

        Returns:
            ValidationResult of the load, or a `$storage` failure when the
            file could not be written.

        Raises:
            CloudDownloadError: If the download fails.
        """
        dictionary = self.download(remote.download_url)
        locale = remote.locale

        if not store.create(remote.namespace_id, locale, dictionary, remote.kind):
            return ValidationResult.failure(
                "$storage",
                f"Failed to save dictionary {remote.namespace_id}/{locale}",
            )
        if remote.kind is DictionaryKind.THEMES:
            result = registry.load_theme_dictionary(remote.namespace_id, locale, dictionary)
        else:
            result = registry.load_dictionary(remote.namespace_id, locale, dictionary)

        logger.info(
            "installed_remote_dictionary",
            namespace=remote.namespace_id,
            locale=locale,
            kind=remote.kind.value,
            dict_version=remote.dict_version,
            valid=result.valid,
        )
        return result
