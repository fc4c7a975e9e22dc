"""Extract translatable strings from theme stylesheet settings blocks.

Themes describe their settings form inside `/* @settings ... */` comments
whose body is YAML. Every human-facing string found there becomes a key of
the theme's base dictionary, mapped to itself.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

import yaml

from i18n_hub.core.logging import get_module_logger
from i18n_hub.i18n.models import IDS_KEY

logger = get_module_logger()

_SETTINGS_BLOCK = re.compile(r"/\*\s*@settings([\s\S]*?)\*/")

_ITEM_TEXT_FIELDS = ("title", "label", "description", "placeholder")

_MASK32 = 0xFFFFFFFF


@dataclass
class ExtractionResult:
    """Strings harvested from a stylesheet and the stylesheet fingerprint."""

    strings: Dict[str, str] = field(default_factory=dict)
    hash: str = ""


def _imul(a: int, b: int) -> int:
    return ((a & _MASK32) * (b & _MASK32)) & _MASK32


def compute_hash(text: str) -> str:
    """Fingerprint text with a 53-bit non-cryptographic hash.

    Two 32-bit multiplicative accumulators are fed one UTF-16 code unit at a
    time, cross-mixed, and packed as `2**32 * (h2 & 0x1FFFFF) + h1`.

    Args:
        text: Full stylesheet text.

    Returns:
        Lowercase hexadecimal digest.
    """
    h1 = 0xDEADBEEF
    h2 = 0x41C6CE57

    data = text.encode("utf-16-le", errors="surrogatepass")
    for i in range(0, len(data), 2):
        ch = data[i] | (data[i + 1] << 8)
        h1 = _imul(h1 ^ ch, 2654435761)
        h2 = _imul(h2 ^ ch, 1597334677)

    h1 = _imul(h1 ^ (h1 >> 16), 2246822507) ^ _imul(h2 ^ (h2 >> 13), 3266489909)
    h2 = _imul(h2 ^ (h2 >> 16), 2246822507) ^ _imul(h1 ^ (h1 >> 13), 3266489909)

    return format(4294967296 * (2097151 & h2) + (h1 & _MASK32), "x")


def _add(strings: Dict[str, str], value: Any) -> None:
    if isinstance(value, str) and value:
        strings[value] = value


def _collect_item(item: Any, strings: Dict[str, str]) -> None:
    if not isinstance(item, dict):
        return

    for name in _ITEM_TEXT_FIELDS:
        _add(strings, item.get(name))

    options = item.get("options")
    if isinstance(options, list):
        for option in options:
            if isinstance(option, dict):
                _add(strings, option.get("label"))
    elif isinstance(options, dict):
        for label in options.values():
            _add(strings, label)

    nested = item.get("settings")
    if isinstance(nested, list):
        for sub_item in nested:
            _collect_item(sub_item, strings)


def _collect_block(config: Any, strings: Dict[str, str]) -> None:
    if not isinstance(config, dict):
        return

    _add(strings, config.get("name"))
    _add(strings, config.get("description"))

    settings = config.get("settings")
    if isinstance(settings, list):
        for item in settings:
            _collect_item(item, strings)


def extract_settings(text: str) -> ExtractionResult:
    """Harvest settings strings from a stylesheet.

    A block that fails to parse is logged and skipped; the remaining blocks
    are still processed. Block `id` values are gathered under `@@ids` as a
    JSON list.

    Args:
        text: Full stylesheet text.

    Returns:
        ExtractionResult with the identity string map and the fingerprint.
    """
    digest = compute_hash(text)
    strings: Dict[str, str] = {}
    ids: List[Any] = []

    for match in _SETTINGS_BLOCK.finditer(text):
        body = match.group(1)
        if not body:
            continue

        # YAML forbids tab indentation
        body = body.replace("\t", "  ")

        try:
            config = yaml.safe_load(body)
        except yaml.YAMLError as e:
            logger.error("settings_block_parse_failed", error=str(e), offset=match.start())
            continue

        if isinstance(config, dict) and config.get("id"):
            ids.append(config["id"])
        _collect_block(config, strings)

    if ids:
        strings[IDS_KEY] = json.dumps(ids, separators=(",", ":"), ensure_ascii=False)

    logger.info("extracted_theme_strings", string_count=len(strings), hash=digest)
    return ExtractionResult(strings=strings, hash=digest)
