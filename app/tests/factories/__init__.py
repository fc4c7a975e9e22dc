"""Test data factories for deterministic test data generation."""

from tests.factories.i18n import (
    make_dictionary,
    make_manifest,
    make_manifest_entry,
    make_theme_css,
    make_theme_dictionary,
)

__all__ = [
    "make_dictionary",
    "make_manifest",
    "make_manifest_entry",
    "make_theme_css",
    "make_theme_dictionary",
]
