"""Unit tests for i18n_hub.core.logging module."""

import logging
from unittest.mock import patch

import pytest

from i18n_hub.core import logging as hub_logging

pytestmark = pytest.mark.unit


def test_test_environment_detected():
    assert hub_logging._is_test_environment() is True  # pylint: disable=protected-access


def test_logging_silenced_under_pytest():
    hub_logging.configure_logging()
    assert logging.root.level > logging.CRITICAL


def test_production_mode_uses_json_renderer():
    with patch.object(hub_logging, "_is_test_environment", return_value=False), patch.object(
        hub_logging.structlog, "configure"
    ) as mock_configure:
        hub_logging.configure_logging(log_level="DEBUG", is_production=True)

    processors = mock_configure.call_args[1]["processors"]
    assert isinstance(processors[-1], hub_logging.structlog.processors.JSONRenderer)


def test_development_mode_uses_console_renderer():
    with patch.object(hub_logging, "_is_test_environment", return_value=False), patch.object(
        hub_logging.structlog, "configure"
    ) as mock_configure:
        hub_logging.configure_logging(log_level="INFO", is_production=False)

    processors = mock_configure.call_args[1]["processors"]
    assert isinstance(processors[-1], hub_logging.structlog.dev.ConsoleRenderer)


def test_get_module_logger_returns_bound_logger():
    module_logger = hub_logging.get_module_logger()
    assert hasattr(module_logger, "info")
