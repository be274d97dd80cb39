"""Tests for :mod:`jsexports.core.logging`."""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest
from rich.console import Console
from rich.logging import RichHandler
import structlog

from jsexports import find_exports
from jsexports.core.logging import configure_logging, get_logger


def _clear_root_handlers() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Ensure each test runs with a clean logging configuration."""

    _clear_root_handlers()
    yield
    _clear_root_handlers()


def _build_console() -> Console:
    """Return a console that writes to an in-memory buffer for tests."""

    return Console(file=io.StringIO(), width=120, record=True)


def test_configure_logging_installs_console_and_file_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "jsexports.log"

    configure_logging(level="debug", log_file=log_file, console=_build_console())

    root = logging.getLogger()
    rich_handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
    file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]

    assert len(rich_handlers) == 1, "Expected a single Rich console handler"
    assert len(file_handlers) == 1, "Expected a JSON file handler"

    logger = get_logger(__name__, feature="scan")
    logger.info("exports-collected", named=2)

    for handler in root.handlers:
        handler.flush()

    payload = json.loads(log_file.read_text(encoding="utf-8").strip())

    assert payload["event"] == "exports-collected"
    assert payload["feature"] == "scan"
    assert payload["named"] == 2
    assert payload["level"] == "info"


def test_configure_logging_without_log_file_omits_file_handler() -> None:
    configure_logging(level="info", console=_build_console())

    root = logging.getLogger()
    assert any(isinstance(h, RichHandler) for h in root.handlers)
    assert all(
        not isinstance(h, logging.FileHandler) for h in root.handlers
    ), "No file handler should be registered without a log file"


def test_configure_logging_filters_below_level() -> None:
    console = _build_console()
    configure_logging(level="warning", console=console)

    logger = get_logger("filter")
    logger.info("hidden-event")
    logger.warning("reexport-skipped", specifier="./missing")

    output = console.export_text()
    assert "hidden-event" not in output
    assert "reexport-skipped" in output
    assert "./missing" in output


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError):
        configure_logging(level="invalid", console=_build_console())


def test_unconfigured_logger_defers_to_stdlib_levels(
    capsys: pytest.CaptureFixture[str],
) -> None:
    structlog.reset_defaults()
    logging.getLogger("jsexports.quiet").setLevel(logging.WARNING)

    logger = get_logger("jsexports.quiet", component="analyzer")
    logger.debug("exports-collected", named=1)

    assert capsys.readouterr().out == ""


def test_library_analysis_is_silent_without_configuration(
    capsys: pytest.CaptureFixture[str],
) -> None:
    structlog.reset_defaults()

    exports = find_exports("exports.a = 1;", "/src/quiet.js")

    assert exports.named_exports == ["a"]
    assert capsys.readouterr().out == ""
