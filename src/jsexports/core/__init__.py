"""Core utilities shared across :mod:`jsexports` modules.

The core namespace provides the configuration loading and logging seams so the
analysis engine and CLI stay lightweight.
"""

from __future__ import annotations

from .config import AnalyzerSettings, AppConfig, ReexportPolicy, load_config
from .logging import configure_logging, get_logger

__all__ = [
    "AnalyzerSettings",
    "AppConfig",
    "ReexportPolicy",
    "configure_logging",
    "get_logger",
    "load_config",
]
