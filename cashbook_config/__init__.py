"""
cashbook_config -- single public entrypoint for cashbook configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``: sequence formats, income classification
    keywords, the kanban pipeline and report defaults.

Architecture position:
    Configuration -- sits above ``cashbook_kernel`` / ``cashbook_engines``
    and below ``cashbook_services``.  The kernel and engines MUST NEVER
    import from ``cashbook_config``; they receive the parsed values as
    arguments.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Parsed configuration is immutable and cached per resolved path.
    - Deterministic identity: the same file always yields the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the configured file does not exist.
    - ``KeyError`` / ``ValueError`` -- schema validation failures.

Audit relevance:
    Every uncached load emits a ``CASHBOOK_CONFIG_TRACE`` log entry with the
    config name, version, checksum and source path.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path

from cashbook_config.loader import compute_checksum, load_config
from cashbook_config.schema import (
    CashbookConfig,
    ClassificationRules,
    PipelineConfig,
    ReportsConfig,
    SequenceFormat,
)
from cashbook_kernel.logging_config import get_logger

_logger = get_logger("config")

CONFIG_ENV_VAR = "CASHBOOK_CONFIG"

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "cashbook.yaml"

_cache: dict[Path, CashbookConfig] = {}
_cache_lock = threading.Lock()


def _resolve_path(config_path: Path | str | None) -> Path:
    if config_path is not None:
        return Path(config_path).resolve()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).resolve()
    return DEFAULT_CONFIG_PATH.resolve()


def get_active_config(config_path: Path | str | None = None) -> CashbookConfig:
    """The ONLY public configuration entrypoint.

    Resolution order: explicit ``config_path``, then the ``CASHBOOK_CONFIG``
    environment variable, then the packaged defaults.

    Returns:
        The parsed, frozen ``CashbookConfig``.  Repeated calls for the
        same path return the same object.

    Raises:
        FileNotFoundError: If the resolved file does not exist.
        KeyError: If a required section is missing.
        ValueError: If a value is invalid.
    """
    path = _resolve_path(config_path)
    with _cache_lock:
        cached = _cache.get(path)
        if cached is not None:
            return cached

        config = load_config(path)
        _cache[path] = config

    _logger.info(
        "CASHBOOK_CONFIG_TRACE",
        extra={
            "trace_type": "CASHBOOK_CONFIG_TRACE",
            "config_name": config.name,
            "config_version": config.version,
            "checksum": config.checksum,
            "source_path": str(path),
            "sequence_count": len(config.sequences),
            "stage_count": len(config.pipeline.stages),
        },
    )
    return config


def clear_config_cache() -> None:
    """Forget cached configurations. FOR TESTING ONLY."""
    with _cache_lock:
        _cache.clear()


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "CashbookConfig",
    "ClassificationRules",
    "PipelineConfig",
    "ReportsConfig",
    "SequenceFormat",
    "clear_config_cache",
    "compute_checksum",
    "get_active_config",
]
