"""
Configuration Loader (``cashbook_config.loader``).

Responsibility
--------------
Loads the YAML configuration file and parses it into the frozen
``cashbook_config.schema`` dataclasses.  Runtime callers go through
``cashbook_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; required fields have no silent defaults.
* Every parsed object is a frozen dataclass.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values (width < 1, empty pipeline, non-list keywords)
  -> ``ValueError``.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from cashbook_config.schema import (
    CashbookConfig,
    ClassificationRules,
    PipelineConfig,
    ReportsConfig,
    SequenceFormat,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _string_tuple(value: Any, field: str) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{field} must be a list, got {type(value).__name__}")
    return tuple(str(item) for item in value)


def parse_sequence(key: str, data: dict[str, Any]) -> SequenceFormat:
    """
    Parse one ``sequences`` entry.

    Raises:
        KeyError: if ``prefix`` or ``width`` is missing.
        ValueError: if width or minimum is out of range.
    """
    return SequenceFormat(
        key=key,
        prefix=str(data["prefix"]),
        width=int(data["width"]),
        minimum=int(data.get("minimum", 0)),
    )


def parse_classification(data: dict[str, Any]) -> ClassificationRules:
    income = data["income"]
    return ClassificationRules(
        deposit_keywords=_string_tuple(
            income["deposit_keywords"], "classification.income.deposit_keywords"
        ),
        final_keywords=_string_tuple(
            income["final_keywords"], "classification.income.final_keywords"
        ),
    )


def parse_pipeline(data: dict[str, Any]) -> PipelineConfig:
    return PipelineConfig(stages=_string_tuple(data["stages"], "pipeline.stages"))


def parse_reports(data: dict[str, Any] | None) -> ReportsConfig:
    if not data:
        return ReportsConfig()
    return ReportsConfig(
        top_n=int(data.get("top_n", 5)),
        other_category_label=str(data.get("other_category_label", "Other")),
    )


def compute_checksum(data: Any) -> str:
    """
    SHA-256 of the canonical JSON form of ``data``.

    Accepts a raw dict or a configuration dataclass; identical content
    always produces an identical checksum.  A dataclass's own ``checksum``
    field is excluded.
    """
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        data = dataclasses.asdict(data)
        data.pop("checksum", None)
    canonical = json.dumps(data, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_config(data: dict[str, Any]) -> CashbookConfig:
    """
    Parse a complete configuration dict.

    Raises:
        KeyError: if ``sequences``, ``classification`` or ``pipeline`` is missing.
        ValueError: if any value is invalid.
    """
    raw_sequences = data["sequences"]
    if not isinstance(raw_sequences, dict):
        raise ValueError("sequences must be a mapping of key -> format")
    sequences = tuple(
        parse_sequence(key, raw_sequences[key]) for key in sorted(raw_sequences)
    )

    config = CashbookConfig(
        version=int(data.get("version", 1)),
        name=str(data.get("name", "cashbook")),
        sequences=sequences,
        classification=parse_classification(data["classification"]),
        pipeline=parse_pipeline(data["pipeline"]),
        reports=parse_reports(data.get("reports")),
    )
    return dataclasses.replace(config, checksum=compute_checksum(config))


def load_config(path: Path) -> CashbookConfig:
    return parse_config(load_yaml_file(path))
