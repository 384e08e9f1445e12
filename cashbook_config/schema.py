"""
Cashbook configuration schema.

The human-authored YAML file is parsed by ``cashbook_config.loader`` into
these frozen dataclasses.  ``SequenceFormat`` and ``ClassificationRules``
are kernel types (the kernel and engines consume them and must not import
this package); they are re-exported here so the whole schema reads from
one module.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cashbook_kernel.domain.rules import ClassificationRules, SequenceFormat

__all__ = [
    "CashbookConfig",
    "ClassificationRules",
    "PipelineConfig",
    "ReportsConfig",
    "SequenceFormat",
]


@dataclass(frozen=True)
class PipelineConfig:
    """Ordered kanban stages; the first stage is the fallback for unknown stages."""

    stages: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.stages:
            raise ValueError("Pipeline must define at least one stage")
        if len(set(self.stages)) != len(self.stages):
            raise ValueError(f"Pipeline stages must be unique: {self.stages}")

    @property
    def first_stage(self) -> str:
        return self.stages[0]


@dataclass(frozen=True)
class ReportsConfig:
    top_n: int = 5
    other_category_label: str = "Other"

    def __post_init__(self) -> None:
        if self.top_n < 0:
            raise ValueError(f"reports.top_n must be >= 0, got {self.top_n}")


@dataclass(frozen=True)
class CashbookConfig:
    """The complete runtime configuration."""

    version: int
    name: str
    sequences: tuple[SequenceFormat, ...]
    classification: ClassificationRules
    pipeline: PipelineConfig
    reports: ReportsConfig = field(default_factory=ReportsConfig)
    checksum: str = ""

    @property
    def sequence_formats(self) -> dict[str, SequenceFormat]:
        """Sequence key -> format, as ``SequenceService`` expects."""
        return {fmt.key: fmt for fmt in self.sequences}
