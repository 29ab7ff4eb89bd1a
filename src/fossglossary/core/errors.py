"""Error taxonomy shared by every pipeline stage.

Validation problems are reported as :class:`Violation` records so a single run
can surface every issue in the source at once. Read and export problems are
single typed failures (:class:`SourceReadFailure`, :class:`SizeLimitExceeded`)
because nothing useful can follow them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

ROOT = "(root)"

ViolationKind = Literal[
    "SchemaViolation",
    "MissingRequiredField",
    "SlugFormatViolation",
    "DefinitionTooShort",
    "InvalidControversyLevel",
    "DuplicateSlug",
    "DuplicateNameConflict",
    "RedirectConflict",
    "RedirectTargetMissing",
    "SlugChanged",
]

# 0-based position inside `terms`, or ROOT for document-level problems.
Position = int | Literal["(root)"]


@dataclass(frozen=True, slots=True)
class Violation:
    """One validation problem, positioned on a term record or the root."""

    kind: ViolationKind
    index: Position
    reason: str
    details: Mapping[str, object] = field(default_factory=dict)

    def location(self) -> str:
        """Human-facing position label (`term #3` is the third record)."""
        if self.index == ROOT:
            return ROOT
        return f"term #{int(self.index) + 1}"

    def render(self) -> str:
        return f"{self.location()}: {self.reason}"

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind, "index": self.index, "reason": self.reason, **self.details}


@dataclass(frozen=True, slots=True)
class ValidationFailed:
    """Batch of violations collected by the schema, normalize or resolve stage."""

    violations: tuple[Violation, ...]
    kind: Literal["ValidationFailed"] = "ValidationFailed"

    def render(self) -> list[str]:
        return [v.render() for v in self.violations]


@dataclass(frozen=True, slots=True)
class SourceReadFailure:
    """The source document is missing, unreadable or not valid YAML.

    ``line``/``column`` are 1-based when the YAML parser reports a mark, and
    ``context`` holds the surrounding source lines with the failing one
    marked by an arrow.
    """

    path: str
    reason: str
    line: int | None = None
    column: int | None = None
    context: tuple[str, ...] = field(default_factory=tuple)
    kind: Literal["SourceReadFailure"] = "SourceReadFailure"

    def render(self) -> list[str]:
        head = f"Failed to read {self.path}: {self.reason}"
        if self.line is None:
            return [head]
        lines = [head, f"Line: {self.line}, Column: {self.column}"]
        if self.context:
            lines.append("Context:")
            lines.extend(self.context)
        return lines


@dataclass(frozen=True, slots=True)
class SizeLimitExceeded:
    """The serialized artifact is larger than the configured ceiling."""

    actual_bytes: int
    limit_bytes: int
    kind: Literal["SizeLimitExceeded"] = "SizeLimitExceeded"

    def render(self) -> list[str]:
        return [
            f"Export size {self.actual_bytes} bytes exceeds {self.limit_bytes} byte limit; "
            "nothing was written"
        ]


PipelineFailure = SourceReadFailure | ValidationFailed | SizeLimitExceeded


__all__ = [
    "ROOT",
    "Position",
    "ViolationKind",
    "Violation",
    "ValidationFailed",
    "SourceReadFailure",
    "SizeLimitExceeded",
    "PipelineFailure",
]
