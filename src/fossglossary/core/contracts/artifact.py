"""Export artifact contract: the published `terms.json` document.

The artifact has exactly four top-level keys::

    {"version": "...", "generated_at": "...", "terms_count": N, "terms": [...]}

`terms_count` is derived from `terms` at construction time and re-checked by
a model validator, so a mismatching artifact cannot be built.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .term import Term

UNKNOWN_VERSION = "unknown"


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as UTC ISO-8601 with millisecond precision and a ``Z``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment = moment.astimezone(UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class ExportArtifact(BaseModel):
    """Read-only snapshot of the glossary published for downstream consumers."""

    model_config = ConfigDict(extra="forbid", frozen=True, title="FOSSGlossaryExport")

    version: str = Field(min_length=1, description="Short VCS revision or 'unknown'")
    generated_at: str = Field(description="UTC ISO-8601 generation time")
    terms_count: int = Field(ge=0)
    terms: tuple[Term, ...]

    @model_validator(mode="after")
    def _count_matches(self) -> ExportArtifact:
        if self.terms_count != len(self.terms):
            raise ValueError(
                f"terms_count ({self.terms_count}) does not match number of terms ({len(self.terms)})"
            )
        return self

    @classmethod
    def from_terms(
        cls, terms: Sequence[Term], *, version: str, generated_at: datetime
    ) -> ExportArtifact:
        """Assemble an artifact; `terms` keeps its order."""
        return cls(
            version=version or UNKNOWN_VERSION,
            generated_at=format_timestamp(generated_at),
            terms_count=len(terms),
            terms=tuple(terms),
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


__all__ = ["UNKNOWN_VERSION", "ExportArtifact", "format_timestamp"]
