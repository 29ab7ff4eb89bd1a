"""Term — the canonical glossary entry, and the raw record it is built from.

`RawTerm` is the *shape* contract for one record of the source document: it
only checks keys and types. `Term` is the canonical, normalized entry that is
validated, scored and published. Optional fields are ``None`` in memory and
omitted (never ``null``) in every serialization.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 48
DEFINITION_MIN_LENGTH = 80

ControversyLevel = Literal["low", "medium", "high"]
CONTROVERSY_LEVELS: tuple[str, ...] = ("low", "medium", "high")

# Canonical key order, used by the exporter and by the source sorter.
TERM_KEY_ORDER: tuple[str, ...] = (
    "slug",
    "term",
    "definition",
    "explanation",
    "humor",
    "see_also",
    "tags",
    "aliases",
    "controversy_level",
)
REQUIRED_KEYS: tuple[str, ...] = ("slug", "term", "definition")

Slug = Annotated[
    str,
    Field(
        pattern=SLUG_PATTERN,
        min_length=SLUG_MIN_LENGTH,
        max_length=SLUG_MAX_LENGTH,
        description="Stable, permanent identifier (kebab-case).",
    ),
]
NonEmptyText = Annotated[str, Field(min_length=1)]
NonEmptyList = Annotated[tuple[NonEmptyText, ...], Field(min_length=1)]


class RawTerm(BaseModel):
    """Shape of one `terms[]` record as authored in `terms.yaml`."""

    model_config = ConfigDict(extra="forbid", title="GlossaryTermRecord")

    slug: StrictStr = Field(description="Stable identifier for the glossary term")
    term: StrictStr = Field(description="The FOSS term being defined")
    definition: StrictStr = Field(description="Short, clear definition")
    explanation: StrictStr | None = Field(default=None, description="Longer explanation")
    humor: StrictStr | None = Field(default=None, description="Sarcastic or humorous take")
    see_also: list[StrictStr] | None = Field(default=None, description="Related terms")
    tags: list[StrictStr] | None = Field(default=None, description="Categories")
    aliases: list[StrictStr] | None = Field(default=None, description="Alternate labels")
    controversy_level: StrictStr | None = Field(
        default=None, description="How controversial is this term? (low|medium|high)"
    )


class Term(BaseModel):
    """A validated, normalized glossary entry ready for publication."""

    model_config = ConfigDict(extra="forbid", frozen=True, title="GlossaryTerm")

    slug: Slug
    term: NonEmptyText
    definition: Annotated[str, Field(min_length=DEFINITION_MIN_LENGTH)]
    explanation: NonEmptyText | None = None
    humor: NonEmptyText | None = None
    see_also: NonEmptyList | None = None
    tags: NonEmptyList | None = None
    aliases: NonEmptyList | None = None
    controversy_level: ControversyLevel | None = None

    def names(self) -> tuple[str, ...]:
        """Return the display name followed by every alias."""
        return (self.term, *(self.aliases or ()))

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe mapping in canonical key order, absent fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)


__all__ = [
    "SLUG_PATTERN",
    "SLUG_MIN_LENGTH",
    "SLUG_MAX_LENGTH",
    "DEFINITION_MIN_LENGTH",
    "CONTROVERSY_LEVELS",
    "TERM_KEY_ORDER",
    "REQUIRED_KEYS",
    "ControversyLevel",
    "Slug",
    "RawTerm",
    "Term",
]
