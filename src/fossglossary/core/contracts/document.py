"""Schema contract for the root `terms.yaml` document.

The contract is expressed as Pydantic v2 models with ``extra="forbid"`` so
unknown keys anywhere are violations. :func:`check_schema` runs the models
against the parsed YAML value and translates every Pydantic error into a
positioned :class:`~fossglossary.core.errors.Violation`:

- errors under ``terms[i]`` are reported against record index ``i``;
- everything else (root shape, empty `terms`, bad redirect keys) is reported
  against ``"(root)"``.

The check never mutates its input; it only reports shape and type problems.
Value rules (trimming, slug format, definition length) belong to the
normalizer.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from ..errors import ROOT, Position, Violation
from ..result import Result, err, ok
from .term import SLUG_PATTERN, RawTerm

RedirectKey = Annotated[str, Field(pattern=SLUG_PATTERN)]


class SourceDocument(BaseModel):
    """Root of `terms.yaml`: the term list plus the redirect map."""

    model_config = ConfigDict(extra="forbid", title="FOSSGlossaryTerms")

    terms: list[RawTerm] = Field(min_length=1, description="Glossary term records")
    redirects: dict[RedirectKey, StrictStr] | None = Field(
        default=None,
        description="Map of old slugs to current slugs for renamed or merged terms",
    )


def _describe(loc: tuple[int | str, ...], error_type: str, msg: str) -> tuple[Position, str]:
    """Map a Pydantic error location onto a record index and a readable reason."""
    if len(loc) >= 2 and loc[0] == "terms" and isinstance(loc[1], int):
        index: Position = loc[1]
        path = ".".join(str(p) for p in loc[2:])
    else:
        index = ROOT
        path = ".".join(str(p) for p in loc)

    if error_type == "extra_forbidden":
        return index, f"unknown key '{path}'"
    if error_type == "missing":
        return index, f"missing required field '{path}'"
    if loc[:1] == ("redirects",) and len(loc) == 3 and loc[2] == "[key]":
        return index, f"redirect key '{loc[1]}' does not match slug pattern {SLUG_PATTERN}"
    if not path:
        return index, msg
    return index, f"'{path}': {msg}"


def check_schema(raw: Any) -> Result[SourceDocument, list[Violation]]:
    """Validate the parsed root value against :class:`SourceDocument`.

    Parameters
    ----------
    raw:
        Whatever the YAML loader produced (possibly ``None`` or a scalar).

    Returns
    -------
    Result[SourceDocument, list[Violation]]
        ``Ok`` with the parsed document, or ``Err`` with one
        ``SchemaViolation`` per problem found.
    """
    if not isinstance(raw, Mapping):
        kind = "empty document" if raw is None else type(raw).__name__
        return err(
            [
                Violation(
                    "SchemaViolation",
                    ROOT,
                    f"root must be a mapping with a 'terms' list, got {kind}",
                )
            ]
        )

    try:
        return ok(SourceDocument.model_validate(raw))
    except ValidationError as exc:
        violations = []
        for item in exc.errors():
            index, reason = _describe(tuple(item["loc"]), item["type"], item["msg"])
            violations.append(Violation("SchemaViolation", index, reason))
        return err(violations)


__all__ = ["SourceDocument", "check_schema"]
