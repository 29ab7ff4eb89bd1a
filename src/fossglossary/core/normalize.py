"""Normalization of raw term records into canonical :class:`Term` objects.

This module is the single source of normalization logic. The validation pass
and the export pass both call :func:`normalize_term`, so what is validated is
exactly what is published.

All functions are pure: no I/O, no logging, no process exits.

Rules
-----
- Strings are trimmed; an empty result means "absent".
- List fields accept a scalar (treated as a one-element list); entries are
  trimmed, empty entries dropped, and an all-empty list means "absent".
- Absent optional fields are omitted from the Term, never set to ``null``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from .contracts.term import (
    CONTROVERSY_LEVELS,
    DEFINITION_MIN_LENGTH,
    REQUIRED_KEYS,
    SLUG_MAX_LENGTH,
    SLUG_MIN_LENGTH,
    SLUG_PATTERN,
    Term,
)
from .errors import Violation
from .result import Result, err, ok

_SLUG_RE = re.compile(SLUG_PATTERN)
_NON_IDENTITY_RE = re.compile(r"[^a-z0-9]")

_TEXT_FIELDS = ("explanation", "humor")
_LIST_FIELDS = ("see_also", "tags", "aliases")


def normalize_string(value: Any) -> str | None:
    """Trim ``value``; return ``None`` for missing or blank input."""
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    text = text.strip()
    return text or None


def normalize_array(value: Any) -> list[str] | None:
    """Coerce ``value`` into a list of trimmed, non-empty strings, or ``None``."""
    if value is None:
        return None
    items = list(value) if isinstance(value, list | tuple) else [value]
    cleaned = [s for s in (normalize_string(item) for item in items) if s is not None]
    return cleaned or None


def identity_key(name: str) -> str:
    """Project a name or alias onto its duplicate-detection key.

    >>> identity_key("rtfm!!!")
    'rtfm'
    """
    return _NON_IDENTITY_RE.sub("", name.lower())


def is_valid_slug(slug: str) -> bool:
    """Return True if ``slug`` matches the pattern and the 3–48 length bound."""
    return (
        SLUG_MIN_LENGTH <= len(slug) <= SLUG_MAX_LENGTH and _SLUG_RE.fullmatch(slug) is not None
    )


def _as_mapping(raw: Mapping[str, Any] | BaseModel) -> Mapping[str, Any]:
    if isinstance(raw, BaseModel):
        return raw.model_dump(exclude_none=True)
    return raw


def normalize_term(
    raw: Mapping[str, Any] | BaseModel, index: int = 0
) -> Result[Term, list[Violation]]:
    """Turn one raw record into a canonical :class:`Term`.

    Every failing check of the record is reported, each positioned at
    ``index``:

    - ``MissingRequiredField`` if slug, term or definition is blank/absent;
    - ``SlugFormatViolation`` if the slug breaks the pattern or length bound;
    - ``DefinitionTooShort`` if the trimmed definition is under 80 characters;
    - ``InvalidControversyLevel`` if the level is not low, medium or high.

    Already canonical input (including a :class:`Term`) comes back unchanged.
    """
    data = _as_mapping(raw)
    problems: list[Violation] = []

    required = {key: normalize_string(data.get(key)) for key in REQUIRED_KEYS}
    for key, value in required.items():
        if value is None:
            problems.append(
                Violation("MissingRequiredField", index, f"missing required field '{key}'")
            )

    slug = required["slug"]
    if slug is not None and not is_valid_slug(slug):
        problems.append(
            Violation(
                "SlugFormatViolation",
                index,
                f"slug '{slug}' must match {SLUG_PATTERN} and be "
                f"{SLUG_MIN_LENGTH}-{SLUG_MAX_LENGTH} characters long",
            )
        )

    definition = required["definition"]
    if definition is not None and len(definition) < DEFINITION_MIN_LENGTH:
        problems.append(
            Violation(
                "DefinitionTooShort",
                index,
                f"definition is {len(definition)} characters; "
                f"at least {DEFINITION_MIN_LENGTH} are required",
            )
        )

    level = normalize_string(data.get("controversy_level"))
    if level is not None and level not in CONTROVERSY_LEVELS:
        problems.append(
            Violation(
                "InvalidControversyLevel",
                index,
                f"controversy_level '{level}' must be one of {', '.join(CONTROVERSY_LEVELS)}",
            )
        )

    if problems:
        return err(problems)

    fields: dict[str, Any] = dict(required)
    for key in _TEXT_FIELDS:
        text = normalize_string(data.get(key))
        if text is not None:
            fields[key] = text
    for key in _LIST_FIELDS:
        values = normalize_array(data.get(key))
        if values is not None:
            fields[key] = values
    if level is not None:
        fields["controversy_level"] = level

    return ok(Term(**fields))


def normalize_terms(
    records: Sequence[Mapping[str, Any] | BaseModel],
) -> Result[tuple[Term, ...], list[Violation]]:
    """Normalize every record, collecting violations across the whole list."""
    terms: list[Term] = []
    problems: list[Violation] = []
    for index, record in enumerate(records):
        result = normalize_term(record, index)
        if result.is_ok():
            terms.append(result.unwrap())
        else:
            problems.extend(result.unwrap_err())
    if problems:
        return err(problems)
    return ok(tuple(terms))


__all__ = [
    "normalize_string",
    "normalize_terms",
    "normalize_array",
    "normalize_term",
    "identity_key",
    "is_valid_slug",
]
