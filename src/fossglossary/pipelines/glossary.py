"""
Glossary pipeline: from `terms.yaml` to the published `terms.json`.

Flow Overview
-------------
1. **Read** the source once (:mod:`fossglossary.core.source`).
2. **Schema Contract**: shape and type check of the root and every record.
3. **Normalizer**: every record becomes a canonical ``Term``; problems are
   collected across the whole list.
4. **Resolver**: duplicate slugs, duplicate names/aliases, redirect integrity
   and (when a base glossary is given) slug stability.
5. **Scorer**: one :class:`ScoreCard` per term, in source order.
6. **Exporter**: size-checked, all-or-nothing write of the artifact.

Each stage receives the immutable :class:`GlossarySnapshot` (or the raw value
it is built from) as an argument and returns a :class:`Result`. The first
``Err`` stops the run: later stages do not execute and nothing is written.

Design Principles
-----------------
- **No exits, no globals**: failures are values; the CLI maps them to exit
  codes. Settings are resolved by the caller and passed in.
- **Batch reporting**: a failing validation run reports every violation of
  the failing stage, not only the first.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, TypedDict

from fossglossary.core.contracts.document import check_schema
from fossglossary.core.errors import PipelineFailure, ValidationFailed, Violation
from fossglossary.core.export import MAX_EXPORT_BYTES, ExportOutcome, export_terms
from fossglossary.core.normalize import normalize_terms
from fossglossary.core.resolve import ResolvedIndex, check_slug_stability, resolve
from fossglossary.core.result import Result, err, ok
from fossglossary.core.scoring import ScoreCard, score
from fossglossary.core.settings import get_logger
from fossglossary.core.snapshot import GlossarySnapshot
from fossglossary.core.source import load_document

log = get_logger("fossglossary.pipeline")


# --------------------------------------------------------------------------- #
# Public result types
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class ValidatedGlossary:
    """Output of the validation stages: the snapshot and its lookup index."""

    snapshot: GlossarySnapshot
    index: ResolvedIndex


class PipelineResult(TypedDict):
    """Structured payload returned by :func:`run_pipeline`.

    Attributes
    ----------
    snapshot:
        The validated, normalized glossary (source order).
    index:
        Slug / identity lookup tables built by the resolver.
    scores:
        One score card per term, aligned with ``snapshot.terms``.
    export:
        What the exporter did (written, skipped or check-only).
    """

    snapshot: GlossarySnapshot
    index: ResolvedIndex
    scores: list[ScoreCard]
    export: ExportOutcome


# --------------------------------------------------------------------------- #
# Stages
# --------------------------------------------------------------------------- #


def _failed(violations: Sequence[Violation]) -> ValidationFailed:
    return ValidationFailed(tuple(violations))


def validate_document(
    raw: Any,
    *,
    base_records: Sequence[Mapping[str, Any]] | None = None,
) -> Result[ValidatedGlossary, ValidationFailed]:
    """Run schema, normalization and resolution over a parsed document.

    Parameters
    ----------
    raw:
        The parsed YAML root value. It is never mutated.
    base_records:
        Raw `terms` of the previously published source; enables the slug
        stability check.
    """
    schema = check_schema(raw)
    if schema.is_err():
        return err(_failed(schema.unwrap_err()))
    document = schema.unwrap()

    normalized = normalize_terms(document.terms)
    if normalized.is_err():
        return err(_failed(normalized.unwrap_err()))

    snapshot = GlossarySnapshot.of(normalized.unwrap(), document.redirects)

    resolved = resolve(snapshot)
    problems = [] if resolved.is_ok() else list(resolved.unwrap_err())
    if base_records:
        problems.extend(check_slug_stability(base_records, snapshot))
    if problems:
        return err(_failed(problems))

    log.info("validation passed: %d terms, %d redirects", len(snapshot), len(snapshot.redirects))
    return ok(ValidatedGlossary(snapshot=snapshot, index=resolved.unwrap()))


def load_base_records(base_path: Path | None) -> list[Mapping[str, Any]] | None:
    """Load the raw `terms` of a base glossary; unreadable bases are skipped."""
    if base_path is None:
        return None
    loaded = load_document(base_path)
    if loaded.is_err():
        log.warning(
            "base glossary %s unusable (%s); skipping slug change checks",
            base_path,
            loaded.unwrap_err().reason,
        )
        return None
    data = loaded.unwrap()
    if not isinstance(data, Mapping) or not isinstance(data.get("terms"), list):
        log.warning("base glossary %s has no 'terms' list; skipping slug change checks", base_path)
        return None
    return [t for t in data["terms"] if isinstance(t, Mapping)]


def validate_source(
    source: Path, *, base_path: Path | None = None
) -> Result[ValidatedGlossary, PipelineFailure]:
    """Read ``source`` and run every validation stage over it."""
    loaded = load_document(source)
    if loaded.is_err():
        return err(loaded.unwrap_err())
    base_records = load_base_records(base_path)
    validated = validate_document(loaded.unwrap(), base_records=base_records)
    if validated.is_err():
        return err(validated.unwrap_err())
    return ok(validated.unwrap())


def score_snapshot(snapshot: GlossarySnapshot) -> list[ScoreCard]:
    """Score every term; the result is aligned with ``snapshot.terms``."""
    return [score(term) for term in snapshot.terms]


def run_pipeline(
    source: Path,
    out_path: Path,
    *,
    version: str,
    base_path: Path | None = None,
    previous_slugs: Iterable[str] | None = None,
    only_if_new: bool = False,
    check_only: bool = False,
    pretty: bool = False,
    max_bytes: int = MAX_EXPORT_BYTES,
    generated_at: datetime | None = None,
) -> Result[PipelineResult, PipelineFailure]:
    """Run read → validate → score → export for ``source``.

    Returns ``Ok(PipelineResult)`` or the first failure
    (:class:`SourceReadFailure`, :class:`ValidationFailed` or
    :class:`SizeLimitExceeded`). On any failure nothing is written.
    """
    validated = validate_source(source, base_path=base_path)
    if validated.is_err():
        return err(validated.unwrap_err())
    glossary = validated.unwrap()

    scores = score_snapshot(glossary.snapshot)
    log.debug("scored %d terms", len(scores))

    exported = export_terms(
        glossary.snapshot.terms,
        out_path,
        version=version,
        generated_at=generated_at,
        previous_slugs=previous_slugs,
        only_if_new=only_if_new,
        check_only=check_only,
        pretty=pretty,
        max_bytes=max_bytes,
    )
    if exported.is_err():
        return err(exported.unwrap_err())

    return ok(
        {
            "snapshot": glossary.snapshot,
            "index": glossary.index,
            "scores": scores,
            "export": exported.unwrap(),
        }
    )


__all__ = [
    "ValidatedGlossary",
    "PipelineResult",
    "validate_document",
    "validate_source",
    "load_base_records",
    "score_snapshot",
    "run_pipeline",
]
