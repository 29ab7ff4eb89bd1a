"""Assembly and all-or-nothing writing of the published `terms.json` artifact.

The exporter is the only stage that writes to disk or reads external metadata
(revision, clock). Everything it needs is passed in; the revision is looked
up by the caller through :func:`fossglossary.core.vcs.get_revision`.

Guarantees
----------
- ``terms`` are written in the order given (source order), never re-sorted.
- ``terms_count == len(terms)`` by construction.
- The serialized UTF-8 size is measured *before* any write; above the ceiling
  the export fails with :class:`SizeLimitExceeded` and the destination is
  left untouched.
- Writes go to a temporary sibling file that replaces the destination in one
  ``os.replace``, so readers never see a half-written artifact.
"""

from __future__ import annotations

import json
import os
import stat
import tempfile
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .contracts.artifact import ExportArtifact
from .contracts.term import Term
from .errors import SizeLimitExceeded
from .normalize import normalize_string
from .result import Result, err, ok
from .settings import DEFAULT_MAX_EXPORT_BYTES, get_logger

log = get_logger("fossglossary.export")

MAX_EXPORT_BYTES = DEFAULT_MAX_EXPORT_BYTES
# Mode of a newly created artifact: readable by the web server serving docs/.
ARTIFACT_MODE = 0o644


@dataclass(frozen=True, slots=True)
class ExportOutcome:
    """What a successful export did.

    ``written`` is False for check-only runs and for "only if new" runs that
    found no new slug; ``skipped_reason`` says which.
    """

    written: bool
    path: Path | None
    size_bytes: int
    terms_count: int
    version: str
    skipped_reason: str | None = None


def build_artifact(
    terms: Sequence[Term], *, version: str, generated_at: datetime | None = None
) -> ExportArtifact:
    """Assemble the artifact; ``generated_at`` defaults to now (UTC)."""
    moment = generated_at if generated_at is not None else datetime.now(UTC)
    return ExportArtifact.from_terms(terms, version=version, generated_at=moment)


def serialize_artifact(artifact: ExportArtifact, *, pretty: bool = False) -> str:
    """Serialize to JSON text with a trailing newline.

    Compact output has no whitespace between tokens; ``pretty`` indents by two
    spaces. Non-ASCII text is kept as-is (the file is UTF-8).
    """
    payload = artifact.to_dict()
    if pretty:
        body = json.dumps(payload, ensure_ascii=False, indent=2)
    else:
        body = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return body + "\n"


def check_size(
    serialized: str, limit_bytes: int = MAX_EXPORT_BYTES
) -> Result[int, SizeLimitExceeded]:
    """Return the UTF-8 byte length of ``serialized`` if within ``limit_bytes``."""
    size = len(serialized.encode("utf-8"))
    if size > limit_bytes:
        return err(SizeLimitExceeded(actual_bytes=size, limit_bytes=limit_bytes))
    return ok(size)


def extract_slugs(document: Any) -> list[str]:
    """Pull the normalized slugs out of a raw parsed document.

    Used on *previous* versions of the source, which may be malformed: any
    structural problem yields an empty list and a warning.
    """
    if not isinstance(document, dict) or not isinstance(document.get("terms"), list):
        log.warning("previous document has no 'terms' list; treating it as empty")
        return []
    slugs = []
    for record in document["terms"]:
        if isinstance(record, dict):
            slug = normalize_string(record.get("slug"))
            if slug is not None:
                slugs.append(slug)
    return slugs


def has_new_slugs(current: Iterable[str], previous: Iterable[str] | None) -> bool:
    """Return True if ``current`` holds a slug missing from ``previous``.

    With no previous slug set at all (first publication) everything is new.
    """
    if previous is None:
        return True
    return bool(set(current) - set(previous))


def write_atomic(path: Path, data: str, mode: int = ARTIFACT_MODE) -> None:
    """Write ``data`` to ``path`` through a temporary file and ``os.replace``.

    ``mkstemp`` creates the temporary file as 0600; it is set to ``mode``
    (or the mode of an existing ``path``) before it replaces the target.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        mode = stat.S_IMODE(path.stat().st_mode)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(data)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def export_terms(
    terms: Sequence[Term],
    out_path: Path,
    *,
    version: str,
    generated_at: datetime | None = None,
    previous_slugs: Iterable[str] | None = None,
    only_if_new: bool = False,
    check_only: bool = False,
    pretty: bool = False,
    max_bytes: int = MAX_EXPORT_BYTES,
) -> Result[ExportOutcome, SizeLimitExceeded]:
    """Build, size-check and write the artifact for ``terms``.

    Parameters
    ----------
    terms:
        Validated, normalized terms in source order.
    out_path:
        Destination file; parent directories are created.
    version:
        Short revision string (``"unknown"`` when not available).
    previous_slugs:
        Slugs of the last published source, used with ``only_if_new``.
    only_if_new:
        Skip (successfully, without writing) when no slug is new.
    check_only:
        Run every check but never write.
    max_bytes:
        Byte ceiling for the serialized artifact.
    """
    if only_if_new and not has_new_slugs((t.slug for t in terms), previous_slugs):
        log.info("no new terms detected; skipping export")
        return ok(
            ExportOutcome(
                written=False,
                path=None,
                size_bytes=0,
                terms_count=len(terms),
                version=version,
                skipped_reason="no new slugs",
            )
        )

    artifact = build_artifact(terms, version=version, generated_at=generated_at)
    serialized = serialize_artifact(artifact, pretty=pretty)
    size_result = check_size(serialized, max_bytes)
    if size_result.is_err():
        failure = size_result.unwrap_err()
        log.error(
            "export size %d bytes exceeds %d byte limit", failure.actual_bytes, max_bytes
        )
        return err(failure)
    size = size_result.unwrap()

    if check_only:
        log.info("export check passed (%d terms, %d bytes)", artifact.terms_count, size)
        return ok(
            ExportOutcome(
                written=False,
                path=None,
                size_bytes=size,
                terms_count=artifact.terms_count,
                version=artifact.version,
                skipped_reason="check only",
            )
        )

    write_atomic(out_path, serialized)
    log.info("wrote %s (%d terms, %d bytes)", out_path, artifact.terms_count, size)
    return ok(
        ExportOutcome(
            written=True,
            path=out_path,
            size_bytes=size,
            terms_count=artifact.terms_count,
            version=artifact.version,
        )
    )


__all__ = [
    "ARTIFACT_MODE",
    "MAX_EXPORT_BYTES",
    "ExportOutcome",
    "build_artifact",
    "serialize_artifact",
    "check_size",
    "extract_slugs",
    "has_new_slugs",
    "write_atomic",
    "export_terms",
]
