"""Tests for artifact assembly, the size ceiling and all-or-nothing writes."""

from __future__ import annotations

import json
import os
import stat
from datetime import UTC, datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from fossglossary.core.contracts.artifact import ExportArtifact, format_timestamp
from fossglossary.core.contracts.term import Term
from fossglossary.core.errors import SizeLimitExceeded
from fossglossary.core.export import (
    ARTIFACT_MODE,
    MAX_EXPORT_BYTES,
    build_artifact,
    check_size,
    export_terms,
    extract_slugs,
    has_new_slugs,
    serialize_artifact,
)

DEFINITION = (
    "A copyleft licence family that requires derived works to be distributed "
    "under the same licence terms."
)
WHEN = datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=UTC)


def _terms() -> list[Term]:
    return [
        Term(slug="gpl", term="GPL", definition=DEFINITION, tags=("licensing",)),
        Term(slug="agpl", term="AGPL", definition=DEFINITION, humor="The GPL, but for SaaS ✨"),
    ]


def test_artifact_has_exactly_the_published_keys() -> None:
    artifact = build_artifact(_terms(), version="abc1234", generated_at=WHEN)
    payload = artifact.to_dict()
    assert list(payload) == ["version", "generated_at", "terms_count", "terms"]
    assert payload["version"] == "abc1234"
    assert payload["generated_at"] == "2024-05-06T07:08:09.123Z"
    assert payload["terms_count"] == len(payload["terms"]) == 2


def test_terms_keep_source_order_and_omit_absent_fields() -> None:
    payload = build_artifact(_terms(), version="v", generated_at=WHEN).to_dict()
    assert [t["slug"] for t in payload["terms"]] == ["gpl", "agpl"]
    assert payload["terms"][0] == {
        "slug": "gpl",
        "term": "GPL",
        "definition": DEFINITION,
        "tags": ["licensing"],
    }
    assert all(None not in t.values() for t in payload["terms"])


def test_empty_version_falls_back_to_unknown() -> None:
    assert build_artifact(_terms(), version="", generated_at=WHEN).version == "unknown"


def test_terms_count_mismatch_is_rejected() -> None:
    with pytest.raises(ValidationError):
        ExportArtifact(version="v", generated_at="x", terms_count=5, terms=tuple(_terms()))


def test_format_timestamp_treats_naive_as_utc() -> None:
    assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05.000Z"


def test_compact_and_pretty_serialization() -> None:
    artifact = build_artifact(_terms(), version="v", generated_at=WHEN)
    compact = serialize_artifact(artifact)
    pretty = serialize_artifact(artifact, pretty=True)
    assert compact.endswith("}\n") and "\n" not in compact[:-1]
    assert compact.startswith('{"version":"v","generated_at":')
    assert "✨" in compact
    assert pretty.startswith('{\n  "version": "v"')
    assert json.loads(compact) == json.loads(pretty)


def test_check_size_boundary() -> None:
    text = "é" * 10  # 20 UTF-8 bytes
    assert check_size(text, limit_bytes=20).unwrap() == 20
    failure = check_size(text, limit_bytes=19).unwrap_err()
    assert failure == SizeLimitExceeded(actual_bytes=20, limit_bytes=19)


def test_export_writes_artifact(tmp_path: Path) -> None:
    out = tmp_path / "docs" / "terms.json"
    outcome = export_terms(_terms(), out, version="abc1234", generated_at=WHEN).unwrap()

    assert outcome.written is True
    assert outcome.path == out
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["terms_count"] == 2
    assert outcome.size_bytes == len(out.read_bytes())
    assert [p.name for p in out.parent.iterdir()] == ["terms.json"]


def test_oversized_export_fails_and_writes_nothing(tmp_path: Path) -> None:
    big = [
        Term(slug=f"term-{i:03d}", term=f"Term {i}", definition="d" * 22_000) for i in range(100)
    ]
    out = tmp_path / "terms.json"

    result = export_terms(big, out, version="v", generated_at=WHEN)

    assert result.is_err()
    failure = result.unwrap_err()
    assert isinstance(failure, SizeLimitExceeded)
    assert failure.actual_bytes > MAX_EXPORT_BYTES == failure.limit_bytes
    assert not out.exists()
    assert list(tmp_path.iterdir()) == []


def test_failed_export_leaves_previous_artifact_untouched(tmp_path: Path) -> None:
    out = tmp_path / "terms.json"
    out.write_text("previous\n", encoding="utf-8")

    result = export_terms(_terms(), out, version="v", generated_at=WHEN, max_bytes=100)

    assert result.is_err()
    assert out.read_text(encoding="utf-8") == "previous\n"


def test_check_only_never_writes(tmp_path: Path) -> None:
    out = tmp_path / "terms.json"
    outcome = export_terms(_terms(), out, version="v", check_only=True).unwrap()
    assert outcome.written is False
    assert outcome.skipped_reason == "check only"
    assert outcome.size_bytes > 0
    assert not out.exists()


def test_only_if_new_skips_when_no_slug_is_new(tmp_path: Path) -> None:
    out = tmp_path / "terms.json"
    outcome = export_terms(
        _terms(), out, version="v", previous_slugs=["gpl", "agpl", "mit"], only_if_new=True
    ).unwrap()
    assert outcome.written is False
    assert outcome.skipped_reason == "no new slugs"
    assert not out.exists()


def test_only_if_new_exports_when_a_slug_is_new(tmp_path: Path) -> None:
    out = tmp_path / "terms.json"
    outcome = export_terms(
        _terms(), out, version="v", previous_slugs=["gpl"], only_if_new=True
    ).unwrap()
    assert outcome.written is True
    assert out.exists()


def test_has_new_slugs() -> None:
    assert has_new_slugs(["a"], None) is True
    assert has_new_slugs(["a", "b"], ["a"]) is True
    assert has_new_slugs(["a"], ["a", "b"]) is False


def test_extract_slugs_tolerates_malformed_documents() -> None:
    doc = {"terms": [{"slug": " git "}, {"term": "no slug"}, "junk", {"slug": ""}]}
    assert extract_slugs(doc) == ["git"]
    assert extract_slugs(None) == []
    assert extract_slugs({"terms": "nope"}) == []


def test_terms_content_is_deterministic_across_runs(tmp_path: Path) -> None:
    first, second = tmp_path / "a.json", tmp_path / "b.json"
    export_terms(_terms(), first, version="one", generated_at=WHEN)
    export_terms(_terms(), second, version="two", generated_at=datetime.now(UTC))

    a = json.loads(first.read_text(encoding="utf-8"))
    b = json.loads(second.read_text(encoding="utf-8"))
    assert json.dumps(a["terms"], ensure_ascii=False) == json.dumps(b["terms"], ensure_ascii=False)


@pytest.mark.skipif(os.name == "nt", reason="POSIX file modes")
def test_new_artifact_is_world_readable(tmp_path: Path) -> None:
    out = tmp_path / "terms.json"
    export_terms(_terms(), out, version="abc", generated_at=WHEN).unwrap()
    assert stat.S_IMODE(out.stat().st_mode) == ARTIFACT_MODE == 0o644


@pytest.mark.skipif(os.name == "nt", reason="POSIX file modes")
def test_rewrite_keeps_existing_artifact_mode(tmp_path: Path) -> None:
    out = tmp_path / "terms.json"
    out.write_text("previous\n", encoding="utf-8")
    out.chmod(0o664)
    export_terms(_terms(), out, version="abc", generated_at=WHEN).unwrap()
    assert stat.S_IMODE(out.stat().st_mode) == 0o664
    assert json.loads(out.read_text(encoding="utf-8"))["version"] == "abc"
