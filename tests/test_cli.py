# tests/test_cli.py
"""
Tests for the FOSS Glossary command-line interface (CLI).

Scope
-----
1.  **Command Registration**: every command shows up in ``--help``.
2.  **Exit Codes**: 0 on success, 1 on any validation or export failure.
3.  **Side Effects**: ``export --check`` and ``sort --check`` never write.

We use `typer.testing.CliRunner` to invoke the app in-process. The artifact
version is always passed with ``--revision`` so no test depends on git.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import yaml
from typer.testing import CliRunner

from fossglossary.cli import app
from fossglossary.core.settings import load_settings

DEFINITION = (
    "Yak shaving: the chain of seemingly unrelated tasks you must finish "
    "before you can start the task you actually wanted to do."
)


@pytest.fixture  # type: ignore[misc]
def runner() -> CliRunner:
    """Create a fresh CliRunner for each test."""
    return CliRunner()


@pytest.fixture(autouse=True)  # type: ignore[misc]
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("BASE_TERMS_PATH", "FOSSGLOSSARY_MAX_EXPORT_BYTES"):
        monkeypatch.delenv(name, raising=False)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def _text(result: Any) -> str:
    """CLI output with rich line wrapping undone."""
    return " ".join(result.output.split())


def _record(slug: str, term: str, **extra: Any) -> dict[str, Any]:
    return {"slug": slug, "term": term, "definition": DEFINITION, **extra}


def _write_terms(path: Path, terms: list[dict[str, Any]]) -> Path:
    path.write_text(yaml.safe_dump({"terms": terms}, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture  # type: ignore[misc]
def terms_file(tmp_path: Path) -> Path:
    return _write_terms(
        tmp_path / "terms.yaml",
        [
            _record("yak-shaving", "Yak Shaving", humor="h" * 120, tags=["process"]),
            _record("bikeshedding", "Bikeshedding"),
        ],
    )


def test_cli_help_lists_commands(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0, result.output
    for command in ("validate", "export", "score", "sort", "schema"):
        assert command in result.output


def test_validate_success(runner: CliRunner, terms_file: Path) -> None:
    result = runner.invoke(app, ["validate", "--terms", str(terms_file)])
    assert result.exit_code == 0, result.output
    assert "Validation passed" in result.output
    assert "2 terms" in result.output


def test_validate_reports_every_violation(runner: CliRunner, tmp_path: Path) -> None:
    source = _write_terms(
        tmp_path / "terms.yaml",
        [_record("ok-term", "OK"), _record("Bad_Slug", "Bad", definition="short")],
    )
    result = runner.invoke(app, ["validate", "--terms", str(source)])
    assert result.exit_code == 1
    assert "Validation failed" in result.output
    assert result.output.count("term #2") == 2


def test_validate_missing_file_exits_1(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(app, ["validate", "--terms", str(tmp_path / "nope.yaml")])
    assert result.exit_code == 1
    assert "file not found" in _text(result)


def test_export_writes_artifact(runner: CliRunner, terms_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "out" / "terms.json"
    result = runner.invoke(
        app,
        ["export", "--terms", str(terms_file), "--out", str(out), "--revision", "abc1234"],
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["version"] == "abc1234"
    assert payload["terms_count"] == 2
    assert [t["slug"] for t in payload["terms"]] == ["yak-shaving", "bikeshedding"]


def test_export_check_writes_nothing(runner: CliRunner, terms_file: Path, tmp_path: Path) -> None:
    out = tmp_path / "terms.json"
    result = runner.invoke(
        app,
        ["export", "--terms", str(terms_file), "--out", str(out), "--check", "--revision", "v"],
    )
    assert result.exit_code == 0, result.output
    assert "Export validation passed" in result.output
    assert not out.exists()


def test_export_only_if_new_skips_against_previous(
    runner: CliRunner, terms_file: Path, tmp_path: Path
) -> None:
    out = tmp_path / "terms.json"
    args = ["export", "--terms", str(terms_file), "--out", str(out), "--revision", "v"]
    result = runner.invoke(app, [*args, "--only-if-new", "--previous", str(terms_file)])
    assert result.exit_code == 0, result.output
    assert "No new terms detected" in _text(result)
    assert not out.exists()


def test_export_refuses_oversized_artifact(
    runner: CliRunner, terms_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("FOSSGLOSSARY_MAX_EXPORT_BYTES", "100")
    load_settings.cache_clear()
    out = tmp_path / "terms.json"
    result = runner.invoke(
        app, ["export", "--terms", str(terms_file), "--out", str(out), "--revision", "v"]
    )
    assert result.exit_code == 1
    assert "SizeLimitExceeded" in result.output
    assert not out.exists()


def test_score_single_term(runner: CliRunner, terms_file: Path) -> None:
    result = runner.invoke(app, ["score", "--terms", str(terms_file), "--slug", "yak-shaving"])
    assert result.exit_code == 0, result.output
    assert "total" in result.output
    assert "Comedy Gold" in result.output


def test_score_unknown_slug_exits_1(runner: CliRunner, terms_file: Path) -> None:
    result = runner.invoke(app, ["score", "--terms", str(terms_file), "--slug", "nope"])
    assert result.exit_code == 1
    assert "Unknown slug" in result.output


def test_score_leaderboard(runner: CliRunner, terms_file: Path) -> None:
    result = runner.invoke(app, ["score", "--terms", str(terms_file), "--top", "1"])
    assert result.exit_code == 0, result.output
    assert "Yak Shaving" in result.output
    assert "Bikeshedding" not in result.output


def test_sort_check_and_rewrite(runner: CliRunner, tmp_path: Path) -> None:
    source = _write_terms(
        tmp_path / "terms.yaml",
        [{"term": "Zsh", "slug": "zsh", "definition": "Z"}, _record("bash", "Bash")],
    )

    checked = runner.invoke(app, ["sort", "--terms", str(source), "--check"])
    assert checked.exit_code == 1
    assert "not sorted" in _text(checked)

    sorted_ = runner.invoke(app, ["sort", "--terms", str(source)])
    assert sorted_.exit_code == 0, sorted_.output
    document = yaml.safe_load(source.read_text(encoding="utf-8"))
    assert [t["slug"] for t in document["terms"]] == ["bash", "zsh"]
    assert list(document["terms"][1]) == ["slug", "term", "definition"]

    again = runner.invoke(app, ["sort", "--terms", str(source), "--check"])
    assert again.exit_code == 0, again.output


def test_schema_prints_json_schema(runner: CliRunner) -> None:
    result = runner.invoke(app, ["schema"])
    assert result.exit_code == 0, result.output
    assert "FOSSGlossaryTerms" in result.output


def test_schema_writes_file(runner: CliRunner, tmp_path: Path) -> None:
    target = tmp_path / "schema" / "terms.schema.json"
    result = runner.invoke(app, ["schema", "--output", str(target)])
    assert result.exit_code == 0, result.output
    assert json.loads(target.read_text(encoding="utf-8"))["title"] == "FOSSGlossaryTerms"
