# src/fossglossary/cli.py
"""
FOSS Glossary Command Line Interface (CLI).

This module is the only boundary that turns pipeline results into terminal
output and process exit codes (0 = success, 1 = any failure). It is built with
`typer` and renders with `rich`.

Commands
--------
- ``validate``: schema, normalization, duplicate and redirect checks.
- ``export``: validate, then write the `terms.json` artifact.
- ``score``: score one term or print the leaderboard.
- ``sort``: rewrite `terms.yaml` in canonical order (or check it).
- ``schema``: print the JSON Schema of the source document.

Usage
-----
    $ fossglossary validate --base main-terms.yaml
    $ fossglossary export --out docs/terms.json --only-if-new
    $ fossglossary score --top 10
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fossglossary.core.canonical import is_canonical, sort_source_text
from fossglossary.core.contracts.document import SourceDocument, check_schema
from fossglossary.core.errors import PipelineFailure, ValidationFailed
from fossglossary.core.export import extract_slugs
from fossglossary.core.scoring import rank_terms, score
from fossglossary.core.settings import load_settings
from fossglossary.core.source import load_document, parse_yaml, read_text
from fossglossary.core.vcs import get_revision, show_file
from fossglossary.pipelines.glossary import run_pipeline, validate_source

load_dotenv()

app = typer.Typer(
    help="FOSS Glossary: validate, score and export the glossary terms.",
    rich_markup_mode="markdown",
)
console = Console()

TermsOption = Annotated[
    Path | None,
    typer.Option("--terms", "-t", help="Source YAML (default: FOSSGLOSSARY_TERMS_PATH)."),
]


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _render_failure(failure: PipelineFailure) -> NoReturn:
    """Print every line of a failure and stop with exit code 1."""
    if isinstance(failure, ValidationFailed):
        console.print("[bold red]❌ Validation failed[/bold red]")
        for line in failure.render():
            console.print(f"  - {line}", markup=False, highlight=False)
    else:
        console.print(f"[bold red]❌ {failure.kind}[/bold red]")
        for line in failure.render():
            console.print(line, markup=False, highlight=False)
    raise typer.Exit(code=1)


def _previous_slugs(terms_path: Path, previous: Path | None, previous_rev: str) -> list[str] | None:
    """Slugs of the last published source, or None when there is none."""
    if previous is not None:
        loaded = load_document(previous)
        if loaded.is_err():
            console.print(f"[yellow]⚠️ {loaded.unwrap_err().render()[0]}[/yellow]")
            return None
        return extract_slugs(loaded.unwrap())

    text = show_file(previous_rev, terms_path.as_posix())
    if text is None:
        return None
    parsed = parse_yaml(text, f"{previous_rev}:{terms_path}")
    if parsed.is_err():
        return None
    return extract_slugs(parsed.unwrap())


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def validate(
    terms: TermsOption = None,
    base: Annotated[
        Path | None,
        typer.Option(
            "--base",
            "-b",
            help="Previously published source; enables slug change checks (BASE_TERMS_PATH).",
        ),
    ] = None,
) -> None:
    """Validate the glossary source without writing anything."""
    cfg = load_settings()
    source = terms or cfg.terms_path
    result = validate_source(source, base_path=base or cfg.base_terms_path)
    if result.is_err():
        _render_failure(result.unwrap_err())
    glossary = result.unwrap()
    console.print(
        f"[bold green]✅ Validation passed![/bold green] {len(glossary.snapshot)} terms are valid."
    )


@app.command()  # type: ignore[misc]
def export(
    terms: TermsOption = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", "-o", help="Artifact path (default: FOSSGLOSSARY_EXPORT_PATH)."),
    ] = None,
    pretty: Annotated[bool, typer.Option("--pretty", help="Indent the JSON output.")] = False,
    check: Annotated[
        bool, typer.Option("--check", help="Run every check but do not write the file.")
    ] = False,
    only_if_new: Annotated[
        bool, typer.Option("--only-if-new", help="Skip the export when no slug is new.")
    ] = False,
    previous: Annotated[
        Path | None,
        typer.Option("--previous", help="Previous source to compare slugs against."),
    ] = None,
    previous_rev: Annotated[
        str,
        typer.Option("--previous-rev", help="Git revision of the previous source."),
    ] = "HEAD~1",
    revision: Annotated[
        str | None,
        typer.Option("--revision", help="Version string to stamp (default: git short SHA)."),
    ] = None,
) -> None:
    """Validate the glossary and write the JSON artifact."""
    cfg = load_settings()
    source = terms or cfg.terms_path
    out_path = out or cfg.export_path

    previous_slugs = _previous_slugs(source, previous, previous_rev) if only_if_new else None

    result = run_pipeline(
        source,
        out_path,
        version=revision or get_revision(),
        base_path=cfg.base_terms_path,
        previous_slugs=previous_slugs,
        only_if_new=only_if_new,
        check_only=check,
        pretty=pretty,
        max_bytes=cfg.max_export_bytes,
    )
    if result.is_err():
        _render_failure(result.unwrap_err())

    outcome = result.unwrap()["export"]
    if outcome.written:
        console.print(
            Panel(
                f"Wrote {outcome.path} ({outcome.terms_count} terms, {outcome.size_bytes} bytes)",
                title=f"Export {outcome.version}",
                border_style="green",
            )
        )
    elif outcome.skipped_reason == "check only":
        console.print("[bold green]✅ Export validation passed[/bold green]")
    else:
        console.print("ℹ️ No new terms detected; skipping export")


@app.command("score")  # type: ignore[misc]
def score_cmd(
    terms: TermsOption = None,
    slug: Annotated[
        str | None, typer.Option("--slug", "-s", help="Score a single term by slug.")
    ] = None,
    top: Annotated[int, typer.Option("--top", "-n", min=1, help="Leaderboard size.")] = 10,
) -> None:
    """Print the score breakdown of one term, or the leaderboard."""
    cfg = load_settings()
    result = validate_source(terms or cfg.terms_path)
    if result.is_err():
        _render_failure(result.unwrap_err())
    glossary = result.unwrap()

    if slug is not None:
        target = glossary.index.resolve_slug(slug)
        match = next((t for t in glossary.snapshot.terms if t.slug == target), None)
        if match is None:
            console.print(f"[bold red]❌ Unknown slug '{slug}'[/bold red]")
            raise typer.Exit(code=1)
        card = score(match)
        table = Table(title=f"{match.term} ({match.slug})")
        table.add_column("Component")
        table.add_column("Points", justify="right")
        for name, points in card.components.as_dict().items():
            table.add_row(name, str(points))
        table.add_row("[bold]total[/bold]", f"[bold]{card.total}[/bold]")
        console.print(table)
        if card.badges:
            console.print("Badges: " + ", ".join(card.badges))
        return

    table = Table(title="Leaderboard")
    table.add_column("#", justify="right")
    table.add_column("Term")
    table.add_column("Score", justify="right")
    table.add_column("Badges")
    for entry in rank_terms(glossary.snapshot.terms)[:top]:
        table.add_row(
            str(entry.rank), entry.term.term, str(entry.card.total), ", ".join(entry.card.badges)
        )
    console.print(table)


@app.command("sort")  # type: ignore[misc]
def sort_cmd(
    terms: TermsOption = None,
    check: Annotated[
        bool, typer.Option("--check", help="Fail if the file is not sorted; do not write.")
    ] = False,
) -> None:
    """Sort terms by slug and keys into canonical order."""
    cfg = load_settings()
    source = terms or cfg.terms_path
    text_result = read_text(source)
    if text_result.is_err():
        _render_failure(text_result.unwrap_err())
    text = text_result.unwrap()

    parsed = parse_yaml(text, str(source))
    if parsed.is_err():
        _render_failure(parsed.unwrap_err())
    schema = check_schema(parsed.unwrap())
    if schema.is_err():
        _render_failure(ValidationFailed(tuple(schema.unwrap_err())))
    document = parsed.unwrap()

    if check:
        if not is_canonical(document):
            console.print(f"[bold red]❌ {source} is not sorted.[/bold red] Run: fossglossary sort")
            raise typer.Exit(code=1)
        console.print(f"[bold green]✅ {source} is sorted[/bold green]")
        return

    if is_canonical(document):
        console.print(f"✅ {source} is already sorted")
        return
    source.write_text(sort_source_text(text, document), encoding="utf-8")
    console.print(f"[bold green]✅ Sorted {source}[/bold green]")


@app.command("schema")  # type: ignore[misc]
def schema_cmd(
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the schema to a file.")
    ] = None,
) -> None:
    """Print the JSON Schema of the `terms.yaml` source document."""
    payload = json.dumps(SourceDocument.model_json_schema(), indent=2, ensure_ascii=False) + "\n"
    if output is None:
        console.print_json(payload)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload, encoding="utf-8")
    console.print(f"[dim]Schema written to: {output}[/dim]")


if __name__ == "__main__":
    app()
