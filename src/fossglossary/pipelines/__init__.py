"""Pipeline entry points for the glossary.

Currently exposed:

- :func:`run_pipeline` — read → validate → score → export, implemented in
  ``glossary.py``.
- :func:`validate_source` / :func:`validate_document` — the validation
  stages alone.
"""

from __future__ import annotations

from .glossary import (
    PipelineResult,
    ValidatedGlossary,
    run_pipeline,
    validate_document,
    validate_source,
)

__all__ = [
    "run_pipeline",
    "validate_document",
    "validate_source",
    "PipelineResult",
    "ValidatedGlossary",
]
