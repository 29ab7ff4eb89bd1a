"""Pydantic contracts for the source document, terms and export artifact."""

from __future__ import annotations

from .artifact import ExportArtifact
from .document import SourceDocument, check_schema
from .term import RawTerm, Term

__all__ = ["ExportArtifact", "RawTerm", "SourceDocument", "Term", "check_schema"]
