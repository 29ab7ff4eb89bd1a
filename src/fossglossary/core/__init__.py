"""Core building blocks of the glossary pipeline.

Stages, leaves first: contracts → normalize → resolve → scoring → export.
Settings and logging live in :mod:`fossglossary.core.settings`.
"""

from __future__ import annotations

__all__ = ["__doc__"]
