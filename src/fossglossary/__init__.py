"""FOSS Glossary core package.

Validates the human-authored ``terms.yaml`` source, scores every entry and
exports the published ``terms.json`` artifact.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
