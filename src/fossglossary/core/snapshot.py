"""Immutable in-memory snapshot of one glossary run.

The source document is read once; every later stage receives this value as an
explicit argument and nothing else. There is no module-level "current terms"
state anywhere in the package.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .contracts.term import Term


@dataclass(frozen=True, slots=True)
class GlossarySnapshot:
    """Normalized terms in source order plus the redirect map."""

    terms: tuple[Term, ...]
    redirects: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def of(
        cls, terms: tuple[Term, ...] | list[Term], redirects: Mapping[str, str] | None = None
    ) -> GlossarySnapshot:
        """Build a snapshot, freezing both collections."""
        return cls(tuple(terms), MappingProxyType(dict(redirects or {})))

    @property
    def slugs(self) -> tuple[str, ...]:
        return tuple(t.slug for t in self.terms)

    def __len__(self) -> int:
        return len(self.terms)


__all__ = ["GlossarySnapshot"]
