"""Duplicate detection and redirect integrity over a whole glossary snapshot.

One pass over the normalized terms builds two indices:

- ``slug_seen``: every active slug (exact match);
- ``identity_seen``: identity key → index of the term that first used it,
  for the display name and every alias of every term.

The redirect map is then checked against the active slug set. All problems
are collected before reporting, so a single run shows every conflict.

Redirect chains
---------------
A redirect whose target is itself a redirect source (``a → b``, ``b → c``)
can never pass: ``b`` may not be active (it is a redirect source) and must be
active (it is a redirect target). The chain is therefore reported as a
``RedirectTargetMissing``; when the chain ends at an active slug the reason
names that final target to point at.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from .errors import ROOT, Violation
from .normalize import identity_key, normalize_array, normalize_string
from .result import Result, err, ok
from .settings import get_logger
from .snapshot import GlossarySnapshot

log = get_logger("fossglossary.resolve")


@dataclass(frozen=True)
class ResolvedIndex:
    """Lookup tables produced by a successful :func:`resolve` pass."""

    slugs: frozenset[str]
    identities: Mapping[str, int]
    redirects: Mapping[str, str] = field(default_factory=dict)

    def resolve_slug(self, slug: str) -> str | None:
        """Return the active slug ``slug`` refers to, following redirects.

        Returns ``None`` when the slug is neither active nor redirected.
        """
        seen: set[str] = set()
        current = slug
        while current not in self.slugs:
            if current in seen or current not in self.redirects:
                return None
            seen.add(current)
            current = self.redirects[current]
        return current


def _final_target(redirects: Mapping[str, str], start: str) -> str:
    """Follow ``start`` through ``redirects`` until it leaves the map."""
    seen = {start}
    current = start
    while current in redirects and redirects[current] not in seen:
        current = redirects[current]
        seen.add(current)
    return current


def resolve(snapshot: GlossarySnapshot) -> Result[ResolvedIndex, list[Violation]]:
    """Check slug and name uniqueness plus redirect integrity.

    Violations
    ----------
    DuplicateSlug
        A slug repeats; details carry ``first_index`` and ``current_index``.
    DuplicateNameConflict
        An identity key of a name/alias is already owned by another term;
        details carry ``first_index``, ``current_index`` and ``key``.
    RedirectConflict
        A redirect source is an active slug.
    RedirectTargetMissing
        A redirect target is not an active slug.
    """
    problems: list[Violation] = []
    slug_seen: dict[str, int] = {}
    identity_seen: dict[str, int] = {}

    for index, term in enumerate(snapshot.terms):
        first = slug_seen.get(term.slug)
        if first is not None:
            problems.append(
                Violation(
                    "DuplicateSlug",
                    index,
                    f"slug '{term.slug}' duplicates term #{first + 1}",
                    {"first_index": first, "current_index": index, "slug": term.slug},
                )
            )
        else:
            slug_seen[term.slug] = index

        reported: set[str] = set()
        for name in term.names():
            key = identity_key(name)
            if not key:
                continue
            owner = identity_seen.setdefault(key, index)
            if owner != index and key not in reported:
                reported.add(key)
                problems.append(
                    Violation(
                        "DuplicateNameConflict",
                        index,
                        f"name '{name}' conflicts with term #{owner + 1} "
                        f"'{snapshot.terms[owner].term}' (identity key '{key}')",
                        {"first_index": owner, "current_index": index, "key": key},
                    )
                )

    redirects = snapshot.redirects
    for old_slug, new_slug in redirects.items():
        if old_slug in slug_seen:
            problems.append(
                Violation(
                    "RedirectConflict",
                    ROOT,
                    f"redirect source '{old_slug}' conflicts with an active term slug",
                    {"old_slug": old_slug},
                )
            )
        if new_slug not in slug_seen:
            reason = f"redirect target '{new_slug}' (from '{old_slug}') does not exist in terms"
            if new_slug in redirects:
                reason += f"; '{new_slug}' is itself redirected"
                final = _final_target(redirects, new_slug)
                if final in slug_seen and final != old_slug:
                    reason += f", point '{old_slug}' at '{final}'"
            problems.append(
                Violation(
                    "RedirectTargetMissing",
                    ROOT,
                    reason,
                    {"old_slug": old_slug, "new_slug": new_slug},
                )
            )

    if problems:
        return err(problems)

    log.debug(
        "resolved %d slugs, %d identity keys, %d redirects",
        len(slug_seen),
        len(identity_seen),
        len(redirects),
    )
    return ok(
        ResolvedIndex(
            slugs=frozenset(slug_seen),
            identities=dict(identity_seen),
            redirects=dict(redirects),
        )
    )


def _record_names(record: Mapping[str, Any]) -> list[str]:
    names: list[str] = []
    name = normalize_string(record.get("term"))
    if name is not None:
        names.append(name)
    names.extend(normalize_array(record.get("aliases")) or [])
    return names


def check_slug_stability(
    base_records: Sequence[Mapping[str, Any] | BaseModel],
    snapshot: GlossarySnapshot,
) -> list[Violation]:
    """Compare the current glossary against a previously published one.

    A term whose name or alias identity key existed in the base glossary
    under a different slug is a ``SlugChanged`` violation, unless the old
    slug already redirects to the new one. Base slugs that
    disappeared without a redirect are only logged.

    ``base_records`` are raw records (they come from an older document that
    may not satisfy today's rules); malformed entries are skipped.
    """
    base_owner: dict[str, tuple[str, str]] = {}
    base_slugs: list[str] = []
    for record in base_records:
        data = record.model_dump(exclude_none=True) if isinstance(record, BaseModel) else record
        if not isinstance(data, Mapping):
            continue
        slug = normalize_string(data.get("slug"))
        if slug is None:
            continue
        base_slugs.append(slug)
        label = normalize_string(data.get("term")) or slug
        for name in _record_names(data):
            key = identity_key(name)
            if key:
                base_owner.setdefault(key, (slug, label))

    problems: list[Violation] = []
    for index, term in enumerate(snapshot.terms):
        flagged: set[str] = set()
        for name in term.names():
            owner = base_owner.get(identity_key(name))
            if owner is None:
                continue
            old_slug, label = owner
            if old_slug == term.slug or old_slug in flagged:
                continue
            if snapshot.redirects.get(old_slug) == term.slug:
                continue
            flagged.add(old_slug)
            problems.append(
                Violation(
                    "SlugChanged",
                    index,
                    f"term '{label}' slug changed from '{old_slug}' to '{term.slug}'; "
                    f'use redirects instead: add redirects: {{"{old_slug}": "{term.slug}"}}',
                    {"old_slug": old_slug, "new_slug": term.slug},
                )
            )

    active = set(snapshot.slugs)
    for slug in base_slugs:
        if slug not in active and slug not in snapshot.redirects:
            log.warning("published slug '%s' was removed without a redirect", slug)

    return problems


__all__ = ["ResolvedIndex", "resolve", "check_slug_stability"]
