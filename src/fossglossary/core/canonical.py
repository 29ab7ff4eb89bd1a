"""Canonical ordering of the `terms.yaml` source document.

Contributors append terms anywhere; this module rewrites the document into a
stable layout so diffs stay small:

- terms sorted by slug;
- keys of each term in :data:`TERM_KEY_ORDER`, unknown keys after them;
- redirects sorted by old slug;
- the leading ``#`` comment block of the file is preserved.

Sorting only touches the *source*. The exported artifact keeps whatever order
the source has.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import yaml

from .contracts.term import TERM_KEY_ORDER


def header_comment(text: str) -> str:
    """Return the leading comment lines of ``text`` (blank lines allowed)."""
    header: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("#"):
            header.append(line)
        elif stripped:
            break
    return "\n".join(header) + "\n" if header else ""


def order_term_keys(record: Mapping[str, Any]) -> dict[str, Any]:
    ordered = {key: record[key] for key in TERM_KEY_ORDER if key in record}
    for key, value in record.items():
        ordered.setdefault(key, value)
    return ordered


def canonicalize(document: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new document in canonical order; the input is not modified."""
    terms = document.get("terms") or []
    records = [t for t in terms if isinstance(t, Mapping)]
    records = sorted(records, key=lambda t: str(t.get("slug") or ""))
    out: dict[str, Any] = {"terms": [order_term_keys(t) for t in records]}

    redirects = document.get("redirects")
    if isinstance(redirects, Mapping) and redirects:
        out["redirects"] = {key: redirects[key] for key in sorted(redirects)}

    for key, value in document.items():
        out.setdefault(key, value)
    return out


def dump_document(document: Mapping[str, Any], header: str = "") -> str:
    """Serialize ``document`` as block-style YAML, prefixed by ``header``."""
    body = yaml.safe_dump(
        dict(document),
        sort_keys=False,
        allow_unicode=True,
        indent=2,
        width=float("inf"),
        default_flow_style=False,
    )
    return header + body


def sort_source_text(text: str, document: Mapping[str, Any]) -> str:
    """Return the canonical YAML text for a parsed ``document`` read from ``text``."""
    return dump_document(canonicalize(document), header_comment(text))


def is_canonical(document: Mapping[str, Any]) -> bool:
    """Return True if ``document`` is already in canonical order."""
    canonical = canonicalize(document)
    if list(canonical) != list(document):
        return False
    terms = document.get("terms") or []
    if [list(t) for t in terms if isinstance(t, Mapping)] != [
        list(t) for t in canonical["terms"]
    ]:
        return False
    if [t.get("slug") for t in terms if isinstance(t, Mapping)] != [
        t.get("slug") for t in canonical["terms"]
    ]:
        return False
    redirects = document.get("redirects")
    if isinstance(redirects, Mapping) and redirects:
        return list(redirects) == list(canonical["redirects"])
    return True


__all__ = [
    "header_comment",
    "order_term_keys",
    "canonicalize",
    "dump_document",
    "sort_source_text",
    "is_canonical",
]
