"""One-shot loading of the YAML source document.

This is the only place the source is read. Failures come back as a
:class:`SourceReadFailure` carrying the 1-based line and column reported by
PyYAML plus a few lines of context, e.g.::

    Failed to read terms.yaml: mapping values are not allowed here
    Line: 4, Column: 12
    Context:
      3:   term: Git
    → 4:   definition: oops: broken
      5: - slug: svn
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from .errors import SourceReadFailure
from .result import Result, err, ok

_CONTEXT_RADIUS = 2

_BOOL_TAG = "tag:yaml.org,2002:bool"
_MERGE_TAG = "tag:yaml.org,2002:merge"


class GlossaryLoader(yaml.SafeLoader):
    """``SafeLoader`` with YAML 1.2 booleans and no duplicate mapping keys.

    Only ``true``/``false`` resolve to booleans, so names such as ``On``,
    ``Off``, ``Yes`` or ``No`` stay strings. A key repeated inside one mapping
    raises a ``ConstructorError`` marked at the repeated key.
    """

    def construct_mapping(self, node: yaml.Node, deep: bool = False) -> dict[Any, Any]:
        if isinstance(node, yaml.MappingNode):
            seen: set[Any] = set()
            for key_node, _ in node.value:
                if key_node.tag == _MERGE_TAG:
                    continue
                key = self.construct_object(key_node, deep=deep)
                try:
                    duplicate = key in seen
                except TypeError:
                    continue
                if duplicate:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        f"found duplicate key {key!r}",
                        key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


GlossaryLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
GlossaryLoader.add_implicit_resolver(
    _BOOL_TAG, re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"), list("tTfF")
)


def _context_lines(text: str, line: int) -> tuple[str, ...]:
    """Return the source lines around 1-based ``line``, the failing one marked."""
    lines = text.splitlines()
    start = max(0, line - 1 - _CONTEXT_RADIUS)
    end = min(len(lines), line + _CONTEXT_RADIUS)
    out = []
    for number in range(start + 1, end + 1):
        marker = "→" if number == line else " "
        out.append(f"{marker} {number}: {lines[number - 1]}")
    return tuple(out)


def parse_yaml(text: str, label: str = "<string>") -> Result[Any, SourceReadFailure]:
    """Parse YAML ``text`` with :class:`GlossaryLoader`."""
    try:
        return ok(yaml.load(text, Loader=GlossaryLoader))
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        reason = exc.problem or exc.context or "invalid YAML"
        if mark is None:
            return err(SourceReadFailure(label, f"YAML parse error: {reason}"))
        line, column = mark.line + 1, mark.column + 1
        return err(
            SourceReadFailure(
                label,
                f"YAML parse error: {reason}",
                line=line,
                column=column,
                context=_context_lines(text, line),
            )
        )
    except yaml.YAMLError as exc:
        return err(SourceReadFailure(label, f"YAML parse error: {exc}"))


def read_text(path: Path) -> Result[str, SourceReadFailure]:
    """Read ``path`` as UTF-8 text."""
    try:
        with path.open("r", encoding="utf-8") as f:
            return ok(f.read())
    except FileNotFoundError:
        return err(SourceReadFailure(str(path), "file not found"))
    except UnicodeDecodeError as exc:
        return err(SourceReadFailure(str(path), f"not valid UTF-8: {exc.reason}"))
    except OSError as exc:
        return err(SourceReadFailure(str(path), exc.strerror or str(exc)))


def load_document(path: Path) -> Result[Any, SourceReadFailure]:
    """Read and parse the YAML document at ``path``."""
    return read_text(path).flat_map(lambda text: parse_yaml(text, str(path)))


__all__ = ["GlossaryLoader", "parse_yaml", "read_text", "load_document"]
