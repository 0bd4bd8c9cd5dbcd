"""Nested Form Decoding — turns bracketed urlencoded keys into nested structures.

Invariants:
    - a[b][c]=1 -> {"a": {"b": {"c": "1"}}}
    - a[]=1&a[]=2 and a[0]=1&a[1]=2 -> {"a": ["1", "2"]}
    - Repeated plain keys collect into a list, blank values are kept
    - Bracket segments beyond max depth stay together as one literal key
    - A key used both as a value and as a container raises BodyParseError

Design Decisions:
    - Containers are built as dicts and array-like dicts are compacted to lists
      at the end: one code path for explicit indices and [] pushes
    - Indices above ARRAY_LIMIT keep the object form so a[1000]=x cannot
      allocate a huge list
"""

import re
from typing import Any
from urllib.parse import parse_qsl

from movie_api.core.errors import BodyParseError

MAX_DEPTH = 5
ARRAY_LIMIT = 20

_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


def parse_nested_query(query: str, depth: int = MAX_DEPTH) -> dict[str, Any]:
    """Decode an urlencoded string, expanding bracketed keys."""
    root: dict[str, Any] = {}
    for raw_key, value in parse_qsl(query, keep_blank_values=True):
        _assign(root, split_key(raw_key, depth), value)
    return {k: _compact(v) for k, v in root.items()}


def split_key(key: str, depth: int = MAX_DEPTH) -> list[str]:
    """Split 'a[b][]' into ['a', 'b', '']."""
    head, bracket, _ = key.partition("[")
    if not bracket or not head:
        return [key]

    rest = key[len(head):]
    segments = [head]
    pos = 0
    while pos < len(rest) and len(segments) <= depth:
        match = _SEGMENT.match(rest, pos)
        if not match:
            break
        segments.append(match.group(1))
        pos = match.end()

    if len(segments) == 1:
        return [key]
    if pos < len(rest):
        segments.append(rest[pos:])
    return segments


def _assign(root: dict[str, Any], path: list[str], value: str) -> None:
    node = root
    for i, segment in enumerate(path[:-1]):
        key = _next_index(node) if segment == "" else segment
        child = node.get(key)
        if child is None:
            child = {}
            node[key] = child
        elif isinstance(child, list):
            child = {str(n): item for n, item in enumerate(child)}
            node[key] = child
        elif isinstance(child, str) and path[i + 1] == "":
            child = {"0": child}
            node[key] = child
        elif not isinstance(child, dict):
            raise BodyParseError(f"Conflicting form field '{'.'.join(path)}'")
        node = child

    leaf = path[-1]
    if leaf == "":
        node[_next_index(node)] = value
        return

    existing = node.get(leaf)
    if existing is None:
        node[leaf] = value
    elif isinstance(existing, list):
        existing.append(value)
    elif isinstance(existing, dict):
        if not _is_array_like(existing):
            raise BodyParseError(f"Conflicting form field '{'.'.join(path)}'")
        existing[_next_index(existing)] = value
    else:
        node[leaf] = [existing, value]


def _next_index(node: dict[str, Any]) -> str:
    indices = [int(k) for k in node if k.isdigit()]
    return str(max(indices) + 1) if indices else "0"


def _is_array_like(node: dict[str, Any]) -> bool:
    return bool(node) and all(
        k.isdigit() and int(k) <= ARRAY_LIMIT for k in node
    )


def _compact(value: Any) -> Any:
    if isinstance(value, list):
        return [_compact(item) for item in value]
    if not isinstance(value, dict):
        return value
    if _is_array_like(value):
        return [_compact(value[k]) for k in sorted(value, key=int)]
    return {k: _compact(v) for k, v in value.items()}
