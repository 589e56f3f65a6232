"""
field_resolver.py — Dotted-Path Lookup into Block Results
===========================================================
Resolves paths like:

  previous.balance.native.formatted   → result of the last recorded block
  blk_2.data.0.value                  → result of block "blk_2", first row

Results are JSON-like trees (dict / list / str / number / bool / None).
A purely numeric segment indexes a list; on a dict it is an ordinary key
lookup, so {"0": ...} keeps working. Anything unresolvable yields None —
the resolver never raises.
"""

from typing import Any, Iterable

from execution_context import ExecutionContext

PREVIOUS = "previous"


def split_path(path: str) -> list[str]:
    if not isinstance(path, str):
        return []
    return [seg.strip() for seg in path.strip().split(".") if seg.strip() != ""]


def walk_path(value: Any, segments: Iterable[str]) -> Any:
    """Descend into a JSON-like value one segment at a time."""
    for seg in segments:
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(seg)
        elif isinstance(value, (list, tuple)):
            if not seg.isdecimal():
                return None
            idx = int(seg)
            value = value[idx] if idx < len(value) else None
        else:
            return None
    return value


def resolve_field(path: str, context: ExecutionContext) -> Any:
    """
    Resolve `path` against the results recorded so far in `context`.
    The first segment is either `previous` or a block id.
    """
    segments = split_path(path)
    if not segments:
        return None

    head, rest = segments[0], segments[1:]
    if head == PREVIOUS:
        root = context.last_result()
    else:
        root = context.results.get(head)
    return walk_path(root, rest)
