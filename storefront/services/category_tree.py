"""Adjacency-map construction and traversal for the category tree.

Every consumer that needs the hierarchy (admin tree view, storefront sidebar,
CLI export) goes through :func:`build_tree` once and then answers "children
of X" from the map instead of re-scanning the records per node.

All traversals are iterative and carry a ``seen`` set, so corrupt parent
links can never make them loop.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Container, Iterable, Iterator, Protocol, Sequence, TypeVar

# Bucket key of top-level categories
ROOT = None


class TreeRecord(Protocol):
    id: str
    parent_id: str | None


T = TypeVar("T", bound=TreeRecord)


def build_tree(records: Iterable[T]) -> dict[str | None, list[T]]:
    """Group ``records`` by parent id in a single linear pass.

    Every record id gets a bucket, so leaves map to an empty list. Parentless
    records land in the ``ROOT`` bucket. Bucket order follows input order.

    When ``records`` is a partial page, buckets only hold the children that
    appear in that page.
    """
    records = list(records)
    tree: dict[str | None, list[T]] = {ROOT: []}
    for record in records:
        tree.setdefault(record.id, [])
    for record in records:
        tree.setdefault(record.parent_id or ROOT, []).append(record)
    return tree


def children_of(tree: dict[str | None, list[T]], node_id: str | None) -> list[T]:
    return tree.get(node_id, [])


@dataclass(frozen=True)
class TreeRow:
    category: Any
    level: int
    has_children: bool
    expanded: bool


def walk_tree(
    tree: dict[str | None, list[T]],
    starts: Sequence[tuple[T, int]],
    expanded: Container[str],
) -> Iterator[TreeRow]:
    """Pre-order walk from ``starts`` (``(record, level)`` pairs, in order).

    Children are only visited below records whose id is in ``expanded``.
    A record is emitted at most once even if it is reachable twice.
    """
    seen: set[str] = set()
    stack = list(reversed(starts))
    while stack:
        node, level = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        kids = tree.get(node.id, [])
        is_open = node.id in expanded
        yield TreeRow(node, level, bool(kids), is_open)
        if is_open:
            stack.extend((kid, level + 1) for kid in reversed(kids))


def nest_tree(
    tree: dict[str | None, list[T]],
    serialize: Callable[[T], dict],
    *,
    prune_empty: bool = False,
) -> list[dict]:
    """Turn the adjacency map into nested dicts with ``children`` lists."""
    out: list[dict] = []
    seen: set[str] = set()
    stack: list[tuple[T, list[dict]]] = [(node, out) for node in reversed(tree.get(ROOT, []))]
    while stack:
        node, siblings = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        item = serialize(node)
        kids = tree.get(node.id, [])
        if kids or not prune_empty:
            item["children"] = []
        siblings.append(item)
        stack.extend((kid, item["children"]) for kid in reversed(kids))
    return out


def format_tree(
    tree: dict[str | None, list[T]],
    label: Callable[[T], str],
) -> list[str]:
    """Render the hierarchy as box-drawing lines, one per category."""
    lines: list[str] = []
    seen: set[str] = set()
    roots = tree.get(ROOT, [])
    stack = [(node, "", i == len(roots) - 1) for i, node in reversed(list(enumerate(roots)))]
    while stack:
        node, indent, last = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        lines.append(f"{indent}{'└── ' if last else '├── '}{label(node)}")
        kids = tree.get(node.id, [])
        child_indent = indent + ("    " if last else "│   ")
        stack.extend(
            (kid, child_indent, i == len(kids) - 1) for i, kid in reversed(list(enumerate(kids)))
        )
    return lines
