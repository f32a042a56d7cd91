"""Fold pushed partial records into a cached result tree.

Merges are shallow: the incoming record's fields overwrite the cached
record's fields, everything else is kept. Sequence roots are matched by
``id`` and never grow or shrink.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from gqlive._constants import RECORD_ID_FIELD
from gqlive.models._base import Record, ResultTree


@dataclass(frozen=True)
class MergeTarget:
    """Where a record lands: the root key and, for list roots, the element index."""

    root_key: str
    index: int | None = None


def _matches(element: Any, record_id: Any) -> bool:
    match element:
        case {"id": element_id}:
            # JSON ids compare by type too, so `true` never matches `1`.
            return type(element_id) is type(record_id) and bool(element_id == record_id)
        case _:
            return False


def resolve_target(tree: Mapping[str, Any] | None, record: Record) -> MergeTarget | None:
    """Locate the part of *tree* that *record* updates, or ``None``."""
    if not tree:
        return None
    root_key = next(iter(tree))

    match tree[root_key]:
        case list() as elements:
            if RECORD_ID_FIELD not in record:
                return None
            record_id = record[RECORD_ID_FIELD]
            for index, element in enumerate(elements):
                if _matches(element, record_id):
                    return MergeTarget(root_key=root_key, index=index)
            return None
        case dict():
            return MergeTarget(root_key=root_key)
        case None | bool() | int() | float() | str():
            return None
        case _:
            return None


def apply_record(tree: ResultTree | None, record: Record) -> ResultTree | None:
    """Return a new tree with *record* merged in.

    Never raises and never mutates its inputs; when the record does not
    apply, *tree* itself is returned.
    """
    target = resolve_target(tree, record)
    if target is None or tree is None:
        return tree

    patch = copy.deepcopy(dict(record))
    merged: Any
    match tree[target.root_key]:
        case list() as elements if target.index is not None:
            merged = list(elements)
            merged[target.index] = {**merged[target.index], **patch}
        case dict() as fields:
            merged = {**fields, **patch}
        case _:
            return tree

    return {**tree, target.root_key: merged}
