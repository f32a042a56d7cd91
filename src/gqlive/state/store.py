"""In-memory holder for the current query result.

This is the only component allowed to change the cached result: wholesale
through :meth:`ResultCache.seed` or incrementally through
:meth:`ResultCache.apply`.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping
from typing import Any

from gqlive.models._base import Record, ResultTree
from gqlive.state.merge import apply_record

_logger = logging.getLogger(__name__)


class ResultCache:
    """Current result tree of one query, or nothing before the first seed."""

    def __init__(self, *, on_change: Callable[[ResultTree | None], None] | None = None) -> None:
        self._tree: ResultTree | None = None
        self._on_change = on_change

    @property
    def is_empty(self) -> bool:
        return self._tree is None

    @property
    def root_key(self) -> str | None:
        if not self._tree:
            return None
        return next(iter(self._tree))

    @property
    def root_value(self) -> Any:
        key = self.root_key
        if key is None or self._tree is None:
            return None
        return self._tree[key]

    def snapshot(self) -> ResultTree | None:
        """Deep copy of the held tree."""
        return copy.deepcopy(self._tree)

    def seed(self, tree: Mapping[str, Any] | None) -> ResultTree | None:
        """Replace the held tree unconditionally."""
        self._tree = copy.deepcopy(dict(tree)) if tree is not None else None
        if self._tree is not None and len(self._tree) > 1:
            _logger.debug("Seeded result has %d root fields; merges target %r", len(self._tree), self.root_key)
        return self._changed()

    def apply(self, record: Record) -> ResultTree | None:
        """Merge *record* into the held tree; a no-op while empty."""
        if self._tree is None:
            return None
        merged = apply_record(self._tree, record)
        if merged is self._tree:
            _logger.debug("Record id=%r matched nothing under %r", record.get("id"), self.root_key)
        self._tree = merged
        return self._changed()

    def clear(self) -> None:
        self._tree = None
        self._changed()

    def _changed(self) -> ResultTree | None:
        snapshot = self.snapshot()
        if self._on_change is not None:
            self._on_change(snapshot)
        return snapshot
