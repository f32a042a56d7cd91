"""State/store layer.

The single source of truth for how pushed records are merged into the
cached result of a query.
"""

from gqlive.state.merge import MergeTarget, apply_record, resolve_target
from gqlive.state.store import ResultCache

__all__ = ["MergeTarget", "ResultCache", "apply_record", "resolve_target"]
