"""Transient status labels with a cancellable delayed reset.

A console shows ``Ready`` by default, ``Error`` after a failed request,
and short-lived labels such as ``Success`` or ``Live: update`` that fall
back to ``Ready`` after a delay. Each new label cancels the pending
reset, so back-to-back stream events keep the live label up instead of
flickering back to ``Ready`` between them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from gqlive._constants import DEFAULT_STATUS_RESET_DELAY, STATUS_READY

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Status:
    label: str = STATUS_READY
    success: bool = False


READY = Status()


class StatusIndicator:
    """Current status of one console panel.

    Must be used from within a running event loop when flashing, since
    the reset is scheduled with ``loop.call_later``.
    """

    def __init__(
        self,
        *,
        reset_delay: float = DEFAULT_STATUS_RESET_DELAY,
        on_change: Callable[[Status], None] | None = None,
    ) -> None:
        self._reset_delay = reset_delay
        self._on_change = on_change
        self._status = READY
        self._reset_handle: asyncio.TimerHandle | None = None

    @property
    def status(self) -> Status:
        return self._status

    @property
    def reset_pending(self) -> bool:
        return self._reset_handle is not None

    def set(self, label: str, *, success: bool = False) -> None:
        """Show *label* until the next change."""
        self._cancel_reset()
        self._update(Status(label, success))

    def flash(self, label: str, *, success: bool = True) -> None:
        """Show *label*, then reset to ``Ready`` after the configured delay."""
        self._cancel_reset()
        self._update(Status(label, success))
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(self._reset_delay, self._reset)

    def close(self) -> None:
        """Drop any pending reset without changing the status."""
        self._cancel_reset()

    def _reset(self) -> None:
        self._reset_handle = None
        self._update(READY)

    def _cancel_reset(self) -> None:
        handle = self._reset_handle
        self._reset_handle = None
        if handle is not None:
            handle.cancel()

    def _update(self, status: Status) -> None:
        if status == self._status:
            return
        self._status = status
        _logger.debug("Status -> %s", status.label)
        if self._on_change is not None:
            self._on_change(status)
