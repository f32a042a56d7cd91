from __future__ import annotations

import asyncio

import pytest

from gqlive.status import READY, Status, StatusIndicator


@pytest.mark.asyncio
async def test_flash_resets_to_ready_after_delay() -> None:
    changes: list[Status] = []
    indicator = StatusIndicator(reset_delay=0.01, on_change=changes.append)

    indicator.flash("Live: update")
    assert indicator.status == Status("Live: update", True)
    assert indicator.reset_pending

    await asyncio.sleep(0.1)
    assert indicator.status == READY
    assert not indicator.reset_pending
    assert [s.label for s in changes] == ["Live: update", "Ready"]


@pytest.mark.asyncio
async def test_back_to_back_flashes_do_not_flicker() -> None:
    changes: list[Status] = []
    indicator = StatusIndicator(reset_delay=0.2, on_change=changes.append)

    indicator.flash("Live: update")
    await asyncio.sleep(0.15)
    indicator.flash("Live: delete")
    await asyncio.sleep(0.15)

    # The first reset would have fired by now had it not been cancelled.
    assert [s.label for s in changes] == ["Live: update", "Live: delete"]

    await asyncio.sleep(0.2)
    assert indicator.status == READY


@pytest.mark.asyncio
async def test_set_cancels_pending_reset() -> None:
    indicator = StatusIndicator(reset_delay=0.01)
    indicator.flash("Success")
    indicator.set("Error")
    await asyncio.sleep(0.05)
    assert indicator.status == Status("Error", False)


@pytest.mark.asyncio
async def test_close_drops_pending_reset() -> None:
    indicator = StatusIndicator(reset_delay=0.01)
    indicator.flash("Success")
    indicator.close()
    await asyncio.sleep(0.05)
    assert indicator.status.label == "Success"
