from __future__ import annotations

import asyncio
import io

import pytest

from fleetlog.polling.stop import OperatorStopListener


@pytest.mark.asyncio
async def test_stop_key_line_resolves_listener() -> None:
    listener = OperatorStopListener(stream=io.StringIO("hello\n\nC\n"), signals=())

    reason = await asyncio.wait_for(listener.wait(), 1)

    assert reason == "stop key 'C'"


@pytest.mark.asyncio
async def test_other_input_does_not_stop() -> None:
    listener = OperatorStopListener(stream=io.StringIO("x\nstop\n"), signals=())

    with pytest.raises(TimeoutError):
        await asyncio.wait_for(listener.wait(), 0.1)


@pytest.mark.asyncio
async def test_custom_stop_keys() -> None:
    listener = OperatorStopListener(stop_keys="q", stream=io.StringIO("c\nq\n"), signals=())

    assert await asyncio.wait_for(listener.wait(), 1) == "stop key 'q'"
