from __future__ import annotations

from typing import Any

import pytest

from graph_repository.session_provider import session_scope


class RecordingSession:
    def __init__(self) -> None:
        self.calls: list[str] = []

    async def rollback(self) -> None:
        self.calls.append('rollback')

    async def close(self) -> None:
        self.calls.append('close')


@pytest.mark.asyncio
async def test_session_scope_closes_session() -> None:
    s = RecordingSession()
    async with session_scope(lambda: s) as got:  # type: ignore[arg-type]
        assert got is s
    assert s.calls == ['close']


@pytest.mark.asyncio
async def test_session_scope_rolls_back_on_error() -> None:
    """
    < An error inside the scope rolls the session back, closes it and propagates >
    1. Raise inside the scope.
    2. Assert rollback then close, and the error is re-raised.
    """
    s = RecordingSession()

    # 1
    with pytest.raises(KeyError):
        async with session_scope(lambda: s):  # type: ignore[arg-type]
            raise KeyError('boom')

    # 2
    assert s.calls == ['rollback', 'close']


@pytest.mark.asyncio
async def test_session_factory_builds_working_sessions(session_factory: Any, items: Any) -> None:
    from sqlalchemy import text

    async with session_scope(session_factory) as session:
        assert (await session.execute(text('SELECT count(*) FROM item'))).scalar_one() == 3
