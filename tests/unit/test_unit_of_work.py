"""
Unit tests for UnitOfWork: compensations run newest-first on failure only.
"""
import pytest
from unittest.mock import AsyncMock

from shopify_import.db.unit_of_work import UnitOfWork


pytestmark = pytest.mark.unit


class TestUnitOfWork:

    @pytest.mark.asyncio
    async def test_success_drops_compensations(self):
        undo = AsyncMock()

        async with UnitOfWork("ok") as uow:
            uow.add_compensation(undo, "undo")

        undo.assert_not_awaited()
        assert uow.committed is True
        assert uow.rolled_back is False

    @pytest.mark.asyncio
    async def test_failure_runs_compensations_in_reverse_and_reraises(self):
        calls = []

        def _step(name):
            async def _undo():
                calls.append(name)
            return _undo

        with pytest.raises(ValueError, match="write failed"):
            async with UnitOfWork("failing") as uow:
                uow.add_compensation(_step("first"), "first")
                uow.add_compensation(_step("second"), "second")
                raise ValueError("write failed")

        assert calls == ["second", "first"]
        assert uow.rolled_back is True
        assert uow.committed is False

    @pytest.mark.asyncio
    async def test_failing_compensation_does_not_stop_others(self):
        later = AsyncMock(side_effect=RuntimeError("cannot undo"))
        earlier = AsyncMock()

        with pytest.raises(KeyError):
            async with UnitOfWork("partial") as uow:
                uow.add_compensation(earlier, "earlier")
                uow.add_compensation(later, "later")
                raise KeyError("row")

        later.assert_awaited_once()
        earlier.assert_awaited_once()
