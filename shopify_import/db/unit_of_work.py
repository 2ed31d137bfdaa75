"""
Unit of work: compensating rollback for multi-step record writes.

Supabase's table API commits every call on its own, so a record that
needs several writes (uploads, row, follow-ups) registers an undo for
each step. If the block fails, the undos run newest-first and the
original error propagates; if it completes, they are dropped.

    async with UnitOfWork("product 123") as uow:
        uploaded = await provider.upload(...)
        uow.add_compensation(lambda: provider.delete(uploaded["path"]), "delete image")
        await store.create(...)
"""

import logging
from typing import Awaitable, Callable, List, Tuple

logger = logging.getLogger("unit_of_work")


class UnitOfWork:
    def __init__(self, label: str) -> None:
        self._label = label
        self._compensations: List[Tuple[str, Callable[[], Awaitable[None]]]] = []
        self.committed = False
        self.rolled_back = False

    def add_compensation(self, action: Callable[[], Awaitable[None]], description: str) -> None:
        self._compensations.append((description, action))

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self._compensations.clear()
            self.committed = True
            return False

        logger.info(
            "unit of work rollback label=%s steps=%s error=%s",
            self._label, len(self._compensations), exc,
        )
        for description, action in reversed(self._compensations):
            try:
                await action()
            except Exception as undo_error:
                logger.error(
                    "unit of work compensation failed label=%s step=%s detail=%s",
                    self._label, description, undo_error,
                )
        self._compensations.clear()
        self.rolled_back = True
        return False
