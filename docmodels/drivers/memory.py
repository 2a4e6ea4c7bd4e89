# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""MemoryDriver - keeps records in a plain dict, for tests and prototyping."""

from __future__ import annotations

import copy
import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from .._utils import generate_key, matches
from ..config import settings
from .base import Predicate, Record

__all__ = ("MemoryDriver",)

logger = logging.getLogger(__name__)


class MemoryDriver:
    """In-process driver backed by :attr:`db`, a ``{pk: record}`` dict.

    ``db`` is public so callers can seed or inspect it directly. Records are
    copied on the way in and out, so neither side can alias the other.
    """

    def __init__(
        self,
        db: dict[Any, Record] | None = None,
        *,
        key_strategy: str | None = None,
    ):
        self.db: dict[Any, Record] = db if db is not None else {}
        self.key_strategy = key_strategy or settings.KEY_STRATEGY

    def _gen_key(self) -> str:
        key = generate_key(self.key_strategy)
        while key in self.db:
            key = generate_key(self.key_strategy)
        logger.debug("Generated key %r", key)
        return key

    def _records(self):
        return (r for r in self.db.values() if isinstance(r, Mapping))

    # --------------------------------------------------------------------- #
    # driver API                                                            #
    # --------------------------------------------------------------------- #
    async def get(self, pk: Any) -> Record | list[Record] | None:
        return copy.deepcopy(self.db.get(pk))

    async def get_all(self) -> list[Record]:
        return [copy.deepcopy(r) for r in self._records()]

    async def set(
        self, pk: Any, record: Record, *, key_field: str | None = None
    ) -> Any:
        if pk is None:
            pk = self._gen_key()
        record = copy.deepcopy(dict(record))
        if key_field:
            record[key_field] = pk
        self.db[pk] = record
        return pk

    async def filter(self, predicate: Predicate) -> list[Record]:
        return [
            copy.deepcopy(r) for r in self._records() if matches(predicate, r)
        ]

    async def query(self, func: Callable[[dict[Any, Record]], Any]) -> Any:
        result = func(copy.deepcopy(self.db))
        if inspect.isawaitable(result):
            result = await result
        return result

    async def remove(self, predicate: Predicate) -> None:
        doomed = [
            pk
            for pk, r in self.db.items()
            if isinstance(r, Mapping) and matches(predicate, r)
        ]
        for pk in doomed:
            del self.db[pk]
        logger.debug("Removed %d record(s)", len(doomed))

    async def delete(self, pk: Any) -> None:
        if self.db.pop(pk, None) is not None:
            logger.debug("Deleted record %r", pk)

    async def remove_all(self) -> None:
        self.db.clear()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(records={len(self.db)})"
