# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""The storage contract a model consumes.

A *driver* persists plain records (``dict``) keyed by primary key. The
model runtime only ever talks to this protocol; where and how the records
live is entirely up to the implementation.

Predicates
----------
``filter`` and ``remove`` take a *predicate*, one of:

* a mapping - matches records containing equal values for every key
  (nested mappings match partially);
* a callable ``record -> bool``;
* ``None`` - matches every record.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol, Union, runtime_checkable

__all__ = ("Deletable", "Driver", "Predicate", "Queryable", "Record")

Record = dict[str, Any]
Predicate = Union[Mapping[str, Any], Callable[[Record], bool], None]


@runtime_checkable
class Driver(Protocol):
    """Asynchronous key/record store.

    Every method may raise; the model runtime lets such errors propagate to
    its caller unchanged.
    """

    async def get(self, pk: Any) -> Record | list[Record] | None:
        """Return the record stored under ``pk``, or ``None``.

        A list result signals that ``pk`` resolved to several records.
        """
        ...

    async def get_all(self) -> list[Record]: ...

    async def set(self, pk: Any, record: Record) -> Any:
        """Store ``record`` under ``pk`` and return the effective key.

        When ``pk`` is ``None`` the driver generates one. A driver may also
        accept a keyword-only ``key_field``; the model then passes the name
        of its primary key field and the driver stores the effective key in
        the record under that field.
        """
        ...

    async def filter(self, predicate: Predicate) -> list[Record]: ...

    async def remove(self, predicate: Predicate) -> None: ...

    async def remove_all(self) -> None: ...


@runtime_checkable
class Queryable(Protocol):
    """Optional capability: run an arbitrary function over the raw store.

    ``func`` may be a coroutine function; its result is awaited.
    """

    async def query(self, func: Callable[[dict[Any, Record]], Any]) -> Any: ...


@runtime_checkable
class Deletable(Protocol):
    """Optional capability: remove the record stored under a key.

    Reaches records that do not carry their key as a field, which a
    predicate passed to ``remove`` cannot match.
    """

    async def delete(self, pk: Any) -> None: ...
