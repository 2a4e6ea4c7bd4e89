# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""JsonFileDriver - one JSON document per model, rewritten on every change.

Requires: orjson, anyio
"""

from __future__ import annotations

import copy
import inspect
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import anyio
import orjson

from .._errors import ConfigurationError, WriteDatabaseError
from .._utils import generate_key, matches
from ..config import settings
from .base import Predicate, Record

__all__ = ("JsonFileDriver",)

logger = logging.getLogger(__name__)


class JsonFileDriver:
    """Driver persisting ``{pk: record}`` to ``<root>/<namespace>/<name>.json``.

    The file is read lazily on first use and written back in full after
    each mutation (through a temporary file, then renamed over the
    original). Keys are stored as strings, JSON objects allow nothing else.

    Args:
        name: Database name, used as the file stem.
        root_path: Directory holding the databases, ``settings.DATA_DIR`` by
            default.
        namespace: Optional sub directory grouping related databases.
        pretty: Indent the written JSON, ``settings.PRETTY_PRINT`` by default.
        load_from_disk: Read an existing file on first use.
        write_to_disk: Persist mutations; ``False`` keeps everything in memory.
        key_strategy: ``"uuid"`` or ``"timestamp"`` for generated keys.
    """

    def __init__(
        self,
        name: str,
        *,
        root_path: str | Path | None = None,
        namespace: str | None = None,
        pretty: bool | None = None,
        load_from_disk: bool = True,
        write_to_disk: bool = True,
        key_strategy: str | None = None,
    ):
        if not name or "/" in name or "\\" in name:
            raise ConfigurationError(
                f"Invalid database name: {name!r}", details={"name": name}
            )
        root = Path(root_path) if root_path else settings.DATA_DIR
        if namespace:
            root = root / namespace
        self.name = name
        self.path = root / f"{name}.json"
        self.pretty = settings.PRETTY_PRINT if pretty is None else pretty
        self.load_from_disk = load_from_disk
        self.write_to_disk = write_to_disk
        self.key_strategy = key_strategy or settings.KEY_STRATEGY

        self.values: dict[str, Record] = {}
        self._loaded = False
        self._lock = anyio.Lock()

    # --------------------------------------------------------------------- #
    # persistence                                                           #
    # --------------------------------------------------------------------- #
    async def _load(self) -> None:
        if self._loaded:
            return
        path = anyio.Path(self.path)
        if self.load_from_disk and await path.exists():
            raw = await path.read_bytes()
            try:
                data = orjson.loads(raw) if raw.strip() else {}
            except orjson.JSONDecodeError as e:
                raise ConfigurationError(
                    f"Database file '{self.path}' is not valid JSON.",
                    details={"path": str(self.path)},
                    cause=e,
                ) from e
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"Database file '{self.path}' must hold a JSON object.",
                    details={"path": str(self.path)},
                )
            self.values = data
            logger.debug("Loaded %d record(s) from %s", len(data), self.path)
        self._loaded = True

    async def _commit(self, values: dict[str, Record]) -> None:
        """Persist ``values``, then make them the current store.

        A failed write leaves :attr:`values` as it was.
        """
        await self._sync(values)
        self.values = values

    async def _sync(self, values: dict[str, Record]) -> None:
        if not self.write_to_disk:
            return
        option = orjson.OPT_NON_STR_KEYS
        if self.pretty:
            option |= orjson.OPT_INDENT_2
        path = anyio.Path(self.path)
        tmp = path.with_name(path.name + ".tmp")
        try:
            payload = orjson.dumps(values, option=option)
            await path.parent.mkdir(parents=True, exist_ok=True)
            await tmp.write_bytes(payload)
            await tmp.replace(path)
        except (OSError, orjson.JSONEncodeError) as e:
            raise WriteDatabaseError(e, self.path) from e
        logger.debug("Wrote %d record(s) to %s", len(values), self.path)

    def _gen_key(self) -> str:
        key = generate_key(self.key_strategy)
        while key in self.values:
            key = generate_key(self.key_strategy)
        return key

    def _records(self):
        return (r for r in self.values.values() if isinstance(r, Mapping))

    # --------------------------------------------------------------------- #
    # driver API                                                            #
    # --------------------------------------------------------------------- #
    async def get(self, pk: Any) -> Record | list[Record] | None:
        async with self._lock:
            await self._load()
            return copy.deepcopy(self.values.get(str(pk)))

    async def get_all(self) -> list[Record]:
        async with self._lock:
            await self._load()
            return [copy.deepcopy(r) for r in self._records()]

    async def set(
        self, pk: Any, record: Record, *, key_field: str | None = None
    ) -> Any:
        async with self._lock:
            await self._load()
            if pk is None:
                pk = self._gen_key()
            record = copy.deepcopy(dict(record))
            if key_field:
                record[key_field] = pk
            await self._commit({**self.values, str(pk): record})
            return pk

    async def filter(self, predicate: Predicate) -> list[Record]:
        async with self._lock:
            await self._load()
            return [
                copy.deepcopy(r)
                for r in self._records()
                if matches(predicate, r)
            ]

    async def query(self, func: Callable[[dict[str, Record]], Any]) -> Any:
        async with self._lock:
            await self._load()
            snapshot = copy.deepcopy(self.values)
        # outside the lock, so func may call back into the driver
        result = func(snapshot)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def remove(self, predicate: Predicate) -> None:
        async with self._lock:
            await self._load()
            kept = {
                pk: r
                for pk, r in self.values.items()
                if not (isinstance(r, Mapping) and matches(predicate, r))
            }
            if len(kept) != len(self.values):
                await self._commit(kept)

    async def delete(self, pk: Any) -> None:
        async with self._lock:
            await self._load()
            key = str(pk)
            if key in self.values:
                await self._commit(
                    {k: r for k, r in self.values.items() if k != key}
                )

    async def remove_all(self) -> None:
        async with self._lock:
            await self._load()
            await self._commit({})

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path='{self.path}')"
