# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import inspect
import math
import time
import uuid
from collections.abc import Callable, Mapping
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from ._sentinel import Undefined, is_absent

__all__ = (
    "EPOCH",
    "RESERVED_PREFIX",
    "accepts_keyword",
    "call_hook",
    "generate_key",
    "is_coro_func",
    "matches",
    "now_ms",
    "strip_reserved",
    "to_datetime",
    "to_timestamp",
)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

RESERVED_PREFIX = "$"
"""Keys starting with this prefix are internal bookkeeping, never serialized."""


@lru_cache(maxsize=None)
def _is_coro_func(func: Callable[..., Any]) -> bool:
    if inspect.iscoroutinefunction(func):
        return True

    # callable object with an async __call__
    call = getattr(func, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


def is_coro_func(func: Callable[..., Any]) -> bool:
    """Check if a function is a coroutine function, with caching for performance."""
    try:
        return _is_coro_func(func)
    except TypeError:  # unhashable callable
        return _is_coro_func.__wrapped__(func)


@lru_cache(maxsize=None)
def _wants_instance(func: Callable[..., Any]) -> bool:
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    positional = 0
    for p in params:
        if p.kind is p.VAR_POSITIONAL:
            return True
        if (
            p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
            and p.default is p.empty
        ):
            positional += 1
    return positional >= 2


def accepts_keyword(func: Callable[..., Any], name: str) -> bool:
    """Whether ``func`` can be called with the keyword argument ``name``."""
    try:
        params = inspect.signature(func).parameters
    except (TypeError, ValueError):
        return False
    param = params.get(name)
    if param is not None:
        return param.kind in (param.KEYWORD_ONLY, param.POSITIONAL_OR_KEYWORD)
    return any(p.kind is p.VAR_KEYWORD for p in params.values())


async def call_hook(func: Callable[..., Any], value: Any, inst: Any) -> Any:
    """Call a user ``sanitize``/``validate`` hook.

    The model instance is passed as second argument only to hooks that
    require two positional arguments, so ``lambda v: ...`` and
    ``str.strip`` work as well as ``def check(value, inst): ...``.
    Coroutine hooks are awaited.
    """
    try:
        wants_inst = _wants_instance(func)
    except TypeError:
        wants_inst = _wants_instance.__wrapped__(func)
    args = (value, inst) if wants_inst else (value,)
    if is_coro_func(func):
        return await func(*args)
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


# --------------------------------------------------------------------------- #
# dates                                                                       #
# --------------------------------------------------------------------------- #
def now_ms() -> int:
    return time.time_ns() // 1_000_000


def to_timestamp(value: Any) -> int | None:
    """Coerce ``value`` to epoch milliseconds, or ``None`` if it is not a
    valid instant.

    Accepts aware or naive (taken as UTC) datetimes, dates (midnight UTC),
    ISO-8601 strings and numeric millisecond timestamps.
    """
    if is_absent(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - EPOCH) // _ONE_MS
    if isinstance(value, date):
        return to_timestamp(datetime(value.year, value.month, value.day))
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        ts = int(value)
        return ts if to_datetime(ts) is not None else None
    if isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"  # fromisoformat only takes Z on 3.11+
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return to_timestamp(parsed)
    return None


def to_datetime(ts: int) -> datetime | None:
    try:
        return EPOCH + timedelta(milliseconds=ts)
    except OverflowError:
        return None


# --------------------------------------------------------------------------- #
# records                                                                     #
# --------------------------------------------------------------------------- #
def matches(predicate: Any, record: Any) -> bool:
    """Evaluate a driver predicate against one stored record.

    ``None`` matches everything, a callable is called with the record, and
    a mapping matches when every key is present in the record with an equal
    value (nested mappings are matched partially, recursively).
    """
    if predicate is None:
        return True
    if callable(predicate):
        return bool(predicate(record))
    if isinstance(predicate, Mapping):
        if not isinstance(record, Mapping):
            return False
        for key, expected in predicate.items():
            actual = record.get(key, Undefined)
            if actual is Undefined:
                return False
            if isinstance(expected, Mapping):
                if not matches(expected, actual):
                    return False
            elif actual != expected:
                return False
        return True
    raise TypeError(
        f"Predicate must be a mapping, a callable or None, got {type(predicate).__name__}"
    )


def strip_reserved(value: Any) -> Any:
    """Copy ``value`` dropping every ``$``-prefixed key at any depth."""
    if isinstance(value, Mapping):
        return {
            k: strip_reserved(v)
            for k, v in value.items()
            if not (isinstance(k, str) and k.startswith(RESERVED_PREFIX))
        }
    if isinstance(value, (list, tuple)):
        stripped = [strip_reserved(v) for v in value]
        return stripped if isinstance(value, list) else tuple(stripped)
    return value


def generate_key(strategy: str = "uuid") -> str:
    if strategy == "timestamp":
        return str(now_ms())
    return uuid.uuid4().hex
