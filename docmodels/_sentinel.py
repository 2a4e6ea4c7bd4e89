# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any, Final, Literal, TypeVar, Union

__all__ = (
    "MaybeUndefined",
    "Undefined",
    "UndefinedType",
    "is_absent",
    "is_undefined",
)

T = TypeVar("T")


class _SingletonMeta(type):
    """Metaclass that guarantees exactly one instance per subclass."""

    _cache: dict[type, Any] = {}

    def __call__(cls, *a, **kw):
        if cls not in cls._cache:
            cls._cache[cls] = super().__call__(*a, **kw)
        return cls._cache[cls]


class UndefinedType(metaclass=_SingletonMeta):
    """Sentinel for a field that was never given a value.

    Distinguishes "no default declared" or "missing from the values" from
    an explicit ``None``. Survives copy, deepcopy and pickle as the same
    object.

    Example:
        >>> {"a": 1}.get("b", Undefined) is Undefined
        True
    """

    __slots__ = ()

    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> Literal["Undefined"]:
        return "Undefined"

    def __deepcopy__(self, memo):
        return self

    def __copy__(self):
        return self

    def __reduce__(self):
        """Ensure pickle preservation of singleton identity."""
        return "Undefined"


Undefined: Final = UndefinedType()
"""A field missing from a model's values."""

MaybeUndefined = Union[T, UndefinedType]


def is_undefined(value: Any) -> bool:
    """Check if value is the Undefined sentinel."""
    return isinstance(value, UndefinedType)


def is_absent(value: Any) -> bool:
    """A field value counts as absent when it is undefined or ``None``."""
    return value is None or is_undefined(value)
