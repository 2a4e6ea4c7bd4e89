# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Turns a declared schema into the accessor table a model consults.

Every typed entry gets a :class:`FieldAccessor` (read / write / validate
bound to its name); plain entries become shared constants. The table is
built once, when the model is defined, and never changes afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ._errors import ConfigurationError
from .fields import BaseType, StringType

if TYPE_CHECKING:
    from .model import Model

__all__ = (
    "DEFAULT_PK",
    "CompiledSchema",
    "FieldAccessor",
    "compile_schema",
)

DEFAULT_PK = "id"


@dataclass(frozen=True, slots=True)
class FieldAccessor:
    name: str
    type: BaseType
    is_pk: bool = False

    def read(self, inst: Model) -> Any:
        return self.type.read(inst, self.name)

    def write(self, inst: Model, val: Any) -> None:
        self.type.write(inst, self.name, val)
        if self.is_pk:
            # a new key means a different, unsaved record
            inst.dirty = True
            inst.exists = False

    def clear(self, inst: Model) -> None:
        inst.values.pop(self.name, None)
        inst.dirty = True
        if self.is_pk:
            inst.exists = False

    async def validate(self, inst: Model) -> bool:
        return await self.type.validate(inst, self.name)


@dataclass(frozen=True, slots=True)
class CompiledSchema:
    schema: Mapping[str, Any]
    """Declared entries, including a synthesized primary key."""

    fields: Mapping[str, FieldAccessor]
    constants: Mapping[str, Any]
    pk: str

    def __contains__(self, name: str) -> bool:
        return name in self.fields or name in self.constants

    @property
    def pk_accessor(self) -> FieldAccessor:
        return self.fields[self.pk]


def _check_name(name: Any, reserved: frozenset[str]) -> None:
    if not isinstance(name, str) or not name.isidentifier():
        raise ConfigurationError(
            f"Schema field name {name!r} is not a valid identifier.",
            details={"field": name},
        )
    if name.startswith("_") or name in reserved:
        raise ConfigurationError(
            f"Schema field name '{name}' is reserved by the model.",
            details={"field": name},
        )


def compile_schema(
    schema: Mapping[str, Any], reserved: Iterable[str] = ()
) -> CompiledSchema:
    """Build the accessor table for ``schema``.

    The first field declared with ``pk=True`` becomes the primary key; when
    there is none, a ``StringType(pk=True)`` named ``id`` is added. The
    input mapping is left untouched.
    """
    if not isinstance(schema, Mapping):
        raise ConfigurationError(
            f"Schema must be a mapping, got {type(schema).__name__}."
        )

    reserved = frozenset(reserved)
    declared: dict[str, Any] = {}
    fields: dict[str, FieldAccessor] = {}
    constants: dict[str, Any] = {}
    pk: str | None = None

    for name, entry in schema.items():
        _check_name(name, reserved)
        declared[name] = entry
        if isinstance(entry, BaseType):
            is_pk = pk is None and entry.is_primary_key
            if is_pk:
                pk = name
            fields[name] = FieldAccessor(name, entry, is_pk)
        else:
            constants[name] = entry

    if pk is None:
        if DEFAULT_PK in declared:
            raise ConfigurationError(
                f"'{DEFAULT_PK}' is declared but not a primary key field; "
                "mark a field with pk=True.",
                details={"field": DEFAULT_PK},
            )
        pk = DEFAULT_PK
        entry = StringType(pk=True)
        declared[pk] = entry
        fields[pk] = FieldAccessor(pk, entry, True)

    return CompiledSchema(
        schema=MappingProxyType(declared),
        fields=MappingProxyType(fields),
        constants=MappingProxyType(constants),
        pk=pk,
    )
