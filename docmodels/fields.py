# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Field types: how a value is read, stored, sanitized and validated.

A field type is declared once per schema entry and shared by every
instance of the model, so it never holds per-instance state. It reads and
writes through the instance's ``values`` mapping and flips its ``dirty``
flag on write.
"""

from __future__ import annotations

import copy
import math
from collections.abc import Callable, Sequence
from numbers import Rational, Real
from typing import TYPE_CHECKING, Any, ClassVar

import pydantic
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ._errors import (
    ConfigurationError,
    CustomValidationError,
    RequiredError,
    ValidationError,
)
from ._sentinel import Undefined, is_absent
from ._utils import call_hook, now_ms, to_datetime, to_timestamp

if TYPE_CHECKING:
    from .model import Model

__all__ = (
    "AnyType",
    "ArrayType",
    "BaseType",
    "BooleanType",
    "DateType",
    "EnumType",
    "FieldOptions",
    "NumberType",
    "ObjectType",
    "StringType",
)


# --------------------------------------------------------------------------- #
# options                                                                     #
# --------------------------------------------------------------------------- #
class FieldOptions(BaseModel):
    """Options every field type understands."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
        populate_by_name=True,
    )

    required: bool = False
    default: Any = Undefined
    pk: bool = Field(
        default=False, validation_alias=AliasChoices("pk", "primary_key")
    )
    validate_: Callable[..., Any] | None = Field(
        default=None, alias="validate"
    )
    sanitize: Callable[..., Any] | None = None


class NumberOptions(FieldOptions):
    integer: bool = False


class DateOptions(FieldOptions):
    auto: bool = False


class EnumOptions(FieldOptions):
    values: tuple[Any, ...]


# --------------------------------------------------------------------------- #
# base type                                                                   #
# --------------------------------------------------------------------------- #
class BaseType:
    """Untyped field: no kind check, only ``required`` and user hooks."""

    options_class: ClassVar[type[FieldOptions]] = FieldOptions

    __slots__ = ("options",)

    def __init__(self, options: dict[str, Any] | None = None, /, **kw: Any):
        opts = {**(options or {}), **kw}
        try:
            self.options = self.options_class.model_validate(opts)
        except pydantic.ValidationError as e:
            raise ConfigurationError(
                f"Invalid options for {type(self).__name__}: {e}",
                details={"type": type(self).__name__, "options": opts},
                cause=e,
            ) from e

    @property
    def is_primary_key(self) -> bool:
        return self.options.pk

    @property
    def required(self) -> bool:
        return self.options.required

    @property
    def default(self) -> Any:
        return self.options.default

    def read(self, inst: Model, key: str) -> Any:
        val = inst.values.get(key, Undefined)
        if val is Undefined:
            # mutable defaults must not be shared between instances
            val = copy.deepcopy(self.options.default)
        return val

    def write(self, inst: Model, key: str, val: Any) -> None:
        inst.values[key] = val
        inst.dirty = True

    async def validate(self, inst: Model, key: str) -> bool:
        val = self.read(inst, key)

        # Required is checked before sanitize, so sanitize can never turn a
        # missing value into a present one.
        if is_absent(val):
            # Primary keys are never required for validation.
            if self.options.required and not self.options.pk:
                raise RequiredError(key)
            return True

        if self.options.sanitize is not None:
            val = await call_hook(self.options.sanitize, val, inst)

        self.check(val)

        if self.options.validate_ is not None:
            if not await call_hook(self.options.validate_, val, inst):
                raise CustomValidationError(val)

        return True

    def check(self, val: Any) -> None:
        """Kind specific check, raises ``ValidationError`` on mismatch."""

    def __str__(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        opts = self.options.model_dump(
            exclude_defaults=True, by_alias=True
        )
        return f"{type(self).__name__}({opts})"


# --------------------------------------------------------------------------- #
# kinds                                                                       #
# --------------------------------------------------------------------------- #
class StringType(BaseType):
    __slots__ = ()

    def check(self, val: Any) -> None:
        if not isinstance(val, str):
            raise ValidationError(val, self)


class NumberType(BaseType):
    options_class = NumberOptions
    __slots__ = ()

    def check(self, val: Any) -> None:
        if isinstance(val, bool) or not isinstance(val, Real):
            raise ValidationError(val, self)
        if isinstance(val, Rational):
            # exact, never converted to float: always finite
            if self.options.integer and val.denominator != 1:
                raise ValidationError(
                    val, self, f"'{val}' is not a valid integer."
                )
            return
        if not math.isfinite(val):
            raise ValidationError(val, self)
        if self.options.integer and not float(val).is_integer():
            raise ValidationError(
                val, self, f"'{val}' is not a valid integer."
            )


class BooleanType(BaseType):
    __slots__ = ()

    def check(self, val: Any) -> None:
        if not isinstance(val, bool):
            raise ValidationError(val, self)


class DateType(BaseType):
    """Date field, stored as epoch milliseconds and read as a UTC datetime."""

    options_class = DateOptions
    __slots__ = ()

    def read(self, inst: Model, key: str) -> Any:
        ts = super().read(inst, key)
        if ts is Undefined and self.options.auto:
            ts = now_ms()
        ms = to_timestamp(ts)
        return None if ms is None else to_datetime(ms)

    def write(self, inst: Model, key: str, val: Any) -> None:
        if is_absent(val):
            super().write(inst, key, None)
            return
        ts = to_timestamp(val)
        # An invalid instant never overwrites the stored value.
        if ts is not None:
            super().write(inst, key, ts)

    async def validate(self, inst: Model, key: str) -> bool:
        # read() hides a stored value it cannot coerce as None, look at the
        # raw value so it fails instead of passing as absent.
        raw = inst.values.get(key, Undefined)
        if not is_absent(raw) and to_timestamp(raw) is None:
            raise ValidationError(raw, self)
        return await super().validate(inst, key)

    def check(self, val: Any) -> None:
        if to_timestamp(val) is None:
            raise ValidationError(val, self)


class ObjectType(BaseType):
    __slots__ = ()

    def check(self, val: Any) -> None:
        if not isinstance(val, dict):
            raise ValidationError(val, self)


class ArrayType(BaseType):
    __slots__ = ()

    def check(self, val: Any) -> None:
        if not isinstance(val, (list, tuple)):
            raise ValidationError(val, self)


class EnumType(BaseType):
    options_class = EnumOptions
    __slots__ = ()

    def __init__(
        self,
        values: Sequence[Any] | dict[str, Any] | None = None,
        /,
        **kw: Any,
    ):
        # EnumType(["a", "b"]) is shorthand for EnumType(values=["a", "b"])
        if values is not None and not isinstance(values, dict):
            kw.setdefault("values", values)
            values = None
        super().__init__(values, **kw)

    @property
    def values(self) -> tuple[Any, ...]:
        return self.options.values

    def check(self, val: Any) -> None:
        if val not in self.options.values:
            choices = ", ".join(str(v) for v in self.options.values)
            raise ValidationError(
                val, self, f"'{val}' must be one of: {choices}"
            )


class AnyType(BaseType):
    __slots__ = ()

