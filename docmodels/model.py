# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Model runtime: instance state and the operations that move it.

An instance is either *new* (``exists`` is False) or *persisted*
(``exists`` is True); ``dirty`` is advisory and only records whether the
values changed since they were last loaded or saved.

    new --save()--> persisted --delete()--> new
    persisted --pk assigned--> new
    any --reload()--> persisted
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

import orjson
from typing_extensions import Self

from ._errors import (
    ConfigurationError,
    DocumentNotFoundError,
    MultipleDocumentsError,
    NotImplementedError,
    PreconditionError,
)
from ._sentinel import is_absent
from ._utils import accepts_keyword, strip_reserved
from .drivers.base import Deletable, Driver, Predicate, Queryable, Record
from .schema import CompiledSchema, compile_schema

__all__ = ("Model", "ModelConfig", "ModelMeta")


@dataclass(frozen=True, slots=True)
class ModelConfig:
    """Everything instances of one model share. Built once, never mutated."""

    name: str
    schema: CompiledSchema | None = None
    driver: Driver | None = None


class ModelMeta(type):
    """Exposes a model's configuration as read-only class attributes."""

    @property
    def model_name(cls) -> str:
        cfg = cls._config
        return cfg.name if cfg else cls.__name__

    @property
    def schema(cls) -> Mapping[str, Any] | None:
        cfg = cls._config
        return cfg.schema.schema if cfg and cfg.schema else None

    @property
    def driver(cls) -> Driver | None:
        cfg = cls._config
        return cfg.driver if cfg else None

    @property
    def pk_field(cls) -> str | None:
        cfg = cls._config
        return cfg.schema.pk if cfg and cfg.schema else None


class Model(metaclass=ModelMeta):
    """Base class of every model.

    Declare a model with :func:`docmodels.define` or by subclassing::

        class Author(Model, schema={"email": types.String(pk=True)},
                     driver=MemoryDriver()):
            pass

    Schema fields are read and written as attributes; each access goes
    through the field's accessor, which keeps ``values`` the only copy of
    the data.
    """

    _config: ClassVar[ModelConfig | None] = None

    __slots__ = ("_values", "_dirty", "_exists")

    def __init_subclass__(
        cls,
        *,
        schema: Mapping[str, Any] | None = None,
        driver: Driver | None = None,
        name: str | None = None,
        **kw: Any,
    ):
        super().__init_subclass__(**kw)
        if schema is None and driver is None and name is None:
            return  # inherit the parent's configuration as is

        parent = cls._config
        compiled = (
            compile_schema(schema, reserved=dir(cls))
            if schema is not None
            else (parent.schema if parent else None)
        )
        if driver is None and parent is not None:
            driver = parent.driver
        if driver is not None and not isinstance(driver, Driver):
            raise ConfigurationError(
                f"{type(driver).__name__} does not implement the driver interface.",
                details={"driver": type(driver).__name__},
            )
        cls._config = ModelConfig(name or cls.__name__, compiled, driver)

    def __init__(self, initial: Mapping[str, Any] | None = None, /, **fields):
        cfg = type(self)._config
        if cfg is None or cfg.schema is None:
            raise ConfigurationError("A schema must be set on the model.")
        if cfg.driver is None:
            raise ConfigurationError("A driver must be set on the model.")

        object.__setattr__(self, "_values", {})
        object.__setattr__(self, "_dirty", True)
        object.__setattr__(self, "_exists", False)
        self._assign({**(initial or {}), **fields})

    # --------------------------------------------------------------------- #
    # field access                                                          #
    # --------------------------------------------------------------------- #
    def __getattr__(self, name: str) -> Any:
        # only reached when regular lookup fails: schema fields and constants
        cfg = type(self)._config
        if cfg is not None and cfg.schema is not None:
            if (acc := cfg.schema.fields.get(name)) is not None:
                return acc.read(self)
            if name in cfg.schema.constants:
                return cfg.schema.constants[name]
        raise AttributeError(
            f"'{type(self).__name__}' object has no attribute '{name}'"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_"):
            schema = self._schema()
            if (acc := schema.fields.get(name)) is not None:
                acc.write(self, value)
                return
            if name in schema.constants:
                raise AttributeError(
                    f"'{name}' is a constant of {type(self).__name__} and cannot be assigned"
                )
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        if (acc := self._schema().fields.get(name)) is not None:
            acc.clear(self)
            return
        object.__delattr__(self, name)

    def _assign(self, data: Mapping[str, Any]) -> None:
        fields = self._schema().fields
        for key, val in data.items():
            if (acc := fields.get(key)) is not None:
                acc.write(self, val)
            else:
                # not part of the schema: kept verbatim, never validated
                self._values[key] = val

    @classmethod
    def _schema(cls) -> CompiledSchema:
        return cls._config.schema

    # --------------------------------------------------------------------- #
    # state                                                                 #
    # --------------------------------------------------------------------- #
    @property
    def values(self) -> dict[str, Any]:
        """Raw stored values, the single source of truth for every field."""
        return self._values

    @property
    def dirty(self) -> bool:
        return self._dirty

    @dirty.setter
    def dirty(self, val: bool) -> None:
        self._dirty = bool(val)

    @property
    def exists(self) -> bool:
        return self._exists

    @exists.setter
    def exists(self, val: bool) -> None:
        self._exists = bool(val)

    @property
    def pk(self) -> Any:
        return self._schema().pk_accessor.read(self)

    @pk.setter
    def pk(self, val: Any) -> None:
        self._schema().pk_accessor.write(self, val)

    @pk.deleter
    def pk(self) -> None:
        self._schema().pk_accessor.clear(self)

    # --------------------------------------------------------------------- #
    # instance API                                                          #
    # --------------------------------------------------------------------- #
    async def validate(self) -> bool:
        """Validate every field in declaration order.

        Raises:
            RequiredError: a required field is absent.
            ValidationError: a value does not match its field type.
            CustomValidationError: a user ``validate`` function said no.
        """
        for acc in self._schema().fields.values():
            await acc.validate(self)
        return True

    async def save(self) -> Self:
        """Validate, then store the values under the current primary key.

        A key generated by the driver is written back to the primary key
        field, and stored in the record too when the driver accepts
        ``key_field``. Afterwards the instance exists and is clean.
        """
        await self.validate()

        cls = type(self)
        driver = cls.driver
        pk = self.pk
        kw = {}
        if accepts_keyword(driver.set, "key_field"):
            kw["key_field"] = cls.pk_field
        key = await driver.set(
            None if is_absent(pk) else pk, copy.deepcopy(self._values), **kw
        )
        self._values[cls.pk_field] = key
        self._exists = True
        self._dirty = False
        return self

    async def reload(self) -> Self:
        """Replace the values with the stored record for the current key.

        Raises:
            PreconditionError: the instance has no primary key.
            DocumentNotFoundError: nothing is stored under the key.
            MultipleDocumentsError: the key resolved to several records.
        """
        cls = type(self)
        pk = self.pk
        if is_absent(pk):
            raise PreconditionError(
                "Cannot reload a record without a primary key.",
                details={"model": cls.model_name},
            )
        record = cls._single(await cls.driver.get(pk), pk)

        self._values = {}
        self._assign(record)
        self._values.setdefault(cls.pk_field, pk)
        self._exists = True
        self._dirty = False
        return self

    async def delete(self) -> None:
        """Remove the stored record and clear the primary key.

        Drivers with a ``delete(pk)`` method remove by key, others by a
        ``{pk_field: pk}`` predicate.

        Raises:
            PreconditionError: the instance was never saved or loaded.
        """
        cls = type(self)
        if not self._exists:
            raise PreconditionError(
                "Cannot delete an unsaved record.",
                details={"model": cls.model_name},
            )
        driver = cls.driver
        if isinstance(driver, Deletable):
            await driver.delete(self.pk)
        else:
            await driver.remove({cls.pk_field: self.pk})
        del self.pk

    def duplicate(self) -> Self:
        """Unsaved copy of this instance, without its primary key."""
        values = copy.deepcopy(self._values)
        values.pop(type(self).pk_field, None)
        return type(self)(values)

    def serialize(self) -> dict[str, Any]:
        """Plain copy of the values, ``$``-prefixed keys removed at any depth."""
        return strip_reserved(copy.deepcopy(self._values))

    to_dict = serialize

    def to_json(self, *, pretty: bool = False) -> str:
        option = orjson.OPT_NON_STR_KEYS
        if pretty:
            option |= orjson.OPT_INDENT_2
        return orjson.dumps(self.serialize(), option=option).decode()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.serialize()!r})"

    # --------------------------------------------------------------------- #
    # class API                                                             #
    # --------------------------------------------------------------------- #
    @classmethod
    def _driver(cls, operation: str) -> Driver:
        if cls._config is None or cls._config.driver is None:
            raise NotImplementedError(f"{cls.__name__}.{operation}")
        return cls._config.driver

    @classmethod
    def _single(cls, results: Any, pk: Any) -> Record:
        if isinstance(results, (list, tuple)):
            raise MultipleDocumentsError(pk, cls.model_name)
        if not results:
            raise DocumentNotFoundError(pk, cls.model_name)
        return results

    @classmethod
    def _materialize(cls, record: Mapping[str, Any], pk: Any = None) -> Self:
        inst = cls(record)
        if pk is not None:
            inst._values.setdefault(cls.pk_field, pk)
        inst._dirty = False
        inst._exists = True
        return inst

    @classmethod
    async def get(cls, pk: Any) -> Self:
        """Load the instance stored under ``pk``.

        Raises:
            DocumentNotFoundError: nothing is stored under ``pk``.
            MultipleDocumentsError: ``pk`` resolved to several records.
        """
        results = await cls._driver("get").get(pk)
        return cls._materialize(cls._single(results, pk), pk)

    @classmethod
    async def all(cls) -> list[Self]:
        records = await cls._driver("all").get_all()
        return [cls._materialize(r) for r in records]

    @classmethod
    async def filter(cls, predicate: Predicate = None) -> list[Self]:
        """Instances whose records match ``predicate``.

        ``predicate`` is a mapping of field values to match, or a callable
        receiving each raw record.
        """
        records = await cls._driver("filter").filter(predicate)
        return [cls._materialize(r) for r in records]

    @classmethod
    async def query(cls, func: Callable[[dict[Any, Record]], Any]) -> Any:
        """Run ``func`` over the driver's raw store.

        A list of records returned by ``func`` comes back as instances,
        anything else is returned untouched.
        """
        driver = cls._driver("query")
        if not isinstance(driver, Queryable):
            raise NotImplementedError(f"{cls.__name__}.query")
        result = await driver.query(func)
        if isinstance(result, (list, tuple)) and all(
            isinstance(r, Mapping) for r in result
        ):
            return [cls._materialize(r) for r in result]
        return result

    @classmethod
    async def remove(cls, predicate: Predicate = None) -> None:
        await cls._driver("remove").remove(predicate)

    @classmethod
    async def remove_all(cls) -> None:
        await cls._driver("remove_all").remove_all()
