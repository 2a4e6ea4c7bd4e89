# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ._errors import ConfigurationError
from .drivers.base import Driver
from .fields import BaseType
from .model import Model, ModelMeta

__all__ = ("DEFAULT_MODEL_NAME", "define")

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "DocModel"


def _with_primary_key(
    schema: Mapping[str, Any], field: str
) -> dict[str, Any]:
    entry = schema.get(field)
    if not isinstance(entry, BaseType):
        raise ConfigurationError(
            f"Primary key '{field}' must be a typed field of the schema.",
            details={"field": field},
        )
    others = [
        k
        for k, v in schema.items()
        if k != field and isinstance(v, BaseType) and v.is_primary_key
    ]
    if others:
        raise ConfigurationError(
            f"Primary key '{field}' conflicts with pk field(s) {others}.",
            details={"field": field, "conflicts": others},
        )
    opts = dict(entry.options)
    opts["pk"] = True
    return {**schema, field: type(entry)(opts)}


def define(
    name: str | None = None,
    *,
    schema: Mapping[str, Any],
    driver: Driver | None = None,
    primary_key: str | None = None,
) -> type[Model]:
    """Create a model class from a schema and a driver.

    Args:
        name: Class name, used only in ``repr`` and error messages.
        schema: Field name to field type (``types.String()``, ...) or to a
            plain value shared by all instances as a constant.
        driver: Storage driver; without one instances cannot be created.
        primary_key: Name of the field to use as primary key, instead of
            flagging it with ``pk=True``.

    Returns:
        A new :class:`Model` subclass.
    """
    name = name or DEFAULT_MODEL_NAME
    if primary_key is not None:
        schema = _with_primary_key(schema, primary_key)

    cls = ModelMeta(
        name,
        (Model,),
        {"__slots__": (), "__qualname__": name, "__module__": __name__},
        schema=schema,
        driver=driver,
        name=name,
    )
    logger.debug(
        "Defined model %s (pk=%r, fields=%s, driver=%s)",
        name,
        cls.pk_field,
        list(cls._config.schema.fields),
        type(driver).__name__ if driver is not None else None,
    )
    return cls
