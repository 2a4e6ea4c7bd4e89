# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Declaration names for schema fields.

    from docmodels import types

    schema = {
        "email": types.String(pk=True),
        "admin": types.Boolean(default=False),
        "role": types.Enum(["reader", "editor"]),
    }
"""

from .fields import (
    AnyType,
    ArrayType,
    BaseType,
    BooleanType,
    DateType,
    EnumType,
    NumberType,
    ObjectType,
    StringType,
)

Base = BaseType
String = StringType
Number = NumberType
Boolean = BooleanType
Date = DateType
Object = ObjectType
Array = ArrayType
Enum = EnumType
Any = AnyType

__all__ = (
    "Any",
    "AnyType",
    "Array",
    "ArrayType",
    "Base",
    "BaseType",
    "Boolean",
    "BooleanType",
    "Date",
    "DateType",
    "Enum",
    "EnumType",
    "Number",
    "NumberType",
    "Object",
    "ObjectType",
    "String",
    "StringType",
)
