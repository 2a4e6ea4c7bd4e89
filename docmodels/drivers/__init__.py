# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .base import Deletable, Driver, Predicate, Queryable, Record
from .json_file import JsonFileDriver
from .memory import MemoryDriver

__all__ = (
    "Deletable",
    "Driver",
    "JsonFileDriver",
    "MemoryDriver",
    "Predicate",
    "Queryable",
    "Record",
)
