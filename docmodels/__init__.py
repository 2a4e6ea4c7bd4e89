# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging

from . import _errors as errors
from . import types as types
from ._sentinel import Undefined
from .config import DocModelSettings, settings
from .drivers import Driver, JsonFileDriver, MemoryDriver
from .factory import define
from .model import Model, ModelConfig
from .schema import compile_schema
from .version import __version__

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = (
    "__version__",
    "DocModelSettings",
    "Driver",
    "JsonFileDriver",
    "MemoryDriver",
    "Model",
    "ModelConfig",
    "Undefined",
    "compile_schema",
    "define",
    "errors",
    "logger",
    "settings",
    "types",
)
