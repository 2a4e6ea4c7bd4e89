# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from pathlib import Path
from typing import Any, ClassVar, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ("DocModelSettings", "settings")


class DocModelSettings(BaseSettings, frozen=True):
    """Library settings with environment variable support.

    Every field can be overridden with a ``DOCMODELS_`` prefixed variable,
    e.g. ``DOCMODELS_DATA_DIR=/var/lib/app``.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCMODELS_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    DATA_DIR: Path = Field(
        default=Path("./data/docmodels"),
        description="Root directory of file backed drivers",
    )
    PRETTY_PRINT: bool = Field(
        default=False,
        description="Indent the JSON written by file backed drivers",
    )
    KEY_STRATEGY: Literal["uuid", "timestamp"] = Field(
        default="uuid",
        description="How drivers generate a primary key when none is given",
    )

    # Class variable to store the singleton instance
    _instance: ClassVar[Any] = None


# Create a singleton instance
settings = DocModelSettings()
# Store the instance in the class variable for singleton pattern
DocModelSettings._instance = settings
