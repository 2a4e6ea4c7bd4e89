# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for main __init__.py module imports."""

import importlib
import logging

import pytest

import docmodels


class TestMainImports:
    """Tests for main docmodels package imports."""

    EXPECTED_EXPORTS = (
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

    def test_all_exports_defined(self):
        assert hasattr(docmodels, "__all__")
        assert docmodels.__all__ == self.EXPECTED_EXPORTS

    def test_all_exports_alphabetically_sorted(self):
        """Dunder names come first, then regular names sorted."""
        dunder_names = [
            name for name in docmodels.__all__ if name.startswith("__")
        ]
        regular_names = [
            name for name in docmodels.__all__ if not name.startswith("__")
        ]
        expected_exports = tuple(sorted(dunder_names)) + tuple(
            sorted(regular_names)
        )
        assert docmodels.__all__ == expected_exports

    @pytest.mark.parametrize("export_name", EXPECTED_EXPORTS)
    def test_getattr_all_exports(self, export_name):
        obj = getattr(docmodels, export_name)
        assert obj is not None

    def test_invalid_import_raises_attribute_error(self):
        with pytest.raises(AttributeError, match="has no attribute"):
            _ = docmodels.NonExistentAttribute

    def test_errors_alias(self):
        assert docmodels.errors is importlib.import_module(
            "docmodels._errors"
        )

    def test_types_module(self):
        from docmodels import types

        assert types.String is types.StringType
        assert types.Any is types.AnyType

    def test_version_import(self):
        from docmodels import __version__

        assert isinstance(__version__, str)
        assert len(__version__) > 0

    def test_logger_import(self):
        from docmodels import logger

        assert logger.name == "docmodels"
        assert any(
            isinstance(h, logging.NullHandler) for h in logger.handlers
        )
