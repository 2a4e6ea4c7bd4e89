# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures: a seeded memory driver and the models built on it."""

from types import SimpleNamespace

import pytest

from docmodels import MemoryDriver, define, types


def _seed():
    return {
        "test": {
            "name": "Test Inst",
            "email": "test@foo.com",
            "admin": True,
            "id": "test",
        },
        "test2": {
            "name": "Test Inst 2",
            "email": "test2@foo.com",
            "admin": False,
            "id": "test2",
        },
        "test3": {
            "name": "Test Inst 3",
            "email": "test3@foo.com",
            "admin": False,
            "id": "test3",
        },
    }


@pytest.fixture
def fake_inst():
    """Bare stand-in for a model instance, all a field type touches."""
    return SimpleNamespace(values={}, dirty=False)


@pytest.fixture
def driver():
    return MemoryDriver(_seed())


@pytest.fixture
def TestModel(driver):
    return define(
        "TestModel",
        driver=driver,
        schema={
            "name": types.String(),
            "email": types.String(validate=lambda email: "@" in email),
            "admin": types.Boolean(default=True),
        },
    )


@pytest.fixture
def test_inst(TestModel, driver):
    """Instance of the ``test`` record, as if loaded from the store."""
    inst = TestModel(driver.db["test"])
    inst.dirty = False
    inst.exists = True
    return inst


@pytest.fixture
def Author():
    return define(
        "Author",
        driver=MemoryDriver(
            {
                "a@b.com": {
                    "name": "A",
                    "email": "a@b.com",
                    "admin": True,
                }
            }
        ),
        schema={
            "name": types.String(),
            "email": types.String(pk=True),
            "admin": types.Boolean(default=False),
        },
    )
