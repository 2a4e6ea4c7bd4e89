# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import copy
import pickle
from datetime import date, datetime, timedelta, timezone

import pytest

from docmodels._sentinel import Undefined, is_absent, is_undefined
from docmodels._utils import (
    call_hook,
    generate_key,
    is_coro_func,
    matches,
    strip_reserved,
    to_datetime,
    to_timestamp,
)

TS = 1452637592827
TS_DT = datetime(2016, 1, 12, 22, 26, 32, 827000, tzinfo=timezone.utc)


class TestUndefined:
    def test_singleton(self):
        assert copy.copy(Undefined) is Undefined
        assert copy.deepcopy(Undefined) is Undefined
        assert pickle.loads(pickle.dumps(Undefined)) is Undefined

    def test_falsy(self):
        assert not Undefined
        assert repr(Undefined) == "Undefined"

    def test_helpers(self):
        assert is_undefined(Undefined)
        assert not is_undefined(None)
        assert is_absent(None) and is_absent(Undefined)
        assert not is_absent(0)


class TestTimestamps:
    @pytest.mark.parametrize(
        "value",
        [
            TS,
            float(TS),
            TS_DT,
            TS_DT.astimezone(timezone(timedelta(hours=-5))),
            TS_DT.replace(tzinfo=None),
            "2016-01-12T22:26:32.827+00:00",
            "2016-01-12T22:26:32.827Z",
        ],
    )
    def test_valid_instants(self, value):
        assert to_timestamp(value) == TS

    def test_date_is_midnight_utc(self):
        assert to_timestamp(date(1970, 1, 2)) == 86_400_000

    @pytest.mark.parametrize(
        "value",
        [None, Undefined, True, "nope", float("nan"), float("inf"), 10**20, []],
    )
    def test_invalid_instants(self, value):
        assert to_timestamp(value) is None

    def test_to_datetime(self):
        assert to_datetime(TS) == TS_DT
        assert to_datetime(10**20) is None


class TestMatches:
    record = {"name": "Ann", "meta": {"role": "admin", "age": 3}}

    def test_partial_mapping(self):
        assert matches({"meta": {"role": "admin"}}, self.record)
        assert not matches({"meta": {"role": "user"}}, self.record)
        assert not matches({"missing": None}, self.record)

    def test_callable_and_none(self):
        assert matches(None, self.record)
        assert matches(lambda r: r["name"] == "Ann", self.record)

    def test_invalid_predicate(self):
        with pytest.raises(TypeError):
            matches("name", self.record)


class TestStripReserved:
    def test_nested(self):
        value = {"$a": 1, "b": [{"$c": 2, "d": (3, {"$e": 4})}]}
        assert strip_reserved(value) == {"b": [{"d": (3, {})}]}

    def test_non_string_keys_kept(self):
        assert strip_reserved({1: "x"}) == {1: "x"}


class TestHooks:
    @pytest.mark.asyncio
    async def test_single_argument_hook(self):
        assert await call_hook(lambda v: v * 2, 2, object()) == 4

    @pytest.mark.asyncio
    async def test_hook_receiving_instance(self):
        inst = object()
        assert await call_hook(lambda v, i: i, 1, inst) is inst

    @pytest.mark.asyncio
    async def test_async_hook(self):
        async def check(value):
            return value == "ok"

        assert is_coro_func(check)
        assert await call_hook(check, "ok", None) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("hook", [str.strip, str.lower, len, bool])
    async def test_builtin_hooks_get_the_value_only(self, hook):
        inst = object()
        assert await call_hook(hook, " Ab ", inst) == hook(" Ab ")

    @pytest.mark.asyncio
    async def test_optional_second_parameter_is_not_filled(self):
        def hook(value, extra=None):
            return extra

        assert await call_hook(hook, 1, object()) is None

    @pytest.mark.asyncio
    async def test_var_positional_hook_gets_instance(self):
        inst = object()
        assert await call_hook(lambda *a: a, 1, inst) == (1, inst)


class TestKeys:
    def test_uuid(self):
        key = generate_key("uuid")
        assert len(key) == 32
        assert key != generate_key("uuid")

    def test_timestamp(self):
        assert generate_key("timestamp").isdigit()
