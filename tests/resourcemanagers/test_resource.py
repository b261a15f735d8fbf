#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: 0BSD

import threading

from contextlib import nullcontext

import pytest

import resourcemanagers

from resourcemanagers import (
    MissingProtocolWarning,
    ResourceManager,
    Unmanaged,
    as_resource,
    is_async_resource,
    is_resource,
)


class Sync:
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        pass


class Async:
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        pass


class EnterOnly:
    def __enter__(self):
        return self


class Disabled(Sync):
    __exit__ = None


def test_is_resource():
    assert is_resource(Sync())
    assert is_resource(Sync)
    assert is_resource(threading.Lock())
    assert is_resource(nullcontext())
    assert not is_resource(Async())
    assert not is_resource(EnterOnly())
    assert not is_resource(Disabled())
    assert not is_resource(42)


def test_is_async_resource():
    assert is_async_resource(Async())
    assert not is_async_resource(Sync())


def test_as_resource():
    resource = Sync()

    assert as_resource(resource) is resource

    with pytest.raises(TypeError, match="'int' object"):
        as_resource(42)

    with pytest.raises(TypeError):
        as_resource(Async())

    resource = Async()

    assert as_resource(resource, asynchronous=True) is resource
    assert as_resource(Sync(), asynchronous=True) is not None


class TestResourceManager:
    def test_subclass(self, /):
        class Counter(ResourceManager):
            def __init__(self):
                self.level = 0

            def __enter__(self):
                self.level += 1

                return self.level

            def __exit__(self, exc_type, exc_value, traceback):
                self.level -= 1

        counter = Counter()

        with counter as level:
            assert level == 1

        assert counter.level == 0
        assert is_resource(counter)

    def test_incomplete_subclass(self, /):
        class Incomplete(ResourceManager):
            def __enter__(self):
                return self

        with pytest.raises(TypeError):
            Incomplete()

    def test_virtual_subclasses(self, /):
        assert isinstance(Sync(), ResourceManager)
        assert issubclass(type(threading.Lock()), ResourceManager)
        assert not isinstance(Async(), ResourceManager)
        assert not isinstance(EnterOnly(), ResourceManager)


class TestUnmanaged:
    factory = Unmanaged

    def test_base(self, /):
        value = object()
        unmanaged = self.factory(value)

        assert unmanaged.value is value
        assert is_resource(unmanaged)
        assert is_async_resource(unmanaged)

        pkg = "resourcemanagers"
        assert repr(self.factory(42)) == f"{pkg}.Unmanaged(42)"

    def test_warnings(self, /):
        unmanaged = self.factory([1, 2])

        with pytest.warns(MissingProtocolWarning) as record:
            with unmanaged as value:
                assert value == [1, 2]

        assert [str(warning.message) for warning in record] == [
            "No __enter__() method defined for 'list'",
            "No __exit__() method defined for 'list'",
        ]
        assert record[0].filename == __file__

    def test_warning_category(self, /):
        assert issubclass(MissingProtocolWarning, RuntimeWarning)
        assert MissingProtocolWarning.__module__ == "resourcemanagers"

    def test_async(self, /, run_async):
        unmanaged = self.factory("value")

        async def main():
            async with unmanaged as value:
                return value

        with pytest.warns(MissingProtocolWarning, match="__aexit__"):
            assert run_async(main) == "value"


def test_exports():
    assert "run_scoped" in resourcemanagers.__all__
    assert "annotations" not in resourcemanagers.__all__
    assert resourcemanagers.Scoped.__module__ == "resourcemanagers"
    assert resourcemanagers.Scoped.run.__qualname__ == "Scoped.run"
    assert resourcemanagers.run_scoped.__module__ == "resourcemanagers"
