#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: 0BSD

import pytest

from resourcemanagers.meta import MISSING

BACKENDS = ("asyncio", "trio")


class _RecordedResource:
    def __init__(self, journal, label, handle, enter_error, exit_error):
        self.journal = journal
        self.label = label
        self.handle = handle
        self.enter_error = enter_error
        self.exit_error = exit_error

    def __repr__(self):
        return f"<resource {self.label!r}>"

    def _enter(self):
        self.journal.events.append(("enter", self.label))

        if self.enter_error is not None:
            raise self.enter_error

        return self.handle

    def _exit(self, exc_value):
        self.journal.events.append(("exit", self.label, exc_value))

        if self.exit_error is not None:
            raise self.exit_error


class _SyncResource(_RecordedResource):
    def __enter__(self):
        return self._enter()

    def __exit__(self, exc_type, exc_value, traceback):
        self._exit(exc_value)


class _AsyncResource(_RecordedResource):
    async def __aenter__(self):
        return self._enter()

    async def __aexit__(self, exc_type, exc_value, traceback):
        self._exit(exc_value)


class Journal:
    """
    Creates resources that record their acquisition and release.
    """

    def __init__(self):
        self.events = []

    def resource(
        self,
        label,
        *,
        handle=MISSING,
        enter_error=None,
        exit_error=None,
        asynchronous=False,
    ):
        if handle is MISSING:
            handle = f"handle-{label}"

        if asynchronous:
            cls = _AsyncResource
        else:
            cls = _SyncResource

        return cls(self, label, handle, enter_error, exit_error)

    def factory(self, label, /, **kwargs):
        def _factory(scope):
            self.events.append(("create", label))

            return self.resource(label, **kwargs)

        return _factory

    def entered(self):
        return [event[1] for event in self.events if event[0] == "enter"]

    def exited(self):
        return [event[1] for event in self.events if event[0] == "exit"]

    def causes(self):
        return {
            event[1]: event[2] for event in self.events if event[0] == "exit"
        }


@pytest.fixture
def journal():
    return Journal()


@pytest.fixture
def run_async(request):
    backend = request.param

    pytest.importorskip(backend)

    if backend == "trio":
        import trio

        def _run(func, /, *args):
            return trio.run(func, *args)

    else:
        import asyncio

        def _run(func, /, *args):
            return asyncio.run(func(*args))

    _run.backend = backend

    return _run


def pytest_generate_tests(metafunc):
    if "run_async" in metafunc.fixturenames:
        metafunc.parametrize("run_async", BACKENDS, indirect=True)
