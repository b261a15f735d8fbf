#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: ISC

from __future__ import annotations

import sys

from inspect import iscoroutinefunction
from typing import TYPE_CHECKING, Any, TypeVar

from wrapt import decorator

from ._runner import async_run_scoped, run_scoped
from ._slot import slots

if sys.version_info >= (3, 9):
    from collections.abc import Callable
else:
    from typing import Callable

if TYPE_CHECKING:
    from ._slot import Entry

_CallableT = TypeVar("_CallableT", bound=Callable[..., Any])


def using(*resources: Entry) -> Callable[[_CallableT], _CallableT]:
    """
    Run the decorated function inside a scope of *resources*.

    Every call acquires the resources anew, passes each bound name to the
    function as a keyword argument, and releases the resources when the call
    returns or raises. Coroutine functions are awaited inside the scope.

    Like :func:`run_scoped`, a single ``(factory, name)`` pair may be passed
    unpacked.

    Example:
      >>> from contextlib import nullcontext
      >>> @using((lambda scope: nullcontext(6), 'x'))
      ... def multiply(y, *, x):
      ...     return x * y
      >>> multiply(7)
      42
    """

    normalized = slots(resources)

    @decorator
    async def _async_scoped(wrapped, instance, args, kwargs, /):
        return await async_run_scoped(
            normalized,
            lambda scope: wrapped(*args, **kwargs, **scope),
        )

    @decorator
    def _green_scoped(wrapped, instance, args, kwargs, /):
        return run_scoped(
            normalized,
            lambda scope: wrapped(*args, **kwargs, **scope),
        )

    def _decorate(wrapped: _CallableT, /) -> _CallableT:
        if not callable(wrapped):
            msg = f"a callable was expected, got {wrapped!r}"
            raise TypeError(msg)

        if iscoroutinefunction(wrapped):
            return _async_scoped(wrapped)

        return _green_scoped(wrapped)

    return _decorate
