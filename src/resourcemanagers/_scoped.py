#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: ISC

from __future__ import annotations

import sys

from inspect import isawaitable
from typing import TYPE_CHECKING, Any, TypeVar

from ._guard import ResourceGuard
from ._runner import Frame, _async_release_all, _release_all
from ._scope import Scope
from ._slot import Slot, slots

if sys.version_info >= (3, 9):
    from collections.abc import Callable, Iterable
else:
    from typing import Callable, Iterable

if TYPE_CHECKING:
    from types import TracebackType

    from ._slot import Entry

    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self

_T = TypeVar("_T")


class Scoped:
    """
    A resource list as a scope guard.

    ``with Scoped(resources) as scope:`` acquires the resources in order and
    binds their names in *scope*; leaving the block releases them in reverse
    order. The ordering and error guarantees are those of
    :func:`run_scoped`.

    It also works as an immutable builder:

      >>> from contextlib import nullcontext
      >>> (
      ...     Scoped()
      ...     .using(lambda scope: nullcontext('a'), 'x')
      ...     .using(lambda scope: nullcontext(scope.x + 'b'), 'y')
      ...     .run(lambda scope: scope.y)
      ... )
      'ab'

    A single instance cannot be active in two scopes at once.
    """

    __slots__ = (
        "__weakref__",
        "_frames",
        "_guard",
        "_scope",
        "_slots",
    )

    def __init__(
        self,
        resources: Entry | Iterable[Entry] = (),
        /,
        *,
        scope: Scope | None = None,
    ) -> None:
        self._slots = slots(resources)

        if scope is None:
            scope = Scope()

        self._scope = scope
        self._frames = []
        self._guard = ResourceGuard("using")

    def __repr__(self, /) -> str:
        cls = self.__class__
        cls_repr = f"{cls.__module__}.{cls.__qualname__}"

        object_repr = f"{cls_repr}({list(self._slots)!r})"

        if self._guard:
            extra = "active"
        else:
            extra = "inactive"

        return f"<{object_repr} at {id(self):#x} [{extra}]>"

    def using(
        self,
        /,
        factory: Callable[[Scope], object],
        name: str | None = None,
    ) -> Self:
        """
        Return a new guard with one more resource at the end of the list.
        """

        return self.__class__(
            (*self._slots, Slot(factory, name)),
            scope=self._scope,
        )

    def run(self, /, body: Callable[[Scope], _T]) -> _T:
        """
        Acquire the resources, call *body* with the scope, and release them.
        """

        with self as scope:
            return body(scope)

    async def async_run(self, /, body: Callable[[Scope], Any]) -> Any:
        """
        Like :meth:`run`, but asynchronous; *body* may return an awaitable.
        """

        async with self as scope:
            result = body(scope)

            if isawaitable(result):
                result = await result

            return result

    def _start(self, /) -> None:
        self._guard.__enter__()
        self._frames = []

    def _push(self, /, slot: Slot) -> Frame:
        frame = Frame(slot)
        self._frames.append(frame)

        return frame

    def _unwind(self, /, exc: BaseException | None) -> BaseException | None:
        try:
            return _release_all(self._frames, exc)
        finally:
            self._guard.__exit__(None, None, None)

    async def _async_unwind(
        self,
        /,
        exc: BaseException | None,
    ) -> BaseException | None:
        try:
            return await _async_release_all(self._frames, exc)
        finally:
            self._guard.__exit__(None, None, None)

    def __enter__(self, /) -> Scope:
        self._start()

        scope = self._scope

        for slot in self._slots:
            frame = self._push(slot)

            try:
                handle = frame.enter(scope)
            except BaseException as exc:
                self._unwind(exc)
                raise

            frame.start()

            scope = scope.bind(slot.name, handle)

        return scope

    def __exit__(
        self,
        /,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        exc = self._unwind(exc_value)

        if exc is not None and exc is not exc_value:
            try:
                raise exc
            finally:
                del exc  # break reference cycles

    async def __aenter__(self, /) -> Scope:
        self._start()

        scope = self._scope

        for slot in self._slots:
            frame = self._push(slot)

            try:
                handle = await frame.async_enter(scope)
            except BaseException as exc:
                await self._async_unwind(exc)
                raise

            frame.start()

            scope = scope.bind(slot.name, handle)

        return scope

    async def __aexit__(
        self,
        /,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        exc = await self._async_unwind(exc_value)

        if exc is not None and exc is not exc_value:
            try:
                raise exc
            finally:
                del exc  # break reference cycles

    @property
    def slots(self, /) -> tuple[Slot, ...]:
        return self._slots

    @property
    def frames(self, /) -> tuple[Frame, ...]:
        """
        The frames of the current or the last activation, in acquisition
        order.
        """

        return tuple(self._frames)
