#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: ISC

from __future__ import annotations

import enum
import sys

from inspect import isawaitable
from logging import Logger, getLogger
from typing import TYPE_CHECKING, Any, Final, TypeVar

from ._resource import as_resource, is_async_resource
from ._scope import Scope
from ._slot import slots
from .meta import MISSING

if sys.version_info >= (3, 9):
    from collections.abc import Awaitable, Callable, Iterable
else:
    from typing import Awaitable, Callable, Iterable

if TYPE_CHECKING:
    from ._slot import Entry, Slot

_T = TypeVar("_T")

LOGGER: Final[Logger] = getLogger(__name__)


class FrameState(enum.Enum):
    """
    The life cycle of a single resource slot.

    ``PENDING -> ENTERING -> ENTERED -> RUNNING -> EXITING -> RELEASED``,
    or ``ENTERING -> FAILED`` if the resource could not be acquired, in which
    case it is never released.
    """

    PENDING = "pending"
    ENTERING = "entering"
    ENTERED = "entered"
    RUNNING = "running"
    EXITING = "exiting"
    RELEASED = "released"
    FAILED = "failed"


_ACTIVE_STATES = frozenset({FrameState.ENTERED, FrameState.RUNNING})


class Frame:
    """
    One activation of a resource slot.

    A frame creates the resource of its slot, enters it, runs whatever is
    nested inside it, and exits the resource exactly once, passing the error
    raised by the nested part (if any) as the exit cause.

    If the nested part raised and the release raised too, the nested error
    wins: the release error is logged and kept in :attr:`release_error`, and
    the nested error propagates. A release error without a nested error
    propagates as is.
    """

    __slots__ = (
        "__weakref__",
        "_exit",
        "_handle",
        "_release_error",
        "_resource",
        "_slot",
        "_state",
    )

    def __init__(self, /, slot: Slot) -> None:
        self._slot = slot
        self._state = FrameState.PENDING
        self._resource = MISSING
        self._handle = MISSING
        self._exit = None
        self._release_error = None

    def __repr__(self, /) -> str:
        cls = self.__class__
        cls_repr = f"{cls.__module__}.{cls.__qualname__}"

        object_repr = f"{cls_repr}({self._slot!r})"

        return f"<{object_repr} at {id(self):#x} [{self._state.value}]>"

    def _transition(self, /, state: FrameState) -> None:
        LOGGER.debug("%r -> %s", self, state.value)

        self._state = state

    def _check_state(self, /, *expected: FrameState) -> None:
        if self._state not in expected:
            msg = f"frame is {self._state.value}"
            raise RuntimeError(msg)

    def enter(self, /, scope: Scope) -> Any:
        """
        Create the resource in *scope* and enter it.

        Returns the handle. On failure the frame becomes
        :attr:`FrameState.FAILED` and the error propagates.
        """

        self._check_state(FrameState.PENDING)
        self._transition(FrameState.ENTERING)

        try:
            self._resource = resource = as_resource(self._slot.create(scope))

            # like the `with` statement, look the methods up on the type
            cls = type(resource)
            self._exit = cls.__exit__.__get__(resource, cls)
            self._handle = handle = cls.__enter__(resource)
        except BaseException:
            self._exit = None
            self._transition(FrameState.FAILED)
            raise

        self._transition(FrameState.ENTERED)

        return handle

    async def async_enter(self, /, scope: Scope) -> Any:
        """
        Like :meth:`enter`, but prefers the asynchronous protocol and awaits
        factories that return awaitables.
        """

        self._check_state(FrameState.PENDING)
        self._transition(FrameState.ENTERING)

        try:
            resource = self._slot.create(scope)

            if not is_async_resource(resource) and isawaitable(resource):
                resource = await resource

            self._resource = resource = as_resource(
                resource,
                asynchronous=True,
            )

            cls = type(resource)

            if is_async_resource(resource):
                self._exit = cls.__aexit__.__get__(resource, cls)
                self._handle = handle = await cls.__aenter__(resource)
            else:
                self._exit = cls.__exit__.__get__(resource, cls)
                self._handle = handle = cls.__enter__(resource)
        except BaseException:
            self._exit = None
            self._transition(FrameState.FAILED)
            raise

        self._transition(FrameState.ENTERED)

        return handle

    def start(self, /) -> None:
        """
        Mark the entered resource as holding the nested part of the scope.
        """

        self._check_state(FrameState.ENTERED)
        self._transition(FrameState.RUNNING)

    def _pop_exit(self, /) -> Callable[..., Any]:
        self._check_state(FrameState.ENTERED, FrameState.RUNNING)
        self._transition(FrameState.EXITING)

        exit_method, self._exit = self._exit, None

        return exit_method

    def exit(self, /, exc: BaseException | None = None) -> None:
        """
        Exit the resource with *exc* as the exit cause.

        Any error raised by the resource propagates and, unless it is *exc*
        itself re-raised, is also kept in :attr:`release_error`.
        """

        exit_method = self._pop_exit()

        try:
            if exc is None:
                exit_method(None, None, None)
            else:
                exit_method(type(exc), exc, exc.__traceback__)
        except BaseException as release_exc:
            if release_exc is not exc:
                self._release_error = release_exc

            raise
        finally:
            self._transition(FrameState.RELEASED)

    async def async_exit(self, /, exc: BaseException | None = None) -> None:
        """
        Like :meth:`exit`, but awaits the asynchronous protocol.
        """

        exit_method = self._pop_exit()

        try:
            if exc is None:
                result = exit_method(None, None, None)
            else:
                result = exit_method(type(exc), exc, exc.__traceback__)

            if is_async_resource(self._resource):
                await result
        except BaseException as release_exc:
            if release_exc is not exc:
                self._release_error = release_exc

            raise
        finally:
            self._transition(FrameState.RELEASED)

    def _log_masked(self, /, exc: BaseException) -> None:
        LOGGER.error(
            "exception releasing %r while handling %r",
            self._resource,
            exc,
            exc_info=self._release_error,
        )

    def release(self, /, exc: BaseException | None = None) -> None:
        """
        Exit the resource, letting *exc* take precedence over a release
        error.
        """

        if exc is None:
            self.exit()
            return

        try:
            self.exit(exc)
        except BaseException as release_exc:  # noqa: BLE001
            if release_exc is not exc:
                self._log_masked(exc)

    async def async_release(self, /, exc: BaseException | None = None) -> None:
        """
        Like :meth:`release`, but awaits the asynchronous protocol.
        """

        if exc is None:
            await self.async_exit()
            return

        try:
            await self.async_exit(exc)
        except BaseException as release_exc:  # noqa: BLE001
            if release_exc is not exc:
                self._log_masked(exc)

    def run(self, /, scope: Scope, inner: Callable[[Scope], _T]) -> _T:
        """
        Enter the resource, call *inner* with the scope extended by the
        binding of this slot, and release the resource.
        """

        handle = self.enter(scope)

        self.start()

        try:
            result = inner(scope.bind(self._slot.name, handle))
        except BaseException as exc:
            self.release(exc)
            raise

        self.release()

        return result

    async def async_run(
        self,
        /,
        scope: Scope,
        inner: Callable[[Scope], Awaitable[_T]],
    ) -> _T:
        """
        Like :meth:`run`, but for the asynchronous protocol and an
        asynchronous *inner*.
        """

        handle = await self.async_enter(scope)

        self.start()

        try:
            result = await inner(scope.bind(self._slot.name, handle))
        except BaseException as exc:
            await self.async_release(exc)
            raise

        await self.async_release()

        return result

    @property
    def slot(self, /) -> Slot:
        return self._slot

    @property
    def name(self, /) -> str | None:
        return self._slot.name

    @property
    def state(self, /) -> FrameState:
        """
        The current state of the frame.
        """

        return self._state

    @property
    def resource(self, /) -> Any:
        """
        The resource created by the slot's factory, or :data:`MISSING` if
        the factory has not returned yet.
        """

        return self._resource

    @property
    def handle(self, /) -> Any:
        """
        The value returned by entering the resource, or :data:`MISSING` if
        the resource has not been entered.
        """

        return self._handle

    @property
    def release_error(self, /) -> BaseException | None:
        """
        The error raised while exiting the resource, if any.
        """

        return self._release_error


def _check_body(body: object, /) -> None:
    if not callable(body):
        msg = f"body must be callable, got {body!r}"
        raise TypeError(msg)


def _release_all(
    frames: list[Frame],
    exc: BaseException | None,
    /,
) -> BaseException | None:
    for frame in reversed(frames):
        if frame.state not in _ACTIVE_STATES:
            continue

        if exc is None:
            try:
                frame.exit()
            except BaseException as release_exc:  # noqa: BLE001
                exc = release_exc
        else:
            frame.release(exc)

    return exc


async def _async_release_all(
    frames: list[Frame],
    exc: BaseException | None,
    /,
) -> BaseException | None:
    for frame in reversed(frames):
        if frame.state not in _ACTIVE_STATES:
            continue

        if exc is None:
            try:
                await frame.async_exit()
            except BaseException as release_exc:  # noqa: BLE001
                exc = release_exc
        else:
            await frame.async_release(exc)

    return exc


def _run(
    slots: tuple[Slot, ...],
    scope: Scope,
    body: Callable[[Scope], _T],
    /,
) -> _T:
    frames = []

    try:
        for slot in slots:
            frame = Frame(slot)
            frames.append(frame)

            handle = frame.enter(scope)
            frame.start()

            scope = scope.bind(slot.name, handle)

        result = body(scope)
    except BaseException as exc:
        _release_all(frames, exc)
        raise

    exc = _release_all(frames, None)

    if exc is not None:
        try:
            raise exc
        finally:
            del exc  # break reference cycles

    return result


async def _async_run(
    slots: tuple[Slot, ...],
    scope: Scope,
    body: Callable[[Scope], Any],
    /,
) -> Any:
    frames = []

    try:
        for slot in slots:
            frame = Frame(slot)
            frames.append(frame)

            handle = await frame.async_enter(scope)
            frame.start()

            scope = scope.bind(slot.name, handle)

        result = body(scope)

        if isawaitable(result):
            result = await result
    except BaseException as exc:
        await _async_release_all(frames, exc)
        raise

    exc = await _async_release_all(frames, None)

    if exc is not None:
        try:
            raise exc
        finally:
            del exc  # break reference cycles

    return result


def run_scoped(
    resources: Entry | Iterable[Entry],
    body: Callable[[Scope], _T],
    /,
    *,
    scope: Scope | None = None,
) -> _T:
    """
    Acquire *resources* in order, call *body*, and release the acquired
    resources in reverse order.

    *resources* is a single entry or an iterable of entries (see
    :func:`slots`). Each factory is called with the scope of the names bound
    before it, and only after every earlier resource has been entered.
    *body* is called with the scope of all bound names; its return value is
    returned. *scope* is the scope to start from (empty by default).

    Every resource that was entered is exited exactly once, whether *body*
    returns or raises, or a later resource fails to be acquired. The error
    that aborted the chain is passed to each exit and then propagated.

    Example:
      >>> from contextlib import nullcontext
      >>> run_scoped(
      ...     [
      ...         (lambda scope: nullcontext(2), 'x'),
      ...         (lambda scope: nullcontext(scope.x * 3), 'y'),
      ...     ],
      ...     lambda scope: scope.x + scope.y,
      ... )
      8
    """

    normalized = slots(resources)

    _check_body(body)

    if scope is None:
        scope = Scope()

    return _run(normalized, scope, body)


async def async_run_scoped(
    resources: Entry | Iterable[Entry],
    body: Callable[[Scope], Any],
    /,
    *,
    scope: Scope | None = None,
) -> Any:
    """
    Like :func:`run_scoped`, but resources may implement the asynchronous
    protocol, and factories and *body* may return awaitables.

    Resources are still acquired and released one at a time.
    """

    normalized = slots(resources)

    _check_body(body)

    if scope is None:
        scope = Scope()

    return await _async_run(normalized, scope, body)
