#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2024 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: ISC

from __future__ import annotations

import sys

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from types import TracebackType

    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self


class BusyResourceError(RuntimeError):
    """
    Raised on an attempt to enter a resource that is already in use.
    """


class ResourceGuard:
    """
    A non-blocking guard for resources that must not be used by more than one
    scope at a time.

    Entering the guard marks the resource as busy; entering it again before
    the first scope exits raises :exc:`BusyResourceError` instead of waiting.

    Example:
      >>> guard = ResourceGuard('reading')
      >>> with guard:
      ...     with guard:
      ...         pass
      Traceback (most recent call last):
      resourcemanagers.BusyResourceError: another scope is already reading this resource
    """

    __slots__ = (
        "__weakref__",
        "_action",
        "_tokens",
    )

    def __init__(self, /, action: str = "using") -> None:
        self._action = action

        # `list.pop()` and `list.append()` are atomic, so the guard works
        # without a lock in multithreaded code
        self._tokens = [None]

    def __getnewargs__(self, /) -> tuple[Any, ...]:
        if self._action != "using":
            return (self._action,)

        return ()

    def __reduce__(self, /) -> tuple[Any, ...]:
        return (self.__class__, self.__getnewargs__())

    def __copy__(self, /) -> Self:
        return self.__class__(self._action)

    def __repr__(self, /) -> str:
        cls = self.__class__
        cls_repr = f"{cls.__module__}.{cls.__qualname__}"

        object_repr = f"{cls_repr}({self._action!r})"

        if self:
            extra = "busy"
        else:
            extra = "free"

        return f"<{object_repr} at {id(self):#x} [{extra}]>"

    def __bool__(self, /) -> bool:
        """
        Returns :data:`True` if the guarded resource is in use.
        """

        return not self._tokens

    def __enter__(self, /) -> Self:
        try:
            self._tokens.pop()
        except IndexError:
            msg = f"another scope is already {self._action} this resource"
            raise BusyResourceError(msg) from None

        return self

    def __exit__(
        self,
        /,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self._tokens.append(None)

    async def __aenter__(self, /) -> Self:
        return self.__enter__()

    async def __aexit__(
        self,
        /,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.__exit__(exc_type, exc_value, traceback)

    @property
    def action(self, /) -> str:
        """
        The action to guard against, used in error messages.
        """

        return self._action
