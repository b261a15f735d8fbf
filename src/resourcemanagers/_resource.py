#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: ISC

from __future__ import annotations

import sys
import warnings

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, Protocol, TypeVar

if sys.version_info >= (3, 11):
    from typing import overload
else:
    from typing_extensions import overload

if TYPE_CHECKING:
    from types import TracebackType

    if sys.version_info >= (3, 11):
        from typing import Literal
    else:
        from typing_extensions import Literal

_T = TypeVar("_T")
_T_co = TypeVar("_T_co", covariant=True)


class MissingProtocolWarning(RuntimeWarning):
    """
    Emitted by :class:`Unmanaged` whenever it stands in for the acquisition
    or the release of a value that has no resource protocol of its own.
    """


class Resource(Protocol[_T_co]):
    """
    The synchronous resource protocol.

    Any context manager satisfies it: ``__enter__()`` performs the
    acquisition and returns the handle, ``__exit__()`` performs the release
    and receives the exit cause as the usual ``(exc_type, exc_value,
    traceback)`` triple. The return value of ``__exit__()`` is ignored by the
    runners, so a resource cannot suppress the error passing through it.
    """

    __slots__ = ()

    def __enter__(self, /) -> _T_co: ...
    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
        /,
    ) -> object: ...


class AsyncResource(Protocol[_T_co]):
    """
    The asynchronous resource protocol; see :class:`Resource`.
    """

    __slots__ = ()

    async def __aenter__(self, /) -> _T_co: ...
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
        /,
    ) -> object: ...


class ResourceManager(ABC, Generic[_T_co]):
    """
    An explicit base class for resource types.

    Subclasses must implement both ``__enter__()`` and ``__exit__()``.
    Classes that define the two methods without inheriting from it are
    still considered its virtual subclasses.

    Example:
      >>> class Counter(ResourceManager):
      ...     def __init__(self):
      ...         self.level = 0
      ...     def __enter__(self):
      ...         self.level += 1
      ...         return self.level
      ...     def __exit__(self, exc_type, exc_value, traceback):
      ...         self.level -= 1
      >>> with Counter() as level:
      ...     level
      1
      >>> import threading
      >>> isinstance(threading.Lock(), ResourceManager)
      True
    """

    __slots__ = ()

    @abstractmethod
    def __enter__(self, /) -> _T_co:
        """
        Acquire the resource and return its handle.
        """

    @abstractmethod
    def __exit__(
        self,
        /,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> object:
        """
        Release the resource. Called exactly once after a successful
        ``__enter__()``.
        """

    @classmethod
    def __subclasshook__(cls, subclass: type, /) -> bool:
        if cls is ResourceManager:
            return is_resource(subclass) or NotImplemented

        return NotImplemented


def _has_methods(obj: object, /, *names: str) -> bool:
    if not isinstance(obj, type):
        obj = type(obj)

    for name in names:
        for base in obj.__mro__:
            if name in vars(base):
                if vars(base)[name] is None:  # explicitly disabled
                    return False

                break
        else:
            return False

    return True


def is_resource(obj: object, /) -> bool:
    """
    Return :data:`True` if *obj* (an instance or a class) implements the
    synchronous resource protocol.

    Example:
      >>> import threading
      >>> is_resource(threading.Lock())
      True
      >>> is_resource(42)
      False
    """

    return _has_methods(obj, "__enter__", "__exit__")


def is_async_resource(obj: object, /) -> bool:
    """
    Return :data:`True` if *obj* (an instance or a class) implements the
    asynchronous resource protocol.
    """

    return _has_methods(obj, "__aenter__", "__aexit__")


@overload
def as_resource(
    value: Resource[_T],
    /,
    *,
    asynchronous: Literal[False] = False,
) -> Resource[_T]: ...
@overload
def as_resource(
    value: Resource[_T] | AsyncResource[_T],
    /,
    *,
    asynchronous: Literal[True],
) -> Resource[_T] | AsyncResource[_T]: ...
def as_resource(value, /, *, asynchronous=False):
    """
    Return *value* unchanged if it implements the resource protocol.

    With *asynchronous* set to :data:`True`, the asynchronous protocol is
    accepted as well.

    Raises:
      TypeError:
        if *value* implements neither protocol. Wrap such values in
        :class:`Unmanaged` to use them anyway.
    """

    if is_resource(value):
        return value

    if asynchronous and is_async_resource(value):
        return value

    if asynchronous:
        expected = "__enter__()/__exit__() or __aenter__()/__aexit__()"
    else:
        expected = "__enter__()/__exit__()"

    msg = (
        f"{type(value).__qualname__!r} object does not implement"
        f" the resource protocol (expected {expected});"
        f" wrap it in Unmanaged() to use it as is"
    )
    raise TypeError(msg)


class Unmanaged(Generic[_T]):
    """
    An adapter for values that do not implement the resource protocol.

    Entering it returns the wrapped value unchanged and exiting it does
    nothing, each time with a :exc:`MissingProtocolWarning`.

    Example:
      >>> import warnings
      >>> with warnings.catch_warnings():
      ...     warnings.simplefilter("ignore")
      ...     with Unmanaged(42) as value:
      ...         value
      42
    """

    __slots__ = (
        "__weakref__",
        "_value",
    )

    def __init__(self, /, value: _T) -> None:
        self._value = value

    def __repr__(self, /) -> str:
        cls = self.__class__
        cls_repr = f"{cls.__module__}.{cls.__qualname__}"

        return f"{cls_repr}({self._value!r})"

    def _warn(self, /, method: str, stacklevel: int) -> None:
        warnings.warn(
            (
                f"No {method}() method defined for"
                f" {type(self._value).__qualname__!r}"
            ),
            MissingProtocolWarning,
            stacklevel=stacklevel + 1,
        )

    def __enter__(self, /) -> _T:
        self._warn("__enter__", 2)

        return self._value

    def __exit__(
        self,
        /,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self._warn("__exit__", 2)

    async def __aenter__(self, /) -> _T:
        self._warn("__aenter__", 2)

        return self._value

    async def __aexit__(
        self,
        /,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self._warn("__aexit__", 2)

    @property
    def value(self, /) -> _T:
        """
        The wrapped value.
        """

        return self._value
