#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: ISC

from __future__ import annotations

import sys

from typing import TYPE_CHECKING, Any

if sys.version_info >= (3, 9):
    from collections.abc import Iterator, Mapping
else:
    from typing import Iterator, Mapping

if TYPE_CHECKING:
    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self

_EMPTY: dict[str, Any] = {}


class Scope(Mapping[str, Any]):
    """
    A read-only mapping of binding names to entered handles.

    Binding never changes an existing scope: :meth:`bind` returns a child
    scope, so names bound inside a resource list are not visible through the
    scope it started from.

    Example:
      >>> outer = Scope()
      >>> inner = outer.bind('f', 'handle')
      >>> inner.f
      'handle'
      >>> 'f' in outer
      False
    """

    __slots__ = (
        "__weakref__",
        "_bindings",
        "_parent",
    )

    def __init__(
        self,
        /,
        bindings: Mapping[str, Any] | None = None,
        *,
        parent: Scope | None = None,
    ) -> None:
        if parent is not None:
            flat = {**parent._bindings}
        else:
            flat = {}

        if bindings:
            flat.update(bindings)

        self._bindings = flat if flat else _EMPTY
        self._parent = parent

    def __repr__(self, /) -> str:
        cls = self.__class__
        cls_repr = f"{cls.__module__}.{cls.__qualname__}"

        return f"{cls_repr}({self._bindings!r})"

    def __getitem__(self, name: str, /) -> Any:
        return self._bindings[name]

    def __iter__(self, /) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self, /) -> int:
        return len(self._bindings)

    def __getattr__(self, name: str, /) -> Any:
        # only called for names that are not slots or methods
        if name.startswith("_"):
            raise AttributeError(name)

        try:
            return self._bindings[name]
        except KeyError:
            msg = f"no resource is bound to {name!r} in this scope"
            exc = AttributeError(msg)
            exc.name = name
            exc.obj = self

            try:
                raise exc from None
            finally:
                del exc  # break reference cycles

    def __setattr__(self, name: str, value: object, /) -> None:
        if name in Scope.__slots__:
            super().__setattr__(name, value)
            return

        msg = f"{self.__class__.__qualname__!r} object is read-only"
        raise AttributeError(msg)

    def __delattr__(self, name: str, /) -> None:
        msg = f"{self.__class__.__qualname__!r} object is read-only"
        raise AttributeError(msg)

    def __reduce__(self, /) -> tuple[Any, ...]:
        return (self.__class__, (self._bindings,))

    def bind(self, /, name: str | None, value: object) -> Self:
        """
        Return a child scope in which *name* refers to *value*.

        A :data:`None` *name* binds nothing and returns the scope itself.
        """

        if name is None:
            return self

        return self.__class__({name: value}, parent=self)

    @property
    def parent(self, /) -> Scope | None:
        """
        The scope this one was derived from, if any.
        """

        return self._parent
