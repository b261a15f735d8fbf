#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: ISC

from __future__ import annotations

import sys

from keyword import iskeyword
from typing import TYPE_CHECKING, Any, Union

from ._scope import Scope

if sys.version_info >= (3, 9):
    from collections.abc import Callable, Iterable
else:
    from typing import Callable, Iterable

if TYPE_CHECKING:
    if sys.version_info >= (3, 11):
        from typing import Self
    else:
        from typing_extensions import Self

    if sys.version_info >= (3, 10):
        from typing import TypeAlias
    else:
        from typing_extensions import TypeAlias

Entry: TypeAlias = Union[
    "Slot",
    "tuple[Callable[[Scope], object]]",
    "tuple[Callable[[Scope], object], str | None]",
    "Callable[[Scope], object]",
]


def _check_name(name: object, /) -> None:
    if name is None:
        return

    if not isinstance(name, str):
        msg = f"binding name must be a string or None, not {name!r}"
        raise TypeError(msg)

    if not name.isidentifier() or iskeyword(name):
        msg = f"binding name must be a valid identifier, got {name!r}"
        raise ValueError(msg)

    if name.startswith("_"):
        msg = f"binding name must not start with an underscore, got {name!r}"
        raise ValueError(msg)

    if hasattr(Scope, name):
        msg = f"binding name {name!r} is reserved by the scope"
        raise ValueError(msg)


class Slot:
    """
    One entry of a resource list: a resource factory and an optional
    binding name.

    The factory is called with the :class:`Scope` visible at the slot's
    position, i.e. with every name bound by the slots before it, and must
    return the resource to enter. It is called at most once per activation,
    and only after every earlier resource has been entered.

    Example:
      >>> Slot(lambda scope: open(scope.path), 'f').name
      'f'
    """

    __slots__ = (
        "__weakref__",
        "_factory",
        "_name",
    )

    def __init__(
        self,
        /,
        factory: Callable[[Scope], object],
        name: str | None = None,
    ) -> None:
        if not callable(factory):
            msg = f"resource factory must be callable, got {factory!r}"
            raise TypeError(msg)

        _check_name(name)

        self._factory = factory
        self._name = name

    @classmethod
    def of(cls, /, resource: object, name: str | None = None) -> Self:
        """
        Create a slot for an already created *resource*.
        """

        def factory(scope: Scope, /) -> object:
            return resource

        return cls(factory, name)

    def __repr__(self, /) -> str:
        cls = self.__class__
        cls_repr = f"{cls.__module__}.{cls.__qualname__}"

        if self._name is None:
            return f"{cls_repr}({self._factory!r})"

        return f"{cls_repr}({self._factory!r}, {self._name!r})"

    def __getnewargs__(self, /) -> tuple[Any, ...]:
        return (self._factory, self._name)

    def __getstate__(self, /) -> None:
        return None

    def create(self, /, scope: Scope) -> object:
        """
        Evaluate the factory in *scope*.
        """

        return self._factory(scope)

    @property
    def factory(self, /) -> Callable[[Scope], object]:
        return self._factory

    @property
    def name(self, /) -> str | None:
        """
        The binding name, or :data:`None` for an unnamed resource.
        """

        return self._name


def _is_pair(obj: object, /) -> bool:
    return (
        isinstance(obj, tuple)
        and 1 <= len(obj) <= 2
        and callable(obj[0])
        and (len(obj) == 1 or obj[1] is None or isinstance(obj[1], str))
    )


def _to_slot(entry: object, /) -> Slot:
    if isinstance(entry, Slot):
        return entry

    if isinstance(entry, tuple):
        if not 1 <= len(entry) <= 2:
            msg = (
                "invalid resource entry: expected (factory, name),"
                f" got a tuple of length {len(entry)}"
            )
            raise TypeError(msg)

        return Slot(*entry)

    if callable(entry):
        return Slot(entry)

    msg = (
        "invalid resource entry: expected a Slot, a (factory, name) tuple"
        f" or a factory, got {entry!r}"
    )
    raise TypeError(msg)


def slots(resources: Entry | Iterable[Entry], /) -> tuple[Slot, ...]:
    """
    Normalize *resources* into a tuple of :class:`Slot` objects.

    *resources* is either a single entry or an iterable of entries, where an
    entry is a :class:`Slot`, a ``(factory,)`` or ``(factory, name)`` tuple,
    or a bare factory.

    Raises:
      TypeError:
        if an entry has an unexpected shape, its factory is not callable, or
        its name is not a string.
      ValueError:
        if a name is not a valid identifier, starts with an underscore, or
        names an attribute of :class:`Scope`.

    Example:
      >>> [slot.name for slot in slots((lambda scope: None, 'a'))]
      ['a']
      >>> [slot.name for slot in slots([lambda scope: None, Slot.of(1, 'b')])]
      [None, 'b']
    """

    if isinstance(resources, Slot) or callable(resources):
        return (_to_slot(resources),)

    if _is_pair(resources):
        return (_to_slot(resources),)

    if isinstance(resources, (str, bytes)):
        msg = f"invalid resource list: {resources!r}"
        raise TypeError(msg)

    try:
        entries = iter(resources)
    except TypeError:
        msg = f"invalid resource list: {resources!r}"
        raise TypeError(msg) from None

    return tuple(map(_to_slot, entries))
