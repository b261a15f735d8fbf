#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: ISC

from __future__ import annotations

import enum
import sys

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Final, NoReturn

    if sys.version_info >= (3, 11):
        from typing import Literal, Never
    else:
        from typing_extensions import Literal, Never

if sys.version_info >= (3, 11):  # runtime introspection support
    from typing import final
else:
    from typing_extensions import final

# An enum member is the only kind of singleton that type checkers narrow on
# `is` checks, which is what `handle is MISSING` relies on.


@final
class MissingType(enum.Enum):
    """
    A singleton class for :data:`MISSING`; mimics :data:`~types.NoneType`.

    Used where :data:`None` is a legitimate value, e.g. a handle returned by
    ``__enter__()``.
    """

    MISSING = object()

    def __init_subclass__(cls, /, **kwargs: Never) -> NoReturn:
        bcs = __class__  # an implicit closure reference
        bcs_repr = f"{bcs.__module__}.{bcs.__qualname__}"

        msg = f"type '{bcs_repr}' is not an acceptable base type"
        raise TypeError(msg)

    def __reduce_ex__(self, protocol: object, /) -> str:
        # pickled by reference to the module-level name on all versions
        return self._name_

    def __repr__(self, /) -> str:
        return f"{self.__class__.__module__}.{self._name_}"

    def __str__(self, /) -> str:  # overridden by `enum.Enum`
        return f"{self.__class__.__module__}.{self._name_}"

    def __bool__(self, /) -> Literal[False]:
        return False


MISSING: Final[Literal[MissingType.MISSING]] = MissingType.MISSING
