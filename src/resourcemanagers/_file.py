#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: ISC

from __future__ import annotations

import os
import sys

from typing import IO, TYPE_CHECKING, Any

from ._guard import ResourceGuard

if TYPE_CHECKING:
    from types import TracebackType

    if sys.version_info >= (3, 10):
        from typing import TypeAlias
    else:
        from typing_extensions import TypeAlias

    StrPath: TypeAlias = "str | os.PathLike[str]"


class OpenFile:
    """
    A file as a resource: entering opens it, exiting closes it.

    With *lock* set (the default), the same object cannot be entered again
    until it is exited, so that one open handle is owned by exactly one
    scope; a second attempt raises :exc:`BusyResourceError`.

    Example:
      >>> import tempfile
      >>> with tempfile.TemporaryDirectory() as tmp:
      ...     path = os.path.join(tmp, 'file.txt')
      ...     with OpenFile(path, 'w') as f:
      ...         f.write('Hello, world!')
      ...     with OpenFile(path) as f:
      ...         f.read()
      13
      'Hello, world!'
    """

    __slots__ = (
        "__weakref__",
        "_encoding",
        "_files",
        "_guard",
        "_mode",
        "_path",
    )

    def __init__(
        self,
        /,
        path: StrPath,
        mode: str = "r",
        *,
        lock: bool = True,
        encoding: str | None = None,
    ) -> None:
        self._path = os.fspath(path)
        self._mode = mode
        self._encoding = encoding

        if lock:
            self._guard = ResourceGuard("using")
        else:
            self._guard = None

        self._files = []

    def __repr__(self, /) -> str:
        cls = self.__class__
        cls_repr = f"{cls.__module__}.{cls.__qualname__}"

        object_repr = f"{cls_repr}({self._path!r}, {self._mode!r})"

        if not self._files:
            extra = "closed"
        else:
            extra = "open"

        return f"<{object_repr} at {id(self):#x} [{extra}]>"

    def __enter__(self, /) -> IO[Any]:
        guard = self._guard

        if guard is not None:
            guard.__enter__()

        try:
            if "b" in self._mode:
                file = open(self._path, self._mode)  # noqa: SIM115
            else:
                file = open(  # noqa: SIM115
                    self._path,
                    self._mode,
                    encoding=self._encoding,
                )
        except BaseException:
            if guard is not None:
                guard.__exit__(None, None, None)

            raise

        self._files.append(file)

        return file

    def __exit__(
        self,
        /,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        try:
            self._files.pop().close()
        finally:
            if self._guard is not None:
                self._guard.__exit__(None, None, None)

    @property
    def path(self, /) -> str:
        return self._path

    @property
    def mode(self, /) -> str:
        return self._mode

    @property
    def closed(self, /) -> bool:
        """
        Returns :data:`True` if the file is not currently open.
        """

        return not self._files
