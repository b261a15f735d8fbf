#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: ISC

"""
Scoped multi-resource acquisition for Python

This package composes any number of resources (context managers) into a
single scope. The resources are acquired one by one in the declared order,
each of them can see the handles of the resources acquired before it, and
every resource that was acquired is released exactly once, in reverse
order, no matter how the scope ends:

* the body returns normally
* the body raises an exception
* a later resource fails to be acquired
* the release of a later resource raises an exception

The same semantics are available as a function (:func:`run_scoped`), as a
scope guard and builder (:class:`Scoped`), and as a decorator
(:func:`using`), each with an asynchronous counterpart.
"""

__author__: str = "Ilya Egorov <0x42005e1f@gmail.com>"
__version__: str = "0.1.0"

from . import (  # noqa: F401
    meta,
)
from ._decorator import (
    using as using,
)
from ._file import (
    OpenFile as OpenFile,
)
from ._guard import (
    BusyResourceError as BusyResourceError,
    ResourceGuard as ResourceGuard,
)
from ._resource import (
    AsyncResource as AsyncResource,
    MissingProtocolWarning as MissingProtocolWarning,
    Resource as Resource,
    ResourceManager as ResourceManager,
    Unmanaged as Unmanaged,
    as_resource as as_resource,
    is_async_resource as is_async_resource,
    is_resource as is_resource,
)
from ._runner import (
    Frame as Frame,
    FrameState as FrameState,
    async_run_scoped as async_run_scoped,
    run_scoped as run_scoped,
)
from ._scope import (
    Scope as Scope,
)
from ._scoped import (
    Scoped as Scoped,
)
from ._slot import (
    Slot as Slot,
    slots as slots,
)

# prepare for external use
meta.export(globals())
