#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2025 Ilya Egorov <0x42005e1f@gmail.com>
# SPDX-License-Identifier: ISC

"""
Helpers used to assemble the public surface of the package: the
:data:`MISSING` marker and the :func:`export` function.
"""

from ._exports import (
    export as export,
)
from ._markers import (
    MISSING as MISSING,
    MissingType as MissingType,
)
