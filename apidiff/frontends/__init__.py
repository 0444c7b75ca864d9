# SPDX-License-Identifier: AGPL-3.0-only
#
# Copyright (c) 2026 Apidiff Contributors
#
# This file is part of Apidiff.
#
# Apidiff is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 only.
#
# Apidiff is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.
# See the GNU Affero General Public License for more details.

from apidiff.frontends.interfaces import DEFAULT_NOTE_LIMIT, FrontEnd, ResolveConfig
from apidiff.frontends.python import PythonFrontEnd
from apidiff.frontends.registry import FrontEndRegistry
from apidiff.frontends.symbols import SymbolTableFrontEnd

__all__ = [
    "FrontEnd",
    "ResolveConfig",
    "DEFAULT_NOTE_LIMIT",
    "FrontEndRegistry",
    "PythonFrontEnd",
    "SymbolTableFrontEnd",
]
