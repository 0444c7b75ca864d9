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

from apidiff.diff import ApiDiffEngine, ListSink, ReportSink, StreamSink, diff, diff_lines
from apidiff.errors import ApiDiffError, ConfigError, ResolveError, RetrievalError
from apidiff.model import Declaration, DeclKind, Embed, Field, Method, Package, Shape

__all__ = [
    "diff",
    "diff_lines",
    "ApiDiffEngine",
    "ReportSink",
    "ListSink",
    "StreamSink",
    "Package",
    "Declaration",
    "DeclKind",
    "Shape",
    "Field",
    "Method",
    "Embed",
    "ApiDiffError",
    "ConfigError",
    "ResolveError",
    "RetrievalError",
]
