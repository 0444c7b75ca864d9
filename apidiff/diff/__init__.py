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

from apidiff.diff.aggregate import aggregate_diff
from apidiff.diff.contract import contract_diff
from apidiff.diff.engine import ApiDiffEngine, diff, diff_lines
from apidiff.diff.methods import METHOD_LIMIT, method_set_diff
from apidiff.diff.render import MAX_LINE_WIDTH, render
from apidiff.diff.sink import ListSink, ReportSink, StreamSink

__all__ = [
    "ApiDiffEngine",
    "diff",
    "diff_lines",
    "aggregate_diff",
    "contract_diff",
    "method_set_diff",
    "render",
    "ReportSink",
    "ListSink",
    "StreamSink",
    "METHOD_LIMIT",
    "MAX_LINE_WIDTH",
]
