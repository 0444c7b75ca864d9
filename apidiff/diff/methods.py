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

from collections.abc import Sequence

from apidiff.diff._keys import attached_method_key
from apidiff.diff.render import render_method
from apidiff.diff.sink import ReportSink
from apidiff.model.types import Method

# Max diff lines reported per named type before summarizing.
METHOD_LIMIT = 5

OTHER_METHODS = "\tOther Methods ...."


class _CappedEmitter:
    """
    Per-type output budget. Prints the header lazily, before the first line.
    """

    def __init__(self, sink: ReportSink, header: str, limit: int) -> None:
        self._sink = sink
        self._header = header
        self._limit = limit
        self.count = 0

    @property
    def full(self) -> bool:
        return self.count >= self._limit

    def emit(self, line: str) -> None:
        if self.full:
            return
        if self.count == 0:
            self._sink.emit(self._header)
        self._sink.emit(line)
        self.count += 1


def method_set_diff(
    sink: ReportSink,
    before: Sequence[Method],
    after: Sequence[Method],
    label: str,
    *,
    package: str,
    after_package: str | None = None,
    limit: int = METHOD_LIMIT,
) -> int:
    """
    Diff the methods attached to a named type, independent of its shape.

    Methods match on their full rendered form, so a changed signature shows up
    as one addition plus one removal. At most `limit` lines are emitted; once
    that many are out, a single "Other Methods ...." sentinel closes the block.

    Returns the number of method lines emitted.
    """
    after_package = package if after_package is None else after_package
    out = _CappedEmitter(sink, label, limit)

    before_keys: dict[str, Method] = {attached_method_key(m, package): m for m in before if m.exported}
    matched: set[str] = set()

    for m in after:
        if not m.exported:
            continue
        k = attached_method_key(m, after_package)
        if k in before_keys:
            matched.add(k)
        else:
            out.emit(render_method(m, "+", "\t", package=after_package))

    for k, m in before_keys.items():
        if k not in matched:
            out.emit(render_method(m, "-", "\t", package=package))

    if out.count and out.full:
        sink.emit(OTHER_METHODS)

    return out.count
