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

from dataclasses import dataclass

from apidiff.diff._keys import strip_qualifier
from apidiff.diff.aggregate import emit_aggregate_diff
from apidiff.diff.contract import emit_contract_diff
from apidiff.diff.methods import METHOD_LIMIT, method_set_diff
from apidiff.diff.render import MAX_LINE_WIDTH, Marker, render
from apidiff.diff.sink import ListSink, ReportSink
from apidiff.model.types import Declaration, DeclKind, Package, Shape


@dataclass(frozen=True, slots=True)
class ApiDiffEngine:
    """
    Structural diff of two resolved packages' exported API.

    Output order:
      1) changes to identifiers present in both packages, in `before` name order
      2) "-" lines for identifiers only in `before`
      3) "+" lines for identifiers only in `after`, in name order

    Pure and deterministic: no I/O besides the sink.
    """

    method_limit: int = METHOD_LIMIT
    max_line_width: int = MAX_LINE_WIDTH

    def diff(self, before: Package, after: Package, sink: ReportSink) -> None:
        examined: set[str] = set()
        removed: list[Declaration] = []

        for d1 in before.exported():
            name = d1.name
            examined.add(name)

            d2 = after.lookup(name)
            if d2 is None:
                removed.append(d1)
                continue

            self._compare(d1, d2, sink)

        for d1 in removed:
            sink.emit(self._render(d1, "-"))

        for d2 in after.exported():
            if d2.name in examined:
                continue
            sink.emit(self._render(d2, "+"))

    def _compare(self, d1: Declaration, d2: Declaration, sink: ReportSink) -> None:
        sig1 = strip_qualifier(d1.signature, d1.package)
        sig2 = strip_qualifier(d2.signature, d2.package)

        def general() -> None:
            sink.emit(self._render(d2, "+"))
            sink.emit(self._render(d1, "-"))

        if d1.kind in (DeclKind.VAR, DeclKind.CONST, DeclKind.FUNC):
            if sig1 != sig2:
                general()
            return

        if not (d1.is_named_type() and d2.is_named_type()):
            general()
            return

        if d1.shape == Shape.AGGREGATE:
            if d2.shape == Shape.AGGREGATE:
                emit_aggregate_diff(sink, d1.fields, d2.fields, d1.name, package=d1.package, after_package=d2.package)
            else:
                general()
            # methods can change independently of the fields
            method_set_diff(
                sink,
                d1.method_set,
                d2.method_set,
                d1.name,
                package=d1.package,
                after_package=d2.package,
                limit=self.method_limit,
            )
        elif d1.shape == Shape.CONTRACT:
            if d2.shape == Shape.CONTRACT:
                emit_contract_diff(sink, d1, d2, d1.name)
            else:
                general()
        elif sig1 != sig2:
            general()

    def _render(self, decl: Declaration, marker: Marker) -> str:
        return render(decl, marker, max_width=self.max_line_width)


def diff(before: Package, after: Package, sink: ReportSink) -> None:
    """
    Diff `before` against `after` with default settings, writing report lines to `sink`.
    """
    ApiDiffEngine().diff(before, after, sink)


def diff_lines(before: Package, after: Package) -> list[str]:
    sink = ListSink()
    diff(before, after, sink)
    return sink.lines
