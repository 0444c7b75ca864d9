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

from apidiff.diff._keys import field_key, strip_qualifier
from apidiff.diff.sink import ReportSink
from apidiff.model.types import Field


def aggregate_diff(
    before: Sequence[Field],
    after: Sequence[Field],
    name: str,
    *,
    package: str,
    after_package: str | None = None,
) -> list[str]:
    """
    Field-level diff of two record types.

    Returns the report block as lines, or an empty list when every exported
    (name, type) pair of `before` is still present in `after` and nothing was added.
    Field order does not matter.
    """
    after_package = package if after_package is None else after_package

    # p1 keys, in declaration order; value = matched in p2
    matched: dict[tuple[str, str], bool] = {field_key(f, package): False for f in before if f.exported}

    body: list[str] = []
    for f in after:
        if not f.exported:
            continue
        k = field_key(f, after_package)
        if k not in matched:
            body.append(f"\t+{f.name} {strip_qualifier(f.type, after_package)}")
        else:
            matched[k] = True

    for (fname, ftype), seen in matched.items():
        if not seen:
            body.append(f"\t-{fname} {ftype}")

    if not body:
        return []
    return [f"type {name} struct {{", *body, "}"]


def emit_aggregate_diff(
    sink: ReportSink,
    before: Sequence[Field],
    after: Sequence[Field],
    name: str,
    *,
    package: str,
    after_package: str | None = None,
) -> int:
    lines = aggregate_diff(before, after, name, package=package, after_package=after_package)
    for line in lines:
        sink.emit(line)
    return len(lines)
