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

from apidiff.diff._keys import contract_method_key, embed_key
from apidiff.diff.render import render, render_method
from apidiff.diff.sink import ReportSink
from apidiff.model.types import Declaration, Embed, Method


def contract_diff(before: Declaration, after: Declaration, name: str) -> list[str]:
    """
    Diff two interface-shaped types.

    Two independent passes:
      - explicit methods, matched by name only (a signature change alone is invisible)
      - embedded contracts, matched by qualified name

    Additions are listed first (methods, then embeds, in `after` order), then
    removals (methods, then embeds, in `before` order).
    """
    added: list[str] = []
    removed: list[str] = []

    before_methods: dict[str, Method] = {contract_method_key(m): m for m in before.methods if m.exported}
    seen_methods: set[str] = set()
    for m in after.methods:
        if not m.exported:
            continue
        k = contract_method_key(m)
        if k in before_methods:
            seen_methods.add(k)
        else:
            added.append(render_method(m, "+", "\t", package=after.package, owner=name))

    before_embeds: dict[str, Embed] = {embed_key(e): e for e in before.embeds if e.exported}
    seen_embeds: set[str] = set()
    for e in after.embeds:
        if not e.exported:
            continue
        k = embed_key(e)
        if k in before_embeds:
            seen_embeds.add(k)
        else:
            added.append(render(e.declaration, "+", "\t"))

    for k, m in before_methods.items():
        if k not in seen_methods:
            removed.append(render_method(m, "-", "\t", package=before.package, owner=name))

    for k, e in before_embeds.items():
        if k not in seen_embeds:
            removed.append(render(e.declaration, "-", "\t"))

    body = added + removed
    if not body:
        return []
    return [f"type {name} interface {{", *body, "}"]


def emit_contract_diff(sink: ReportSink, before: Declaration, after: Declaration, name: str) -> int:
    lines = contract_diff(before, after, name)
    for line in lines:
        sink.emit(line)
    return len(lines)
