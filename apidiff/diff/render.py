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

from typing import Any, Literal

from apidiff.diff._keys import strip_qualifier
from apidiff.model.types import Declaration, DeclKind, Method

Marker = Literal["+", "-"]

# Named types rendered longer than this get their body elided.
MAX_LINE_WIDTH = 115

ELLIPSIS = "...."
UNTYPED_MARKER = "untyped "


def render(decl: Any, marker: Marker, padding: str = "", *, max_width: int = MAX_LINE_WIDTH) -> str:
    """
    Render one declaration as a single report line (no trailing newline).

    Examples:
      "+var A time.Time"
      "-func K(int)"
      "+type T1 struct {A int; G string}"
      "-type I4 interface {....}"
    """
    kind = getattr(decl, "kind", None)
    if not isinstance(decl, Declaration) or not isinstance(kind, DeclKind):
        name = getattr(decl, "name", repr(decl))
        return f"{padding}{marker}Untreated{name}"

    if kind.is_value():
        text = strip_qualifier(decl.text, decl.package)
        return f"{padding}{marker}{text.replace(UNTYPED_MARKER, '')}"

    if kind == DeclKind.FUNC:
        return f"{padding}{marker}{strip_qualifier(decl.text, decl.package)}"

    if kind == DeclKind.TYPE:
        return _render_named_type(decl, f"{padding}{marker}", max_width)

    return f"{padding}{marker}Untreated{decl.name}"


def render_method(m: Method, marker: Marker, padding: str = "", *, package: str = "", owner: str = "") -> str:
    """
    Render a method line. When `owner` is given, the "(owner)." receiver is
    dropped, which is how explicit contract methods are listed.
    """
    text = strip_qualifier(m.text, package)
    if owner:
        text = text.replace(f"({owner}).", "", 1)
    return f"{padding}{marker}{text}"


def _render_named_type(decl: Declaration, prefix: str, max_width: int) -> str:
    # the bound applies to the whole printed line, prefix included
    text = strip_qualifier(decl.text, decl.package)
    line = prefix + text.replace("{", " {", 1)
    if len(line) > max_width:
        line = prefix + elide_body(text).replace("{", " {", 1)
    return line.replace('\\"', "")


def elide_body(text: str) -> str:
    """
    Replace everything between the outermost braces with an ellipsis.

    "type T struct{A int; B string}" -> "type T struct{....}"
    Declarations without a body keep their text, except that an empty
    body "{}" is marked as elided.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[: start + 1] + ELLIPSIS + text[end:]
    return text.replace("{}", "{" + ELLIPSIS + "}", 1)
