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

import re
from functools import lru_cache

from apidiff.model.types import Embed, Field, Method


@lru_cache(maxsize=256)
def _qualifier_re(package: str) -> re.Pattern[str]:
    # "pack." not preceded by an identifier char or a dot, so "mypack.X" and "a.pack.X" stay intact
    return re.compile(r"(?<![\w.])" + re.escape(package) + r"\.")


def strip_qualifier(text: str, package: str) -> str:
    """
    Remove every "<package>." qualification from `text`.

    Used for both equality and rendering, so identical shapes declared in
    differently named packages compare equal.
    """
    if not package:
        return text
    return _qualifier_re(package).sub("", text)


def field_key(f: Field, package: str) -> tuple[str, str]:
    """
    Aggregate fields match on exact (name, type): a retyped field is a removal plus an addition.
    """
    return (f.name, strip_qualifier(f.type, package))


def contract_method_key(m: Method) -> str:
    """
    Explicit contract methods match on name only.

    A method that keeps its name but changes signature is reported as unchanged.
    """
    return m.name


def embed_key(e: Embed) -> str:
    return e.qualified_name


def attached_method_key(m: Method, package: str) -> str:
    """
    Attached methods match on the full rendered method (receiver, name and signature).
    """
    return strip_qualifier(m.text, package)
