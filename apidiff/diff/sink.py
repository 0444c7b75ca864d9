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

import sys
from typing import Protocol, TextIO


class ReportSink(Protocol):
    """
    Destination for report lines.

    The diff core writes through a sink instead of printing, so callers decide
    where the report goes (stdout, a file, a list in tests).
    """

    def emit(self, line: str) -> None:
        raise NotImplementedError()


class ListSink:
    """
    Collects emitted lines in memory.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []

    def emit(self, line: str) -> None:
        self.lines.append(line)

    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)

    def __len__(self) -> int:
        return len(self.lines)


class StreamSink:
    """
    Writes each line, newline-terminated, to a text stream (stdout by default).
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self.count = 0

    def emit(self, line: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(line + "\n")
        self.count += 1
