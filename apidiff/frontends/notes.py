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

import logging

from apidiff.frontends.interfaces import DEFAULT_NOTE_LIMIT

logger = logging.getLogger(__name__)


class NoteCollector:
    """
    Capped sink for front-end diagnostics.

    Only the first `limit` notes are logged; the rest are counted so a single
    summary can be logged at the end instead of flooding the output.
    """

    def __init__(self, directory: str, *, limit: int = DEFAULT_NOTE_LIMIT) -> None:
        self._directory = directory
        self._limit = limit
        self.notes: list[str] = []
        self.suppressed = 0

    def note(self, message: str) -> None:
        if len(self.notes) >= self._limit:
            self.suppressed += 1
            return
        # paths are relative to the package directory
        message = message.replace(self._directory, "...", 1)
        self.notes.append(message)
        logger.warning("\tNOTE: %s", message.replace("\n", "\n\t"))

    def finish(self) -> None:
        if self.suppressed:
            logger.debug("%d more notes suppressed for %s", self.suppressed, self._directory)

    def __len__(self) -> int:
        return len(self.notes) + self.suppressed
