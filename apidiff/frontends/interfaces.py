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

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from apidiff.model.types import Package

# Diagnostics notes surfaced per resolution before the rest are swallowed.
DEFAULT_NOTE_LIMIT = 4


@dataclass(frozen=True, slots=True)
class ResolveConfig:
    """
    Configuration passed to a front-end for one snapshot.

    IMPORTANT:
    - Front-ends should not mutate it.
    - `directory` is the package directory inside a snapshot.
    """

    directory: Path

    exclude_globs: tuple[str, ...] = field(default_factory=tuple)
    note_limit: int = DEFAULT_NOTE_LIMIT

    # Optional explicit package selection for front-ends that can see several
    package: str | None = None

    def normalized_directory(self) -> Path:
        return self.directory.resolve()


class FrontEnd(Protocol):
    """
    Semantic front-end contract.

    A front-end turns the sources of one package directory into a fully
    resolved, language-agnostic Package. Resolution is best-effort: recoverable
    problems become notes, only unusable input raises ResolveError.
    """

    @property
    def frontend_id(self) -> str:
        """
        Stable id used on the command line and in config, e.g. "python".
        """
        raise NotImplementedError()

    def can_resolve(self, directory: Path) -> bool:
        """
        Lightweight detection check. Must not parse sources.
        """
        raise NotImplementedError()

    def resolve(self, config: ResolveConfig) -> Package:
        raise NotImplementedError()
