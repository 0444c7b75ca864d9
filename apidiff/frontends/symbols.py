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
from pathlib import Path

from apidiff.errors import ResolveError
from apidiff.frontends.interfaces import ResolveConfig
from apidiff.model.loader import SymbolTableLoader
from apidiff.model.types import Package

logger = logging.getLogger(__name__)

SYMBOL_FILES: tuple[str, ...] = (
    "apidiff-symbols.yaml",
    "apidiff-symbols.yml",
    "apidiff-symbols.json",
)


class SymbolTableFrontEnd:
    """
    Front-end for packages resolved elsewhere.

    Reads a symbol table dumped by an external tool (for instance a type
    checker of another language) from the package directory. `directory` may
    also point straight at a symbol table file.
    """

    def __init__(self, loader: SymbolTableLoader | None = None) -> None:
        self._loader = loader or SymbolTableLoader()

    @property
    def frontend_id(self) -> str:
        return "symbols"

    def can_resolve(self, directory: Path) -> bool:
        return self._find(directory) is not None

    def resolve(self, config: ResolveConfig) -> Package:
        path = self._find(config.directory)
        if path is None:
            raise ResolveError(
                code="symbols_not_found",
                message=f"No symbol table in {config.directory}",
                details={"expected": list(SYMBOL_FILES)},
            )
        pkg = self._loader.load(path, package=config.package)
        logger.debug("loaded %s from %s: %d declarations", pkg.name, path, len(pkg))
        return pkg

    def _find(self, directory: Path) -> Path | None:
        if directory.is_file():
            return directory
        for name in SYMBOL_FILES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
        return None
