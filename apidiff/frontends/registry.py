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
from dataclasses import dataclass
from importlib.metadata import entry_points
from pathlib import Path
from typing import Final

from apidiff.errors import ResolveError
from apidiff.frontends.interfaces import FrontEnd
from apidiff.frontends.python import PythonFrontEnd
from apidiff.frontends.symbols import SymbolTableFrontEnd

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP: Final[str] = "apidiff.frontends"


@dataclass(frozen=True, slots=True)
class FrontEndLoadError:
    """
    Represents a failure to load a front-end plugin (kept non-fatal).
    """

    source: str
    error: str


class FrontEndRegistry:
    """
    Holds the built-in front-ends plus any registered under the
    'apidiff.frontends' entry point group.

    Typical lifecycle:
      reg = FrontEndRegistry.default()
      reg.load_entrypoints()
      fe = reg.get("python")  # or reg.detect(snapshot_dir)
    """

    def __init__(self) -> None:
        self._frontends: dict[str, FrontEnd] = {}
        self._load_errors: list[FrontEndLoadError] = []
        self._entrypoints_loaded = False

    @classmethod
    def default(cls) -> "FrontEndRegistry":
        reg = cls()
        # symbols first: an explicit symbol table wins over guessing from sources
        reg.register(SymbolTableFrontEnd())
        reg.register(PythonFrontEnd())
        return reg

    def register(self, frontend: FrontEnd) -> None:
        self._frontends[frontend.frontend_id] = frontend

    def load_entrypoints(self) -> None:
        """
        Discover front-ends registered under entry point group 'apidiff.frontends'.

        Plugin import errors are recorded, not raised. Accepts either a
        front-end instance or a zero-argument factory/class.
        """
        if self._entrypoints_loaded:
            return

        for ep in entry_points(group=ENTRYPOINT_GROUP):
            source = f"{ep.module}:{ep.attr}"
            try:
                loaded = ep.load()
                frontend = loaded() if callable(loaded) else loaded
                if not isinstance(getattr(frontend, "frontend_id", None), str):
                    raise TypeError("front-end has no string 'frontend_id'")
            except Exception as e:
                logger.debug("cannot load front-end %s: %s", source, e)
                self._load_errors.append(FrontEndLoadError(source=source, error=str(e)))
                continue
            self.register(frontend)

        self._entrypoints_loaded = True

    @property
    def load_errors(self) -> tuple[FrontEndLoadError, ...]:
        return tuple(self._load_errors)

    def ids(self) -> list[str]:
        return list(self._frontends)

    def get(self, frontend_id: str) -> FrontEnd:
        try:
            return self._frontends[frontend_id]
        except KeyError:
            raise ResolveError(
                code="frontend_not_found",
                message=f"Unknown front-end {frontend_id!r}",
                details={"available": self.ids()},
            ) from None

    def detect(self, directory: Path) -> FrontEnd:
        for fe in self._frontends.values():
            if fe.can_resolve(directory):
                return fe
        raise ResolveError(
            code="no_sources",
            message=f"No front-end can resolve {directory}",
            details={"available": self.ids()},
        )
