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

from collections.abc import Mapping
from typing import Any


class ApiDiffError(Exception):
    """
    Base class for all user-facing apidiff errors.

    Everything that can go wrong before the diff starts (bad config, missing
    revision, unresolvable package) is raised as a subclass of this, so the
    CLI can report it without a traceback. The diff core itself never raises it.
    """

    code: str
    message: str
    details: Mapping[str, Any] | None = None

    def __init__(
        self,
        message: str,
        code: str = "apidiff_error",
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class ConfigError(ApiDiffError):
    """Raised when the config file or command-line options are invalid."""

    def __init__(self, message: str, code: str = "invalid_config", details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message, code=code, details=details)


class RetrievalError(ApiDiffError):
    """Raised when a revision snapshot cannot be produced."""

    def __init__(self, message: str, code: str = "retrieval_failed", details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message, code=code, details=details)


class ResolveError(ApiDiffError):
    """Raised when a front-end cannot build a Package from a snapshot."""

    def __init__(self, message: str, code: str = "resolve_failed", details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message, code=code, details=details)
