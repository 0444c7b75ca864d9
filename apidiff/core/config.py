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

import json
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from apidiff.diff.methods import METHOD_LIMIT
from apidiff.diff.render import MAX_LINE_WIDTH
from apidiff.errors import ConfigError
from apidiff.frontends.interfaces import DEFAULT_NOTE_LIMIT
from apidiff.vcs.git import CURRENT

CONFIG_FILES: tuple[str, ...] = ("apidiff.yaml", "apidiff.yml", "apidiff.json")


@dataclass(frozen=True)
class DiffConfig:
    repo_root: Path
    package_path: Path
    rev_old: str = CURRENT
    rev_new: str = "HEAD"
    frontend: str | None = None  # None => first front-end that can resolve the snapshot
    exclude_globs: tuple[str, ...] = ()
    note_limit: int = DEFAULT_NOTE_LIMIT
    method_limit: int = METHOD_LIMIT
    max_line_width: int = MAX_LINE_WIDTH

    def package_dir(self) -> Path:
        p = self.package_path
        if not p.is_absolute():
            p = self.repo_root / p
        return p.resolve()

    def with_options(self, options: Mapping[str, Any]) -> "DiffConfig":
        """
        Return a copy with file/CLI options applied; None values are ignored.
        """
        return replace(self, **{k: v for k, v in options.items() if v is not None})


# Keys a config file may set, and their expected types
_FILE_OPTIONS: dict[str, type | tuple[type, ...]] = {
    "frontend": str,
    "exclude_globs": (list, tuple),
    "note_limit": int,
    "method_limit": int,
    "max_line_width": int,
}


def find_config_file(repo_root: Path) -> Path | None:
    for name in CONFIG_FILES:
        candidate = repo_root / name
        if candidate.is_file():
            return candidate
    return None


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Read and validate an apidiff config file (YAML or JSON).

    Returns only the recognized options, normalized (globs as a tuple).
    """
    if not path.exists():
        raise ConfigError(code="config_not_found", message=f"Config file does not exist: {path}")

    raw = path.read_text(encoding="utf-8")
    try:
        data = json.loads(raw) if path.suffix.lower() == ".json" else yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(code="invalid_config", message=f"{path}: cannot parse config: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(code="invalid_config", message=f"{path}: config root must be a mapping/object.")

    unknown = sorted(set(data) - set(_FILE_OPTIONS))
    if unknown:
        raise ConfigError(
            code="unknown_option",
            message=f"{path}: unknown option(s): {', '.join(unknown)}",
            details={"supported": sorted(_FILE_OPTIONS)},
        )

    out: dict[str, Any] = {}
    for key, value in data.items():
        expected = _FILE_OPTIONS[key]
        # bool is an int subclass; reject it for numeric options
        if not isinstance(value, expected) or isinstance(value, bool):
            raise ConfigError(code="invalid_option", message=f"{path}: option '{key}' has the wrong type.")
        if key == "exclude_globs":
            value = tuple(str(g) for g in value)
        elif isinstance(value, int) and value < 1:
            raise ConfigError(code="invalid_option", message=f"{path}: option '{key}' must be positive.")
        out[key] = value
    return out
