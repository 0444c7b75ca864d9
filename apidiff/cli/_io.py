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

from pathlib import Path

from apidiff.core.config import find_config_file, load_config_file


def ensure_repo_root(path: str) -> Path:
    p = Path(path).resolve()
    if not p.exists():
        raise FileNotFoundError(f"Path does not exist: {p}")
    return p


def read_options(repo_root: Path, config_path: str | None) -> dict:
    """
    Options from an explicit --config file, else from apidiff.yaml in the repo root.
    """
    if config_path is not None:
        return load_config_file(Path(config_path))
    found = find_config_file(repo_root)
    return load_config_file(found) if found is not None else {}
