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

from apidiff.cli._io import ensure_repo_root, read_options
from apidiff.cli.exitcodes import EXIT_OK
from apidiff.core.config import DiffConfig
from apidiff.core.runner import diff_symbol_files, run_diff
from apidiff.diff.engine import ApiDiffEngine
from apidiff.diff.sink import StreamSink
from apidiff.vcs.git import CURRENT


def revisions_diff(
    *,
    repo: str,
    package: str,
    revisions: list[str],
    config_path: str | None = None,
    frontend: str | None = None,
    method_limit: int | None = None,
) -> int:
    """
    Diff the API of `package` between two revisions.

    With one revision, the working tree is compared against it; with two,
    the first is compared against the second.
    """
    repo_root = ensure_repo_root(repo)

    if len(revisions) == 1:
        rev_old, rev_new = CURRENT, revisions[0]
    else:
        rev_old, rev_new = revisions[0], revisions[1]

    config = DiffConfig(repo_root=repo_root, package_path=Path(package), rev_old=rev_old, rev_new=rev_new)
    config = config.with_options(read_options(repo_root, config_path))
    config = config.with_options({"frontend": frontend, "method_limit": method_limit})

    run_diff(config, StreamSink())
    return EXIT_OK


def symbols_diff(*, old: str, new: str, package: str | None = None, method_limit: int | None = None) -> int:
    """
    Diff two symbol table files.
    """
    engine = ApiDiffEngine() if method_limit is None else ApiDiffEngine(method_limit=method_limit)
    diff_symbol_files(Path(old), Path(new), StreamSink(), package=package, engine=engine)
    return EXIT_OK
