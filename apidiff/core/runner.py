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
from pathlib import Path

from apidiff.core.config import DiffConfig
from apidiff.diff.engine import ApiDiffEngine
from apidiff.diff.sink import ReportSink
from apidiff.frontends.interfaces import ResolveConfig
from apidiff.frontends.registry import FrontEndRegistry
from apidiff.model.loader import SymbolTableLoader
from apidiff.model.types import Package
from apidiff.vcs.git import SnapshotRetriever

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DiffRun:
    """
    What was compared; the report itself went to the sink.
    """

    before: Package
    after: Package
    rev_old: str
    rev_new: str


def resolve_pair(
    old_dir: Path,
    new_dir: Path,
    config: DiffConfig,
    registry: FrontEndRegistry,
) -> tuple[Package, Package]:
    """
    Resolve both snapshots. Either both succeed or the error propagates
    before anything is diffed.
    """
    out: list[Package] = []
    for directory in (old_dir, new_dir):
        frontend = registry.get(config.frontend) if config.frontend else registry.detect(directory)
        logger.debug("resolving %s with front-end %r", directory, frontend.frontend_id)
        out.append(
            frontend.resolve(
                ResolveConfig(
                    directory=directory,
                    exclude_globs=config.exclude_globs,
                    note_limit=config.note_limit,
                )
            )
        )
    return out[0], out[1]


def run_diff(
    config: DiffConfig,
    sink: ReportSink,
    *,
    registry: FrontEndRegistry | None = None,
    retriever: SnapshotRetriever | None = None,
) -> DiffRun:
    """
    Full pipeline: check out both revisions, resolve both packages, diff them.

    Snapshots are removed on the way out, whether or not anything failed.
    """
    if registry is None:
        registry = FrontEndRegistry.default()
        registry.load_entrypoints()
    retriever = retriever or SnapshotRetriever()

    engine = ApiDiffEngine(method_limit=config.method_limit, max_line_width=config.max_line_width)

    with retriever.snapshots(config.package_dir(), config.rev_old, config.rev_new) as (old, new):
        before, after = resolve_pair(old.package_dir, new.package_dir, config, registry)
        engine.diff(before, after, sink)

    return DiffRun(before=before, after=after, rev_old=config.rev_old, rev_new=config.rev_new)


def diff_symbol_files(
    old_path: Path,
    new_path: Path,
    sink: ReportSink,
    *,
    package: str | None = None,
    engine: ApiDiffEngine | None = None,
) -> DiffRun:
    """
    Diff two symbol table files directly, without any repository.
    """
    loader = SymbolTableLoader()
    before = loader.load(old_path, package=package)
    after = loader.load(new_path, package=package)
    (engine or ApiDiffEngine()).diff(before, after, sink)
    return DiffRun(before=before, after=after, rev_old=str(old_path), rev_new=str(new_path))
