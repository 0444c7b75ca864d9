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

import asyncio
import logging
import shutil
import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from apidiff.errors import RetrievalError

logger = logging.getLogger(__name__)

# Revision name meaning "the working tree as it is now"
CURRENT = "current"


@dataclass(frozen=True, slots=True)
class GitVCSProvider:
    """
    Read-only git queries against an existing repository.

    All operations are safe to run in any directory; failures are reported
    as None/False rather than raised.
    """

    timeout: float = 5

    def _run(self, args: list[str], cwd: str | Path) -> subprocess.CompletedProcess[str] | None:
        try:
            return subprocess.run(
                ["git", *args],
                cwd=str(cwd),
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except (subprocess.TimeoutExpired, OSError):
            return None

    def is_git_repo(self, path: str | Path) -> bool:
        """
        Check if the path is inside a Git work tree.
        """
        result = self._run(["rev-parse", "--is-inside-work-tree"], path)
        return result is not None and result.returncode == 0 and result.stdout.strip() == "true"

    def toplevel(self, path: str | Path) -> Path | None:
        """
        Directory in which the repository containing `path` was initialized.
        """
        result = self._run(["rev-parse", "--show-toplevel"], path)
        if result is None or result.returncode != 0:
            return None
        return Path(result.stdout.strip())

    def current_commit(self, path: str | Path) -> str | None:
        result = self._run(["rev-parse", "HEAD"], path)
        if result is None or result.returncode != 0:
            return None
        return result.stdout.strip()

    def revision_exists(self, path: str | Path, revision: str) -> bool:
        result = self._run(["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"], path)
        return result is not None and result.returncode == 0


@dataclass(frozen=True, slots=True)
class RevisionSnapshot:
    """
    One revision of the package, materialized on disk.

    `temp_root` is the temporary directory owning the checkout; it is None
    for the working tree, which must never be deleted.
    """

    revision: str
    package_dir: Path
    temp_root: Path | None = None

    @property
    def is_temporary(self) -> bool:
        return self.temp_root is not None


@dataclass(slots=True)
class SnapshotRetriever:
    """
    Produces isolated checkouts of two revisions of a git repository.

    Both checkouts run concurrently (`git clone --local` + `git checkout`).
    If either fails, the other is cancelled, every temporary directory created
    so far is removed, and the first error is raised.
    """

    vcs: GitVCSProvider = field(default_factory=GitVCSProvider)
    temp_parent: Path | None = None

    @contextmanager
    def snapshots(self, package_dir: Path, rev_old: str, rev_new: str) -> Iterator[tuple[RevisionSnapshot, RevisionSnapshot]]:
        """
        Context manager yielding (old, new) snapshots and removing them on exit.
        """
        old, new = asyncio.run(self.retrieve(package_dir, rev_old, rev_new))
        try:
            yield old, new
        finally:
            cleanup(old, new)

    async def retrieve(self, package_dir: Path, rev_old: str, rev_new: str) -> tuple[RevisionSnapshot, RevisionSnapshot]:
        package_dir = package_dir.resolve()
        if not package_dir.is_dir():
            raise RetrievalError(code="package_not_found", message=f"package does not exist: {package_dir}")

        if not self.vcs.is_git_repo(package_dir):
            raise RetrievalError(code="not_a_git_repo", message=f"cannot work in a non git directory {package_dir}")

        repo_root = self.vcs.toplevel(package_dir)
        if repo_root is None:
            raise RetrievalError(code="not_a_git_repo", message=f"cannot find repository root of {package_dir}")
        repo_root = repo_root.resolve()

        for rev in (rev_old, rev_new):
            if rev != CURRENT and not self.vcs.revision_exists(repo_root, rev):
                raise RetrievalError(
                    code="revision_not_found",
                    message=f"revision {rev!r} not found in {repo_root}",
                    details={"revision": rev},
                )

        rel = package_dir.relative_to(repo_root)
        created: list[Path] = []

        jobs: list[asyncio.Task[RevisionSnapshot]] = []
        if rev_old != CURRENT:
            jobs.append(asyncio.create_task(self._checkout(repo_root, rel, rev_old, created)))
        jobs.append(asyncio.create_task(self._checkout(repo_root, rel, rev_new, created)))

        done, pending = await asyncio.wait(jobs, return_when=asyncio.FIRST_EXCEPTION)

        errors = [e for e in (t.exception() for t in jobs if t in done) if e is not None]
        if errors:
            for t in pending:
                t.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            _remove_all(created)
            raise errors[0]

        results = [t.result() for t in jobs]
        old = results[0] if rev_old != CURRENT else RevisionSnapshot(revision=CURRENT, package_dir=package_dir)
        new = results[-1]
        return old, new

    async def _checkout(self, repo_root: Path, rel: Path, revision: str, created: list[Path]) -> RevisionSnapshot:
        try:
            tmp = Path(tempfile.mkdtemp(prefix="apidiff-", dir=self.temp_parent))
        except OSError as e:
            raise RetrievalError(code="tempdir_failed", message=f"error creating temporary directory: {e}") from e
        created.append(tmp)

        logger.debug("cloning %s at %s into %s", repo_root, revision, tmp)
        await _git(["clone", "--local", "--quiet", str(repo_root)], cwd=tmp, code="clone_failed")

        clone = tmp / repo_root.name
        await _git(["checkout", "--quiet", revision], cwd=clone, code="checkout_failed")

        return RevisionSnapshot(revision=revision, package_dir=clone / rel, temp_root=tmp)


async def _git(args: list[str], *, cwd: Path, code: str) -> str:
    proc = await asyncio.create_subprocess_exec(
        "git",
        *args,
        cwd=str(cwd),
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    try:
        out, _ = await proc.communicate()
    except asyncio.CancelledError:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
        raise

    output = out.decode("utf-8", errors="replace").strip()
    if proc.returncode != 0:
        raise RetrievalError(
            code=code,
            message=f"git {args[0]} failed: {output}",
            details={"args": args, "cwd": str(cwd), "returncode": proc.returncode},
        )
    return output


def _remove_all(paths: list[Path]) -> None:
    for p in paths:
        shutil.rmtree(p, ignore_errors=True)


def cleanup(*snapshots: RevisionSnapshot) -> None:
    """
    Remove temporary checkouts. The working tree is never touched.
    """
    _remove_all([s.temp_root for s in snapshots if s.temp_root is not None])
