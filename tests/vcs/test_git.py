import shutil
import subprocess
from pathlib import Path

import pytest

from apidiff.errors import RetrievalError
from apidiff.vcs.git import CURRENT, GitVCSProvider, RevisionSnapshot, SnapshotRetriever, cleanup

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

# ----------------------------
# Helpers
# ----------------------------


def _git(cwd: Path, *args: str) -> str:
    out = subprocess.run(
        [
            "git",
            "-c",
            "user.name=apidiff",
            "-c",
            "user.email=apidiff@example.invalid",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=True,
    )
    return out.stdout.strip()


def _commit(repo: Path, files: dict[str, str], message: str) -> str:
    for rel, text in files.items():
        p = repo / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
    _git(repo, "add", "-A")
    _git(repo, "commit", "-q", "-m", message)
    return _git(repo, "rev-parse", "HEAD")


@pytest.fixture()
def repo(tmp_path: Path) -> Path:
    r = tmp_path / "repo"
    r.mkdir()
    _git(r, "init", "-q")
    return r


@pytest.fixture()
def scratch(tmp_path: Path) -> Path:
    d = tmp_path / "scratch"
    d.mkdir()
    return d


# ----------------------------
# Provider
# ----------------------------


def test_provider_queries(repo: Path, tmp_path: Path):
    first = _commit(repo, {"lib/api.py": "x = 1\n"}, "first")
    vcs = GitVCSProvider()

    assert vcs.is_git_repo(repo)
    assert vcs.toplevel(repo / "lib").resolve() == repo.resolve()
    assert vcs.current_commit(repo) == first
    assert vcs.revision_exists(repo, first)
    assert vcs.revision_exists(repo, "HEAD")
    assert not vcs.revision_exists(repo, "no-such-branch")

    outside = tmp_path / "outside"
    outside.mkdir()
    assert not vcs.is_git_repo(outside)
    assert vcs.toplevel(outside) is None
    assert vcs.current_commit(outside) is None


# ----------------------------
# Retrieval
# ----------------------------


def test_two_revisions_are_checked_out_and_removed(repo: Path, scratch: Path):
    first = _commit(repo, {"lib/api.py": "x = 1\n"}, "first")
    second = _commit(repo, {"lib/api.py": "x = 2\n"}, "second")

    retriever = SnapshotRetriever(temp_parent=scratch)
    with retriever.snapshots(repo / "lib", first, second) as (old, new):
        assert old.revision == first
        assert new.revision == second
        assert old.is_temporary and new.is_temporary
        assert (old.package_dir / "api.py").read_text(encoding="utf-8") == "x = 1\n"
        assert (new.package_dir / "api.py").read_text(encoding="utf-8") == "x = 2\n"
        assert old.temp_root != new.temp_root
        assert old.temp_root is not None and old.temp_root.parent == scratch

    assert list(scratch.iterdir()) == []


def test_current_uses_working_tree(repo: Path, scratch: Path):
    _commit(repo, {"lib/api.py": "x = 1\n"}, "first")
    (repo / "lib" / "api.py").write_text("x = 'dirty'\n", encoding="utf-8")

    retriever = SnapshotRetriever(temp_parent=scratch)
    with retriever.snapshots(repo / "lib", CURRENT, "HEAD") as (old, new):
        assert not old.is_temporary
        assert old.package_dir == (repo / "lib").resolve()
        assert (old.package_dir / "api.py").read_text(encoding="utf-8") == "x = 'dirty'\n"
        assert (new.package_dir / "api.py").read_text(encoding="utf-8") == "x = 1\n"

    # the working tree survives cleanup
    assert (repo / "lib" / "api.py").exists()
    assert list(scratch.iterdir()) == []


def test_missing_revision(repo: Path, scratch: Path):
    _commit(repo, {"lib/api.py": "x = 1\n"}, "first")

    with pytest.raises(RetrievalError) as ei:
        with SnapshotRetriever(temp_parent=scratch).snapshots(repo / "lib", "HEAD", "v9.9.9"):
            pass

    assert ei.value.code == "revision_not_found"
    assert ei.value.details == {"revision": "v9.9.9"}
    assert list(scratch.iterdir()) == []


def test_not_a_git_repo(tmp_path: Path):
    pkg = tmp_path / "plain"
    pkg.mkdir()

    with pytest.raises(RetrievalError) as ei:
        with SnapshotRetriever().snapshots(pkg, CURRENT, "HEAD"):
            pass
    assert ei.value.code == "not_a_git_repo"


def test_missing_package_directory(repo: Path):
    with pytest.raises(RetrievalError) as ei:
        with SnapshotRetriever().snapshots(repo / "nope", CURRENT, "HEAD"):
            pass
    assert ei.value.code == "package_not_found"


def test_failed_checkout_removes_every_temp_dir(repo: Path, scratch: Path):
    first = _commit(repo, {"lib/api.py": "x = 1\n"}, "first")

    # revision_exists passes, but the checkout itself fails
    class _Lenient(GitVCSProvider):
        def revision_exists(self, path, revision):
            return True

    retriever = SnapshotRetriever(vcs=_Lenient(), temp_parent=scratch)
    with pytest.raises(RetrievalError) as ei:
        with retriever.snapshots(repo / "lib", first, "does-not-exist"):
            pass

    assert ei.value.code == "checkout_failed"
    assert list(scratch.iterdir()) == []


def test_cleanup_ignores_working_tree(tmp_path: Path):
    work = tmp_path / "work"
    work.mkdir()
    temp = tmp_path / "temp"
    (temp / "repo").mkdir(parents=True)

    cleanup(
        RevisionSnapshot(revision=CURRENT, package_dir=work),
        RevisionSnapshot(revision="HEAD", package_dir=temp / "repo", temp_root=temp),
    )

    assert work.exists()
    assert not temp.exists()
