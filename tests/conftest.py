"""
aur-fleet test fixtures

Builds real git repositories in tmp_path: an "upstream" working tree per
package plus local clones under a repos root that track it.

Run with: pytest tests/ -v
"""

import os
import subprocess
from pathlib import Path

import pytest

BASE_TIMESTAMP = 1_700_000_000


def git(cwd: Path, *args: str, env: dict | None = None) -> str:
    """Run git in cwd and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
        env={**os.environ, **(env or {})},
    )
    return result.stdout.strip()


class Upstream:
    """A package's upstream repository that local clones fetch from."""

    def __init__(self, path: Path):
        self.path = path
        self.tick = 0
        path.mkdir(parents=True)
        git(path, "init", "--quiet")
        git(path, "symbolic-ref", "HEAD", "refs/heads/master")

    def commit(self, message: str, filename: str = "PKGBUILD") -> str:
        """Commit a change with a strictly increasing timestamp; return its id."""
        self.tick += 1
        (self.path / filename).write_text(f"pkgrel={self.tick}\n# {message}\n")
        git(self.path, "add", filename)
        date = f"{BASE_TIMESTAMP + self.tick * 60} +0000"
        git(
            self.path,
            "commit",
            "--quiet",
            "-m",
            message,
            env={"GIT_AUTHOR_DATE": date, "GIT_COMMITTER_DATE": date},
        )
        return self.head()

    def head(self) -> str:
        return git(self.path, "rev-parse", "HEAD")


@pytest.fixture(autouse=True)
def git_env(tmp_path, monkeypatch):
    """Isolate git and aur-fleet from the user's configuration."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Fleet Tester")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "tester@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Fleet Tester")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "tester@example.com")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    for var in ("XDG_CONFIG_HOME", "XDG_DATA_HOME", "AUR_FLEET_REPOS", "AUR_FLEET_AUR_URL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def repos_root(tmp_path) -> Path:
    root = tmp_path / "repos"
    root.mkdir()
    return root


@pytest.fixture
def make_upstream(tmp_path):
    """Factory: create an upstream repository with one initial commit."""

    def _make(name: str, first_message: str = "Initial import") -> Upstream:
        upstream = Upstream(tmp_path / "upstream" / name)
        upstream.commit(first_message)
        return upstream

    return _make


@pytest.fixture
def make_clone(repos_root):
    """Factory: clone an upstream into the repos root under ``name``."""

    def _clone(upstream: Upstream, name: str | None = None) -> Path:
        destination = repos_root / (name or upstream.path.name)
        git(repos_root, "clone", "--quiet", str(upstream.path), str(destination))
        return destination

    return _clone
