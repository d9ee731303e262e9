"""End-to-end tests for the typer application."""

import json
import logging

import pytest
from rich.logging import RichHandler
from typer.testing import CliRunner

from aur_fleet import aur
from aur_fleet._version import __version__
from aur_fleet.core import _progress, app, configure_logging, err_console, resolve_repos_root

from conftest import Upstream, git

runner = CliRunner()


@pytest.fixture
def fleet(repos_root, make_upstream, make_clone):
    """foo is up to date, bar is two commits behind."""
    make_clone(make_upstream("foo"))
    bar = make_upstream("bar")
    make_clone(bar)
    bar.commit("add feature")
    bar.commit("fix bug")
    return repos_root


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_schema_lists_every_command():
    result = runner.invoke(app, ["--schema"])
    assert result.exit_code == 0
    schema = json.loads(result.output)
    assert {tool["name"] for tool in schema["tools"]} == {"fetch", "pull", "clone", "search"}


def test_fetch_json(fleet):
    result = runner.invoke(app, ["--repos", str(fleet), "fetch", "--json"])

    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["updates"] == [
        {"name": "bar", "commits": ["fix bug", "add feature"], "count": 2}
    ]
    assert output["summary"]["checked"] == 2


def test_fetch_is_the_default_command(fleet):
    result = runner.invoke(app, ["--repos", str(fleet)])

    assert result.exit_code == 0
    assert "The following packages have upstream changes" in result.output
    assert "bar" in result.output
    assert "fix bug" in result.output
    assert "foo" not in result.output


def test_repos_from_environment(fleet, monkeypatch):
    monkeypatch.setenv("AUR_FLEET_REPOS", str(fleet))

    result = runner.invoke(app, ["fetch", "--json", "--workers", "1"])

    assert result.exit_code == 0
    assert [u["name"] for u in json.loads(result.stdout)["updates"]] == ["bar"]


def test_fetch_creates_missing_root(tmp_path):
    root = tmp_path / "fresh" / "repos"

    result = runner.invoke(app, ["--repos", str(root), "fetch"])

    assert result.exit_code == 0
    assert root.is_dir()
    assert "no packages with upstream changes" in result.output


def test_partial_failure_keeps_exit_status(fleet, tmp_path):
    git(fleet / "foo", "remote", "set-url", "origin", str(tmp_path / "unreachable"))

    result = runner.invoke(app, ["--repos", str(fleet), "fetch"])

    assert result.exit_code == 0
    assert "fix bug" in result.output


def test_strict_exits_non_zero_on_partial_failure(fleet, tmp_path):
    git(fleet / "foo", "remote", "set-url", "origin", str(tmp_path / "unreachable"))

    result = runner.invoke(app, ["--repos", str(fleet), "--strict", "fetch"])

    assert result.exit_code == 1


def test_pull_named_package(fleet):
    result = runner.invoke(app, ["--repos", str(fleet), "pull", "bar", "--json"])

    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["summary"] == {"total": 1, "success": 1, "failed": 0}
    assert output["results"][0]["update"]["commits"] == ["fix bug", "add feature"]
    assert git(fleet / "bar", "rev-parse", "HEAD") == git(fleet / "bar", "rev-parse", "@{upstream}")


def test_pull_everything_then_nothing_left(fleet):
    first = runner.invoke(app, ["--repos", str(fleet), "pull"])
    assert first.exit_code == 0
    assert "add feature" in first.output

    second = runner.invoke(app, ["--repos", str(fleet), "fetch", "--json"])
    assert json.loads(second.stdout)["updates"] == []


def test_search_without_matches(monkeypatch):
    monkeypatch.setattr(aur, "search", lambda query: [])

    result = runner.invoke(app, ["search", "nothing-matches"])

    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert len(lines) == 1
    assert lines[0].strip().endswith("No packages found")


def test_search_prints_names(monkeypatch):
    monkeypatch.setattr(
        aur, "search", lambda query: [aur.AurPackage("paru"), aur.AurPackage("yay")]
    )

    result = runner.invoke(app, ["search", "helper"])

    assert result.exit_code == 0
    assert "paru" in result.output
    assert "yay" in result.output


def test_search_rpc_failure_exits_non_zero(monkeypatch):
    def failing(query):
        raise aur.AurRpcError("AUR request failed: timeout")

    monkeypatch.setattr(aur, "search", failing)

    result = runner.invoke(app, ["search", "helper"])

    assert result.exit_code == 1


def test_clone_package(repos_root, tmp_path, monkeypatch):
    upstream = Upstream(tmp_path / "aur" / "foo.git")
    upstream.commit("Initial import")
    monkeypatch.setenv("AUR_FLEET_AUR_URL", f"file://{tmp_path / 'aur'}")
    monkeypatch.setattr(aur, "package_info", lambda name: aur.AurPackage(name, base=name))

    result = runner.invoke(app, ["--repos", str(repos_root), "clone", "foo"])

    assert result.exit_code == 0
    assert (repos_root / "foo" / "PKGBUILD").exists()
    assert git(repos_root / "foo", "rev-parse", "HEAD") == upstream.head()


def test_clone_unknown_package(repos_root, monkeypatch):
    monkeypatch.setattr(aur, "package_info", lambda name: None)

    result = runner.invoke(app, ["--repos", str(repos_root), "clone", "ghost"])

    assert result.exit_code == 1
    assert not (repos_root / "ghost").exists()


def test_clone_existing_directory_fails(repos_root, monkeypatch):
    (repos_root / "foo").mkdir()
    monkeypatch.setattr(aur, "package_info", lambda name: aur.AurPackage(name, base=name))

    result = runner.invoke(app, ["--repos", str(repos_root), "clone", "foo"])

    assert result.exit_code == 1


def test_resolve_repos_root_prefers_explicit_path(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    assert resolve_repos_root(tmp_path / "explicit") == tmp_path / "explicit"
    assert resolve_repos_root() == tmp_path / "xdg" / "aur-fleet" / "repos"


def test_repos_root_as_leading_positional(fleet):
    result = runner.invoke(app, [str(fleet), "fetch"])

    assert result.exit_code == 0
    assert "fix bug" in result.output


def test_leading_positional_alone_runs_fetch(fleet):
    result = runner.invoke(app, [str(fleet)])

    assert result.exit_code == 0
    assert "The following packages have upstream changes" in result.output
    assert "fix bug" in result.output


def test_leading_positional_after_global_options(fleet, tmp_path):
    git(fleet / "foo", "remote", "set-url", "origin", str(tmp_path / "unreachable"))

    result = runner.invoke(app, ["--strict", str(fleet), "fetch"])

    assert result.exit_code == 1
    assert "fix bug" in result.output


def test_command_without_repos_root_uses_default_storage(tmp_path):
    result = runner.invoke(app, ["fetch"])

    assert result.exit_code == 0
    assert "no packages with upstream changes" in result.output
    assert (tmp_path / "home" / ".local" / "share" / "aur-fleet" / "repos").is_dir()


def test_progress_spinner_shares_the_log_console():
    configure_logging()
    handlers = [
        h for h in logging.getLogger("aur_fleet").handlers if isinstance(h, RichHandler)
    ]

    assert len(handlers) == 1
    assert handlers[0].console is err_console
    assert _progress("Fetching package repositories...").console is err_console
