"""
aur-fleet: Keep local AUR package repositories in sync with upstream.

Checks every package repository under a storage directory for new upstream
commits in parallel, reports them, and fast-forwards on request.
"""

from __future__ import annotations

import heapq
import json
import logging
import os
import queue
import re
import subprocess
import sys
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

import typer
from typer.core import TyperGroup
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import aur
from ._version import __version__
from .errors import (
    CheckoutError,
    CloneError,
    FleetError,
    InvalidPackageName,
    NetworkError,
    NonFastForwardError,
    PackageNotFoundError,
    RefUpdateError,
    RemoteNotFound,
    RepoOpenError,
    RepositoryRootError,
    RevisionResolutionError,
)
from .formatters import OutputFormatter
from .schema import get_tool_schema

logger = logging.getLogger(__name__)

APP_NAME = "aur-fleet"
DEFAULT_REMOTE = "origin"
DEFAULT_BRANCH = "master"

# AUR package names: lowercase alnum plus @._+- and never a leading dot or dash
PACKAGE_NAME_RE = re.compile(r"^[a-z0-9@_+][a-z0-9@._+-]*$")

# =============================================================================
# Domain Models
# =============================================================================


@dataclass(order=True)
class UpdateInfo:
    """New upstream commits for one package, newest first.

    Equality and ordering only look at the package name.
    """

    name: str
    commits: list[str] = field(default_factory=list, compare=False)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "commits": list(self.commits),
            "count": len(self.commits),
        }


@dataclass(frozen=True)
class CommitRecord:
    """One commit as returned by the history walk."""

    id: str
    parents: tuple[str, ...]
    timestamp: int
    message: str


@dataclass
class OperationResult:
    """Result of a per-repository operation."""

    path: Path
    name: str
    success: bool
    operation: str
    message: str = ""
    error: str = ""
    update: UpdateInfo | None = None

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "name": self.name,
            "success": self.success,
            "operation": self.operation,
            "message": self.message,
            "error": self.error,
            "update": self.update.to_dict() if self.update else None,
        }


@dataclass
class FetchReport:
    """Outcome of checking every repository under one root."""

    updates: list[UpdateInfo] = field(default_factory=list)
    failures: list[OperationResult] = field(default_factory=list)
    checked: int = 0

    def to_dict(self) -> dict:
        return {
            "updates": [u.to_dict() for u in self.updates],
            "failures": [f.to_dict() for f in self.failures],
            "summary": {
                "checked": self.checked,
                "with_updates": len(self.updates),
                "failed": len(self.failures),
            },
        }


def sort_updates(updates: Iterable[UpdateInfo]) -> list[UpdateInfo]:
    """Stable sort by package name (codepoint order)."""
    return sorted(updates, key=lambda u: u.name)


# =============================================================================
# Git Operations (Low-level)
# =============================================================================


def parse_commit_log(output: str) -> list[CommitRecord]:
    """Parse ``git log -z --format=%H%x1f%P%x1f%ct%x1f%B`` output."""
    records = []
    for chunk in output.split("\0"):
        chunk = chunk.strip("\n")
        if not chunk:
            continue
        commit_id, parents, timestamp, message = chunk.split("\x1f", 3)
        records.append(
            CommitRecord(
                id=commit_id,
                parents=tuple(parents.split()),
                timestamp=int(timestamp),
                message=message.strip(),
            )
        )
    return records


def order_commits(records: Iterable[CommitRecord]) -> list[CommitRecord]:
    """Order commits descendants-first.

    A commit is emitted only after all of its children inside the set.
    Among the commits ready at the same time the newest committer timestamp
    wins, then the smallest id, so a given history always yields the same
    order.
    """
    by_id = {r.id: r for r in records}
    pending_children = dict.fromkeys(by_id, 0)
    for record in by_id.values():
        for parent in record.parents:
            if parent in pending_children:
                pending_children[parent] += 1

    ready = [(-r.timestamp, r.id) for r in by_id.values() if pending_children[r.id] == 0]
    heapq.heapify(ready)

    ordered = []
    while ready:
        _, commit_id = heapq.heappop(ready)
        record = by_id[commit_id]
        ordered.append(record)
        for parent in record.parents:
            if parent in pending_children:
                pending_children[parent] -= 1
                if pending_children[parent] == 0:
                    heapq.heappush(ready, (-by_id[parent].timestamp, parent))
    return ordered


def _git_env() -> dict[str, str]:
    # credential prompts fail instead of waiting on the terminal
    return {**os.environ, "GIT_TERMINAL_PROMPT": "0"}


def _git_error(result: subprocess.CompletedProcess) -> str:
    return result.stderr.strip() or result.stdout.strip() or f"exit status {result.returncode}"


class GitOperations:
    """Low-level Git operations for a single repository."""

    def __init__(self, repo_path: Path):
        self.repo_path = repo_path

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        """Run a git command in the repository."""
        logger.debug("git %s (in %s)", " ".join(args), self.repo_path)
        return subprocess.run(
            ["git", *args],
            cwd=self.repo_path,
            stdin=subprocess.DEVNULL,
            env=_git_env(),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=check,
        )

    def is_repository(self) -> bool:
        """Check that the path is the top of a readable working tree."""
        if not self.repo_path.is_dir() or not (self.repo_path / ".git").exists():
            return False
        result = self._run("rev-parse", "--git-dir", check=False)
        return result.returncode == 0

    def has_remote(self, remote: str) -> bool:
        result = self._run("remote", "get-url", remote, check=False)
        return result.returncode == 0

    def fetch(self, remote: str, refspec: str) -> tuple[bool, str]:
        """Fetch one refspec from a remote."""
        result = self._run("fetch", "--quiet", remote, refspec, check=False)
        if result.returncode != 0:
            return False, _git_error(result)
        return True, ""

    def resolve(self, revision: str) -> str | None:
        """Resolve a revision expression to a commit id."""
        result = self._run("rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}", check=False)
        if result.returncode != 0 or not result.stdout.strip():
            return None
        return result.stdout.strip()

    def walk(self, include: str, exclude: str) -> list[CommitRecord]:
        """Commits reachable from ``include`` but not from ``exclude``."""
        result = self._run(
            "log", "-z", "--format=%H%x1f%P%x1f%ct%x1f%B", include, "--not", exclude, "--"
        )
        return parse_commit_log(result.stdout)

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        result = self._run("merge-base", "--is-ancestor", ancestor, descendant, check=False)
        if result.returncode not in (0, 1):
            raise subprocess.CalledProcessError(
                result.returncode, result.args, result.stdout, result.stderr
            )
        return result.returncode == 0

    def update_ref(self, ref: str, target: str, message: str) -> tuple[bool, str]:
        result = self._run("update-ref", "-m", message, ref, target, check=False)
        if result.returncode != 0:
            return False, _git_error(result)
        return True, ""

    def set_head(self, ref: str) -> tuple[bool, str]:
        result = self._run("symbolic-ref", "HEAD", ref, check=False)
        if result.returncode != 0:
            return False, _git_error(result)
        return True, ""

    def checkout(self, branch: str, force: bool = False) -> tuple[bool, str]:
        args = ["checkout", "--quiet"]
        if force:
            args.append("--force")
        result = self._run(*args, branch, "--", check=False)
        if result.returncode != 0:
            return False, _git_error(result)
        return True, ""

    @staticmethod
    def clone(url: str, destination: Path) -> tuple[bool, str]:
        """Clone ``url`` into ``destination`` (which must not exist yet)."""
        logger.debug("git clone %s %s", url, destination)
        try:
            result = subprocess.run(
                ["git", "clone", "--quiet", url, str(destination)],
                cwd=destination.parent,
                stdin=subprocess.DEVNULL,
                env=_git_env(),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            return False, str(e)
        if result.returncode != 0:
            return False, _git_error(result)
        return True, ""


# =============================================================================
# Package Repository
# =============================================================================


class PackageRepository:
    """A local clone of one AUR package repository.

    The tracked remote and branch are fixed when the object is created.
    """

    def __init__(
        self,
        path: Path,
        *,
        remote: str = DEFAULT_REMOTE,
        branch: str = DEFAULT_BRANCH,
    ):
        self.path = path
        self.name = path.name
        self.remote = remote
        self.branch = branch
        self.ops = GitOperations(path)

    @property
    def branch_ref(self) -> str:
        return f"refs/heads/{self.branch}"

    def open(self) -> None:
        if not self.ops.is_repository():
            raise RepoOpenError(f"{self.path} is not a git repository")

    def fetch(self) -> None:
        """Fetch the tracked branch once; no retry."""
        if not self.ops.has_remote(self.remote):
            raise RemoteNotFound(f"remote '{self.remote}' is not configured")
        success, error = self.ops.fetch(self.remote, self.branch)
        if not success:
            raise NetworkError(f"fetching {self.remote}/{self.branch} failed: {error}")

    def resolve_revisions(self) -> tuple[str, str]:
        """Return (local HEAD, upstream tracking revision)."""
        local = self.ops.resolve("HEAD")
        if local is None:
            raise RevisionResolutionError("cannot resolve HEAD")
        upstream = self.ops.resolve("@{upstream}")
        if upstream is None:
            raise RevisionResolutionError("no upstream tracking branch configured")
        return local, upstream

    def new_commits(self, local: str, upstream: str) -> list[str]:
        """Messages of commits in upstream but not in local, newest first."""
        try:
            records = self.ops.walk(upstream, local)
        except subprocess.CalledProcessError as e:
            raise RevisionResolutionError(
                f"cannot walk {local[:12]}..{upstream[:12]}: {(e.stderr or '').strip()}"
            ) from e
        return [record.message for record in order_commits(records)]

    def _check(self) -> tuple[UpdateInfo | None, str, str]:
        self.open()
        self.fetch()
        local, upstream = self.resolve_revisions()
        if local == upstream:
            return None, local, upstream
        return UpdateInfo(name=self.name, commits=self.new_commits(local, upstream)), local, upstream

    def check(self) -> UpdateInfo | None:
        """Fetch upstream and report new commits, or None when HEAD matches upstream."""
        update, _, _ = self._check()
        return update

    def pull(self, force: bool = False) -> UpdateInfo | None:
        """Fetch and move the local branch and working tree to upstream.

        Without ``force`` the move is refused when HEAD is not an ancestor of
        upstream, leaving the repository untouched. With ``force`` the branch
        is relocated regardless and local-only commits are left unreferenced.
        Returns the commits that were applied, or None when already up to date.
        """
        update, local, upstream = self._check()
        if update is None:
            return None

        if not force:
            try:
                fast_forward = self.ops.is_ancestor(local, upstream)
            except subprocess.CalledProcessError as e:
                raise RevisionResolutionError(
                    f"cannot compare HEAD with upstream: {(e.stderr or '').strip()}"
                ) from e
            if not fast_forward:
                raise NonFastForwardError(
                    f"{self.branch} has commits that are not upstream; "
                    "use --force to move it anyway"
                )

        success, error = self.ops.update_ref(
            self.branch_ref,
            upstream,
            f"Fast-Forward: Setting {self.branch_ref} to id: {upstream}",
        )
        if not success:
            raise RefUpdateError(f"cannot move {self.branch_ref}: {error}")

        success, error = self.ops.set_head(self.branch_ref)
        if not success:
            raise RefUpdateError(f"cannot point HEAD at {self.branch_ref}: {error}")

        success, error = self.ops.checkout(self.branch, force=True)
        if not success:
            raise CheckoutError(f"checkout of {self.branch} failed: {error}")

        logger.debug("%s fast-forwarded to %s", self.name, upstream)
        return update


# =============================================================================
# Fleet Manager
# =============================================================================


def validate_package_name(name: str) -> str:
    if not PACKAGE_NAME_RE.match(name):
        raise InvalidPackageName(f"'{name}' is not a valid package name")
    return name


class PackageFleet:
    """Manage every package repository under one storage directory.

    ``max_workers=None`` runs one worker per repository; a number caps the
    pool at that many concurrent git processes.
    """

    def __init__(self, root_path: Path, max_workers: int | None = None):
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.root_path = root_path
        self.max_workers = max_workers

    def discover_repositories(self) -> list[PackageRepository]:
        """One repository per immediate subdirectory of the root."""
        repos = []
        try:
            with os.scandir(self.root_path) as entries:
                for entry in entries:
                    try:
                        if not entry.is_dir():
                            continue
                    except OSError:
                        continue
                    repos.append(PackageRepository(Path(entry.path)))
        except OSError as e:
            raise RepositoryRootError(f"cannot list {self.root_path}: {e}") from e

        repos.sort(key=lambda r: r.name)
        return repos

    def _execute_parallel(
        self,
        operation: Callable[[PackageRepository], OperationResult],
        repos: list[PackageRepository],
        sequential: bool = False,
    ) -> list[OperationResult]:
        """Run operation on every repository and collect results by name.

        Units put their result on a shared queue; it is drained only after
        the executor has shut down, so every producer is finished by then.
        """
        outcomes: queue.SimpleQueue[OperationResult] = queue.SimpleQueue()

        def unit(repo: PackageRepository) -> None:
            outcomes.put(operation(repo))

        if sequential or len(repos) <= 1:
            for repo in repos:
                unit(repo)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers or len(repos)) as executor:
                for repo in repos:
                    executor.submit(unit, repo)

        results = []
        while not outcomes.empty():
            results.append(outcomes.get())
        results.sort(key=lambda r: r.name)
        return results

    def _check_unit(self, repo: PackageRepository) -> OperationResult:
        try:
            update = repo.check()
        except (FleetError, OSError) as e:
            logger.error("Error while checking for updates for %s: %s", repo.name, e)
            return OperationResult(
                path=repo.path, name=repo.name, success=False, operation="fetch", error=str(e)
            )
        except Exception as e:
            logger.exception("Unexpected error while checking %s", repo.name)
            return OperationResult(
                path=repo.path, name=repo.name, success=False, operation="fetch", error=repr(e)
            )
        return OperationResult(
            path=repo.path,
            name=repo.name,
            success=True,
            operation="fetch",
            message="No new commits" if update is None else f"{len(update.commits)} new commits",
            update=update,
        )

    def _pull_unit(self, repo: PackageRepository, force: bool) -> OperationResult:
        try:
            update = repo.pull(force=force)
        except (FleetError, OSError) as e:
            logger.error("Error while pulling package %s: %s", repo.name, e)
            return OperationResult(
                path=repo.path, name=repo.name, success=False, operation="pull", error=str(e)
            )
        except Exception as e:
            logger.exception("Unexpected error while pulling %s", repo.name)
            return OperationResult(
                path=repo.path, name=repo.name, success=False, operation="pull", error=repr(e)
            )
        return OperationResult(
            path=repo.path,
            name=repo.name,
            success=True,
            operation="pull",
            message="No new commits" if update is None else "Fast-forwarded to upstream",
            update=update,
        )

    def fetch_all(self, sequential: bool = False) -> FetchReport:
        """Fetch every repository and collect those with new upstream commits."""
        repos = self.discover_repositories()
        results = self._execute_parallel(self._check_unit, repos, sequential=sequential)
        return FetchReport(
            updates=sort_updates(r.update for r in results if r.update is not None),
            failures=[r for r in results if not r.success],
            checked=len(results),
        )

    def pull_all(
        self,
        package_names: list[str] | None = None,
        force: bool = False,
        sequential: bool = False,
    ) -> list[OperationResult]:
        """Pull the named packages, or every present package when none are named."""
        if not package_names:
            repos = self.discover_repositories()
            rejected = []
        else:
            repos, rejected = [], []
            for name in dict.fromkeys(package_names):
                try:
                    repos.append(PackageRepository(self.root_path / validate_package_name(name)))
                except InvalidPackageName as e:
                    logger.error("Error while pulling package %s: %s", name, e)
                    rejected.append(
                        OperationResult(
                            path=self.root_path / name,
                            name=name,
                            success=False,
                            operation="pull",
                            error=str(e),
                        )
                    )

        results = self._execute_parallel(
            lambda repo: self._pull_unit(repo, force), repos, sequential=sequential
        )
        return sorted(results + rejected, key=lambda r: r.name)


def clone_package(root: Path, package_name: str) -> Path:
    """Clone an AUR package into ``root/package_name``."""
    validate_package_name(package_name)
    package = aur.package_info(package_name)
    if package is None:
        raise PackageNotFoundError(f"package '{package_name}' was not found in the AUR")

    destination = root / package_name
    if destination.exists():
        raise CloneError(f"{destination} already exists")

    success, error = GitOperations.clone(aur.clone_url(package.base), destination)
    if not success:
        raise CloneError(f"cloning '{package_name}' failed: {error}")
    return destination


# =============================================================================
# Configuration
# =============================================================================


def resolve_repos_root(repos: Path | None = None) -> Path:
    """Resolve the package storage directory.

    Priority order:
    1. explicit path (``--repos`` or $AUR_FLEET_REPOS)
    2. $XDG_DATA_HOME/aur-fleet/repos
    3. ~/.local/share/aur-fleet/repos on POSIX, the platform app dir elsewhere
    """
    if repos is not None:
        return Path(os.path.expandvars(str(repos))).expanduser()

    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data).expanduser() / APP_NAME / "repos"

    if sys.platform == "win32" or sys.platform == "darwin":
        return Path(typer.get_app_dir(APP_NAME)) / "repos"
    return Path.home() / ".local" / "share" / APP_NAME / "repos"


def ensure_repos_root(root: Path) -> Path:
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RepositoryRootError(f"cannot create {root}: {e}") from e
    return root


# =============================================================================
# CLI Application
# =============================================================================


class RepoRootGroup(TyperGroup):
    """Accept the storage directory as an optional leading positional.

    `aur-fleet /path fetch` is read as `aur-fleet --repos /path fetch`: the
    first bare token before the command is a path unless it names a command.
    """

    def parse_args(self, ctx, args):
        takes_value = set()
        for param in self.params:
            if param.param_type_name == "option" and not param.is_flag and not param.count:
                takes_value.update(param.opts)

        args = list(args)
        index = 0
        while index < len(args):
            token = args[index]
            if token == "--":
                break
            if token.startswith("-"):
                index += 2 if token in takes_value else 1
                continue
            if token not in self.commands:
                args[index : index + 1] = ["--repos", token]
            break
        return super().parse_args(ctx, args)


app = typer.Typer(
    name=APP_NAME,
    cls=RepoRootGroup,
    help="Keep local AUR package repositories in sync with upstream.",
)

err_console = Console(stderr=True)


@dataclass
class CliState:
    """Global options shared by every command."""

    repos: Path
    strict: bool = False


def configure_logging(verbose: bool = False) -> None:
    """Send aur_fleet log records to stderr through rich."""
    package_logger = logging.getLogger("aur_fleet")
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    package_logger.addHandler(
        RichHandler(console=err_console, show_time=False, show_path=False, markup=False)
    )
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        print(f"{APP_NAME} {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    schema: bool = typer.Option(
        False,
        "--schema",
        help="Output MCP-compatible tool schema for AI agents",
    ),
    repos: Path = typer.Option(
        None,
        "--repos",
        "-r",
        envvar="AUR_FLEET_REPOS",
        help="Local package repository storage, also accepted as the first positional argument (default: ~/.local/share/aur-fleet/repos)",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with status 1 if any repository operation failed",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log every git command",
    ),
):
    """aur-fleet: Keep local AUR package repositories in sync with upstream."""
    if schema:
        print(json.dumps(get_tool_schema(), indent=2))
        raise typer.Exit()

    configure_logging(verbose)
    ctx.obj = CliState(repos=resolve_repos_root(repos), strict=strict)

    # fetch is the default command
    if ctx.invoked_subcommand is None:
        fetch(ctx, json_output=False, sequential=False, workers=None)


def get_console_and_formatter(json_output: bool) -> tuple[Console, OutputFormatter]:
    """Create console and formatter."""
    console = Console(force_terminal=not json_output)
    formatter = OutputFormatter(console, use_json=json_output)
    return console, formatter


def _progress(description: str) -> Progress:
    """Transient spinner on the stderr console that log records also use."""
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
        transient=True,
    )
    progress.add_task(description, total=None)
    return progress


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/] {escape(message)}")
    return typer.Exit(1)


def _prepare_root(state: CliState) -> Path:
    try:
        return ensure_repos_root(state.repos)
    except RepositoryRootError as e:
        raise _fail(str(e))


def _exit_on_failures(state: CliState, failures: list[OperationResult]) -> None:
    if state.strict and failures:
        raise typer.Exit(1)


@app.command()
def clone(
    ctx: typer.Context,
    package_name: str = typer.Argument(..., help="AUR package to clone"),
):
    """Clone a package repository from the AUR."""
    state: CliState = ctx.obj
    console, _ = get_console_and_formatter(False)
    root = _prepare_root(state)

    try:
        destination = clone_package(root, package_name)
    except FleetError as e:
        raise _fail(f"Error while cloning '{package_name}': {e}")

    console.print(f"Cloned [cyan]{escape(package_name)}[/] to {escape(str(destination))}")


@app.command()
def fetch(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON",
    ),
    sequential: bool = typer.Option(
        False,
        "--sequential",
        "-s",
        help="Run sequentially instead of parallel",
    ),
    workers: int = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Cap concurrent fetches (default: one per repository)",
    ),
):
    """Fetch all package repositories and print new upstream commits."""
    state: CliState = ctx.obj
    _, formatter = get_console_and_formatter(json_output)
    fleet = PackageFleet(_prepare_root(state), max_workers=workers)

    try:
        if not json_output:
            with _progress("Fetching package repositories..."):
                report = fleet.fetch_all(sequential=sequential)
        else:
            report = fleet.fetch_all(sequential=sequential)
    except RepositoryRootError as e:
        raise _fail(str(e))

    formatter.print_update_report(report)
    _exit_on_failures(state, report.failures)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search expression"),
    details: bool = typer.Option(
        False,
        "--details",
        "-d",
        help="Show version, votes, popularity and description",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON",
    ),
):
    """Search for packages in the AUR."""
    _, formatter = get_console_and_formatter(json_output)
    try:
        packages = aur.search(query)
    except FleetError as e:
        raise _fail(str(e))
    formatter.print_search_results(packages, details=details)


@app.command()
def pull(
    ctx: typer.Context,
    package_names: list[str] = typer.Argument(
        None,
        help="Packages to pull (default: every package present)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Move the branch to upstream even when it is not a fast-forward",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON",
    ),
    sequential: bool = typer.Option(
        False,
        "--sequential",
        "-s",
        help="Run sequentially instead of parallel",
    ),
    workers: int = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Cap concurrent pulls (default: one per package)",
    ),
):
    """Fast-forward package repositories to upstream."""
    state: CliState = ctx.obj
    _, formatter = get_console_and_formatter(json_output)
    fleet = PackageFleet(_prepare_root(state), max_workers=workers)

    try:
        if not json_output:
            with _progress("Pulling package repositories..."):
                results = fleet.pull_all(package_names or None, force=force, sequential=sequential)
        else:
            results = fleet.pull_all(package_names or None, force=force, sequential=sequential)
    except RepositoryRootError as e:
        raise _fail(str(e))

    formatter.print_pull_results(results)
    _exit_on_failures(state, [r for r in results if not r.success])
