"""aur-fleet: Keep local AUR package repositories in sync with upstream."""

# Guard against deleted CWD (e.g. directory removed by another process).
# rich crashes on import if os.getcwd() fails, so recover before any imports.
import os

try:
    os.getcwd()
except (OSError, PermissionError):
    os.chdir(os.path.expanduser("~"))

from ._version import __version__
from .aur import AurPackage
from .core import (
    CommitRecord,
    FetchReport,
    GitOperations,
    OperationResult,
    PackageFleet,
    PackageRepository,
    UpdateInfo,
    app,
    clone_package,
    order_commits,
    resolve_repos_root,
    sort_updates,
)
from .errors import (
    AurRpcError,
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

__all__ = [
    # Version
    "__version__",
    # CLI
    "app",
    # Models
    "AurPackage",
    "CommitRecord",
    "FetchReport",
    "OperationResult",
    "UpdateInfo",
    # Operations
    "GitOperations",
    "PackageFleet",
    "PackageRepository",
    # Functions
    "clone_package",
    "get_tool_schema",
    "order_commits",
    "resolve_repos_root",
    "sort_updates",
    # Errors
    "AurRpcError",
    "CheckoutError",
    "CloneError",
    "FleetError",
    "InvalidPackageName",
    "NetworkError",
    "NonFastForwardError",
    "PackageNotFoundError",
    "RefUpdateError",
    "RemoteNotFound",
    "RepoOpenError",
    "RepositoryRootError",
    "RevisionResolutionError",
    # Formatters
    "OutputFormatter",
]
