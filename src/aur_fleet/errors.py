"""Exception hierarchy shared by the engine, the AUR client and the CLI."""

from __future__ import annotations


class FleetError(Exception):
    """Base class for all aur-fleet errors."""


# Per-repository check failures


class RepoOpenError(FleetError):
    """Local repository is missing or is not a usable git working tree."""


class RemoteNotFound(FleetError):
    """The tracked remote is not configured in the local repository."""


class NetworkError(FleetError):
    """Fetching from the remote failed."""


class RevisionResolutionError(FleetError):
    """HEAD or the upstream tracking revision could not be resolved."""


# Per-package pull failures


class RefUpdateError(FleetError):
    """Moving the local branch or HEAD failed."""


class CheckoutError(FleetError):
    """Forced checkout of the new HEAD failed."""


class NonFastForwardError(FleetError):
    """Local branch is not an ancestor of upstream."""


# Whole-command failures


class RepositoryRootError(FleetError):
    """The repository storage directory cannot be created or listed."""


class InvalidPackageName(FleetError):
    """Package name cannot be used as a directory name."""


class PackageNotFoundError(FleetError):
    """Package does not exist in the AUR."""


class CloneError(FleetError):
    """git clone of a package repository failed."""


class AurRpcError(FleetError):
    """HTTP or protocol-level failure talking to the AUR RPC interface."""
