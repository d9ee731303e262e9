"""Client for the AUR RPC interface (package info and search)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import requests

from .errors import AurRpcError

logger = logging.getLogger(__name__)

DEFAULT_AUR_URL = "https://aur.archlinux.org"
RPC_VERSION = 5
REQUEST_TIMEOUT = 30


def base_url() -> str:
    """AUR base URL, overridable with $AUR_FLEET_AUR_URL."""
    return os.environ.get("AUR_FLEET_AUR_URL", DEFAULT_AUR_URL).rstrip("/")


def clone_url(package_base: str) -> str:
    return f"{base_url()}/{package_base}.git"


@dataclass
class AurPackage:
    """A package record returned by the AUR RPC."""

    name: str
    base: str = ""
    version: str = ""
    description: str = ""
    popularity: float = 0.0
    votes: int = 0
    url: str = ""

    @classmethod
    def from_rpc(cls, data: dict) -> AurPackage:
        name = data["Name"]
        return cls(
            name=name,
            base=data.get("PackageBase") or name,
            version=data.get("Version") or "",
            description=data.get("Description") or "",
            popularity=float(data.get("Popularity") or 0.0),
            votes=int(data.get("NumVotes") or 0),
            url=data.get("URL") or "",
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "base": self.base,
            "version": self.version,
            "description": self.description,
            "popularity": self.popularity,
            "votes": self.votes,
            "url": self.url,
        }


def _query(params: list[tuple[str, str]]) -> list[dict]:
    """Run one RPC request and return its ``results`` list."""
    url = f"{base_url()}/rpc/"
    logger.debug("AUR RPC %s %s", url, params)
    try:
        response = requests.get(
            url,
            params=[("v", str(RPC_VERSION)), *params],
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as e:
        raise AurRpcError(f"AUR request failed: {e}") from e
    except ValueError as e:
        raise AurRpcError(f"AUR returned invalid JSON: {e}") from e

    if payload.get("type") == "error":
        raise AurRpcError(f"AUR RPC error: {payload.get('error') or 'unknown error'}")
    return payload.get("results") or []


def package_info(name: str) -> AurPackage | None:
    """Look up a single package by exact name; None if the AUR has no such package."""
    for data in _query([("type", "info"), ("arg[]", name)]):
        if data.get("Name") == name:
            return AurPackage.from_rpc(data)
    return None


def search(query: str, by: str = "name-desc") -> list[AurPackage]:
    """Search packages, sorted by name."""
    packages = [
        AurPackage.from_rpc(data)
        for data in _query([("type", "search"), ("by", by), ("arg", query)])
    ]
    packages.sort(key=lambda p: p.name)
    return packages
