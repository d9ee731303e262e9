"""MCP-compatible tool schema for AI agents."""

from __future__ import annotations

from ._version import __version__

_REPOS_PROPERTY = {
    "type": "string",
    "description": "Local package repository storage (leading positional or global --repos option). Defaults to $AUR_FLEET_REPOS, then $XDG_DATA_HOME/aur-fleet/repos, then ~/.local/share/aur-fleet/repos",
}

_UPDATE_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "commits": {
            "type": "array",
            "items": {"type": "string"},
            "description": "New upstream commit messages, newest first",
        },
        "count": {"type": "integer"},
    },
}

_RESULT_SCHEMA = {
    "type": "object",
    "properties": {
        "path": {"type": "string"},
        "name": {"type": "string"},
        "success": {"type": "boolean"},
        "operation": {"type": "string", "enum": ["fetch", "pull"]},
        "message": {"type": "string"},
        "error": {"type": "string"},
        "update": {"oneOf": [_UPDATE_SCHEMA, {"type": "null"}]},
    },
}


def get_tool_schema() -> dict:
    """Generate MCP-compatible tool schema for AI agents."""
    return {
        "name": "aur-fleet",
        "version": __version__,
        "description": "Keep local AUR package repositories in sync with upstream. Fetches every package repository in parallel, reports new upstream commits, and fast-forwards on request.",
        "usage": "aur-fleet [repos-root] <command> [args] [options]",
        "tools": [
            {
                "name": "fetch",
                "description": "Fetch every package repository and list packages whose upstream has new commits. Also runs when no command is given.",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "repos": _REPOS_PROPERTY,
                        "json": {"type": "boolean", "default": False},
                        "sequential": {"type": "boolean", "default": False},
                        "workers": {
                            "type": "integer",
                            "minimum": 1,
                            "description": "Cap concurrent fetches (default: one per repository)",
                        },
                    },
                    "required": [],
                },
                "outputSchema": {
                    "type": "object",
                    "properties": {
                        "updates": {"type": "array", "items": _UPDATE_SCHEMA},
                        "failures": {"type": "array", "items": _RESULT_SCHEMA},
                        "summary": {
                            "type": "object",
                            "properties": {
                                "checked": {"type": "integer"},
                                "with_updates": {"type": "integer"},
                                "failed": {"type": "integer"},
                            },
                        },
                    },
                },
                "examples": [
                    {
                        "description": "Check all packages for upstream changes",
                        "command": "aur-fleet fetch --json",
                    },
                ],
            },
            {
                "name": "pull",
                "description": "Fast-forward package repositories to upstream. Refuses non-fast-forward moves unless --force is given.",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "repos": _REPOS_PROPERTY,
                        "package_names": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Packages to pull (default: every package present)",
                        },
                        "force": {"type": "boolean", "default": False},
                        "json": {"type": "boolean", "default": False},
                        "sequential": {"type": "boolean", "default": False},
                        "workers": {"type": "integer", "minimum": 1},
                    },
                    "required": [],
                },
                "outputSchema": {
                    "type": "object",
                    "properties": {
                        "results": {"type": "array", "items": _RESULT_SCHEMA},
                        "summary": {
                            "type": "object",
                            "properties": {
                                "total": {"type": "integer"},
                                "success": {"type": "integer"},
                                "failed": {"type": "integer"},
                            },
                        },
                    },
                },
            },
            {
                "name": "clone",
                "description": "Clone a package repository from the AUR into the storage directory. Fails if the package does not exist.",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "repos": _REPOS_PROPERTY,
                        "package_name": {"type": "string"},
                    },
                    "required": ["package_name"],
                },
            },
            {
                "name": "search",
                "description": "Search the AUR by name and description. Results are sorted by name.",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "query": {"type": "string"},
                        "details": {"type": "boolean", "default": False},
                        "json": {"type": "boolean", "default": False},
                    },
                    "required": ["query"],
                },
            },
        ],
        "globalOptions": {
            "--repos, -r": "Package repository storage directory",
            "--strict": "Exit with status 1 if any repository operation failed",
            "--verbose, -v": "Log every git command to stderr",
        },
        "notes": [
            "Per-repository errors are printed to stderr and do not change the exit status unless --strict is given",
            "The tracked branch is always origin/master",
            "$AUR_FLEET_AUR_URL overrides the AUR base URL",
        ],
    }
