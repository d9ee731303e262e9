"""Output formatters for console and JSON display."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from .aur import AurPackage
    from .core import FetchReport, OperationResult, UpdateInfo


class OutputFormatter:
    """Format output for console or JSON."""

    def __init__(self, console: Console, use_json: bool = False):
        self.console = console
        self.use_json = use_json

    def _print_json(self, output: Any):
        # Commit messages may contain brackets, so markup is off.
        self.console.print(
            json.dumps(output, indent=2, default=str),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )

    def print_update_report(self, report: FetchReport):
        """Print packages with upstream changes."""
        if self.use_json:
            self._print_json(report.to_dict())
            return

        from .core import sort_updates

        updates = sort_updates(report.updates)
        if not updates:
            self.console.print("There are currently no packages with upstream changes")
            return

        self.console.print("[bold]The following packages have upstream changes:[/]")
        self.console.print()
        for update in updates:
            self._print_update_block(update)

    def _print_update_block(self, update: UpdateInfo):
        """Print one package header and its commit messages."""
        self.console.print(f"[bold blue]::[/] [bold]{escape(update.name)}[/]")
        self.console.print()
        for commit in update.commits:
            first, _, rest = commit.partition("\n")
            self.console.print(f"[magenta]*[/] [cyan]{escape(first)}[/]")
            for line in rest.splitlines():
                self.console.print(f"  [cyan]{escape(line)}[/]")
        self.console.print()

    def print_pull_results(self, results: list[OperationResult]):
        """Print applied commits per package followed by a results table."""
        if self.use_json:
            self._print_operation_json(results)
            return

        if not results:
            self.console.print("[dim]No packages to pull[/]")
            return

        for result in results:
            if result.success and result.update is not None:
                self._print_update_block(result.update)

        table = Table(title="Pull Results")
        table.add_column("Package", style="cyan")
        table.add_column("Status", justify="center")
        table.add_column("Message")

        success_count = 0
        for result in results:
            if result.success:
                success_count += 1
                status = "[green]✓[/]"
                message = escape(result.message) if result.message else "OK"
            else:
                status = "[red]✗[/]"
                message = f"[red]{escape(result.error[:80])}[/]" if result.error else "Failed"
            table.add_row(escape(result.name), status, message)

        self.console.print(table)
        self.console.print(f"\n[bold]Success:[/] {success_count}/{len(results)}")

    def _print_operation_json(self, results: list[OperationResult]):
        """Print operation results as JSON."""
        output = {
            "results": [r.to_dict() for r in results],
            "summary": {
                "total": len(results),
                "success": sum(1 for r in results if r.success),
                "failed": sum(1 for r in results if not r.success),
            },
        }
        self._print_json(output)

    def print_search_results(self, packages: list[AurPackage], details: bool = False):
        """Print AUR search results, already sorted by name."""
        if self.use_json:
            self._print_json({"count": len(packages), "packages": [p.to_dict() for p in packages]})
            return

        if not packages:
            self.console.print("No packages found")
            return

        if not details:
            for package in packages:
                self.console.print(escape(package.name), highlight=False)
            return

        table = Table(title=f"AUR Packages ({len(packages)})")
        table.add_column("Package", style="cyan", no_wrap=True)
        table.add_column("Version")
        table.add_column("Votes", justify="right")
        table.add_column("Popularity", justify="right")
        table.add_column("Description")

        for package in packages:
            table.add_row(
                escape(package.name),
                escape(package.version),
                str(package.votes),
                f"{package.popularity:.2f}",
                escape(package.description),
            )
        self.console.print(table)
