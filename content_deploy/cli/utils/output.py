"""Output formatting utilities"""

from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...constants import EMOJI_SUCCESS, EMOJI_ERROR, EMOJI_WARNING
from ...core.filter_validator import ValidationResult
from ...models import DeployResult, DeploymentTarget, OperationStatus
from ...utils.file_utils import format_size

console = Console()

STATUS_STYLES = {
    OperationStatus.SUCCESS: f"[green]{EMOJI_SUCCESS} Installed[/green]",
    OperationStatus.SKIPPED: "[yellow]Skipped (debug)[/yellow]",
    OperationStatus.FAILED: f"[red]{EMOJI_ERROR} Failed[/red]",
    OperationStatus.IN_PROGRESS: "[dim]Not finished[/dim]",
}


def format_targets_table(result: DeployResult) -> Table:
    """Per-target table of a deployment result"""
    table = Table(title="Targets")
    table.add_column("Server", style="cyan")
    table.add_column("Role")
    table.add_column("Package path")
    table.add_column("Status")

    for index, target in enumerate(result.targets):
        target_result = result.target_results[index] if index < len(result.target_results) else None
        if target_result is None:
            table.add_row(str(target), target.role.value, "-", "[dim]Not attempted[/dim]")
            continue
        path = target_result.location.package_path if target_result.location else "-"
        table.add_row(
            str(target),
            target.role.value,
            path,
            STATUS_STYLES.get(target_result.status, target_result.status.value)
        )

    return table


def format_deploy_result(result: DeployResult) -> None:
    """Format and display deploy operation result"""
    if result.artifact:
        artifact = result.artifact
        console.print(
            f"[bold]Package:[/bold] {artifact.path} "
            f"({artifact.logical_name}, {format_size(artifact.size)})"
        )

    if result.targets:
        console.print(format_targets_table(result))

    for warning in result.warnings:
        console.print(f"[yellow]{EMOJI_WARNING} {warning}[/yellow]")

    if result.is_success:
        lines = [
            f"[green]{EMOJI_SUCCESS}[/green] {result.message}",
            "",
            f"[bold]Environment:[/bold] {result.environment}",
            f"[bold]Instance:[/bold] {result.instance}",
            f"[bold]Pool:[/bold] {result.pool}",
            f"[bold]Targets:[/bold] {len(result.completed_targets)}",
        ]
        if result.debug:
            lines.append("[yellow]Debug mode: no install calls were issued[/yellow]")
        if result.duration is not None:
            lines.append(f"[dim]Duration: {result.duration:.2f}s[/dim]")

        console.print(Panel("\n".join(lines), title="Deploy Result", border_style="green"))
        return

    error = result.error
    if result.is_filter_mismatch:
        lines = [
            f"[red]{EMOJI_ERROR} Filter validation failed[/red]",
            "",
            "The package declares content outside its approved scope.",
            "No server was contacted. Review the package filters or the reference list.",
        ]
        unmatched = error.context.get("unmatched") or []
        if unmatched:
            lines.append("")
            lines.append("[bold]Unapproved filter roots:[/bold]")
            for root in unmatched:
                lines.append(f"  • {root}")
        else:
            lines.append("")
            lines.append(error.message)

        console.print(Panel("\n".join(lines), title="Filter Mismatch", border_style="red"))
        return

    lines = [f"[red]{EMOJI_ERROR} Deploy failed:[/red] {error.message if error else result.message}"]
    if error:
        lines.append(f"[dim]{error.kind} ({error.code})[/dim]")

    if result.status == OperationStatus.PARTIAL:
        lines.append("")
        lines.append(
            f"[yellow]Partially deployed: {len(result.completed_targets)} of "
            f"{len(result.targets)} targets. Manual reconciliation required.[/yellow]"
        )

    console.print(Panel("\n".join(lines), title="Deploy Error", border_style="red"))


def format_workspace_results(results: List[DeployResult]) -> None:
    """Summary table for a workspace deployment"""
    table = Table(title="Workspace Packages")
    table.add_column("Package", style="cyan")
    table.add_column("Status")
    table.add_column("Message")

    for result in results:
        if result.is_success:
            status = f"[green]{EMOJI_SUCCESS} {result.status.value}[/green]"
        else:
            status = f"[red]{EMOJI_ERROR} {result.status.value}[/red]"
        table.add_row(result.package_name or "-", status, result.message)

    console.print(table)


def format_servers(targets: List[DeploymentTarget],
                   build_allowed: bool,
                   source_keys: Optional[List[str]] = None) -> None:
    """Display resolved servers, the keys they came from and build permission"""
    table = Table(title="Resolved Servers")
    table.add_column("#", justify="right")
    table.add_column("Host", style="cyan")
    table.add_column("Port")
    table.add_column("Role")

    for index, target in enumerate(targets, 1):
        table.add_row(str(index), target.host, str(target.port), target.role.value)

    console.print(table)

    if source_keys:
        console.print(f"[dim]Config keys: {', '.join(source_keys)}[/dim]")

    if build_allowed:
        console.print(f"[green]{EMOJI_SUCCESS} Builds allowed[/green]")
    else:
        console.print(f"[red]{EMOJI_ERROR} Builds not allowed[/red]")


def format_validation(result: ValidationResult) -> None:
    """Display filter validation details"""
    for line in result.info:
        console.print(f"  {line}")
    for warning in result.warnings:
        console.print(f"  [yellow]{EMOJI_WARNING} {warning}[/yellow]")
    for error in result.errors:
        console.print(f"  [red]{EMOJI_ERROR} {error}[/red]")
