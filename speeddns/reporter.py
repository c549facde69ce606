from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

_STATUS_STYLES = {
    "completed": "bold green",
    "failed": "bold red",
    "skipped": "yellow",
}


def _domain_status(outcome: Dict[str, Any]) -> str:
    if outcome.get("skipped"):
        return "[yellow]skipped[/yellow]"
    if outcome.get("error"):
        return "[red]list failed[/red]"
    if outcome.get("create_failures") or outcome.get("delete_failures"):
        return "[yellow]partial[/yellow]"
    return "[green]ok[/green]"


def print_run_result(result: Dict[str, Any], console: Optional[Console] = None) -> None:
    """
    Render a run result as a rich summary plus a per-domain table.
    """
    console = console or Console()
    status = result.get("status", "unknown")
    style = _STATUS_STYLES.get(status, "white")
    console.print(f"Run status: [{style}]{status}[/{style}]")
    if result.get("reason"):
        console.print(f"Reason: {result['reason']}")

    endpoints: List[str] = result.get("endpoints") or []
    if result.get("exit_code") is not None:
        console.print(
            f"cfst exit code {result['exit_code']} in "
            f"{result.get('measurement_seconds', 0.0):.1f}s, "
            f"{len(endpoints)} endpoint(s) parsed"
        )

    domains: List[Dict[str, Any]] = result.get("domains") or []
    if not domains:
        if status == "completed":
            console.print("[yellow]No DNS records were updated.[/yellow]")
        return

    title = "DNS Update Results"
    if result.get("policy"):
        title = f"{title}\n[dim]Policy: {result['policy']} │ Zone: {result.get('zone_name') or '-'}[/dim]"

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Domain", style="cyan", no_wrap=True)
    table.add_column("Record", style="magenta")
    table.add_column("Endpoints", style="green")
    table.add_column("Deleted", justify="right")
    table.add_column("Created", justify="right", style="bold green")
    table.add_column("Failures", justify="right", style="red")
    table.add_column("Status")

    for outcome in domains:
        failures = outcome.get("delete_failures", 0) + outcome.get("create_failures", 0)
        table.add_row(
            outcome.get("domain", "?"),
            outcome.get("record_name", "-"),
            ", ".join(outcome.get("endpoints") or []) or "-",
            str(outcome.get("deleted", 0)),
            str(outcome.get("created", 0)),
            str(failures),
            _domain_status(outcome),
        )

    console.print(table)


__all__ = ["print_run_result"]
