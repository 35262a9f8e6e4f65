# src/gnpguard/cli/formatter.py
from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from gnpguard.core.engine import AuditReport

# Initialize the Rich console for high-quality terminal output
console = Console()


class ReportFormatter:
    """
    Renders audit results: one table per resource kind and a summary panel.
    """

    def __init__(self, out: Console = None):
        self.console = out or console

    def _status_cell(self, is_valid: bool, pending: bool) -> str:
        if pending:
            return "[yellow]Unknown[/yellow]"
        return "[green]True[/green]" if is_valid else "[red]False[/red]"

    def print_params_table(self, report: AuditReport):
        table = Table(title="GKENetworkParamSet Conditions (Ready)", show_lines=True, header_style="bold magenta")
        table.add_column("Name", style="cyan")
        table.add_column("Status", justify="center")
        table.add_column("Reason", style="bold")
        table.add_column("Message")
        table.add_column("Pod CIDRs", style="dim")

        for r in report.params:
            if r.transport_error:
                table.add_row(r.name, self._status_cell(False, True), "TransportError",
                              f"[yellow]{r.transport_error}[/yellow]", "")
                continue
            cond = r.condition
            table.add_row(r.name, self._status_cell(r.is_valid, False), cond.reason,
                          cond.message, ", ".join(r.pod_cidrs))
        self.console.print(table)

    def print_networks_table(self, report: AuditReport):
        if not report.networks:
            return
        table = Table(title="Network Conditions (ParamsReady)", show_lines=True, header_style="bold magenta")
        table.add_column("Network", style="cyan")
        table.add_column("Params", style="white")
        table.add_column("Status", justify="center")
        table.add_column("Reason", style="bold")
        table.add_column("Message")

        for r in report.networks:
            if r.skipped:
                table.add_row(r.name, r.params_ref or "-", "[dim]skipped[/dim]", "", f"[dim]{r.skipped}[/dim]")
                continue
            table.add_row(r.name, r.params_ref, self._status_cell(r.is_valid, False),
                          r.condition.reason, r.condition.message)
        self.console.print(table)

    def print_nodes(self, nodes: List[str], default_params_name: str):
        if not nodes:
            self.console.print(f"[dim]ℹ Every node uses a pod range of '{default_params_name}'.[/dim]")
            return
        for name in nodes:
            self.console.print(f"[bold cyan]◆ {name}[/bold cyan] uses a pod range outside '{default_params_name}'")

    def print_summary(self, summary: Dict[str, Any]):
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Param Sets:      {summary['param_sets']} "
            f"([green]{summary['params_ready']} ready[/green], [red]{summary['params_invalid']} invalid[/red])\n"
            f"Networks:        {summary['networks']} "
            f"([green]{summary['networks_ready']} ready[/green], [red]{summary['networks_invalid']} invalid[/red], "
            f"{summary['networks_skipped']} skipped)\n"
            f"Transport Errors: [yellow]{summary['transport_errors']}[/yellow]\n"
            f"Non-default Nodes: {summary['non_default_nodes']}",
            border_style="dim"
        ))


def report_to_dict(report: AuditReport) -> Dict[str, Any]:
    """JSON-friendly view: the status each resource would carry."""
    return {
        "gkeNetworkParamSets": [
            {
                "name": r.name,
                "conditions": [r.condition.to_dict()] if r.condition else [],
                "podCIDRs": {"cidrBlocks": r.pod_cidrs} if r.pod_cidrs else None,
                "transportError": r.transport_error or None,
            }
            for r in report.params
        ],
        "networks": [
            {
                "name": r.name,
                "parametersRef": r.params_ref or None,
                "conditions": [r.condition.to_dict()] if r.condition else [],
                "skipped": r.skipped or None,
            }
            for r in report.networks
        ],
        "nonDefaultPodRangeNodes": list(report.non_default_nodes),
    }
