#!/usr/bin/env python3
"""
GNPGUARD CLI
------------
Audits exported GKENetworkParamSet / Network / Node manifests against a
cloud inventory and prints the status conditions the controller would set.

Exit codes: 0 all ready, 1 some resource invalid, 2 could not evaluate.

Author: GNPGuard Team
Date: 2026-10-19
"""

import argparse
import json
import logging
import sys

from rich.console import Console
from rich.panel import Panel

from gnpguard.cluster.store import ParamSetStore
from gnpguard.core.engine import audit, generate_summary
from gnpguard.core.errors import GnpGuardError
from gnpguard.core.models import DEFAULT_POD_NETWORK_NAME
from gnpguard.cli.formatter import ReportFormatter, report_to_dict
from gnpguard.loader.manifests import load_inventory, load_manifests
from gnpguard.validator.ranges import node_has_non_default_pod_range

console = Console()
logger = logging.getLogger("gnpguard.cli")

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


class GnpGuardCLI:
    """
    CLI wrapper that translates user commands into engine calls.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="gnpguard",
            description="GNPGuard - GKENetworkParamSet & Network validation",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = ReportFormatter(console)
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("-V", "--version", action="version", version="gnpguard v0.1.0")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        check_parser = subparsers.add_parser("check", help="Validate param sets and networks")
        check_parser.add_argument("path", help="Manifest file or directory")
        check_parser.add_argument("--inventory", required=True, help="Cloud inventory YAML")
        check_parser.add_argument("--region", default=None, help="Override the inventory region")
        check_parser.add_argument("--shared-vpc", dest="shared_vpc", action="store_const", const=True,
                                  default=None, help="Treat the cluster network as a shared VPC")
        check_parser.add_argument("--network-url", default=None, help="Override the cluster network URL")
        check_parser.add_argument("--default-params", default=DEFAULT_POD_NETWORK_NAME,
                                  help="Name of the default param set (default: %(default)s)")
        check_parser.add_argument("--json", action="store_true", help="Print machine readable output")

        ranges_parser = subparsers.add_parser("pod-ranges", help="List nodes outside the default pod ranges")
        ranges_parser.add_argument("path", help="Manifest file or directory")
        ranges_parser.add_argument("--default-params", default=DEFAULT_POD_NETWORK_NAME,
                                   help="Name of the default param set (default: %(default)s)")

    def print_header(self, subtitle: str):
        console.print(Panel.fit(
            "[bold cyan]GNPGuard v0.1.0[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _run_check(self, args: argparse.Namespace) -> int:
        cloud = load_inventory(args.inventory)
        cloud.configure(cloud.settings.override(
            region=args.region,
            shared_vpc=args.shared_vpc,
            network_url=args.network_url,
        ))

        report = audit(args.path, cloud, default_params_name=args.default_params,
                       exclude=[args.inventory])
        summary = generate_summary(report)

        if args.json:
            print(json.dumps(report_to_dict(report), indent=2))
        else:
            self.print_header("Param Set Validation")
            self.formatter.print_params_table(report)
            self.formatter.print_networks_table(report)
            self.formatter.print_nodes(report.non_default_nodes, args.default_params)
            self.formatter.print_summary(summary)

        if summary["transport_errors"]:
            return EXIT_ERROR
        if summary["params_invalid"] or summary["networks_invalid"]:
            return EXIT_INVALID
        return EXIT_OK

    def _run_pod_ranges(self, args: argparse.Namespace) -> int:
        bundle = load_manifests(args.path)
        store = ParamSetStore(bundle.params)
        nodes = [n.name for n in bundle.nodes
                 if node_has_non_default_pod_range(n, store, args.default_params)]
        self.formatter.print_nodes(nodes, args.default_params)
        return EXIT_OK

    def run(self, argv=None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

        handlers = {"check": self._run_check, "pod-ranges": self._run_pod_ranges}
        handler = handlers.get(args.command)
        if handler is None:
            self.parser.print_help()
            return EXIT_OK

        try:
            return handler(args)
        except GnpGuardError as e:
            logger.debug(f"{args.command} failed", exc_info=True)
            console.print(f"[bold red]Error:[/bold red] {e}")
            return EXIT_ERROR


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(GnpGuardCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
