import argparse
import json
import logging
from importlib.metadata import version
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .cluster import delete_cluster, reconcile_cluster
from .core import OPERATION_TIMEOUT, POLL_INTERVAL
from .errors import SkyforgeError
from .logger import logger
from .schemas.cluster import ClusterSpec
from .schemas.status import ClusterStatus
from .scope import ClusterScope


def load_spec(path: Path, timeout: float | None, interval: float | None) -> ClusterSpec:
    spec = ClusterSpec.model_validate_json(path.read_text())
    if timeout is not None:
        spec.operation_timeout = timeout
    if interval is not None:
        spec.poll_interval = interval
    return spec


def load_status(path: Path | None) -> ClusterStatus:
    if path is None or not path.exists():
        return ClusterStatus()
    return ClusterStatus.model_validate_json(path.read_text())


def render_status(status: ClusterStatus, console: Console) -> None:
    table = Table(title="Cluster Network Status")
    table.add_column("Resource", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Self Link")

    net = status.network
    table.add_row("network", net.name or "-", net.self_link or "-")
    table.add_row("router", "-", net.router or "-")
    for name, link in sorted(net.firewall_rules.items()):
        table.add_row("firewall", name, link)
    if status.bastion.self_link:
        table.add_row(
            "bastion", status.bastion.instance_status or "-", status.bastion.self_link
        )

    console.print(table)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Skyforge: converge a cluster's GCP network resources",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create or adopt the network, subnets, NAT router, firewall rules and bastion
  skyforge reconcile --config cluster.json --status status.json

  # Tear everything down again (only resources owned by the cluster)
  skyforge delete --config cluster.json --status status.json
""",
    )
    try:
        ver = version("skyforge")
    except Exception:
        ver = "unknown"
    parser.add_argument("--version", action="version", version=f"Skyforge v{ver}")

    parser.add_argument("action", choices=["reconcile", "delete"])
    parser.add_argument(
        "--config", required=True, type=Path, help="Cluster spec (JSON)"
    )
    parser.add_argument(
        "--status",
        type=Path,
        help="Status file, read before the run and written after it",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help=f"Seconds to wait for each operation (default: {OPERATION_TIMEOUT:g})",
    )
    parser.add_argument(
        "--interval",
        type=float,
        help=f"Seconds between operation polls (default: {POLL_INTERVAL:g})",
    )
    parser.add_argument("--json", action="store_true", help="Output status as JSON")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    if args.verbose:
        logger.setLevel(logging.DEBUG)

    out_console = Console(quiet=args.json)

    try:
        spec = load_spec(args.config, args.timeout, args.interval)
        status = load_status(args.status)
    except (OSError, ValidationError) as e:
        logger.error(f"Invalid configuration: {e}")
        exit(2)

    scope = ClusterScope.from_spec(spec, status=status)

    try:
        if args.action == "reconcile":
            reconcile_cluster(scope)
        else:
            delete_cluster(scope)
    except SkyforgeError as e:
        logger.error(f"{args.action.capitalize()} Failed: {e}")
        exit(1)
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[bold red]Operation cancelled by user.[/bold red]")
        exit(130)
    finally:
        # Keep whatever was recorded, so the next run can pick up from there
        if args.status is not None:
            args.status.write_text(scope.status.model_dump_json(indent=2))

    if args.json:
        print(json.dumps(scope.status.model_dump(), indent=2))
    else:
        render_status(scope.status, out_console)


if __name__ == "__main__":
    main()
