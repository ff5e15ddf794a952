"""Command-line interface."""

import argparse
import json
from pathlib import Path
from typing import List, Optional

from .schema import Service


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lvsctl",
        description="Drive the Linux virtual-server table through ipvsadm.",
    )
    parser.add_argument(
        "--ipvsadm",
        default=None,
        help="ipvsadm binary to invoke (default: ipvsadm, or $LVSCTL_IPVSADM)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print every command lvsctl runs to stderr",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("check", help="Verify ipvsadm is installed")

    p = sub.add_parser("load", help="Verify ipvsadm, optionally pushing services")
    p.add_argument("--services", type=Path, default=None, metavar="FILE",
                   help="JSON list of services to restore after the check")

    sub.add_parser("clear", help="Remove every virtual service")

    p = sub.add_parser("restore", help="Replace the table with services from a JSON file")
    p.add_argument("services", type=Path, metavar="FILE")

    sub.add_parser("save", help="Print the current table in ipvsadm -S format")
    sub.add_parser("zero", help="Zero packet, byte and rate counters")

    p = sub.add_parser("set-timeouts", help="Set tcp, tcpfin and udp timeouts")
    p.add_argument("--tcp", type=int, default=None)
    p.add_argument("--tcpfin", type=int, default=None)
    p.add_argument("--udp", type=int, default=None)

    for name, text in (("start-daemon", "Start master and backup sync daemons"),
                       ("stop-daemon", "Stop master and backup sync daemons")):
        p = sub.add_parser(name, help=text)
        p.add_argument("--mcast-interface", default=None)
        p.add_argument("--syncid", type=int, default=None)

    return parser.parse_args(argv)


def load_services(path: Path) -> List[Service]:
    """Read a JSON list of services. Raises ValueError or pydantic.ValidationError."""
    data = json.loads(Path(path).read_text())
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of services")
    return [Service.model_validate(item) for item in data]


def config_overrides(args: argparse.Namespace) -> dict:
    """Map parsed arguments onto load_config() dotted keys."""
    return {
        "ipvsadm": args.ipvsadm,
        "timeouts.tcp": getattr(args, "tcp", None),
        "timeouts.tcpfin": getattr(args, "tcpfin", None),
        "timeouts.udp": getattr(args, "udp", None),
        "daemon.mcast_interface": getattr(args, "mcast_interface", None),
        "daemon.syncid": getattr(args, "syncid", None),
    }
