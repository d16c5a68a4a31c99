"""CLI entry point for bandtop."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from types import FrameType

from bandtop import __version__
from bandtop.aggregator import ProcessAggregator
from bandtop.connections import ConnectionMonitor
from bandtop.monitor import Monitor
from bandtop.sniffer import PacketSniffer
from bandtop.units import UnitFamily
from bandtop.ui import BandtopApp

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def check_root() -> None:
    """Check if running with root privileges."""
    if os.geteuid() != 0:
        print("Error: bandtop requires root privileges for packet capture.", file=sys.stderr)
        print("Please run with: sudo bandtop", file=sys.stderr)
        sys.exit(1)


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def positive_float(value: str) -> float:
    number = float(value)
    if not number > 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {value}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="bandtop",
        description="Display current network utilization by process",
    )
    parser.add_argument(
        "-i",
        "--interface",
        help="Network interface to listen on, eg. eth0 (default: all)",
        default=None,
    )
    parser.add_argument(
        "-r",
        "--raw",
        action="store_true",
        help="Machine friendlier output",
    )
    parser.add_argument(
        "-u",
        "--unit-family",
        type=UnitFamily,
        choices=list(UnitFamily),
        default=UnitFamily.BIN_BYTES,
        metavar="{" + ",".join(family.value for family in UnitFamily) + "}",
        help="Choose a specific family of units (default: bin-bytes)",
    )
    parser.add_argument(
        "--chart",
        choices=("bar", "line"),
        default="bar",
        help="History chart style (default: bar)",
    )
    parser.add_argument(
        "-t",
        "--tick",
        type=positive_float,
        default=1.0,
        help="Sampling interval in seconds (default: 1.0)",
    )
    parser.add_argument(
        "--reap-after",
        type=positive_int,
        default=None,
        help="Forget processes after this many ticks without traffic (default: never)",
    )
    parser.add_argument(
        "--log-to",
        default=None,
        help="Write log records to this file",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="More log output",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log errors",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"bandtop {__version__}",
    )
    return parser.parse_args(argv)


def configure_logging(args: argparse.Namespace) -> None:
    """Route log records to a file, stderr in raw mode, or nowhere in the TUI."""
    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    if args.log_to:
        handler: logging.Handler = logging.FileHandler(args.log_to)
    elif args.raw:
        handler = logging.StreamHandler(sys.stderr)
    else:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level, handlers=[handler], force=True)
    logging.getLogger("scapy").setLevel(logging.ERROR)


def main() -> None:
    """Main entry point."""
    args = parse_args()
    configure_logging(args)
    check_root()
    connection_monitor = ConnectionMonitor()
    packet_sniffer = PacketSniffer(interface=args.interface)
    monitor = Monitor(
        connection_monitor=connection_monitor,
        packet_sniffer=packet_sniffer,
        aggregator=ProcessAggregator(reap_after=args.reap_after),
    )

    def shutdown_handler(signum: int, frame: FrameType | None) -> None:
        monitor.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)
    try:
        monitor.start()
        if args.raw:
            monitor.run_raw(args.tick, emit=lambda line: print(line, flush=True))
        else:
            app = BandtopApp(
                monitor=monitor,
                interface=args.interface,
                unit_family=args.unit_family,
                chart=args.chart,
                tick=args.tick,
            )
            app.run()
    finally:
        monitor.stop()


if __name__ == "__main__":
    main()
