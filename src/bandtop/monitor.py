"""Tick driver that feeds collaborator snapshots into the aggregator."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bandtop.aggregator import ProcessAggregator
from bandtop.view import output_text

if TYPE_CHECKING:
    from collections.abc import Callable

    from bandtop.connections import ConnectionMonitor
    from bandtop.sniffer import PacketSniffer
    from bandtop.view import ProcessRow

logger = logging.getLogger(__name__)


@dataclass
class Monitor:
    """Own the collaborators and the aggregator for one session."""

    connection_monitor: ConnectionMonitor
    packet_sniffer: PacketSniffer
    aggregator: ProcessAggregator = field(default_factory=ProcessAggregator)
    ticks: int = 0

    def start(self) -> None:
        """Learn the local addresses and start capturing."""
        addrs = self.connection_monitor.refresh_local_addrs()
        logger.debug("Local addresses: %s", ", ".join(sorted(addrs)))
        self.packet_sniffer.is_local_addr = self.connection_monitor.is_local_addr
        self.packet_sniffer.start()

    def stop(self) -> None:
        self.packet_sniffer.stop()

    def tick(self) -> list[ProcessRow]:
        """Sample both collaborators once and fold the result into the aggregator."""
        utilization = self.packet_sniffer.drain_utilization()
        connections_to_procs = self.connection_monitor.snapshot()
        self.aggregator.update(connections_to_procs, utilization)
        reaped = self.aggregator.reap()
        if reaped:
            logger.debug("Forgot %d idle processes", len(reaped))
        self.ticks += 1
        return self.aggregator.process_rows

    def run_raw(
        self,
        interval: float,
        emit: Callable[[str], object] = print,
        max_ticks: int | None = None,
    ) -> None:
        """Print machine friendly output every ``interval`` seconds."""
        while max_ticks is None or self.ticks < max_ticks:
            time.sleep(interval)
            rows = self.tick()
            output_text(rows, emit)
