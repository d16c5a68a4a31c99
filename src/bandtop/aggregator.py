"""Traffic aggregator that maps sockets to processes and tracks bandwidth history."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from bandtop.resolver import SocketProcessResolver
from bandtop.view import ProcessRow, build_rows

if TYPE_CHECKING:
    from collections.abc import Mapping

    from bandtop.connections import LocalSocket, ProcessInfo
    from bandtop.sniffer import ConnectionSample

HISTORY_LENGTH = 40
MAX_BANDWIDTH_ITEMS = 1000


@dataclass
class NetworkData:
    """Bytes attributed to one process during the current tick."""

    total_bytes_downloaded: int = 0
    total_bytes_uploaded: int = 0


@dataclass
class ProcessHistory:
    """Cumulative totals and recent samples for a single process."""

    total_bytes_downloaded: int = 0
    total_bytes_uploaded: int = 0
    download_history: deque[float] = field(default_factory=lambda: deque(maxlen=HISTORY_LENGTH))
    upload_history: deque[float] = field(default_factory=lambda: deque(maxlen=HISTORY_LENGTH))
    idle_ticks: int = 0

    def add_sample(self, data: NetworkData) -> None:
        """Add one tick of traffic to this process."""
        self.total_bytes_downloaded += data.total_bytes_downloaded
        self.total_bytes_uploaded += data.total_bytes_uploaded
        self.download_history.append(float(data.total_bytes_downloaded))
        self.upload_history.append(float(data.total_bytes_uploaded))
        if data.total_bytes_downloaded or data.total_bytes_uploaded:
            self.idle_ticks = 0
        else:
            self.idle_ticks += 1

    def add_idle_sample(self) -> None:
        """Record a tick with no traffic so histories stay aligned."""
        self.download_history.append(0.0)
        self.upload_history.append(0.0)
        self.idle_ticks += 1


@dataclass
class ProcessAggregator:
    """Aggregate per-tick socket traffic into per-process history.

    Each call to :meth:`update` is one tick. Processes are remembered for
    the lifetime of the aggregator unless ``reap_after`` is set and
    :meth:`reap` is called.
    """

    reap_after: int | None = None
    max_rows: int = MAX_BANDWIDTH_ITEMS
    resolver: SocketProcessResolver = field(default_factory=SocketProcessResolver)
    total_bytes_downloaded: int = 0
    total_bytes_uploaded: int = 0
    process_rows: list[ProcessRow] = field(default_factory=list)
    _history: dict[ProcessInfo, ProcessHistory] = field(default_factory=dict)
    _current: dict[ProcessInfo, NetworkData] = field(default_factory=dict)

    @property
    def histories(self) -> Mapping[ProcessInfo, ProcessHistory]:
        """Read-only view of the retained per-process history."""
        return MappingProxyType(self._history)

    def update(
        self,
        connections_to_procs: Mapping[LocalSocket, ProcessInfo],
        utilization: Mapping[LocalSocket, ConnectionSample],
    ) -> None:
        """Fold one tick of traffic into the retained state and rebuild rows."""
        processes: dict[ProcessInfo, NetworkData] = {}
        tick_downloaded = 0
        tick_uploaded = 0
        for local_socket, sample in utilization.items():
            tick_downloaded += sample.total_bytes_downloaded
            tick_uploaded += sample.total_bytes_uploaded
            proc_info = self.resolver.resolve_or_unknown(local_socket, connections_to_procs)
            data = processes.get(proc_info)
            if data is None:
                data = processes[proc_info] = NetworkData()
            data.total_bytes_downloaded += sample.total_bytes_downloaded
            data.total_bytes_uploaded += sample.total_bytes_uploaded
        self.total_bytes_downloaded += tick_downloaded
        self.total_bytes_uploaded += tick_uploaded

        for proc_info, data in processes.items():
            history = self._history.get(proc_info)
            if history is None:
                history = self._history[proc_info] = ProcessHistory()
            history.add_sample(data)
        for proc_info, history in self._history.items():
            if proc_info not in processes:
                history.add_idle_sample()

        self._current = processes
        self._rebuild_rows()

    def reap(self) -> list[ProcessInfo]:
        """Forget processes idle for ``reap_after`` consecutive ticks.

        Returns the processes that were dropped. Does nothing unless
        ``reap_after`` is set.
        """
        if not self.reap_after or self.reap_after <= 0:
            return []
        reaped = [
            proc_info
            for proc_info, history in self._history.items()
            if history.idle_ticks >= self.reap_after
        ]
        for proc_info in reaped:
            del self._history[proc_info]
        if reaped:
            self._rebuild_rows()
        return reaped

    def clear(self) -> None:
        """Clear all accumulated stats."""
        self._history.clear()
        self._current = {}
        self.total_bytes_downloaded = 0
        self.total_bytes_uploaded = 0
        self.process_rows = []

    def _rebuild_rows(self) -> None:
        self.process_rows = build_rows(self._history, self._current, limit=self.max_rows)
