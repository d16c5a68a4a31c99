"""Connection monitor using psutil to map local sockets to processes."""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass, field, replace

import psutil

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalSocket:
    """One local endpoint: address, port and transport protocol."""

    ip: ipaddress.IPv4Address | ipaddress.IPv6Address
    port: int
    protocol: str

    def with_ip(self, ip: ipaddress.IPv4Address | ipaddress.IPv6Address) -> LocalSocket:
        """Return the same socket bound to a different address."""
        return replace(self, ip=ip)

    def __str__(self) -> str:
        if self.ip.version == 6:
            return f"[{self.ip}]:{self.port} ({self.protocol})"
        return f"{self.ip}:{self.port} ({self.protocol})"


@dataclass(frozen=True)
class ProcessInfo:
    """Identity of a process owning sockets."""

    name: str
    pid: int


def make_local_socket(ip: str, port: int, protocol: str) -> LocalSocket:
    """Create a normalized local socket for lookups."""
    # Link-local addresses can carry a zone suffix, e.g. fe80::1%eth0.
    return LocalSocket(ipaddress.ip_address(ip.split("%", 1)[0]), int(port), protocol.lower())


@dataclass
class ConnectionMonitor:
    """Snapshot which process owns which local socket."""

    _names: dict[int, str] = field(default_factory=dict)
    _local_addrs: set[str] = field(default_factory=set)

    def refresh_local_addrs(self) -> set[str]:
        """Refresh the set of local IP addresses."""
        addrs = set()
        for _, iface_addrs in psutil.net_if_addrs().items():
            for addr in iface_addrs:
                if addr.family.name in ("AF_INET", "AF_INET6"):
                    addrs.add(addr.address.split("%", 1)[0])
        addrs.add("127.0.0.1")
        addrs.add("::1")
        self._local_addrs = addrs
        return addrs

    def is_local_addr(self, ip: str) -> bool:
        """Check if an IP address is local to this machine."""
        return ip in self._local_addrs

    def _get_process_name(self, pid: int) -> str | None:
        """Get the cached process name, looking it up if needed."""
        if pid in self._names:
            return self._names[pid]
        try:
            name = psutil.Process(pid).name()
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            return None
        self._names[pid] = name
        return name

    def snapshot(self) -> dict[LocalSocket, ProcessInfo]:
        """Map every local socket with a known owner to its process."""
        connections_to_procs: dict[LocalSocket, ProcessInfo] = {}
        try:
            connections = psutil.net_connections(kind="inet")
        except psutil.AccessDenied:
            logger.warning("Access denied while listing connections; is bandtop running as root?")
            connections = []
        for conn in connections:
            if conn.pid is None or not conn.laddr:
                continue
            name = self._get_process_name(conn.pid)
            if name is None:
                continue
            protocol = "tcp" if conn.type.name == "SOCK_STREAM" else "udp"
            try:
                local_socket = make_local_socket(conn.laddr[0], conn.laddr[1], protocol)
            except ValueError:
                logger.debug("Skipping connection with unparsable address %r", conn.laddr)
                continue
            connections_to_procs[local_socket] = ProcessInfo(name=name, pid=conn.pid)
        self._cleanup_stale_processes(connections_to_procs)
        return connections_to_procs

    def _cleanup_stale_processes(
        self, connections_to_procs: dict[LocalSocket, ProcessInfo]
    ) -> None:
        """Forget names for PIDs that no longer own any socket."""
        active_pids = {info.pid for info in connections_to_procs.values()}
        stale_pids = set(self._names.keys()) - active_pids
        for pid in stale_pids:
            del self._names[pid]
