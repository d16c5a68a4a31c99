"""Resolve observed local sockets to the processes that own them."""

from __future__ import annotations

import ipaddress
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bandtop.connections import LocalSocket, ProcessInfo

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

UNKNOWN_PROCESS = ProcessInfo(name="<UNKNOWN>", pid=0)
KNOWN_ORPHANS_CAPACITY = 10_000

IPV4_UNSPECIFIED = ipaddress.IPv4Address("0.0.0.0")
IPV6_UNSPECIFIED = ipaddress.IPv6Address("::")


def swap_address_family(
    ip: ipaddress.IPv4Address | ipaddress.IPv6Address,
) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """Return the IPv4-mapped IPv6 form of ``ip``, or its IPv4 form if it has one."""
    if isinstance(ip, ipaddress.IPv4Address):
        return ipaddress.IPv6Address(f"::ffff:{ip}")
    return ip.ipv4_mapped


def lookup_process(
    connections_to_procs: Mapping[LocalSocket, ProcessInfo], local_socket: LocalSocket
) -> ProcessInfo | None:
    """Find the owner of ``local_socket``; the first matching rule wins.

    Rules, in order: exact match, the same address in the other address
    family, the IPv4 wildcard address and the IPv6 wildcard address.
    """
    proc_info = connections_to_procs.get(local_socket)
    if proc_info is not None:
        return proc_info
    swapped = swap_address_family(local_socket.ip)
    if swapped is not None:
        proc_info = connections_to_procs.get(local_socket.with_ip(swapped))
        if proc_info is not None:
            return proc_info
    proc_info = connections_to_procs.get(local_socket.with_ip(IPV4_UNSPECIFIED))
    if proc_info is not None:
        return proc_info
    return connections_to_procs.get(local_socket.with_ip(IPV6_UNSPECIFIED))


@dataclass
class SocketProcessResolver:
    """Resolve sockets to processes, warning once per orphaned socket."""

    capacity: int = KNOWN_ORPHANS_CAPACITY
    _known_orphans: deque[LocalSocket] = field(default_factory=deque)
    _known_orphan_set: set[LocalSocket] = field(default_factory=set)

    def resolve(
        self, local_socket: LocalSocket, connections_to_procs: Mapping[LocalSocket, ProcessInfo]
    ) -> ProcessInfo | None:
        """Resolve ``local_socket``, logging a diagnostic the first time it is orphaned."""
        proc_info = lookup_process(connections_to_procs, local_socket)
        if proc_info is None and local_socket not in self._known_orphan_set:
            self._remember_orphan(local_socket)
            self._warn_orphan(local_socket, connections_to_procs)
        return proc_info

    def resolve_or_unknown(
        self, local_socket: LocalSocket, connections_to_procs: Mapping[LocalSocket, ProcessInfo]
    ) -> ProcessInfo:
        """Like :meth:`resolve`, but fall back to the ``<UNKNOWN>`` process."""
        proc_info = self.resolve(local_socket, connections_to_procs)
        if proc_info is None:
            return UNKNOWN_PROCESS
        return proc_info

    def is_known_orphan(self, local_socket: LocalSocket) -> bool:
        return local_socket in self._known_orphan_set

    def _remember_orphan(self, local_socket: LocalSocket) -> None:
        self._known_orphans.append(local_socket)
        self._known_orphan_set.add(local_socket)
        while len(self._known_orphans) > self.capacity:
            self._known_orphan_set.discard(self._known_orphans.popleft())

    def _warn_orphan(
        self, local_socket: LocalSocket, connections_to_procs: Mapping[LocalSocket, ProcessInfo]
    ) -> None:
        # Only used to make the message more useful, never to resolve.
        for candidate, proc_info in connections_to_procs.items():
            if candidate.port == local_socket.port and candidate.protocol == local_socket.protocol:
                logger.warning(
                    '"%s" owns a similar looking connection, but its local ip doesn\'t match. '
                    "Looking for: %s; found: %s",
                    proc_info.name,
                    local_socket,
                    candidate,
                )
                return
        logger.warning("Cannot determine which process owns %s", local_socket)
