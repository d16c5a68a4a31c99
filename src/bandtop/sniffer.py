"""Packet sniffer using scapy to count bytes per local socket."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from scapy.all import IP, TCP, UDP, AsyncSniffer, IPv6, conf

from bandtop.connections import LocalSocket, make_local_socket

if TYPE_CHECKING:
    from collections.abc import Callable

    from scapy.packet import Packet

conf.verb = 0


@dataclass
class ConnectionSample:
    """Bytes moved by one local socket during the current tick."""

    total_bytes_downloaded: int = 0
    total_bytes_uploaded: int = 0


Utilization = dict[LocalSocket, ConnectionSample]


@dataclass
class PacketInfo:
    """Parsed information from a captured packet."""

    src_ip: str
    dst_ip: str
    src_port: int
    dst_port: int
    protocol: str
    size: int


@dataclass
class PacketSniffer:
    """Capture packets and count bytes per local socket until drained."""

    interface: str | None = None
    is_local_addr: Callable[[str], bool] = lambda ip: False
    _utilization: Utilization = field(default_factory=dict)
    _sniffer: AsyncSniffer | None = None
    _running: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def _packet_callback(self, packet: Packet) -> None:
        """Process a captured packet."""
        info = self._parse_packet(packet)
        if info is None:
            return
        self.record(info)

    def _parse_packet(self, packet: Packet) -> PacketInfo | None:
        """Extract relevant info from a packet."""
        if IP in packet:
            ip_layer = packet[IP]
        elif IPv6 in packet:
            ip_layer = packet[IPv6]
        else:
            return None
        if TCP in packet:
            transport = packet[TCP]
            protocol = "tcp"
        elif UDP in packet:
            transport = packet[UDP]
            protocol = "udp"
        else:
            return None
        return PacketInfo(
            src_ip=ip_layer.src,
            dst_ip=ip_layer.dst,
            src_port=transport.sport,
            dst_port=transport.dport,
            protocol=protocol,
            size=len(packet),
        )

    def record(self, info: PacketInfo) -> None:
        """Attribute a packet's size to the local side of its connection."""
        is_upload = self.is_local_addr(info.src_ip)
        is_download = self.is_local_addr(info.dst_ip)
        if is_upload == is_download:
            return
        if is_upload:
            local_socket = make_local_socket(info.src_ip, info.src_port, info.protocol)
        else:
            local_socket = make_local_socket(info.dst_ip, info.dst_port, info.protocol)
        with self._lock:
            sample = self._utilization.get(local_socket)
            if sample is None:
                sample = self._utilization[local_socket] = ConnectionSample()
            if is_upload:
                sample.total_bytes_uploaded += info.size
            else:
                sample.total_bytes_downloaded += info.size

    def start(self) -> None:
        """Start capturing packets."""
        with self._lock:
            if self._running:
                return
            self._running = True
            self._sniffer = AsyncSniffer(
                iface=self.interface,
                filter="tcp or udp",
                prn=self._packet_callback,
                store=False,
            )
            self._sniffer.start()

    def stop(self) -> None:
        """Stop capturing packets."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            if self._sniffer:
                self._sniffer.stop()
                self._sniffer = None

    def drain_utilization(self) -> Utilization:
        """Return the bytes counted since the last drain and reset the counters."""
        with self._lock:
            utilization = self._utilization
            self._utilization = {}
        return utilization

    @property
    def is_running(self) -> bool:
        """Check if sniffer is running."""
        with self._lock:
            return self._running
