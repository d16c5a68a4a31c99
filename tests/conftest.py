"""Shared test fixtures for bandtop tests."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from bandtop.aggregator import ProcessAggregator
from bandtop.connections import ConnectionMonitor, ProcessInfo, make_local_socket
from bandtop.sniffer import PacketInfo, PacketSniffer


@pytest.fixture
def mock_psutil_connections():
    """Mock psutil.net_connections to return test data."""
    mock_conn = MagicMock()
    mock_conn.pid = 1234
    mock_conn.laddr = ("127.0.0.1", 8080)
    mock_conn.raddr = ("192.168.1.1", 443)
    mock_conn.type.name = "SOCK_STREAM"
    mock_conn.status = "ESTABLISHED"

    with patch("psutil.net_connections", return_value=[mock_conn]):
        yield [mock_conn]


@pytest.fixture
def mock_psutil_process():
    """Mock psutil.Process to return test data."""
    mock_proc = MagicMock()
    mock_proc.name.return_value = "test_process"

    with patch("psutil.Process", return_value=mock_proc) as mock_proc_class:
        yield mock_proc_class


@pytest.fixture
def mock_psutil_net_if_addrs():
    """Mock psutil.net_if_addrs to return test data."""
    mock_addr = MagicMock()
    mock_addr.family.name = "AF_INET"
    mock_addr.address = "192.168.1.100"

    with patch("psutil.net_if_addrs", return_value={"eth0": [mock_addr]}):
        yield {"eth0": [mock_addr]}


@pytest.fixture
def connection_monitor(mock_psutil_net_if_addrs):
    """Create a ConnectionMonitor with local addresses loaded."""
    monitor = ConnectionMonitor()
    monitor.refresh_local_addrs()
    return monitor


@pytest.fixture
def packet_sniffer(connection_monitor):
    """Create a PacketSniffer instance for testing (without starting capture)."""
    sniffer = PacketSniffer(interface=None, is_local_addr=connection_monitor.is_local_addr)
    yield sniffer
    sniffer.stop()


@pytest.fixture
def aggregator():
    return ProcessAggregator()


@pytest.fixture
def curl():
    return ProcessInfo(name="curl", pid=42)


@pytest.fixture
def curl_socket():
    return make_local_socket("192.168.1.100", 51000, "tcp")


@pytest.fixture
def sample_packet_info():
    """Create sample PacketInfo for an outgoing packet."""
    return PacketInfo(
        src_ip="192.168.1.100",
        dst_ip="8.8.8.8",
        src_port=12345,
        dst_port=443,
        protocol="tcp",
        size=1500,
    )
