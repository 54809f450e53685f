# tests/unit/test_ports.py - Port scanner test suite

import asyncio
import socket

import pytest

from sqliradar.options import PortScanOptions, parse_ports
from sqliradar.scanners.payloads import default_ports
from sqliradar.scanners.ports import PortScanner
from sqliradar.utils.error_handler import ConfigurationError, ValidationError


def closed_port() -> int:
    """A local port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.mark.unit
class TestParsePorts:
    """Unit tests for port list parsing."""

    def test_list_and_range(self):
        assert parse_ports("22, 80,8000-8002") == (22, 80, 8000, 8001, 8002)

    def test_duplicates_dropped(self):
        assert parse_ports("80,80,79-81") == (80, 79, 81)

    @pytest.mark.parametrize("raw", ["abc", "1-2-3", "90-80", "0", "65536", ",", "-5"])
    def test_malformed(self, raw):
        with pytest.raises(ConfigurationError):
            parse_ports(raw)


@pytest.mark.unit
class TestPortScanOptions:
    """Unit tests for PortScanOptions."""

    def test_defaults(self):
        options = PortScanOptions.from_pairs([])

        assert options.host == "scanme.nmap.org"
        assert options.ports == default_ports

    def test_url_target_uses_hostname(self):
        options = PortScanOptions.from_pairs([("rhosts", "http://ex.test:8080/login"), ("PORTS", "22")])

        assert options.host == "ex.test"
        assert options.ports == (22,)

    def test_invalid_host(self):
        with pytest.raises(ValidationError):
            PortScanOptions.from_pairs([("RHOSTS", "ex.test; rm -rf /")])


@pytest.mark.unit
@pytest.mark.asyncio
class TestPortScanner:
    """Unit tests for PortScanner."""

    async def test_open_and_closed(self, listener):
        scanner = PortScanner("127.0.0.1", asyncio.Semaphore(5), timeout=2)

        assert await scanner.scan([closed_port(), listener]) == [listener]

    async def test_nothing_open(self):
        scanner = PortScanner("127.0.0.1", asyncio.Semaphore(5), timeout=2)

        assert await scanner.scan([closed_port()]) == []
