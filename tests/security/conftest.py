# tests/security/conftest.py - Pytest fixtures for security tests

import pytest

from sqliradar.scanners.payloads import sqli_error_signatures, sqli_payloads

# Values an operator could paste into HOST or USER_AGENT to split headers
header_injection_payloads_list = [
    "test\r\nSet-Cookie: admin=true",
    "test\r\nContent-Length: 0",
    "test\nLocation: http://attacker.com",
    "test\r\nX-Original-URL: /admin",
    "test\x00admin",
]

# Seeds that must never start a scan
unsafe_target_list = [
    "javascript:alert(1)",
    "file:///etc/passwd",
    "gopher://ex.test/_payload",
    "http://ex.test/<script>",
    "http:// ex.test/",
    "http://" + "a" * 2100 + ".test/",
]


@pytest.fixture
def payload_matrix():
    """Provide the (payload, family) matrix."""
    return list(sqli_payloads)


@pytest.fixture
def error_signatures():
    """Provide the database error signatures."""
    return sqli_error_signatures


@pytest.fixture
def header_injection_payloads():
    """Provide header splitting payloads."""
    return header_injection_payloads_list


@pytest.fixture
def unsafe_targets():
    """Provide target URLs that must be rejected."""
    return unsafe_target_list
