# sqliradar/utils/validator.py

import re
from urllib.parse import urlparse


class Validator:
    """Validates user supplied option values before a scan starts."""

    SAFE_URL_PATTERN = re.compile(r'^https?://[a-zA-Z0-9\-._~:/?#\[\]@!$&\'()*+,;=%]+$', re.IGNORECASE)
    SAFE_HEADER_VALUE = re.compile(r'^[a-zA-Z0-9\-._~:/?#\[\]@!$&\'()*+,;=% ]+$')
    SAFE_HOST_PATTERN = re.compile(r'^[a-zA-Z0-9.\-:\[\]]+$')

    MAX_URL_LENGTH = 2048
    MAX_HEADER_LENGTH = 4096
    MAX_HOSTNAME_LENGTH = 253

    @staticmethod
    def validate_url(url: str) -> str:
        """Validate a scan target URL."""
        if not url or not isinstance(url, str):
            raise ValueError("URL must be a non-empty string")

        if len(url) > Validator.MAX_URL_LENGTH:
            raise ValueError("URL exceeds maximum length")

        if not Validator.SAFE_URL_PATTERN.match(url):
            raise ValueError("URL must be an absolute http(s) URL without invalid characters")

        try:
            parsed = urlparse(url)
            # port access raises on garbage such as "host:abc"
            parsed.port
        except ValueError as e:
            raise ValueError(f"Invalid URL format: {e}")

        if parsed.scheme.lower() not in ("http", "https"):
            raise ValueError("Only HTTP/HTTPS schemes allowed")

        if not parsed.hostname:
            raise ValueError("URL must contain a hostname")

        return url

    @staticmethod
    def validate_header_value(value: str, name: str) -> str:
        """Validate an HTTP header value to prevent header injection."""
        if not isinstance(value, str):
            raise ValueError(f"{name} header must be a string")

        if not value or len(value) > Validator.MAX_HEADER_LENGTH:
            raise ValueError(f"{name} header must be between 1 and {Validator.MAX_HEADER_LENGTH} characters")

        if any(char in value for char in ("\r", "\n", "\0")):
            raise ValueError(f"{name} header contains forbidden control characters")

        if not Validator.SAFE_HEADER_VALUE.match(value):
            raise ValueError(f"{name} header contains invalid characters")

        return value

    @staticmethod
    def validate_hostname(host: str) -> str:
        """Validate a bare hostname or IP address."""
        if not host or not isinstance(host, str):
            raise ValueError("Host must be a non-empty string")

        if len(host) > Validator.MAX_HOSTNAME_LENGTH:
            raise ValueError("Host exceeds maximum length")

        if not Validator.SAFE_HOST_PATTERN.match(host):
            raise ValueError("Host may only contain letters, digits, '.', '-', ':' and brackets")

        return host
