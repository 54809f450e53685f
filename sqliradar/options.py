# sqliradar/options.py - Module option parsing

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlparse

from .scanners.payloads import default_parameters, default_ports
from .utils.error_handler import ConfigurationError, ValidationError
from .utils.validator import Validator

DEFAULT_TARGET = "https://httpbin.org"
DEFAULT_CRAWL_DEPTH = 2
DEFAULT_THREADS = 10
DEFAULT_TIMEOUT = 15
DEFAULT_USER_AGENT = "SQLiRadar/1.0"
DEFAULT_HEADER_TIMEOUT = 5
DEFAULT_PORT_SCAN_HOST = "scanme.nmap.org"
DEFAULT_PORT_SCAN_THREADS = 100
DEFAULT_CONNECT_TIMEOUT = 3
MAX_PORT = 65535
METHOD_FILTERS = ("BOTH", "GET", "POST")

TRUE_VALUES = ("true", "yes", "on", "1")
FALSE_VALUES = ("false", "no", "off", "0")

OptionPairs = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def normalize_options(options: Optional[OptionPairs]) -> Dict[str, str]:
    """Upper-case option keys; when a key repeats, the last value wins."""
    if options is None:
        return {}
    pairs = options.items() if isinstance(options, Mapping) else options
    return {str(key).strip().upper(): str(value).strip() for key, value in pairs}


def parse_bool(options: Dict[str, str], key: str, default: bool) -> bool:
    raw = options.get(key)
    if raw is None or raw == "":
        return default
    value = raw.lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(f"{key} must be true or false, got '{raw}'")


def parse_uint(options: Dict[str, str], key: str, default: int, minimum: int = 0) -> int:
    raw = options.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an unsigned integer, got '{raw}'")
    if value < minimum:
        raise ConfigurationError(f"{key} must be at least {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class ScanOptions:
    """Validated settings of one SQL injection scan."""

    target_url: str = DEFAULT_TARGET
    auto_discover: bool = True
    crawl_depth: int = DEFAULT_CRAWL_DEPTH
    threads: int = DEFAULT_THREADS
    timeout: int = DEFAULT_TIMEOUT
    host_header: Optional[str] = None
    method_filter: str = "BOTH"
    manual_params: Tuple[str, ...] = ()
    same_domain: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_pairs(cls, options: Optional[OptionPairs] = None) -> "ScanOptions":
        """
        Build scan options from the flat key/value set handed over by the console.

        Args:
            options: Ordered (key, value) pairs or a mapping; keys are case-insensitive

        Returns:
            ScanOptions: Validated options

        Raises:
            ConfigurationError: A numeric, boolean or enum option is malformed
            ValidationError: RHOSTS or a header value is not acceptable
        """
        values = normalize_options(options)

        target_url = values.get("RHOSTS") or DEFAULT_TARGET
        try:
            Validator.validate_url(target_url)
        except ValueError as e:
            raise ValidationError(f"Invalid RHOSTS '{target_url}': {e}", original_error=e)

        method_filter = (values.get("METHODS") or "BOTH").upper()
        if method_filter not in METHOD_FILTERS:
            raise ConfigurationError(
                f"METHODS must be one of {', '.join(METHOD_FILTERS)}, got '{method_filter}'"
            )

        host_header = values.get("HOST") or None
        user_agent = values.get("USER_AGENT") or DEFAULT_USER_AGENT
        try:
            if host_header:
                Validator.validate_header_value(host_header, "Host")
            Validator.validate_header_value(user_agent, "User-Agent")
        except ValueError as e:
            raise ValidationError(str(e), original_error=e)

        manual_params = tuple(
            name.strip() for name in values.get("PARAMS", "").split(",") if name.strip()
        )

        return cls(
            target_url=target_url,
            auto_discover=parse_bool(values, "AUTO_DISCOVER", True),
            crawl_depth=parse_uint(values, "CRAWL_DEPTH", DEFAULT_CRAWL_DEPTH),
            threads=parse_uint(values, "THREADS", DEFAULT_THREADS, minimum=1),
            timeout=parse_uint(values, "TIMEOUT", DEFAULT_TIMEOUT, minimum=1),
            host_header=host_header,
            method_filter=method_filter,
            manual_params=manual_params,
            same_domain=parse_bool(values, "SAME_DOMAIN", True),
            user_agent=user_agent,
        )

    @property
    def fallback_params(self) -> Tuple[str, ...]:
        """Names used when discovery is disabled or finds nothing."""
        return self.manual_params or default_parameters

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }
        if self.host_header:
            headers["Host"] = self.host_header
        return headers


@dataclass(frozen=True)
class HeaderScanOptions:
    """Validated settings of one header injection scan."""

    target_url: str = DEFAULT_TARGET
    threads: int = DEFAULT_THREADS
    timeout: int = DEFAULT_HEADER_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_pairs(cls, options: Optional[OptionPairs] = None) -> "HeaderScanOptions":
        values = normalize_options(options)

        target_url = values.get("RHOSTS") or DEFAULT_TARGET
        try:
            Validator.validate_url(target_url)
        except ValueError as e:
            raise ValidationError(f"Invalid RHOSTS '{target_url}': {e}", original_error=e)

        user_agent = values.get("USER_AGENT") or DEFAULT_USER_AGENT
        try:
            Validator.validate_header_value(user_agent, "User-Agent")
        except ValueError as e:
            raise ValidationError(str(e), original_error=e)

        return cls(
            target_url=target_url,
            threads=parse_uint(values, "THREADS", DEFAULT_THREADS, minimum=1),
            timeout=parse_uint(values, "TIMEOUT", DEFAULT_HEADER_TIMEOUT, minimum=1),
            user_agent=user_agent,
        )

    @property
    def headers(self) -> Dict[str, str]:
        return {"User-Agent": self.user_agent}


def parse_ports(raw: str) -> Tuple[int, ...]:
    """
    Parse a port list such as ``"22,80,8000-8010"``.

    Duplicates are dropped, first occurrence kept.

    Raises:
        ConfigurationError: A port or range is malformed or out of bounds
    """
    ports: List[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue

        if "-" in part:
            bounds = part.split("-")
            if len(bounds) != 2:
                raise ConfigurationError(f"Invalid port range format: {part}")
            start, end = (_parse_port(bound.strip()) for bound in bounds)
            if start > end:
                raise ConfigurationError(f"Invalid range: start port {start} > end port {end}")
            ports.extend(range(start, end + 1))
        else:
            ports.append(_parse_port(part))

    if not ports:
        raise ConfigurationError("No valid ports specified")
    return tuple(dict.fromkeys(ports))


def _parse_port(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid port: '{raw}'")
    if not 1 <= port <= MAX_PORT:
        raise ConfigurationError(f"Port {port} is outside 1-{MAX_PORT}")
    return port


@dataclass(frozen=True)
class PortScanOptions:
    """Validated settings of one TCP port scan."""

    host: str = DEFAULT_PORT_SCAN_HOST
    ports: Tuple[int, ...] = default_ports
    threads: int = DEFAULT_PORT_SCAN_THREADS
    timeout: int = DEFAULT_CONNECT_TIMEOUT

    @classmethod
    def from_pairs(cls, options: Optional[OptionPairs] = None) -> "PortScanOptions":
        """
        Build port scan options.

        RHOSTS may be a bare host or a URL, in which case its hostname is used.
        """
        values = normalize_options(options)

        host = values.get("RHOSTS") or DEFAULT_PORT_SCAN_HOST
        if "://" in host:
            try:
                host = urlparse(host).hostname or ""
            except ValueError as e:
                raise ValidationError(f"Invalid RHOSTS '{host}': {e}", original_error=e)
        try:
            Validator.validate_hostname(host)
        except ValueError as e:
            raise ValidationError(f"Invalid RHOSTS '{host}': {e}", original_error=e)

        raw_ports = values.get("PORTS")
        ports = parse_ports(raw_ports) if raw_ports else default_ports

        return cls(
            host=host.strip("[]"),
            ports=ports,
            threads=parse_uint(values, "THREADS", DEFAULT_PORT_SCAN_THREADS, minimum=1),
            timeout=parse_uint(values, "TIMEOUT", DEFAULT_CONNECT_TIMEOUT, minimum=1),
        )
