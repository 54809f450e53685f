# sqliradar/scanners/__init__.py
from .analyzer import ResponseAnalyzer, classify
from .base import BaseScanner
from .baseline import BaselineEstablisher
from .headers import HeaderInjectionTester, classify_header_response
from .ports import PortScanner
from .sqli import PayloadTester

__all__ = [
    "BaseScanner",
    "BaselineEstablisher",
    "HeaderInjectionTester",
    "PayloadTester",
    "PortScanner",
    "ResponseAnalyzer",
    "classify",
    "classify_header_response",
]
