"""
SQLiRadar - SQL Injection Scanner

Discovers injectable parameters on a web application, establishes response
baselines and fires a classified SQL injection payload matrix at them.
"""

__version__ = "1.0.0"

from .auxiliary import HttpHeaderInjectionModule, PortScannerModule
from .core import ScanOrchestrator, ScanPhase, SQLInjectionModule
from .modules import ModuleRegistry, build_registry
from .options import ScanOptions

__all__ = [
    "ScanOrchestrator",
    "ScanPhase",
    "SQLInjectionModule",
    "HttpHeaderInjectionModule",
    "PortScannerModule",
    "ModuleRegistry",
    "build_registry",
    "ScanOptions",
]
