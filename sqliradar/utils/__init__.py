# sqliradar/utils/__init__.py
from .error_handler import (
    ConfigurationError,
    ErrorHandler,
    NetworkError,
    ScanError,
    SQLiRadarError,
    ValidationError,
    get_global_error_handler,
)
from .logger import setup_logger
from .validator import Validator

__all__ = [
    "setup_logger",
    "ErrorHandler",
    "SQLiRadarError",
    "ConfigurationError",
    "NetworkError",
    "ScanError",
    "ValidationError",
    "Validator",
    "get_global_error_handler",
]
