# sqliradar/utils/error_handler.py - Error taxonomy and centralized handling

import asyncio
import functools
import re
import sys
import traceback
from collections import defaultdict
from enum import Enum
from threading import Lock
from time import monotonic
from typing import Any, Callable, Dict, Optional, Tuple

import aiohttp
from colorama import Fore, Style

from .logger import setup_logger

logger = setup_logger("error_handler")

ERROR_DEDUP_WINDOW_SECONDS = 60
ERROR_CLEANUP_WINDOW_SECONDS = 300
MAX_SAFE_MESSAGE_LENGTH = 200
MAX_MESSAGE_LENGTH = 5000


class ErrorSeverity(Enum):
    """Error severity levels"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification"""

    NETWORK = "network"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    TIMEOUT = "timeout"
    PARSE = "parse"
    SCAN = "scan"
    UNKNOWN = "unknown"


class SQLiRadarError(Exception):
    """Base exception class for SQLiRadar errors"""

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        original_error: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.category = category
        self.original_error = original_error
        self.context = context or {}

        if original_error:
            self.__cause__ = original_error

    def __str__(self):
        return f"[{self.severity.value.upper()}] {self.message}"


class NetworkError(SQLiRadarError):
    """A single request could not be completed"""

    def __init__(self, message: str, **kwargs):
        kwargs["category"] = ErrorCategory.NETWORK
        super().__init__(message, **kwargs)


class ValidationError(SQLiRadarError):
    """Input validation errors"""

    def __init__(self, message: str, **kwargs):
        kwargs["category"] = ErrorCategory.VALIDATION
        kwargs["severity"] = kwargs.get("severity", ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)


class ConfigurationError(SQLiRadarError):
    """Malformed module options"""

    def __init__(self, message: str, **kwargs):
        kwargs["category"] = ErrorCategory.CONFIGURATION
        kwargs["severity"] = kwargs.get("severity", ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)


class ScanTimeoutError(SQLiRadarError):
    """A request exceeded its timeout"""

    def __init__(self, message: str, **kwargs):
        kwargs["category"] = ErrorCategory.TIMEOUT
        super().__init__(message, **kwargs)


class ParseError(SQLiRadarError):
    """A page could not be decoded or parsed"""

    def __init__(self, message: str, **kwargs):
        kwargs["category"] = ErrorCategory.PARSE
        kwargs["severity"] = kwargs.get("severity", ErrorSeverity.LOW)
        super().__init__(message, **kwargs)


class ScanError(SQLiRadarError):
    """Scan execution errors"""

    def __init__(self, message: str, **kwargs):
        kwargs["category"] = ErrorCategory.SCAN
        super().__init__(message, **kwargs)


def request_error(url: str, error: Exception) -> SQLiRadarError:
    """Wrap a transport exception into the matching SQLiRadar error."""
    if isinstance(error, asyncio.TimeoutError):
        return ScanTimeoutError(f"Request to {url} timed out", original_error=error)
    if isinstance(error, UnicodeDecodeError):
        return ParseError(f"Could not decode response from {url}", original_error=error)
    return NetworkError(f"Request to {url} failed: {error}", original_error=error)


class ErrorHandler:
    """
    Centralized error handler: classifies errors, strips sensitive data
    from messages, suppresses repeated log lines and keeps per-category
    counters.
    """

    SENSITIVE_PATTERNS = [
        (
            re.compile(
                r'((?:password|passwd|pass)["\']?\s*[:=]\s*["\']?)([^"\'&\s]{1,200})',
                re.IGNORECASE,
            ),
            r"\1[REDACTED]",
        ),
        (
            re.compile(
                r'((?:api[_-]?key|token|secret|session)["\']?\s*[:=]\s*["\']?)([^"\'&\s]{1,200})',
                re.IGNORECASE,
            ),
            r"\1[REDACTED]",
        ),
        (
            re.compile(r"(Bearer\s+)([A-Za-z0-9\-._~+/]{10,200})", re.IGNORECASE),
            r"\1[REDACTED]",
        ),
    ]

    ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")

    def __init__(self, debug_mode: bool = False, rate_limited: bool = True):
        """
        Initialize error handler.

        Args:
            debug_mode: If True, attach tracebacks to the returned error info
            rate_limited: If True, identical errors are logged once per window
        """
        self.debug_mode = debug_mode
        self.rate_limited = rate_limited

        self._error_counts: Dict[ErrorCategory, int] = defaultdict(int)
        self._counts_lock = Lock()

        self._recent_errors: Dict[str, float] = {}
        self._rate_limit_lock = Lock()

        self._color_enabled = sys.stderr.isatty()

    def handle_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        log_traceback: bool = False,
    ) -> Dict[str, Any]:
        """
        Log an error and describe it for reporting.

        Args:
            error: The exception that occurred
            context: Additional context about where/how error occurred
            user_message: User-friendly message to display
            log_traceback: Whether to log full traceback

        Returns:
            Dict containing error information
        """
        context = context or {}

        if isinstance(error, SQLiRadarError):
            severity = error.severity
            category = error.category
            message = error.message
        else:
            severity, category = self._classify_error(error)
            message = str(error)

        with self._counts_lock:
            self._error_counts[category] += 1
            current_count = self._error_counts[category]

        safe_message = self._sanitize_message(message)
        safe_context = {
            self._sanitize_message(str(k)): self._sanitize_message(str(v))
            for k, v in context.items()
        }

        if not self.rate_limited or self._should_log(error):
            self._log_error(severity, category, safe_message, safe_context, log_traceback)

        error_info = {
            "severity": severity.value,
            "category": category.value,
            "message": safe_message,
            "user_message": user_message or self._generate_user_message(category, safe_message),
            "context": safe_context,
            "recoverable": self._is_recoverable(error),
            "count": current_count,
        }

        if self.debug_mode:
            error_info["traceback"] = traceback.format_exc()

        return error_info

    def _classify_error(self, error: Exception) -> Tuple[ErrorSeverity, ErrorCategory]:
        """Classify a foreign exception by type, falling back to its message."""
        if isinstance(error, asyncio.TimeoutError):
            return ErrorSeverity.MEDIUM, ErrorCategory.TIMEOUT
        if isinstance(error, (aiohttp.ClientError, ConnectionError)):
            return ErrorSeverity.MEDIUM, ErrorCategory.NETWORK
        if isinstance(error, UnicodeDecodeError):
            return ErrorSeverity.LOW, ErrorCategory.PARSE
        if isinstance(error, ValueError):
            return ErrorSeverity.LOW, ErrorCategory.VALIDATION

        error_msg = str(error).lower()
        if "timeout" in error_msg or "timed out" in error_msg:
            return ErrorSeverity.MEDIUM, ErrorCategory.TIMEOUT
        if "parse" in error_msg or "decode" in error_msg:
            return ErrorSeverity.LOW, ErrorCategory.PARSE

        return ErrorSeverity.MEDIUM, ErrorCategory.UNKNOWN

    def _sanitize_message(self, message: str) -> str:
        """Remove credentials, newlines and terminal escapes from a message."""
        if len(message) > MAX_MESSAGE_LENGTH:
            message = message[:MAX_MESSAGE_LENGTH] + "... [truncated]"

        sanitized = message
        for pattern, replacement in self.SENSITIVE_PATTERNS:
            sanitized = pattern.sub(replacement, sanitized)

        # log injection
        sanitized = sanitized.replace("\n", " ").replace("\r", " ")
        return self.ANSI_ESCAPE.sub("", sanitized)

    def _generate_user_message(self, category: ErrorCategory, safe_message: str) -> str:
        default_messages = {
            ErrorCategory.NETWORK: "Network connection error.",
            ErrorCategory.VALIDATION: "Invalid input provided. Please check your options.",
            ErrorCategory.CONFIGURATION: "Configuration error. Please check your options.",
            ErrorCategory.TIMEOUT: "Operation timed out.",
            ErrorCategory.PARSE: "Failed to parse response. The target may have returned invalid data.",
            ErrorCategory.SCAN: "Scan error occurred. Please check the target and try again.",
            ErrorCategory.UNKNOWN: "An unexpected error occurred.",
        }
        base_message = default_messages.get(category, default_messages[ErrorCategory.UNKNOWN])

        if safe_message and len(safe_message) < MAX_SAFE_MESSAGE_LENGTH:
            return f"{base_message} Details: {safe_message}"
        return base_message

    def _is_recoverable(self, error: Exception) -> bool:
        if isinstance(error, (ConfigurationError, ValidationError)):
            return False
        if isinstance(error, (NetworkError, ScanTimeoutError, ParseError)):
            return True
        if isinstance(error, (asyncio.TimeoutError, aiohttp.ClientError, ConnectionError)):
            return True

        error_msg = str(error).lower()
        return any(msg in error_msg for msg in ("timeout", "temporary", "retry", "unavailable"))

    def _should_log(self, error: Exception) -> bool:
        """Return False for an error already logged within the dedup window."""
        error_hash = f"{type(error).__name__}:{str(error)[:100]}"
        now = monotonic()

        with self._rate_limit_lock:
            last_time = self._recent_errors.get(error_hash)
            if last_time is not None and now - last_time < ERROR_DEDUP_WINDOW_SECONDS:
                return False

            self._recent_errors[error_hash] = now

            cutoff = now - ERROR_CLEANUP_WINDOW_SECONDS
            self._recent_errors = {k: v for k, v in self._recent_errors.items() if v > cutoff}

        return True

    def _log_error(
        self,
        severity: ErrorSeverity,
        category: ErrorCategory,
        message: str,
        context: Dict[str, Any],
        log_traceback: bool,
    ):
        log_msg = f"[{category.value.upper()}] {message}"
        if context:
            log_msg += f" | Context: {context}"

        levels = {
            ErrorSeverity.CRITICAL: (logger.critical, Fore.RED),
            ErrorSeverity.HIGH: (logger.error, Fore.RED),
            ErrorSeverity.MEDIUM: (logger.warning, Fore.YELLOW),
            ErrorSeverity.LOW: (logger.info, Fore.BLUE),
        }
        log, color = levels[severity]
        if self._color_enabled:
            log(f"{color}{log_msg}{Style.RESET_ALL}")
        else:
            log(log_msg)

        if log_traceback and (severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL) or self.debug_mode):
            logger.debug(f"Traceback: {traceback.format_exc()}")

    def get_error_counts(self) -> Dict[str, int]:
        """Error counts keyed by category value."""
        with self._counts_lock:
            return {category.value: count for category, count in self._error_counts.items()}

    def reset_counts(self) -> None:
        with self._counts_lock:
            self._error_counts.clear()


def handle_async_errors(
    error_handler: Optional[ErrorHandler] = None,
    user_message: Optional[str] = None,
    raise_on_error: bool = False,
    return_on_error: Any = None,
    log_traceback: bool = True,
):
    """
    Decorator for handling errors in async functions.

    Args:
        error_handler: ErrorHandler instance to use
        user_message: Custom user message
        raise_on_error: Whether to re-raise the error after handling
        return_on_error: Value to return if error occurs
        log_traceback: Whether to log traceback
    """
    if error_handler is None:
        error_handler = get_global_error_handler()

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                error_info = error_handler.handle_error(
                    e,
                    context={"function": func.__name__},
                    user_message=user_message,
                    log_traceback=log_traceback,
                )

                if raise_on_error:
                    raise

                return return_on_error if return_on_error is not None else error_info

        return wrapper

    return decorator


_global_error_handler: Optional[ErrorHandler] = None
_global_error_handler_lock = Lock()


def get_global_error_handler() -> ErrorHandler:
    """Get the shared ErrorHandler, creating it on first use."""
    global _global_error_handler

    if _global_error_handler is None:
        with _global_error_handler_lock:
            if _global_error_handler is None:
                _global_error_handler = ErrorHandler()

    return _global_error_handler
