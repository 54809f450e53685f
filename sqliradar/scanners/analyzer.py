# sqliradar/scanners/analyzer.py - Response classification

from typing import Iterable, Optional, Tuple, Union

from ..extractor import extract_title
from ..models import Baseline, InjectionFamily
from . import payloads

LENGTH_CHANGE_THRESHOLD = 0.10
TIME_DELAY_THRESHOLD = 4.0
SERVER_ERROR_STATUS = 500

Classification = Tuple[bool, str]


class ResponseAnalyzer:
    """
    Classifies a probe response against an optional baseline.

    The analyzer holds configuration only; ``classify`` has no side effects,
    so identical inputs always give identical results.
    """

    def __init__(
        self,
        length_change_threshold: float = LENGTH_CHANGE_THRESHOLD,
        time_delay_threshold: float = TIME_DELAY_THRESHOLD,
        error_signatures: Iterable[str] = payloads.sqli_error_signatures,
        boolean_keywords: Iterable[str] = payloads.boolean_keywords,
    ):
        self.length_change_threshold = length_change_threshold
        self.time_delay_threshold = time_delay_threshold
        self.error_signatures = tuple(s.lower() for s in error_signatures)
        self.boolean_keywords = tuple(k.lower() for k in boolean_keywords)

    def classify(
        self,
        body: str,
        status: int,
        elapsed: float,
        family: Union[InjectionFamily, str],
        baseline: Optional[Baseline] = None,
    ) -> Classification:
        """
        Decide whether a response indicates SQL injection.

        Args:
            body: Response body
            status: HTTP status code
            elapsed: Response time in seconds
            family: Injection family of the payload that produced the response
            baseline: Reference metrics for the same parameter, if any

        Returns:
            Tuple[bool, str]: Vulnerable flag and evidence
        """
        try:
            family = InjectionFamily(family)
        except ValueError:
            return False, "Unknown injection type"

        body_lower = body.lower()

        if family is InjectionFamily.ERROR_BASED:
            return self._error_based(body_lower, status)
        if family is InjectionFamily.BOOLEAN_BASED:
            return self._boolean_based(body, body_lower, baseline)
        if family is InjectionFamily.TIME_BASED:
            return self._time_based(elapsed)
        return self._union_based(body_lower, status)

    def _error_based(self, body_lower: str, status: int) -> Classification:
        signature = self._find_error_signature(body_lower)
        if signature:
            return True, f"SQL error message detected ('{signature}')"
        if status >= SERVER_ERROR_STATUS:
            return True, f"Server error response (HTTP {status})"
        return False, "No error-based injection detected"

    def _boolean_based(self, body: str, body_lower: str, baseline: Optional[Baseline]) -> Classification:
        keyword = self._find_keyword(body_lower)

        if baseline is None:
            if keyword:
                return True, f"Boolean pattern heuristic matched (keyword '{keyword}', no baseline)"
            return False, "No boolean-based indicators without baseline"

        length_change = self.length_change(len(body), baseline.content_length)
        title_changed = extract_title(body) != baseline.title

        signals = []
        if length_change > self.length_change_threshold:
            signals.append("length")
        if title_changed:
            signals.append("title")
        if keyword:
            signals.append(f"keyword '{keyword}'")

        if not signals:
            return False, "No boolean-based injection detected"
        return True, (
            f"Boolean pattern detected (length change {length_change * 100:.1f}%, "
            f"signals: {', '.join(signals)})"
        )

    def _time_based(self, elapsed: float) -> Classification:
        if elapsed >= self.time_delay_threshold:
            return True, f"Time delay detected ({elapsed:.2f}s)"
        return False, f"No time-based injection detected ({elapsed:.2f}s)"

    def _union_based(self, body_lower: str, status: int) -> Classification:
        if status == 200 and payloads.union_error_marker not in body_lower:
            return True, "Union injection likely (HTTP 200 with no visible error)"
        return False, "No union-based injection detected"

    def _find_error_signature(self, body_lower: str) -> Optional[str]:
        return next((s for s in self.error_signatures if s in body_lower), None)

    def _find_keyword(self, body_lower: str) -> Optional[str]:
        return next((k for k in self.boolean_keywords if k in body_lower), None)

    @staticmethod
    def length_change(length: int, baseline_length: int) -> float:
        """Relative body length change; 0 when the baseline body was empty."""
        if baseline_length <= 0:
            return 0.0
        return abs(length - baseline_length) / baseline_length


_default_analyzer = ResponseAnalyzer()


def classify(
    body: str,
    status: int,
    elapsed: float,
    family: Union[InjectionFamily, str],
    baseline: Optional[Baseline] = None,
) -> Classification:
    """Classify with the default thresholds."""
    return _default_analyzer.classify(body, status, elapsed, family, baseline)
