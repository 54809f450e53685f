# sqliradar/scanners/baseline.py - Baseline establishment

import hashlib
from typing import Optional

from ..extractor import extract_title
from ..models import Baseline, ParameterInfo, ProbeResponse
from ..utils.logger import setup_logger
from .base import BaseScanner

logger = setup_logger("baseline")


def hash_body(body: str) -> str:
    return hashlib.sha256(body.encode("utf-8", errors="replace")).hexdigest()


def baseline_from_response(response: ProbeResponse) -> Baseline:
    return Baseline(
        status=response.status,
        content_length=len(response.body),
        response_time=response.elapsed,
        title=extract_title(response.body),
        body_hash=hash_body(response.body),
    )


class BaselineEstablisher(BaseScanner):
    """Records the reference response of an unmodified parameter."""

    async def establish(self, param: ParameterInfo) -> Optional[Baseline]:
        """
        Issue exactly one unmodified request for ``param``.

        Args:
            param: Parameter whose target should be measured

        Returns:
            Optional[Baseline]: None when the request failed
        """
        response = await self._send(param)
        if response is None:
            logger.debug(f"No baseline available for '{param.name}' at {param.action_url}")
            return None

        baseline = baseline_from_response(response)
        logger.debug(
            f"Baseline for '{param.name}' ({param.method} {param.action_url}): "
            f"HTTP {baseline.status}, {baseline.content_length} chars, {baseline.response_time:.2f}s"
        )
        return baseline
