# sqliradar/scanners/sqli.py - SQL Injection payload testing

import asyncio
from typing import Iterable, List, Optional, Tuple

import aiohttp

from ..models import Baseline, InjectionFamily, ParameterInfo, TestOutcome
from ..utils.logger import setup_logger
from . import payloads
from .analyzer import ResponseAnalyzer
from .base import BaseScanner

logger = setup_logger("sqli")

REQUEST_FAILED = "request failed"


class PayloadTester(BaseScanner):
    """Fires the payload matrix at one parameter and classifies every response."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        semaphore: asyncio.Semaphore,
        headers=None,
        timeout: int = 15,
        analyzer: Optional[ResponseAnalyzer] = None,
        payload_matrix: Optional[Iterable[Tuple[str, InjectionFamily]]] = None,
    ):
        """
        Initialize the payload tester.

        Args:
            session: HTTP session shared by the whole scan
            semaphore: Permit pool bounding in-flight requests
            headers: Extra HTTP headers sent with every request
            timeout: Request timeout in seconds
            analyzer: Response classifier (default thresholds when omitted)
            payload_matrix: (payload, family) pairs, defaults to payloads.sqli_payloads
        """
        super().__init__(session, semaphore, headers, timeout)
        self.analyzer = analyzer or ResponseAnalyzer()
        self.payloads = list(payload_matrix or payloads.sqli_payloads)

    async def test(self, param: ParameterInfo, baseline: Optional[Baseline] = None) -> List[TestOutcome]:
        """
        Test a parameter against every payload.

        Requests run concurrently; each one holds a semaphore permit, so the
        number of in-flight requests never exceeds the semaphore size.

        Args:
            param: Parameter to inject into
            baseline: Reference metrics for the parameter, None if unavailable

        Returns:
            List[TestOutcome]: One outcome per payload, in matrix order
        """
        return list(await asyncio.gather(
            *(self.test_payload(param, payload, family, baseline) for payload, family in self.payloads)
        ))

    async def test_payload(
        self,
        param: ParameterInfo,
        payload: str,
        family: InjectionFamily,
        baseline: Optional[Baseline] = None,
    ) -> TestOutcome:
        response = await self._send(param, payload)

        if response is None:
            vulnerable, evidence = False, REQUEST_FAILED
        else:
            vulnerable, evidence = self.analyzer.classify(
                response.body, response.status, response.elapsed, family, baseline
            )

        if vulnerable:
            logger.debug(f"'{param.name}' = {payload!r} -> {family.value}: {evidence}")

        return TestOutcome(
            parameter=param.name,
            payload=payload,
            injection_type=family,
            evidence=evidence,
            vulnerable=vulnerable,
            action_url=param.action_url,
            method=param.method,
        )
