# sqliradar/scanners/headers.py - HTTP header injection testing

import asyncio
from typing import Iterable, List, Mapping, Optional, Tuple

import aiohttp

from ..models import HeaderFinding, ProbeResponse
from ..utils.logger import setup_logger
from . import payloads
from .base import BaseScanner
from .sqli import REQUEST_FAILED

logger = setup_logger("headers")

Classification = Tuple[bool, str]


def classify_header_response(
    header: str,
    payload: str,
    status: int,
    body: str,
    response_headers: Optional[Mapping[str, str]] = None,
) -> Classification:
    """
    Decide whether a response shows that an injected header was trusted.

    Checks run from the most to the least specific signal; the first match
    provides the evidence.

    Args:
        header: Name of the injected request header
        payload: Value sent in that header
        status: HTTP status code of the response
        body: Response body
        response_headers: Response header names and values

    Returns:
        Tuple[bool, str]: Vulnerable flag and evidence
    """
    header_lower = header.lower()
    success = 200 <= status < 300

    if header_lower == "user-agent" and "<script>" in payload:
        if payload in body or "script" in body:
            return True, "Potential XSS via User-Agent header"

    if any(marker in header for marker in payloads.ip_header_markers):
        if success and payload in payloads.loopback_values and payload in body:
            return True, f"IP spoofing via {header} header successful"

    if header_lower == "host" and success:
        return True, "Host header injection accepted (potential cache poisoning)"

    for name, value in (response_headers or {}).items():
        if payload in value:
            return True, f"Payload '{payload}' reflected in response header '{name}'"

    if payload in body:
        return True, f"Payload '{payload}' reflected in response body"

    return False, "No reflection detected"


class HeaderInjectionTester(BaseScanner):
    """Sends every payload in every tested header of a single URL."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        semaphore: asyncio.Semaphore,
        headers=None,
        timeout: int = 5,
        header_names: Optional[Iterable[str]] = None,
        header_payloads: Optional[Iterable[str]] = None,
    ):
        super().__init__(session, semaphore, headers, timeout)
        self.header_names = list(header_names or payloads.header_names)
        self.header_payloads = list(header_payloads or payloads.header_payloads)

    async def test(self, url: str) -> List[HeaderFinding]:
        """
        Test every header/payload combination against ``url``.

        Returns:
            List[HeaderFinding]: One finding per combination, headers in order
        """
        return list(await asyncio.gather(
            *(
                self.test_header(url, header, payload)
                for header in self.header_names
                for payload in self.header_payloads
            )
        ))

    async def test_header(self, url: str, header: str, payload: str) -> HeaderFinding:
        response: Optional[ProbeResponse] = await self._request("GET", url, headers={header: payload})

        if response is None:
            vulnerable, evidence = False, REQUEST_FAILED
        else:
            vulnerable, evidence = classify_header_response(
                header, payload, response.status, response.body, response.headers
            )

        if vulnerable:
            logger.debug(f"{header} = {payload!r}: {evidence}")

        return HeaderFinding(header=header, payload=payload, evidence=evidence, vulnerable=vulnerable)
