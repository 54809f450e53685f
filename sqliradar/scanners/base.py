# sqliradar/scanners/base.py - Base Scanner class

import asyncio
import time
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import aiohttp

from ..models import ParameterInfo, ProbeResponse
from ..utils.error_handler import get_global_error_handler, request_error

error_handler = get_global_error_handler()

Pairs = List[Tuple[str, str]]


def replace_pair(pairs: Sequence[Tuple[str, str]], name: str, value: str) -> Pairs:
    """
    Return ``pairs`` with the value of ``name`` replaced.

    The first occurrence keeps its position, later duplicates are dropped,
    and the pair is appended when ``name`` is absent.
    """
    result: Pairs = []
    replaced = False
    for key, current in pairs:
        if key != name:
            result.append((key, current))
        elif not replaced:
            result.append((key, value))
            replaced = True
    if not replaced:
        result.append((name, value))
    return result


def build_get_url(param: ParameterInfo, payload: Optional[str] = None) -> str:
    """
    URL for a GET request against ``param``.

    Captured GET form fields are merged into the action URL's query; when a
    payload is given it replaces the value of the target parameter.
    """
    parsed = urlparse(param.action_url)
    pairs: Pairs = parse_qsl(parsed.query, keep_blank_values=True)
    for name, value in param.form_fields:
        pairs = replace_pair(pairs, name, value)
    if payload is not None:
        pairs = replace_pair(pairs, param.name, payload)
    return urlunparse(parsed._replace(query=urlencode(pairs)))


def build_form_data(param: ParameterInfo, payload: Optional[str] = None) -> Pairs:
    """Full POST field set of ``param`` with only the target field replaced."""
    pairs = list(param.form_fields)
    if payload is not None:
        pairs = replace_pair(pairs, param.name, payload)
    return pairs


class BaseScanner:
    """
    Base class for components that fire requests at discovered parameters.

    All requests share one session and one semaphore; a permit is held for
    the whole lifetime of a request and released whatever its outcome.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        semaphore: asyncio.Semaphore,
        headers: Optional[Dict[str, str]] = None,
        timeout: int = 15,
    ):
        """
        Initialize the scanner.

        Args:
            session: HTTP session shared by the whole scan
            semaphore: Permit pool bounding in-flight requests
            headers: Extra HTTP headers sent with every request
            timeout: Request timeout in seconds
        """
        self.session = session
        self.semaphore = semaphore
        self.headers = headers or {}
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def _send(self, param: ParameterInfo, payload: Optional[str] = None) -> Optional[ProbeResponse]:
        """Send the request described by ``param``, optionally carrying a payload."""
        if param.is_post:
            return await self._request("POST", param.action_url, data=build_form_data(param, payload))
        return await self._request("GET", build_get_url(param, payload))

    async def _request(
        self,
        method: str,
        url: str,
        data: Optional[Pairs] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[ProbeResponse]:
        """
        Perform one request under a semaphore permit.

        ``headers`` are laid over the scanner's own headers for this request only.

        Returns:
            Optional[ProbeResponse]: None when the request failed or timed out
        """
        async with self.semaphore:
            start_time = time.monotonic()
            try:
                async with self.session.request(
                    method,
                    url,
                    data=data,
                    headers={**self.headers, **(headers or {})},
                    timeout=self.timeout,
                ) as response:
                    body = await response.text(errors="replace")
                    return ProbeResponse(
                        status=response.status,
                        body=body,
                        elapsed=time.monotonic() - start_time,
                        url=str(response.url),
                        headers=dict(response.headers),
                    )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                error_handler.handle_error(
                    request_error(url, e),
                    context={"method": method, "url": url},
                    log_traceback=False,
                )
                return None
