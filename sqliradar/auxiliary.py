# sqliradar/auxiliary.py - Header injection and port scanning modules

import asyncio
from typing import List, Optional

import aiohttp
from colorama import Fore, Style

from . import __version__
from .models import HeaderFinding
from .modules import BaseModule, ModuleResult
from .options import HeaderScanOptions, OptionPairs, PortScanOptions
from .scanners.headers import HeaderInjectionTester
from .scanners.ports import PortScanner
from .utils.error_handler import SQLiRadarError, get_global_error_handler
from .utils.logger import setup_logger

logger = setup_logger("sqliradar")

error_handler = get_global_error_handler()


def render_header_report(target: str, findings: List[HeaderFinding], headers_tested: int) -> str:
    """Verdict line, test counts, then one line per vulnerable combination."""
    vulnerable = [f for f in findings if f.vulnerable]
    if vulnerable:
        verdict = f"Critical: {len(vulnerable)} header injection vulnerabilities found"
    else:
        verdict = "Scan completed successfully - No vulnerabilities found"

    lines = [verdict, f"Completed {len(findings)} tests on {headers_tested} headers against {target}"]
    for finding in vulnerable:
        lines.append(f"  - {finding.header}: {finding.payload!r} ({finding.evidence})")
    return "\n".join(lines)


class HttpHeaderInjectionModule(BaseModule):
    """Sends crafted values in trusted request headers and looks for them being honoured."""

    name = "auxiliary/http_header_injection"
    description = (
        "HTTP header injection scanner testing for malicious header payloads "
        "and reflection vulnerabilities"
    )
    author = "SQLiRadar Team"
    version = __version__

    async def run(self, options: Optional[OptionPairs] = None,
                  session: Optional[aiohttp.ClientSession] = None) -> ModuleResult:
        try:
            scan_options = HeaderScanOptions.from_pairs(options)
        except SQLiRadarError as e:
            error_handler.handle_error(e, context={"module": self.name}, log_traceback=False)
            return ModuleResult(success=False, message=f"Invalid options: {e.message}")

        try:
            findings = await self._scan(scan_options, session)
        except Exception as e:
            error_info = error_handler.handle_error(e, context={"module": self.name}, log_traceback=True)
            return ModuleResult(success=False, message=f"Scan failed: {error_info['message']}")

        vulnerable = [f for f in findings if f.vulnerable]
        for finding in vulnerable:
            logger.warning(
                f"{Fore.RED}VULNERABLE: {finding.header} = {finding.payload}{Style.RESET_ALL} "
                f"({finding.evidence})"
            )

        report = render_header_report(scan_options.target_url, findings, len({f.header for f in findings}))
        return ModuleResult(success=True, message=report, findings=vulnerable)

    async def _scan(self, scan_options: HeaderScanOptions,
                    session: Optional[aiohttp.ClientSession]) -> List[HeaderFinding]:
        if session is None:
            connector = aiohttp.TCPConnector(ssl=False, limit=scan_options.threads)
            async with aiohttp.ClientSession(connector=connector) as own_session:
                return await self._scan(scan_options, own_session)

        logger.info(
            f"{Fore.GREEN}Testing header injection against '{scan_options.target_url}'{Style.RESET_ALL}"
        )
        tester = HeaderInjectionTester(
            session,
            asyncio.Semaphore(scan_options.threads),
            headers=scan_options.headers,
            timeout=scan_options.timeout,
        )
        return await tester.test(scan_options.target_url)


class PortScannerModule(BaseModule):
    """TCP connect scan of a list of ports on one host."""

    name = "auxiliary/port_scanner"
    description = "Scans a target host for open TCP ports using asynchronous connects"
    author = "SQLiRadar Team"
    version = __version__

    async def run(self, options: Optional[OptionPairs] = None) -> ModuleResult:
        try:
            scan_options = PortScanOptions.from_pairs(options)
        except SQLiRadarError as e:
            error_handler.handle_error(e, context={"module": self.name}, log_traceback=False)
            return ModuleResult(success=False, message=f"Invalid options: {e.message}")

        logger.info(
            f"{Fore.GREEN}Starting port scan on {scan_options.host} "
            f"({len(scan_options.ports)} ports){Style.RESET_ALL}"
        )
        scanner = PortScanner(
            scan_options.host,
            asyncio.Semaphore(scan_options.threads),
            timeout=scan_options.timeout,
        )
        try:
            open_ports = await scanner.scan(scan_options.ports)
        except Exception as e:
            error_info = error_handler.handle_error(e, context={"module": self.name}, log_traceback=True)
            return ModuleResult(success=False, message=f"Scan failed: {error_info['message']}")

        if not open_ports:
            return ModuleResult(success=True, message="Scan completed. No open ports found.")
        return ModuleResult(
            success=True,
            message=f"Scan completed. Open ports: {', '.join(str(p) for p in open_ports)}",
            findings=open_ports,
        )
