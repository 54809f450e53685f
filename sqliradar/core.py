# sqliradar/core.py - SQL injection scan orchestration

import asyncio
from enum import Enum
from typing import Dict, List, Optional, Tuple

import aiohttp
from colorama import Fore, Style
from tqdm import tqdm

from . import __version__
from .crawlers import WebCrawler
from .models import Baseline, ParameterContext, ParameterInfo, ScanSummary, TestOutcome
from .modules import BaseModule, ModuleResult
from .options import OptionPairs, ScanOptions
from .scanners.analyzer import ResponseAnalyzer
from .scanners.baseline import BaselineEstablisher
from .scanners.sqli import PayloadTester
from .utils.error_handler import ScanError, SQLiRadarError, get_global_error_handler
from .utils.logger import setup_logger

logger = setup_logger("sqliradar")

error_handler = get_global_error_handler()

BaselineKey = Tuple[str, str, str]


class ScanPhase(Enum):
    """Scan states, entered strictly in this order."""

    DISCOVERY = 1
    BASELINE = 2
    TESTING = 3
    SUMMARY = 4
    DONE = 5


class ScanOrchestrator:
    """Runs Discovery -> Baseline -> Testing -> Summary for one target."""

    def __init__(self, options: ScanOptions, analyzer: Optional[ResponseAnalyzer] = None):
        """
        Initialize the orchestrator.

        Args:
            options: Validated scan options
            analyzer: Response classifier shared by all payload tests
        """
        self.options = options
        self.analyzer = analyzer or ResponseAnalyzer()
        self.headers = options.headers

        self.phase: Optional[ScanPhase] = None
        self.phase_history: List[ScanPhase] = []

        self.parameters: List[ParameterInfo] = []
        self.baselines: Dict[BaselineKey, Optional[Baseline]] = {}
        self.outcomes: List[TestOutcome] = []
        self.summary: Optional[ScanSummary] = None

    def _enter(self, phase: ScanPhase) -> None:
        if self.phase is None:
            expected = ScanPhase.DISCOVERY
        elif self.phase is ScanPhase.DONE:
            expected = None
        else:
            expected = ScanPhase(self.phase.value + 1)

        if phase is not expected:
            current = self.phase.name if self.phase else "START"
            raise ScanError(f"Invalid scan phase transition {current} -> {phase.name}")
        self.phase = phase
        self.phase_history.append(phase)

    async def scan(self, session: Optional[aiohttp.ClientSession] = None) -> ScanSummary:
        """
        Execute the full scan.

        Args:
            session: Existing HTTP session; a private one is opened when omitted

        Returns:
            ScanSummary: Aggregated findings
        """
        if session is not None:
            return await self._run(session)

        connector = aiohttp.TCPConnector(ssl=False, limit=self.options.threads)
        async with aiohttp.ClientSession(connector=connector) as own_session:
            return await self._run(own_session)

    async def _run(self, session: aiohttp.ClientSession) -> ScanSummary:
        semaphore = asyncio.Semaphore(self.options.threads)
        logger.info(
            f"{Fore.GREEN}Starting SQL injection scan against '{self.options.target_url}'{Style.RESET_ALL}"
        )

        self._enter(ScanPhase.DISCOVERY)
        logger.info(f"{Fore.BLUE}Phase 1: Parameter discovery{Style.RESET_ALL}")
        self.parameters = await self.discover(session, semaphore)

        self._enter(ScanPhase.BASELINE)
        logger.info(f"{Fore.BLUE}Phase 2: Baseline establishment{Style.RESET_ALL}")
        await self.establish_baselines(session, semaphore, self.parameters)

        self._enter(ScanPhase.TESTING)
        logger.info(f"{Fore.BLUE}Phase 3: SQL injection testing{Style.RESET_ALL}")
        self.outcomes = await self.run_tests(session, semaphore, self.parameters)

        self._enter(ScanPhase.SUMMARY)
        self.summary = self.summarize()

        self._enter(ScanPhase.DONE)
        return self.summary

    async def discover(self, session: aiohttp.ClientSession, semaphore: asyncio.Semaphore) -> List[ParameterInfo]:
        """Collect the parameters to test: crawled, manual, or the defaults."""
        discovered: List[ParameterInfo] = []
        if self.options.auto_discover:
            logger.info("Auto-discovery enabled: crawling & parsing...")
            crawler = WebCrawler(
                self.options.target_url,
                semaphore,
                headers=self.headers,
                max_depth=self.options.crawl_depth,
                timeout=self.options.timeout,
                same_domain=self.options.same_domain,
            )
            discovered = await crawler.discover(session)

        if discovered:
            logger.info(f"{Fore.GREEN}Discovered {len(discovered)} parameters{Style.RESET_ALL}")
            targets = discovered
        else:
            names = self.options.fallback_params
            logger.warning(f"{Fore.YELLOW}Using manual parameters: {', '.join(names)}{Style.RESET_ALL}")
            targets = [self._manual_parameter(name) for name in names]

        if self.options.method_filter != "BOTH":
            targets = [p for p in targets if p.method == self.options.method_filter]

        return self._unique(targets)

    def _manual_parameter(self, name: str) -> ParameterInfo:
        return ParameterInfo(
            name=name,
            source=self.options.target_url,
            method="GET",
            action_url=self.options.target_url,
            context=ParameterContext.MANUAL,
        )

    @staticmethod
    def _unique(parameters: List[ParameterInfo]) -> List[ParameterInfo]:
        unique: Dict[BaselineKey, ParameterInfo] = {}
        for param in parameters:
            unique.setdefault(param.key, param)
        return list(unique.values())

    async def establish_baselines(
        self,
        session: aiohttp.ClientSession,
        semaphore: asyncio.Semaphore,
        parameters: List[ParameterInfo],
    ) -> Dict[BaselineKey, Optional[Baseline]]:
        """
        Establish one baseline per (action URL, method, name) key.

        Keys that already have an entry, including a failed (None) one, are
        not requested again.
        """
        pending = [p for p in self._unique(parameters) if p.key not in self.baselines]
        if pending:
            establisher = BaselineEstablisher(session, semaphore, self.headers, self.options.timeout)
            results = await asyncio.gather(*(establisher.establish(p) for p in pending))
            for param, baseline in zip(pending, results):
                self.baselines[param.key] = baseline

        missing = sum(1 for p in pending if self.baselines[p.key] is None)
        logger.info(f"Established {len(pending) - missing} baseline(s), {missing} unavailable")
        return self.baselines

    async def run_tests(
        self,
        session: aiohttp.ClientSession,
        semaphore: asyncio.Semaphore,
        parameters: List[ParameterInfo],
    ) -> List[TestOutcome]:
        """Run the payload matrix against every parameter."""
        tester = PayloadTester(session, semaphore, self.headers, self.options.timeout, analyzer=self.analyzer)
        total = len(parameters)

        with tqdm(total=total, desc="Testing parameters", unit="params", leave=False) as pbar:
            async def test_one(index: int, param: ParameterInfo) -> List[TestOutcome]:
                logger.debug(f"[{index}/{total}] Testing: {param.name} ({param.context.value})")
                outcomes = await tester.test(param, self.baselines.get(param.key))
                pbar.update(1)
                return outcomes

            results = await asyncio.gather(
                *(test_one(i, param) for i, param in enumerate(parameters, 1))
            )

        outcomes = [outcome for batch in results for outcome in batch]
        for outcome in outcomes:
            if outcome.vulnerable:
                logger.warning(
                    f"{Fore.RED}VULNERABLE: {outcome.parameter} = {outcome.payload}{Style.RESET_ALL} "
                    f"({outcome.evidence})"
                )
        return outcomes

    def summarize(self) -> ScanSummary:
        summary = ScanSummary(
            target=self.options.target_url,
            parameters_tested=len(self.parameters),
            total_tests=len(self.outcomes),
            findings=[o for o in self.outcomes if o.vulnerable],
        )

        logger.info(f"Completed {summary.total_tests} tests on {summary.parameters_tested} parameters")
        if summary.findings:
            logger.warning(f"{Fore.RED}{summary.verdict}{Style.RESET_ALL}")
        else:
            logger.info(f"{Fore.GREEN}{summary.verdict}{Style.RESET_ALL}")
        return summary


class SQLInjectionModule(BaseModule):
    """SQL injection scanner with parameter discovery, baselining and payload testing."""

    name = "auxiliary/sql_injection"
    description = (
        "Advanced SQL injection scanner with parameter discovery, baselining, "
        "and intelligent payload testing"
    )
    author = "SQLiRadar Team"
    version = __version__

    def __init__(self, analyzer: Optional[ResponseAnalyzer] = None):
        self.analyzer = analyzer
        self.last_summary: Optional[ScanSummary] = None

    async def run(self, options: Optional[OptionPairs] = None,
                  session: Optional[aiohttp.ClientSession] = None) -> ModuleResult:
        """
        Parse options and run a scan.

        Malformed options fail before any request is sent.
        """
        try:
            scan_options = ScanOptions.from_pairs(options)
        except SQLiRadarError as e:
            error_handler.handle_error(e, context={"module": self.name}, log_traceback=False)
            return ModuleResult(success=False, message=f"Invalid options: {e.message}")

        orchestrator = ScanOrchestrator(scan_options, analyzer=self.analyzer)
        try:
            summary = await orchestrator.scan(session)
        except Exception as e:
            phase = orchestrator.phase.name if orchestrator.phase else "START"
            error_info = error_handler.handle_error(
                e, context={"module": self.name, "phase": phase}, log_traceback=True
            )
            return ModuleResult(success=False, message=f"Scan failed: {error_info['message']}")

        self.last_summary = summary
        return ModuleResult(success=True, message=summary.render(), findings=list(summary.findings))
