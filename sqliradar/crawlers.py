# sqliradar/crawlers.py - Breadth-first parameter discovery

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set
from urllib.parse import urldefrag, urljoin, urlparse

import aiohttp
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from .extractor import ParameterExtractor, parse_html
from .models import ParameterInfo
from .utils.error_handler import ParseError, get_global_error_handler, request_error
from .utils.logger import setup_logger

logger = setup_logger("crawler")

error_handler = get_global_error_handler()

SKIP_EXTENSIONS = (
    ".pdf", ".jpg", ".jpeg", ".png", ".gif", ".svg", ".ico", ".webp",
    ".css", ".js", ".woff", ".woff2", ".ttf", ".eot",
    ".zip", ".tar", ".gz", ".mp4", ".mp3", ".wav", ".avi", ".mov",
)


@dataclass
class PageData:
    """What a single fetch contributes to the crawl."""

    url: str
    links: List[str] = field(default_factory=list)
    parameters: List[ParameterInfo] = field(default_factory=list)


class WebCrawler:
    """
    Layered breadth-first crawler collecting injectable parameters.

    Every page of a layer is fetched concurrently. Fetch workers only return
    their PageData; the visited set and the frontier are updated by
    ``discover`` between layers, so no locking is needed.
    """

    def __init__(
        self,
        base_url: str,
        semaphore: asyncio.Semaphore,
        headers: Optional[Dict] = None,
        max_depth: int = 2,
        timeout: int = 15,
        same_domain: bool = True,
        extractor: Optional[ParameterExtractor] = None,
    ):
        """
        Initialize the web crawler.

        Args:
            base_url: Seed URL
            semaphore: Permit pool shared with the rest of the scan
            headers: HTTP headers to use
            max_depth: Deepest layer to fetch (0 fetches only the seed)
            timeout: Request timeout in seconds
            same_domain: Only follow links on the seed's host
            extractor: Parameter extractor applied to every page
        """
        self.base_url = base_url
        self.semaphore = semaphore
        self.headers = headers or {}
        self.max_depth = max_depth
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.same_domain = same_domain
        self.extractor = extractor or ParameterExtractor()
        self.base_domain = urlparse(base_url).netloc.lower()

        self.visited_urls: Set[str] = set()
        self.layers_crawled = 0

    async def discover(self, session: aiohttp.ClientSession) -> List[ParameterInfo]:
        """
        Crawl from the seed and return every parameter found, in discovery order.

        Args:
            session: HTTP session used for all fetches

        Returns:
            List[ParameterInfo]: Parameters of all successfully fetched pages
        """
        discovered: List[ParameterInfo] = []
        frontier = [self.base_url]

        for depth in range(self.max_depth + 1):
            layer = [url for url in dict.fromkeys(frontier) if url not in self.visited_urls]
            if not layer:
                break

            self.visited_urls.update(layer)
            self.layers_crawled += 1
            logger.info(f"Crawling depth {depth}: {len(layer)} page(s)")

            pages = await asyncio.gather(*(self._fetch_page(session, url) for url in layer))

            next_frontier: List[str] = []
            for page in pages:
                if page is None:
                    continue
                discovered.extend(page.parameters)
                next_frontier.extend(page.links)

            frontier = next_frontier

        logger.info(
            f"Crawling finished: {len(self.visited_urls)} page(s) visited, "
            f"{len(discovered)} parameter(s) discovered"
        )
        return discovered

    async def _fetch_page(self, session: aiohttp.ClientSession, url: str) -> Optional[PageData]:
        """Fetch and parse one page; None when the fetch failed."""
        async with self.semaphore:
            try:
                async with session.get(url, headers=self.headers, timeout=self.timeout) as response:
                    html_content = ""
                    if self._is_html_response(response):
                        html_content = await response.text()
            except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
                error_handler.handle_error(
                    request_error(url, e),
                    context={"url": url},
                    log_traceback=False,
                )
                return None

        if not html_content:
            return PageData(url=url, parameters=self.extractor.extract_url_parameters(url))

        try:
            soup = parse_html(html_content)
        except ParserRejectedMarkup as e:
            error_handler.handle_error(
                ParseError(f"Could not parse {url}", original_error=e),
                context={"url": url},
                log_traceback=False,
            )
            return None

        return PageData(
            url=url,
            links=self._extract_links(url, soup),
            parameters=self.extractor.extract_from_soup(url, soup),
        )

    def _extract_links(self, page_url: str, soup: BeautifulSoup) -> List[str]:
        """
        Extract crawlable absolute links from a parsed page.

        Args:
            page_url: Base URL for resolving relative links
            soup: Parsed page

        Returns:
            List[str]: Absolute URLs without fragments
        """
        links = []
        for a_tag in soup.find_all("a", href=True):
            href = a_tag["href"].strip()
            if not href or href.startswith("#"):
                continue

            try:
                absolute_url, _ = urldefrag(urljoin(page_url, href))
            except ValueError:
                logger.debug(f"Skipping malformed link on {page_url}: {href!r}")
                continue
            if self._should_crawl(absolute_url):
                links.append(absolute_url)

        return links

    def _should_crawl(self, url: str) -> bool:
        try:
            parsed = urlparse(url)
        except ValueError:
            return False

        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return False

        if self.same_domain and parsed.netloc.lower() != self.base_domain:
            return False

        return not parsed.path.lower().endswith(SKIP_EXTENSIONS)

    @staticmethod
    def _is_html_response(response) -> bool:
        content_type = response.headers.get("Content-Type")
        # untyped bodies are parsed as well
        if not content_type:
            return True
        content_type = content_type.lower()
        return "text/html" in content_type or "application/xhtml" in content_type
