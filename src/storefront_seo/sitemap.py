"""
Sitemap source.

Reads the list of URLs to audit from a sitemap.xml, either over HTTP or from
a local file. Sitemap index files are followed one level deep.
"""

from pathlib import Path
from typing import Optional, Union

import httpx
from bs4 import BeautifulSoup

from .audit_logger import AuditLogger
from .config import DEFAULT_USER_AGENT
from .exceptions import SitemapError


MAX_CHILD_SITEMAPS = 10


def _soup(xml: Union[str, bytes]) -> BeautifulSoup:
    return BeautifulSoup(xml, "lxml-xml")


def is_sitemap_index(xml: Union[str, bytes]) -> bool:
    """Check whether a document is a <sitemapindex>."""
    soup = _soup(xml)
    return soup.find("sitemapindex") is not None or bool(soup.find_all("sitemap"))


def parse_sitemap(xml: Union[str, bytes]) -> list[str]:
    """
    Extract page URLs from a sitemap document.

    <url><loc> entries are returned in document order; documents without
    <url> elements fall back to every <loc>.

    Args:
        xml: Sitemap XML text

    Returns:
        List of URLs (whitespace stripped, empty entries dropped)
    """
    soup = _soup(xml)

    url_entries = soup.find_all("url")
    if url_entries:
        locs = [entry.find("loc") for entry in url_entries]
    else:
        locs = soup.find_all("loc")

    urls = []
    for loc in locs:
        if loc is None:
            continue
        text = loc.get_text(strip=True)
        if text:
            urls.append(text)
    return urls


def parse_sitemap_index(xml: Union[str, bytes]) -> list[str]:
    """Extract child sitemap URLs from a sitemap index."""
    soup = _soup(xml)
    children = []
    for entry in soup.find_all("sitemap"):
        loc = entry.find("loc")
        if loc is not None and loc.get_text(strip=True):
            children.append(loc.get_text(strip=True))
    return children


def load_local_sitemap(path: Union[str, Path]) -> list[str]:
    """
    Read page URLs from a sitemap file on disk.

    Raises:
        SitemapError: If the file cannot be read
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SitemapError(
            code="sitemap_read_failed",
            message=f"Could not read {path}: {e}",
            details={"path": str(path)},
        ) from e
    return parse_sitemap(content)


class SitemapSource:
    """Fetches sitemap URLs over HTTP."""

    COMPONENT = "SitemapSource"

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the sitemap source.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
            transport: Optional httpx transport (used to stub the network)
            logger: Optional audit logger
        """
        self._timeout = timeout
        self._user_agent = user_agent
        self._transport = transport
        self._logger = logger

    async def fetch_urls(self, sitemap_url: str) -> list[str]:
        """
        Fetch the page URLs listed by a sitemap.

        Index files are expanded: up to MAX_CHILD_SITEMAPS children are
        fetched and their URLs concatenated in order.

        Args:
            sitemap_url: URL of sitemap.xml (or a sitemap index)

        Returns:
            Page URLs in sitemap order

        Raises:
            SitemapError: If the sitemap cannot be fetched or parsed
        """
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=True,
            headers={"User-Agent": self._user_agent},
            transport=self._transport,
        ) as client:
            content = await self._fetch(client, sitemap_url)

            if not is_sitemap_index(content):
                urls = parse_sitemap(content)
                self._log_info(f"Found {len(urls)} URLs in sitemap", {"sitemap": sitemap_url})
                return urls

            children = parse_sitemap_index(content)
            if len(children) > MAX_CHILD_SITEMAPS:
                self._log_warn(
                    f"Sitemap index lists {len(children)} sitemaps, "
                    f"only the first {MAX_CHILD_SITEMAPS} are read",
                    {"sitemap": sitemap_url},
                )

            urls = []
            for child in children[:MAX_CHILD_SITEMAPS]:
                urls.extend(parse_sitemap(await self._fetch(client, child)))

            self._log_info(
                f"Found {len(urls)} URLs in {min(len(children), MAX_CHILD_SITEMAPS)} sitemaps",
                {"sitemap": sitemap_url},
            )
            return urls

    async def _fetch(self, client: httpx.AsyncClient, url: str) -> bytes:
        try:
            response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise SitemapError(
                code="sitemap_fetch_failed",
                message=f"Failed to fetch sitemap {url}: {e}",
                details={"url": url, "error_type": type(e).__name__},
            ) from e

        if response.status_code != 200:
            raise SitemapError(
                code="sitemap_http_error",
                message=f"Sitemap {url} returned HTTP {response.status_code}",
                details={"url": url, "status_code": response.status_code},
            )

        return response.content

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.info(self.COMPONENT, message, data)

    def _log_warn(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.warn(self.COMPONENT, message, data)
