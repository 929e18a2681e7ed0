"""
Audit orchestrator for the redirect auditor.

This module coordinates the components that audit a storefront's URLs:
- Sitemap source for the URL list
- Request throttle between URLs
- Chain walker for each URL's redirect chain
- Classifier, source attribution and fix advisor for the verdict

URLs are processed strictly one after another. A failure on one URL is
recorded in the report and never stops the run.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional
from urllib.parse import urlparse

from .attribution import attribute_source
from .audit_logger import AuditLogger
from .chain_walker import ChainWalker
from .classifier import RedirectClassifier
from .config import AuditConfig
from .enums import Classification, LogLevel
from .exceptions import SitemapError
from .fix_advisor import FixAdvisor
from .models import AuditError, AuditRecord, AuditReport
from .sitemap import SitemapSource
from .throttle import RequestThrottle


def utc_timestamp() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


class RedirectAuditOrchestrator:
    """
    Runs the walk -> classify -> attribute -> advise pipeline over URLs.

    Use as an async context manager so the walker's HTTP client is closed.
    """

    COMPONENT = "RedirectAuditOrchestrator"

    def __init__(
        self,
        config: Optional[AuditConfig] = None,
        walker: Optional[ChainWalker] = None,
        throttle: Optional[RequestThrottle] = None,
        logger: Optional[AuditLogger] = None,
        sitemap_source: Optional[SitemapSource] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Audit configuration
            walker: Chain walker (built from config.walker when omitted)
            throttle: Request throttle (built from config.throttle when omitted)
            logger: Optional audit logger
            sitemap_source: Sitemap fetcher (built from config.walker when omitted)
        """
        self._config = config or AuditConfig()
        self._logger = logger
        self._owns_walker = walker is None
        self._walker = walker or ChainWalker(self._config.walker, logger=logger)
        self._throttle = throttle or RequestThrottle(self._config.throttle)
        self._sitemap_source = sitemap_source or SitemapSource(
            timeout=self._config.walker.timeout_seconds,
            user_agent=self._config.walker.user_agent,
            logger=logger,
        )
        self._classifier = RedirectClassifier()
        self._fix_advisor = FixAdvisor()
        self._stop_requested = False

    async def __aenter__(self) -> "RedirectAuditOrchestrator":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self._owns_walker:
            await self._walker.close()

    @property
    def config(self) -> AuditConfig:
        return self._config

    @property
    def throttle(self) -> RequestThrottle:
        return self._throttle

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def request_stop(self) -> None:
        """Ask the running audit to stop before its next URL."""
        self._stop_requested = True

    async def audit_url(self, url: str) -> AuditRecord:
        """
        Audit a single URL.

        Args:
            url: Absolute URL to audit

        Returns:
            AuditRecord with the chain, classification, source and fix
        """
        chain = await self._walker.walk(url)

        first = chain.first_step
        self._throttle.record_status(first.status_code if first else None)

        result = self._classifier.classify(chain)
        source = attribute_source(chain, result)
        fix = self._fix_advisor.advise(url, chain.final_url, result, source)

        return AuditRecord(
            url=url,
            final_url=chain.final_url,
            status_chain=list(chain.steps),
            redirect_count=chain.redirect_count,
            classification=result,
            source=source,
            fix=fix,
            timestamp=utc_timestamp(),
            error=chain.error,
        )

    async def audit_urls(self, urls: Iterable[str], domain: Optional[str] = None) -> AuditReport:
        """
        Audit URLs sequentially.

        Args:
            urls: URLs in the order they should be checked
            domain: Domain shown in the report (derived from the URLs if omitted)

        Returns:
            AuditReport; interrupted is set when a stop was requested
        """
        urls = list(urls)
        report = AuditReport(
            timestamp=utc_timestamp(),
            domain=domain or self._config.domain or self._domain_of(urls),
            total_urls=len(urls),
        )

        for url in urls:
            if self._stop_requested:
                report.interrupted = True
                self._log(
                    LogLevel.WARN,
                    "Stop requested, ending audit early",
                    {"remaining": report.total_urls - self._processed(report)},
                )
                break

            await self._throttle.wait()

            try:
                record = await self.audit_url(url)
            except Exception as e:
                message = str(e) or type(e).__name__
                report.errors.append(AuditError(error=message, timestamp=utc_timestamp(), url=url))
                if self._logger:
                    self._logger.log_error(
                        self.COMPONENT,
                        f"Audit failed for {url}",
                        error=e,
                        request_url=url,
                    )
                continue

            if record.classification.classification is Classification.CLEAN:
                report.clean_urls.append(record)
                self._log(LogLevel.INFO, f"Clean: {url}", {"url": url})
            else:
                report.redirect_issues.append(record)
                self._log(
                    LogLevel.INFO,
                    f"{record.classification.classification.value}: {record.classification.reason}",
                    {"url": url, "final_url": record.final_url, "hops": record.redirect_count},
                )

        self._log(
            LogLevel.INFO,
            "Audit finished",
            {
                "total": report.total_urls,
                "clean": len(report.clean_urls),
                "issues": len(report.redirect_issues),
                "errors": len(report.errors),
                "interrupted": report.interrupted,
            },
        )
        return report

    async def audit_sitemap(self, sitemap_url: str, domain: Optional[str] = None) -> AuditReport:
        """
        Audit every URL listed in a sitemap.

        A sitemap failure produces a report with a single sitemap_fetch error.

        Args:
            sitemap_url: URL of the sitemap (or sitemap index)
            domain: Domain shown in the report

        Returns:
            AuditReport
        """
        domain = domain or self._config.domain or self._domain_of([sitemap_url])
        self._log(LogLevel.INFO, f"Fetching sitemap {sitemap_url}", {"sitemap": sitemap_url})

        try:
            urls = await self._sitemap_source.fetch_urls(sitemap_url)
        except SitemapError as e:
            if self._logger:
                self._logger.log_error(
                    self.COMPONENT,
                    "Failed to fetch sitemap",
                    error=e,
                    request_url=sitemap_url,
                    additional_data=e.details,
                )
            return AuditReport(
                timestamp=utc_timestamp(),
                domain=domain,
                errors=[AuditError(
                    error=e.message,
                    timestamp=utc_timestamp(),
                    step="sitemap_fetch",
                )],
            )

        return await self.audit_urls(urls, domain=domain)

    def _domain_of(self, urls: list[str]) -> str:
        for url in urls:
            try:
                host = urlparse(url).hostname
            except ValueError:
                continue
            if host:
                return host
        return "unknown"

    def _processed(self, report: AuditReport) -> int:
        return len(report.clean_urls) + len(report.redirect_issues) + len(report.errors)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)
