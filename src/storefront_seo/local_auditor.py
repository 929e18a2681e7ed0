"""
Local redirect configuration audit.

Inspects a storefront project on disk, without any network access, for
configuration that produces redirects:
- vercel.json redirect rules, redirecting routes and catch-all routes
- meta refresh tags in HTML files
- window/document location assignments in JavaScript files
- non-HTTPS or foreign URLs in the local sitemap.xml
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Union
from urllib.parse import urlparse

from .audit_logger import AuditLogger
from .client_side import find_meta_refreshes, find_script_redirects
from .enums import Priority
from .exceptions import SitemapError
from .sitemap import load_local_sitemap


ROUTE_CONFIG_FILE = "vercel.json"
SITEMAP_FILE = "sitemap.xml"

EXCLUDED_DIRS = frozenset({"node_modules", ".git", "dist", "build"})
CATCH_ALL_SOURCES = ("/(.*)", "(.*)")
REDIRECT_ROUTE_STATUSES = (301, 302, 307, 308)
PERMANENT_ROUTE_STATUSES = (301, 308)

CATCH_ALL_ISSUE = "Catch-all route - ensure it returns 200 for valid URLs"


@dataclass
class RouteRule:
    """One entry of the routes array."""

    index: int
    source: Optional[str]
    destination: Optional[str]
    status: Optional[int]
    type: str = "route"  # "route" or "redirect"
    seo_impact: Optional[str] = None  # PERMANENT / TEMPORARY for redirects
    is_catchall: bool = False


@dataclass
class ConfigIssue:
    """A potential problem in the route configuration."""

    rule_index: int
    issue: str
    impact: Optional[str] = None
    destination: Optional[str] = None


@dataclass
class RouteConfigAnalysis:
    """Result of reading vercel.json."""

    has_redirects: bool = False
    redirect_rules: list[dict] = field(default_factory=list)
    route_rules: list[RouteRule] = field(default_factory=list)
    potential_issues: list[ConfigIssue] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class MetaRefreshRedirect:
    """A meta refresh tag found in an HTML file."""

    file: str
    delay: int
    target: str
    type: str = "meta-refresh"
    severity: str = "HIGH"
    issue: str = "Meta refresh redirects are client-side and may not be followed by Googlebot"
    fix: str = "Replace with server-side 301 redirect in vercel.json"


@dataclass
class ScriptRedirect:
    """A location assignment found in a JavaScript file."""

    file: str
    line: int
    target: str
    code: str
    conditional: bool
    user_triggered: bool
    severity: str
    issue: str
    recommendation: str


@dataclass
class SitemapEntry:
    """A URL listed in the local sitemap."""

    url: str
    is_absolute: bool
    protocol: str  # https / http / relative
    domain_match: bool


@dataclass
class Recommendation:
    """An actionable finding of the local audit."""

    priority: Priority
    category: str
    issue: str
    recommendation: str
    file: Optional[str] = None
    test_command: Optional[str] = None
    affected_files: list[str] = field(default_factory=list)
    affected_urls: list[str] = field(default_factory=list)
    proposed_fix: Optional[str] = None


@dataclass
class LocalAuditReport:
    """Everything found by one local audit run."""

    timestamp: str
    domain: str
    route_config: RouteConfigAnalysis
    html_redirects: list[MetaRefreshRedirect] = field(default_factory=list)
    javascript_redirects: list[ScriptRedirect] = field(default_factory=list)
    sitemap_urls: list[SitemapEntry] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)

    def count_by_priority(self, priority: Priority) -> int:
        return sum(1 for r in self.recommendations if r.priority is priority)


class LocalRedirectAuditor:
    """Audits a project directory for redirect configuration."""

    COMPONENT = "LocalRedirectAuditor"

    def __init__(
        self,
        project_dir: Union[str, Path],
        domain: str,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the local auditor.

        Args:
            project_dir: Root of the storefront project
            domain: Production domain, e.g. "shop.example"
            logger: Optional audit logger
        """
        self._project_dir = Path(project_dir)
        self._domain = domain
        self._logger = logger

    @property
    def project_dir(self) -> Path:
        return self._project_dir

    def run(self) -> LocalAuditReport:
        """
        Run every check and build the report.

        Returns:
            LocalAuditReport including recommendations
        """
        self._log_info(f"Auditing {self._project_dir}", {"domain": self._domain})

        report = LocalAuditReport(
            timestamp=datetime.now(timezone.utc).isoformat(),
            domain=self._domain,
            route_config=self.analyze_route_config(),
            html_redirects=self.scan_html_redirects(),
            javascript_redirects=self.scan_javascript_redirects(),
            sitemap_urls=self.analyze_sitemap(),
        )
        report.recommendations = self.generate_recommendations(report)

        self._log_info(
            "Local audit finished",
            {
                "high": report.count_by_priority(Priority.HIGH),
                "medium": report.count_by_priority(Priority.MEDIUM),
                "low": report.count_by_priority(Priority.LOW),
            },
        )
        return report

    def analyze_route_config(self) -> RouteConfigAnalysis:
        """
        Read vercel.json and flag redirecting and catch-all routes.

        A missing or unreadable file yields an analysis with error set.
        """
        path = self._project_dir / ROUTE_CONFIG_FILE

        try:
            config = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self._log_warn(f"Error reading {ROUTE_CONFIG_FILE}: {e}", {"path": str(path)})
            return RouteConfigAnalysis(error=str(e))

        if not isinstance(config, dict):
            return RouteConfigAnalysis(error=f"{ROUTE_CONFIG_FILE} is not a JSON object")

        analysis = RouteConfigAnalysis()

        redirects = config.get("redirects")
        if isinstance(redirects, list):
            analysis.has_redirects = True
            analysis.redirect_rules = redirects

        routes = config.get("routes")
        if isinstance(routes, list):
            for index, route in enumerate(routes):
                if isinstance(route, dict):
                    analysis.route_rules.append(self._analyze_route(index, route, analysis))

        return analysis

    def _analyze_route(self, index: int, route: dict, analysis: RouteConfigAnalysis) -> RouteRule:
        rule = RouteRule(
            index=index,
            source=route.get("src"),
            destination=route.get("dest"),
            status=route.get("status"),
        )

        if rule.status in REDIRECT_ROUTE_STATUSES:
            rule.type = "redirect"
            permanent = rule.status in PERMANENT_ROUTE_STATUSES
            rule.seo_impact = "PERMANENT" if permanent else "TEMPORARY"
            analysis.potential_issues.append(ConfigIssue(
                rule_index=index,
                issue=f"Route acts as {rule.status} redirect",
                impact="Acceptable if intentional" if permanent else "May not pass PageRank",
            ))

        if rule.source in CATCH_ALL_SOURCES:
            rule.is_catchall = True
            analysis.potential_issues.append(ConfigIssue(
                rule_index=index,
                issue=CATCH_ALL_ISSUE,
                destination=rule.destination,
            ))

        return rule

    def scan_html_redirects(self) -> list[MetaRefreshRedirect]:
        """Find meta refresh tags in every HTML file of the project."""
        redirects = []
        for path in self._iter_files("*.html"):
            content = self._read(path)
            if content is None:
                continue
            for refresh in find_meta_refreshes(content):
                redirects.append(MetaRefreshRedirect(
                    file=self._relative(path),
                    delay=refresh.delay,
                    target=refresh.target,
                ))
        return redirects

    def scan_javascript_redirects(self) -> list[ScriptRedirect]:
        """Find location assignments in every JavaScript file of the project."""
        redirects = []
        for path in self._iter_files("*.js"):
            content = self._read(path)
            if content is None:
                continue
            for match in find_script_redirects(content):
                unconditional = match.unconditional
                redirects.append(ScriptRedirect(
                    file=self._relative(path),
                    line=match.line,
                    target=match.target,
                    code=match.code,
                    conditional=match.conditional,
                    user_triggered=match.user_triggered,
                    severity="HIGH" if unconditional else "LOW",
                    issue=(
                        "Unconditional JavaScript redirect may prevent indexing"
                        if unconditional
                        else "Conditional/user-triggered redirect (likely acceptable)"
                    ),
                    recommendation=(
                        "If this runs on page load, replace with server-side 301"
                        if unconditional
                        else "Monitor to ensure it doesn't run on initial page load"
                    ),
                ))
        return redirects

    def analyze_sitemap(self) -> list[SitemapEntry]:
        """Describe every URL of the local sitemap.xml (empty if absent)."""
        path = self._project_dir / SITEMAP_FILE
        if not path.is_file():
            self._log_warn(f"No {SITEMAP_FILE} found", {"path": str(path)})
            return []

        try:
            urls = load_local_sitemap(path)
        except SitemapError as e:
            self._log_warn(e.message, e.details)
            return []

        entries = []
        for url in urls:
            if url.startswith("https://"):
                protocol = "https"
            elif url.startswith("http://"):
                protocol = "http"
            else:
                protocol = "relative"

            host = urlparse(url).hostname or ""
            entries.append(SitemapEntry(
                url=url,
                is_absolute=url.startswith("http"),
                protocol=protocol,
                domain_match=host == self._domain or host == f"www.{self._domain}",
            ))
        return entries

    def generate_recommendations(self, report: LocalAuditReport) -> list[Recommendation]:
        """
        Turn the findings of a report into prioritized recommendations.

        Always ends with a LOW priority monitoring item.
        """
        recommendations = []

        for issue in report.route_config.potential_issues:
            if issue.issue == CATCH_ALL_ISSUE:
                recommendations.append(Recommendation(
                    priority=Priority.MEDIUM,
                    category="route-config",
                    issue="Catch-all route may mask 404 errors",
                    recommendation=(
                        "Ensure catch-all returns proper 200 for valid pages "
                        "and 404 for missing pages"
                    ),
                    file=ROUTE_CONFIG_FILE,
                    test_command=f"curl -I https://{self._domain}/nonexistent-page (should return 404)",
                ))

        for redirect in report.html_redirects:
            fix = {
                "redirects": [
                    {"source": "/old-url", "destination": redirect.target, "permanent": True},
                ],
            }
            recommendations.append(Recommendation(
                priority=Priority.HIGH,
                category="html-redirect",
                issue=f"Meta refresh redirect in {redirect.file}",
                recommendation="Replace with server-side 301 redirect",
                file=redirect.file,
                proposed_fix=json.dumps(fix, indent=2),
            ))

        unconditional = [r for r in report.javascript_redirects if r.severity == "HIGH"]
        if unconditional:
            recommendations.append(Recommendation(
                priority=Priority.HIGH,
                category="javascript-redirect",
                issue=f"{len(unconditional)} unconditional JavaScript redirect(s) found",
                recommendation=(
                    "Review and replace with server-side redirects if they run on page load"
                ),
                affected_files=list(dict.fromkeys(r.file for r in unconditional)),
            ))

        non_https = [entry.url for entry in report.sitemap_urls if entry.protocol != "https"]
        if non_https:
            recommendations.append(Recommendation(
                priority=Priority.MEDIUM,
                category="sitemap",
                issue=f"{len(non_https)} non-HTTPS URLs in sitemap",
                recommendation="Update sitemap URLs to use HTTPS",
                file=SITEMAP_FILE,
                affected_urls=non_https,
            ))

        recommendations.append(Recommendation(
            priority=Priority.LOW,
            category="seo-best-practice",
            issue="Ongoing monitoring",
            recommendation=(
                'Regularly check Google Search Console for "Page with redirect" warnings'
            ),
            test_command="Visit: https://search.google.com/search-console -> Pages -> Not indexed",
        ))

        return recommendations

    def _iter_files(self, pattern: str) -> Iterator[Path]:
        for path in sorted(self._project_dir.rglob(pattern)):
            relative = path.relative_to(self._project_dir)
            if any(part in EXCLUDED_DIRS for part in relative.parts[:-1]):
                continue
            if path.is_file():
                yield path

    def _read(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self._log_warn(f"Could not read {self._relative(path)}: {e}", {"path": str(path)})
            return None

    def _relative(self, path: Path) -> str:
        return path.relative_to(self._project_dir).as_posix()

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.info(self.COMPONENT, message, data)

    def _log_warn(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.warn(self.COMPONENT, message, data)
