"""
Property-based tests for the audit orchestrator.

Runs the full walk -> classify -> attribute -> advise pipeline against a
mocked network, a fake throttle clock and stubbed walkers.
"""

import asyncio
from io import StringIO
from typing import Dict, List

import httpx
from hypothesis import given, settings
from hypothesis import strategies as st

from storefront_seo.audit_logger import AuditLogger
from storefront_seo.chain_walker import ChainWalker
from storefront_seo.config import AuditConfig, WalkerConfig
from storefront_seo.enums import Classification, LogLevel, RedirectSource
from storefront_seo.models import RedirectChain, RedirectStep
from storefront_seo.orchestrator import RedirectAuditOrchestrator
from storefront_seo.sitemap import SitemapSource
from storefront_seo.throttle import RequestThrottle


async def no_sleep(seconds: float) -> None:
    return None


class StubWalker:
    """Walker answering from a table of first-step statuses."""

    def __init__(self, statuses: Dict[str, int], failing=()) -> None:
        self.statuses = statuses
        self.failing = set(failing)
        self.walked: List[str] = []
        self.closed = False

    async def walk(self, url: str) -> RedirectChain:
        self.walked.append(url)
        if url in self.failing:
            raise RuntimeError(f"walker exploded on {url}")
        step = RedirectStep(url=url, status_code=self.statuses.get(url, 200))
        return RedirectChain(url=url, final_url=url, steps=[step])

    async def close(self) -> None:
        self.closed = True


def make_orchestrator(walker=None, logger=None, sitemap_source=None, config=None):
    throttle = RequestThrottle(sleep=no_sleep)
    return RedirectAuditOrchestrator(
        config=config,
        walker=walker,
        throttle=throttle,
        logger=logger,
        sitemap_source=sitemap_source,
    )


url_list_strategy = st.lists(
    st.integers(min_value=0, max_value=999).map(lambda n: f"https://shop.example/p{n}"),
    min_size=1,
    max_size=10,
    unique=True,
)


class TestFailureIsolationProperty:
    """
    Property: a failure on one URL is recorded and never stops the run.
    """

    def test_second_url_failure(self) -> None:
        urls = ["https://shop.example/a", "https://shop.example/b", "https://shop.example/c"]
        walker = StubWalker({}, failing=[urls[1]])
        stream = StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream)

        report = asyncio.run(make_orchestrator(walker, logger).audit_urls(urls))

        assert walker.walked == urls
        assert report.total_urls == 3
        assert [r.url for r in report.clean_urls] == [urls[0], urls[2]]
        assert len(report.errors) == 1
        assert report.errors[0].url == urls[1]
        assert "walker exploded" in report.errors[0].error
        assert any(e.level is LogLevel.ERROR for e in logger.entries)

    @given(urls=url_list_strategy, data=st.data())
    @settings(max_examples=50, deadline=None)
    def test_every_url_accounted_for(self, urls: List[str], data) -> None:
        failing = data.draw(st.sets(st.sampled_from(urls)))
        statuses = {
            url: data.draw(st.sampled_from([200, 301, 302, 404, 500])) for url in urls
        }
        walker = StubWalker(statuses, failing=failing)

        report = asyncio.run(make_orchestrator(walker).audit_urls(urls))

        assert len(report.clean_urls) + len(report.redirect_issues) + len(report.errors) == len(urls)
        assert {e.url for e in report.errors} == failing
        for record in report.clean_urls:
            assert record.classification.classification is Classification.CLEAN
        for record in report.redirect_issues:
            assert record.classification.classification is not Classification.CLEAN
        assert not report.interrupted


class TestEndToEnd:
    """Tests running the real walker against a mocked storefront."""

    def test_clean_and_permanent_redirect(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/b":
                return httpx.Response(
                    301,
                    headers={"Location": "/b2", "x-vercel-id": "fra1::abc"},
                )
            return httpx.Response(200)

        async def run():
            walker = ChainWalker(
                WalkerConfig(),
                transport=httpx.MockTransport(handler),
                sleep=no_sleep,
            )
            async with make_orchestrator(walker) as orchestrator:
                report = await orchestrator.audit_urls(
                    ["https://shop.example/a", "https://shop.example/b"]
                )
            await walker.close()
            return report

        report = asyncio.run(run())

        assert report.domain == "shop.example"
        assert [r.url for r in report.clean_urls] == ["https://shop.example/a"]
        assert len(report.redirect_issues) == 1

        issue = report.redirect_issues[0]
        assert issue.final_url == "https://shop.example/b2"
        assert issue.redirect_count == 1
        assert [s.status_code for s in issue.status_chain] == [301, 200]
        assert issue.classification.classification is Classification.INTENTIONAL_PERMANENT
        assert issue.source.source is RedirectSource.PLATFORM_EDGE
        assert issue.source.platform == "vercel"
        assert issue.fix.summary == "Update sitemap and internal links"
        assert issue.error is None

    def test_throttle_sees_first_status(self) -> None:
        walker = StubWalker({"https://shop.example/a": 429, "https://shop.example/b": 429})
        orchestrator = make_orchestrator(walker)

        asyncio.run(orchestrator.audit_urls(["https://shop.example/a", "https://shop.example/b"]))

        assert orchestrator.throttle.consecutive_errors == 2


class TestStopAndDomain:
    """Tests for interruption and report domain selection."""

    def test_stop_request_marks_interrupted(self) -> None:
        urls = [f"https://shop.example/{i}" for i in range(5)]
        orchestrator = None

        class StoppingWalker(StubWalker):
            async def walk(self, url: str) -> RedirectChain:
                chain = await super().walk(url)
                if len(self.walked) == 2:
                    orchestrator.request_stop()
                return chain

        walker = StoppingWalker({})
        orchestrator = make_orchestrator(walker)
        report = asyncio.run(orchestrator.audit_urls(urls))

        assert report.interrupted
        assert walker.walked == urls[:2]
        assert len(report.clean_urls) == 2
        assert report.total_urls == 5

    def test_domain_precedence(self) -> None:
        urls = ["https://shop.example/a"]
        walker = StubWalker({})

        report = asyncio.run(make_orchestrator(walker).audit_urls(urls, domain="given.example"))
        assert report.domain == "given.example"

        config = AuditConfig(domain="configured.example")
        report = asyncio.run(make_orchestrator(walker, config=config).audit_urls(urls))
        assert report.domain == "configured.example"

        report = asyncio.run(
            make_orchestrator(walker).audit_urls(["http://[broken/x", "https://shop.example/b"])
        )
        assert report.domain == "shop.example"

        report = asyncio.run(make_orchestrator(walker).audit_urls([]))
        assert report.domain == "unknown"
        assert report.total_urls == 0

    def test_owned_walker_only_closed_when_owned(self) -> None:
        walker = StubWalker({})

        async def run() -> None:
            async with make_orchestrator(walker):
                pass

        asyncio.run(run())
        assert not walker.closed


class TestSitemapAudit:
    """Tests for auditing from a sitemap."""

    def test_sitemap_urls_audited(self) -> None:
        sitemap = (
            '<?xml version="1.0"?><urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
            "<url><loc>https://shop.example/a</loc></url>"
            "<url><loc>https://shop.example/b</loc></url>"
            "</urlset>"
        )
        source = SitemapSource(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text=sitemap))
        )
        walker = StubWalker({"https://shop.example/b": 404})

        report = asyncio.run(
            make_orchestrator(walker, sitemap_source=source).audit_sitemap(
                "https://shop.example/sitemap.xml"
            )
        )

        assert walker.walked == ["https://shop.example/a", "https://shop.example/b"]
        assert report.domain == "shop.example"
        assert report.redirect_issues[0].classification.classification is Classification.ERROR

    def test_sitemap_failure_recorded(self) -> None:
        source = SitemapSource(
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )
        walker = StubWalker({})
        logger = AuditLogger(output_format="text", output_stream=StringIO())

        report = asyncio.run(
            make_orchestrator(walker, logger=logger, sitemap_source=source).audit_sitemap(
                "https://shop.example/sitemap.xml"
            )
        )

        assert walker.walked == []
        assert report.total_urls == 0
        assert len(report.errors) == 1
        assert report.errors[0].step == "sitemap_fetch"
        assert "HTTP 500" in report.errors[0].error
        assert logger.entries[-1].level is LogLevel.ERROR

    def test_malformed_sitemap_url_recorded(self) -> None:
        source = SitemapSource(
            transport=httpx.MockTransport(lambda request: httpx.Response(200))
        )
        walker = StubWalker({})

        report = asyncio.run(
            make_orchestrator(walker, sitemap_source=source).audit_sitemap(
                "http://exa\x01mple.com/sitemap.xml", domain="shop.example"
            )
        )

        assert walker.walked == []
        assert report.domain == "shop.example"
        assert [error.step for error in report.errors] == ["sitemap_fetch"]
