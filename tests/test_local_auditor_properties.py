"""
Property-based tests for the local redirect configuration audit.

Each test lays out a small storefront project under tmp_path.
"""

import json
from pathlib import Path

from hypothesis import given, settings, HealthCheck
from hypothesis import strategies as st

from storefront_seo.enums import Priority
from storefront_seo.local_auditor import (
    CATCH_ALL_ISSUE,
    LocalRedirectAuditor,
)


SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def write(root: Path, relative: str, content: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def sitemap(urls) -> str:
    entries = "".join(f"<url><loc>{url}</loc></url>" for url in urls)
    return f'<?xml version="1.0"?><urlset xmlns="{SITEMAP_NS}">{entries}</urlset>'


class TestRouteConfig:
    """Tests for vercel.json analysis."""

    def test_missing_config_is_reported(self, tmp_path) -> None:
        analysis = LocalRedirectAuditor(tmp_path, "shop.example").analyze_route_config()
        assert analysis.error
        assert analysis.route_rules == []

    def test_invalid_json_is_reported(self, tmp_path) -> None:
        write(tmp_path, "vercel.json", "{not json")
        analysis = LocalRedirectAuditor(tmp_path, "shop.example").analyze_route_config()
        assert analysis.error

    def test_routes_and_redirects(self, tmp_path) -> None:
        config = {
            "redirects": [{"source": "/old", "destination": "/new", "permanent": True}],
            "routes": [
                {"src": "/legacy", "dest": "/shop", "status": 301},
                {"src": "/promo", "dest": "/sale", "status": 302},
                {"src": "/(.*)", "dest": "/index.html"},
            ],
        }
        write(tmp_path, "vercel.json", json.dumps(config))

        analysis = LocalRedirectAuditor(tmp_path, "shop.example").analyze_route_config()

        assert analysis.error is None
        assert analysis.has_redirects
        assert analysis.redirect_rules == config["redirects"]
        assert [r.type for r in analysis.route_rules] == ["redirect", "redirect", "route"]
        assert [r.seo_impact for r in analysis.route_rules] == ["PERMANENT", "TEMPORARY", None]
        assert analysis.route_rules[2].is_catchall
        issues = [i.issue for i in analysis.potential_issues]
        assert issues == [
            "Route acts as 301 redirect",
            "Route acts as 302 redirect",
            CATCH_ALL_ISSUE,
        ]
        assert analysis.potential_issues[2].destination == "/index.html"


class TestSourceScanning:
    """Tests for meta refresh and JavaScript scanning."""

    def test_meta_refresh_flagged(self, tmp_path) -> None:
        write(
            tmp_path,
            "index.html",
            '<html><head><meta http-equiv="refresh" content="0;url=https://shop.example/ar"></head></html>',
        )
        write(tmp_path, "about.html", "<html><body>About</body></html>")

        redirects = LocalRedirectAuditor(tmp_path, "shop.example").scan_html_redirects()

        assert len(redirects) == 1
        assert redirects[0].file == "index.html"
        assert redirects[0].delay == 0
        assert redirects[0].target == "https://shop.example/ar"
        assert redirects[0].severity == "HIGH"

    def test_excluded_directories_skipped(self, tmp_path) -> None:
        refresh = '<meta http-equiv="refresh" content="0;url=/x">'
        for directory in ("node_modules/pkg", ".git", "dist", "build"):
            write(tmp_path, f"{directory}/page.html", refresh)
            write(tmp_path, f"{directory}/app.js", "window.location = '/x';")
        write(tmp_path, "src/pages/page.html", refresh)

        auditor = LocalRedirectAuditor(tmp_path, "shop.example")

        assert [r.file for r in auditor.scan_html_redirects()] == ["src/pages/page.html"]
        assert auditor.scan_javascript_redirects() == []

    def test_javascript_severity(self, tmp_path) -> None:
        write(
            tmp_path,
            "script.js",
            "\n".join([
                "const lang = detect();",
                "window.location.href = '/ar';",
                "if (lang === 'fr') window.location.href = '/fr';",
                "button.addEventListener('click', () => { window.location = '/cart'; });",
            ]),
        )

        redirects = LocalRedirectAuditor(tmp_path, "shop.example").scan_javascript_redirects()
        by_target = {r.target: r for r in redirects}

        assert by_target["/ar"].severity == "HIGH"
        assert by_target["/ar"].line == 2
        assert by_target["/fr"].severity == "LOW"
        assert by_target["/fr"].conditional
        assert by_target["/cart"].severity == "LOW"
        assert by_target["/cart"].user_triggered


class TestSitemapAnalysisProperty:
    """
    Property: every sitemap URL is described with its protocol and domain
    match.
    """

    @given(
        entries=st.lists(
            st.tuples(
                st.sampled_from(["https://", "http://", "/"]),
                st.sampled_from(["shop.example", "www.shop.example", "other.example"]),
                st.text(alphabet="abcxyz", max_size=5),
            ),
            max_size=10,
        )
    )
    @settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_entries_described(self, tmp_path, entries) -> None:
        urls = [
            f"{prefix}{host}/{path}" if prefix != "/" else f"/{path}"
            for prefix, host, path in entries
        ]
        write(tmp_path, "sitemap.xml", sitemap(urls))

        described = LocalRedirectAuditor(tmp_path, "shop.example").analyze_sitemap()

        assert [e.url for e in described] == urls
        for (prefix, host, _), entry in zip(entries, described):
            if prefix == "/":
                assert entry.protocol == "relative"
                assert not entry.is_absolute
                assert not entry.domain_match
            else:
                assert entry.protocol == prefix[:-3]
                assert entry.is_absolute
                assert entry.domain_match == (host != "other.example")

    def test_missing_sitemap(self, tmp_path) -> None:
        assert LocalRedirectAuditor(tmp_path, "shop.example").analyze_sitemap() == []


class TestRecommendations:
    """Tests for the end-to-end local audit."""

    def test_full_project(self, tmp_path) -> None:
        write(tmp_path, "vercel.json", json.dumps({"routes": [{"src": "/(.*)", "dest": "/"}]}))
        write(tmp_path, "index.html", '<meta http-equiv="refresh" content="0; url=/ar">')
        write(tmp_path, "script.js", "window.location.replace('/ar');")
        write(
            tmp_path,
            "sitemap.xml",
            sitemap(["https://shop.example/", "http://shop.example/old"]),
        )

        report = LocalRedirectAuditor(tmp_path, "shop.example").run()

        categories = [r.category for r in report.recommendations]
        assert categories == [
            "route-config",
            "html-redirect",
            "javascript-redirect",
            "sitemap",
            "seo-best-practice",
        ]
        assert report.count_by_priority(Priority.HIGH) == 2
        assert report.count_by_priority(Priority.MEDIUM) == 2
        assert report.count_by_priority(Priority.LOW) == 1

        html = report.recommendations[1]
        assert json.loads(html.proposed_fix)["redirects"][0]["destination"] == "/ar"
        assert report.recommendations[2].affected_files == ["script.js"]
        assert report.recommendations[3].affected_urls == ["http://shop.example/old"]
        assert "shop.example/nonexistent-page" in report.recommendations[0].test_command

    def test_empty_project_only_monitoring(self, tmp_path) -> None:
        report = LocalRedirectAuditor(tmp_path, "shop.example").run()

        assert report.route_config.error
        assert [r.category for r in report.recommendations] == ["seo-best-practice"]
        assert report.recommendations[0].priority is Priority.LOW
