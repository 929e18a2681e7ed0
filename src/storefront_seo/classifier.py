"""
Redirect classifier.

Maps a completed redirect chain to exactly one Classification using an
ordered rule list (first match wins):

1. empty chain                                   -> UNKNOWN
2. no redirect, first step 200, no client-side   -> CLEAN
3. first step 301                                -> INTENTIONAL_PERMANENT
4. first step 302 / 307                          -> INTENTIONAL_TEMPORARY
5. first step 200 with redirects or client-side  -> UNINTENTIONAL_CLIENT_SIDE
6. first step >= 400                             -> ERROR
7. first step other 3xx                          -> REDIRECT_OTHER
8. anything else                                 -> UNKNOWN

Permanent and temporary detection take priority over generic 3xx handling,
and CLEAN is only assigned when there is no redirection at all.
"""

from typing import Optional
from urllib.parse import urljoin, urlsplit

import idna

from .models import ClassificationResult, RedirectChain, RedirectStep
from .enums import Classification


TEMPORARY_REDIRECT_STATUSES = (302, 307)

NORMALIZATION_WWW = "www"
NORMALIZATION_HTTPS = "https"
NORMALIZATION_TRAILING_SLASH = "trailing-slash"


def _canonical_host(host: str) -> str:
    """Lowercase ASCII (punycode) form of a host name."""
    host = host.lower()
    if any(ord(c) > 127 for c in host):
        try:
            return idna.encode(host, uts46=True).decode("ascii")
        except UnicodeError:
            return host
    return host


def _is_default_port_change(
    source_scheme: str, source_port: Optional[int], target_scheme: str, target_port: Optional[int]
) -> bool:
    # http://x:80 -> https://x is an https upgrade, not a new resource
    default = {"http": 80, "https": 443}
    return (source_port or default.get(source_scheme)) == default.get(source_scheme) and (
        target_port or default.get(target_scheme)
    ) == default.get(target_scheme)


class RedirectClassifier:
    """
    Total classifier for redirect chains.

    classify() never raises: every possible chain maps to some
    Classification, falling through to UNKNOWN.
    """

    def classify(self, chain: RedirectChain) -> ClassificationResult:
        """
        Classify a redirect chain.

        Args:
            chain: The chain produced by the walker

        Returns:
            ClassificationResult for the chain's first step
        """
        first = chain.first_step

        if first is None:
            return ClassificationResult(
                classification=Classification.UNKNOWN,
                reason="No response data",
                intentional=False,
            )

        status = first.status_code
        client_side = chain.client_side_target is not None

        if chain.redirect_count == 0 and status == 200 and not client_side:
            return ClassificationResult(
                classification=Classification.CLEAN,
                reason="Direct 200 response",
                intentional=True,
            )

        if status == 301:
            return self._classify_permanent(first)

        if status in TEMPORARY_REDIRECT_STATUSES:
            return ClassificationResult(
                classification=Classification.INTENTIONAL_TEMPORARY,
                reason=f"{status} temporary redirect",
                intentional=True,
                seo_impact="May not pass PageRank",
                action_required="Verify if temporary redirect is still needed",
            )

        if status == 200 and (chain.redirect_count > 0 or client_side):
            reason = "Client-side redirect (meta refresh or JavaScript)"
            if client_side:
                reason = f"{reason} to {chain.client_side_target}"
            return ClassificationResult(
                classification=Classification.UNINTENTIONAL_CLIENT_SIDE,
                reason=reason,
                intentional=False,
                seo_impact="HIGH - Google may not follow, indexing blocked",
                action_required="Replace with server-side 301 or remove redirect",
            )

        if status >= 400:
            return ClassificationResult(
                classification=Classification.ERROR,
                reason=f"HTTP {status} error",
                intentional=False,
                seo_impact="CRITICAL - Page not accessible",
                action_required="Fix broken page or remove from sitemap",
            )

        if 300 <= status < 400:
            return ClassificationResult(
                classification=Classification.REDIRECT_OTHER,
                reason=f"HTTP {status} redirect",
                intentional=None,
                action_required="Review redirect configuration",
            )

        return ClassificationResult(
            classification=Classification.UNKNOWN,
            reason="Unexpected response pattern",
            intentional=False,
        )

    def _classify_permanent(self, step: RedirectStep) -> ClassificationResult:
        tags = self.normalization_tags(step.url, step.location)

        if tags:
            return ClassificationResult(
                classification=Classification.INTENTIONAL_PERMANENT,
                reason=f"URL normalization: {' '.join(tags)}",
                intentional=True,
                normalization=tags,
            )

        return ClassificationResult(
            classification=Classification.INTENTIONAL_PERMANENT,
            reason="301 redirect to different resource",
            intentional=True,
            action_required="Update sitemap and internal links",
        )

    def normalization_tags(self, url: str, location: Optional[str]) -> list[str]:
        """
        Explain a redirect as pure URL normalization, if possible.

        The redirect is normalization only when toggling a www. prefix,
        upgrading http to https and adding/removing a trailing slash fully
        account for the difference between url and location.

        Args:
            url: The requested URL
            location: The Location header (may be relative)

        Returns:
            The applicable tags among www, https, trailing-slash; empty when
            the target is a different resource
        """
        if not location:
            return []

        try:
            source = urlsplit(url)
            target = urlsplit(urljoin(url, location))
            # .port validates lazily and rejects out-of-range values
            source_port = source.port
            target_port = target.port
        except ValueError:
            return []

        source_host = _canonical_host(source.hostname or "")
        target_host = _canonical_host(target.hostname or "")
        source_scheme = source.scheme.lower()
        target_scheme = target.scheme.lower()
        source_path = source.path or "/"
        target_path = target.path or "/"

        tags = []

        www_toggled = source_host != target_host
        if www_toggled:
            if source_host.removeprefix("www.") != target_host.removeprefix("www."):
                return []
            tags.append(NORMALIZATION_WWW)

        if source_scheme != target_scheme:
            if not (source_scheme == "http" and target_scheme == "https"):
                return []
            tags.append(NORMALIZATION_HTTPS)

        if source_path != target_path:
            if source_path.rstrip("/") != target_path.rstrip("/"):
                return []
            tags.append(NORMALIZATION_TRAILING_SLASH)

        if source.query != target.query:
            return []

        if source_port != target_port and not _is_default_port_change(
            source_scheme, source_port, target_scheme, target_port
        ):
            return []

        return tags
