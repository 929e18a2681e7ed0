"""
Redirect source attribution.

Guesses where a redirect is configured from the headers of the first
response in a chain. The result is advisory: it only points a developer at
the most likely place to look.
"""

from dataclasses import dataclass

from .enums import Classification, RedirectSource
from .models import ClassificationResult, RedirectChain, SourceAttribution


@dataclass(frozen=True)
class EdgePlatform:
    """An edge/CDN platform that can issue redirects itself."""

    name: str
    markers: tuple[str, ...]  # substrings looked for in server / via
    request_id_header: str
    config_file: str
    fix_location: str


EDGE_PLATFORMS = (
    EdgePlatform(
        name="vercel",
        markers=("vercel",),
        request_id_header="x-vercel-id",
        config_file="vercel.json",
        fix_location="vercel.json routes configuration",
    ),
    EdgePlatform(
        name="cloudflare",
        markers=("cloudflare",),
        request_id_header="cf-ray",
        config_file="Cloudflare dashboard (Rules > Redirect Rules)",
        fix_location="Cloudflare redirect rules or page rules",
    ),
    EdgePlatform(
        name="netlify",
        markers=("netlify",),
        request_id_header="x-nf-request-id",
        config_file="netlify.toml or _redirects",
        fix_location="Netlify redirects configuration",
    ),
    EdgePlatform(
        name="cloudfront",
        markers=("cloudfront",),
        request_id_header="x-amz-cf-id",
        config_file="CloudFront distribution / CloudFront Functions",
        fix_location="CloudFront behaviors or viewer-request function",
    ),
    EdgePlatform(
        name="fastly",
        markers=("fastly", "varnish"),
        request_id_header="x-served-by",
        config_file="Fastly VCL service configuration",
        fix_location="Fastly VCL recv / error subroutines",
    ),
)


def detect_edge_platform(headers: dict[str, str]):
    """
    Identify the edge platform that answered a request.

    Args:
        headers: Response headers with lower-cased keys

    Returns:
        The matching EdgePlatform, or None
    """
    server = headers.get("server", "").lower()
    via = headers.get("via", "").lower()

    for platform in EDGE_PLATFORMS:
        if any(marker in server or marker in via for marker in platform.markers):
            return platform
        if platform.request_id_header in headers:
            return platform

    return None


def attribute_source(chain: RedirectChain, result: ClassificationResult) -> SourceAttribution:
    """
    Attribute a chain's redirect to its most likely origin.

    Args:
        chain: The walked chain
        result: The chain's classification

    Returns:
        SourceAttribution (source unknown for empty chains)
    """
    first = chain.first_step
    if first is None:
        return _unknown()

    platform = detect_edge_platform(first.headers)
    if platform is not None:
        return SourceAttribution(
            source=RedirectSource.PLATFORM_EDGE,
            config_file=platform.config_file,
            fix_location=platform.fix_location,
            platform=platform.name,
        )

    if (
        first.status_code == 200
        and result.classification is Classification.UNINTENTIONAL_CLIENT_SIDE
    ):
        return SourceAttribution(
            source=RedirectSource.CLIENT_SIDE,
            config_file="index.html or script.js",
            fix_location="HTML meta tags or JavaScript window.location",
        )

    if 300 <= first.status_code < 400:
        return SourceAttribution(
            source=RedirectSource.SERVER_CONFIGURATION,
            config_file="vercel.json or server config",
            fix_location="Server routing rules",
        )

    return _unknown()


def _unknown() -> SourceAttribution:
    return SourceAttribution(
        source=RedirectSource.UNKNOWN,
        config_file="unknown",
        fix_location="Manual investigation required",
    )
