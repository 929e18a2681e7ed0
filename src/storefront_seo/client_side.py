"""
Client-side redirect detection.

Finds navigations that HTTP-layer redirect following cannot see: HTML
meta refresh tags and JavaScript assignments to window/document location.
Shared by the live chain walker (content inspection) and the local auditor.
"""

import re
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup


# content="5; url=/target" or content="0;URL='https://x/'"
META_REFRESH_CONTENT_PATTERN = re.compile(
    r"^\s*(\d+)\s*[;,]?\s*(?:url\s*=\s*)?['\"]?([^'\"]*)['\"]?\s*$",
    re.IGNORECASE,
)

JS_REDIRECT_PATTERNS = [
    re.compile(r"window\.location\.href\s*=\s*['\"]([^'\"]+)['\"]"),
    re.compile(r"window\.location\s*=\s*['\"]([^'\"]+)['\"]"),
    re.compile(r"window\.location\.replace\(['\"]([^'\"]+)['\"]\)"),
    re.compile(r"document\.location\.href\s*=\s*['\"]([^'\"]+)['\"]"),
]

CONDITIONAL_MARKERS = ("if", "?")
USER_ACTION_MARKERS = ("onclick", "addEventListener")


@dataclass
class MetaRefresh:
    """A parsed <meta http-equiv="refresh"> tag."""

    delay: int
    target: str


@dataclass
class ScriptRedirectMatch:
    """A JavaScript location assignment found in source text."""

    line: int
    target: str
    code: str
    conditional: bool
    user_triggered: bool

    @property
    def unconditional(self) -> bool:
        return not self.conditional and not self.user_triggered


def find_meta_refreshes(html: str) -> list[MetaRefresh]:
    """
    Find meta refresh tags that navigate to another URL.

    Args:
        html: HTML document text

    Returns:
        Every refresh tag carrying a target, in document order
    """
    soup = BeautifulSoup(html, "lxml")
    refreshes = []

    for tag in soup.find_all("meta"):
        http_equiv = (tag.get("http-equiv") or "").strip().lower()
        if http_equiv != "refresh":
            continue

        match = META_REFRESH_CONTENT_PATTERN.match(tag.get("content") or "")
        if not match or not match.group(2).strip():
            # Plain reload without a target is not a redirect
            continue

        refreshes.append(MetaRefresh(delay=int(match.group(1)), target=match.group(2).strip()))

    return refreshes


def find_script_redirects(source: str) -> list[ScriptRedirectMatch]:
    """
    Find JavaScript location assignments in script source.

    Args:
        source: JavaScript (or inline script) text

    Returns:
        Matches ordered by pattern, then by position
    """
    lines = source.split("\n")
    matches = []

    for pattern in JS_REDIRECT_PATTERNS:
        for match in pattern.finditer(source):
            line_number = source.count("\n", 0, match.start()) + 1
            line_content = lines[line_number - 1].strip()

            matches.append(ScriptRedirectMatch(
                line=line_number,
                target=match.group(1),
                code=line_content[:80] + ("..." if len(line_content) > 80 else ""),
                conditional=any(marker in line_content for marker in CONDITIONAL_MARKERS),
                user_triggered=any(marker in line_content for marker in USER_ACTION_MARKERS),
            ))

    return matches


def detect_client_side_redirect(html: str) -> Optional[str]:
    """
    Return the target of a redirect a browser would follow on page load.

    Meta refresh tags win over scripts; only unconditional script
    redirects count.

    Args:
        html: HTML document text

    Returns:
        The redirect target, or None if the page does not redirect
    """
    refreshes = find_meta_refreshes(html)
    if refreshes:
        return refreshes[0].target

    soup = BeautifulSoup(html, "lxml")
    for script in soup.find_all("script"):
        if script.get("src"):
            continue
        for match in find_script_redirects(script.string or ""):
            if match.unconditional:
                return match.target

    return None
