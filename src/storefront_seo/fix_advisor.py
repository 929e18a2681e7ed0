"""
Fix advisor.

Turns a classification into concrete remediation suggestions. Each
Classification has exactly one handler in FixAdvisor.handlers.
"""

import json
from typing import Callable, Optional

from .enums import Classification, FixAction, Priority, Risk
from .models import (
    ClassificationResult,
    FixRecommendation,
    FixSuggestion,
    SourceAttribution,
)


_RISK_ORDER = [Risk.NONE, Risk.LOW, Risk.MEDIUM, Risk.HIGH, Risk.CRITICAL]

CLIENT_REDIRECT_PATTERNS = [
    '<meta http-equiv="refresh"',
    "window.location =",
    "window.location.href =",
]


def max_risk(risks) -> Risk:
    """Highest risk in an iterable (NONE when empty)."""
    return max(risks, key=_RISK_ORDER.index, default=Risk.NONE)


class FixAdvisor:
    """Proposes fixes for a classified URL."""

    def __init__(self) -> None:
        self._handlers: dict[Classification, Callable[..., list[FixSuggestion]]] = {
            Classification.CLEAN: self._clean,
            Classification.INTENTIONAL_PERMANENT: self._permanent,
            Classification.INTENTIONAL_TEMPORARY: self._temporary,
            Classification.UNINTENTIONAL_CLIENT_SIDE: self._client_side,
            Classification.ERROR: self._error,
            Classification.REDIRECT_OTHER: self._review,
            Classification.UNKNOWN: self._review,
        }

    @property
    def handlers(self) -> dict[Classification, Callable[..., list[FixSuggestion]]]:
        return dict(self._handlers)

    def advise(
        self,
        url: str,
        final_url: str,
        result: ClassificationResult,
        attribution: Optional[SourceAttribution] = None,
    ) -> FixRecommendation:
        """
        Build the fix recommendation for one URL.

        Args:
            url: The audited URL
            final_url: Where its chain ended
            result: Classification of the chain
            attribution: Where the redirect is likely configured

        Returns:
            FixRecommendation with suggestions, overall priority and risk
        """
        handler = self._handlers[result.classification]
        suggestions = handler(url, final_url, attribution)

        if result.classification is Classification.CLEAN:
            return FixRecommendation(
                summary="NONE - URL is clean",
                priority=Priority.LOW,
                risk=Risk.NONE,
                suggestions=suggestions,
            )

        return FixRecommendation(
            summary=result.action_required or result.reason,
            priority=Priority.HIGH if result.action_required else Priority.MEDIUM,
            risk=max_risk(s.risk for s in suggestions),
            suggestions=suggestions,
        )

    def _clean(self, url, final_url, attribution) -> list[FixSuggestion]:
        return []

    def _permanent(self, url, final_url, attribution) -> list[FixSuggestion]:
        return [
            FixSuggestion(
                action=FixAction.UPDATE_SITEMAP,
                description="Update sitemap.xml to use final URL instead of redirect",
                risk=Risk.LOW,
                command=f"Update sitemap.xml: Change {url} to {final_url}",
            ),
            FixSuggestion(
                action=FixAction.UPDATE_CANONICAL,
                description="Ensure canonical tag points to final URL",
                risk=Risk.LOW,
                file="index.html",
                example=f'<link rel="canonical" href="{final_url}">',
            ),
        ]

    def _temporary(self, url, final_url, attribution) -> list[FixSuggestion]:
        return [
            FixSuggestion(
                action=FixAction.REVIEW_NECESSITY,
                description=(
                    "302/307 redirects don't pass PageRank - "
                    "consider changing to 301 if permanent"
                ),
                risk=Risk.MEDIUM,
            ),
        ]

    def _client_side(self, url, final_url, attribution) -> list[FixSuggestion]:
        config_file = "vercel.json"
        if attribution is not None and attribution.platform:
            config_file = attribution.config_file

        example = json.dumps(
            {"redirects": [{"source": url, "destination": final_url, "permanent": True}]},
            indent=2,
        )

        return [
            FixSuggestion(
                action=FixAction.REMOVE_CLIENT_REDIRECT,
                description="Remove meta refresh or JavaScript redirect, use server-side 301",
                risk=Risk.MEDIUM,
                priority=Priority.HIGH,
                files=["index.html", "script.js"],
                search_for=list(CLIENT_REDIRECT_PATTERNS),
            ),
            FixSuggestion(
                action=FixAction.ADD_SERVER_REDIRECT,
                description=f"Add proper 301 redirect in {config_file}",
                risk=Risk.LOW,
                file=config_file,
                example=example,
            ),
        ]

    def _error(self, url, final_url, attribution) -> list[FixSuggestion]:
        return [
            FixSuggestion(
                action=FixAction.REMOVE_FROM_SITEMAP,
                description="Remove broken URL from sitemap.xml",
                risk=Risk.LOW,
                priority=Priority.HIGH,
            ),
            FixSuggestion(
                action=FixAction.FIX_OR_RESTORE,
                description="Fix broken page or restore content to return 200",
                risk=Risk.MEDIUM,
                priority=Priority.CRITICAL,
            ),
        ]

    def _review(self, url, final_url, attribution) -> list[FixSuggestion]:
        location = attribution.fix_location if attribution else "Manual investigation required"
        return [
            FixSuggestion(
                action=FixAction.REVIEW_CONFIGURATION,
                description=f"Review redirect behavior for {url} ({location})",
                risk=Risk.MEDIUM,
            ),
        ]
