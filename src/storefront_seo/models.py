"""
Data models for the redirect auditor.

This module defines the records produced while walking redirect chains,
classifying them, proposing fixes and accumulating the audit report.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from .enums import (
    ChainOutcome,
    Classification,
    FixAction,
    Priority,
    RedirectSource,
    Risk,
)


@dataclass(frozen=True)
class RedirectStep:
    """One HTTP round-trip in a redirect chain."""

    url: str
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)  # lower-cased keys
    location: Optional[str] = None  # only set for 3xx with a Location header


@dataclass
class RedirectChain:
    """Every step observed while following one origin URL."""

    url: str
    final_url: str
    steps: list[RedirectStep] = field(default_factory=list)
    outcome: ChainOutcome = ChainOutcome.COMPLETE
    error: Optional[str] = None
    client_side_target: Optional[str] = None  # meta refresh / JS redirect found in content

    @property
    def redirect_count(self) -> int:
        return max(len(self.steps) - 1, 0)

    @property
    def final_status(self) -> Union[int, str]:
        if self.outcome is ChainOutcome.COMPLETE and self.steps:
            return self.steps[-1].status_code
        return self.outcome.value

    @property
    def first_step(self) -> Optional[RedirectStep]:
        return self.steps[0] if self.steps else None

    @property
    def last_step(self) -> Optional[RedirectStep]:
        return self.steps[-1] if self.steps else None


@dataclass
class ClassificationResult:
    """Verdict of the classifier for one chain."""

    classification: Classification
    reason: str
    intentional: Optional[bool]  # None when it cannot be told
    seo_impact: Optional[str] = None
    action_required: Optional[str] = None
    normalization: list[str] = field(default_factory=list)  # www / https / trailing-slash


@dataclass
class SourceAttribution:
    """Best guess of where a redirect is configured."""

    source: RedirectSource
    config_file: str
    fix_location: str
    platform: Optional[str] = None


@dataclass
class FixSuggestion:
    """A single proposed remediation."""

    action: FixAction
    description: str
    risk: Risk
    priority: Optional[Priority] = None
    file: Optional[str] = None
    files: list[str] = field(default_factory=list)
    command: Optional[str] = None
    example: Optional[str] = None
    search_for: list[str] = field(default_factory=list)


@dataclass
class FixRecommendation:
    """All suggestions for one audited URL."""

    summary: str
    priority: Priority
    risk: Risk
    suggestions: list[FixSuggestion] = field(default_factory=list)


@dataclass
class AuditRecord:
    """Per-URL aggregate appended to the report."""

    url: str
    final_url: str
    status_chain: list[RedirectStep]
    redirect_count: int
    classification: ClassificationResult
    source: SourceAttribution
    fix: FixRecommendation
    timestamp: str
    error: Optional[str] = None  # chain error / timeout message, if any


@dataclass
class AuditError:
    """Failure isolated to one URL or to a run step."""

    error: str
    timestamp: str
    url: Optional[str] = None
    step: Optional[str] = None


@dataclass
class AuditReport:
    """Result of one audit run."""

    timestamp: str
    domain: str
    total_urls: int = 0
    clean_urls: list[AuditRecord] = field(default_factory=list)
    redirect_issues: list[AuditRecord] = field(default_factory=list)
    errors: list[AuditError] = field(default_factory=list)
    interrupted: bool = False
