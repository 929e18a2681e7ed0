"""
Configuration dataclasses for the storefront SEO toolkit.

This module defines the configuration structures used by the redirect
auditor: chain walking, request throttling, report output and logging.
Values can be read from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ValidationError


# Politeness floor between two audited URLs on the same host
MIN_REQUEST_DELAY_SECONDS = 0.5

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; StorefrontRedirectChecker/1.0; "
    "+https://github.com/storefront-seo)"
)
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

LOG_OUTPUT_FORMATS = ("json", "text", "both")
LOG_LEVELS = ("debug", "info", "warn", "error")


@dataclass
class WalkerConfig:
    """Redirect chain walking behavior."""

    max_redirects: int = 10
    timeout_seconds: float = 10.0
    hop_delay_seconds: float = 0.1
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    inspect_content: bool = False


@dataclass
class ThrottleConfig:
    """Delay policy between audited URLs."""

    request_delay_seconds: float = MIN_REQUEST_DELAY_SECONDS
    backoff_base: float = 2.0
    max_delay_seconds: float = 60.0


@dataclass
class ReportConfig:
    """Where and how audit reports are written."""

    output_dir: Path = field(default_factory=Path.cwd)
    analysis_prefix: str = "redirect-analysis"
    local_audit_prefix: str = "redirect-audit"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class AuditConfig:
    """Main configuration combining all sub-configurations."""

    sitemap_url: Optional[str] = None
    domain: Optional[str] = None
    walker: WalkerConfig = field(default_factory=WalkerConfig)
    throttle: ThrottleConfig = field(default_factory=ThrottleConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def validate_config(config: AuditConfig) -> None:
    """
    Check configuration values that the auditor relies on.

    Raises:
        ValidationError: If a value is out of range
    """
    if config.throttle.request_delay_seconds < MIN_REQUEST_DELAY_SECONDS:
        raise ValidationError(
            code="request_delay_too_low",
            message=(
                f"Request delay must be at least {MIN_REQUEST_DELAY_SECONDS}s, "
                f"got {config.throttle.request_delay_seconds}s"
            ),
            details={"request_delay_seconds": config.throttle.request_delay_seconds},
        )
    if config.walker.max_redirects < 1:
        raise ValidationError(
            code="invalid_max_redirects",
            message=f"max_redirects must be >= 1, got {config.walker.max_redirects}",
            details={"max_redirects": config.walker.max_redirects},
        )
    if config.walker.timeout_seconds <= 0:
        raise ValidationError(
            code="invalid_timeout",
            message=f"timeout must be positive, got {config.walker.timeout_seconds}",
            details={"timeout_seconds": config.walker.timeout_seconds},
        )
    if config.logging.output_format not in LOG_OUTPUT_FORMATS:
        raise ValidationError(
            code="invalid_log_format",
            message=f"Invalid log output format: {config.logging.output_format}",
            details={"allowed": list(LOG_OUTPUT_FORMATS)},
        )
    if config.logging.level not in LOG_LEVELS:
        raise ValidationError(
            code="invalid_log_level",
            message=f"Invalid log level: {config.logging.level}",
            details={"allowed": list(LOG_LEVELS)},
        )


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def config_from_env(dotenv_path: Optional[Path] = None) -> AuditConfig:
    """
    Build an AuditConfig from SEO_* environment variables.

    A .env file is loaded first (without overriding variables already set).

    Args:
        dotenv_path: Optional explicit .env location

    Returns:
        AuditConfig with environment overrides applied to the defaults
    """
    load_dotenv(dotenv_path)

    output_dir = os.getenv("SEO_OUTPUT_DIR")

    return AuditConfig(
        sitemap_url=os.getenv("SEO_SITEMAP_URL") or None,
        domain=os.getenv("SEO_DOMAIN") or None,
        walker=WalkerConfig(
            max_redirects=_int_env("SEO_MAX_REDIRECTS", 10),
            timeout_seconds=_float_env("SEO_TIMEOUT", 10.0),
            inspect_content=_bool_env("SEO_INSPECT_CONTENT", False),
        ),
        throttle=ThrottleConfig(
            request_delay_seconds=_float_env(
                "SEO_REQUEST_DELAY", MIN_REQUEST_DELAY_SECONDS
            ),
        ),
        report=ReportConfig(
            output_dir=Path(output_dir) if output_dir else Path.cwd(),
        ),
        logging=LoggingConfig(
            level=(os.getenv("SEO_LOG_LEVEL", "info") or "info").lower(),
        ),
    )
