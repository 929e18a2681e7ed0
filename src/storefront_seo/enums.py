"""
Enumeration types for the storefront SEO toolkit.

These enums provide type-safe constants for classifications, error codes,
severities and configuration options. Values are emitted verbatim in
JSON reports.
"""

from enum import Enum


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class CountryValidationErrorCode(Enum):
    """Error codes for country code validation failures."""

    TYPE_ERROR = "type_error"
    LENGTH_ERROR = "length_error"
    UNKNOWN_CODE = "unknown_code"
    DUPLICATE = "duplicate"
    TOO_MANY = "too_many"
    EMPTY_INPUT = "empty_input"


class ChainOutcome(Enum):
    """How a redirect chain walk terminated."""

    COMPLETE = "complete"
    ERROR = "ERROR"
    TIMEOUT = "TIMEOUT"


class Classification(Enum):
    """SEO classification of a redirect chain."""

    CLEAN = "CLEAN"
    INTENTIONAL_PERMANENT = "INTENTIONAL_PERMANENT"
    INTENTIONAL_TEMPORARY = "INTENTIONAL_TEMPORARY"
    UNINTENTIONAL_CLIENT_SIDE = "UNINTENTIONAL_CLIENT_SIDE"
    ERROR = "ERROR"
    REDIRECT_OTHER = "REDIRECT_OTHER"
    UNKNOWN = "UNKNOWN"


class RedirectSource(Enum):
    """Where a redirect is most likely configured."""

    PLATFORM_EDGE = "platform-edge"
    CLIENT_SIDE = "client-side"
    SERVER_CONFIGURATION = "server-configuration"
    UNKNOWN = "unknown"


class Risk(Enum):
    """Risk of applying a proposed fix."""

    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Priority(Enum):
    """Priority of a fix or recommendation."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    CRITICAL = "CRITICAL"


class FixAction(Enum):
    """Remediation actions proposed by the fix advisor."""

    UPDATE_SITEMAP = "UPDATE_SITEMAP"
    UPDATE_CANONICAL = "UPDATE_CANONICAL"
    REVIEW_NECESSITY = "REVIEW_NECESSITY"
    REMOVE_CLIENT_REDIRECT = "REMOVE_CLIENT_REDIRECT"
    ADD_SERVER_REDIRECT = "ADD_SERVER_REDIRECT"
    REMOVE_FROM_SITEMAP = "REMOVE_FROM_SITEMAP"
    FIX_OR_RESTORE = "FIX_OR_RESTORE"
    REVIEW_CONFIGURATION = "REVIEW_CONFIGURATION"
