"""
Storefront SEO - redirect and structured data auditor for storefronts.

This package audits the redirect chains of every URL in a sitemap,
classifies them by SEO impact, attributes them to their likely source and
proposes fixes. It also validates ISO 3166-1 country codes used in
shipping and schema.org output.
"""

__version__ = "0.1.0"
__author__ = "Storefront SEO Team"

from storefront_seo.exceptions import (
    StorefrontSeoError,
    ValidationError,
    NetworkError,
    SitemapError,
)
from storefront_seo.enums import (
    LogLevel,
    CountryValidationErrorCode,
    ChainOutcome,
    Classification,
    RedirectSource,
    Risk,
    Priority,
    FixAction,
)
from storefront_seo.config import (
    MIN_REQUEST_DELAY_SECONDS,
    WalkerConfig,
    ThrottleConfig,
    ReportConfig,
    LoggingConfig,
    AuditConfig,
    validate_config,
    config_from_env,
)
from storefront_seo.models import (
    RedirectStep,
    RedirectChain,
    ClassificationResult,
    SourceAttribution,
    FixSuggestion,
    FixRecommendation,
    AuditRecord,
    AuditError,
    AuditReport,
)
from storefront_seo.country_registry import (
    ISO_COUNTRY_CODES,
    COUNTRY_PRESETS,
    DEFAULT_PRESET,
    get_preset,
    get_preset_names,
)
from storefront_seo.country_validator import (
    CountryValidator,
    CountryValidationError,
    CountryValidationResult,
    CountryListValidationResult,
    validate_code,
    validate_codes,
    sanitize,
    to_shipping_destination,
)
from storefront_seo.audit_logger import (
    AuditLogger,
    LogEntry,
)
from storefront_seo.client_side import (
    detect_client_side_redirect,
    find_meta_refreshes,
    find_script_redirects,
)
from storefront_seo.chain_walker import (
    ChainWalker,
)
from storefront_seo.classifier import (
    RedirectClassifier,
)
from storefront_seo.attribution import (
    attribute_source,
    detect_edge_platform,
)
from storefront_seo.fix_advisor import (
    FixAdvisor,
)
from storefront_seo.throttle import (
    RequestThrottle,
)
from storefront_seo.sitemap import (
    SitemapSource,
    parse_sitemap,
    is_sitemap_index,
    load_local_sitemap,
)
from storefront_seo.orchestrator import (
    RedirectAuditOrchestrator,
)
from storefront_seo.report import (
    report_to_dict,
    render_text_report,
    local_report_to_dict,
    render_local_text_report,
    save_reports,
)
from storefront_seo.local_auditor import (
    LocalRedirectAuditor,
    LocalAuditReport,
)
from storefront_seo.structured_data import (
    StructuredDataIssue,
    extract_json_ld,
    check_address_country,
    check_product_schema,
    check_html,
)
from storefront_seo.cli import (
    main as cli_main,
    create_parser,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
)

__all__ = [
    # Exceptions
    "StorefrontSeoError",
    "ValidationError",
    "NetworkError",
    "SitemapError",
    # Enums
    "LogLevel",
    "CountryValidationErrorCode",
    "ChainOutcome",
    "Classification",
    "RedirectSource",
    "Risk",
    "Priority",
    "FixAction",
    # Configuration
    "MIN_REQUEST_DELAY_SECONDS",
    "WalkerConfig",
    "ThrottleConfig",
    "ReportConfig",
    "LoggingConfig",
    "AuditConfig",
    "validate_config",
    "config_from_env",
    # Models
    "RedirectStep",
    "RedirectChain",
    "ClassificationResult",
    "SourceAttribution",
    "FixSuggestion",
    "FixRecommendation",
    "AuditRecord",
    "AuditError",
    "AuditReport",
    # Country registry and validator
    "ISO_COUNTRY_CODES",
    "COUNTRY_PRESETS",
    "DEFAULT_PRESET",
    "get_preset",
    "get_preset_names",
    "CountryValidator",
    "CountryValidationError",
    "CountryValidationResult",
    "CountryListValidationResult",
    "validate_code",
    "validate_codes",
    "sanitize",
    "to_shipping_destination",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Redirect analysis
    "detect_client_side_redirect",
    "find_meta_refreshes",
    "find_script_redirects",
    "ChainWalker",
    "RedirectClassifier",
    "attribute_source",
    "detect_edge_platform",
    "FixAdvisor",
    "RequestThrottle",
    # Sitemap
    "SitemapSource",
    "parse_sitemap",
    "is_sitemap_index",
    "load_local_sitemap",
    # Orchestrator and reports
    "RedirectAuditOrchestrator",
    "report_to_dict",
    "render_text_report",
    "local_report_to_dict",
    "render_local_text_report",
    "save_reports",
    # Local audit
    "LocalRedirectAuditor",
    "LocalAuditReport",
    # Structured data
    "StructuredDataIssue",
    "extract_json_ld",
    "check_address_country",
    "check_product_schema",
    "check_html",
    # CLI
    "cli_main",
    "create_parser",
    "create_default_config",
    "load_config_from_file",
    "save_config_to_file",
]
