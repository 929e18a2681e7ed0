"""
Command-line interface for the storefront SEO toolkit.

This module provides the main CLI entry point with commands for:
- analyze: Live redirect audit of every URL in a sitemap
- audit-local: Offline audit of a project's redirect configuration
- countries: Country code validation, presets and shipping regions
- validate-schema: addressCountry checks on JSON-LD in an HTML file
- config: Configuration management
"""

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .config import (
    AuditConfig,
    LoggingConfig,
    ReportConfig,
    ThrottleConfig,
    WalkerConfig,
    config_from_env,
    validate_config,
)
from .country_registry import COUNTRY_PRESETS
from .country_validator import to_shipping_destination, validate_codes
from .enums import LogLevel, Priority
from .exceptions import ValidationError
from .local_auditor import LocalRedirectAuditor
from .orchestrator import RedirectAuditOrchestrator
from .report import render_local_text_report, render_text_report, save_reports
from .structured_data import check_html


DEFAULT_CONFIG_PATH = Path.home() / ".storefront_seo" / "config.json"


def create_default_config() -> AuditConfig:
    """
    Create the default configuration.

    Environment variables (and a .env file) override the built-in defaults.
    """
    return config_from_env()


def load_config_from_file(config_path: Path) -> Optional[AuditConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        AuditConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        walker_data = data.get("walker", {})
        throttle_data = data.get("throttle", {})
        report_data = data.get("report", {})
        logging_data = data.get("logging", {})

        defaults = WalkerConfig()
        walker = WalkerConfig(
            max_redirects=walker_data.get("max_redirects", defaults.max_redirects),
            timeout_seconds=walker_data.get("timeout_seconds", defaults.timeout_seconds),
            hop_delay_seconds=walker_data.get("hop_delay_seconds", defaults.hop_delay_seconds),
            user_agent=walker_data.get("user_agent", defaults.user_agent),
            accept=walker_data.get("accept", defaults.accept),
            inspect_content=walker_data.get("inspect_content", defaults.inspect_content),
        )

        throttle_defaults = ThrottleConfig()
        throttle = ThrottleConfig(
            request_delay_seconds=throttle_data.get(
                "request_delay_seconds", throttle_defaults.request_delay_seconds
            ),
            backoff_base=throttle_data.get("backoff_base", throttle_defaults.backoff_base),
            max_delay_seconds=throttle_data.get(
                "max_delay_seconds", throttle_defaults.max_delay_seconds
            ),
        )

        report_defaults = ReportConfig()
        output_dir = report_data.get("output_dir")
        report = ReportConfig(
            output_dir=Path(output_dir) if output_dir else report_defaults.output_dir,
            analysis_prefix=report_data.get("analysis_prefix", report_defaults.analysis_prefix),
            local_audit_prefix=report_data.get(
                "local_audit_prefix", report_defaults.local_audit_prefix
            ),
        )

        logging_config = LoggingConfig(
            level=logging_data.get("level", "info"),
            output_format=logging_data.get("output_format", "text"),
        )

        return AuditConfig(
            sitemap_url=data.get("sitemap_url"),
            domain=data.get("domain"),
            walker=walker,
            throttle=throttle,
            report=report,
            logging=logging_config,
        )

    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None


def config_to_dict(config: AuditConfig) -> dict:
    """Convert a configuration to the JSON file layout."""
    return {
        "sitemap_url": config.sitemap_url,
        "domain": config.domain,
        "walker": {
            "max_redirects": config.walker.max_redirects,
            "timeout_seconds": config.walker.timeout_seconds,
            "hop_delay_seconds": config.walker.hop_delay_seconds,
            "user_agent": config.walker.user_agent,
            "accept": config.walker.accept,
            "inspect_content": config.walker.inspect_content,
        },
        "throttle": {
            "request_delay_seconds": config.throttle.request_delay_seconds,
            "backoff_base": config.throttle.backoff_base,
            "max_delay_seconds": config.throttle.max_delay_seconds,
        },
        "report": {
            "output_dir": str(config.report.output_dir),
            "analysis_prefix": config.report.analysis_prefix,
            "local_audit_prefix": config.report.local_audit_prefix,
        },
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
    }


def save_config_to_file(config: AuditConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: AuditConfig to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(config), f, indent=2, ensure_ascii=False)
        return True

    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def create_logger(config: AuditConfig, verbose: bool = False) -> AuditLogger:
    """Build the stderr logger for a command run."""
    level = LogLevel.DEBUG if verbose else LogLevel(config.logging.level)
    return AuditLogger(output_format=config.logging.output_format, min_level=level)


def _install_stop_handler(orchestrator: RedirectAuditOrchestrator) -> None:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, orchestrator.request_stop)
    except NotImplementedError:
        # Event loops without signal support (Windows)
        signal.signal(signal.SIGINT, lambda signum, frame: orchestrator.request_stop())


async def run_analysis(
    sitemap_url: str,
    config: AuditConfig,
    logger: Optional[AuditLogger] = None,
) -> int:
    """
    Audit every URL of a sitemap and write the reports.

    Ctrl+C stops the audit before the next URL; partial results are still
    reported and saved.

    Returns:
        Exit code (0 when the audit ran to the end or was stopped)
    """
    print(f"Starting redirect analysis for {sitemap_url}")

    async with RedirectAuditOrchestrator(config=config, logger=logger) as orchestrator:
        _install_stop_handler(orchestrator)
        report = await orchestrator.audit_sitemap(sitemap_url, domain=config.domain)

    print()
    print(render_text_report(report))

    json_path, text_path = save_reports(
        report, config.report.output_dir, config.report.analysis_prefix
    )
    print(f"JSON report saved: {json_path}")
    print(f"Text report saved: {text_path}")

    print()
    print("Summary:")
    print(f"  Total: {report.total_urls}")
    print(f"  Clean: {len(report.clean_urls)}")
    print(f"  Issues: {len(report.redirect_issues)}")
    print(f"  Errors: {len(report.errors)}")
    if report.interrupted:
        print("  Audit was interrupted; results are partial.")
    if report.redirect_issues:
        print(f"Action required for redirect issues, review: {text_path}")
    else:
        print("No redirect issues found!")

    return 0


def _load_config(args: argparse.Namespace) -> Optional[AuditConfig]:
    if getattr(args, "config", None):
        config = load_config_from_file(Path(args.config))
        if config is None:
            print(f"Error: Could not load config from {args.config}", file=sys.stderr)
        return config
    return create_default_config()


def cmd_analyze(args: argparse.Namespace) -> int:
    """Handle the 'analyze' command."""
    config = _load_config(args)
    if config is None:
        return 1

    # Command line overrides
    if args.domain:
        config.domain = args.domain
    if args.output_dir:
        config.report.output_dir = Path(args.output_dir)
    if args.max_redirects is not None:
        config.walker.max_redirects = args.max_redirects
    if args.timeout is not None:
        config.walker.timeout_seconds = args.timeout
    if args.delay is not None:
        config.throttle.request_delay_seconds = args.delay
    if args.inspect_content:
        config.walker.inspect_content = True

    try:
        validate_config(config)
    except ValidationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    sitemap_url = args.sitemap_url or config.sitemap_url
    if not sitemap_url:
        print("Error: No sitemap URL given (argument or SEO_SITEMAP_URL)", file=sys.stderr)
        return 1

    logger = create_logger(config, verbose=args.verbose)
    return asyncio.run(run_analysis(sitemap_url, config, logger=logger))


def cmd_audit_local(args: argparse.Namespace) -> int:
    """Handle the 'audit-local' command."""
    project_dir = Path(args.project_dir)
    if not project_dir.is_dir():
        print(f"Error: Not a directory: {project_dir}", file=sys.stderr)
        return 1

    config = create_default_config()
    domain = args.domain or config.domain or "localhost"
    output_dir = Path(args.output_dir) if args.output_dir else config.report.output_dir
    logger = create_logger(config, verbose=args.verbose)

    print(f"Starting redirect configuration audit for {domain}")
    report = LocalRedirectAuditor(project_dir, domain, logger=logger).run()

    print()
    print(render_local_text_report(report))

    json_path, text_path = save_reports(report, output_dir, config.report.local_audit_prefix)
    print(f"JSON report saved: {json_path}")
    print(f"Text report saved: {text_path}")

    print()
    print("Summary:")
    for priority in (Priority.HIGH, Priority.MEDIUM, Priority.LOW):
        count = report.count_by_priority(priority)
        print(f"  {priority.value.capitalize()} Priority Issues: {count}")

    return 0


def cmd_countries(args: argparse.Namespace) -> int:
    """Handle the 'countries' command."""
    if args.action == "presets":
        data = {name: list(codes) for name, codes in COUNTRY_PRESETS.items()}
        print(json.dumps(data, indent=2))
        return 0

    if not args.values:
        print(f"Error: '{args.action}' needs at least one value", file=sys.stderr)
        return 1

    if args.action == "validate":
        result = validate_codes(args.values)
        data = {
            "valid": result.valid,
            "normalized": result.normalized,
            "errors": [
                {"code": error.code.value, "message": error.message, "index": error.index}
                for error in result.errors
            ],
        }
        print(json.dumps(data, indent=2))
        return 0 if result.valid else 1

    if args.action == "shipping":
        value = args.values[0] if len(args.values) == 1 else args.values
        print(json.dumps(to_shipping_destination(value), indent=2))
        return 0

    return 1


def cmd_validate_schema(args: argparse.Namespace) -> int:
    """Handle the 'validate-schema' command."""
    path = Path(args.file)
    try:
        html = path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error: Failed to read file: {e}", file=sys.stderr)
        return 1

    issues = check_html(html)

    print(f"Validating: {path}")
    if not issues:
        print("VALIDATION PASSED - No errors found")
        return 0

    for index, issue in enumerate(issues, 1):
        print(f"  {index}. Path: {issue.path}")
        print(f"     Error: {issue.error}")
        print(f"     Fix: {issue.fix}")
    print(f"VALIDATION FAILED - {len(issues)} error(s) found")
    return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  Sitemap URL: {config.sitemap_url}")
        print(f"  Domain: {config.domain}")
        print(f"  Max redirects: {config.walker.max_redirects}")
        print(f"  Timeout: {config.walker.timeout_seconds}s")
        print(f"  Request delay: {config.throttle.request_delay_seconds}s")
        print(f"  Inspect content: {config.walker.inspect_content}")
        print(f"  Output dir: {config.report.output_dir}")
        print(f"  Log level: {config.logging.level}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        if save_config_to_file(create_default_config(), config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        return 1

    elif args.action == "validate":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"Error: Could not load config from {config_path}", file=sys.stderr)
            return 1

        try:
            validate_config(config)
        except ValidationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

        print(f"Configuration at {config_path} is valid.")
        return 0

    return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="storefront-seo",
        description="Redirect and structured data auditor for storefronts",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'analyze' command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Audit the redirect chain of every URL in a sitemap",
    )
    analyze_parser.add_argument(
        "sitemap_url",
        nargs="?",
        help="Sitemap URL (defaults to SEO_SITEMAP_URL)",
    )
    analyze_parser.add_argument(
        "--domain", "-d",
        help="Domain shown in the report",
    )
    analyze_parser.add_argument(
        "--output-dir", "-o",
        help="Directory for the JSON and text reports",
    )
    analyze_parser.add_argument(
        "--max-redirects",
        type=int,
        help="Maximum redirects followed per URL (default: 10)",
    )
    analyze_parser.add_argument(
        "--timeout",
        type=float,
        help="Per-request timeout in seconds (default: 10)",
    )
    analyze_parser.add_argument(
        "--delay",
        type=float,
        help="Delay between URLs in seconds (minimum and default: 0.5)",
    )
    analyze_parser.add_argument(
        "--inspect-content",
        action="store_true",
        help="Fetch final 200 pages and look for meta refresh / JavaScript redirects",
    )
    analyze_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    analyze_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    analyze_parser.set_defaults(func=cmd_analyze)

    # 'audit-local' command
    audit_local_parser = subparsers.add_parser(
        "audit-local",
        help="Audit redirect configuration of a local project",
    )
    audit_local_parser.add_argument(
        "project_dir",
        nargs="?",
        default=".",
        help="Project directory (default: current directory)",
    )
    audit_local_parser.add_argument(
        "--domain", "-d",
        help="Production domain of the project",
    )
    audit_local_parser.add_argument(
        "--output-dir", "-o",
        help="Directory for the JSON and text reports",
    )
    audit_local_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    audit_local_parser.set_defaults(func=cmd_audit_local)

    # 'countries' command
    countries_parser = subparsers.add_parser(
        "countries",
        help="Country code validation and presets",
    )
    countries_parser.add_argument(
        "action",
        choices=["validate", "presets", "shipping"],
        help="Country action",
    )
    countries_parser.add_argument(
        "values",
        nargs="*",
        help="Country codes or a preset name",
    )
    countries_parser.set_defaults(func=cmd_countries)

    # 'validate-schema' command
    schema_parser = subparsers.add_parser(
        "validate-schema",
        help="Check addressCountry values in an HTML file's JSON-LD",
    )
    schema_parser.add_argument(
        "file",
        help="HTML file to check",
    )
    schema_parser.set_defaults(func=cmd_validate_schema)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
