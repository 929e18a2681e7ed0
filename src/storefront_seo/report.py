"""
Report rendering and persistence.

Both audits produce two artifacts written side by side:
- <prefix>-<YYYY-MM-DDTHH-MM-SS>.json, the full machine-readable result
- <prefix>-<YYYY-MM-DDTHH-MM-SS>.txt, a fixed-width human-readable report
"""

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from .enums import Priority
from .local_auditor import LocalAuditReport
from .models import AuditRecord, AuditReport


REPORT_WIDTH = 80
LOCAL_REPORT_WIDTH = 100


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return _jsonable(asdict(value))
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, Path):
        return str(value)
    return value


def file_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp usable in file names, e.g. 2025-11-18T10-04-59."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S")


def record_to_dict(record: AuditRecord) -> dict:
    """Flatten one audit record for the JSON report."""
    result = record.classification
    fix = record.fix
    return {
        "url": record.url,
        "final_url": record.final_url,
        "status_chain": [
            {"url": step.url, "status": step.status_code, "location": step.location}
            for step in record.status_chain
        ],
        "redirect_count": record.redirect_count,
        "source": _jsonable(record.source),
        "classification": result.classification.value,
        "reason": result.reason,
        "intentional": result.intentional,
        "normalization": list(result.normalization),
        "seo_impact": result.seo_impact or "NONE",
        "action_required": result.action_required or "NONE",
        "proposed_fix": fix.summary,
        "proposed_fixes": _jsonable(fix.suggestions),
        "priority": fix.priority.value,
        "risk": fix.risk.value,
        "error": record.error,
        "timestamp": record.timestamp,
    }


def report_to_dict(report: AuditReport) -> dict:
    """Convert an audit report to JSON-serializable data."""
    return {
        "timestamp": report.timestamp,
        "domain": report.domain,
        "total_urls": report.total_urls,
        "interrupted": report.interrupted,
        "clean_urls": [record_to_dict(r) for r in report.clean_urls],
        "redirect_issues": [record_to_dict(r) for r in report.redirect_issues],
        "errors": _jsonable(report.errors),
    }


def render_text_report(report: AuditReport) -> str:
    """Render the live audit as a fixed-width text report."""
    heavy = "═" * REPORT_WIDTH
    light = "─" * REPORT_WIDTH
    lines = [
        heavy,
        f"  REDIRECT ANALYSIS REPORT - {report.domain}",
        heavy,
        "",
        f"Analysis Date: {report.timestamp}",
        f"Total URLs Checked: {report.total_urls}",
        f"Clean URLs (200 OK): {len(report.clean_urls)}",
        f"URLs with Redirects: {len(report.redirect_issues)}",
        f"Errors: {len(report.errors)}",
    ]
    if report.interrupted:
        lines.append("Status: INTERRUPTED (partial results)")
    lines.append("")

    if report.redirect_issues:
        lines += [light, "REDIRECT ISSUES FOUND:", light, ""]
        for index, issue in enumerate(report.redirect_issues, 1):
            result = issue.classification
            lines += [
                f"{index}. {issue.url}",
                f"   Classification: {result.classification.value}",
                f"   Reason: {result.reason}",
                f"   Redirect Count: {issue.redirect_count}",
                f"   Final URL: {issue.final_url}",
                f"   SEO Impact: {result.seo_impact or 'NONE'}",
                f"   Action Required: {result.action_required or 'NONE'}",
                f"   Likely Source: {issue.source.source.value} ({issue.source.fix_location})",
            ]
            if issue.error:
                lines.append(f"   Chain Error: {issue.error}")
            if issue.fix.suggestions:
                lines.append("   Recommended Fixes:")
                for suggestion in issue.fix.suggestions:
                    lines.append(f"     - {suggestion.action.value}: {suggestion.description}")
                    lines.append(f"       Risk: {suggestion.risk.value}")
            lines.append("")

    if report.clean_urls:
        lines += [light, "CLEAN URLs (No Issues):", light, ""]
        lines += [f"  ✅ {record.url}" for record in report.clean_urls]
        lines.append("")

    if report.errors:
        lines += [light, "ERRORS:", light, ""]
        lines += [f"  ❌ {error.url or error.step}: {error.error}" for error in report.errors]
        lines.append("")

    lines += [heavy, "END OF REPORT", heavy]
    return "\n".join(lines) + "\n"


def local_report_to_dict(report: LocalAuditReport) -> dict:
    """Convert a local audit report to JSON-serializable data."""
    return {
        "timestamp": report.timestamp,
        "domain": report.domain,
        "analysis": {
            "route_config": _jsonable(report.route_config),
            "html_redirects": _jsonable(report.html_redirects),
            "javascript_redirects": _jsonable(report.javascript_redirects),
            "sitemap_urls": _jsonable(report.sitemap_urls),
            "recommendations": _jsonable(report.recommendations),
        },
    }


def render_local_text_report(report: LocalAuditReport) -> str:
    """Render the local audit as a fixed-width text report."""
    heavy = "═" * LOCAL_REPORT_WIDTH
    light = "─" * LOCAL_REPORT_WIDTH
    lines = [
        heavy,
        f"  REDIRECT CONFIGURATION AUDIT - {report.domain} (Local Analysis)",
        heavy,
        "",
        f"Analysis Date: {report.timestamp}",
        f"Domain: {report.domain}",
        "",
        light,
        "ROUTE CONFIGURATION (vercel.json)",
        light,
    ]

    config = report.route_config
    if config.error:
        lines += [f"Could not read configuration: {config.error}", ""]
    else:
        lines += [
            f"Route Rules: {len(config.route_rules)}",
            f"Explicit Redirects: {len(config.redirect_rules)}",
            f"Potential Issues: {len(config.potential_issues)}",
            "",
        ]
        if config.potential_issues:
            lines.append("Issues Found:")
            for index, issue in enumerate(config.potential_issues, 1):
                lines.append(f"  {index}. {issue.issue}")
                if issue.destination:
                    lines.append(f"     Destination: {issue.destination}")
                if issue.impact:
                    lines.append(f"     Impact: {issue.impact}")
            lines.append("")

    lines += [light, "HTML META REFRESH REDIRECTS", light]
    if report.html_redirects:
        for index, redirect in enumerate(report.html_redirects, 1):
            lines += [
                f"  {index}. File: {redirect.file}",
                f"     Type: {redirect.type}",
                f"     Target: {redirect.target}",
                f"     Severity: {redirect.severity}",
                f"     Issue: {redirect.issue}",
                f"     Fix: {redirect.fix}",
                "",
            ]
    else:
        lines += ["✅ No meta refresh redirects found", ""]

    lines += [light, "JAVASCRIPT REDIRECTS", light]
    if report.javascript_redirects:
        high = [r for r in report.javascript_redirects if r.severity == "HIGH"]
        low = [r for r in report.javascript_redirects if r.severity != "HIGH"]
        lines += [
            f"Total: {len(report.javascript_redirects)}",
            f"High Severity (Unconditional): {len(high)}",
            f"Low Severity (Conditional/User-triggered): {len(low)}",
            "",
        ]
        if high:
            lines.append("HIGH SEVERITY (Action Required):")
            for index, redirect in enumerate(high, 1):
                lines += [
                    f"  {index}. {redirect.file}:{redirect.line}",
                    f"     Target: {redirect.target}",
                    f"     Code: {redirect.code}",
                    f"     Issue: {redirect.issue}",
                    f"     Recommendation: {redirect.recommendation}",
                    "",
                ]
        if low:
            lines.append("LOW SEVERITY (Likely Acceptable):")
            for index, redirect in enumerate(low, 1):
                lines.append(f"  {index}. {redirect.file}:{redirect.line} - {redirect.target}")
            lines.append("")
    else:
        lines += ["✅ No JavaScript redirects found", ""]

    lines += [light, "SITEMAP ANALYSIS", light, f"Total URLs: {len(report.sitemap_urls)}"]
    if report.sitemap_urls:
        protocols: dict[str, int] = {}
        for entry in report.sitemap_urls:
            protocols[entry.protocol] = protocols.get(entry.protocol, 0) + 1
        lines += [f"Protocols: {json.dumps(protocols)}", "", "URLs:"]
        for entry in report.sitemap_urls:
            icon = "✅" if entry.protocol == "https" else "⚠️"
            lines.append(f"  {icon} {entry.url}")
        lines.append("")

    lines += [light, "RECOMMENDATIONS", light]
    for priority in (Priority.HIGH, Priority.MEDIUM, Priority.LOW):
        selected = [r for r in report.recommendations if r.priority is priority]
        if not selected:
            continue
        lines += ["", f"{priority.value} PRIORITY ({len(selected)}):"]
        for index, rec in enumerate(selected, 1):
            lines += [
                f"  {index}. [{rec.category.upper()}] {rec.issue}",
                f"     Recommendation: {rec.recommendation}",
            ]
            if rec.file:
                lines.append(f"     File: {rec.file}")
            if rec.test_command:
                lines.append(f"     Test: {rec.test_command}")
            lines.append("")

    lines += [heavy, "END OF REPORT", heavy]
    return "\n".join(lines) + "\n"


def save_reports(
    report: Union[AuditReport, LocalAuditReport],
    output_dir: Union[str, Path],
    prefix: str,
    now: Optional[datetime] = None,
) -> tuple[Path, Path]:
    """
    Write the JSON and text artifacts of a report.

    Args:
        report: Live or local audit report
        output_dir: Directory to write into (created if missing)
        prefix: File name prefix, e.g. "redirect-analysis"
        now: Time used in the file names (defaults to the current UTC time)

    Returns:
        (json_path, text_path)
    """
    if isinstance(report, LocalAuditReport):
        data = local_report_to_dict(report)
        text = render_local_text_report(report)
    else:
        data = report_to_dict(report)
        text = render_text_report(report)

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    stamp = file_timestamp(now)
    json_path = output_dir / f"{prefix}-{stamp}.json"
    text_path = output_dir / f"{prefix}-{stamp}.txt"

    json_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    text_path.write_text(text, encoding="utf-8")

    return json_path, text_path
