"""
Structured data checker.

Validates schema.org JSON-LD embedded in storefront pages: every
addressCountry value must be a valid ISO 3166-1 alpha-2 code (or list of
codes). Merchant listings reject wildcards such as "*".
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

from bs4 import BeautifulSoup

from .audit_logger import AuditLogger
from .country_validator import validate_code, validate_codes


WILDCARD = "*"


@dataclass
class StructuredDataIssue:
    """A problem found at a path inside a JSON-LD document."""

    path: str
    error: str
    fix: str


def _schema_type(item: dict) -> str:
    schema_type = item.get("@type", "")
    if isinstance(schema_type, list):
        schema_type = schema_type[0] if schema_type else ""
    return schema_type if isinstance(schema_type, str) else ""


def extract_json_ld(html: str, logger: Optional[AuditLogger] = None) -> list[dict]:
    """
    Extract JSON-LD objects from an HTML document.

    Top-level arrays and @graph containers are flattened. Blocks that are
    not valid JSON are logged and skipped.

    Args:
        html: HTML document text
        logger: Optional logger receiving parse failures

    Returns:
        JSON-LD objects in document order
    """
    soup = BeautifulSoup(html, "lxml")
    results = []

    for index, script in enumerate(soup.find_all("script", attrs={"type": "application/ld+json"})):
        try:
            data = json.loads(script.string or "")
        except (json.JSONDecodeError, TypeError) as e:
            if logger:
                logger.warn("StructuredData", f"Failed to parse JSON-LD block {index}: {e}")
            continue

        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                continue
            graph = item.get("@graph")
            if isinstance(graph, list):
                results.extend(node for node in graph if isinstance(node, dict))
            else:
                results.append(item)

    return results


def check_address_country(value: Any, path: str) -> list[StructuredDataIssue]:
    """
    Check one addressCountry value.

    Args:
        value: The addressCountry value (string, list, or anything else)
        path: Location of the value, used in issue messages

    Returns:
        Issues found (empty when the value is valid)
    """
    if value == WILDCARD or (isinstance(value, list) and WILDCARD in value):
        return [StructuredDataIssue(
            path=path,
            error='CRITICAL: Wildcard "*" is not a valid ISO 3166-1 alpha-2 code',
            fix='Replace with valid country codes like ["US", "GB", "FR"] or use CORE_MARKETS preset',
        )]

    if isinstance(value, list):
        result = validate_codes(value)
        return [
            StructuredDataIssue(
                path=path,
                error=message,
                fix="Use valid ISO 3166-1 alpha-2 codes (2 uppercase letters)",
            )
            for message in result.messages
        ]

    if isinstance(value, str):
        result = validate_code(value)
        if result.valid:
            return []
        return [StructuredDataIssue(
            path=path,
            error=result.error.message,
            fix="Use valid ISO 3166-1 alpha-2 code (2 uppercase letters)",
        )]

    return [StructuredDataIssue(
        path=path,
        error=f"Invalid type: {type(value).__name__} (expected string or array)",
        fix="Use string values for country codes",
    )]


def find_address_country_issues(obj: Any, path: str = "") -> list[StructuredDataIssue]:
    """Recursively check every addressCountry inside a JSON-LD object."""
    issues: list[StructuredDataIssue] = []

    if isinstance(obj, list):
        for index, item in enumerate(obj):
            issues.extend(find_address_country_issues(item, f"{path}[{index}]"))
        return issues

    if not isinstance(obj, dict):
        return issues

    if "addressCountry" in obj:
        issues.extend(check_address_country(obj["addressCountry"], f"{path}.addressCountry"))

    for key, value in obj.items():
        if key == "addressCountry":
            continue
        child_path = f"{path}.{key}" if path else key
        if isinstance(value, (dict, list)):
            issues.extend(find_address_country_issues(value, child_path))

    return issues


def check_product_schema(schema: dict) -> list[StructuredDataIssue]:
    """
    Check a Product object: offers must exist and every offer's shipping
    destination must name valid countries.
    """
    if _schema_type(schema) != "Product":
        return []

    offers = schema.get("offers")
    if not offers:
        return [StructuredDataIssue(
            path="Product",
            error="Missing required field: offers",
            fix="Add offers field with at least one Offer",
        )]

    if not isinstance(offers, list):
        offers = [offers]

    issues = []
    for index, offer in enumerate(offers):
        if not isinstance(offer, dict):
            continue
        shipping = offer.get("shippingDetails")
        shipping_list = shipping if isinstance(shipping, list) else [shipping]
        for details in shipping_list:
            if not isinstance(details, dict):
                continue
            destination = details.get("shippingDestination")
            if isinstance(destination, dict) and "addressCountry" in destination:
                issues.extend(check_address_country(
                    destination["addressCountry"],
                    f"Product.offers[{index}].shippingDetails.shippingDestination.addressCountry",
                ))
    return issues


def check_schema(schema: dict) -> list[StructuredDataIssue]:
    """Check one JSON-LD object according to its @type."""
    if _schema_type(schema) == "Product":
        return check_product_schema(schema)
    return find_address_country_issues(schema, _schema_type(schema) or "Schema")


def check_html(html: str, logger: Optional[AuditLogger] = None) -> list[StructuredDataIssue]:
    """
    Check every JSON-LD block of an HTML document.

    Returns:
        All issues found, in block order
    """
    issues = []
    for schema in extract_json_ld(html, logger=logger):
        issues.extend(check_schema(schema))
    return issues
