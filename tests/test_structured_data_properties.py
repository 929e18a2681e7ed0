"""
Property-based tests for the JSON-LD structured data checker.
"""

import json
from io import StringIO

from hypothesis import given, settings
from hypothesis import strategies as st

from storefront_seo.audit_logger import AuditLogger
from storefront_seo.country_registry import ISO_COUNTRY_CODES
from storefront_seo.structured_data import (
    check_address_country,
    check_html,
    check_product_schema,
    extract_json_ld,
    find_address_country_issues,
)


def page(*blocks) -> str:
    scripts = "".join(
        f'<script type="application/ld+json">{block if isinstance(block, str) else json.dumps(block)}</script>'
        for block in blocks
    )
    return f"<html><head>{scripts}</head><body></body></html>"


def product(address_country) -> dict:
    return {
        "@context": "https://schema.org",
        "@type": "Product",
        "name": "Scarf",
        "offers": {
            "@type": "Offer",
            "price": "10.00",
            "shippingDetails": {
                "@type": "OfferShippingDetails",
                "shippingDestination": {
                    "@type": "DefinedRegion",
                    "addressCountry": address_country,
                },
            },
        },
    }


valid_codes_strategy = st.lists(
    st.sampled_from(sorted(ISO_COUNTRY_CODES)), min_size=1, max_size=20, unique=True
)


class TestAddressCountryProperty:
    """
    Property: valid ISO codes pass, wildcards and unknown codes never do.
    """

    @given(codes=valid_codes_strategy)
    @settings(max_examples=100)
    def test_valid_codes_pass(self, codes) -> None:
        assert check_address_country(codes, "x") == []
        assert check_address_country(codes[0], "x") == []

    @given(codes=st.lists(st.sampled_from(sorted(ISO_COUNTRY_CODES)), max_size=10), position=st.integers(min_value=0))
    @settings(max_examples=100)
    def test_wildcard_always_flagged(self, codes, position: int) -> None:
        codes.insert(position % (len(codes) + 1), "*")
        issues = check_address_country(codes, "Offer.addressCountry")
        assert len(issues) == 1
        assert issues[0].error.startswith("CRITICAL: Wildcard")
        assert issues[0].path == "Offer.addressCountry"

    def test_invalid_entries_reported(self) -> None:
        issues = check_address_country(["US", "USA", "US"], "p")
        errors = [issue.error for issue in issues]
        assert any(error.startswith("Index 1: ") for error in errors)
        assert any(error.startswith("Duplicate country code at index 2") for error in errors)

    def test_invalid_types(self) -> None:
        issues = check_address_country(42, "p")
        assert issues[0].error == "Invalid type: int (expected string or array)"
        assert check_address_country("ZZ", "p")[0].error


class TestSchemaChecks:
    """Tests for Product and generic schema checks."""

    def test_product_wildcard_flagged(self) -> None:
        issues = check_product_schema(product("*"))
        assert len(issues) == 1
        assert issues[0].path == (
            "Product.offers[0].shippingDetails.shippingDestination.addressCountry"
        )

    def test_product_without_offers(self) -> None:
        schema = product(["US"])
        del schema["offers"]
        issues = check_product_schema(schema)
        assert issues[0].error == "Missing required field: offers"

    def test_non_product_ignored_by_product_check(self) -> None:
        assert check_product_schema({"@type": "Organization"}) == []

    def test_nested_address_found(self) -> None:
        schema = {
            "@type": "Organization",
            "address": {"@type": "PostalAddress", "addressCountry": "*"},
            "location": [{"address": {"addressCountry": "DE"}}],
        }
        issues = find_address_country_issues(schema, "Organization")
        assert [i.path for i in issues] == ["Organization.address.addressCountry"]


class TestHtmlChecks:
    """Tests for extracting and checking JSON-LD from HTML."""

    def test_graph_and_arrays_flattened(self) -> None:
        html = page(
            {"@graph": [{"@type": "WebSite"}, {"@type": "Organization"}]},
            [{"@type": "BreadcrumbList"}, "not-an-object"],
        )
        types = [item["@type"] for item in extract_json_ld(html)]
        assert types == ["WebSite", "Organization", "BreadcrumbList"]

    def test_invalid_block_logged_and_skipped(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        html = page("{broken", product(["US", "GB"]))

        items = extract_json_ld(html, logger=logger)

        assert len(items) == 1
        assert "Failed to parse JSON-LD block 0" in logger.entries[0].message

    def test_check_html_flags_wildcard_product(self) -> None:
        html = page(
            product("*"),
            {"@type": "Organization", "address": {"addressCountry": "FR"}},
        )
        issues = check_html(html)
        assert len(issues) == 1
        assert "Wildcard" in issues[0].error

    def test_clean_page(self) -> None:
        assert check_html(page(product(["US", "GB", "FR"]))) == []
