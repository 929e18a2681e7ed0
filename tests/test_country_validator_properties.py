"""
Property-based tests for the country registry and validator modules.

Uses Hypothesis to check normalization, list validation, sanitization
fallbacks and schema.org shipping destination output.
"""

from io import StringIO

from hypothesis import given, settings, assume
from hypothesis import strategies as st

from storefront_seo.audit_logger import AuditLogger
from storefront_seo.country_registry import (
    COUNTRY_PRESETS,
    EXTENDED_MARKETS,
    ISO_COUNTRY_CODES,
    get_preset,
    get_preset_names,
)
from storefront_seo.country_validator import (
    CountryValidator,
    sanitize,
    to_shipping_destination,
    validate_code,
    validate_codes,
)
from storefront_seo.enums import CountryValidationErrorCode, LogLevel


# Strategies for generating test data

valid_code_strategy = st.sampled_from(sorted(ISO_COUNTRY_CODES))


@st.composite
def padded_case_variant_strategy(draw) -> str:
    """Generate an ISO code with random case and surrounding whitespace."""
    code = draw(valid_code_strategy)
    chars = [c.lower() if draw(st.booleans()) else c for c in code]
    left = draw(st.sampled_from(["", " ", "  ", "\t"]))
    right = draw(st.sampled_from(["", " ", "\n"]))
    return f"{left}{''.join(chars)}{right}"


@st.composite
def unknown_two_letter_strategy(draw) -> str:
    """Generate two uppercase letters that are not an assigned code."""
    code = draw(st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ", min_size=2, max_size=2))
    assume(code not in ISO_COUNTRY_CODES)
    return code


anything_strategy = st.one_of(
    st.none(),
    st.integers(),
    st.floats(allow_nan=False),
    st.booleans(),
    st.text(max_size=10),
    st.lists(st.one_of(st.text(max_size=4), st.integers()), max_size=60),
    st.dictionaries(st.text(max_size=3), st.integers(), max_size=3),
)


class TestRegistry:
    """Tests for the ISO registry and curated presets."""

    def test_registry_has_249_codes(self) -> None:
        assert len(ISO_COUNTRY_CODES) == 249
        assert all(len(code) == 2 and code.isupper() for code in ISO_COUNTRY_CODES)

    def test_every_preset_validates(self) -> None:
        """Every preset is a duplicate-free list of registry codes."""
        for name, codes in COUNTRY_PRESETS.items():
            result = validate_codes(list(codes))
            assert result.valid, f"{name}: {result.messages}"
            assert result.normalized == list(codes)

    def test_preset_sizes(self) -> None:
        assert len(COUNTRY_PRESETS["CORE_MARKETS"]) == 10
        assert len(EXTENDED_MARKETS) == 26
        assert len(COUNTRY_PRESETS["FULL_COVERAGE"]) == 50
        assert COUNTRY_PRESETS["GCC"] == ("SA", "AE", "QA", "KW", "BH", "OM")
        assert len(COUNTRY_PRESETS["EU"]) == 27

    @given(name=st.sampled_from(sorted(COUNTRY_PRESETS)), upper=st.booleans())
    @settings(max_examples=50)
    def test_get_preset_is_case_insensitive(self, name: str, upper: bool) -> None:
        lookup = name if upper else name.lower()
        assert get_preset(lookup) == COUNTRY_PRESETS[name]

    def test_get_preset_unknown_or_non_string(self) -> None:
        assert get_preset("NOPE") is None
        assert get_preset(42) is None
        assert set(get_preset_names()) == set(COUNTRY_PRESETS)


class TestValidateCodeProperty:
    """
    Property: single code validation normalizes and checks membership.
    """

    @given(raw=padded_case_variant_strategy())
    @settings(max_examples=100)
    def test_valid_codes_normalize(self, raw: str) -> None:
        """Any case/whitespace variant of an ISO code validates to the code."""
        result = validate_code(raw)
        assert result.valid
        assert result.normalized == raw.strip().upper()
        assert result.error is None

    @given(code=unknown_two_letter_strategy())
    @settings(max_examples=100)
    def test_unknown_two_letter_codes_rejected(self, code: str) -> None:
        result = validate_code(code)
        assert not result.valid
        assert result.normalized is None
        assert result.error.code is CountryValidationErrorCode.UNKNOWN_CODE
        assert "ISO 3166-1 alpha-2 registry" in result.error.message

    @given(raw=st.text(alphabet="abcxyzABCXYZ0189 *-", max_size=8).filter(lambda s: len(s.strip()) != 2))
    @settings(max_examples=100)
    def test_wrong_length_rejected(self, raw: str) -> None:
        result = validate_code(raw)
        assert not result.valid
        assert result.error.code is CountryValidationErrorCode.LENGTH_ERROR
        assert f"got {len(raw.strip())}" in result.error.message

    @given(value=st.one_of(st.none(), st.integers(), st.floats(allow_nan=False), st.booleans()))
    @settings(max_examples=50)
    def test_non_strings_rejected(self, value) -> None:
        result = validate_code(value)
        assert not result.valid
        assert result.error.code is CountryValidationErrorCode.TYPE_ERROR
        assert result.error.message.startswith("Invalid type: expected string")

    def test_wildcard_rejected(self) -> None:
        result = validate_code("*")
        assert not result.valid
        assert result.error.code is CountryValidationErrorCode.LENGTH_ERROR


class TestValidateCodesProperty:
    """
    Property: list validation reports duplicates and every invalid element.
    """

    @given(codes=st.lists(valid_code_strategy, min_size=1, max_size=50, unique=True))
    @settings(max_examples=100)
    def test_unique_valid_lists_pass_in_order(self, codes: list[str]) -> None:
        result = validate_codes([c.lower() for c in codes])
        assert result.valid
        assert result.normalized == codes
        assert result.errors == []

    @given(
        codes=st.lists(valid_code_strategy, min_size=1, max_size=20, unique=True),
        data=st.data(),
    )
    @settings(max_examples=100)
    def test_duplicates_reported_with_index(self, codes: list[str], data) -> None:
        duplicate = data.draw(st.sampled_from(codes))
        values = codes + [duplicate.lower()]
        result = validate_codes(values)

        assert not result.valid
        assert result.normalized is None
        duplicate_errors = [
            e for e in result.errors if e.code is CountryValidationErrorCode.DUPLICATE
        ]
        assert len(duplicate_errors) == 1
        assert duplicate_errors[0].index == len(values) - 1
        assert duplicate_errors[0].message == (
            f'Duplicate country code at index {len(values) - 1}: "{duplicate}"'
        )

    @given(
        codes=st.lists(valid_code_strategy, min_size=1, max_size=10),
        bad=st.lists(st.sampled_from(["*", "USA", "", "ZZ", "1"]), min_size=1, max_size=5),
    )
    @settings(max_examples=100)
    def test_all_errors_collected(self, codes: list[str], bad: list[str]) -> None:
        """Every invalid element yields an "Index i: ..." error."""
        values = list(codes) + list(bad)
        result = validate_codes(values)

        assert not result.valid
        indexed = [e for e in result.errors if e.code is not CountryValidationErrorCode.DUPLICATE]
        assert [e.index for e in indexed] == list(range(len(codes), len(values)))
        for error in indexed:
            assert error.message.startswith(f"Index {error.index}: ")

    def test_empty_list(self) -> None:
        result = validate_codes([])
        assert not result.valid
        assert result.errors[0].code is CountryValidationErrorCode.EMPTY_INPUT
        assert result.errors[0].message == "Array is empty - at least one country code required"

        allowed = validate_codes([], allow_empty=True)
        assert allowed.valid
        assert allowed.normalized == []

    def test_too_many(self) -> None:
        codes = sorted(ISO_COUNTRY_CODES)[:51]
        result = validate_codes(codes)
        assert not result.valid
        assert result.errors[0].code is CountryValidationErrorCode.TOO_MANY
        assert result.errors[0].message == "Too many countries: 51 exceeds maximum of 50"

        assert validate_codes(codes, max_count=60).valid

    @given(value=st.one_of(st.none(), st.integers(), st.text(max_size=5), st.dictionaries(st.text(), st.text())))
    @settings(max_examples=50)
    def test_non_sequences_rejected(self, value) -> None:
        result = validate_codes(value)
        assert not result.valid
        assert result.errors[0].code is CountryValidationErrorCode.TYPE_ERROR
        assert result.errors[0].message.startswith("Expected array, got ")


class TestSanitizeProperty:
    """
    Property: sanitize never raises and always returns registry codes.
    """

    @given(value=anything_strategy)
    @settings(max_examples=200, deadline=None)
    def test_sanitize_always_returns_iso_codes(self, value) -> None:
        result = sanitize(value)
        assert isinstance(result, list)
        assert result
        assert all(code in ISO_COUNTRY_CODES for code in result)

    @given(codes=st.lists(valid_code_strategy, min_size=1, max_size=20, unique=True))
    @settings(max_examples=100)
    def test_valid_input_is_kept(self, codes: list[str]) -> None:
        assert sanitize(codes) == codes
        assert sanitize(codes[0].lower()) == [codes[0]]

    def test_invalid_input_falls_back_to_preset(self) -> None:
        assert sanitize("*") == list(COUNTRY_PRESETS["CORE_MARKETS"])
        assert sanitize(["US", "*"], fallback_preset="GCC") == list(COUNTRY_PRESETS["GCC"])
        assert sanitize(None, fallback_preset="NOT_A_PRESET") == list(COUNTRY_PRESETS["CORE_MARKETS"])

    def test_sanitize_returns_fresh_list(self) -> None:
        first = sanitize(None)
        first.append("XX")
        assert "XX" not in sanitize(None)

    def test_fallback_is_logged(self) -> None:
        stream = StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream)
        validator = CountryValidator(logger=logger)

        validator.sanitize("*")

        assert len(logger.entries) == 1
        entry = logger.entries[0]
        assert entry.level is LogLevel.WARN
        assert entry.component == "CountryValidator"
        assert "CORE_MARKETS" in entry.message

    def test_module_helpers_warn_on_stderr(self, capsys) -> None:
        sanitize("*", fallback_preset="GCC")
        to_shipping_destination(42)
        sanitize(["US"])

        err_lines = capsys.readouterr().err.splitlines()
        assert len(err_lines) == 2
        assert all(" WARN [CountryValidator] " in line for line in err_lines)
        assert 'Invalid country code "*", using GCC preset' in err_lines[0]
        assert "Invalid input type, using CORE_MARKETS preset" in err_lines[1]


class TestShippingDestinationProperty:
    """
    Property: shippingDestination output is always a DefinedRegion of
    registry codes.
    """

    @given(value=anything_strategy)
    @settings(max_examples=200, deadline=None)
    def test_output_is_always_iso(self, value) -> None:
        region = to_shipping_destination(value)
        assert region["@type"] == "DefinedRegion"
        assert region["addressCountry"]
        assert all(code in ISO_COUNTRY_CODES for code in region["addressCountry"])

    @given(name=st.sampled_from(sorted(COUNTRY_PRESETS)))
    @settings(max_examples=20)
    def test_preset_names_expand(self, name: str) -> None:
        region = to_shipping_destination(name.lower())
        assert region["addressCountry"] == list(COUNTRY_PRESETS[name])

    def test_single_code(self) -> None:
        assert to_shipping_destination(" de ") == {
            "@type": "DefinedRegion",
            "addressCountry": ["DE"],
        }

    def test_wildcard_never_leaks(self) -> None:
        region = to_shipping_destination("*")
        assert "*" not in region["addressCountry"]
        assert region["addressCountry"] == list(COUNTRY_PRESETS["CORE_MARKETS"])
