"""
Country code validation and sanitization module.

Guarantees that any country value exposed in shipping or schema.org output
is either a verified ISO 3166-1 alpha-2 code (or list of them) or a safe
curated preset, never a silently invalid value such as a wildcard "*".
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from storefront_seo.audit_logger import AuditLogger
from storefront_seo.country_registry import (
    COUNTRY_PRESETS,
    DEFAULT_PRESET,
    ISO_COUNTRY_CODES,
    get_preset,
)
from storefront_seo.enums import CountryValidationErrorCode, LogLevel


DEFAULT_MAX_COUNT = 50


@dataclass
class CountryValidationError:
    """Structured error information for country code validation failures."""

    code: CountryValidationErrorCode
    message: str
    details: dict = field(default_factory=dict)
    index: Optional[int] = None


@dataclass
class CountryValidationResult:
    """Result of validating a single country code."""

    valid: bool
    normalized: Optional[str]
    error: Optional[CountryValidationError]


@dataclass
class CountryListValidationResult:
    """Result of validating a list of country codes."""

    valid: bool
    normalized: Optional[list[str]]
    errors: list[CountryValidationError] = field(default_factory=list)

    @property
    def messages(self) -> list[str]:
        return [error.message for error in self.errors]


class CountryValidator:
    """
    Validates and sanitizes ISO 3166-1 alpha-2 country codes.

    Handles:
    - Normalization (trim, uppercase) and registry membership
    - List validation with duplicate and size checks
    - Fallback to curated presets when input is unusable
    - schema.org DefinedRegion generation
    """

    COMPONENT = "CountryValidator"

    def __init__(self, logger: Optional[AuditLogger] = None) -> None:
        """
        Initialize validator.

        Args:
            logger: Optional logger receiving fallback warnings
        """
        self._logger = logger

    def validate_code(self, value: Any) -> CountryValidationResult:
        """
        Validate and normalize one country code.

        Args:
            value: Raw country code (expected to be a string)

        Returns:
            CountryValidationResult with the normalized code or an error
        """
        if not isinstance(value, str):
            return CountryValidationResult(
                valid=False,
                normalized=None,
                error=CountryValidationError(
                    code=CountryValidationErrorCode.TYPE_ERROR,
                    message=f"Invalid type: expected string, got {type(value).__name__}",
                    details={"type": type(value).__name__},
                ),
            )

        normalized = value.strip().upper()

        if len(normalized) != 2:
            return CountryValidationResult(
                valid=False,
                normalized=None,
                error=CountryValidationError(
                    code=CountryValidationErrorCode.LENGTH_ERROR,
                    message=(
                        f"Invalid length: expected 2 characters, got {len(normalized)}. "
                        f'Value: "{value}"'
                    ),
                    details={"raw_input": value, "length": len(normalized)},
                ),
            )

        if normalized not in ISO_COUNTRY_CODES:
            return CountryValidationResult(
                valid=False,
                normalized=None,
                error=CountryValidationError(
                    code=CountryValidationErrorCode.UNKNOWN_CODE,
                    message=(
                        f'Invalid country code: "{normalized}" is not in '
                        f"ISO 3166-1 alpha-2 registry"
                    ),
                    details={"raw_input": value, "normalized": normalized},
                ),
            )

        return CountryValidationResult(valid=True, normalized=normalized, error=None)

    def validate_codes(
        self,
        values: Any,
        max_count: int = DEFAULT_MAX_COUNT,
        allow_empty: bool = False,
    ) -> CountryListValidationResult:
        """
        Validate a sequence of country codes.

        Every element is checked even after a failure so the caller gets
        full diagnostics.

        Args:
            values: List or tuple of raw codes
            max_count: Maximum number of codes allowed
            allow_empty: Whether an empty sequence is acceptable

        Returns:
            CountryListValidationResult with the deduplicated, order-preserving
            codes, or every collected error in input order
        """
        if not isinstance(values, (list, tuple)):
            return CountryListValidationResult(
                valid=False,
                normalized=None,
                errors=[CountryValidationError(
                    code=CountryValidationErrorCode.TYPE_ERROR,
                    message=f"Expected array, got {type(values).__name__}",
                    details={"type": type(values).__name__},
                )],
            )

        if not values:
            if allow_empty:
                return CountryListValidationResult(valid=True, normalized=[], errors=[])
            return CountryListValidationResult(
                valid=False,
                normalized=None,
                errors=[CountryValidationError(
                    code=CountryValidationErrorCode.EMPTY_INPUT,
                    message="Array is empty - at least one country code required",
                )],
            )

        errors: list[CountryValidationError] = []

        if len(values) > max_count:
            errors.append(CountryValidationError(
                code=CountryValidationErrorCode.TOO_MANY,
                message=f"Too many countries: {len(values)} exceeds maximum of {max_count}",
                details={"count": len(values), "max_count": max_count},
            ))

        normalized: list[str] = []
        seen: set[str] = set()

        for index, value in enumerate(values):
            result = self.validate_code(value)

            if not result.valid:
                errors.append(CountryValidationError(
                    code=result.error.code,
                    message=f"Index {index}: {result.error.message}",
                    details=result.error.details,
                    index=index,
                ))
            elif result.normalized in seen:
                errors.append(CountryValidationError(
                    code=CountryValidationErrorCode.DUPLICATE,
                    message=f'Duplicate country code at index {index}: "{result.normalized}"',
                    details={"normalized": result.normalized},
                    index=index,
                ))
            else:
                normalized.append(result.normalized)
                seen.add(result.normalized)

        if errors:
            return CountryListValidationResult(valid=False, normalized=None, errors=errors)

        return CountryListValidationResult(valid=True, normalized=normalized, errors=[])

    def sanitize(self, value: Any, fallback_preset: str = DEFAULT_PRESET) -> list[str]:
        """
        Turn arbitrary input into a list of valid country codes.

        Never raises: unusable input yields the fallback preset (or
        CORE_MARKETS when the fallback name is unknown).

        Args:
            value: A code, a list/tuple of codes, or anything else
            fallback_preset: Preset returned when validation fails

        Returns:
            A new list of ISO country codes
        """
        if isinstance(value, (list, tuple)):
            result = self.validate_codes(value)
            if result.valid:
                return result.normalized
            self._warn(
                f"Invalid country codes, using {fallback_preset} preset",
                {"errors": result.messages, "fallback": fallback_preset},
            )
            return self._fallback(fallback_preset)

        if isinstance(value, str):
            result = self.validate_code(value)
            if result.valid:
                return [result.normalized]
            self._warn(
                f'Invalid country code "{value}", using {fallback_preset} preset',
                {"error": result.error.message, "fallback": fallback_preset},
            )
            return self._fallback(fallback_preset)

        self._warn(
            f"Invalid input type, using {fallback_preset} preset",
            {"type": type(value).__name__, "fallback": fallback_preset},
        )
        return self._fallback(fallback_preset)

    def to_shipping_destination(self, value: Any) -> dict:
        """
        Build a schema.org DefinedRegion for shippingDestination.

        A string naming a preset (any case) selects that preset.

        Args:
            value: Country codes, a single code, or a preset name

        Returns:
            {"@type": "DefinedRegion", "addressCountry": [...]}
        """
        if isinstance(value, str):
            preset = get_preset(value)
            if preset is not None:
                value = list(preset)

        return {
            "@type": "DefinedRegion",
            "addressCountry": self.sanitize(value),
        }

    def _fallback(self, preset_name: str) -> list[str]:
        preset = COUNTRY_PRESETS.get(preset_name)
        if preset is None:
            preset = COUNTRY_PRESETS[DEFAULT_PRESET]
        return list(preset)

    def _warn(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.warn(self.COMPONENT, message, data)


# Module-level helpers report fallbacks on stderr
_default_validator = CountryValidator(
    logger=AuditLogger(output_format="text", min_level=LogLevel.WARN),
)


def validate_code(value: Any) -> CountryValidationResult:
    """Validate one country code with the default validator."""
    return _default_validator.validate_code(value)


def validate_codes(
    values: Any,
    max_count: int = DEFAULT_MAX_COUNT,
    allow_empty: bool = False,
) -> CountryListValidationResult:
    """Validate a list of country codes with the default validator."""
    return _default_validator.validate_codes(values, max_count=max_count, allow_empty=allow_empty)


def sanitize(value: Any, fallback_preset: str = DEFAULT_PRESET) -> list[str]:
    """Sanitize country input with the default validator."""
    return _default_validator.sanitize(value, fallback_preset=fallback_preset)


def to_shipping_destination(value: Any) -> dict:
    """Build a DefinedRegion with the default validator."""
    return _default_validator.to_shipping_destination(value)
