"""
Country Registry - ISO 3166-1 alpha-2 codes and curated market presets.

This module contains:
- The complete ISO 3166-1 alpha-2 registry (249 codes)
- Hand-curated presets used for schema.org shipping destinations
"""

from typing import Optional

# ============================================================================
# ISO 3166-1 alpha-2
# ============================================================================
ISO_COUNTRY_CODES = frozenset({
    "AD", "AE", "AF", "AG", "AI", "AL", "AM", "AO", "AQ", "AR", "AS", "AT",
    "AU", "AW", "AX", "AZ", "BA", "BB", "BD", "BE", "BF", "BG", "BH", "BI",
    "BJ", "BL", "BM", "BN", "BO", "BQ", "BR", "BS", "BT", "BV", "BW", "BY",
    "BZ", "CA", "CC", "CD", "CF", "CG", "CH", "CI", "CK", "CL", "CM", "CN",
    "CO", "CR", "CU", "CV", "CW", "CX", "CY", "CZ", "DE", "DJ", "DK", "DM",
    "DO", "DZ", "EC", "EE", "EG", "EH", "ER", "ES", "ET", "FI", "FJ", "FK",
    "FM", "FO", "FR", "GA", "GB", "GD", "GE", "GF", "GG", "GH", "GI", "GL",
    "GM", "GN", "GP", "GQ", "GR", "GS", "GT", "GU", "GW", "GY", "HK", "HM",
    "HN", "HR", "HT", "HU", "ID", "IE", "IL", "IM", "IN", "IO", "IQ", "IR",
    "IS", "IT", "JE", "JM", "JO", "JP", "KE", "KG", "KH", "KI", "KM", "KN",
    "KP", "KR", "KW", "KY", "KZ", "LA", "LB", "LC", "LI", "LK", "LR", "LS",
    "LT", "LU", "LV", "LY", "MA", "MC", "MD", "ME", "MF", "MG", "MH", "MK",
    "ML", "MM", "MN", "MO", "MP", "MQ", "MR", "MS", "MT", "MU", "MV", "MW",
    "MX", "MY", "MZ", "NA", "NC", "NE", "NF", "NG", "NI", "NL", "NO", "NP",
    "NR", "NU", "NZ", "OM", "PA", "PE", "PF", "PG", "PH", "PK", "PL", "PM",
    "PN", "PR", "PS", "PT", "PW", "PY", "QA", "RE", "RO", "RS", "RU", "RW",
    "SA", "SB", "SC", "SD", "SE", "SG", "SH", "SI", "SJ", "SK", "SL", "SM",
    "SN", "SO", "SR", "SS", "ST", "SV", "SX", "SY", "SZ", "TC", "TD", "TF",
    "TG", "TH", "TJ", "TK", "TL", "TM", "TN", "TO", "TR", "TT", "TV", "TW",
    "TZ", "UA", "UG", "UM", "US", "UY", "UZ", "VA", "VC", "VE", "VG", "VI",
    "VN", "VU", "WF", "WS", "YE", "YT", "ZA", "ZM", "ZW",
})


# ============================================================================
# PRESETS
# ============================================================================

# Tier 1: core markets
CORE_MARKETS = ("TN", "US", "GB", "CA", "AU", "SA", "AE", "FR", "DE", "MA")

# Tier 2: extended markets
EXTENDED_MARKETS = (
    "TN", "US", "GB", "CA", "AU", "FR", "DE",
    "SA", "AE", "EG", "MA", "DZ", "QA", "KW", "BH",
    "TR", "PK", "BD", "ID", "MY", "SG",
    "NL", "BE", "SE", "NO", "DK",
)

# Tier 3: full coverage (50 countries)
FULL_COVERAGE = (
    "US", "CA", "BR", "MX", "AR",
    "GB", "FR", "DE", "IT", "ES", "NL", "BE", "SE", "NO", "DK", "FI", "PL", "AT", "CH", "IE",
    "TN", "SA", "AE", "EG", "MA", "DZ", "QA", "KW", "BH", "OM", "JO", "LB", "IQ", "YE", "LY",
    "TR", "PK", "BD", "IN", "ID", "MY", "SG", "AU", "NZ", "TH", "PH",
    "ZA", "NG", "KE", "GH",
)

ARAB_WORLD = (
    "SA", "AE", "EG", "MA", "TN", "DZ", "QA", "KW",
    "BH", "OM", "JO", "LB", "IQ", "SY", "YE", "LY", "SD", "MR",
)

GCC = ("SA", "AE", "QA", "KW", "BH", "OM")

# EU member states
EU = (
    "AT", "BE", "BG", "HR", "CY", "CZ", "DK", "EE", "FI", "FR",
    "DE", "GR", "HU", "IE", "IT", "LV", "LT", "LU", "MT", "NL",
    "PL", "PT", "RO", "SK", "SI", "ES", "SE",
)

DEFAULT_PRESET = "CORE_MARKETS"

COUNTRY_PRESETS: dict[str, tuple[str, ...]] = {
    "CORE_MARKETS": CORE_MARKETS,
    "EXTENDED_MARKETS": EXTENDED_MARKETS,
    "FULL_COVERAGE": FULL_COVERAGE,
    "ARAB_WORLD": ARAB_WORLD,
    "GCC": GCC,
    "EU": EU,
}


def get_preset(name: str) -> Optional[tuple[str, ...]]:
    """
    Look up a preset by name (case-insensitive).

    Args:
        name: Preset name, e.g. 'gcc' or 'CORE_MARKETS'

    Returns:
        The preset's codes, or None if no such preset exists
    """
    if not isinstance(name, str):
        return None
    return COUNTRY_PRESETS.get(name.strip().upper())


def get_preset_names() -> list[str]:
    """Get all preset names in definition order."""
    return list(COUNTRY_PRESETS.keys())
