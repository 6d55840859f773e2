from __future__ import annotations

import re

# One pattern per VIES jurisdiction, applied to the normalized identifier
# without its country prefix.
VAT_PATTERNS: dict[str, re.Pattern] = {
    'AT': re.compile(r'U[0-9]{8}'),
    'BE': re.compile(r'[0-9]{10}'),
    'BG': re.compile(r'[0-9]{9,10}'),
    'CY': re.compile(r'[0-9]{8}[A-Z]'),
    'CZ': re.compile(r'[0-9]{8,10}'),
    'DE': re.compile(r'[0-9]{9}'),
    'DK': re.compile(r'[0-9]{8}'),
    'EE': re.compile(r'[0-9]{9}'),
    'EL': re.compile(r'[0-9]{9}'),
    'ES': re.compile(r'[0-9A-Z][0-9]{7}[0-9A-Z]'),
    'FI': re.compile(r'[0-9]{8}'),
    'FR': re.compile(r'[0-9A-Z]{2}[0-9]{9}'),
    'HR': re.compile(r'[0-9]{11}'),
    'HU': re.compile(r'[0-9]{8}'),
    'IE': re.compile(r'[0-9][A-Z0-9+*][0-9]{5}[A-Z]'),
    'IT': re.compile(r'[0-9]{11}'),
    'LT': re.compile(r'(?:[0-9]{9}|[0-9]{12})'),
    'LU': re.compile(r'[0-9]{8}'),
    'LV': re.compile(r'[0-9]{11}'),
    'MT': re.compile(r'[0-9]{8}'),
    'NL': re.compile(r'[0-9]{9}B[0-9]{2}'),
    'PL': re.compile(r'[0-9]{10}'),
    'PT': re.compile(r'[0-9]{9}'),
    'RO': re.compile(r'[0-9]{2,10}'),
    'SE': re.compile(r'[0-9]{12}'),
    'SI': re.compile(r'[0-9]{8}'),
    'SK': re.compile(r'[0-9]{10}'),
}

JURISDICTION_NAMES = {
    'AT': 'Austria',
    'BE': 'Belgium',
    'BG': 'Bulgaria',
    'CY': 'Cyprus',
    'CZ': 'Czech Republic',
    'DE': 'Germany',
    'DK': 'Denmark',
    'EE': 'Estonia',
    'EL': 'Greece',
    'ES': 'Spain',
    'FI': 'Finland',
    'FR': 'France',
    'HR': 'Croatia',
    'HU': 'Hungary',
    'IE': 'Ireland',
    'IT': 'Italy',
    'LT': 'Lithuania',
    'LU': 'Luxembourg',
    'LV': 'Latvia',
    'MT': 'Malta',
    'NL': 'Netherlands',
    'PL': 'Poland',
    'PT': 'Portugal',
    'RO': 'Romania',
    'SE': 'Sweden',
    'SI': 'Slovenia',
    'SK': 'Slovakia',
}

# ISO 3166 codes that VIES spells differently.
JURISDICTION_ALIASES = {
    'GR': 'EL',
}

_SEPARATOR_PATTERN = re.compile(r'[\s.\-]+')


def normalize_jurisdiction(value: str | None) -> str:
    code = str(value or '').strip().upper()
    return JURISDICTION_ALIASES.get(code, code)


def normalize_identifier(value: str | None) -> str:
    return _SEPARATOR_PATTERN.sub('', str(value or '')).upper()


def is_supported_jurisdiction(jurisdiction: str | None) -> bool:
    return normalize_jurisdiction(jurisdiction) in VAT_PATTERNS


def validate_format(jurisdiction: str | None, raw_identifier: str | None) -> bool:
    pattern = VAT_PATTERNS.get(normalize_jurisdiction(jurisdiction))
    if pattern is None:
        return False
    return pattern.fullmatch(normalize_identifier(raw_identifier)) is not None


def expected_format(jurisdiction: str | None) -> str | None:
    pattern = VAT_PATTERNS.get(normalize_jurisdiction(jurisdiction))
    return f'^{pattern.pattern}$' if pattern else None


def supported_jurisdictions() -> list[dict[str, str]]:
    return [
        {'code': code, 'name': JURISDICTION_NAMES[code], 'pattern': expected_format(code)}
        for code in sorted(VAT_PATTERNS)
    ]
