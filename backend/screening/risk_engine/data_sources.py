from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import os
import threading
from typing import Any

from django.conf import settings

from screening.risk_engine.checks.base import normalize_name

logger = logging.getLogger(__name__)

DEFAULT_LIST_VERSION = '2024-10-12'

DEFAULT_SANCTIONS_LISTS: dict[str, dict[str, Any]] = {
    'ofac': {
        'label': 'OFAC SDN List',
        'version': DEFAULT_LIST_VERSION,
        'entities': [
            'SANCTIONED COMPANY LTD',
            'BLOCKED CORPORATION',
            'EMBARGO TRADING LLC',
            'RESTRICTED PARTNERS INC',
            'DENIED PERSONS COMPANY',
            'PROHIBITED ENTITY SA',
        ],
    },
    'eu': {
        'label': 'EU Consolidated List',
        'version': DEFAULT_LIST_VERSION,
        'entities': [
            'EMBARGO TRADING LLC',
            'PROHIBITED ENTITY SA',
        ],
    },
    'un': {
        'label': 'UN Security Council Sanctions List',
        'version': DEFAULT_LIST_VERSION,
        'entities': [],
    },
    'uk': {
        'label': 'UK HM Treasury Sanctions List',
        'version': DEFAULT_LIST_VERSION,
        'entities': [
            'SANCTIONED COMPANY LTD',
        ],
    },
}

DEFAULT_HIGH_RISK_KEYWORDS = (
    'NUCLEAR',
    'WEAPONS',
    'MILITARY',
    'DEFENSE',
    'SANCTIONS',
    'EMBARGO',
    'RESTRICTED',
    'PROHIBITED',
    'DENIED',
    'BLOCKED',
)

DEFAULT_HIGH_RISK_COUNTRIES = ('IR', 'KP', 'SY', 'CU')
DEFAULT_MEDIUM_RISK_COUNTRIES = ('AF', 'BY', 'MM', 'RU', 'VE', 'YE')

DEFAULT_PEP_INDICATORS = (
    'MINISTER',
    'MINISTRY',
    'SENATOR',
    'GOVERNOR',
    'AMBASSADOR',
    'PARLIAMENT',
    'PRESIDENTIAL',
)

DEFAULT_MEDIA_SOURCE = 'Financial Times'


class ScreeningDataError(Exception):
    pass


@dataclass(frozen=True)
class SanctionsList:
    key: str
    label: str
    version: str
    entities: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ScreeningData:
    sanctions_lists: tuple[SanctionsList, ...]
    high_risk_keywords: tuple[str, ...]
    high_risk_countries: frozenset[str]
    medium_risk_countries: frozenset[str]
    pep_indicators: tuple[str, ...]
    media_source: str = DEFAULT_MEDIA_SOURCE
    origin: str = 'settings'

    def sanctions_list(self, key: str) -> SanctionsList | None:
        return next((item for item in self.sanctions_lists if item.key == key), None)


def _string_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ScreeningDataError(f'{field_name} must be a list of strings.')
    return list(value)


def _normalized_terms(values: Any, field_name: str) -> tuple[str, ...]:
    terms = []
    for value in _string_list(values, field_name):
        term = normalize_name(value)
        if term and term not in terms:
            terms.append(term)
    return tuple(terms)


def _country_codes(values: Any, field_name: str) -> frozenset[str]:
    return frozenset(item.strip().upper() for item in _string_list(values, field_name) if item.strip())


def _optional_text(payload: dict[str, Any], key: str, field_name: str) -> str | None:
    value = payload.get(key)
    if value is None or value == '':
        return None
    if not isinstance(value, str):
        raise ScreeningDataError(f'{field_name}.{key} must be a string.')
    return value


def build_screening_data(config: dict[str, Any] | None = None, origin: str = 'settings') -> ScreeningData:
    config = dict(config or {})

    raw_lists = config.get('sanctions_lists') or DEFAULT_SANCTIONS_LISTS
    if not isinstance(raw_lists, dict):
        raise ScreeningDataError('sanctions_lists must be an object keyed by list identifier.')

    sanctions_lists = []
    for key, payload in raw_lists.items():
        field_name = f'sanctions_lists.{key}'
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ScreeningDataError(f'{field_name} must be an object with an "entities" list.')
        sanctions_lists.append(
            SanctionsList(
                key=str(key).lower(),
                label=_optional_text(payload, 'label', field_name) or str(key).upper(),
                version=_optional_text(payload, 'version', field_name) or DEFAULT_LIST_VERSION,
                entities=frozenset(_normalized_terms(payload.get('entities'), f'{field_name}.entities')),
            ),
        )

    return ScreeningData(
        sanctions_lists=tuple(sanctions_lists),
        high_risk_keywords=_normalized_terms(
            config.get('high_risk_keywords', DEFAULT_HIGH_RISK_KEYWORDS),
            'high_risk_keywords',
        ),
        high_risk_countries=_country_codes(
            config.get('high_risk_countries', DEFAULT_HIGH_RISK_COUNTRIES),
            'high_risk_countries',
        ),
        medium_risk_countries=_country_codes(
            config.get('medium_risk_countries', DEFAULT_MEDIUM_RISK_COUNTRIES),
            'medium_risk_countries',
        ),
        pep_indicators=_normalized_terms(config.get('pep_indicators', DEFAULT_PEP_INDICATORS), 'pep_indicators'),
        media_source=_optional_text(config, 'media_source', 'screening data') or DEFAULT_MEDIA_SOURCE,
        origin=origin,
    )


def _settings_config() -> dict[str, Any]:
    config: dict[str, Any] = {}
    for key, setting_name in (
        ('sanctions_lists', 'SCREENING_SANCTIONS_LISTS'),
        ('high_risk_keywords', 'SCREENING_HIGH_RISK_KEYWORDS'),
        ('high_risk_countries', 'SCREENING_HIGH_RISK_COUNTRIES'),
        ('medium_risk_countries', 'SCREENING_MEDIUM_RISK_COUNTRIES'),
        ('pep_indicators', 'SCREENING_PEP_INDICATORS'),
    ):
        value = getattr(settings, setting_name, None)
        if value is not None:
            config[key] = value
    return config


_FILE_CACHE: dict[str, tuple[float, ScreeningData]] = {}
_FILE_CACHE_LOCK = threading.Lock()


def load_screening_data_file(path: str) -> ScreeningData:
    try:
        modified_at = os.path.getmtime(path)
    except OSError as exc:
        raise ScreeningDataError(f'Screening data file is not readable: {path}') from exc

    with _FILE_CACHE_LOCK:
        cached = _FILE_CACHE.get(path)
        if cached and cached[0] == modified_at:
            return cached[1]

        try:
            with open(path, encoding='utf-8') as handle:
                payload = json.load(handle)
        except (OSError, ValueError) as exc:
            raise ScreeningDataError(f'Screening data file could not be parsed: {path}') from exc

        if not isinstance(payload, dict):
            raise ScreeningDataError('Screening data file must contain a JSON object.')

        data = build_screening_data({**_settings_config(), **payload}, origin=f'file:{path}')
        _FILE_CACHE[path] = (modified_at, data)
        logger.info('Loaded screening data from %s (%s sanctions lists).', path, len(data.sanctions_lists))
        return data


def get_screening_data() -> ScreeningData:
    path = str(getattr(settings, 'SCREENING_DATA_FILE', '') or '').strip()
    if path:
        return load_screening_data_file(path)
    return build_screening_data(_settings_config())


def reset_screening_data_cache() -> None:
    with _FILE_CACHE_LOCK:
        _FILE_CACHE.clear()
