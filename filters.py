"""
Filter engine: pure functions of (normalized collection, selection).

Every function returns a new DataFrame and leaves its input untouched.
"""
import logging
from dataclasses import dataclass, replace
from typing import List, Union

import pandas as pd

from normalizer import normalize_year

logger = logging.getLogger(__name__)

ALL = 'all'

DOMAINS = ('sport', 'energy', 'fire')

ENERGY_METRICS = {
    'consototale': 'Consommation totale',
    'part_residentiel': 'Part résidentielle',
    'part_tertiaire': 'Part tertiaire',
    'part_industrie': 'Part industrielle',
    'part_agriculture': 'Part agricole',
}

SPORT_THRESHOLDS = [1, 5, 10, 20, 50]


# Key for fire events without a usable year; sorts after the 4-digit years
UNKNOWN_YEAR = 'Inconnue'


def year_key(value) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return UNKNOWN_YEAR
    if isinstance(value, str) and value.strip() == '':
        return UNKNOWN_YEAR
    return str(normalize_year(value))


@dataclass(frozen=True)
class FilterSelection:
    """Current UI selections. Replaced as a whole on every change, never mutated."""
    domain: str = 'sport'
    fire_year: Union[str, int] = ALL
    energy_metric: str = 'consototale'
    sport_threshold: Union[str, int] = ALL

    def __post_init__(self):
        if self.domain not in DOMAINS:
            raise ValueError(f"Unknown domain: {self.domain!r} (expected one of {DOMAINS})")
        if self.energy_metric not in ENERGY_METRICS:
            raise ValueError(f"Unknown energy metric: {self.energy_metric!r}")
        if self.sport_threshold != ALL:
            try:
                threshold = int(self.sport_threshold)
            except (TypeError, ValueError):
                raise ValueError(f"Invalid sport threshold: {self.sport_threshold!r}")
            if threshold < 0:
                raise ValueError(f"Sport threshold must be non-negative, got {threshold}")
            object.__setattr__(self, 'sport_threshold', threshold)
        if self.fire_year is None or str(self.fire_year).strip() == '':
            object.__setattr__(self, 'fire_year', ALL)

    @classmethod
    def from_dict(cls, data) -> 'FilterSelection':
        """Build a selection from a dcc.Store payload (missing keys take defaults)"""
        data = data or {}
        defaults = cls()
        return cls(
            domain=data.get('domain') or defaults.domain,
            fire_year=data.get('fire_year', defaults.fire_year),
            energy_metric=data.get('energy_metric') or defaults.energy_metric,
            sport_threshold=data.get('sport_threshold', defaults.sport_threshold),
        )

    def to_dict(self) -> dict:
        return {
            'domain': self.domain,
            'fire_year': self.fire_year,
            'energy_metric': self.energy_metric,
            'sport_threshold': self.sport_threshold,
        }

    def with_changes(self, **changes) -> 'FilterSelection':
        return replace(self, **changes)

    @property
    def is_share_metric(self) -> bool:
        return self.energy_metric.startswith('part_')


DEFAULT_SELECTION = FilterSelection()


def filter_fires_by_year(fires: pd.DataFrame, year) -> pd.DataFrame:
    """
    Keep the fire events of one year, or all of them for ``"all"``.

    Years are compared as strings so that 2003, "2003" and 2003.0 all match.
    """
    if year is None or str(year) == ALL:
        return fires.copy()
    target = year_key(year)
    mask = fires['annee'].map(year_key) == target
    return fires[mask].copy()


def filter_communes_by_threshold(communes: pd.DataFrame, threshold) -> pd.DataFrame:
    """Keep communes with at least ``threshold`` sport facilities"""
    if threshold is None or str(threshold) == ALL:
        return communes.copy()
    return communes[communes['nb_equipements'] >= int(threshold)].copy()


def available_years(fires: pd.DataFrame) -> List[str]:
    """Distinct years present in the fire table, as sorted strings (undated last)"""
    if fires is None or len(fires) == 0:
        return []
    years = {year_key(y) for y in fires['annee']}
    return sorted(years)


def filtered_view(dataset, selection: FilterSelection) -> pd.DataFrame:
    """Filtered collection for the active domain of ``selection``"""
    from domains import get_domain

    return get_domain(selection.domain).filter(dataset, selection)
