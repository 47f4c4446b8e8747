"""
Aggregation engine: KPI cards, chart series, leaderboard and map markers.

All functions take an already-filtered DataFrame and return plain Python
data (dataclasses, dicts, strings) for the presentation layer. Empty inputs
degrade to zeros, empty lists or "N/A"; nothing here divides by a row count
without checking it first.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import numpy as np
import pandas as pd

from filters import ENERGY_METRICS, year_key
from normalizer import round_half_up

logger = logging.getLogger(__name__)

NOT_AVAILABLE = 'N/A'
LEADERBOARD_SIZE = 5

SECTOR_LABELS = {
    'part_residentiel': 'Résidentielle',
    'part_tertiaire': 'Tertiaire',
    'part_industrie': 'Industrielle',
    'part_agriculture': 'Agricole',
}


@dataclass(frozen=True)
class KPI:
    label: str
    value: str
    icon: str
    color: str
    sub: Optional[str] = None


def format_thousands(value) -> str:
    """1234567 -> '1 234 567' (French grouping)"""
    return f"{int(value):,}".replace(',', ' ')


def _top_row(df: pd.DataFrame, column: str) -> Optional[dict]:
    if df is None or len(df) == 0:
        return None
    return df.iloc[int(df[column].to_numpy().argmax())].to_dict()


# ============================================================================
# SPORT
# ============================================================================

def sport_kpis(communes: pd.DataFrame) -> List[KPI]:
    total_equip = int(communes['nb_equipements'].sum()) if len(communes) else 0
    total_youth = int(communes['population_15_29'].sum()) if len(communes) else 0

    top = _top_row(communes, 'nb_equipements')
    if top is None:
        top_value, top_sub = NOT_AVAILABLE, None
    else:
        top_value, top_sub = top['nom'], f"{int(top['nb_equipements'])} équipements"

    return [
        KPI("Total Équipements", format_thousands(total_equip), "fas fa-trophy", "warning"),
        KPI("Jeunes (15-29 ans)", format_thousands(total_youth), "fas fa-users", "info"),
        KPI("Ville Top Sport", top_value, "fas fa-map-marker-alt", "primary", sub=top_sub),
    ]


# ============================================================================
# ENERGY
# ============================================================================

def total_consumption(communes: pd.DataFrame) -> float:
    """Summed consumption in MWh"""
    return float(communes['consototale'].sum()) if len(communes) else 0.0


def weighted_sector_consumption(communes: pd.DataFrame, share_field: str) -> float:
    """
    Consumption attributable to one sector, in MWh.

    Each commune contributes ``consototale * share / 100``; this is a
    consumption-weighted figure, not an average of the percentages.
    """
    if len(communes) == 0:
        return 0.0
    return float((communes['consototale'] * communes[share_field] / 100).sum())


def metric_average(communes: pd.DataFrame, metric: str) -> Optional[float]:
    if len(communes) == 0:
        return None
    return float(communes[metric].mean())


def energy_kpis(communes: pd.DataFrame, metric: str = 'consototale') -> List[KPI]:
    if metric not in ENERGY_METRICS:
        raise ValueError(f"Unknown energy metric: {metric!r}")
    is_share = metric.startswith('part_')

    if is_share:
        headline_label = f"Conso. {SECTOR_LABELS[metric]}"
        headline_mwh = weighted_sector_consumption(communes, metric)
    else:
        headline_label = "Conso. Totale"
        headline_mwh = total_consumption(communes)
    headline = f"{format_thousands(round_half_up(headline_mwh / 1000))} GWh"

    avg = metric_average(communes, metric)
    if avg is None:
        avg_value = NOT_AVAILABLE
    else:
        avg_value = f"{avg:.1f}%" if is_share else f"{avg:.1f} MWh"

    peak = _top_row(communes, 'consototale')
    if peak is None:
        peak_value, peak_sub = NOT_AVAILABLE, None
    else:
        peak_value = peak['nom']
        peak_sub = f"{format_thousands(round_half_up(peak['consototale']))} MWh"

    return [
        KPI(headline_label, headline, "fas fa-bolt", "warning"),
        KPI(f"Moyenne {ENERGY_METRICS[metric].lower()}", avg_value, "fas fa-home", "success"),
        KPI("Pic Conso", peak_value, "fas fa-building", "danger", sub=peak_sub),
    ]


# ============================================================================
# FIRE
# ============================================================================

def yearly_surface(fires: pd.DataFrame) -> pd.Series:
    """
    Burned surface per year (string keys), in first-encountered order.

    Events without a year are grouped under ``UNKNOWN_YEAR`` so the per-year
    sums always add up to the total surface.
    """
    if fires is None or len(fires) == 0:
        return pd.Series(dtype=float)
    keys = fires['annee'].map(year_key)
    return fires['surface_ha'].groupby(keys, sort=False).sum()


def worst_year(fires: pd.DataFrame):
    """
    Year with the largest summed burned surface, as ``(year, surface)``.

    Ties keep the year encountered first. Returns ``(None, 0.0)`` for an
    empty set.
    """
    per_year = yearly_surface(fires)
    if per_year.empty:
        return None, 0.0
    year = per_year.idxmax()
    return year, float(per_year[year])


def fire_kpis(fires: pd.DataFrame) -> List[KPI]:
    count = len(fires)
    total_surface = round_half_up(fires['surface_ha'].sum()) if count else 0

    year, surface = worst_year(fires)
    if year is None:
        worst_value, worst_sub = NOT_AVAILABLE, None
    else:
        worst_value = year
        worst_sub = f"{format_thousands(round_half_up(surface))} ha brûlés"

    return [
        KPI("Incendies (>1ha)", format_thousands(count), "fas fa-exclamation-triangle", "warning"),
        KPI("Surface Brûlée", f"{format_thousands(total_surface)} ha", "fas fa-fire", "danger"),
        KPI("Année Noire", worst_value, "fas fa-calendar-alt", "dark", sub=worst_sub),
    ]


def fire_history(fires: pd.DataFrame) -> List[Dict]:
    """Per-year burned surface, ascending by year, rounded to whole hectares"""
    per_year = yearly_surface(fires)
    return [
        {'name': year, 'value': round_half_up(per_year[year])}
        for year in sorted(per_year.index)
    ]


def fire_leaderboard(fires: pd.DataFrame, top_n: int = LEADERBOARD_SIZE) -> List[Dict]:
    """
    Communes ranked by cumulative burned surface.

    The sort is stable, so communes with equal surfaces keep the order in
    which they first appear in ``fires``.
    """
    if fires is None or len(fires) == 0:
        return []
    grouped = fires.groupby('commune', sort=False).agg(
        surface_ha=('surface_ha', 'sum'),
        fire_count=('surface_ha', 'size'),
    ).reset_index()
    ranked = grouped.sort_values('surface_ha', ascending=False, kind='mergesort').head(top_n)
    return [
        {
            'commune': row['commune'],
            'surface_ha': float(row['surface_ha']),
            'fire_count': int(row['fire_count']),
        }
        for _, row in ranked.iterrows()
    ]


# ============================================================================
# CHART AND MAP PAYLOADS
# ============================================================================

def scatter_series(communes: pd.DataFrame, y_field: str) -> List[Dict]:
    """Youth population (x) against ``y_field`` (y), one point per commune"""
    if communes is None or len(communes) == 0:
        return []
    return [
        {'nom': row['nom'], 'x': int(row['population_15_29']), 'y': float(row[y_field])}
        for row in communes.to_dict('records')
    ]


def marker_set(rows: pd.DataFrame,
               radius: Callable[[dict], float],
               popup: Callable[[dict], dict],
               name_field: str = 'nom') -> List[Dict]:
    """Map markers with a computed radius and popup payload; rows without coordinates are skipped"""
    if rows is None or len(rows) == 0:
        return []
    markers = []
    for row in rows.to_dict('records'):
        lat, lng = row.get('lat'), row.get('lng')
        if lat is None or lng is None or not (np.isfinite(lat) and np.isfinite(lng)):
            continue
        markers.append({
            'name': row.get(name_field, ''),
            'lat': float(lat),
            'lng': float(lng),
            'radius': float(radius(row)),
            'popup': popup(row),
        })
    return markers
