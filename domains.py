"""
Per-domain view configuration and behaviour.

Each analytical mode (sport, energy, fire) is one DomainView subclass that
knows its colours, its marker sizing, its popup fields, how to filter the
dataset for the current selection, and which KPIs to compute. The rest of
the app asks ``get_domain(name)`` instead of branching on the domain string.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from aggregations import (
    KPI,
    energy_kpis,
    fire_history,
    fire_kpis,
    fire_leaderboard,
    marker_set,
    scatter_series,
    sport_kpis,
)
from filters import (
    ENERGY_METRICS,
    FilterSelection,
    filter_communes_by_threshold,
    filter_fires_by_year,
)
from normalizer import SHARE_FIELDS, round_half_up

logger = logging.getLogger(__name__)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


class DomainView:
    """Base class: static view config plus the domain's capability set"""
    name = ''
    title = ''
    tab_label = ''
    icon = ''
    theme = '#94a3b8'
    secondary = '#64748b'
    legend_label = 'Intensité'
    fill_opacity = 0.6
    name_field = 'nom'
    chart_kind = 'scatter'
    x_label = ''
    y_label = ''

    def filter(self, dataset, selection: FilterSelection) -> pd.DataFrame:
        raise NotImplementedError

    def compute_kpis(self, rows: pd.DataFrame, dataset, selection: FilterSelection) -> List[KPI]:
        raise NotImplementedError

    def radius(self, item: dict) -> float:
        raise NotImplementedError

    def popup_fields(self, item: dict) -> Dict[str, str]:
        raise NotImplementedError

    def scatter(self, rows: pd.DataFrame, dataset, selection: FilterSelection) -> List[dict]:
        return []

    def y_field(self, selection: FilterSelection) -> Optional[str]:
        return None

    def y_axis_label(self, selection: FilterSelection) -> str:
        return self.y_label

    def history(self, rows: pd.DataFrame) -> List[dict]:
        return []

    def leaderboard(self, rows: pd.DataFrame) -> List[dict]:
        return []


class SportDomain(DomainView):
    name = 'sport'
    title = 'Offre Sportive'
    tab_label = 'Sport'
    icon = 'fas fa-trophy'
    theme = '#38bdf8'
    secondary = '#c084fc'
    x_label = 'Pop. Jeune (15-29 ans)'
    y_label = "Nombre d'équipements"

    def filter(self, dataset, selection):
        return filter_communes_by_threshold(dataset.communes, selection.sport_threshold)

    def compute_kpis(self, rows, dataset, selection):
        return sport_kpis(rows)

    def radius(self, item):
        return clamp(item.get('nb_equipements', 0) / 1.5, 3, 25)

    def popup_fields(self, item):
        return {
            'Équipements': f"{int(item.get('nb_equipements', 0))}",
            'Jeunes (15-29)': f"{int(item.get('population_15_29', 0))}",
        }

    def y_field(self, selection):
        return 'nb_equipements'

    def scatter(self, rows, dataset, selection):
        return scatter_series(rows, 'nb_equipements')


class EnergyDomain(DomainView):
    name = 'energy'
    title = 'Intensité Énergétique'
    tab_label = 'Énergie'
    icon = 'fas fa-bolt'
    theme = '#fbbf24'
    secondary = '#f97316'
    x_label = 'Pop. Jeune (15-29 ans)'

    def filter(self, dataset, selection):
        # The metric only changes the displayed field; every commune stays in view.
        return dataset.communes.copy()

    def compute_kpis(self, rows, dataset, selection):
        return energy_kpis(dataset.communes, selection.energy_metric)

    def radius(self, item):
        return clamp(math.sqrt(max(item.get('consototale', 0), 0)) / 10, 3, 30)

    def popup_fields(self, item):
        fields = {'Conso': f"{round_half_up(item.get('consototale', 0))} MWh"}
        for label, key in zip(['Résid', 'Tert', 'Indu', 'Agri'], SHARE_FIELDS):
            fields[label] = f"{item.get(key, 0):g}%"
        return fields

    def y_field(self, selection):
        return selection.energy_metric

    def y_axis_label(self, selection):
        unit = '%' if selection.is_share_metric else 'MWh'
        return f"{ENERGY_METRICS[selection.energy_metric]} ({unit})"

    def scatter(self, rows, dataset, selection):
        return scatter_series(dataset.communes, selection.energy_metric)


class FireDomain(DomainView):
    name = 'fire'
    title = 'Historique Incendies'
    tab_label = 'Incendies'
    icon = 'fas fa-fire'
    theme = '#ef4444'
    secondary = '#7f1d1d'
    legend_label = 'Surface brûlée'
    fill_opacity = 0.4
    name_field = 'commune'
    chart_kind = 'history'
    x_label = 'Année'
    y_label = 'Surface (ha)'

    def filter(self, dataset, selection):
        return filter_fires_by_year(dataset.fires, selection.fire_year)

    def compute_kpis(self, rows, dataset, selection):
        return fire_kpis(rows)

    def radius(self, item):
        return clamp(math.sqrt(max(item.get('surface_ha', 0), 0)) * 2, 4, 40)

    def popup_fields(self, item):
        return {
            'Surface': f"{item.get('surface_ha', 0):g} hectares",
            'Date': str(item.get('date', '')),
        }

    def history(self, rows):
        return fire_history(rows)

    def leaderboard(self, rows):
        return fire_leaderboard(rows)


DOMAIN_VIEWS = {view.name: view for view in (SportDomain(), EnergyDomain(), FireDomain())}


def get_domain(name: str) -> DomainView:
    """Resolve the view/strategy object for a domain name"""
    try:
        return DOMAIN_VIEWS[name]
    except KeyError:
        raise ValueError(f"Unknown domain: {name!r} (expected one of {tuple(DOMAIN_VIEWS)})")


@dataclass
class DashboardView:
    """Everything the presentation layer needs for one render pass"""
    domain: DomainView
    selection: FilterSelection
    row_count: int
    kpis: List[KPI]
    markers: List[dict]
    history: List[dict] = field(default_factory=list)
    leaderboard: List[dict] = field(default_factory=list)
    scatter: List[dict] = field(default_factory=list)


def build_dashboard_view(dataset, selection: FilterSelection) -> DashboardView:
    """
    Run filter -> aggregate for the active domain.

    Recomputed from scratch on every selection change.
    """
    domain = get_domain(selection.domain)
    rows = domain.filter(dataset, selection)

    view = DashboardView(
        domain=domain,
        selection=selection,
        row_count=len(rows),
        kpis=domain.compute_kpis(rows, dataset, selection),
        markers=marker_set(rows, domain.radius, domain.popup_fields, name_field=domain.name_field),
        scatter=domain.scatter(rows, dataset, selection),
        history=domain.history(rows),
        leaderboard=domain.leaderboard(rows),
    )

    logger.debug(f"Built {domain.name} view: {view.row_count} rows, {len(view.markers)} markers")
    return view
