import dash_bootstrap_components as dbc
import plotly.graph_objects as go
import pytest
from dash import Dash, html

import callbacks
from aggregations import KPI
from callbacks import dashboard_outputs, panel_styles, register_callbacks, selection_from_inputs
from domains import build_dashboard_view
from filters import ALL, FilterSelection
from layout import (
    create_kpi_row,
    create_layout,
    create_leaderboard_table,
    create_metric_card,
    threshold_options,
    year_options,
)
from visualizations import (
    MAP_TILE_URL,
    create_analysis_chart,
    create_domain_map,
    create_empty_figure,
    create_fire_history_chart,
    create_initial_map,
)


def test_domain_map_has_one_marker_per_item(dataset):
    view = build_dashboard_view(dataset, FilterSelection(domain='sport'))
    fig = create_domain_map(view)

    trace = fig.data[0]
    assert isinstance(trace, go.Scattermap)
    assert len(trace.lat) == len(view.markers)
    assert list(trace.marker.size) == [2 * m['radius'] for m in view.markers]
    assert trace.marker.color == view.domain.theme
    assert fig.layout.map.layers[0].source[0] == MAP_TILE_URL


def test_domain_map_without_markers(dataset):
    view = build_dashboard_view(dataset, FilterSelection(domain='fire', fire_year='1990'))
    fig = create_domain_map(view)
    assert fig.data[0].mode == 'text'


def test_analysis_chart_per_domain(dataset):
    fire = create_analysis_chart(build_dashboard_view(dataset, FilterSelection(domain='fire')))
    assert isinstance(fire.data[0], go.Bar)
    assert list(fire.data[0].x) == ['2003', '2009', '2012', '2017']

    sport = create_analysis_chart(build_dashboard_view(dataset, FilterSelection(domain='sport')))
    assert isinstance(sport.data[0], go.Scatter)
    assert len(sport.data[0].x) == len(dataset.communes)


def test_empty_history_renders_message():
    fig = create_fire_history_chart([])
    assert len(fig.data) == 0
    assert fig.layout.annotations[0].text == "Aucun incendie pour cette sélection"


def test_empty_figure_has_no_traces():
    fig = create_empty_figure("Données indisponibles")
    assert len(fig.data) == 0
    assert fig.layout.annotations[0].text == "Données indisponibles"


def test_kpi_row_has_three_cards():
    kpis = [KPI('A', '1', 'fas fa-fire', 'danger'), KPI('B', '2', 'fas fa-fire', 'danger'),
            KPI('C', 'N/A', 'fas fa-fire', 'danger', sub='note')]
    row = create_kpi_row(kpis)
    assert len(row.children) == 3


def test_metric_card_sub_line():
    card = create_metric_card('Année Noire', '2003', 'fas fa-calendar-alt', 'dark', sub='150 ha brûlés')
    body = card.children[0].children[0].children
    assert body[-1].children == '150 ha brûlés'


def test_leaderboard_table(dataset):
    view = build_dashboard_view(dataset, FilterSelection(domain='fire'))
    table = create_leaderboard_table(view.leaderboard)
    rows = table.children[1].children
    assert len(rows) == 5

    empty = create_leaderboard_table([])
    assert isinstance(empty, html.P)


def test_filter_options():
    assert year_options(['2003', '2017'])[0]['value'] == ALL
    assert [o['value'] for o in year_options(['2003', '2017'])[1:]] == ['2003', '2017']
    assert threshold_options()[0]['value'] == ALL


def test_panel_styles_show_only_active_domain():
    styles = panel_styles('energy')
    assert [s['display'] for s in styles] == ['none', 'block', 'none']


def test_selection_from_inputs_defaults_missing_values():
    selection = selection_from_inputs(None, None, None, None)
    assert selection == FilterSelection()

    selection = selection_from_inputs('fire', 5, 'part_tertiaire', '2003')
    assert selection.domain == 'fire'
    assert selection.sport_threshold == 5
    assert selection.fire_year == '2003'


def test_selection_from_inputs_rejects_invalid():
    with pytest.raises(ValueError):
        selection_from_inputs('weather', None, None, None)


def test_layout_and_callbacks_register():
    app = Dash(__name__)
    app.layout = create_layout(['2003', '2017'])
    register_callbacks(app)

    assert len(app.callback_map) == 6


def test_initial_map_uses_maplibre_trace_and_layout():
    fig = create_initial_map()

    assert isinstance(fig.data[0], go.Scattermap)
    assert fig.layout.map.style == 'white-bg'
    assert fig.layout.map.center.lat == pytest.approx(42.15)
    assert fig.layout.map.layers[0].sourcetype == 'raster'


def _text_of(component):
    if component is None:
        return ''
    if isinstance(component, str):
        return component
    if isinstance(component, (list, tuple)):
        return ' '.join(_text_of(child) for child in component)
    return _text_of(getattr(component, 'children', None))


def test_dashboard_outputs_render_selection(monkeypatch, dataset):
    monkeypatch.setattr(callbacks, 'get_dataset', lambda: dataset)
    outputs = dashboard_outputs(FilterSelection(domain='fire').to_dict())

    assert len(outputs) == 7
    assert outputs[4] == {'display': 'block'}
    assert outputs[5] == "Cartographie : " + callbacks.DOMAIN_VIEWS['fire'].title


def test_dashboard_failure_hides_exception_text(monkeypatch):
    def broken():
        raise RuntimeError("/srv/secret/communes.json unreadable")

    monkeypatch.setattr(callbacks, 'get_dataset', broken)
    outputs = dashboard_outputs(FilterSelection().to_dict())

    alert = outputs[0]
    assert isinstance(alert, dbc.Alert)
    assert 'secret' not in _text_of(alert)
    assert 'Données indisponibles' in _text_of(alert)
    assert outputs[4] == {'display': 'none'}
