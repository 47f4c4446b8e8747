from dash import Input, Output, State, html
from dash.exceptions import PreventUpdate
import dash_bootstrap_components as dbc
import logging

from data_loader import get_dataset
from domains import DOMAIN_VIEWS, build_dashboard_view
from filters import DEFAULT_SELECTION, FilterSelection
from layout import create_kpi_row, create_leaderboard_table, create_map_legend
from visualizations import (
    create_analysis_chart,
    create_domain_map,
    create_empty_figure,
    create_initial_map,
)

# Setup logging
logger = logging.getLogger(__name__)

HIDDEN = {'display': 'none'}
SHOWN = {'display': 'block'}


def panel_styles(domain: str):
    """Show only the filter panel of the active domain"""
    return tuple(SHOWN if name == domain else HIDDEN for name in DOMAIN_VIEWS)


def selection_from_inputs(domain, threshold, metric, year) -> FilterSelection:
    """Build a fresh selection from the current control values"""
    return FilterSelection(
        domain=domain or DEFAULT_SELECTION.domain,
        sport_threshold=DEFAULT_SELECTION.sport_threshold if threshold is None else threshold,
        energy_metric=metric or DEFAULT_SELECTION.energy_metric,
        fire_year=DEFAULT_SELECTION.fire_year if year is None else year,
    )


def dashboard_outputs(selection_data):
    """
    Render every dashboard output for a stored selection.

    Failures are logged with their traceback; the page only gets a generic
    alert and empty figures.
    """
    try:
        selection = FilterSelection.from_dict(selection_data)
        view = build_dashboard_view(get_dataset(), selection)

        show_leaderboard = SHOWN if view.domain.chart_kind == 'history' else HIDDEN
        return (
            create_kpi_row(view.kpis),
            create_domain_map(view),
            create_analysis_chart(view),
            create_leaderboard_table(view.leaderboard),
            show_leaderboard,
            f"Cartographie : {view.domain.title}",
            create_map_legend(view.domain),
        )

    except Exception as e:
        logger.error(f"Dashboard update failed: {e}", exc_info=True)
        error_alert = dbc.Alert([
            html.H5("Données indisponibles", className="alert-heading"),
            html.P("Le tableau de bord n'a pas pu être mis à jour pour cette sélection."),
        ], color="danger", className="m-3")
        empty = create_empty_figure("Données indisponibles")
        return (error_alert, create_initial_map(), empty, None, HIDDEN,
                "Cartographie", None)


def register_callbacks(app):
    """Register all Dash callbacks"""

    # ========================================================================
    # FILTER CALLBACKS
    # ========================================================================

    @app.callback(
        [Output('sport-filter-panel', 'style'),
         Output('energy-filter-panel', 'style'),
         Output('fire-filter-panel', 'style')],
        [Input('domain-tabs', 'active_tab')]
    )
    def toggle_filter_panels(active_tab):
        """Display the filter controls of the active domain only"""
        return panel_styles(active_tab)

    @app.callback(
        Output('sport-threshold-filter', 'value'),
        [Input('reset-sport-threshold-btn', 'n_clicks')]
    )
    def reset_sport_threshold(n_clicks):
        """Reset the facility threshold to its default"""
        if n_clicks is None:
            raise PreventUpdate
        return DEFAULT_SELECTION.sport_threshold

    @app.callback(
        Output('energy-metric-filter', 'value'),
        [Input('reset-energy-metric-btn', 'n_clicks')]
    )
    def reset_energy_metric(n_clicks):
        """Reset the energy metric to its default"""
        if n_clicks is None:
            raise PreventUpdate
        return DEFAULT_SELECTION.energy_metric

    @app.callback(
        Output('fire-year-filter', 'value'),
        [Input('reset-fire-year-btn', 'n_clicks')]
    )
    def reset_fire_year(n_clicks):
        """Reset the fire year to its default"""
        if n_clicks is None:
            raise PreventUpdate
        return DEFAULT_SELECTION.fire_year

    @app.callback(
        Output('filter-selection-store', 'data'),
        [Input('domain-tabs', 'active_tab'),
         Input('sport-threshold-filter', 'value'),
         Input('energy-metric-filter', 'value'),
         Input('fire-year-filter', 'value')],
        [State('filter-selection-store', 'data')]
    )
    def update_selection(active_tab, threshold, metric, year, current):
        """Replace the stored selection with one built from the controls"""
        try:
            selection = selection_from_inputs(active_tab, threshold, metric, year)
        except ValueError as e:
            logger.warning(f"Ignoring invalid selection: {e}")
            raise PreventUpdate

        data = selection.to_dict()
        if data == current:
            raise PreventUpdate
        return data

    # ========================================================================
    # DASHBOARD UPDATE CALLBACK
    # ========================================================================

    @app.callback(
        [Output('kpi-cards', 'children'),
         Output('domain-map', 'figure'),
         Output('analysis-chart', 'figure'),
         Output('fire-leaderboard', 'children'),
         Output('leaderboard-section', 'style'),
         Output('map-title', 'children'),
         Output('map-legend', 'children')],
        [Input('filter-selection-store', 'data')]
    )
    def update_dashboard(selection_data):
        """Derive KPIs, map, chart and leaderboard from the current selection"""
        return dashboard_outputs(selection_data)
