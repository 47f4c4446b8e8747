import logging
import os
from typing import List

import plotly.graph_objects as go

# Setup logging
logger = logging.getLogger(__name__)

MAP_CENTER = {'lat': 42.15, 'lon': 9.15}
MAP_ZOOM = 7.5
MAP_TILE_URL = os.environ.get(
    "MAP_TILE_URL",
    "https://a.basemaps.cartocdn.com/dark_all/{z}/{x}/{y}.png"
)
MAP_ATTRIBUTION = "© OpenStreetMap contributors © CARTO"

DARK_BG = '#0f172a'
PANEL_BG = '#1e293b'
GRID_COLOR = '#334155'
AXIS_COLOR = '#94a3b8'


def _map_layout(height: int = 600) -> dict:
    """Shared MapLibre layout: raster tiles from MAP_TILE_URL under the traces"""
    return dict(
        map=dict(
            style="white-bg",
            center=MAP_CENTER,
            zoom=MAP_ZOOM,
            layers=[{
                'below': 'traces',
                'sourcetype': 'raster',
                'sourceattribution': MAP_ATTRIBUTION,
                'source': [MAP_TILE_URL],
            }]
        ),
        margin={"r": 0, "t": 0, "l": 0, "b": 0},
        height=height,
        paper_bgcolor=DARK_BG,
        showlegend=False,
    )


# ============================================================================
# MAP VISUALIZATION FUNCTIONS
# ============================================================================

def _popup_text(marker: dict) -> str:
    text = f"<b>{marker['name']}</b><br>"
    text += "<br>".join(f"{label}: {value}" for label, value in marker['popup'].items())
    return text


def create_domain_map(view) -> go.Figure:
    """
    Create the circle-marker map for the active domain.

    Args:
        view: DashboardView from domains.build_dashboard_view

    Returns:
        Plotly figure
    """
    markers = view.markers
    domain = view.domain

    fig = go.Figure()

    if markers:
        fig.add_trace(go.Scattermap(
            lat=[m['lat'] for m in markers],
            lon=[m['lng'] for m in markers],
            mode='markers',
            marker=dict(
                # Plotly sizes are diameters in px
                size=[2 * m['radius'] for m in markers],
                color=domain.theme,
                opacity=domain.fill_opacity,
            ),
            text=[_popup_text(m) for m in markers],
            hovertemplate='%{text}<extra></extra>',
            name=domain.legend_label,
        ))
    else:
        fig.add_trace(go.Scattermap(
            lat=[MAP_CENTER['lat']],
            lon=[MAP_CENTER['lon']],
            mode='text',
            text=[''],
            hoverinfo='skip'
        ))

    fig.update_layout(**_map_layout())
    return fig


def create_initial_map() -> go.Figure:
    """Create initial empty map showing Corsica"""
    fig = go.Figure(go.Scattermap(
        lat=[MAP_CENTER['lat']],
        lon=[MAP_CENTER['lon']],
        mode='text',
        text=[''],
        showlegend=False,
        hoverinfo='skip'
    ))
    fig.update_layout(**_map_layout())
    return fig


def create_empty_figure(message: str) -> go.Figure:
    """Create an empty figure with a message"""
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        xref="paper",
        yref="paper",
        x=0.5,
        y=0.5,
        showarrow=False,
        font=dict(size=16, color=AXIS_COLOR)
    )
    fig.update_layout(
        xaxis=dict(showgrid=False, showticklabels=False, zeroline=False),
        yaxis=dict(showgrid=False, showticklabels=False, zeroline=False),
        paper_bgcolor=PANEL_BG,
        plot_bgcolor=PANEL_BG,
        height=400
    )
    return fig


# ============================================================================
# CHART VISUALIZATION FUNCTIONS
# ============================================================================

def _chart_layout(x_title: str, y_title: str) -> dict:
    return dict(
        height=550,
        margin={"r": 30, "t": 20, "l": 10, "b": 20},
        paper_bgcolor=PANEL_BG,
        plot_bgcolor=PANEL_BG,
        font=dict(color=AXIS_COLOR, size=12),
        xaxis=dict(title=x_title, gridcolor=GRID_COLOR, color=AXIS_COLOR),
        yaxis=dict(title=y_title, gridcolor=GRID_COLOR, color=AXIS_COLOR),
        hoverlabel=dict(bgcolor=DARK_BG, bordercolor=GRID_COLOR, font=dict(color='#e2e8f0')),
        showlegend=False,
    )


def create_fire_history_chart(history: List[dict], theme: str = '#ef4444') -> go.Figure:
    """Bar chart of burned surface per year"""
    if not history:
        return create_empty_figure("Aucun incendie pour cette sélection")

    fig = go.Figure(go.Bar(
        x=[point['name'] for point in history],
        y=[point['value'] for point in history],
        marker=dict(color=theme),
        name='Surface brûlée (ha)',
        hovertemplate='<b>%{x}</b><br>Surface brûlée (ha): %{y:,}<extra></extra>'
    ))
    fig.update_layout(**_chart_layout("Année", "Surface (ha)"))
    fig.update_xaxes(type='category')
    return fig


def create_scatter_chart(view) -> go.Figure:
    """Youth population against the domain's y metric, one point per commune"""
    points = view.scatter
    if not points:
        return create_empty_figure("Aucune commune pour cette sélection")

    domain = view.domain
    y_label = domain.y_axis_label(view.selection)

    fig = go.Figure(go.Scatter(
        x=[p['x'] for p in points],
        y=[p['y'] for p in points],
        mode='markers',
        marker=dict(color=domain.secondary, opacity=0.7, size=9),
        customdata=[p['nom'] for p in points],
        name='Communes',
        hovertemplate=(
            '<b>%{customdata}</b><br>' +
            f'{y_label}: ' + '%{y:,.1f}<br>' +
            'Pop. Jeune: %{x:,}' +
            '<extra></extra>'
        )
    ))
    fig.update_layout(**_chart_layout(domain.x_label, y_label))
    return fig


def create_analysis_chart(view) -> go.Figure:
    """Bar history for the fire domain, scatter for the commune domains"""
    if view.domain.chart_kind == 'history':
        return create_fire_history_chart(view.history, view.domain.theme)
    return create_scatter_chart(view)
