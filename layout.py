from dash import html, dcc
import dash_bootstrap_components as dbc

from domains import DOMAIN_VIEWS
from filters import ALL, DEFAULT_SELECTION, ENERGY_METRICS, SPORT_THRESHOLDS
from visualizations import create_initial_map, create_empty_figure

# ============================================================================
# STYLING AND LAYOUT COMPONENTS
# ============================================================================

def create_navbar() -> dbc.Navbar:
    """Create navigation bar with the app title"""
    return dbc.Navbar(
        dbc.Container([
            dbc.Row([
                dbc.Col([
                    html.I(className="fas fa-map-marked-alt fa-2x text-info me-3"),
                    html.Div([
                        html.H3("Corse DataViz", className="mb-0 text-white"),
                        html.Small(
                            "Exploration territoriale interactive : Sport, Énergie & Risques",
                            className="text-white-50"
                        )
                    ])
                ], width="auto", className="d-flex align-items-center"),
            ], className="g-0 w-100")
        ], fluid=True),
        color="dark",
        dark=True,
        className="mb-4 shadow"
    )

def create_metric_card(title: str, value: str, icon: str,
                       color: str = "primary", sub: str = None) -> dbc.Card:
    """Create a metric display card"""
    body = [
        html.I(className=f"{icon} fa-2x text-{color} mb-2"),
        html.H3(value, className="mb-0 mt-2"),
        html.P(title, className="text-muted mb-0 small text-uppercase")
    ]
    if sub:
        body.append(html.Small(sub, className="text-muted d-block mt-1"))
    return dbc.Card([
        dbc.CardBody([
            html.Div(body, className="text-center")
        ])
    ], className="shadow-sm border-0 h-100")

def create_kpi_row(kpis) -> dbc.Row:
    """Three KPI cards side by side"""
    return dbc.Row([
        dbc.Col([
            create_metric_card(k.label, k.value, k.icon, k.color, sub=k.sub)
        ], md=4, className="mb-3")
        for k in kpis
    ])

def create_control_section(title: str, children: list,
                           icon: str = "fas fa-filter") -> dbc.Card:
    """Create a titled control section"""
    return dbc.Card([
        dbc.CardHeader([
            html.I(className=f"{icon} me-2"),
            html.Strong(title)
        ], className="bg-light"),
        dbc.CardBody(children)
    ], className="mb-3 shadow-sm border-0")

def create_filter_dropdown(id_suffix: str, label: str, options: list,
                           value) -> html.Div:
    """Dropdown filter with a reset-to-default button"""
    return html.Div([
        html.Label(label, className="fw-bold small mb-1"),
        dbc.Row([
            dbc.Col([
                dcc.Dropdown(
                    id=f'{id_suffix}-filter',
                    options=options,
                    value=value,
                    clearable=False,
                    maxHeight=200,
                )
            ], width=8),
            dbc.Col([
                dbc.Button([
                    html.I(className="fas fa-undo me-1"),
                    "Réinitialiser"
                ], id=f"reset-{id_suffix}-btn",
                   color="secondary", size="sm", outline=True,
                   className="w-100")
            ], width=4)
        ], className="align-items-center")
    ], className="mb-2")

def year_options(years) -> list:
    return [{'label': 'Toutes les années', 'value': ALL}] + [
        {'label': str(y), 'value': str(y)} for y in years
    ]

def metric_options() -> list:
    return [{'label': label, 'value': key} for key, label in ENERGY_METRICS.items()]

def threshold_options() -> list:
    return [{'label': 'Toutes les communes', 'value': ALL}] + [
        {'label': f"≥ {t} équipements", 'value': t} for t in SPORT_THRESHOLDS
    ]

def create_filter_panels(years) -> html.Div:
    """One filter panel per domain; only the active one is displayed"""
    return html.Div([
        html.Div([
            create_filter_dropdown('sport-threshold', "Équipements minimum",
                                   threshold_options(), DEFAULT_SELECTION.sport_threshold)
        ], id='sport-filter-panel'),
        html.Div([
            create_filter_dropdown('energy-metric', "Indicateur énergétique",
                                   metric_options(), DEFAULT_SELECTION.energy_metric)
        ], id='energy-filter-panel', style={'display': 'none'}),
        html.Div([
            create_filter_dropdown('fire-year', "Année",
                                   year_options(years), DEFAULT_SELECTION.fire_year)
        ], id='fire-filter-panel', style={'display': 'none'}),
    ])

def create_map_legend(domain) -> html.Div:
    return html.Div([
        html.Strong("Légende", className="d-block small mb-1"),
        html.Span(className="d-inline-block rounded-circle me-2",
                  style={'width': '12px', 'height': '12px', 'backgroundColor': domain.theme}),
        html.Span(domain.legend_label, className="small text-muted")
    ])

def create_leaderboard_table(entries) -> html.Div:
    """Top communes by burned surface"""
    if not entries:
        return html.P("Aucun incendie pour cette sélection", className="text-muted text-center")

    rows = []
    for rank, entry in enumerate(entries, start=1):
        rows.append(html.Tr([
            html.Td(dbc.Badge(f"#{rank}", color="danger"), className="text-center"),
            html.Td(entry['commune']),
            html.Td(f"{entry['surface_ha']:,.0f} ha".replace(',', ' '), className="text-end"),
            html.Td(str(entry['fire_count']), className="text-end"),
        ]))

    return dbc.Table([
        html.Thead(html.Tr([
            html.Th("Rang", className="text-center"),
            html.Th("Commune"),
            html.Th("Surface cumulée", className="text-end"),
            html.Th("Incendies", className="text-end"),
        ])),
        html.Tbody(rows)
    ], bordered=False, hover=True, size="sm", className="mb-0")

def create_layout(years=()):
    """Create the complete dashboard layout"""
    default_domain = DOMAIN_VIEWS[DEFAULT_SELECTION.domain]

    return html.Div([
        create_navbar(),

        dbc.Container([
            dbc.Row([
                dbc.Col([
                    dbc.Tabs([
                        dbc.Tab(label=view.tab_label, tab_id=view.name,
                                label_style={"font-weight": "bold"})
                        for view in DOMAIN_VIEWS.values()
                    ], id="domain-tabs", active_tab=DEFAULT_SELECTION.domain)
                ], md=6),
                dbc.Col([
                    create_control_section("Filtres", [create_filter_panels(years)])
                ], md=6)
            ], className="mb-3 align-items-start"),

            # KPI cards
            html.Div(id='kpi-cards', className="mb-2"),

            dbc.Row([
                # Map
                dbc.Col([
                    dbc.Card([
                        dbc.CardHeader([
                            html.I(className="fas fa-map-marker-alt me-2"),
                            html.Strong(id='map-title', children=f"Cartographie : {default_domain.title}")
                        ], className="bg-light"),
                        dbc.CardBody([
                            dcc.Loading(
                                id="loading-domain-map",
                                type="default",
                                children=[
                                    dcc.Graph(
                                        id='domain-map',
                                        figure=create_initial_map(),
                                        config={'displayModeBar': False,
                                                'displaylogo': False,
                                                'scrollZoom': True}
                                    )
                                ]
                            ),
                            html.Div(id='map-legend', className="mt-2",
                                     children=create_map_legend(default_domain))
                        ])
                    ], className="shadow-sm border-0 mb-3")
                ], lg=6),

                # Analysis chart + leaderboard
                dbc.Col([
                    dbc.Card([
                        dbc.CardHeader([
                            html.I(className="fas fa-chart-line me-2"),
                            html.Strong("Analyse des données")
                        ], className="bg-light"),
                        dbc.CardBody([
                            dcc.Graph(id='analysis-chart',
                                      figure=create_empty_figure("Chargement..."),
                                      config={'displaylogo': False})
                        ])
                    ], className="shadow-sm border-0 mb-3"),

                    html.Div([
                        dbc.Card([
                            dbc.CardBody([
                                html.H5([html.I(className="fas fa-fire me-2 text-danger"),
                                         "Communes les plus touchées"], className="mb-3"),
                                html.Div(id='fire-leaderboard')
                            ])
                        ], className="shadow-sm border-0")
                    ], id='leaderboard-section', style={'display': 'none'})
                ], lg=6)
            ])
        ], fluid=True, className="px-4"),

        # Current selection, replaced as a whole on every change
        dcc.Store(id='filter-selection-store', data=DEFAULT_SELECTION.to_dict()),
    ])
