# =============================================================================
# EU Digital Exclusion Map
# =============================================================================
"""
Digital exclusion dashboard for European countries

Shows a small set of accessibility / inclusion indicators per country with
coordinated views.

FEATURES:
- Choropleth Map: selected indicator per country
- Ranking: countries ordered from best to worst on the selected indicator
- Scatter Plot: digital context against the selected indicator
- Gender Ratio: female / male visual impairment counts

LINKED VIEW INTERACTIONS:
- Hover a country in any view -> highlighted in all views
- Click -> pin the country (hover is ignored until the pin is toggled off)
- Clear selection -> drop hover and pin

USAGE:
    python app.py [--csv PATH] [--geojson PATH_OR_URL] [--port 8050]
    Open browser to http://127.0.0.1:8050/
"""
# =============================================================================
from __future__ import annotations

import argparse
import logging
from typing import Any, Iterable, Mapping

from dash import Dash, dcc, html, Input, Output, State, ctx, no_update

import settings
from data_loader import DataLoadError, Dataset, load_dataset
from figures import build_views, detail_lines, empty_figure
from metrics import DEFAULT_METRIC, METRIC_OPTIONS, get_metric
from selection import Clear, Click, Enter, Event, Leave, MetricChange, SelectionState, apply_events

log = logging.getLogger(__name__)

VIEW_IDS = ("map", "rank", "scatter", "gender")
LOAD_ERROR_TEXT = "The data could not be loaded. Please reload the page or try again later."

NAV_STYLE = {
    "height": "70px", "display": "flex", "alignItems": "center",
    "justifyContent": "center", "padding": "0 32px",
    "background": "linear-gradient(180deg, #12141a 0%, #0d0e12 100%)",
    "borderBottom": f"1px solid {settings.BORDER}",
}
PANEL_STYLE = {
    "background": settings.PANEL, "border": f"1px solid {settings.BORDER}", "borderRadius": "14px",
    "padding": "18px", "boxShadow": "0 6px 20px rgba(0,0,0,0.25)",
}
LABEL_STYLE = {"fontSize": "11px", "color": settings.TEXT_DIM, "textTransform": "uppercase",
               "letterSpacing": "0.5px", "marginBottom": "8px", "display": "block", "fontWeight": 600}
BTN_STYLE = {"background": settings.ACCENT, "border": f"1px solid {settings.BORDER}", "color": "white",
             "padding": "8px 14px", "borderRadius": "8px", "cursor": "pointer", "fontSize": "13px"}
GRAPH_CONFIG = {"displayModeBar": False}


# -----------------------------
# EVENTS FROM DASH TRIGGERS
# -----------------------------
def code_from_event(data: Mapping[str, Any] | None) -> str | None:
    """Country code carried by a hoverData / clickData payload."""
    if not data or not data.get("points"):
        return None
    point = data["points"][0]
    cd = point.get("customdata")
    if isinstance(cd, (list, tuple)):
        cd = cd[0] if cd else None
    code = cd if cd is not None else point.get("location")
    return code if isinstance(code, str) and code else None


def events_from_triggered(triggered: Iterable[Mapping[str, Any]]) -> list[Event]:
    """Translate ``ctx.triggered`` entries into selection events."""
    events: list[Event] = []
    for t in triggered:
        comp, _, prop = t.get("prop_id", "").partition(".")
        value = t.get("value")
        if comp == "clear-selection" and prop == "n_clicks":
            events.append(Clear())
        elif comp == "metric" and prop == "value":
            events.append(MetricChange())
        elif comp in VIEW_IDS and prop == "hoverData":
            code = code_from_event(value)
            events.append(Enter(code) if code else Leave())
        elif comp in VIEW_IDS and prop == "clickData":
            code = code_from_event(value)
            if code:
                events.append(Click(code))
    return events


def next_selection(store: Mapping[str, Any] | None, triggered: Iterable[Mapping[str, Any]],
                   known_codes) -> dict[str, str | None]:
    state = SelectionState.from_store(store)
    return apply_events(state, events_from_triggered(triggered), known_codes).to_store()


# -----------------------------
# RENDER
# -----------------------------
def detail_card(ds: Dataset, metric_key: str, state: SelectionState) -> list:
    record = None if state.is_idle else ds.get(state.active_code)
    if record is None:
        return [html.Div("Hover a country to see its values, click to pin it.",
                         style={"color": settings.TEXT_DIM})]
    lines = detail_lines(record, metric_key)
    children = [html.Div(html.Strong(lines[0]), style={"fontSize": "16px", "marginBottom": "6px"})]
    children += [html.Div(line) for line in lines[1:]]
    if state.pinned is not None:
        children.append(html.Div("Pinned · click the country again or use Clear selection",
                                 style={"color": settings.TEXT_DIM, "fontSize": "11px", "marginTop": "8px"}))
    return children


def help_text(metric_key: str) -> list:
    metric = get_metric(metric_key)
    return [html.Strong(metric.label), html.Span(f" · {metric.direction_hint}. "),
            html.Span(metric.help_text)]


def render_views(ds: Dataset, metric_key: str | None, store: Mapping[str, Any] | None) -> tuple:
    """Every view from one (metric, selection) snapshot, so they always agree."""
    metric_key = get_metric(metric_key).key
    state = SelectionState.from_store(store)
    views = build_views(ds, metric_key, state.active_code)
    return (*(views[v] for v in VIEW_IDS), detail_card(ds, metric_key, state), help_text(metric_key))


# -----------------------------
# LAYOUT
# -----------------------------
def _panel(title: str, graph_id: str, height: str = "40vh") -> html.Div:
    return html.Div(style=PANEL_STYLE, children=[
        html.H3(title, style={"margin": "0 0 12px 0", "fontSize": "18px", "opacity": 0.85}),
        dcc.Graph(id=graph_id, style={"height": height}, config=GRAPH_CONFIG,
                  figure=empty_figure(), clear_on_unhover=True),
    ])


def _header() -> html.Div:
    return html.Div(style=NAV_STYLE, children=[
        html.Div(style={"textAlign": "center"}, children=[
            html.Div("EU Digital Exclusion Map", style={"fontWeight": 700, "fontSize": "28px",
                                                        "color": settings.TEXT_BRIGHT}),
            html.Div("Web accessibility and inclusion of people with visual impairment",
                     style={"fontSize": "14px", "color": settings.TEXT_DIM}),
        ]),
    ])


def build_layout() -> html.Div:
    return html.Div(style={"background": settings.BG, "color": settings.TEXT, "minHeight": "100vh",
                           "fontFamily": settings.FONT_FAMILY}, children=[
        dcc.Store(id="selection", data=SelectionState().to_store()),
        _header(),

        # Control bar
        html.Div(style={"display": "grid", "gridTemplateColumns": "1fr 200px", "gap": "20px",
                        "padding": "20px 32px", "borderBottom": f"1px solid {settings.BORDER}"}, children=[
            html.Div(children=[
                html.Label("Select Indicator", style=LABEL_STYLE),
                dcc.Dropdown(id="metric", options=METRIC_OPTIONS, value=DEFAULT_METRIC, clearable=False,
                             style={"color": "#111"}),
            ]),
            html.Div(style={"display": "flex", "alignItems": "flex-end"}, children=[
                html.Button("Clear selection", id="clear-selection", n_clicks=0, style=BTN_STYLE),
            ]),
        ]),
        html.Div(id="help", style={"padding": "12px 32px", "color": settings.TEXT_DIM, "fontSize": "13px"}),

        html.Div(style={"display": "grid", "gridTemplateColumns": "2fr 1fr", "gap": "20px",
                        "padding": "20px 32px"}, children=[
            _panel("Map", "map", height="60vh"),
            html.Div(style=PANEL_STYLE, children=[
                html.H3("Country", style={"margin": "0 0 12px 0", "fontSize": "18px", "opacity": 0.85}),
                html.Div(id="detail", style={"fontSize": "13px", "lineHeight": "1.7"}),
            ]),
        ]),
        html.Div(style={"display": "grid", "gridTemplateColumns": "1fr 1fr 1fr", "gap": "20px",
                        "padding": "0 32px 32px"}, children=[
            _panel("Ranking", "rank"),
            _panel("Digital context vs indicator", "scatter"),
            _panel("Gender ratio (female / male)", "gender"),
        ]),
    ])


def error_layout(message: str = LOAD_ERROR_TEXT) -> html.Div:
    return html.Div(style={"background": settings.BG, "color": settings.TEXT, "minHeight": "100vh",
                           "fontFamily": settings.FONT_FAMILY}, children=[
        _header(),
        html.Div(message, id="help", role="alert",
                 style={"padding": "24px 32px", "color": settings.DANGER, "fontSize": "15px"}),
    ])


# -----------------------------
# APP
# -----------------------------
def create_app(ds: Dataset | None) -> Dash:
    """Dash app over ``ds``; with no dataset only the load error is shown."""
    app = Dash(__name__, title="EU Digital Exclusion Map")
    if ds is None:
        app.layout = error_layout()
        return app

    app.layout = build_layout()
    known = ds.known_codes

    @app.callback(
        Output("selection", "data"),
        *[Input(v, "hoverData") for v in VIEW_IDS],
        *[Input(v, "clickData") for v in VIEW_IDS],
        Input("clear-selection", "n_clicks"),
        Input("metric", "value"),
        State("selection", "data"),
        prevent_initial_call=True,
    )
    def update_selection(*args):
        store = args[-1]
        new = next_selection(store, ctx.triggered, known)
        return no_update if new == store else new

    @app.callback(
        *[Output(v, "figure") for v in VIEW_IDS],
        Output("detail", "children"), Output("help", "children"),
        Input("metric", "value"), Input("selection", "data"),
    )
    def render(metric_key, store):
        return render_views(ds, metric_key, store)

    return app


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="EU digital exclusion dashboard")
    parser.add_argument("--csv", default=str(settings.CSV_PATH), help="metrics table (CSV)")
    parser.add_argument("--geojson", default=settings.GEOJSON_SOURCE, help="boundary GeoJSON path or URL")
    parser.add_argument("--host", default=settings.HOST)
    parser.add_argument("--port", type=int, default=settings.PORT)
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        ds = load_dataset(args.csv, args.geojson)
    except DataLoadError as exc:
        log.error("Error loading files: %s", exc)
        ds = None

    app = create_app(ds)
    app.run(host=args.host, port=args.port, debug=args.debug)


# -----------------------------
# RUN
# -----------------------------
if __name__ == "__main__":
    main()
