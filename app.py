"""Dash application: layout and server entry point."""

import dash
from dash import dcc, html

from config import DEVICE_TIER, PARTICLE_COUNTS, TIME_SCALES, TIME_SCALE_DEFAULT, TOGGLES

app = dash.Dash(
    __name__,
    title="Solar Globe — Wind & Currents",
    update_title=None,
)
server = app.server  # for gunicorn

_TOGGLE_LABELS = {
    "solar": "Solar lighting",
    "wind": "Wind",
    "current": "Ocean currents",
    "coupling": "Flow coupling",
    "rotating": "Rotate globe",
}

# ── Info card helper ──────────────────────────────────────────────────

_CARD = {
    "background": "#0b1322", "borderRadius": "8px",
    "border": "1px solid #1c2a40", "padding": "12px 14px",
}


def _card(title, body, color="#80d5ff"):
    style = {**_CARD, "borderLeft": f"4px solid {color}"}
    return html.Div(style=style, children=[
        html.Div(title, style={"fontWeight": "700", "fontSize": "13px",
                                "marginBottom": "6px", "color": "#e6eefc"}),
        html.Div(body, style={"fontSize": "12px", "color": "#9fb2cc",
                               "lineHeight": "1.55"}),
    ])


_counts = PARTICLE_COUNTS[DEVICE_TIER]

# ── Layout ────────────────────────────────────────────────────────────

app.layout = html.Div(
    style={"fontFamily": "system-ui, -apple-system, sans-serif",
           "margin": "0 auto", "maxWidth": "1400px", "padding": "16px",
           "background": "#02040a", "color": "#e6eefc", "minHeight": "100vh"},
    children=[
        html.H2("Solar Globe",
                style={"marginBottom": "2px", "letterSpacing": "-0.5px"}),
        html.P("Day/night lighting, wind and ocean-current streaks driven by a simulated solar clock",
               style={"color": "#7d8fa8", "marginTop": 0, "fontSize": "13px",
                      "marginBottom": "14px"}),

        html.Div(
            style={"display": "grid", "gridTemplateColumns": "1fr 1fr 1fr",
                   "gap": "10px", "marginBottom": "14px"},
            children=[
                _card("Solar Clock",
                      "The subsolar point follows the simulated UTC time: "
                      "declination from a Fourier fit in the day of year, "
                      "longitude from the hour plus the equation of time. "
                      "Speed up time to watch the terminator sweep and the "
                      "seasons tilt the light."),
                _card("Flow Overlays",
                      f"{_counts['wind']:,} wind and {_counts['current']:,} current "
                      "particles advect through procedural fields: trades, "
                      "jets and polar easterlies for wind; equatorial bands and "
                      "western-boundary gyres for the ocean. Brighter streaks "
                      "are faster.",
                      "#e8a21a"),
                _card("Coupling",
                      "Mean wind speed pushes the cloud deck faster; stronger "
                      "currents and wind sharpen and brighten the ocean glint. "
                      "Switch coupling off to fall back to fixed baselines.",
                      "#7c3aed"),
            ],
        ),

        html.Div(
            style={"display": "flex", "alignItems": "center", "gap": "24px",
                   "flexWrap": "wrap", "marginBottom": "10px"},
            children=[
                dcc.Checklist(
                    id="toggles",
                    options=[{"label": _TOGGLE_LABELS[name], "value": name}
                             for name in TOGGLES],
                    value=list(TOGGLES),
                    inline=True,
                    inputStyle={"marginRight": "4px", "marginLeft": "12px"},
                    style={"fontSize": "13px"},
                ),
                html.Div(
                    style={"display": "flex", "alignItems": "center", "gap": "8px"},
                    children=[
                        html.Span("Time scale", style={"fontSize": "13px"}),
                        dcc.Dropdown(
                            id="time-scale",
                            options=[{"label": f"{scale:,}×", "value": scale}
                                     for scale in TIME_SCALES],
                            value=TIME_SCALE_DEFAULT,
                            clearable=False,
                            style={"width": "120px", "color": "#111"},
                        ),
                    ],
                ),
            ],
        ),

        dcc.Graph(id="globe-figure", style={"height": "640px"},
                  config={"scrollZoom": True, "displaylogo": False}),

        html.Div(
            style={"fontFamily": "ui-monospace, monospace", "fontSize": "12px",
                   "color": "#9fb2cc", "marginTop": "8px"},
            children=[html.Div(id="status-time"), html.Div(id="status-flow")],
        ),

        dcc.Interval(id="frame-interval", interval=200, n_intervals=0),
    ],
)

# Register callbacks
import callbacks  # noqa: F401, E402

if __name__ == "__main__":
    app.run(debug=True, port=8050)
