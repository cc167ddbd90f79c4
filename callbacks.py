"""Dash callbacks: drive the simulation from the frame interval, draw the globe.

Single callback: every interval tick (or control change) → sync toggles and
time scale into the shared context, replay the elapsed wall time as frames,
rebuild the globe figure and status readout.
"""

import threading
import time

import numpy as np
import plotly.graph_objects as go
from dash import Input, Output, callback

from config import (
    AXIAL_TILT_DEG, ATMOSPHERE_RADIUS, CLOUD_RADIUS,
    DEVICE_TIER, MESH_SEGMENTS, GLOBAL_SEED, TOGGLES,
)
from data.globe_mesh import (
    atmosphere_blend, cloud_points, night_mask, sphere_grid,
    spin_tilt_matrix, to_display,
)
from model.advection import FlowLayer
from model.ephemeris import lat_lon_to_vector
from model.simulation import (
    SimulationContext, advance_wall_time, create_context,
    set_time_scale, set_toggle,
)

# ── Shared simulation (single-process dev server) ──────────────────────

CONTEXT = create_context()
_last_wall = None
_FRAME_LOCK = threading.Lock()   # one frame at a time across server threads

# ── Static geometry ────────────────────────────────────────────────────

_SEGMENTS = MESH_SEGMENTS[DEVICE_TIER]
_EARTH = sphere_grid(1.0, _SEGMENTS)
_ATMOSPHERE = sphere_grid(ATMOSPHERE_RADIUS, _SEGMENTS // 2)
_CLOUD_LAT, _CLOUD_LON = cloud_points(np.random.default_rng(GLOBAL_SEED + 1))
_CLOUDS = lat_lon_to_vector(_CLOUD_LAT, _CLOUD_LON, CLOUD_RADIUS)

# ── Colour scales ──────────────────────────────────────────────────────

_EARTH_SCALE = [[0.0, "#4a98d1"], [1.0, "#0b1322"]]
_ATMOSPHERE_SCALE = [[0.0, "#0d1633"], [0.5, "#ff8c4d"], [1.0, "#80d5ff"]]


def _rgb(color):
    r, g, b = (int(round(255 * float(c))) for c in color)
    return f"rgb({r},{g},{b})"


def _scene_layout():
    axis = dict(visible=False, range=[-1.3, 1.3])
    return dict(
        scene=dict(
            xaxis=axis, yaxis=axis, zaxis=axis,
            aspectmode="cube",
            bgcolor="#02040a",
            camera=dict(eye=dict(x=0.2, y=-1.6, z=0.45)),
        ),
        margin=dict(l=0, r=0, t=0, b=0),
        showlegend=False,
        paper_bgcolor="#02040a",
        uirevision="globe",  # keep the user's camera between refreshes
    )


# ── Trace builders ─────────────────────────────────────────────────────

def _lighting(material, light_intensity):
    """Map Phong-style shininess/specular onto plotly's lighting model."""
    specular = min(3.2 * float(np.mean(material.ocean_specular)), 2.0)
    roughness = float(np.clip(1.0 - material.ocean_shininess / 50.0, 0.05, 1.0))
    return dict(
        ambient=0.35,
        diffuse=float(min(light_intensity / 2.2, 1.0)),
        specular=specular,
        roughness=roughness,
        fresnel=0.2,
    )


def _surface(points, color, colorscale, **kwargs):
    x, y, z = points
    return go.Surface(
        x=x, y=y, z=z, surfacecolor=color,
        cmin=0.0, cmax=1.0, colorscale=colorscale,
        showscale=False, hoverinfo="skip", **kwargs,
    )


def _segments(layer: FlowLayer, matrix):
    """Position/colour buffers → None-separated line vertices for Scatter3d."""
    pos = layer.position_view().reshape(-1, 2, 3)
    n = len(pos)
    if n == 0:
        return None

    x, y, z = to_display((pos[..., 0], pos[..., 1], pos[..., 2]), matrix)
    seg = np.full((3, n, 3), np.nan)
    seg[0, :, :2], seg[1, :, :2], seg[2, :, :2] = x, y, z

    shade = np.repeat(layer.shade_view().astype(np.float64), 3)

    xs, ys, zs = ([None if v != v else v for v in np.round(seg[k].ravel(), 4).tolist()]
                  for k in range(3))
    return go.Scatter3d(
        x=xs, y=ys, z=zs, mode="lines",
        line=dict(
            width=2 if layer.name == "wind" else 3,
            color=shade, cmin=0.0, cmax=1.0,
            colorscale=[[0.0, _rgb(layer.color_low)], [1.0, _rgb(layer.color_high)]],
        ),
        opacity=0.85, hoverinfo="skip", name=layer.name,
    )


def build_globe_figure(context: SimulationContext) -> go.Figure:
    frame = context.frame
    state = context.state
    globe_m = spin_tilt_matrix(frame.globe_angle, AXIAL_TILT_DEG)
    # Solar sun is globe-local; the static light is fixed in the scene
    sun_m = globe_m if state.solar else np.eye(3)
    sun = np.asarray(to_display(frame.sun_direction, sun_m), dtype=np.float64)

    earth = to_display(_EARTH, globe_m)
    fig = go.Figure()
    fig.add_trace(_surface(
        earth, night_mask(earth, sun), _EARTH_SCALE,
        lighting=_lighting(frame.material, frame.light_intensity),
        lightposition=dict(x=float(sun[0] * 1e4), y=float(sun[1] * 1e4),
                           z=float(sun[2] * 1e4)),
    ))

    cloud_m = spin_tilt_matrix(frame.globe_angle + frame.cloud_angle, AXIAL_TILT_DEG)
    cx, cy, cz = to_display(_CLOUDS, cloud_m)
    fig.add_trace(go.Scatter3d(
        x=np.round(cx, 4), y=np.round(cy, 4), z=np.round(cz, 4), mode="markers",
        marker=dict(size=2, color="rgba(255,255,255,0.36)"),
        hoverinfo="skip", name="clouds",
    ))

    for layer, enabled in ((context.current_layer, state.current),
                           (context.wind_layer, state.wind)):
        if enabled:
            trace = _segments(layer, globe_m)
            if trace is not None:
                fig.add_trace(trace)

    atmosphere_m = spin_tilt_matrix(frame.globe_angle + frame.atmosphere_angle,
                                    AXIAL_TILT_DEG)
    shell = to_display(_ATMOSPHERE, atmosphere_m)
    fig.add_trace(_surface(shell, atmosphere_blend(shell, sun), _ATMOSPHERE_SCALE,
                           opacity=0.16))

    fig.update_layout(**_scene_layout())
    return fig


# ── Control sync ───────────────────────────────────────────────────────

def sync_controls(context: SimulationContext, enabled, time_scale) -> None:
    """Apply checklist/dropdown values that differ from the current state."""
    enabled = set(enabled or ())
    for name in TOGGLES:
        want = name in enabled
        if getattr(context.state, name) != want:
            set_toggle(context, name, want)
    if time_scale is not None and float(time_scale) != context.state.time_scale:
        set_time_scale(context, int(time_scale))


def step_frame(context: SimulationContext, enabled, time_scale):
    """Sync controls, replay wall time since the last call, render.

    Serialised by ``_FRAME_LOCK`` so overlapping requests never share a
    wall-clock interval or update the particle buffers concurrently.
    """
    global _last_wall
    with _FRAME_LOCK:
        sync_controls(context, enabled, time_scale)

        now = time.monotonic()
        elapsed = 0.0 if _last_wall is None else now - _last_wall
        _last_wall = now

        frame = advance_wall_time(context, elapsed)
        return build_globe_figure(context), frame.status_time, frame.status_flow


# ── Callback: frame interval ───────────────────────────────────────────

@callback(
    Output("globe-figure", "figure"),
    Output("status-time", "children"),
    Output("status-flow", "children"),
    Input("frame-interval", "n_intervals"),
    Input("toggles", "value"),
    Input("time-scale", "value"),
)
def on_frame(n_intervals, enabled, time_scale):
    return step_frame(CONTEXT, enabled, time_scale)
