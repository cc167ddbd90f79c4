"""Simulation clock and per-frame driver.

One ``SimulationContext`` carries everything that changes between frames:
the user-facing state, both flow layers, the latest solar snapshot, and the
``RenderFrame`` of values handed to the renderer.  ``tick`` runs one frame
to completion in a fixed order: clock → sun → overlays → coupling → readout.
"""

import logging
import math
import time
from dataclasses import dataclass, field

import numpy as np

from config import (
    MAX_FRAME_DELTA, MAX_CATCHUP_FRAMES, READOUT_INTERVAL,
    TIME_SCALES, TIME_SCALE_DEFAULT, TOGGLES,
    STATIC_SUN_POSITION, STATIC_LIGHT_INTENSITY, SOLAR_LIGHT_INTENSITY,
    GLOBE_SPIN_SPEED, ATMOSPHERE_SPIN_SPEED, GLOBAL_SEED,
)
from model.advection import FlowLayer, create_layer, update_layer
from model.coupling import BASELINE, CouplingOutput, apply_coupling
from model.ephemeris import SolarContext, compute_solar_context, utc_instant

LOGGER = logging.getLogger(__name__)

_STATIC_SUN = tuple(float(c) for c in
                    np.asarray(STATIC_SUN_POSITION) / np.linalg.norm(STATIC_SUN_POSITION))


@dataclass
class SimulationState:
    virtual_time_ms: float
    time_scale: float = TIME_SCALE_DEFAULT
    solar: bool = True
    wind: bool = True
    current: bool = True
    coupling: bool = True
    rotating: bool = True

    def __post_init__(self):
        if not self.time_scale > 0:
            raise ValueError(f"time_scale must be positive, got {self.time_scale}")


class SimulationClock:
    """Advances simulated time from clamped wall-clock deltas."""

    def __init__(self, max_delta: float = MAX_FRAME_DELTA):
        self.max_delta = max_delta

    def clamp(self, wall_delta: float) -> float:
        if not math.isfinite(wall_delta):
            LOGGER.warning("Discarding non-finite frame delta %r", wall_delta)
            return 0.0
        return min(max(wall_delta, 0.0), self.max_delta)

    def advance(self, state: SimulationState, wall_delta: float) -> float:
        """Move ``state.virtual_time_ms`` forward; return the clamped delta."""
        delta = self.clamp(wall_delta)
        state.virtual_time_ms += delta * 1000.0 * state.time_scale
        return delta


@dataclass
class RenderFrame:
    """Values written to the renderer after each tick."""
    sun_direction: tuple = _STATIC_SUN
    light_intensity: float = STATIC_LIGHT_INTENSITY
    globe_angle: float = 0.0          # rad, spin about the tilted axis
    cloud_angle: float = 0.0          # rad, extra cloud drift on top of spin
    atmosphere_angle: float = 0.0
    material: CouplingOutput = BASELINE
    status_time: str = ""
    status_flow: str = ""


@dataclass
class SimulationContext:
    state: SimulationState
    wind_layer: FlowLayer
    current_layer: FlowLayer
    clock: SimulationClock = field(default_factory=SimulationClock)
    solar: SolarContext = None
    frame: RenderFrame = field(default_factory=RenderFrame)
    readout_elapsed: float = math.inf  # forces a readout on the first tick

    def layers(self):
        return self.wind_layer, self.current_layer


def create_context(virtual_time_ms: float = None, time_scale: float = TIME_SCALE_DEFAULT,
                   wind_count: int = None, current_count: int = None,
                   seed: int = GLOBAL_SEED) -> SimulationContext:
    """Build a fresh context starting at ``virtual_time_ms`` (default: now)."""
    if virtual_time_ms is None:
        virtual_time_ms = time.time() * 1000.0
    rng = np.random.default_rng(seed)
    state = SimulationState(virtual_time_ms=float(virtual_time_ms),
                            time_scale=_check_time_scale(time_scale))
    context = SimulationContext(
        state=state,
        wind_layer=create_layer("wind", wind_count, rng),
        current_layer=create_layer("current", current_count, rng),
    )
    context.solar = compute_solar_context(state.virtual_time_ms)
    return context


# ── UI-facing setters ──────────────────────────────────────────────────

def _check_time_scale(time_scale):
    if time_scale not in TIME_SCALES:
        raise ValueError(f"unrecognised time scale {time_scale!r}; "
                         f"expected one of {TIME_SCALES}")
    return time_scale


def set_time_scale(context: SimulationContext, time_scale: float) -> None:
    context.state.time_scale = _check_time_scale(time_scale)
    LOGGER.info("Time scale set to %sx", time_scale)


def set_toggle(context: SimulationContext, name: str, enabled: bool) -> None:
    if name not in TOGGLES:
        raise ValueError(f"unknown toggle {name!r}; expected one of {TOGGLES}")
    setattr(context.state, name, bool(enabled))
    LOGGER.info("Toggle %s -> %s", name, "on" if enabled else "off")


# ── Readout ────────────────────────────────────────────────────────────

def format_time_status(solar: SolarContext) -> str:
    stamp = utc_instant(solar.virtual_time_ms).strftime("%Y-%m-%d %H:%M:%S")
    return (f"UTC {stamp} | Subsolar "
            f"{solar.subsolar_lat:+.1f}°, {solar.subsolar_lon:+.1f}°")


def _relative_speed(layer: FlowLayer, enabled: bool) -> str:
    if not enabled:
        return "OFF"
    return f"{layer.mean_speed / layer.speed_range:.2f}"


def format_flow_status(context: SimulationContext) -> str:
    state = context.state
    return (f"Wind {_relative_speed(context.wind_layer, state.wind)} | "
            f"Current {_relative_speed(context.current_layer, state.current)} (relative)")


# ── Frame driver ───────────────────────────────────────────────────────

def tick(context: SimulationContext, wall_delta: float) -> RenderFrame:
    """Run one frame: clock, sun, overlays, coupling, readout."""
    state = context.state
    frame = context.frame

    delta = context.clock.advance(state, wall_delta)
    solar = compute_solar_context(state.virtual_time_ms)
    context.solar = solar

    if state.solar:
        frame.sun_direction = solar.sun_direction
        frame.light_intensity = SOLAR_LIGHT_INTENSITY
    else:
        frame.sun_direction = _STATIC_SUN
        frame.light_intensity = STATIC_LIGHT_INTENSITY

    context.wind_layer.visible = state.wind
    context.current_layer.visible = state.current
    for layer in context.layers():
        update_layer(layer, delta, solar)

    frame.material = apply_coupling(state, context.wind_layer, context.current_layer)

    if state.rotating:
        frame.globe_angle = (frame.globe_angle + delta * GLOBE_SPIN_SPEED) % (2 * math.pi)
        frame.cloud_angle = (frame.cloud_angle + delta * frame.material.cloud_speed) % (2 * math.pi)
    frame.atmosphere_angle = (frame.atmosphere_angle + delta * ATMOSPHERE_SPIN_SPEED) % (2 * math.pi)

    # Readout cadence follows wall time, independent of frame rate
    context.readout_elapsed += delta
    if context.readout_elapsed >= READOUT_INTERVAL:
        context.readout_elapsed = 0.0
        frame.status_time = format_time_status(solar)
        frame.status_flow = format_flow_status(context)
        LOGGER.debug("%s | %s", frame.status_time, frame.status_flow)

    return frame


def advance_wall_time(context: SimulationContext, elapsed: float) -> RenderFrame:
    """Replay ``elapsed`` wall seconds as frames of at most MAX_FRAME_DELTA.

    Long gaps (a suspended tab, a slow refresh) are capped at
    MAX_CATCHUP_FRAMES frames.
    """
    if not math.isfinite(elapsed) or elapsed <= 0:
        return tick(context, elapsed)
    step = context.clock.max_delta
    frames = min(math.ceil(elapsed / step), MAX_CATCHUP_FRAMES)
    per_frame = min(elapsed / frames, step)
    for _ in range(frames):
        tick(context, per_frame)
    return context.frame
