"""Feedback coupling: flow statistics → cloud drift and ocean glint.

Rolls the per-tick layer aggregates up into the few material parameters
the renderer exposes.  Holds no state of its own.
"""

import math
from dataclasses import dataclass

from config import (
    CLOUD_SPEED_BASELINE, CLOUD_SPEED_COUPLED_BASE,
    CLOUD_SPEED_WIND_GAIN, CLOUD_SPEED_TIME_GAIN,
    OCEAN_SHININESS_BASELINE, OCEAN_SPECULAR_BASELINE,
)
from model.advection import FlowLayer, speed_fraction


@dataclass(frozen=True)
class CouplingOutput:
    cloud_speed: float            # rad/s
    ocean_shininess: float
    ocean_specular: tuple         # (r, g, b) in [0, 1]


BASELINE = CouplingOutput(
    cloud_speed=CLOUD_SPEED_BASELINE,
    ocean_shininess=OCEAN_SHININESS_BASELINE,
    ocean_specular=OCEAN_SPECULAR_BASELINE,
)


def flow_factor(layer: FlowLayer) -> float:
    """Layer mean speed normalised to [0, 1] by its speed range."""
    return float(speed_fraction(layer.mean_speed, layer.speed_range))


def apply_coupling(state, wind_layer: FlowLayer,
                   current_layer: FlowLayer) -> CouplingOutput:
    """Derive cloud drift speed and ocean material response.

    Parameters
    ----------
    state : SimulationState
        Supplies the ``coupling`` toggle and ``time_scale``.
    wind_layer, current_layer : FlowLayer
        Their ``mean_speed`` aggregates from the current tick.
    """
    if not state.coupling:
        return BASELINE

    wind = flow_factor(wind_layer)
    current = flow_factor(current_layer)

    cloud_speed = CLOUD_SPEED_COUPLED_BASE + wind * CLOUD_SPEED_WIND_GAIN
    if state.time_scale > 1:
        cloud_speed += math.log10(state.time_scale + 1) * CLOUD_SPEED_TIME_GAIN

    r0, g0, b0 = OCEAN_SPECULAR_BASELINE
    specular = (
        min(r0 + wind * 0.08, 1.0),
        min(g0 + current * 0.12 + wind * 0.04, 1.0),
        min(b0 + current * 0.22 + wind * 0.05, 1.0),
    )

    return CouplingOutput(
        cloud_speed=cloud_speed,
        ocean_shininess=20.0 + current * 16.0 + wind * 6.0,
        ocean_specular=specular,
    )
