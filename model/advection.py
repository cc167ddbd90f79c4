"""Vectorised particle advection for the wind and current overlays.

Each layer owns a fixed particle set and two pre-allocated float32 buffers
(line-segment endpoints and their colours).  ``update_layer`` advects every
particle by its locally sampled velocity, reflects particles off the polar
caps, and rewrites both buffers in place — nothing is reallocated per tick.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from config import (
    LAYERS, PARTICLE_COUNTS, DEVICE_TIER,
    LAT_LIMIT, POLE_REFLECT_LAT, COS_LAT_FLOOR, SEED_LAT_MAX,
    GLOBAL_SEED,
)
from data.flow_fields import SAMPLERS, FlowSampler
from model.ephemeris import SolarContext, lat_lon_to_vector, normalize_longitude

LOGGER = logging.getLogger(__name__)


@dataclass
class FlowLayer:
    name: str
    lat: np.ndarray               # (n,) degrees, within [-LAT_LIMIT, LAT_LIMIT]
    lon: np.ndarray               # (n,) degrees, within (-180, 180]
    seed: np.ndarray              # (n,) in [0, 1), fixed at creation
    radius: float
    speed_to_degrees_scale: float
    line_length: float
    speed_range: float
    color_low: np.ndarray
    color_high: np.ndarray
    sampler: FlowSampler
    visible: bool = True
    mean_speed: float = 0.0
    mean_zonal: float = 0.0
    positions: np.ndarray = field(init=False, repr=False)
    colors: np.ndarray = field(init=False, repr=False)
    shade: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        if self.speed_range <= 0:
            raise ValueError(f"speed_range must be positive, got {self.speed_range}")
        n = len(self.lat)
        self.positions = np.zeros(2 * n * 3, dtype=np.float32)
        self.colors = np.zeros(2 * n * 3, dtype=np.float32)
        self.shade = np.zeros(n, dtype=np.float32)   # speed fraction per particle
        # Segment views (n, 2, 3) sharing memory with the flat buffers
        self._pos3 = self.positions.reshape(n, 2, 3)
        self._col3 = self.colors.reshape(n, 2, 3)

    @property
    def particle_count(self) -> int:
        return len(self.lat)

    def position_view(self) -> np.ndarray:
        """Read-only view of the position buffer for the rendering bridge."""
        view = self.positions.view()
        view.flags.writeable = False
        return view

    def color_view(self) -> np.ndarray:
        view = self.colors.view()
        view.flags.writeable = False
        return view

    def shade_view(self) -> np.ndarray:
        view = self.shade.view()
        view.flags.writeable = False
        return view


def create_layer(name: str, count: int = None,
                 rng: np.random.Generator = None) -> FlowLayer:
    """Build the ``"wind"`` or ``"current"`` layer from config defaults.

    Particles are seeded uniformly by area between ±SEED_LAT_MAX.
    """
    if name not in LAYERS:
        raise ValueError(f"unknown flow layer {name!r}; expected one of {sorted(LAYERS)}")
    count = count if count is not None else PARTICLE_COUNTS[DEVICE_TIER][name]
    rng = rng if rng is not None else np.random.default_rng(GLOBAL_SEED)
    tuning = LAYERS[name]

    sin_max = np.sin(np.radians(SEED_LAT_MAX))
    lat = np.degrees(np.arcsin(rng.uniform(-sin_max, sin_max, count)))
    lon = normalize_longitude(rng.uniform(-180.0, 180.0, count))
    seed = rng.random(count)

    layer = FlowLayer(
        name=name,
        lat=lat,
        lon=lon,
        seed=seed,
        radius=tuning["radius"],
        speed_to_degrees_scale=tuning["speed_to_degrees_scale"],
        line_length=tuning["line_length"],
        speed_range=tuning["speed_range"],
        color_low=np.asarray(tuning["color_low"], dtype=np.float64),
        color_high=np.asarray(tuning["color_high"], dtype=np.float64),
        sampler=SAMPLERS[name],
    )
    LOGGER.info("Created %s layer with %d particles (tier=%s)",
                name, count, DEVICE_TIER)
    return layer


def clamped_cos_lat(lat):
    """cos(lat) floored at COS_LAT_FLOOR, safe as a longitude divisor."""
    return np.maximum(np.cos(np.radians(lat)), COS_LAT_FLOOR)


def _reflect_poles(lat, lon):
    """Bounce particles off ±POLE_REFLECT_LAT, flipping them across the pole."""
    north = lat > POLE_REFLECT_LAT
    south = lat < -POLE_REFLECT_LAT
    lat = np.where(north, 2 * POLE_REFLECT_LAT - lat, lat)
    lat = np.where(south, -2 * POLE_REFLECT_LAT - lat, lat)
    lon = np.where(north | south, lon + 180.0, lon)
    return np.clip(lat, -LAT_LIMIT, LAT_LIMIT), lon


def speed_fraction(speed, speed_range):
    return np.clip(speed / speed_range, 0.0, 1.0)


def update_layer(layer: FlowLayer, delta_seconds: float,
                 solar: SolarContext) -> None:
    """Advect ``layer`` by ``delta_seconds`` and refresh its buffers in place.

    A hidden layer is frozen: its aggregates read zero and no particle moves.
    """
    if not layer.visible:
        layer.mean_speed = 0.0
        layer.mean_zonal = 0.0
        return

    n = layer.particle_count
    if n == 0:
        layer.mean_speed = 0.0
        layer.mean_zonal = 0.0
        return

    u, v = layer.sampler.sample(layer.lat, layer.lon, solar, layer.seed)
    u = np.broadcast_to(u, (n,))
    v = np.broadcast_to(v, (n,))
    speed = np.hypot(u, v)

    sum_speed = float(speed.sum())
    sum_zonal = float(u.sum())

    drift = layer.speed_to_degrees_scale * delta_seconds
    lat = layer.lat + v * drift
    lon = layer.lon + (u * drift) / clamped_cos_lat(layer.lat)
    lat, lon = _reflect_poles(lat, lon)
    lon = normalize_longitude(lon)

    layer.lat[:] = lat
    layer.lon[:] = lon

    # Streak tail: offset along the instantaneous heading, longer when faster
    heading = np.maximum(speed, 1e-9)
    streak = layer.line_length * (0.45 + speed * 0.7)
    end_lat = np.clip(lat + (v / heading) * streak, -LAT_LIMIT, LAT_LIMIT)
    end_lon = normalize_longitude(lon + (u / heading) * streak / clamped_cos_lat(lat))

    pos = layer._pos3
    pos[:, 0, 0], pos[:, 0, 1], pos[:, 0, 2] = lat_lon_to_vector(lat, lon, layer.radius)
    pos[:, 1, 0], pos[:, 1, 1], pos[:, 1, 2] = lat_lon_to_vector(end_lat, end_lon, layer.radius)

    frac = speed_fraction(speed, layer.speed_range)
    layer.shade[:] = frac
    rgb = layer.color_low + (layer.color_high - layer.color_low) * frac[:, None]
    layer._col3[:, 0, :] = rgb
    layer._col3[:, 1, :] = rgb

    layer.mean_speed = sum_speed / n
    layer.mean_zonal = sum_zonal / n
