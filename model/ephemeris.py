"""Approximate solar ephemeris for a simulated UTC instant.

The declination and equation-of-time series are the usual truncated
Fourier fits in the fractional-year angle; accurate to a fraction of a
degree, which is ample for lighting a globe.

Public API
----------
SolarContext                       – immutable per-tick solar snapshot
compute_solar_context(ms) -> SolarContext
utc_instant(ms) -> datetime          – validated epoch-ms conversion
normalize_longitude(lon)           – wrap into (-180, 180]
lat_lon_to_vector(lat, lon, r)     – globe-local Cartesian position
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np

_MS_PER_HOUR = 3_600_000.0


@dataclass(frozen=True)
class SolarContext:
    virtual_time_ms: float
    day_of_year: int              # 1..366
    day_progress: float           # fraction of the UTC day, [0, 1)
    subsolar_lat: float           # degrees (declination)
    subsolar_lon: float           # degrees, (-180, 180]
    sun_direction: tuple          # unit vector, globe-local


def normalize_longitude(lon):
    """Wrap longitude(s) into (-180, 180].

    Accepts a scalar or an array; scalars come back as ``float``.
    """
    wrapped = np.mod(np.asarray(lon, dtype=np.float64) + 180.0, 360.0) - 180.0
    wrapped = np.where(wrapped <= -180.0, wrapped + 360.0, wrapped)
    return wrapped if wrapped.ndim else float(wrapped)


def lat_lon_to_vector(lat, lon, radius=1.0):
    """Project latitude/longitude (degrees) onto a sphere of ``radius``.

    Uses the same convention as the globe mesh: +y is north, longitude 0
    lies on -x and longitude +90 on +z.
    """
    la = np.radians(lat)
    lo = np.radians(lon)
    cos_la = np.cos(la)
    x = -radius * cos_la * np.cos(lo)
    y = radius * np.sin(la)
    z = radius * cos_la * np.sin(lo)
    return x, y, z


def utc_instant(virtual_time_ms: float) -> datetime:
    """Convert a UTC epoch in ms to an aware datetime, rejecting bad input."""
    if not math.isfinite(virtual_time_ms):
        raise ValueError(f"non-finite simulated time: {virtual_time_ms!r}")
    try:
        return datetime.fromtimestamp(virtual_time_ms / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError) as exc:
        raise ValueError(f"simulated time out of range: {virtual_time_ms!r}") from exc


def _declination(gamma):
    return (0.006918
            - 0.399912 * math.cos(gamma) + 0.070257 * math.sin(gamma)
            - 0.006758 * math.cos(2 * gamma) + 0.000907 * math.sin(2 * gamma)
            - 0.002697 * math.cos(3 * gamma) + 0.00148 * math.sin(3 * gamma))


def _equation_of_time(gamma):
    """Equation of time in minutes."""
    return 229.18 * (0.000075
                     + 0.001868 * math.cos(gamma)
                     - 0.032077 * math.sin(gamma)
                     - 0.014615 * math.cos(2 * gamma)
                     - 0.040849 * math.sin(2 * gamma))


def compute_solar_context(virtual_time_ms: float) -> SolarContext:
    """Compute subsolar point and sun direction for a UTC epoch in ms.

    Raises
    ------
    ValueError
        If ``virtual_time_ms`` is not finite.
    """
    instant = utc_instant(virtual_time_ms)
    midnight = instant.replace(hour=0, minute=0, second=0, microsecond=0)
    day_of_year = max(instant.timetuple().tm_yday, 1)
    utc_hours = (instant - midnight).total_seconds() * 1000.0 / _MS_PER_HOUR

    gamma = 2 * math.pi / 365 * (day_of_year - 1 + (utc_hours - 12) / 24)
    eot_minutes = _equation_of_time(gamma)

    subsolar_lat = math.degrees(_declination(gamma))
    subsolar_lon = normalize_longitude(180 - (utc_hours * 15 + eot_minutes * 0.25))

    x, y, z = lat_lon_to_vector(subsolar_lat, subsolar_lon)
    norm = math.sqrt(x * x + y * y + z * z)
    sun_direction = (float(x / norm), float(y / norm), float(z / norm))

    return SolarContext(
        virtual_time_ms=float(virtual_time_ms),
        day_of_year=day_of_year,
        day_progress=utc_hours / 24,
        subsolar_lat=subsolar_lat,
        subsolar_lon=subsolar_lon,
        sun_direction=sun_direction,
    )
