"""Globe geometry and per-vertex shading for the plotly renderer.

Everything here lives in globe-local coordinates (+y north, see
``model.ephemeris.lat_lon_to_vector``); ``to_display`` applies the axial
tilt and spin and converts to plotly's z-up frame.

Public API
----------
sphere_grid(radius, segments) -> (x, y, z)   – 2-D surface arrays
night_mask(normals, sun)                     – 0 on the day side, 1 deep in night
atmosphere_blend(normals, sun)               – 0 night … 0.5 twilight … 1 day
cloud_points(rng) -> (lat, lon)              – procedural cloud deck
spin_tilt_matrix(spin, tilt_deg) -> (3, 3)
to_display(points, matrix) -> (x, y, z)
"""

import numpy as np
from scipy.ndimage import gaussian_filter

from config import CLOUD_COVER_FRACTION, CLOUD_GRID
from model.ephemeris import lat_lon_to_vector


def sphere_grid(radius=1.0, segments=64):
    """Latitude/longitude grid of a sphere as (segments+1, 2*segments+1) arrays."""
    lat = np.linspace(-90.0, 90.0, segments + 1)
    lon = np.linspace(-180.0, 180.0, 2 * segments + 1)
    LON, LAT = np.meshgrid(lon, lat)
    return lat_lon_to_vector(LAT, LON, radius)


def smoothstep(edge0, edge1, x):
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def _facing(normals, sun):
    """dot(n, sun) for normals given as an (x, y, z) tuple of arrays."""
    nx, ny, nz = normals
    norm = np.sqrt(nx ** 2 + ny ** 2 + nz ** 2)
    norm = np.where(norm > 0, norm, 1.0)
    sx, sy, sz = sun
    return (nx * sx + ny * sy + nz * sz) / norm


def night_mask(normals, sun):
    """Darkness factor used for the night-lights layer."""
    return smoothstep(-0.24, 0.32, -_facing(normals, sun))


def atmosphere_blend(normals, sun):
    """Scalar driving the atmosphere colour: night → twilight → day."""
    facing = _facing(normals, sun)
    day = smoothstep(-0.1, 0.35, facing)
    twilight = np.exp(-((facing / 0.18) ** 2))
    return np.clip(0.5 * twilight * (1.0 - day) + day, 0.0, 1.0)


def cloud_points(rng, cover=CLOUD_COVER_FRACTION, grid=CLOUD_GRID):
    """Scatter cloud puffs where smoothed noise exceeds its cover quantile.

    Noise is filtered with wrap-around in longitude so the deck has no
    seam at the antimeridian.
    """
    n_lat, n_lon = grid
    noise = rng.normal(0.0, 1.0, grid)
    noise = gaussian_filter(noise, sigma=(2.0, 3.0), mode=("nearest", "wrap"))
    # Thin the polar rows so points are not crowded where meridians converge
    lat_axis = np.linspace(-80.0, 80.0, n_lat)
    lon_axis = np.linspace(-180.0, 180.0, n_lon, endpoint=False)
    keep = rng.random(grid) < np.cos(np.radians(lat_axis))[:, None]
    cloudy = (noise > np.quantile(noise, 1.0 - cover)) & keep
    rows, cols = np.nonzero(cloudy)
    return lat_axis[rows], lon_axis[cols]


def spin_tilt_matrix(spin, tilt_deg):
    """Rotation: spin about the globe's +y axis, then tilt about +z."""
    c, s = np.cos(spin), np.sin(spin)
    spin_m = np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])
    t = np.radians(tilt_deg)
    ct, st = np.cos(t), np.sin(t)
    tilt_m = np.array([[ct, -st, 0.0], [st, ct, 0.0], [0.0, 0.0, 1.0]])
    return tilt_m @ spin_m


def to_display(points, matrix):
    """Rotate globe-local (x, y, z) arrays and map y-up to plotly's z-up."""
    x, y, z = (np.asarray(p, dtype=np.float64) for p in points)
    shape = x.shape
    stacked = np.stack([x.ravel(), y.ravel(), z.ravel()])
    rx, ry, rz = matrix @ stacked
    # y-up → z-up is a +90° turn about x: (x, y, z) → (x, -z, y)
    return rx.reshape(shape), (-rz).reshape(shape), ry.reshape(shape)
