"""Procedural wind and ocean-current velocity fields on the sphere.

Both fields are sums of smooth latitude bands and localised Gaussian
features, shifted and phased by the solar clock so the flow migrates with
the seasons and carries slow eastward-propagating waves.  They are tuned
for looks, not fidelity to reanalysis data.

Every sampler is vectorised: ``lat``, ``lon`` and ``seed`` may be scalars
or equally-shaped arrays.

Public API
----------
gaussian(x, center, width)
periodic_lon_gaussian(lon, center, width)
FlowSampler           – single-method capability: sample(lat, lon, solar, seed)
WindSampler, CurrentSampler
SAMPLERS              – {"wind": WindSampler(), "current": CurrentSampler()}
"""

import numpy as np

_TAU = 2 * np.pi

# ── Helpers ─────────────────────────────────────────────────────────────


def gaussian(x, center, width):
    """exp(-((x - center) / width)^2)"""
    return np.exp(-(((x - center) / width) ** 2))


def lon_distance(lon, center):
    """Signed shortest angular distance lon - center, in [-180, 180)."""
    return np.mod(lon - center + 180.0, 360.0) - 180.0


def periodic_lon_gaussian(lon, center, width):
    """Gaussian on the 360°-periodic longitude axis (continuous across ±180°)."""
    return gaussian(lon_distance(lon, center), 0.0, width)


class FlowSampler:
    """Velocity field ``(u, v)``: u zonal (east +), v meridional (north +)."""

    name = "flow"

    def sample(self, lat, lon, solar, seed):
        raise NotImplementedError


# ── Wind ────────────────────────────────────────────────────────────────

_SEASONAL_SHIFT = 0.42       # band migration per degree of declination

# (center_lat, width, amplitude) — negative amplitude = easterly
_WIND_BANDS = [
    (14.0, 11.0, -0.62),     # NE trades
    (-14.0, 11.0, -0.62),    # SE trades
    (68.0, 9.0, -0.28),      # polar easterlies
    (-68.0, 9.0, -0.28),
]
_JET_LAT = 34.0
_JET_WIDTH = 8.0
_JET_AMPLITUDE = 0.74
_JET_MODULATION = 0.22
_HADLEY_AMPLITUDE = 0.16     # equatorward inflow toward the ITCZ


class WindSampler(FlowSampler):
    """Trades, westerly jets and polar easterlies with travelling waves."""

    name = "wind"

    def sample(self, lat, lon, solar, seed):
        shift = solar.subsolar_lat * _SEASONAL_SHIFT
        phase = _TAU * solar.day_progress
        lon_r = np.radians(lon)
        lat_r = np.radians(lat)
        seed_phase = _TAU * np.asarray(seed, dtype=np.float64)

        u = np.zeros(np.broadcast(lat, lon, seed).shape)
        v = np.zeros_like(u)

        for center, width, amp in _WIND_BANDS:
            u = u + amp * gaussian(lat, center + shift, width)

        jets = (gaussian(lat, _JET_LAT + shift, _JET_WIDTH)
                + gaussian(lat, -_JET_LAT + shift, _JET_WIDTH))
        u = u + jets * (_JET_AMPLITUDE
                        + _JET_MODULATION * np.sin(3 * lon_r - phase))

        # Meridional inflow toward the (shifted) thermal equator
        v = v + _HADLEY_AMPLITUDE * (gaussian(lat, shift - 12.0, 10.0)
                                     - gaussian(lat, shift + 12.0, 10.0))

        # Jet meanders: planetary waves drifting east through the day
        meander = 4 * lon_r - 2 * phase + seed_phase
        storm_track = (gaussian(lat, _JET_LAT + shift, 12.0)
                       + gaussian(lat, -_JET_LAT + shift, 12.0))
        v = v + 0.14 * np.sin(meander) * storm_track

        # Small-scale gusts for per-particle variety
        gust = 7 * lon_r + 3 * lat_r - 5 * phase + 1.7 * seed_phase
        u = u + 0.06 * np.sin(gust)
        v = v + 0.05 * np.cos(gust)

        return u, v


# ── Ocean currents ──────────────────────────────────────────────────────

# (center_lat, width, amplitude) — negative amplitude = westward
_CURRENT_BANDS = [
    (12.0, 5.0, -0.34),      # North Equatorial Current
    (-10.0, 5.0, -0.34),     # South Equatorial Current
    (5.0, 3.0, 0.30),        # Equatorial Counter-Current
    (42.0, 7.0, 0.26),       # North Atlantic / North Pacific drift
    (-45.0, 8.0, 0.22),      # southern subtropical return flow
    (-58.0, 6.0, 0.48),      # circumpolar current
    (68.0, 6.0, -0.12),      # subpolar westward flow
]

# (center_lon, center_lat, lon_width, lat_width, strength, boundary_sign)
_GYRES = [
    (-70.0, 34.0, 14.0, 10.0, 0.62, 1.0),    # western boundary current, N. Atlantic
    (145.0, 32.0, 14.0, 10.0, 0.55, 1.0),    # western boundary current, N. Pacific
    (20.0, -36.0, 16.0, 9.0, 0.42, -1.0),    # retroflection off southern Africa
]
_GYRE_BAND_LAT = 27.0
_GYRE_BAND_WIDTH = 12.0


class CurrentSampler(FlowSampler):
    """Zonal ocean bands, three boundary-current gyres and a gyre belt."""

    name = "current"

    def sample(self, lat, lon, solar, seed):
        phase = _TAU * solar.day_progress
        lon_r = np.radians(lon)
        seed_phase = _TAU * np.asarray(seed, dtype=np.float64)

        u = np.zeros(np.broadcast(lat, lon, seed).shape)
        v = np.zeros_like(u)

        for center, width, amp in _CURRENT_BANDS:
            u = u + amp * gaussian(lat, center, width)

        for c_lon, c_lat, w_lon, w_lat, strength, sign in _GYRES:
            weight = (periodic_lon_gaussian(lon, c_lon, w_lon)
                      * gaussian(lat, c_lat, w_lat))
            d_lon = lon_distance(lon, c_lon) / w_lon
            d_lat = (lat - c_lat) / w_lat
            # Solid-body swirl about the centre plus a poleward boundary jet
            u = u - strength * weight * d_lat
            v = v + strength * weight * (d_lon + 0.5 * sign)

        hemisphere = np.where(np.asarray(lat) >= 0, 1.0, -1.0)
        belt = gaussian(np.abs(lat), _GYRE_BAND_LAT, _GYRE_BAND_WIDTH)
        swirl = 2 * lon_r + 0.25 * phase + 0.6 * seed_phase
        u = u + 0.10 * hemisphere * belt * np.cos(swirl)
        v = v + 0.12 * hemisphere * belt * np.sin(swirl)

        return u, v


SAMPLERS = {
    "wind": WindSampler(),
    "current": CurrentSampler(),
}
