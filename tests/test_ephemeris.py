import math

import numpy as np
import pytest

from model.ephemeris import (
    compute_solar_context, lat_lon_to_vector, normalize_longitude,
)


@pytest.mark.parametrize("lon", [
    0.0, 180.0, -180.0, 179.999, -179.999, 360.0, -360.0, 540.0, -540.0,
    725.5, -725.5, 1e-20, -1e-20, 1e6, -1e6,
])
def test_normalize_longitude_range_and_idempotent(lon):
    once = normalize_longitude(lon)
    assert -180.0 < once <= 180.0
    assert normalize_longitude(once) == once


def test_normalize_longitude_seam_maps_to_plus_180():
    assert normalize_longitude(-180.0) == 180.0
    assert normalize_longitude(180.0) == 180.0
    assert normalize_longitude(190.0) == pytest.approx(-170.0)


def test_normalize_longitude_arrays():
    lon = np.linspace(-1000, 1000, 4001)
    out = normalize_longitude(lon)
    assert out.shape == lon.shape
    assert np.all((out > -180.0) & (out <= 180.0))
    np.testing.assert_array_equal(normalize_longitude(out), out)


@pytest.mark.parametrize("radius", [1.0, 1.006, 1.03, 2.5])
def test_projection_preserves_radius(radius):
    lat, lon = np.meshgrid(np.linspace(-90, 90, 37), np.linspace(-179.5, 180, 72))
    x, y, z = lat_lon_to_vector(lat, lon, radius)
    np.testing.assert_allclose(np.sqrt(x ** 2 + y ** 2 + z ** 2), radius, rtol=1e-12)


def test_projection_axes():
    assert lat_lon_to_vector(90, 0) == pytest.approx((0.0, 1.0, 0.0), abs=1e-12)
    assert lat_lon_to_vector(0, 0) == pytest.approx((-1.0, 0.0, 0.0), abs=1e-12)
    assert lat_lon_to_vector(0, 90) == pytest.approx((0.0, 0.0, 1.0), abs=1e-12)


def test_june_solstice_noon(utc_ms):
    solar = compute_solar_context(utc_ms(2024, 6, 21, 12, 0, 0))
    assert solar.day_of_year == 173
    assert solar.day_progress == pytest.approx(0.5)
    assert solar.subsolar_lat == pytest.approx(23.4, abs=0.5)
    assert abs(solar.subsolar_lon) < 3.0


def test_december_solstice_is_south(utc_ms):
    solar = compute_solar_context(utc_ms(2023, 12, 22, 0, 0, 0))
    assert solar.subsolar_lat == pytest.approx(-23.4, abs=0.5)
    # Midnight UTC puts the sun over the antimeridian
    assert abs(abs(solar.subsolar_lon) - 180.0) < 5.0


def test_declination_bounded_over_year(utc_ms):
    start = utc_ms(2025, 1, 1, 12, 0, 0)
    lats = [compute_solar_context(start + day * 86_400_000).subsolar_lat
            for day in range(366)]
    assert max(lats) <= 23.5
    assert min(lats) >= -23.5
    assert max(lats) > 23.0 and min(lats) < -23.0


def test_day_of_year_bounds(utc_ms):
    assert compute_solar_context(utc_ms(2024, 1, 1, 0, 0, 0)).day_of_year == 1
    assert compute_solar_context(utc_ms(2024, 12, 31, 23, 59, 59)).day_of_year == 366
    assert compute_solar_context(utc_ms(2023, 12, 31, 6, 0, 0)).day_of_year == 365


def test_day_progress_sub_second(utc_ms):
    solar = compute_solar_context(utc_ms(2024, 3, 1, 18, 0, 0) + 500)
    assert solar.day_progress == pytest.approx((18 + 0.5 / 3600) / 24)


def test_sun_direction_points_at_subsolar_point(utc_ms):
    solar = compute_solar_context(utc_ms(2024, 9, 3, 7, 30, 0))
    expected = lat_lon_to_vector(solar.subsolar_lat, solar.subsolar_lon)
    assert solar.sun_direction == pytest.approx(expected, abs=1e-12)
    assert math.hypot(*solar.sun_direction) == pytest.approx(1.0)


def test_deterministic(utc_ms):
    ms = utc_ms(2024, 4, 10, 3, 14, 15)
    assert compute_solar_context(ms) == compute_solar_context(ms)


def test_sun_moves_west_through_the_day(utc_ms):
    morning = compute_solar_context(utc_ms(2024, 4, 10, 6, 0, 0))
    later = compute_solar_context(utc_ms(2024, 4, 10, 7, 0, 0))
    step = normalize_longitude(later.subsolar_lon - morning.subsolar_lon)
    assert step == pytest.approx(-15.0, abs=0.1)


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
def test_rejects_non_finite_time(bad):
    with pytest.raises(ValueError):
        compute_solar_context(bad)


def test_rejects_unrepresentable_time():
    with pytest.raises(ValueError):
        compute_solar_context(1e20)
