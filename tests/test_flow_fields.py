import numpy as np
import pytest

from data.flow_fields import (
    SAMPLERS, CurrentSampler, WindSampler,
    gaussian, lon_distance, periodic_lon_gaussian,
)


def _zonal_mean_u(sampler, lat, solar):
    lon = np.linspace(-180, 180, 360, endpoint=False)
    u, _ = sampler.sample(np.full_like(lon, lat), lon, solar, np.zeros_like(lon))
    return float(np.mean(u))


def test_gaussian_shape():
    assert gaussian(10.0, 10.0, 4.0) == pytest.approx(1.0)
    assert gaussian(14.0, 10.0, 4.0) == pytest.approx(np.exp(-1.0))
    assert gaussian(6.0, 10.0, 4.0) == pytest.approx(gaussian(14.0, 10.0, 4.0))


@pytest.mark.parametrize("lon, center, expected", [
    (170.0, -170.0, -20.0),
    (-170.0, 170.0, 20.0),
    (10.0, 20.0, -10.0),
    (-70.0, -70.0, 0.0),
])
def test_lon_distance_is_shortest(lon, center, expected):
    assert lon_distance(lon, center) == pytest.approx(expected)


def test_periodic_gaussian_wraps_antimeridian():
    near_seam = periodic_lon_gaussian(179.0, -178.0, 5.0)
    assert near_seam == pytest.approx(gaussian(3.0, 0.0, 5.0))
    assert periodic_lon_gaussian(180.0, 150.0, 10.0) == pytest.approx(
        periodic_lon_gaussian(-180.0, 150.0, 10.0))


def test_sampler_registry():
    assert isinstance(SAMPLERS["wind"], WindSampler)
    assert isinstance(SAMPLERS["current"], CurrentSampler)


@pytest.mark.parametrize("name", ["wind", "current"])
def test_samplers_are_deterministic(name, solstice):
    sampler = SAMPLERS[name]
    first = sampler.sample(23.0, -41.5, solstice, 0.37)
    second = sampler.sample(23.0, -41.5, solstice, 0.37)
    assert first[0] == second[0]
    assert first[1] == second[1]


@pytest.mark.parametrize("name", ["wind", "current"])
def test_vectorised_matches_scalar(name, solstice):
    sampler = SAMPLERS[name]
    rng = np.random.default_rng(3)
    lat = rng.uniform(-85, 85, 25)
    lon = rng.uniform(-180, 180, 25)
    seed = rng.random(25)
    u, v = sampler.sample(lat, lon, solstice, seed)
    assert u.shape == v.shape == (25,)
    for i in range(25):
        ui, vi = sampler.sample(lat[i], lon[i], solstice, seed[i])
        assert float(ui) == pytest.approx(u[i])
        assert float(vi) == pytest.approx(v[i])


@pytest.mark.parametrize("name", ["wind", "current"])
def test_continuous_across_antimeridian(name, solstice):
    sampler = SAMPLERS[name]
    lat = np.linspace(-80, 80, 17)
    seed = np.full_like(lat, 0.5)
    u_east, v_east = sampler.sample(lat, np.full_like(lat, 179.999), solstice, seed)
    u_west, v_west = sampler.sample(lat, np.full_like(lat, -179.999), solstice, seed)
    np.testing.assert_allclose(u_east, u_west, atol=1e-3)
    np.testing.assert_allclose(v_east, v_west, atol=1e-3)


@pytest.mark.parametrize("name", ["wind", "current"])
def test_seed_decorrelates_particles(name, solstice):
    sampler = SAMPLERS[name]
    a = sampler.sample(30.0, 10.0, solstice, 0.1)
    b = sampler.sample(30.0, 10.0, solstice, 0.6)
    assert (a[0], a[1]) != (b[0], b[1])


@pytest.mark.parametrize("name", ["wind", "current"])
def test_magnitudes_stay_plausible(name, solstice):
    sampler = SAMPLERS[name]
    lat, lon = np.meshgrid(np.linspace(-85, 85, 35), np.linspace(-180, 179, 72))
    u, v = sampler.sample(lat, lon, solstice, np.full_like(lat, 0.25))
    assert np.all(np.isfinite(u)) and np.all(np.isfinite(v))
    assert np.hypot(u, v).max() < 2.5


def test_wind_trades_are_easterly(solstice):
    assert _zonal_mean_u(WindSampler(), 20.0, solstice) < -0.3


def test_wind_jet_migrates_with_season(solstice, december):
    wind = WindSampler()
    assert _zonal_mean_u(wind, 40.0, solstice) > 0.4
    assert _zonal_mean_u(wind, 40.0, solstice) > _zonal_mean_u(wind, 40.0, december)
    assert _zonal_mean_u(wind, -40.0, december) > _zonal_mean_u(wind, -40.0, solstice)


def test_wind_waves_travel_with_day_progress(solstice):
    from dataclasses import replace
    wind = WindSampler()
    later = replace(solstice, day_progress=solstice.day_progress + 0.1)
    assert wind.sample(40.0, 0.0, solstice, 0.0) != wind.sample(40.0, 0.0, later, 0.0)


def test_current_boundary_currents(solstice):
    current = CurrentSampler()
    for seed in (0.0, 0.3, 0.8):
        _, v_north = current.sample(34.0, -70.0, solstice, seed)
        _, v_pacific = current.sample(32.0, 145.0, solstice, seed)
        _, v_south = current.sample(-36.0, 20.0, solstice, seed)
        assert v_north > 0.2
        assert v_pacific > 0.15
        assert v_south < -0.1


def test_current_circumpolar_flow_is_eastward(solstice):
    assert _zonal_mean_u(CurrentSampler(), -58.0, solstice) > 0.35


def test_current_counter_current_is_eastward(solstice):
    assert _zonal_mean_u(CurrentSampler(), 5.0, solstice) > 0.0
    assert _zonal_mean_u(CurrentSampler(), 12.0, solstice) < -0.2


def test_base_sampler_is_abstract(solstice):
    from data.flow_fields import FlowSampler
    with pytest.raises(NotImplementedError):
        FlowSampler().sample(0.0, 0.0, solstice, 0.0)
