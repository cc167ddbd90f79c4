"""Simulation clock, flow-layer tuning, and rendering defaults."""

import os

# Device capability tier (low-core hosts get fewer particles / coarser mesh)
DEVICE_TIER = "low" if (os.cpu_count() or 8) <= 4 else "high"

PARTICLE_COUNTS = {
    "low": {"wind": 900, "current": 700},
    "high": {"wind": 1800, "current": 1400},
}
MESH_SEGMENTS = {"low": 48, "high": 72}

# Clock
MAX_FRAME_DELTA = 0.05        # s, upper bound on one frame's wall delta
MAX_CATCHUP_FRAMES = 8        # frames replayed per bridge refresh
READOUT_INTERVAL = 0.2        # s, status readout refresh cadence (<= 5 Hz)
TIME_SCALES = (1, 60, 600, 3600, 21600, 86400)
TIME_SCALE_DEFAULT = 600

# Toggles: solar-driven lighting, overlays, coupling feedback, globe spin
TOGGLES = ("solar", "wind", "current", "coupling", "rotating")

# Lighting
STATIC_SUN_POSITION = (5.4, 2.2, 5.8)
STATIC_LIGHT_INTENSITY = 1.8
SOLAR_LIGHT_INTENSITY = 2.05

# Particles
LAT_LIMIT = 85.0              # hard clamp on every latitude
POLE_REFLECT_LAT = 84.0       # particles bounce off this latitude
COS_LAT_FLOOR = 0.2           # divisor floor for longitude advection
SEED_LAT_MAX = 80.0           # seeding band for fresh particles
GLOBAL_SEED = 42

# Per-layer tuning (radius in globe radii, line_length in degrees)
LAYERS = {
    "wind": {
        "radius": 1.03,
        "speed_to_degrees_scale": 6.0,
        "line_length": 2.6,
        "speed_range": 1.1,
        "color_low": (0.55, 0.78, 1.00),
        "color_high": (1.00, 0.97, 0.86),
    },
    "current": {
        "radius": 1.006,
        "speed_to_degrees_scale": 3.2,
        "line_length": 1.8,
        "speed_range": 0.8,
        "color_low": (0.08, 0.45, 0.72),
        "color_high": (0.45, 1.00, 0.86),
    },
}

# Coupling
CLOUD_SPEED_BASELINE = 0.062       # rad/s, coupling off
CLOUD_SPEED_COUPLED_BASE = 0.038   # rad/s, coupling on, before wind term
CLOUD_SPEED_WIND_GAIN = 0.037
CLOUD_SPEED_TIME_GAIN = 0.006
OCEAN_SHININESS_BASELINE = 22.0
OCEAN_SPECULAR_BASELINE = (0x31 / 255, 0x50 / 255, 0x6F / 255)

# Globe
AXIAL_TILT_DEG = -23.4
GLOBE_SPIN_SPEED = 0.18            # rad/s
ATMOSPHERE_SPIN_SPEED = 0.01       # rad/s
CLOUD_RADIUS = 1.011
ATMOSPHERE_RADIUS = 1.09
CLOUD_COVER_FRACTION = 0.22
CLOUD_GRID = (90, 180)             # lat x lon cells for the cloud deck
