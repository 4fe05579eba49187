"""
Physical constants and configuration for the sky renderer.
"""
import numpy as np

# Ray marching (fixed trip counts)
PRIMARY_STEPS = 16
SECONDARY_STEPS = 8

# Interval returned when a quadratic has no real root (t_near > t_far)
NO_INTERSECTION = (1e5, -1e5)

# Earth profile (meters)
EARTH_RADIUS_METERS = 6371e3
ATMOSPHERE_RADIUS_METERS = 6471e3

# Rayleigh scattering at sea level (1/m), [R, G, B]
RAYLEIGH_SCATTERING = np.array([5.5e-6, 13.0e-6, 22.4e-6])
RAYLEIGH_SCALE_HEIGHT_METERS = 8e3

# Mie (aerosol) scattering
MIE_SCATTERING = 21e-6
MIE_SCALE_HEIGHT_METERS = 1.2e3
MIE_ASYMMETRY = 0.758  # forward-biased haze

SUN_INTENSITY = 22.0

# Renderer defaults
DEFAULT_CAMERA_ALTITUDE_METERS = 1000.0
DEFAULT_EXPOSURE = 1.0
DEFAULT_FOV_DEGREES = 90.0
DEFAULT_SUN_ELEVATION_DEGREES = 30.0
DEFAULT_SUN_AZIMUTH_DEGREES = 0.0
