"""
Pytest fixtures and configuration for sky renderer tests.

Shared parameters, camera positions and ray directions used across the
kernel, batch and rendering tests.
"""

import numpy as np
import pytest
from sky_renders.parameters import AtmosphereParameters


@pytest.fixture
def params():
    """Earth atmosphere used by most tests."""
    return AtmosphereParameters.earth_default()


@pytest.fixture
def camera(params):
    """Camera 1 km above the surface, on the +Y axis."""
    return np.array([0.0, params.planet_radius + 1000.0, 0.0])


@pytest.fixture
def standard_rays():
    """Common view directions, deliberately not all unit length."""
    return {
        'zenith': np.array([0.0, 1.0, 0.0]),
        'nadir': np.array([0.0, -1.0, 0.0]),
        'horizon': np.array([1.0, 0.0, 0.0]),
        'low_sky': np.array([1.0, 0.1, 0.0]),
        'oblique': np.array([0.3, 0.5, -0.8]),
        'long_ground': np.array([0.0, -5.0, 2.0]),
    }


@pytest.fixture
def batch_rays(standard_rays):
    """The standard rays stacked into an (N, 3) batch."""
    return np.stack(list(standard_rays.values()))


def assert_zero_result(result, err_msg=""):
    """Assert the kernel took a short-circuit branch."""
    assert result.alpha == 0.0, f"alpha should be 0 - {err_msg}"
    assert np.all(result.color == 0.0), f"color should be zero, got {result.color} - {err_msg}"
