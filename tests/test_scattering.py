import dataclasses
from concurrent.futures import ThreadPoolExecutor
import numpy as np
import pytest
from sky_renders.core import atmosphere, compute_scattering, compute_scattering_batch
from sky_renders.intersections import ray_sphere
from sky_renders.parameters import AtmosphereParameters, LightResult
from sky_renders.rendering import sun_direction
from conftest import assert_zero_result


def test_noon_scenario_blue_sky():
    """
    Camera 1 km up, looking straight down, sun overhead.
    The air column below the camera should glow blue with a weak Mie part.
    """
    params = AtmosphereParameters.earth_default(planet_radius=6371000.0, atmosphere_radius=6471000.0)
    origin = np.array([0.0, 6372000.0, 0.0])
    view = np.array([0.0, -1.0, 0.0])
    sun = np.array([0.0, 1.0, 0.0])

    result = compute_scattering(view, origin, sun, params)

    assert result.alpha == 1.0
    assert np.all(result.color > 0.0)
    assert result.color[2] > result.color[1] > result.color[0], f"Expected blue-dominant color, got {result.color}"

    no_mie = compute_scattering(view, origin, sun, dataclasses.replace(params, mie_scattering=0.0))
    mie_part = np.abs(result.color - no_mie.color)
    assert np.sum(mie_part) < 0.2 * np.sum(no_mie.color), "Mie contribution should be small next to Rayleigh"


def test_zenith_sky_blue(params, camera):
    """Looking up with a high sun gives a blue sky."""
    result = compute_scattering(np.array([0.0, 1.0, 0.0]), camera, sun_direction(60.0), params)
    r, g, b = result.color
    assert b > g > r > 0.0


def test_ray_missing_atmosphere(params):
    """From space, a ray pointing away from the planet sees nothing."""
    origin = np.array([0.0, params.atmosphere_radius * 2.0, 0.0])
    result = compute_scattering(np.array([1.0, 0.0, 0.0]), origin, np.array([0.0, 1.0, 0.0]), params)
    assert_zero_result(result, "ray misses atmosphere")


def test_atmosphere_behind_viewer(params):
    """From space, looking away from the planet: both hits lie behind the viewer."""
    origin = np.array([0.0, params.atmosphere_radius * 2.0, 0.0])
    result = compute_scattering(np.array([0.0, 1.0, 0.0]), origin, np.array([0.0, 1.0, 0.0]), params)
    assert_zero_result(result, "atmosphere behind viewer")


def test_viewer_in_space_sees_limb(params):
    """From space, a ray grazing the atmosphere 50 km above the surface picks up light."""
    origin = np.array([0.0, params.planet_radius + 50e3, -2.0 * params.atmosphere_radius])
    result = compute_scattering(np.array([0.0, 0.0, 1.0]), origin, np.array([0.0, 1.0, 0.0]), params)
    assert result.alpha == 1.0
    assert np.all(result.color > 0.0)


def test_viewer_in_space_sees_lit_ground_haze(params):
    """From space, looking down at the day side hits the planet and still scatters light."""
    origin = np.array([0.0, params.atmosphere_radius * 2.0, 0.0])
    result = compute_scattering(np.array([0.0, -1.0, 0.0]), origin, np.array([0.0, 1.0, 0.0]), params)
    assert result.alpha == 1.0
    assert result.color[2] > 0.0


def test_origin_inside_planet_always_zero(params):
    """Every direction from below the surface gives the zero result."""
    rng = np.random.default_rng(5)
    origins = [
        np.array([0.0, params.planet_radius - 1.0, 0.0]),
        np.array([1000.0, -2000.0, 300.0]),
        np.zeros(3) + 1e-3,
    ]
    directions = rng.normal(size=(40, 3))
    for origin in origins:
        for d in directions:
            result = compute_scattering(d, origin, np.array([0.3, 0.9, 0.1]), params)
            assert_zero_result(result, f"origin {origin}, direction {d}")


def test_view_direction_is_normalized(params, camera, standard_rays):
    """Scaling the view or sun direction does not change the result."""
    sun = sun_direction(25.0, 40.0)
    for name, d in standard_rays.items():
        reference = compute_scattering(d, camera, sun, params)
        scaled = compute_scattering(d * 123.0, camera, sun * 0.01, params)
        np.testing.assert_allclose(scaled.color, reference.color, rtol=1e-9,
                                   err_msg=f"Normalization mismatch for {name}")


def test_ground_hit_shorter_than_sky(params, camera):
    """Ground-terminated rays collect less Rayleigh light than near-horizontal sky rays."""
    sun = sun_direction(45.0)
    down = compute_scattering(np.array([0.0, -1.0, 0.0]), camera, sun, params)
    horizon = compute_scattering(np.array([1.0, 0.05, 0.0]), camera, sun, params)
    assert horizon.color[2] > down.color[2]


def test_sunset_reddens_horizon(params, camera):
    """A low sun shifts the horizon toward red."""
    horizon = np.array([1.0, 0.02, 0.0])
    day = compute_scattering(horizon, camera, sun_direction(60.0), params).color
    dusk = compute_scattering(horizon, camera, sun_direction(2.0), params).color
    assert dusk[0] / dusk[2] > day[0] / day[2]


def test_sun_intensity_scales_linearly(params, camera):
    """Color is proportional to sun intensity; output is left unbounded."""
    view = np.array([0.2, 0.4, 0.9])
    base = compute_scattering(view, camera, sun_direction(30.0), params)
    bright = compute_scattering(view, camera, sun_direction(30.0),
                                dataclasses.replace(params, sun_intensity=params.sun_intensity * 1000.0))
    np.testing.assert_allclose(bright.color, base.color * 1000.0, rtol=1e-12)
    assert np.max(bright.color) > 1.0


def test_repeated_calls_identical(params, camera, standard_rays):
    """Identical inputs give bit-identical outputs."""
    sun = sun_direction(15.0, -30.0)
    for d in standard_rays.values():
        first = compute_scattering(d, camera, sun, params).as_rgba()
        for _ in range(3):
            assert np.array_equal(compute_scattering(d, camera, sun, params).as_rgba(), first)


def test_concurrent_calls_identical(params, camera, batch_rays):
    """Calls from many threads match the sequential results exactly."""
    sun = sun_direction(35.0, 10.0)
    jobs = [d for d in batch_rays for _ in range(4)]
    expected = [compute_scattering(d, camera, sun, params).as_rgba() for d in jobs]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda d: compute_scattering(d, camera, sun, params).as_rgba(), jobs))

    for got, want in zip(results, expected):
        assert np.array_equal(got, want)


def test_flat_entry_point(params, camera):
    """The flat signature returns the same four floats as the structured one."""
    view = np.array([0.5, 0.3, -0.2])
    sun = sun_direction(20.0)
    rgba = atmosphere(view, camera, sun, params.sun_intensity, params.planet_radius,
                      params.atmosphere_radius, params.rayleigh_scattering, params.mie_scattering,
                      params.rayleigh_scale_height, params.mie_scale_height, params.mie_asymmetry)
    assert rgba.shape == (4,)
    assert rgba[3] == 1.0
    np.testing.assert_array_equal(rgba, compute_scattering(view, camera, sun, params).as_rgba())


def test_light_result_shape_validation():
    """LightResult rejects colors that are not 3-vectors."""
    with pytest.raises(ValueError):
        LightResult(color=np.zeros(4), alpha=1.0)
    zero = LightResult.zero()
    np.testing.assert_array_equal(zero.as_rgba(), np.zeros(4))


def test_ray_tangent_to_planet_is_not_a_ground_hit(params):
    """
    A ray touching the planet at a single point (planet_near == planet_far)
    is marched all the way to the atmosphere exit, like a ray that just
    misses the planet.
    """
    origin = np.array([-1000.0, params.planet_radius, 0.0])
    tangent = np.array([1.0, 0.0, 0.0])
    grazing = np.array([1.0, 1e-9, 0.0])
    sun = sun_direction(30.0)

    planet_near, planet_far = ray_sphere(origin, tangent, params.planet_radius)
    assert planet_near == planet_far == 1000.0
    miss_near, miss_far = ray_sphere(origin, grazing / np.linalg.norm(grazing), params.planet_radius)
    assert miss_near > miss_far

    touching = compute_scattering(tangent, origin, sun, params)
    missing = compute_scattering(grazing, origin, sun, params)

    assert touching.alpha == 1.0
    np.testing.assert_allclose(touching.color, missing.color, rtol=1e-4)
    np.testing.assert_allclose(compute_scattering_batch(tangent, origin, sun, params),
                               touching.as_rgba(), rtol=1e-9)


def test_camera_on_surface_is_neither_buried_nor_grounded(params):
    """
    From exactly on the surface, a downward ray starts its planet hit at
    t == 0. That is not below the surface and not a ground hit, so the ray
    is marched through the planet and picks up light.
    """
    origin = np.array([0.0, params.planet_radius, 0.0])
    view = np.array([1.0, -0.01, 0.0])
    sun = sun_direction(30.0)

    planet_near, planet_far = ray_sphere(origin, view / np.linalg.norm(view), params.planet_radius)
    assert planet_near == 0.0
    assert planet_far > 0.0

    result = compute_scattering(view, origin, sun, params)
    assert result.alpha == 1.0
    assert np.all(np.isfinite(result.color))
    assert np.all(result.color > 0.0), f"Expected a full march, got {result.color}"

    rgba = compute_scattering_batch(view, origin, sun, params)
    np.testing.assert_allclose(rgba, result.as_rgba(), rtol=1e-9)


def test_atmosphere_exit_at_viewer_is_not_behind(params):
    """
    Standing on the top of the atmosphere and looking out, the exit is at
    t == 0. That is not behind the viewer: the ray is kept, with an empty
    march and alpha 1.
    """
    origin = np.array([0.0, params.atmosphere_radius, 0.0])
    view = np.array([0.0, 1.0, 0.0])
    sun = sun_direction(45.0)

    p_near, p_far = ray_sphere(origin, view, params.atmosphere_radius)
    assert p_near < 0.0
    assert p_far == 0.0

    result = compute_scattering(view, origin, sun, params)
    assert result.alpha == 1.0
    np.testing.assert_array_equal(result.color, np.zeros(3))

    rgba = compute_scattering_batch(view, origin, sun, params)
    np.testing.assert_array_equal(rgba, [0.0, 0.0, 0.0, 1.0])


if __name__ == "__main__":
    pytest.main([__file__])
