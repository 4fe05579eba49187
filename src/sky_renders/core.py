"""
Single-scattering sky color for a view ray (Rayleigh + Mie).

The primary ray is marched in PRIMARY_STEPS midpoint samples through the part
of the atmosphere in front of the viewer. At each sample a secondary ray is
marched SECONDARY_STEPS times toward the sun, and the combined optical depth
attenuates the light scattered at that sample.

Every function here is pure: nothing is cached or shared between calls.
"""
import numpy as np
from sky_renders import constants
from sky_renders.intersections import ray_sphere, ray_sphere_vectorized
from sky_renders.optical_depth import integrate_optical_depth
from sky_renders.parameters import AtmosphereParameters, InvalidAtmosphereError, LightResult
from sky_renders.phase import mie_phase, rayleigh_phase
from sky_renders.utils import ensure_batch, normalize, unbatch_if_needed


def compute_scattering(view_direction, ray_origin, sun_direction, params):
    """
    Light scattered toward the viewer along one ray.

    Args:
        view_direction: (3,) view direction, any length
        ray_origin: (3,) viewer position relative to the planet center
        sun_direction: (3,) direction toward the sun, any length
        params: AtmosphereParameters

    Returns:
        LightResult; the zero result when the ray misses the atmosphere, the
        atmosphere lies entirely behind the viewer, or the viewer is below
        the planet surface.
    """
    sun = normalize(sun_direction)
    view = normalize(view_direction)
    origin = np.asarray(ray_origin, dtype=float)

    p_near, p_far = ray_sphere(origin, view, params.atmosphere_radius)
    if p_near > p_far or p_far < 0.0:
        return LightResult.zero()

    planet_near, planet_far = ray_sphere(origin, view, params.planet_radius)
    if planet_near < 0.0 and planet_far > 0.0:
        return LightResult.zero()

    planet_intersected = planet_near < planet_far and planet_near > 0.0

    # March from the viewer when it is already inside the atmosphere,
    # and stop at the ground when the ray hits it.
    t_start = max(p_near, 0.0)
    t_end = planet_near if planet_intersected else p_far

    step = (t_end - t_start) / constants.PRIMARY_STEPS
    rlh = params.rayleigh_scattering
    mie = params.mie_scattering

    od_rlh = 0.0
    od_mie = 0.0
    total_rlh = np.zeros(3)
    total_mie = np.zeros(3)

    for i in range(constants.PRIMARY_STEPS):
        position = origin + view * (t_start + step * (i + 0.5))
        height = np.linalg.norm(position) - params.planet_radius

        d_rlh = np.exp(-height / params.rayleigh_scale_height) * step
        d_mie = np.exp(-height / params.mie_scale_height) * step
        od_rlh += d_rlh
        od_mie += d_mie

        _, sun_far = ray_sphere(position, sun, params.atmosphere_radius)
        sec_rlh, sec_mie = integrate_optical_depth(
            position, sun, constants.SECONDARY_STEPS, sun_far,
            params.planet_radius, params.rayleigh_scale_height, params.mie_scale_height)

        attenuation = np.exp(-(mie * (od_mie + sec_mie) + rlh * (od_rlh + sec_rlh)))
        total_rlh += d_rlh * attenuation
        total_mie += d_mie * attenuation

    mu = float(np.dot(view, sun))
    color = params.sun_intensity * (rayleigh_phase(mu) * rlh * total_rlh
                                    + mie_phase(mu, params.mie_asymmetry) * mie * total_mie)
    return LightResult(color=color, alpha=1.0)


def compute_scattering_batch(view_directions, ray_origin, sun_direction, params):
    """
    Vectorized compute_scattering for many view directions at once.

    Rows follow exactly the same branch rules as the single-ray kernel.

    Args:
        view_directions: (N, 3) view directions (or a single (3,) direction)
        ray_origin: (3,) shared origin or (N, 3) per-ray origins
        sun_direction: (3,) direction toward the sun
        params: AtmosphereParameters

    Returns:
        (N, 4) RGBA array; (4,) for a single direction
    """
    view_directions, is_single = ensure_batch(view_directions)
    n_rays = view_directions.shape[0]

    view = normalize(view_directions)
    sun = normalize(sun_direction)
    origins = np.broadcast_to(np.asarray(ray_origin, dtype=float), (n_rays, 3))

    rgba = np.zeros((n_rays, 4))

    p_near, p_far = ray_sphere_vectorized(origins, view, params.atmosphere_radius)
    planet_near, planet_far = ray_sphere_vectorized(origins, view, params.planet_radius)

    missed = (p_near > p_far) | (p_far < 0.0)
    below_surface = (planet_near < 0.0) & (planet_far > 0.0)
    active = ~missed & ~below_surface

    if np.any(active):
        o = origins[active]
        d = view[active]
        planet_intersected = (planet_near[active] < planet_far[active]) & (planet_near[active] > 0.0)

        t_start = np.maximum(p_near[active], 0.0)
        t_end = np.where(planet_intersected, planet_near[active], p_far[active])
        step = (t_end - t_start) / constants.PRIMARY_STEPS

        rlh = params.rayleigh_scattering
        mie = params.mie_scattering
        n_active = o.shape[0]
        sun_rows = np.broadcast_to(sun, (n_active, 3))

        od_rlh = np.zeros(n_active)
        od_mie = np.zeros(n_active)
        total_rlh = np.zeros((n_active, 3))
        total_mie = np.zeros((n_active, 3))

        for i in range(constants.PRIMARY_STEPS):
            position = o + d * (t_start + step * (i + 0.5))[:, None]
            height = np.linalg.norm(position, axis=1) - params.planet_radius

            d_rlh = np.exp(-height / params.rayleigh_scale_height) * step
            d_mie = np.exp(-height / params.mie_scale_height) * step
            od_rlh += d_rlh
            od_mie += d_mie

            _, sun_far = ray_sphere_vectorized(position, sun_rows, params.atmosphere_radius)
            sec_rlh, sec_mie = integrate_optical_depth(
                position, sun, constants.SECONDARY_STEPS, sun_far,
                params.planet_radius, params.rayleigh_scale_height, params.mie_scale_height)

            attenuation = np.exp(-(mie * (od_mie + sec_mie)[:, None]
                                   + rlh[None, :] * (od_rlh + sec_rlh)[:, None]))
            total_rlh += d_rlh[:, None] * attenuation
            total_mie += d_mie[:, None] * attenuation

        mu = np.sum(d * sun[None, :], axis=1)
        color = params.sun_intensity * (
            rayleigh_phase(mu)[:, None] * rlh[None, :] * total_rlh
            + mie_phase(mu, params.mie_asymmetry)[:, None] * mie * total_mie)

        rgba[active, :3] = color
        rgba[active, 3] = 1.0

    return unbatch_if_needed(rgba, is_single)


def compute_scattering_checked(view_direction, ray_origin, sun_direction, params):
    """
    compute_scattering behind a validation layer.

    Raises:
        InvalidAtmosphereError: for invalid parameters or a zero-length direction
    """
    params.validate()
    for name, vector in (("sun_direction", sun_direction), ("view_direction", view_direction)):
        vector = np.asarray(vector, dtype=float)
        if vector.shape != (3,):
            raise InvalidAtmosphereError(f"{name} must be a 3-vector, got shape {vector.shape}")
        if not np.linalg.norm(vector) > 0.0:
            raise InvalidAtmosphereError(f"{name} must have non-zero length")
    return compute_scattering(view_direction, ray_origin, sun_direction, params)


def atmosphere(view_direction, ray_origin, sun_direction, sun_intensity,
               planet_radius, atmosphere_radius, rayleigh_scattering, mie_scattering,
               rayleigh_scale_height, mie_scale_height, mie_asymmetry):
    """
    Flat entry point: every input as a plain value, RGBA out.

    Returns:
        (4,) array: linear RGB and alpha
    """
    params = AtmosphereParameters(
        planet_radius=planet_radius,
        atmosphere_radius=atmosphere_radius,
        rayleigh_scattering=rayleigh_scattering,
        mie_scattering=mie_scattering,
        rayleigh_scale_height=rayleigh_scale_height,
        mie_scale_height=mie_scale_height,
        mie_asymmetry=mie_asymmetry,
        sun_intensity=sun_intensity,
    )
    return compute_scattering(view_direction, ray_origin, sun_direction, params).as_rgba()
