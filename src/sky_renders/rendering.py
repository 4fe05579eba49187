"""
Caller-side rendering pipeline for the sky kernel.

Builds per-pixel view directions, evaluates the scattering kernel for all of
them and turns the linear HDR result into an 8-bit image. Exposure and
quantisation happen here, never inside the kernel.

Angles follow one convention throughout: Y is up (local zenith at the
camera), azimuth 0 points along +X and azimuth 90 along +Z.
"""
import numpy as np
from sky_renders import constants
from sky_renders.core import compute_scattering_batch
from sky_renders.parameters import AtmosphereParameters
from sky_renders.utils import normalize


def direction_from_angles(elevation_deg, azimuth_deg):
    """Unit vector(s) for elevation/azimuth in degrees; arrays broadcast."""
    e = np.deg2rad(elevation_deg)
    a = np.deg2rad(azimuth_deg)
    return np.stack([np.cos(e) * np.cos(a),
                     np.sin(e) * np.ones_like(a),
                     np.cos(e) * np.sin(a)], axis=-1)


def sun_direction(elevation_deg, azimuth_deg=0.0):
    """Unit vector toward the sun."""
    return direction_from_angles(elevation_deg, azimuth_deg)


def perspective_directions(width, height, fov=None, yaw=0.0, pitch=0.0):
    """
    View directions for a pinhole camera sampled at pixel centers.

    The camera looks along (pitch, yaw); its right axis stays horizontal so
    the horizon is never rolled. fov is the vertical field of view.

    Returns:
        (height, width, 3) array of unit directions
    """
    fov = fov if fov is not None else constants.DEFAULT_FOV_DEGREES

    forward = direction_from_angles(pitch, yaw)
    right = direction_from_angles(0.0, yaw + 90.0)
    up = np.cross(right, forward)

    half_h = np.tan(np.deg2rad(fov / 2.0))
    half_w = half_h * width / height
    u = ((np.arange(width) + 0.5) / width * 2.0 - 1.0) * half_w
    v = (1.0 - (np.arange(height) + 0.5) / height * 2.0) * half_h

    rays = forward + u[None, :, None] * right + v[:, None, None] * up
    return normalize(rays)


def equirectangular_directions(width, height):
    """
    View directions for a latitude/longitude environment map.

    Row 0 looks at the zenith, the last row at the nadir; the middle column
    faces azimuth 0.

    Returns:
        (height, width, 3) array of unit directions
    """
    elevation = 90.0 - (np.arange(height) + 0.5) / height * 180.0
    azimuth = (np.arange(width) + 0.5) / width * 360.0 - 180.0
    az, el = np.meshgrid(azimuth, elevation)
    return direction_from_angles(el, az)


def expose(hdr, exposure=None):
    """Map linear radiance to [0, 1) with 1 - exp(-exposure * hdr)."""
    exposure = exposure if exposure is not None else constants.DEFAULT_EXPOSURE
    return 1.0 - np.exp(-exposure * np.maximum(hdr, 0.0))


def to_uint8(ldr):
    return (np.clip(ldr, 0.0, 1.0) * 255).astype(np.uint8)


class SkyRenderer:
    def __init__(self, params=None, altitude_m=None):
        """
        Initialize the sky renderer.

        Coordinate System (Planet-Centric):
        - Origin (0,0,0): The planet center.
        - Camera: (0, planet_radius + altitude, 0).
        - Y-Axis: Local zenith at the camera.

        The camera must be strictly above the surface. A camera exactly on
        the surface is not a ground hit for rays that look down, so those
        rays would be marched through the planet.

        Raises:
            ValueError: if altitude_m <= 0
        """
        self.params = params if params is not None else AtmosphereParameters.earth_default()
        self.altitude = altitude_m if altitude_m is not None else constants.DEFAULT_CAMERA_ALTITUDE_METERS
        if not self.altitude > 0.0:
            raise ValueError(f"Camera altitude must be above the surface, got {self.altitude} m")

    @property
    def camera_position(self):
        return np.array([0.0, self.params.planet_radius + self.altitude, 0.0])

    def render_hdr(self, directions, sun_dir):
        """
        Evaluate the kernel for a grid of directions.

        Args:
            directions: (H, W, 3) view directions
            sun_dir: (3,) direction toward the sun

        Returns:
            (H, W, 4) linear RGBA
        """
        height, width = directions.shape[:2]
        rgba = compute_scattering_batch(directions.reshape(-1, 3), self.camera_position,
                                        sun_dir, self.params)
        return rgba.reshape(height, width, 4)

    def render(self, width=320, height=240, fov=None, yaw=0.0, pitch=10.0,
               sun_elevation=None, sun_azimuth=None, exposure=None):
        """
        Render a perspective view of the sky as an 8-bit RGB image.
        """
        sun_elevation = sun_elevation if sun_elevation is not None else constants.DEFAULT_SUN_ELEVATION_DEGREES
        sun_azimuth = sun_azimuth if sun_azimuth is not None else constants.DEFAULT_SUN_AZIMUTH_DEGREES

        directions = perspective_directions(width, height, fov, yaw, pitch)
        hdr = self.render_hdr(directions, sun_direction(sun_elevation, sun_azimuth))
        return to_uint8(expose(hdr[..., :3], exposure))

    def render_environment(self, width=256, height=128, sun_elevation=None,
                           sun_azimuth=None, exposure=None):
        """
        Render an equirectangular environment map as an 8-bit RGB image.
        """
        sun_elevation = sun_elevation if sun_elevation is not None else constants.DEFAULT_SUN_ELEVATION_DEGREES
        sun_azimuth = sun_azimuth if sun_azimuth is not None else constants.DEFAULT_SUN_AZIMUTH_DEGREES

        directions = equirectangular_directions(width, height)
        hdr = self.render_hdr(directions, sun_direction(sun_elevation, sun_azimuth))
        return to_uint8(expose(hdr[..., :3], exposure))
