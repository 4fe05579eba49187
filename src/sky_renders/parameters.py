"""
Data structures passed in and out of the scattering kernel.
"""
from dataclasses import dataclass
import numpy as np
from sky_renders import constants


class InvalidAtmosphereError(ValueError):
    """Raised by the opt-in validation layer for unusable configurations."""


@dataclass(frozen=True)
class AtmosphereParameters:
    """
    Configuration bundle for a planet and its two-component atmosphere.

    Attributes:
        planet_radius: Radius of the planet surface (meters)
        atmosphere_radius: Radius of the top of the atmosphere (meters)
        rayleigh_scattering: Per-channel Rayleigh coefficients (3,) shape (1/m)
        mie_scattering: Mie scattering coefficient (1/m)
        rayleigh_scale_height: Height over which Rayleigh density falls by e (meters)
        mie_scale_height: Height over which Mie density falls by e (meters)
        mie_asymmetry: Cornette-Shanks asymmetry g, in (-1, 1)
        sun_intensity: Scalar multiplier on the final color
    """
    planet_radius: float
    atmosphere_radius: float
    rayleigh_scattering: np.ndarray  # (3,) shape
    mie_scattering: float
    rayleigh_scale_height: float
    mie_scale_height: float
    mie_asymmetry: float
    sun_intensity: float

    def __post_init__(self):
        object.__setattr__(self, "rayleigh_scattering",
                           np.asarray(self.rayleigh_scattering, dtype=float))

    @classmethod
    def earth_default(cls, **overrides):
        """Earth-like parameters; any field can be overridden by keyword."""
        values = dict(
            planet_radius=constants.EARTH_RADIUS_METERS,
            atmosphere_radius=constants.ATMOSPHERE_RADIUS_METERS,
            rayleigh_scattering=constants.RAYLEIGH_SCATTERING.copy(),
            mie_scattering=constants.MIE_SCATTERING,
            rayleigh_scale_height=constants.RAYLEIGH_SCALE_HEIGHT_METERS,
            mie_scale_height=constants.MIE_SCALE_HEIGHT_METERS,
            mie_asymmetry=constants.MIE_ASYMMETRY,
            sun_intensity=constants.SUN_INTENSITY,
        )
        values.update(overrides)
        return cls(**values)

    def validate(self):
        """
        Check the preconditions the kernel itself never checks.

        Raises:
            InvalidAtmosphereError: describing the first violated precondition
        """
        if self.rayleigh_scattering.shape != (3,):
            raise InvalidAtmosphereError(
                f"rayleigh_scattering must be a 3-vector, got shape {self.rayleigh_scattering.shape}")
        if not self.atmosphere_radius > self.planet_radius:
            raise InvalidAtmosphereError(
                f"atmosphere_radius ({self.atmosphere_radius}) must exceed planet_radius ({self.planet_radius})")
        if not self.rayleigh_scale_height > 0:
            raise InvalidAtmosphereError(
                f"rayleigh_scale_height must be positive, got {self.rayleigh_scale_height}")
        if not self.mie_scale_height > 0:
            raise InvalidAtmosphereError(
                f"mie_scale_height must be positive, got {self.mie_scale_height}")
        if not -1.0 < self.mie_asymmetry < 1.0:
            raise InvalidAtmosphereError(
                f"mie_asymmetry must lie in (-1, 1), got {self.mie_asymmetry}")
        return self


@dataclass
class LightResult:
    """
    Light reaching the viewer along one ray.

    Attributes:
        color: Linear, unbounded RGB (3,) shape
        alpha: 1.0 when the atmosphere contributed, 0.0 on short-circuit paths
    """
    color: np.ndarray  # (3,) shape
    alpha: float

    def __post_init__(self):
        self.color = np.asarray(self.color, dtype=float)
        if self.color.shape != (3,):
            raise ValueError(f"color must be a (3,) array, got shape {self.color.shape}")

    @classmethod
    def zero(cls):
        return cls(color=np.zeros(3), alpha=0.0)

    def as_rgba(self):
        return np.append(self.color, self.alpha)
