"""
Angular scattering distributions.

Both functions take mu, the cosine of the angle between the view direction
and the sun direction, as a scalar or an array.
"""
import numpy as np


def rayleigh_phase(mu):
    """Rayleigh phase function: 3/(16 pi) * (1 + mu^2)."""
    return 3.0 / (16.0 * np.pi) * (1.0 + mu * mu)


def mie_phase(mu, g):
    """
    Cornette-Shanks approximation of the Mie phase function.

    Args:
        mu: Cosine of the view/sun angle
        g: Asymmetry parameter in (-1, 1); positive values favour forward scattering

    Returns:
        Phase value(s) with the shape of mu
    """
    gg = g * g
    return (3.0 / (8.0 * np.pi)
            * ((1.0 - gg) * (mu * mu + 1.0))
            / ((1.0 + gg - 2.0 * mu * g) ** 1.5 * (2.0 + gg)))
