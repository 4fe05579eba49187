"""
Numerical optical depth along a straight segment through the atmosphere.
"""
import numpy as np


def integrate_optical_depth(start, direction, step_count, segment_length,
                            planet_radius, rayleigh_scale_height, mie_scale_height):
    """
    Midpoint-rule integral of exponential Rayleigh and Mie density.

    The segment [0, segment_length] along the direction is split into
    step_count equal pieces and density is sampled at each piece's midpoint.
    Heights below the planet surface are used as-is, so a sample under the
    surface contributes more than sea-level density.

    Args:
        start: (3,) segment start, or (N, 3) for a batch of segments
        direction: (3,) or (N, 3) unit direction of travel
        step_count: Number of midpoint samples
        segment_length: Scalar length, or (N,) lengths for a batch
        planet_radius: Radius of the planet surface
        rayleigh_scale_height: Rayleigh scale height
        mie_scale_height: Mie scale height

    Returns:
        tuple: (od_rayleigh, od_mie), floats for a single segment or (N,) arrays
    """
    start = np.asarray(start, dtype=float)
    direction = np.asarray(direction, dtype=float)
    step_size = np.asarray(segment_length, dtype=float) / step_count

    od_rlh = np.zeros(step_size.shape)
    od_mie = np.zeros(step_size.shape)

    for i in range(step_count):
        position = start + direction * (step_size * (i + 0.5))[..., None]
        height = np.linalg.norm(position, axis=-1) - planet_radius
        od_rlh += np.exp(-height / rayleigh_scale_height) * step_size
        od_mie += np.exp(-height / mie_scale_height) * step_size

    if step_size.ndim == 0:
        return float(od_rlh), float(od_mie)
    return od_rlh, od_mie
