"""
Ray-sphere intersection calculations for the sky renderer.

Both spheres in the scene (planet surface and top of atmosphere) are centered
at the coordinate origin. Every solver here reports a miss with the
NO_INTERSECTION interval, whose near value is larger than its far value.
"""
import math
import numpy as np
from sky_renders import constants


def solve_quadratic(a, b, c):
    """
    Solve ax^2 + bx + c = 0 for a single set of coefficients.

    Uses the sign-matched form of the quadratic formula so that the larger
    root never suffers from cancellation. a == 0 is not supported.

    Args:
        a, b, c: Quadratic coefficients

    Returns:
        tuple: (x0, x1) with x0 <= x1, or NO_INTERSECTION when there is no real root
    """
    discriminant = b * b - 4.0 * a * c
    if discriminant < 0.0:
        return constants.NO_INTERSECTION
    if discriminant == 0.0:
        x0 = -0.5 * b / a
        return x0, x0

    sqrt_disc = math.sqrt(discriminant)
    if b > 0.0:
        q = -0.5 * (b + sqrt_disc)
    else:
        q = -0.5 * (b - sqrt_disc)
    x0 = q / a
    x1 = c / q
    if x0 > x1:
        x0, x1 = x1, x0
    return x0, x1


def solve_quadratic_vectorized(a, b, c):
    """
    Solve ax^2 + bx + c = 0 for vectorized arrays.

    Applies exactly the rules of solve_quadratic elementwise.

    Args:
        a, b, c: Arrays of quadratic coefficients

    Returns:
        tuple: (t_near, t_far) arrays, holding NO_INTERSECTION where there is no real root
    """
    a, b, c = np.broadcast_arrays(np.asarray(a, dtype=float),
                                  np.asarray(b, dtype=float),
                                  np.asarray(c, dtype=float))
    discriminant = b * b - 4.0 * a * c

    t_near = np.full(a.shape, constants.NO_INTERSECTION[0])
    t_far = np.full(a.shape, constants.NO_INTERSECTION[1])

    double_mask = discriminant == 0.0
    if np.any(double_mask):
        x0 = -0.5 * b[double_mask] / a[double_mask]
        t_near[double_mask] = x0
        t_far[double_mask] = x0

    two_mask = discriminant > 0.0
    if np.any(two_mask):
        b2 = b[two_mask]
        sqrt_disc = np.sqrt(discriminant[two_mask])
        q = np.where(b2 > 0.0, -0.5 * (b2 + sqrt_disc), -0.5 * (b2 - sqrt_disc))
        x0 = q / a[two_mask]
        x1 = c[two_mask] / q
        t_near[two_mask] = np.minimum(x0, x1)
        t_far[two_mask] = np.maximum(x0, x1)

    return t_near, t_far


def ray_sphere(origin, direction, radius):
    """
    Intersect one ray with a sphere centered at the origin.

    The direction does not need to be normalized; the returned distances are
    in units of its length.

    Args:
        origin: (3,) ray origin
        direction: (3,) ray direction
        radius: Sphere radius

    Returns:
        tuple: (t_near, t_far) ray parameters, or NO_INTERSECTION
    """
    origin = np.asarray(origin, dtype=float)
    direction = np.asarray(direction, dtype=float)

    a = float(np.dot(direction, direction))
    b = 2.0 * float(np.dot(direction, origin))
    c = float(np.dot(origin, origin)) - radius * radius
    return solve_quadratic(a, b, c)


def ray_sphere_vectorized(origins, directions, radius):
    """
    Vectorized intersection of rays with a sphere centered at the origin.

    Args:
        origins: (3,) or (N, 3) ray origins
        directions: (3,) or (N, 3) ray directions
        radius: Sphere radius

    Returns:
        tuple: (t_near, t_far) arrays of shape (N,)
    """
    origins = np.asarray(origins, dtype=float)
    directions = np.asarray(directions, dtype=float)

    a = np.sum(directions * directions, axis=-1)
    b = 2.0 * np.sum(directions * origins, axis=-1)
    c = np.sum(origins * origins, axis=-1) - radius * radius
    return solve_quadratic_vectorized(a, b, c)
