"""
Utility functions for the sky renderer.

Vector normalization and the single-vs-batch conversions shared by the
kernel's batch path and the rendering layer.
"""

import numpy as np


def normalize(vectors):
    """
    Scale vectors to unit length along the last axis.

    Args:
        vectors: (3,) vector or (..., 3) array of vectors

    Returns:
        Array of the same shape. Zero-length input is not guarded against.
    """
    vectors = np.asarray(vectors, dtype=float)
    if vectors.ndim == 1:
        return vectors / np.linalg.norm(vectors)
    return vectors / np.linalg.norm(vectors, axis=-1, keepdims=True)


def ensure_batch(vectors):
    """
    Ensure a vector argument is in (N, 3) batch format.

    Returns:
        tuple: (batched array, was_single)
    """
    vectors = np.asarray(vectors, dtype=float)
    if vectors.ndim == 1:
        return vectors[None, :], True
    return vectors, False


def unbatch_if_needed(array, was_single):
    """
    Drop the batch dimension again if the caller passed a single vector.

    Examples:
        rgba = unbatch_if_needed(rgba_batch, was_single=True)  # (1, 4) -> (4,)
    """
    if was_single and array.shape[0] == 1:
        return array[0]
    return array
