"""GGX importance sampling of microfacet half-vectors."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .sequence import SamplePoint

# The LUT is defined in a normal-aligned local frame.
REFERENCE_NORMAL = np.array([0.0, 0.0, 1.0], dtype=np.float64)


def _normalize(v: np.ndarray) -> np.ndarray:
    return v / np.linalg.norm(v)


def tangent_frame(normal: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Build ``(tangent, bitangent)`` completing an orthonormal basis around ``normal``."""
    n = np.asarray(normal, dtype=np.float64)
    if n.shape != (3,):
        raise ValueError(f"normal must be (3,) array, got {n.shape}")
    if abs(n[2]) < 0.999:
        up = np.array([0.0, 0.0, 1.0])
    else:
        up = np.array([1.0, 0.0, 0.0])
    tangent = _normalize(np.cross(up, n))
    bitangent = np.cross(n, tangent)
    return tangent, bitangent


def _ggx_spherical(xi_x, xi_y, roughness: float):
    a = roughness * roughness
    phi = 2.0 * np.pi * xi_x
    cos_theta = np.sqrt((1.0 - xi_y) / (1.0 + (a * a - 1.0) * xi_y))
    sin_theta = np.sqrt(1.0 - cos_theta * cos_theta)
    return phi, cos_theta, sin_theta


def importance_sample_ggx(xi: SamplePoint, roughness: float,
                          normal: np.ndarray = REFERENCE_NORMAL) -> np.ndarray:
    """
    Sample a half-vector from the GGX distribution around ``normal``.

    Args:
        xi: Point in the unit square, usually from :func:`brdflut.sequence.hammersley`
        roughness: Perceptual roughness in [0, 1]; squared before use
        normal: Macro-surface normal

    Returns:
        Unit half-vector ``H`` as (3,) float64 array
    """
    phi, cos_theta, sin_theta = _ggx_spherical(float(xi[0]), float(xi[1]), float(roughness))

    hx = np.cos(phi) * sin_theta
    hy = np.sin(phi) * sin_theta
    hz = cos_theta

    n = np.asarray(normal, dtype=np.float64)
    tangent, bitangent = tangent_frame(n)
    sample_vec = tangent * hx + bitangent * hy + n * hz
    return _normalize(sample_vec)


def importance_sample_ggx_batch(xi: np.ndarray, roughness: float,
                                normal: np.ndarray = REFERENCE_NORMAL,
                                dtype=np.float32) -> np.ndarray:
    """Vectorized :func:`importance_sample_ggx` over an ``(n, 2)`` array of points.

    Returns an ``(n, 3)`` array of unit half-vectors in ``dtype``.
    """
    xi = np.asarray(xi, dtype=dtype)
    if xi.ndim != 2 or xi.shape[1] != 2:
        raise ValueError(f"xi must be (n, 2) array, got {xi.shape}")
    r = dtype(roughness)
    phi, cos_theta, sin_theta = _ggx_spherical(xi[:, 0], xi[:, 1], r)

    hx = np.cos(phi) * sin_theta
    hy = np.sin(phi) * sin_theta
    hz = cos_theta

    n = np.asarray(normal, dtype=np.float64)
    tangent, bitangent = (v.astype(dtype) for v in tangent_frame(n))
    n = n.astype(dtype)
    h = (hx[:, np.newaxis] * tangent[np.newaxis, :]
         + hy[:, np.newaxis] * bitangent[np.newaxis, :]
         + hz[:, np.newaxis] * n[np.newaxis, :])
    return h / np.linalg.norm(h, axis=1, keepdims=True)


__all__ = [
    "REFERENCE_NORMAL",
    "tangent_frame",
    "importance_sample_ggx",
    "importance_sample_ggx_batch",
]
