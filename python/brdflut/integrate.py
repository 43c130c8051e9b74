# python/brdflut/integrate.py
# Split-sum environment BRDF integration for a single (NdotV, roughness) pair
# Exists to produce the (scale, bias) pair stored in each LUT texel
# RELEVANT FILES: python/brdflut/sequence.py, python/brdflut/sampling.py, python/brdflut/masking.py, python/brdflut/lut.py
"""
Split-sum integration of the GGX/Smith specular BRDF.

For a view direction at ``NdotV`` and a given roughness, the specular
integral over the hemisphere is factored into ``F0 * A + B`` with a
Fresnel-Schlick weight. Both terms are estimated with Hammersley points
and GGX importance sampling of the half-vector.

Samples whose reflected light vector falls below the horizon contribute
nothing, but still count toward the normalization by ``sample_count``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional

import numpy as np

from . import _validate
from .masking import geometry_smith
from .sampling import REFERENCE_NORMAL, importance_sample_ggx, importance_sample_ggx_batch
from .sequence import hammersley, hammersley_points


def _clamp01(name: str, value: float) -> float:
    v = float(value)
    if math.isnan(v):
        raise ValueError(f"{name} must not be NaN")
    return min(max(v, 0.0), 1.0)


@dataclass(frozen=True)
class IntegrationInputs:
    """Parameters of one split-sum integration.

    ``n_dot_v`` and ``roughness`` are clamped to [0, 1]; ``sample_count``
    must be a positive integer.
    """
    n_dot_v: float
    roughness: float
    sample_count: int

    def __post_init__(self):
        object.__setattr__(self, "n_dot_v", _clamp01("n_dot_v", self.n_dot_v))
        object.__setattr__(self, "roughness", _clamp01("roughness", self.roughness))
        object.__setattr__(self, "sample_count", _validate.sample_count(self.sample_count))

    def view_vector(self) -> np.ndarray:
        """View direction in the normal-aligned frame, ``(sin, 0, cos)``."""
        nov = self.n_dot_v
        return np.array([math.sqrt(1.0 - nov * nov), 0.0, nov], dtype=np.float64)


class IntegrationResult(NamedTuple):
    """Split-sum ``(A, B)``: scale and bias applied to F0."""
    scale: float
    bias: float


def integrate_brdf(n_dot_v: float, roughness: float, sample_count: int,
                   points: Optional[np.ndarray] = None) -> IntegrationResult:
    """
    Integrate the split-sum BRDF terms for one LUT texel.

    The per-sample work runs in float32 over the whole sample axis at once
    and the two accumulators are reduced with a sum. Non-finite sample
    contributions (``NoH * NoV == 0``) are propagated, not clamped.

    Args:
        n_dot_v: Cosine between view and normal, clamped to [0, 1]
        roughness: Perceptual roughness, clamped to [0, 1]
        sample_count: Number of Hammersley samples, >= 1
        points: Optional precomputed ``hammersley_points(sample_count)``

    Returns:
        IntegrationResult with scale ``A`` and bias ``B``
    """
    inputs = IntegrationInputs(n_dot_v, roughness, sample_count)
    n = inputs.sample_count
    if points is None:
        points = hammersley_points(n, dtype=np.float32)
    elif points.shape != (n, 2):
        raise ValueError(f"points must have shape ({n}, 2), got {points.shape}")

    f32 = np.float32
    nov_in = f32(inputs.n_dot_v)
    v = np.array([np.sqrt(f32(1.0) - nov_in * nov_in), 0.0, nov_in], dtype=f32)
    normal = REFERENCE_NORMAL.astype(f32)

    h = importance_sample_ggx_batch(points, inputs.roughness, REFERENCE_NORMAL, dtype=f32)
    v_dot_h = h @ v
    light = f32(2.0) * v_dot_h[:, np.newaxis] * h - v[np.newaxis, :]
    light = light / np.linalg.norm(light, axis=1, keepdims=True)

    no_l = np.maximum(light[:, 2], f32(0.0))
    no_h = np.maximum(h[:, 2], f32(0.0))
    vo_h = np.maximum(v_dot_h, f32(0.0))
    no_v = max(f32(np.dot(normal, v)), f32(0.0))

    accepted = no_l > 0.0
    with np.errstate(divide="ignore", invalid="ignore"):
        g = geometry_smith(no_v, no_l, f32(inputs.roughness))
        g_vis = (g * vo_h) / (no_h * no_v)
        fc = (f32(1.0) - vo_h) ** 5
        a = np.sum(np.where(accepted, (f32(1.0) - fc) * g_vis, f32(0.0)), dtype=f32)
        b = np.sum(np.where(accepted, fc * g_vis, f32(0.0)), dtype=f32)

    return IntegrationResult(float(a / f32(n)), float(b / f32(n)))


def integrate_brdf_reference(n_dot_v: float, roughness: float, sample_count: int) -> IntegrationResult:
    """Scalar, sample-by-sample version of :func:`integrate_brdf` in float64.

    Slow; kept as an oracle for the vectorized path.
    """
    inputs = IntegrationInputs(n_dot_v, roughness, sample_count)
    v = inputs.view_vector()
    normal = REFERENCE_NORMAL

    a = np.float64(0.0)
    b = np.float64(0.0)
    with np.errstate(divide="ignore", invalid="ignore"):
        for i in range(inputs.sample_count):
            xi = hammersley(i, inputs.sample_count)
            h = importance_sample_ggx(xi, inputs.roughness, normal)
            light = 2.0 * np.dot(v, h) * h - v
            light = light / np.linalg.norm(light)

            no_l = max(light[2], 0.0)
            no_h = max(h[2], 0.0)
            vo_h = max(np.dot(v, h), 0.0)
            no_v = max(np.dot(normal, v), 0.0)

            if no_l > 0.0:
                g = geometry_smith(np.float64(no_v), np.float64(no_l), np.float64(inputs.roughness))
                g_vis = (g * vo_h) / np.float64(no_h * no_v)
                fc = (1.0 - vo_h) ** 5
                a += (1.0 - fc) * g_vis
                b += fc * g_vis

    return IntegrationResult(float(a) / inputs.sample_count, float(b) / inputs.sample_count)


__all__ = [
    "IntegrationInputs",
    "IntegrationResult",
    "integrate_brdf",
    "integrate_brdf_reference",
]
