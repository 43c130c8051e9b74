# python/brdflut/sequence.py
# Hammersley low-discrepancy points for quasi-Monte Carlo BRDF integration
# Exists to give the integrator a deterministic, bit-exact sample stream
# RELEVANT FILES: python/brdflut/sampling.py, python/brdflut/integrate.py, tests/test_sequence.py
"""Hammersley point set built on the base-2 Van der Corput radical inverse."""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

# 1 / 2**32
INV_2_POW_32 = 2.3283064365386963e-10

_U32 = 0xFFFFFFFF


class SamplePoint(NamedTuple):
    """A 2D point in the unit square."""
    x: float
    y: float


def radical_inverse_vdc(bits: int) -> float:
    """Reverse the 32 bits of ``bits`` and scale the result into [0, 1)."""
    bits &= _U32
    bits = ((bits << 16) | (bits >> 16)) & _U32
    bits = ((bits & 0x55555555) << 1) | ((bits & 0xAAAAAAAA) >> 1)
    bits = ((bits & 0x33333333) << 2) | ((bits & 0xCCCCCCCC) >> 2)
    bits = ((bits & 0x0F0F0F0F) << 4) | ((bits & 0xF0F0F0F0) >> 4)
    bits = ((bits & 0x00FF00FF) << 8) | ((bits & 0xFF00FF00) >> 8)
    return float(bits) * INV_2_POW_32


def hammersley(i: int, n: int) -> SamplePoint:
    """Return the ``i``-th point of an ``n``-point Hammersley set.

    Args:
        i: Zero-based sample index, ``0 <= i < n``
        n: Total number of samples, ``n >= 1``

    Returns:
        ``SamplePoint(i / n, radical_inverse_vdc(i))``
    """
    if n < 1:
        raise ValueError(f"sample count must be >= 1, got {n}")
    if not 0 <= i < n:
        raise ValueError(f"sample index {i} out of range [0, {n})")
    return SamplePoint(i / n, radical_inverse_vdc(i))


def hammersley_points(n: int, dtype=np.float32) -> np.ndarray:
    """Generate all ``n`` Hammersley points as an ``(n, 2)`` array.

    The bit reversal runs on ``uint32`` lanes with the same mask/shift
    sequence as :func:`radical_inverse_vdc`, so the second column matches
    the scalar version bit for bit before the final cast to ``dtype``.
    """
    if n < 1:
        raise ValueError(f"sample count must be >= 1, got {n}")
    idx = np.arange(n, dtype=np.uint32)
    bits = idx.copy()
    bits = (bits << np.uint32(16)) | (bits >> np.uint32(16))
    bits = ((bits & np.uint32(0x55555555)) << np.uint32(1)) | ((bits & np.uint32(0xAAAAAAAA)) >> np.uint32(1))
    bits = ((bits & np.uint32(0x33333333)) << np.uint32(2)) | ((bits & np.uint32(0xCCCCCCCC)) >> np.uint32(2))
    bits = ((bits & np.uint32(0x0F0F0F0F)) << np.uint32(4)) | ((bits & np.uint32(0xF0F0F0F0)) >> np.uint32(4))
    bits = ((bits & np.uint32(0x00FF00FF)) << np.uint32(8)) | ((bits & np.uint32(0xFF00FF00)) >> np.uint32(8))

    points = np.empty((n, 2), dtype=np.float64)
    points[:, 0] = idx.astype(np.float64) / float(n)
    points[:, 1] = bits.astype(np.float64) * INV_2_POW_32
    return points.astype(dtype, copy=False)


__all__ = [
    "SamplePoint",
    "INV_2_POW_32",
    "radical_inverse_vdc",
    "hammersley",
    "hammersley_points",
]
