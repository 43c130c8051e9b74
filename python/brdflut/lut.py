# python/brdflut/lut.py
# Pixel-grid driver that fills the split-sum BRDF lookup table
# Exists to map texels to (NdotV, roughness) and hand the grid to the texture writer
# RELEVANT FILES: python/brdflut/integrate.py, python/brdflut/texture.py, python/brdflut/cli.py, tests/test_lut.py
"""
BRDF lookup table construction.

Pixel ``(x, y)`` of an ``S x S`` table integrates at
``roughness = (x + 0.5) / S`` and ``NdotV = (y + 0.5) / S``. Every pixel
is independent, so rows may be computed in worker processes.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple, Union

import numpy as np

from . import _validate
from .integrate import IntegrationResult, integrate_brdf
from .sequence import hammersley_points
from .texture import Texture2D, pack_half2x16, save_texture

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def pixel_parameters(x: int, y: int, size: int) -> Tuple[float, float]:
    """Return ``(n_dot_v, roughness)`` sampled at the center of pixel ``(x, y)``."""
    n_dot_v = (y + 0.5) / size
    roughness = (x + 0.5) / size
    return n_dot_v, roughness


@dataclass(frozen=True, eq=False)
class LutImage:
    """Fully populated split-sum table.

    Attributes
    ----------
    values : np.ndarray
        float32 array of shape ``(size, size, 2)`` indexed ``[y, x]``,
        where ``y`` selects NdotV and ``x`` roughness. Channel 0 is the
        scale ``A``, channel 1 the bias ``B``.
    bits : int
        Storage precision per channel, 16 or 32. At 16 bits ``values``
        already carry half-precision rounding.
    samples : int
        Sample count used per texel.
    """
    values: np.ndarray
    bits: int
    samples: int
    elapsed_s: float = 0.0

    def __post_init__(self):
        try:
            values = np.array(self.values, dtype=np.float32)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"values must be a numeric (size, size, 2) array: {exc}") from exc
        if values.ndim != 3 or values.shape[0] != values.shape[1] or values.shape[2] != 2:
            raise ValueError(f"values must have shape (size, size, 2), got {values.shape}")
        _validate.bits_per_channel(self.bits)
        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    @property
    def size(self) -> int:
        return int(self.values.shape[0])

    def result(self, x: int, y: int) -> IntegrationResult:
        a, b = self.values[y, x]
        return IntegrationResult(float(a), float(b))

    def parameters(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(n_dot_v, roughness)`` grids matching ``values[..., 0]``."""
        centers = (np.arange(self.size, dtype=np.float64) + 0.5) / self.size
        roughness, n_dot_v = np.meshgrid(centers, centers)
        return n_dot_v, roughness

    def non_finite_count(self) -> int:
        return int(np.count_nonzero(~np.isfinite(self.values)))

    def to_texture(self) -> Texture2D:
        """Copy the table into a texture, pixel ``(x, y)`` at column ``y``, row ``size - 1 - x``."""
        texture = Texture2D.create(self.size, self.bits)
        # values[y, x] -> texel[row=size-1-x, column=y]
        texels = np.transpose(self.values, (1, 0, 2))[::-1]
        if self.bits == 16:
            texture.data[...] = pack_half2x16(texels)
        else:
            texture.data[...] = texels
        return texture

    def save(self, path: Union[str, Path]) -> Path:
        return save_texture(self.to_texture(), path)


def _integrate_row(args: Tuple[int, int, int]) -> np.ndarray:
    y, size, samples = args
    points = hammersley_points(samples, dtype=np.float32)
    row = np.empty((size, 2), dtype=np.float32)
    for x in range(size):
        n_dot_v, roughness = pixel_parameters(x, y, size)
        row[x] = integrate_brdf(n_dot_v, roughness, samples, points=points)
    return row


class BrdfLutBuilder:
    """Builds a :class:`LutImage` of ``size`` x ``size`` texels.

    Args:
        size: Edge length of the table in texels
        samples: Hammersley samples per texel
        bits: Channel precision, 16 or 32
        workers: Number of worker processes; 1 computes in-process
    """

    def __init__(self, size: int = 128, samples: int = 1024, bits: int = 16, workers: int = 1):
        self.size = _validate.lut_size(size)
        self.samples = _validate.sample_count(samples)
        self.bits = _validate.bits_per_channel(bits)
        self.workers = _validate.worker_count(workers)

    def _rows(self) -> Iterable[np.ndarray]:
        jobs = [(y, self.size, self.samples) for y in range(self.size)]
        if self.workers == 1 or self.size == 1:
            for job in jobs:
                yield _integrate_row(job)
            return
        with ProcessPoolExecutor(max_workers=min(self.workers, self.size)) as pool:
            yield from pool.map(_integrate_row, jobs)

    def build(self, progress: Optional[ProgressCallback] = None) -> LutImage:
        """Integrate every texel and return the finished table."""
        logger.info(
            f"Generating {self.bits} bit [{self.size} x {self.size}] BRDF LUT "
            f"with {self.samples} samples ({self.workers} worker(s))"
        )
        start = time.perf_counter()
        values = np.empty((self.size, self.size, 2), dtype=np.float32)
        for y, row in enumerate(self._rows()):
            values[y] = row
            logger.debug(f"BRDF LUT row {y + 1}/{self.size} done")
            if progress is not None:
                progress(y + 1, self.size)

        if self.bits == 16:
            with np.errstate(over="ignore"):
                values = values.astype(np.float16).astype(np.float32)

        elapsed = time.perf_counter() - start
        lut = LutImage(values, self.bits, self.samples, elapsed_s=elapsed)
        bad = lut.non_finite_count()
        if bad:
            logger.warning(f"BRDF LUT contains {bad} non-finite channel value(s)")
        logger.info(f"BRDF LUT complete: {self.size}x{self.size}, {elapsed:.2f}s")
        return lut


def build_brdf_lut(size: int = 128, samples: int = 1024, bits: int = 16, workers: int = 1,
                   progress: Optional[ProgressCallback] = None) -> LutImage:
    """Convenience wrapper around :class:`BrdfLutBuilder`."""
    return BrdfLutBuilder(size, samples, bits, workers).build(progress)


def generate_brdf_lut_file(path: Union[str, Path], size: int = 128, samples: int = 1024,
                           bits: int = 16, workers: int = 1) -> LutImage:
    """Build a table and write it to ``path`` (``.dds`` or ``.ktx``).

    The extension is checked before any integration work starts.
    """
    target = _validate.texture_path(path)
    lut = build_brdf_lut(size, samples, bits, workers)
    lut.save(target)
    return lut


__all__ = [
    "LutImage",
    "BrdfLutBuilder",
    "build_brdf_lut",
    "generate_brdf_lut_file",
    "pixel_parameters",
]
