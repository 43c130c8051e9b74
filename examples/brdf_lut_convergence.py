#!/usr/bin/env python3
"""
BRDF LUT convergence sweep

Build the split-sum table at increasing sample counts and report how far
each one is from the table built with the most samples. The densest table
is written as a 32-bit texture together with a PNG preview.

Usage:
    python examples/brdf_lut_convergence.py --out-dir out/brdf --size 64
    python examples/brdf_lut_convergence.py --samples 16 64 256 1024 --format ktx
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from brdflut import LutImage, build_brdf_lut
from brdflut.preview import save_preview_png


def convergence_table(size: int, sample_counts: Sequence[int], workers: int = 1) -> Tuple[List[Tuple[int, float, float]], LutImage]:
    """Return ``[(samples, max |dA|, max |dB|), ...]`` against the densest table, and that table."""
    counts = sorted(set(int(n) for n in sample_counts))
    luts = {n: build_brdf_lut(size, n, bits=32, workers=workers) for n in counts}
    best = luts[counts[-1]]
    rows = []
    for n in counts:
        diff = np.abs(luts[n].values - best.values)
        rows.append((n, float(np.nanmax(diff[..., 0])), float(np.nanmax(diff[..., 1]))))
    return rows, best


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="BRDF LUT sample-count convergence sweep")
    p.add_argument("--size", type=int, default=32, help="LUT edge length")
    p.add_argument("--samples", type=int, nargs="+", default=[16, 64, 256, 1024])
    p.add_argument("--workers", type=int, default=1)
    p.add_argument("--format", choices=("dds", "ktx"), default="dds")
    p.add_argument("--out-dir", type=Path, default=Path("out/brdf_lut"))
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    rows, best = convergence_table(args.size, args.samples, args.workers)
    print(f"{'samples':>8} {'max|dA|':>10} {'max|dB|':>10}")
    for n, da, db in rows:
        print(f"{n:>8} {da:>10.6f} {db:>10.6f}")

    args.out_dir.mkdir(parents=True, exist_ok=True)
    stem = f"brdf_lut_{args.size}_{best.samples}"
    texture_path = best.save(args.out_dir / f"{stem}.{args.format}")
    preview_path = save_preview_png(best, args.out_dir / f"{stem}.png")
    print(f"Wrote {texture_path} and {preview_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
