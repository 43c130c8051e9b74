# python/brdflut/cli.py
# Command-line entry point for generating split-sum BRDF lookup tables
# RELEVANT FILES: python/brdflut/config.py, python/brdflut/lut.py, python/brdflut/texture.py, tests/test_cli.py
"""
Generate a split-sum BRDF LUT and store it as a DDS or KTX texture.

Usage:
    brdflut -f brdf.dds [-s SIZE] [-n SAMPLES] [-b {16,32}]
    python -m brdflut --info brdf.dds
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from .config import DEFAULT_BITS, DEFAULT_SAMPLES, DEFAULT_SIZE, load_lut_config
from .lut import BrdfLutBuilder
from .preview import save_preview_png
from .texture import TextureFormatError, TextureWriteError, load_texture

logger = logging.getLogger("brdflut")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brdflut",
        description="Generate a split-sum BRDF lookup table for image-based lighting.",
    )
    parser.add_argument("-f", "--filename", type=str, help="Output texture path (.dds or .ktx).")
    parser.add_argument(
        "-s", "--size", type=int,
        help=f"Size of the lookup table in pixels [size x size]. Default: {DEFAULT_SIZE}",
    )
    parser.add_argument(
        "-n", "--samples", type=int,
        help=f"Number of BRDF samples to integrate per pixel. Default: {DEFAULT_SAMPLES}",
    )
    parser.add_argument(
        "-b", "--bits", type=int, choices=(16, 32),
        help=f"Floating point bits per channel for texture storage. Default: {DEFAULT_BITS}",
    )
    parser.add_argument("-j", "--workers", type=int, help="Worker processes used for the pixel grid. Default: 1")
    parser.add_argument("--config", type=Path, help="JSON file with size/samples/bits/workers/output/preview.")
    parser.add_argument("--preview", type=str, help="Also write an 8-bit PNG preview to this path.")
    parser.add_argument("--info", type=Path, help="Print the format and value range of an existing LUT and exit.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log per-row progress.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors.")
    return parser


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _configure_logging(args: argparse.Namespace) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _print_info(path: Path) -> int:
    try:
        texture = load_texture(path)
    except (TextureFormatError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    values = texture.to_array()
    print(f"{path}: {texture.bits} bit, [{texture.size} x {texture.size}] {texture.format.name}")
    for channel, label in enumerate(("A (scale)", "B (bias)")):
        data = values[..., channel]
        finite = data[np.isfinite(data)]
        if finite.size:
            print(f"  {label}: min={finite.min():.6f} max={finite.max():.6f}")
        else:
            print(f"  {label}: no finite values")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    if args.info is not None:
        return _print_info(args.info)

    overrides = {
        "size": args.size,
        "samples": args.samples,
        "bits": args.bits,
        "workers": args.workers,
        "output": args.filename,
        "preview": args.preview,
    }
    try:
        cfg = load_lut_config(args.config, overrides)
    except (ValueError, TypeError, OSError) as exc:
        parser.error(str(exc))
    if cfg.output is None:
        parser.error("Must provide filename, please try again.")

    lut = BrdfLutBuilder(cfg.size, cfg.samples, cfg.bits, cfg.workers).build()
    try:
        lut.save(cfg.output)
    except (TextureWriteError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"{cfg.bits} bit, [{cfg.size} x {cfg.size}] BRDF LUT generated using {cfg.samples} samples.")
    print(f"Saved LUT to {cfg.output}.")

    if cfg.preview is not None:
        try:
            save_preview_png(lut, cfg.preview)
        except OSError as exc:
            print(f"error: LUT was saved to {cfg.output} but the preview failed: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
