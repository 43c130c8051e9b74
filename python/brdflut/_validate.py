# python/brdflut/_validate.py
# Precondition checks shared by the builder, config loader and CLI
from __future__ import annotations
from pathlib import Path
from typing import Tuple

_MAX_SIZE = 8192  # conservative guardrail for a single 2D texture level
_BITS = (16, 32)
TEXTURE_SUFFIXES: Tuple[str, ...] = (".dds", ".ktx")

def _as_int(name: str, v) -> int:
    if isinstance(v, bool):
        raise ValueError(f"{name} must be an integer, got bool")
    if isinstance(v, float) and not v.is_integer():
        raise ValueError(f"{name} must be an integer, got {v!r}")
    try:
        i = int(v)
    except Exception as e:
        raise ValueError(f"{name} must be an integer, got {type(v).__name__}") from e
    return i

def lut_size(n) -> int:
    s = _as_int("size", n)
    if s < 1:
        raise ValueError("size must be >= 1")
    if s > _MAX_SIZE:
        raise ValueError(f"size must be <= {_MAX_SIZE}")
    return s

def sample_count(n) -> int:
    c = _as_int("samples", n)
    if c < 1:
        raise ValueError("samples must be >= 1")
    return c

def bits_per_channel(n) -> int:
    b = _as_int("bits", n)
    if b not in _BITS:
        raise ValueError(f"bits must be 16 or 32, got {b}")
    return b

def worker_count(n) -> int:
    w = _as_int("workers", n)
    if w < 1:
        raise ValueError("workers must be >= 1")
    return w

def texture_path(p: str | Path) -> Path:
    s = str(p)
    if not s:
        raise ValueError("filename must not be empty")
    path = Path(s)
    if path.suffix.lower() not in TEXTURE_SUFFIXES:
        raise ValueError("filename must have the dds or ktx extension")
    return path

def png_path(p: str | Path) -> Path:
    s = str(p)
    if not s.lower().endswith(".png"):
        raise ValueError("path must end with .png")
    return Path(s)
