# python/brdflut/config.py
# LUT generation settings parsed from mappings, JSON files and CLI overrides
# Exists to keep the CLI and library entry points on one validated parameter set
# RELEVANT FILES: python/brdflut/cli.py, python/brdflut/_validate.py, tests/test_config.py
from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from . import _validate

ConfigSource = Union["LutConfig", Mapping[str, Any], str, Path, None]

DEFAULT_SIZE = 128
DEFAULT_SAMPLES = 1024
DEFAULT_BITS = 16

_KEY_ALIASES: Dict[str, str] = {
    "size": "size",
    "resolution": "size",
    "samples": "samples",
    "samplecount": "samples",
    "n": "samples",
    "bits": "bits",
    "bitsperchannel": "bits",
    "workers": "workers",
    "jobs": "workers",
    "output": "output",
    "filename": "output",
    "preview": "preview",
}


def _normalize_key(value: Any) -> str:
    return "".join(
        c
        for c in str(value).strip().lower()
        if c not in {"-", "_", " ", "."}
    )


def _canonical_key(value: Any) -> str:
    key = _normalize_key(value)
    if key not in _KEY_ALIASES:
        raise ValueError(f"Unknown LUT config key: {value!r}")
    return _KEY_ALIASES[key]


def _maybe_path(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass
class LutConfig:
    size: int = DEFAULT_SIZE
    samples: int = DEFAULT_SAMPLES
    bits: int = DEFAULT_BITS
    workers: int = 1
    output: Optional[str] = None
    preview: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "size": self.size,
            "samples": self.samples,
            "bits": self.bits,
            "workers": self.workers,
            "output": self.output,
            "preview": self.preview,
        }

    def copy(self) -> "LutConfig":
        return copy.deepcopy(self)

    def validate(self) -> None:
        self.size = _validate.lut_size(self.size)
        self.samples = _validate.sample_count(self.samples)
        self.bits = _validate.bits_per_channel(self.bits)
        self.workers = _validate.worker_count(self.workers)
        if self.output is not None:
            _validate.texture_path(self.output)
        if self.preview is not None:
            _validate.png_path(self.preview)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["LutConfig"] = None) -> "LutConfig":
        base = copy.deepcopy(default) if default is not None else cls()
        for raw_key, value in data.items():
            key = _canonical_key(raw_key)
            if key in {"output", "preview"}:
                setattr(base, key, _maybe_path(value))
            else:
                setattr(base, key, value)
        return base


def _load_from_path(path: Path) -> Mapping[str, Any]:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in {".json", ""}:
        data = json.loads(text)
        if not isinstance(data, Mapping):
            raise TypeError(f"LUT config file must contain a JSON object: {path}")
        return data
    raise ValueError(f"Unsupported LUT config file format: {path}")


def load_lut_config(config: ConfigSource = None, overrides: Optional[Mapping[str, Any]] = None) -> LutConfig:
    """Resolve a :class:`LutConfig` from ``config`` and apply ``overrides``.

    ``None`` values in ``overrides`` are ignored so unset CLI flags keep the
    value from ``config``.
    """
    if isinstance(config, LutConfig):
        cfg = config.copy()
    elif isinstance(config, Mapping):
        cfg = LutConfig.from_mapping(config)
    elif isinstance(config, (str, Path)):
        cfg = LutConfig.from_mapping(_load_from_path(Path(config)))
    elif config is None:
        cfg = LutConfig()
    else:
        raise TypeError("config must be LutConfig, mapping, path, or None")

    if overrides:
        merged = {k: v for k, v in overrides.items() if v is not None}
        if merged:
            cfg = LutConfig.from_mapping(merged, cfg)
    cfg.validate()
    return cfg


__all__ = [
    "LutConfig",
    "load_lut_config",
    "DEFAULT_SIZE",
    "DEFAULT_SAMPLES",
    "DEFAULT_BITS",
]
