"""Tests for parameter precondition checks."""

from pathlib import Path

import pytest

from brdflut import _validate


def test_integers_are_coerced():
    assert _validate.lut_size("256") == 256
    assert _validate.sample_count(4.0) == 4
    assert _validate.bits_per_channel(32) == 32
    assert _validate.worker_count(3) == 3


@pytest.mark.parametrize("value", [True, 1.5, "abc", None])
def test_non_integers_are_rejected(value):
    with pytest.raises(ValueError):
        _validate.sample_count(value)


def test_size_limits():
    assert _validate.lut_size(1) == 1
    assert _validate.lut_size(8192) == 8192
    with pytest.raises(ValueError):
        _validate.lut_size(0)
    with pytest.raises(ValueError):
        _validate.lut_size(8193)


@pytest.mark.parametrize("bits", [0, 8, 24, 64])
def test_bits_must_be_16_or_32(bits):
    with pytest.raises(ValueError, match="16 or 32"):
        _validate.bits_per_channel(bits)


def test_texture_path_extension():
    assert _validate.texture_path("out/brdf.dds") == Path("out/brdf.dds")
    assert _validate.texture_path("BRDF.KTX") == Path("BRDF.KTX")
    for bad in ("brdf.png", "brdf", "", "dds"):
        with pytest.raises(ValueError):
            _validate.texture_path(bad)


def test_png_path_extension():
    assert _validate.png_path("a.PNG") == Path("a.PNG")
    with pytest.raises(ValueError):
        _validate.png_path("a.jpg")
