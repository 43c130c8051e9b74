# tests/test_cli.py
"""CLI smoke tests for the brdflut command."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from brdflut import cli
from brdflut.texture import TextureFormat, load_texture


def test_parse_args_short_flags():
    args = cli._parse_args(["-f", "lut.dds", "-s", "256", "-n", "64", "-b", "32"])
    assert args.filename == "lut.dds"
    assert args.size == 256
    assert args.samples == 64
    assert args.bits == 32


def test_parse_args_leaves_unset_flags_empty():
    args = cli._parse_args(["-f", "lut.ktx"])
    assert args.size is None
    assert args.samples is None
    assert args.bits is None


def test_generates_lut_file(tmp_path, capsys):
    out = tmp_path / "brdf.ktx"
    code = cli.main(["-f", str(out), "-s", "4", "-n", "16", "-b", "32", "-q"])
    assert code == 0
    assert out.exists()
    texture = load_texture(out)
    assert texture.size == 4
    assert texture.format is TextureFormat.RG32_SFLOAT
    assert np.all(np.isfinite(texture.to_array()))

    lines = capsys.readouterr().out.splitlines()
    assert lines[-2] == "32 bit, [4 x 4] BRDF LUT generated using 16 samples."
    assert lines[-1] == f"Saved LUT to {out}."


def test_default_bits_is_16(tmp_path):
    out = tmp_path / "brdf.dds"
    assert cli.main(["-f", str(out), "-s", "2", "-n", "4", "-q"]) == 0
    assert load_texture(out).format is TextureFormat.RG16_SFLOAT


def test_writes_preview(tmp_path):
    out = tmp_path / "brdf.dds"
    preview = tmp_path / "brdf.png"
    assert cli.main(["-f", str(out), "-s", "3", "-n", "8", "--preview", str(preview), "-q"]) == 0
    with Image.open(preview) as image:
        assert image.size == (3, 3)


def test_config_file_with_cli_override(tmp_path, capsys):
    out = tmp_path / "brdf.dds"
    config = tmp_path / "lut.json"
    config.write_text(json.dumps({"size": 2, "samples": 8, "bits": 32, "output": str(out)}), encoding="utf-8")
    assert cli.main(["--config", str(config), "-s", "3", "-q"]) == 0
    assert load_texture(out).size == 3
    assert "32 bit, [3 x 3] BRDF LUT generated using 8 samples." in capsys.readouterr().out


@pytest.mark.parametrize(
    "argv",
    [
        [],                                   # no filename
        ["-f", "brdf.png"],                   # bad extension
        ["-f", "brdf.dds", "-b", "24"],       # bits not in {16, 32}
        ["-f", "brdf.dds", "-s", "0"],        # size < 1
        ["-f", "brdf.dds", "-n", "0"],        # samples < 1
        ["-f", "brdf.dds", "-n", "ten"],      # not an integer
    ],
)
def test_invalid_arguments_exit_with_usage_error(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    assert excinfo.value.code == 2


def test_missing_config_file_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--config", str(tmp_path / "nope.json"), "-f", "brdf.dds"])
    assert excinfo.value.code == 2


def test_write_failure_returns_1(tmp_path, capsys):
    out = tmp_path / "missing" / "brdf.dds"
    assert cli.main(["-f", str(out), "-s", "2", "-n", "4", "-q"]) == 1
    assert "error:" in capsys.readouterr().err
    assert not out.exists()


def test_preview_failure_reports_saved_lut(tmp_path, capsys):
    out = tmp_path / "brdf.dds"
    preview = tmp_path / "missing" / "brdf.png"
    assert cli.main(["-f", str(out), "-s", "2", "-n", "4", "--preview", str(preview), "-q"]) == 1
    assert out.exists()
    assert load_texture(out).size == 2
    assert not preview.exists()
    captured = capsys.readouterr()
    assert f"Saved LUT to {out}." in captured.out
    assert f"LUT was saved to {out} but the preview failed" in captured.err


def test_info_reports_existing_lut(tmp_path, capsys):
    out = tmp_path / "brdf.ktx"
    assert cli.main(["-f", str(out), "-s", "4", "-n", "16", "-q"]) == 0
    capsys.readouterr()
    assert cli.main(["--info", str(out)]) == 0
    text = capsys.readouterr().out
    assert "16 bit, [4 x 4] RG16_SFLOAT" in text
    assert "A (scale): min=" in text
    assert "B (bias): min=" in text


def test_info_on_bad_file_returns_1(tmp_path, capsys):
    path = tmp_path / "bad.dds"
    path.write_bytes(b"nope")
    assert cli.main(["--info", str(path)]) == 1
    assert "error:" in capsys.readouterr().err


def test_module_entry_point_exists():
    import brdflut.__main__  # noqa: F401
    assert Path(cli.__file__).name == "cli.py"
