# tests/test_examples.py
# Smoke test for the scripts under examples/
# RELEVANT FILES: examples/brdf_lut_convergence.py
import importlib.util
from pathlib import Path

from brdflut.texture import TextureFormat, load_texture

EXAMPLES_DIR = Path(__file__).resolve().parents[1] / "examples"


def _load_example(name):
    spec = importlib.util.spec_from_file_location(name, EXAMPLES_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_convergence_table_ends_at_zero():
    example = _load_example("brdf_lut_convergence")
    rows, best = example.convergence_table(3, [32, 8, 32])
    assert [n for n, _, _ in rows] == [8, 32]
    assert rows[-1][1:] == (0.0, 0.0)
    assert best.samples == 32


def test_convergence_example_writes_outputs(tmp_path, capsys):
    example = _load_example("brdf_lut_convergence")
    code = example.main(["--size", "2", "--samples", "4", "8", "--format", "ktx", "--out-dir", str(tmp_path)])
    assert code == 0
    texture = load_texture(tmp_path / "brdf_lut_2_8.ktx")
    assert texture.format is TextureFormat.RG32_SFLOAT
    assert (tmp_path / "brdf_lut_2_8.png").exists()
    assert "max|dA|" in capsys.readouterr().out
