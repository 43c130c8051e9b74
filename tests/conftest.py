# Ensure `import brdflut` works from a fresh clone by putting repo/python on sys.path.
import sys
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _ensure_python_path():
    pkg_dir = _repo_root() / "python"
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))


_ensure_python_path()


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: tests that integrate full-size tables or spawn worker processes"
    )
