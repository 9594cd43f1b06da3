import sys
from pathlib import Path

import pytest

# src/ must be importable before the tests import capturelint
SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture
def write_file(tmp_path: Path):
    """Write ``content`` to ``tmp_path / rel`` and return the path."""
    def _w(rel: str, content: str) -> Path:
        f = tmp_path / rel
        f.parent.mkdir(parents=True, exist_ok=True)
        f.write_text(content, encoding="utf-8")
        return f

    return _w
