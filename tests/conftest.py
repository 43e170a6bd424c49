import textwrap
from pathlib import Path

import pytest

from repocfg.core import ATLANTIS_YAML_FILENAME


@pytest.fixture
def write_config(tmp_path: Path):
    """Escribe atlantis.yaml en un repo temporal y devuelve el directorio."""
    def _write(content: str) -> Path:
        (tmp_path / ATLANTIS_YAML_FILENAME).write_text(textwrap.dedent(content), encoding="utf-8")
        return tmp_path
    return _write
