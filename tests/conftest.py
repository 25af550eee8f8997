from pathlib import Path

import pytest
from click.testing import CliRunner

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def manual_path() -> Path:
    """Path to a condensed reference manual exercising every block type."""
    return DATA_DIR / "manual.txt"


@pytest.fixture()
def manual_text(manual_path: Path) -> str:
    return manual_path.read_text(encoding="utf-8")
