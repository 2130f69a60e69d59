"""Pytest configuration and fixtures."""

import random
import sys
from pathlib import Path
from typing import Callable, List

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


WIDGET_SCHEMA = (
    '{"Name":"Widget","Fields":['
    '{"ColName":"id","Type":"int"},'
    '{"ColName":"label","Type":"string"},'
    '{"ColName":"flag","Type":"bool"},'
    '{"ColName":"mystery","Type":"enum"}]}'
)


class ScriptedSource:
    """Random source that replays fixed draws and records each ``stop``."""

    def __init__(self, draws: List[int]):
        self.draws = list(draws)
        self.stops: List[int] = []

    def randrange(self, stop: int) -> int:
        self.stops.append(stop)
        value = self.draws.pop(0)
        assert 0 <= value < stop
        return value


@pytest.fixture
def rng() -> random.Random:
    """Seeded source so statistical tests are stable."""
    return random.Random(20240601)


@pytest.fixture
def scripted() -> Callable[[List[int]], ScriptedSource]:
    return ScriptedSource


@pytest.fixture
def widget_schema() -> str:
    return WIDGET_SCHEMA


@pytest.fixture
def write_schema(tmp_path: Path) -> Callable[[str], Path]:
    """Write schema text to a file under tmp_path and return its path."""

    def _write(text: str, name: str = "reports.json") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
