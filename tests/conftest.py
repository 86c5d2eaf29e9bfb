"""
Shared pytest fixtures for the season bracket tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.models import Entrant
from core.seeding import assign_seeds
from core.elimination import build_bracket


def make_entrants(count, start_score=100, step=10):
    """Entrants 1..count whose scores rank them in id order (id == seed)."""
    return [Entrant(id=i, name=f"Player {i}", score=start_score - step * (i - 1))
            for i in range(1, count + 1)]


def seeded_bracket(count):
    """Build a bracket for `count` entrants where entrant id equals seed."""
    seeded, error = assign_seeds(make_entrants(count, start_score=count * 10))
    assert error is None
    return seeded, build_bracket(seeded)


@pytest.fixture
def three_entrants():
    """The three-entrant scenario: scores 10, 30, 20."""
    return [
        Entrant(id=1, name="Alice", score=10),
        Entrant(id=2, name="Bob", score=30),
        Entrant(id=3, name="Carol", score=20),
    ]


@pytest.fixture
def eight_entrants():
    return make_entrants(8)


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Flask test client backed by a temporary data directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setattr(app_module, 'SEASON_FILE', str(data_dir / 'season.yaml'))

    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        yield client
