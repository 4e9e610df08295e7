"""
Shared Test Fixtures

Files that USE this module:
- pytest (fixtures are injected into tests)

Files that this module USES:
- currencies.adapters.persistence (NamespacedStore)
- currencies.application.database (Database)
"""
import pytest  # Testing framework for writing and running tests

from currencies.adapters.persistence import NamespacedStore  # Store under test
from currencies.application.database import Database  # Facade under test


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    return NamespacedStore("preferences", data_dir)


@pytest.fixture
def database(data_dir):
    return Database.open(data_dir)


class Recorder:
    """Collects values pushed to a subscriber callback."""

    def __init__(self):
        self.values = []

    def __call__(self, value):
        self.values.append(value)

    @property
    def last(self):
        return self.values[-1]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_recorder():
    return Recorder
