"""
Shared fixtures for the pet store tests
"""
import pytest

from dal import DAL
from database import PetDatabase
from notifications import ChangeNotifier


@pytest.fixture
def db_path(tmp_path):
  return str(tmp_path / "shelter.db")


@pytest.fixture
def db(db_path):
  database = PetDatabase(db_path)
  database.open()
  yield database
  database.close()


@pytest.fixture
def notifier():
  hub = ChangeNotifier(max_workers=2)
  yield hub
  hub.close()


@pytest.fixture
def dal(db_path):
  store = DAL(db_path)
  store.init_database()
  yield store
  store.close()


@pytest.fixture
def toto():
  return {"name": "Toto", "breed": "Terrier", "gender": 1, "weight": 7}
