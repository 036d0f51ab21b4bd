import sqlite3
import threading

import pytest

from database import PetDatabase, QueryResult
from errors import InvalidArgument, StoreError
from schema import Gender


def _insert(db, name, **fields):
  values = {"name": name, "gender": 0, "weight": 0}
  values.update(fields)
  return db.insert(values)


@pytest.mark.unit
class TestLifecycle:
  def test_open_creates_table_and_version(self, db_path):
    db = PetDatabase(db_path)
    db.open()
    assert db.get_version() == 1
    assert list(db.query_all()) == []
    db.close()

  def test_open_is_idempotent(self, db):
    assert db.open() is db.open()

  def test_reopen_keeps_rows(self, db_path):
    with PetDatabase(db_path) as db:
      _insert(db, "Rex")
    with PetDatabase(db_path) as db:
      assert [p.name for p in db.query_all()] == ["Rex"]

  def test_upgrade_drops_and_recreates(self, db_path):
    with PetDatabase(db_path, version=1) as db:
      _insert(db, "Rex")
      _insert(db, "Fido")

    with PetDatabase(db_path, version=2) as db:
      assert db.get_version() == 2
      assert len(db.query_all()) == 0
      # Table is usable again and ids restart with the fresh table
      assert _insert(db, "Milo") == 1

  def test_downgrade_refused(self, db_path):
    with PetDatabase(db_path, version=3):
      pass
    db = PetDatabase(db_path, version=1)
    with pytest.raises(StoreError, match="downgrade"):
      db.open()
    assert not db.is_open

  def test_closed_store_raises(self, db_path):
    db = PetDatabase(db_path)
    db.open()
    db.close()
    with pytest.raises(StoreError, match="closed"):
      db.query_all()

  def test_unopenable_path(self, tmp_path):
    db = PetDatabase(str(tmp_path / "missing" / "dir" / "shelter.db"))
    with pytest.raises(StoreError):
      db.open()

  def test_corrupt_file(self, tmp_path):
    path = tmp_path / "shelter.db"
    path.write_bytes(b"this is not a database" * 100)
    with pytest.raises(StoreError):
      PetDatabase(str(path)).open()


@pytest.mark.unit
class TestCrud:
  def test_insert_and_query_by_id(self, db):
    pet_id = db.insert({"name": "Toto", "breed": "Terrier", "gender": 1, "weight": 7})
    pet = db.query_by_id(pet_id)
    assert pet.id == pet_id
    assert pet.name == "Toto"
    assert pet.breed == "Terrier"
    assert pet.gender is Gender.MALE
    assert pet.weight == 7

  def test_weight_column_default(self, db):
    pet_id = db.insert({"name": "Rex", "gender": 0})
    assert db.query_by_id(pet_id).weight == 0

  def test_query_by_id_missing(self, db):
    assert db.query_by_id(99) is None

  def test_query_filter_and_sort(self, db):
    _insert(db, "Rex", gender=1, weight=20)
    _insert(db, "Bella", gender=2, weight=5)
    _insert(db, "Max", gender=1, weight=12)

    males = db.query_all({"gender": 1}, sort="weight DESC")
    assert [p.name for p in males] == ["Rex", "Max"]

    by_name = db.query_all(sort=["name", "_id desc"])
    assert [p.name for p in by_name] == ["Bella", "Max", "Rex"]

  def test_id_alias(self, db):
    first = _insert(db, "Rex")
    _insert(db, "Max")
    assert [p.name for p in db.query_all({"id": first})] == ["Rex"]
    assert [p.name for p in db.query_all(sort="id desc")] == ["Max", "Rex"]
    pet = db.query_by_id(first, projection=["id", "name"])
    assert (pet.id, pet.name) == (first, "Rex")

  def test_empty_result(self, db):
    _insert(db, "Rex")
    result = QueryResult.empty(db)
    assert len(result) == 0
    assert result.first() is None

  def test_query_null_filter(self, db):
    _insert(db, "Rex", breed=None)
    _insert(db, "Bella", breed="Pug")
    assert [p.name for p in db.query_all({"breed": None})] == ["Rex"]

  def test_projection(self, db):
    pet_id = _insert(db, "Rex", weight=20)
    pet = db.query_by_id(pet_id, projection=["_id", "name"])
    assert pet.name == "Rex"
    assert pet.weight == 0

  @pytest.mark.parametrize("kwargs", [
    {"where": {"age": 1}},
    {"sort": "age"},
    {"sort": "name sideways"},
    {"sort": "name asc extra"},
    {"projection": ["age"]},
  ])
  def test_unknown_columns_rejected(self, db, kwargs):
    with pytest.raises(InvalidArgument):
      db.query_all(**kwargs)

  def test_query_result_restartable(self, db):
    _insert(db, "Rex")
    result = db.query_all()
    assert [p.name for p in result] == ["Rex"]
    _insert(db, "Fido")
    # Same snapshot on the second pass
    assert [p.name for p in result] == ["Rex"]
    assert len(db.query_all()) == 2

  def test_query_is_lazy(self, db):
    result = db.query_all()
    _insert(db, "Rex")
    assert len(result) == 1

  def test_partial_update(self, db):
    pet_id = db.insert({"name": "Toto", "breed": "Terrier", "gender": 1, "weight": 7})
    assert db.update({"weight": 9}, {"_id": pet_id}) == 1
    pet = db.query_by_id(pet_id)
    assert pet.weight == 9
    assert (pet.name, pet.breed, pet.gender) == ("Toto", "Terrier", Gender.MALE)

  def test_update_no_match(self, db):
    assert db.update({"weight": 9}, {"_id": 5}) == 0

  def test_update_empty_values(self, db):
    _insert(db, "Rex")
    assert db.update({}) == 0

  def test_update_many(self, db):
    _insert(db, "Rex", gender=1)
    _insert(db, "Max", gender=1)
    _insert(db, "Bella", gender=2)
    assert db.update({"weight": 3}, {"gender": 1}) == 2

  def test_delete(self, db):
    pet_id = _insert(db, "Rex")
    assert db.delete({"_id": pet_id}) == 1
    assert db.query_by_id(pet_id) is None
    assert db.delete({"_id": pet_id}) == 0

  def test_delete_all(self, db):
    _insert(db, "Rex")
    _insert(db, "Max")
    assert db.delete() == 2
    assert len(db.query_all()) == 0

  def test_ids_never_reused(self, db):
    first = _insert(db, "Rex")
    second = _insert(db, "Max")
    db.delete({"_id": second})
    third = _insert(db, "Bella")
    assert third > second > first

  def test_constraint_failure_is_store_error(self, db):
    with pytest.raises(StoreError) as excinfo:
      db.insert({"breed": "Pug", "gender": 0})
    assert isinstance(excinfo.value.__cause__, sqlite3.IntegrityError)
    assert len(db.query_all()) == 0


@pytest.mark.unit
def test_concurrent_writers(db):
  errors = []

  def writer(n):
    try:
      for i in range(25):
        _insert(db, f"pet-{n}-{i}")
    except Exception as e:
      errors.append(e)

  threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
  for t in threads:
    t.start()
  for t in threads:
    t.join()

  assert errors == []
  ids = [p.id for p in db.query_all()]
  assert len(ids) == 100
  assert len(set(ids)) == 100
