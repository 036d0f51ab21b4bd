"""
Data Access Layer (DAL)

Central API for all pet data operations. Callers address data by
resource identifier ("pets" or "pets/<id>") and never see the table.

Every request follows the same path:
  route -> validate (writes) -> store -> notify (writes that changed rows)

Design Principles:
- Invalid input is rejected before the store is touched
- Store failures surface as StoreError and are not retried
- Missing records are empty results, not errors
- Observers are told about changes without blocking the writer

Filters map field names to values and are ANDed. `id` and `_id` both
name the record id; on an item resource a filter can only narrow.

Usage:
  from dal import DAL

  dal = DAL("shelter.db")
  pet_id = dal.insert("pets", {"name": "Toto", "breed": "Terrier", "gender": 1, "weight": 7})
  pet = dal.get(f"pets/{pet_id}")
  dal.update(f"pets/{pet_id}", {"weight": 9})
"""
import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import router
from config import DB_PATH, DATABASE_VERSION, DUMMY_PET, NOTIFIER_MAX_WORKERS
from database import PetDatabase, QueryResult, Filter, SortOrder
from errors import UnsupportedResource
from notifications import ChangeNotifier, Observer, Registration
from schema import Pet, ChangeType, COLUMN_ID, PETS_TABLE
from validation import validate_insert, validate_update

logger = logging.getLogger(__name__)


class DAL:
  """
  Data Access Layer - The single gateway for all pet data.

  Responsibilities:
  - Resource routing
  - Field validation
  - CRUD against the pets table
  - Change notification
  """

  def __init__(
    self,
    db_path: str = DB_PATH,
    version: int = DATABASE_VERSION,
    notifier: Optional[ChangeNotifier] = None
  ):
    self.db = PetDatabase(db_path, version=version)
    self.notifier = notifier or ChangeNotifier(max_workers=NOTIFIER_MAX_WORKERS)

  def init_database(self):
    """Create or upgrade the backing table"""
    self.db.open()

  def close(self):
    self.notifier.close()
    self.db.close()

  def __enter__(self) -> "DAL":
    self.init_database()
    return self

  def __exit__(self, exc_type, exc, tb):
    self.close()

  # ============================================
  # Helpers
  # ============================================

  @staticmethod
  def _scoped_filter(resource: router.Resource, where: Filter) -> Optional[Dict[str, Any]]:
    """
    Narrow a caller filter to the routed resource.
    Returns None when the filter names a different id than the item,
    which matches nothing.
    """
    scoped = {PETS_TABLE.resolve(key): value for key, value in (where or {}).items()}
    if isinstance(resource, router.Item):
      if COLUMN_ID in scoped and scoped[COLUMN_ID] != resource.id:
        return None
      scoped[COLUMN_ID] = resource.id
    return scoped

  def _notify(self, resource: router.Resource, change_type: ChangeType, rows: int):
    self.notifier.notify_change(resource.uri, change_type, rows)

  # ============================================
  # Read Operations
  # ============================================

  def query(
    self,
    uri: str,
    where: Filter = None,
    sort: SortOrder = None,
    projection: Optional[Sequence[str]] = None
  ) -> QueryResult:
    """List pets at a collection or item resource"""
    resource = router.match(uri)
    scoped = self._scoped_filter(resource, where)
    if scoped is None:
      return QueryResult.empty(self.db)
    return self.db.query_all(scoped, sort=sort, projection=projection)

  def get(self, uri: str) -> Optional[Pet]:
    """Single pet by item resource, or None"""
    resource = router.match(uri)
    if not isinstance(resource, router.Item):
      raise UnsupportedResource(uri, "get")
    return self.db.query_by_id(resource.id)

  # ============================================
  # Write Operations
  # ============================================

  def insert(self, uri: str, values: Mapping[str, Any]) -> int:
    """Create a pet in the collection. Returns the new id."""
    resource = router.match(uri)
    if not isinstance(resource, router.Collection):
      raise UnsupportedResource(uri, "insert into")

    cleaned = validate_insert(values)
    pet_id = self.db.insert(cleaned)

    self._notify(resource, ChangeType.INSERT, 1)
    return pet_id

  def update(self, uri: str, values: Mapping[str, Any], where: Filter = None) -> int:
    """Overwrite the supplied fields. Returns rows affected."""
    resource = router.match(uri)
    cleaned = validate_update(values)
    if not cleaned:
      return 0

    scoped = self._scoped_filter(resource, where)
    if scoped is None:
      return 0

    rows = self.db.update(cleaned, scoped)
    self._notify(resource, ChangeType.UPDATE, rows)
    return rows

  def delete(self, uri: str, where: Filter = None) -> int:
    """Permanently remove pets. Returns rows deleted."""
    resource = router.match(uri)
    scoped = self._scoped_filter(resource, where)
    if scoped is None:
      return 0

    rows = self.db.delete(scoped)
    self._notify(resource, ChangeType.DELETE, rows)
    return rows

  # ============================================
  # Observers
  # ============================================

  def register_observer(
    self,
    uri: str,
    callback: Observer,
    notify_for_descendants: bool = True
  ) -> Registration:
    return self.notifier.register_observer(uri, callback, notify_for_descendants)

  def unregister_observer(self, registration: Registration) -> bool:
    return self.notifier.unregister_observer(registration)

  # ============================================
  # Convenience Methods
  # ============================================

  def insert_dummy_pet(self) -> int:
    """Insert the demonstration pet"""
    return self.insert(router.COLLECTION_URI, DUMMY_PET)

  def delete_all(self) -> int:
    """Delete every pet"""
    rows = self.delete(router.COLLECTION_URI)
    logger.info(f"🗑️ Deleted all pets ({rows})")
    return rows

  def list_pets(self, sort: SortOrder = COLUMN_ID) -> QueryResult:
    return self.query(router.COLLECTION_URI, sort=sort)

