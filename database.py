"""
SQLite storage for the pets table

Owns the single connection to the backing file and its versioned
lifecycle:
- First open creates the table and stamps the schema version
- An older version drops and recreates the table (data is lost)
- A newer version is refused

All statements run under one lock, so writes are serialized and
each write commits before returning.
"""
import sqlite3
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from config import DB_PATH, DATABASE_VERSION
from errors import InvalidArgument, StoreError
from schema import Pet, TableSchema, PETS_TABLE

logger = logging.getLogger(__name__)

Filter = Optional[Mapping[str, Any]]
SortOrder = Optional[Union[str, Sequence[str]]]


class QueryResult:
  """
  Rows matching a query, fetched on first iteration.

  Iterating again replays the same snapshot rather than
  running the query a second time.
  """

  def __init__(self, database: "PetDatabase", sql: str, params: Tuple):
    self._database = database
    self._sql = sql
    self._params = params
    self._rows: Optional[List[Pet]] = None

  def _load(self) -> List[Pet]:
    if self._rows is None:
      self._rows = [Pet.from_row(row) for row in self._database.fetch_all(self._sql, self._params)]
    return self._rows

  def __iter__(self) -> Iterator[Pet]:
    return iter(self._load())

  def __len__(self) -> int:
    return len(self._load())

  def __bool__(self) -> bool:
    return bool(self._load())

  @classmethod
  def empty(cls, database: "PetDatabase") -> "QueryResult":
    """A result known to match nothing, without touching the table"""
    result = cls(database, "", ())
    result._rows = []
    return result

  def first(self) -> Optional[Pet]:
    rows = self._load()
    return rows[0] if rows else None


class PetDatabase:
  """
  Record store for a single table.

  Usage:
    db = PetDatabase("shelter.db")
    db.open()
    pet_id = db.insert({"name": "Toto", "gender": 1, "weight": 7})
    db.query_by_id(pet_id)
  """

  def __init__(
    self,
    db_path: str = DB_PATH,
    version: int = DATABASE_VERSION,
    table: TableSchema = PETS_TABLE
  ):
    self.db_path = db_path
    self.version = version
    self.table = table
    self._lock = threading.RLock()
    self._conn: Optional[sqlite3.Connection] = None
    self._closed = False

  # ============================================
  # Connection Management
  # ============================================

  def open(self) -> sqlite3.Connection:
    """Open (creating or upgrading as needed) and return the handle"""
    with self._lock:
      if self._conn is not None:
        return self._conn
      if self._closed:
        raise StoreError("Database is closed")

      try:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
      except sqlite3.Error as e:
        logger.error(f"❌ Cannot open {self.db_path}: {e}")
        raise StoreError(f"Cannot open database {self.db_path}") from e

      try:
        self._prepare(conn)
      except Exception:
        conn.close()
        raise

      self._conn = conn
      return conn

  def _prepare(self, conn: sqlite3.Connection):
    """Bring the on-disk schema to the current version"""
    try:
      existing_version = conn.execute("PRAGMA user_version").fetchone()[0]

      if existing_version == self.version:
        return
      if existing_version > self.version:
        raise StoreError(
          f"Can't downgrade database from version {existing_version} to {self.version}"
        )

      with conn:
        conn.execute("BEGIN")
        if existing_version == 0:
          self._on_create(conn)
        else:
          self._on_upgrade(conn, existing_version, self.version)
        conn.execute(f"PRAGMA user_version = {int(self.version)}")
    except sqlite3.Error as e:
      logger.error(f"❌ Database bootstrap failed for {self.db_path}: {e}")
      raise StoreError("Failed during database bootstrap") from e

  def _on_create(self, conn: sqlite3.Connection):
    conn.execute(self.table.create_sql())
    logger.info(f"✅ Database initialized ({self.table.name} v{self.version})")

  def _on_upgrade(self, conn: sqlite3.Connection, old_version: int, new_version: int):
    # Lossy: no migration path, existing rows are discarded
    logger.warning(
      f"⚠️ Upgrading {self.table.name} v{old_version} -> v{new_version}: dropping all rows"
    )
    conn.execute(self.table.drop_sql())
    conn.execute(self.table.create_sql())

  def close(self):
    with self._lock:
      if self._conn is not None:
        self._conn.close()
        self._conn = None
      self._closed = True

  @property
  def is_open(self) -> bool:
    return self._conn is not None

  def get_version(self) -> int:
    with self._lock:
      return self._connection().execute("PRAGMA user_version").fetchone()[0]

  def _connection(self) -> sqlite3.Connection:
    if self._conn is None:
      raise StoreError("Database is closed")
    return self._conn

  @contextmanager
  def _transaction(self):
    """Serialized write transaction with automatic commit/rollback"""
    with self._lock:
      conn = self._connection()
      try:
        yield conn
        conn.commit()
      except sqlite3.Error as e:
        conn.rollback()
        logger.error(f"❌ Write to {self.table.name} failed: {e}")
        raise StoreError(str(e)) from e
      except Exception:
        conn.rollback()
        raise

  def fetch_all(self, sql: str, params: Tuple = ()) -> List[Dict]:
    with self._lock:
      try:
        logger.debug(f"Query: {sql} {params}")
        rows = self._connection().execute(sql, params).fetchall()
      except sqlite3.Error as e:
        logger.error(f"❌ Query on {self.table.name} failed: {e}")
        raise StoreError(str(e)) from e
      return [dict(row) for row in rows]

  # ============================================
  # Statement Building
  # ============================================

  def _check_column(self, column: str) -> str:
    column = self.table.resolve(column)
    if column not in self.table.column_names:
      raise InvalidArgument(f"unknown field: {column}")
    return column

  def _where(self, where: Filter) -> Tuple[str, Tuple]:
    if not where:
      return "", ()
    clauses = []
    params = []
    for field_name, value in where.items():
      column = self._check_column(field_name)
      if value is None:
        clauses.append(f"{column} IS NULL")
      else:
        clauses.append(f"{column} = ?")
        params.append(value)
    return " WHERE " + " AND ".join(clauses), tuple(params)

  def _order_by(self, sort: SortOrder) -> str:
    if not sort:
      return ""
    terms = [sort] if isinstance(sort, str) else list(sort)
    parts = []
    for term in terms:
      pieces = term.split()
      if len(pieces) not in (1, 2):
        raise InvalidArgument(f"invalid sort: {term}")
      column = self._check_column(pieces[0])
      direction = pieces[1].upper() if len(pieces) == 2 else "ASC"
      if direction not in ("ASC", "DESC"):
        raise InvalidArgument(f"invalid sort: {term}")
      parts.append(f"{column} {direction}")
    return " ORDER BY " + ", ".join(parts)

  def _select(self, projection: Optional[Sequence[str]]) -> str:
    if not projection:
      return "*"
    return ", ".join(self._check_column(col) for col in projection)

  # ============================================
  # Table Operations
  # ============================================

  def query_all(
    self,
    where: Filter = None,
    sort: SortOrder = None,
    projection: Optional[Sequence[str]] = None
  ) -> QueryResult:
    """Records matching where (all rows when omitted)"""
    self.open()
    where_sql, params = self._where(where)
    sql = f"SELECT {self._select(projection)} FROM {self.table.name}{where_sql}{self._order_by(sort)}"
    return QueryResult(self, sql, params)

  def query_by_id(self, pet_id: int, projection: Optional[Sequence[str]] = None) -> Optional[Pet]:
    """Single record, or None when no row matches"""
    return self.query_all({self.table.primary_key: pet_id}, projection=projection).first()

  def insert(self, values: Mapping[str, Any]) -> int:
    """Insert pre-validated values and return the new id"""
    self.open()
    columns = [self._check_column(col) for col in values]
    placeholders = ", ".join("?" * len(columns))
    sql = f"INSERT INTO {self.table.name} ({', '.join(columns)}) VALUES ({placeholders})"

    with self._transaction() as conn:
      cursor = conn.execute(sql, tuple(values.values()))
      pet_id = cursor.lastrowid

    logger.info(f"🆕 Inserted {self.table.name} row {pet_id}")
    return pet_id

  def update(self, values: Mapping[str, Any], where: Filter = None) -> int:
    """Overwrite only the supplied columns. Returns rows affected."""
    if not values:
      return 0
    self.open()
    set_clause = ", ".join(f"{self._check_column(col)} = ?" for col in values)
    where_sql, where_params = self._where(where)
    sql = f"UPDATE {self.table.name} SET {set_clause}{where_sql}"

    with self._transaction() as conn:
      rows = conn.execute(sql, tuple(values.values()) + where_params).rowcount

    logger.info(f"📝 Updated {rows} {self.table.name} row(s)")
    return rows

  def delete(self, where: Filter = None) -> int:
    """Permanently remove matching rows. Returns rows deleted."""
    self.open()
    where_sql, params = self._where(where)
    sql = f"DELETE FROM {self.table.name}{where_sql}"

    with self._transaction() as conn:
      rows = conn.execute(sql, params).rowcount

    logger.info(f"🗑️ Deleted {rows} {self.table.name} row(s)")
    return rows

  def __enter__(self) -> "PetDatabase":
    self.open()
    return self

  def __exit__(self, exc_type, exc, tb):
    self.close()
