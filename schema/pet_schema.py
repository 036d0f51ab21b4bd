"""
Pet Table Schema

The single source of truth for the shape of a pet record.
The store builds its DDL from PETS_TABLE and the validator
reads the same column list to know which fields it may check.

Columns:
- _id: store-assigned, never reused (AUTOINCREMENT)
- name: required text
- breed: optional text
- gender: one of Gender
- weight: non-negative integer, defaults to 0
"""
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, Tuple
from enum import IntEnum


class Gender(IntEnum):
  """Stored gender values"""
  UNKNOWN = 0
  MALE = 1
  FEMALE = 2

  @property
  def label(self) -> str:
    return self.name.capitalize()

  @classmethod
  def from_label(cls, value: str) -> "Gender":
    """Convert a display label or number to Gender, handling variations"""
    if value is None:
      return cls.UNKNOWN

    value_lower = str(value).lower().strip()

    if value_lower in ["male", "m", "1"]:
      return cls.MALE
    elif value_lower in ["female", "f", "2"]:
      return cls.FEMALE
    elif value_lower in ["unknown", "u", "0", ""]:
      return cls.UNKNOWN
    raise ValueError(f"Unknown gender label: {value!r}")

  @classmethod
  def is_valid(cls, value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value in VALID_GENDERS


VALID_GENDERS = frozenset(g.value for g in Gender)


@dataclass(frozen=True)
class Column:
  """One column of the pets table"""
  name: str
  sql_type: str
  nullable: bool = True
  default: Optional[Any] = None
  primary_key: bool = False

  def to_sql(self) -> str:
    if self.primary_key:
      return f"{self.name} {self.sql_type} PRIMARY KEY AUTOINCREMENT"
    sql = f"{self.name} {self.sql_type}"
    if not self.nullable:
      sql += " NOT NULL"
    if self.default is not None:
      sql += f" DEFAULT {self.default}"
    return sql


@dataclass(frozen=True)
class TableSchema:
  """Static description of a table: name plus ordered columns"""
  name: str
  columns: Tuple[Column, ...]

  @property
  def column_names(self) -> Tuple[str, ...]:
    return tuple(col.name for col in self.columns)

  @property
  def primary_key(self) -> str:
    return next(col.name for col in self.columns if col.primary_key)

  @property
  def writable_columns(self) -> Tuple[str, ...]:
    return tuple(col.name for col in self.columns if not col.primary_key)

  def resolve(self, name: str) -> str:
    """Column name for a field name (records expose the key as `id`)"""
    if name == "id":
      return self.primary_key
    return name

  def column(self, name: str) -> Column:
    for col in self.columns:
      if col.name == name:
        return col
    raise KeyError(name)

  def create_sql(self) -> str:
    body = ", ".join(col.to_sql() for col in self.columns)
    return f"CREATE TABLE IF NOT EXISTS {self.name} ({body})"

  def drop_sql(self) -> str:
    return f"DROP TABLE IF EXISTS {self.name}"


# Column names
COLUMN_ID = "_id"
COLUMN_PET_NAME = "name"
COLUMN_PET_BREED = "breed"
COLUMN_PET_GENDER = "gender"
COLUMN_PET_WEIGHT = "weight"

PETS_TABLE = TableSchema(
  name="pets",
  columns=(
    Column(COLUMN_ID, "INTEGER", nullable=False, primary_key=True),
    Column(COLUMN_PET_NAME, "TEXT", nullable=False),
    Column(COLUMN_PET_BREED, "TEXT"),
    Column(COLUMN_PET_GENDER, "INTEGER", nullable=False),
    Column(COLUMN_PET_WEIGHT, "INTEGER", nullable=False, default=0),
  ),
)


@dataclass
class Pet:
  """
  One pet record, returned by value from queries.

  Mutating a Pet never touches the store; writes go through
  the DAL with a field set.
  """
  id: Optional[int] = None
  name: Optional[str] = None
  breed: Optional[str] = None
  gender: Gender = Gender.UNKNOWN
  weight: int = 0

  def to_dict(self) -> Dict[str, Any]:
    """Convert to a dict keyed by field name"""
    result = asdict(self)
    result["gender"] = int(self.gender)
    return result

  def to_values(self) -> Dict[str, Any]:
    """Field set suitable for insert (no id)"""
    return {
      COLUMN_PET_NAME: self.name,
      COLUMN_PET_BREED: self.breed,
      COLUMN_PET_GENDER: int(self.gender),
      COLUMN_PET_WEIGHT: self.weight,
    }

  @classmethod
  def from_row(cls, row: Dict[str, Any]) -> "Pet":
    """Create Pet from a database row (any projection)"""
    kwargs = {}
    if COLUMN_ID in row:
      kwargs["id"] = row[COLUMN_ID]
    if COLUMN_PET_NAME in row:
      kwargs["name"] = row[COLUMN_PET_NAME]
    if COLUMN_PET_BREED in row:
      kwargs["breed"] = row[COLUMN_PET_BREED]
    if COLUMN_PET_GENDER in row and row[COLUMN_PET_GENDER] is not None:
      kwargs["gender"] = Gender(row[COLUMN_PET_GENDER])
    if COLUMN_PET_WEIGHT in row and row[COLUMN_PET_WEIGHT] is not None:
      kwargs["weight"] = row[COLUMN_PET_WEIGHT]
    return cls(**kwargs)
