"""
Field validation for pet writes

Pure functions; nothing here touches the database. Every write
passes through one of these before the store sees it, so invalid
input never causes a mutation.

Insert: name required, gender/weight defaulted when absent.
Update: only the supplied fields are checked (partial update).
"""
from typing import Dict, Any, Mapping

from errors import InvalidArgument
from schema import (
  Gender, PETS_TABLE,
  COLUMN_ID, COLUMN_PET_NAME, COLUMN_PET_BREED,
  COLUMN_PET_GENDER, COLUMN_PET_WEIGHT,
)


def _is_int(value: Any) -> bool:
  return isinstance(value, int) and not isinstance(value, bool)


def _check_known_fields(values: Mapping[str, Any]):
  for key in values:
    if key == COLUMN_ID or key == "id":
      raise InvalidArgument("id is immutable")
    if key not in PETS_TABLE.writable_columns:
      raise InvalidArgument(f"unknown field: {key}")


def _check_name(name: Any):
  if name is None:
    raise InvalidArgument("name required")
  if not isinstance(name, str):
    raise InvalidArgument("name must be a string")
  if not name.strip():
    raise InvalidArgument("name required")


def _check_breed(breed: Any):
  if breed is not None and not isinstance(breed, str):
    raise InvalidArgument("breed must be a string")


def _check_gender(gender: Any):
  if not _is_int(gender):
    raise InvalidArgument("gender must be an integer")
  if not Gender.is_valid(gender):
    raise InvalidArgument("invalid gender")


def _check_weight(weight: Any):
  if not _is_int(weight):
    raise InvalidArgument("weight must be an integer")
  if weight < 0:
    raise InvalidArgument("negative weight")


def _check_present(values: Mapping[str, Any]):
  """Value checks for whichever fields are present"""
  if COLUMN_PET_NAME in values:
    _check_name(values[COLUMN_PET_NAME])
  if COLUMN_PET_BREED in values:
    _check_breed(values[COLUMN_PET_BREED])
  if COLUMN_PET_GENDER in values:
    _check_gender(values[COLUMN_PET_GENDER])
  if COLUMN_PET_WEIGHT in values:
    _check_weight(values[COLUMN_PET_WEIGHT])


def validate_insert(values: Mapping[str, Any]) -> Dict[str, Any]:
  """
  Validate a field set for insert.
  Returns a new dict with defaults applied (gender UNKNOWN, weight 0).
  """
  if values is None:
    raise InvalidArgument("name required")

  _check_known_fields(values)

  if COLUMN_PET_NAME not in values:
    raise InvalidArgument("name required")

  cleaned = dict(values)
  # Absent or null optional fields fall back to their defaults
  if cleaned.get(COLUMN_PET_GENDER) is None:
    cleaned[COLUMN_PET_GENDER] = Gender.UNKNOWN
  if cleaned.get(COLUMN_PET_WEIGHT) is None:
    cleaned[COLUMN_PET_WEIGHT] = 0

  _check_present(cleaned)

  cleaned[COLUMN_PET_GENDER] = int(cleaned[COLUMN_PET_GENDER])
  return cleaned


def validate_update(values: Mapping[str, Any]) -> Dict[str, Any]:
  """
  Validate a partial field set for update.
  An empty set is valid and means "no change".
  """
  if not values:
    return {}

  _check_known_fields(values)
  _check_present(values)

  cleaned = dict(values)
  if COLUMN_PET_GENDER in cleaned:
    cleaned[COLUMN_PET_GENDER] = int(cleaned[COLUMN_PET_GENDER])
  return cleaned
