"""
Schema Package

Contains the table definition and record types for the pet store.

Modules:
- pet_schema: Pets table description, Pet record and Gender enum
- events: Change events published after writes
"""

from .pet_schema import (
  Pet,
  Gender,
  Column,
  TableSchema,
  PETS_TABLE,
  VALID_GENDERS,
  COLUMN_ID,
  COLUMN_PET_NAME,
  COLUMN_PET_BREED,
  COLUMN_PET_GENDER,
  COLUMN_PET_WEIGHT,
)

from .events import (
  ChangeEvent,
  ChangeType,
  create_change_event,
)

__all__ = [
  # Pet schema
  'Pet',
  'Gender',
  'Column',
  'TableSchema',
  'PETS_TABLE',
  'VALID_GENDERS',
  'COLUMN_ID',
  'COLUMN_PET_NAME',
  'COLUMN_PET_BREED',
  'COLUMN_PET_GENDER',
  'COLUMN_PET_WEIGHT',

  # Events
  'ChangeEvent',
  'ChangeType',
  'create_change_event',
]
