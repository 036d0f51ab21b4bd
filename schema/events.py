"""
Change Events

What observers receive when a write changed at least one row.
Events are immutable once created and carry the resource
identifier the write was addressed to.

Change Types:
- insert: a record was created
- update: one or more records were modified
- delete: one or more records were removed
"""
from dataclasses import dataclass, asdict
from typing import Dict
from datetime import datetime
from enum import Enum


class ChangeType(str, Enum):
  """Kinds of write that produce a notification"""
  INSERT = "insert"
  UPDATE = "update"
  DELETE = "delete"


@dataclass(frozen=True)
class ChangeEvent:
  """A single change notification"""
  uri: str                   # Resource the write was addressed to
  change_type: str           # ChangeType value
  rows_affected: int
  timestamp: str             # ISO format timestamp

  def to_dict(self) -> Dict:
    return asdict(self)

  @property
  def summary(self) -> str:
    return f"{self.change_type} {self.uri} ({self.rows_affected} row(s))"


def get_timestamp() -> str:
  """Get current timestamp in ISO format"""
  return datetime.now().isoformat()


def create_change_event(uri: str, change_type: ChangeType, rows_affected: int) -> ChangeEvent:
  """Create the event published after a successful write"""
  return ChangeEvent(
    uri=uri,
    change_type=ChangeType(change_type).value,
    rows_affected=rows_affected,
    timestamp=get_timestamp(),
  )
