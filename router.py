"""
Resource routing for pet identifiers

Callers address data by resource identifier, never by table:
  pets                                   -> Collection
  pets/<id>                              -> Item(id)
  content://com.example.android.pets/... -> same, in full form

Anything else raises UnsupportedResource and the operation stops.
"""
import logging
import re
from dataclasses import dataclass
from typing import Union

from config import CONTENT_AUTHORITY, CONTENT_SCHEME, PATH_PETS
from errors import UnsupportedResource

logger = logging.getLogger(__name__)

CONTENT_PREFIX = f"{CONTENT_SCHEME}://{CONTENT_AUTHORITY}/"
COLLECTION_URI = PATH_PETS

_ITEM_RE = re.compile(rf"{re.escape(PATH_PETS)}/([0-9]+)")


@dataclass(frozen=True)
class Collection:
  """All pets"""

  @property
  def uri(self) -> str:
    return COLLECTION_URI


@dataclass(frozen=True)
class Item:
  """One pet, by id"""
  id: int

  @property
  def uri(self) -> str:
    return item_uri(self.id)


Resource = Union[Collection, Item]


def item_uri(pet_id: int) -> str:
  """Canonical identifier for a single pet"""
  return f"{PATH_PETS}/{int(pet_id)}"


def match(uri: str) -> Resource:
  """Classify a resource identifier"""
  if not isinstance(uri, str):
    raise UnsupportedResource(uri)

  path = uri
  if path.startswith(CONTENT_PREFIX):
    path = path[len(CONTENT_PREFIX):]

  if path == PATH_PETS:
    logger.debug(f"Routed {uri!r} -> collection")
    return Collection()

  found = _ITEM_RE.fullmatch(path)
  if found:
    pet_id = int(found.group(1))
    logger.debug(f"Routed {uri!r} -> item {pet_id}")
    return Item(pet_id)

  raise UnsupportedResource(uri)


def canonical(uri: str) -> str:
  """Short form of any routable identifier"""
  return match(uri).uri
