"""
Error types raised by the pet store

NotFound has no exception: a missing record is an empty result
(None from a get, 0 rows from an update or delete).
"""


class PetStoreError(Exception):
  """Base class for all pet store failures"""


class InvalidArgument(PetStoreError, ValueError):
  """A field set was rejected before reaching the store"""


class UnsupportedResource(PetStoreError, ValueError):
  """A resource identifier could not be routed"""

  def __init__(self, uri, operation: str = "access"):
    self.uri = uri
    self.operation = operation
    super().__init__(f"Cannot {operation} unknown resource {uri!r}")


class StoreError(PetStoreError):
  """The underlying database failed. Never retried here."""
