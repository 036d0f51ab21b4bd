import pytest

import router
from errors import UnsupportedResource


@pytest.mark.unit
class TestMatch:
  def test_collection(self):
    assert router.match("pets") == router.Collection()

  def test_item(self):
    assert router.match("pets/42") == router.Item(42)

  def test_full_content_form(self):
    assert router.match("content://com.example.android.pets/pets") == router.Collection()
    assert router.match("content://com.example.android.pets/pets/7") == router.Item(7)

  @pytest.mark.parametrize("uri", [
    "",
    "dogs",
    "pets/",
    "pets/abc",
    "pets/-1",
    "pets/1/2",
    "/pets",
    "content://other.authority/pets",
    None,
    5,
  ])
  def test_unsupported(self, uri):
    with pytest.raises(UnsupportedResource):
      router.match(uri)

  def test_unsupported_is_value_error(self):
    with pytest.raises(ValueError, match="unknown resource"):
      router.match("owners")


@pytest.mark.unit
def test_item_uri_round_trip():
  assert router.item_uri(3) == "pets/3"
  assert router.match(router.item_uri(3)).id == 3
  assert router.Item(3).uri == "pets/3"
  assert router.Collection().uri == router.COLLECTION_URI == "pets"


@pytest.mark.unit
def test_canonical():
  assert router.canonical("content://com.example.android.pets/pets/9") == "pets/9"
  assert router.canonical("pets/007") == "pets/7"
