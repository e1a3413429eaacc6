"""Shared pytest fixtures for SADL tests."""

from pathlib import Path

import pytest

from sadl.core.model import Model
from sadl.core.parser import parse_string

CRUDL_SADL = """// A simple CRUDL service
name crudl
namespace "example.crudl"
version "1"

// Identifies an item
type ItemId String (pattern="^[a-z][a-z0-9]*$", maxsize=40)

type Currency Enum {
    USD
    EUR
}

// An item in the store
type Item Struct {
    id ItemId (required)
    name String (required, minsize=1)
    price UnitValue<Decimal,Currency>
    tags Array<String> (maxsize=10)
    count Int32 (min=0, default=1)
    modified Timestamp
}

type NotFound Struct {
    message String
}

type GetItemRequest Struct {
    id ItemId (required)
}

action getItem(GetItemRequest) Item except NotFound

http GET "/items/{id}" (operation=getItemHttp) {
    id ItemId
    expect 200 {
        item Item
        etag String (header="ETag")
    }
    except 404 NotFound
}

http POST "/items" (operation=createItem) {
    item Item
    expect 201 Item
}

example Item (name=minimal) {"id": "item1", "name": "Widget", "price": "12.50 USD"}
"""


@pytest.fixture
def crudl_source() -> str:
    """Return the source of a small, valid CRUDL service."""
    return CRUDL_SADL


@pytest.fixture
def crudl_model() -> Model:
    """Return the validated model of the CRUDL service."""
    return parse_string(CRUDL_SADL)


@pytest.fixture
def sadl_file(tmp_path: Path) -> Path:
    """Write the CRUDL service to a .sadl file and return its path."""
    path = tmp_path / "crudl.sadl"
    path.write_text(CRUDL_SADL, encoding="utf-8")
    return path
