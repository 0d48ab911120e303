"""Shared fixtures: a small catalog, an in-memory Mongo collection, an API client."""

from __future__ import annotations

import copy
from decimal import Decimal

import pytest
from bson import ObjectId

from voice2product.schemas.models import CatalogEntry
from voice2product.services import catalog_loader
from voice2product.services.catalog_index import build_index


GROCERY = [
    CatalogEntry(canonical_name="Tomato", unit="kg", price_per_unit=Decimal("20")),
    CatalogEntry(canonical_name="Onion", unit="kg", price_per_unit=Decimal("35")),
    CatalogEntry(canonical_name="Basmati Rice", unit="kg", price_per_unit=Decimal("110")),
    CatalogEntry(canonical_name="Green Chilli", unit="kg", price_per_unit=Decimal("80")),
    CatalogEntry(canonical_name="Coriander Leaves", unit="bunch", price_per_unit=Decimal("15")),
    CatalogEntry(canonical_name="Milk", unit="litre", price_per_unit=Decimal("56")),
    CatalogEntry(canonical_name="Eggs", unit="piece", price_per_unit=Decimal("7")),
]


@pytest.fixture
def grocery_index():
    return build_index(GROCERY)


@pytest.fixture
def loaded_catalog(grocery_index):
    """Install grocery_index as the process-wide catalog for the test."""
    previous = catalog_loader._index
    catalog_loader.swap_index(grocery_index)
    yield grocery_index
    catalog_loader.swap_index(previous)


class _InsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeCollection:
    """Just enough of pymongo.Collection for order_store."""

    def __init__(self):
        self.docs: list[dict] = []

    def insert_one(self, doc):
        doc.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(doc))
        return _InsertResult(doc["_id"])

    def _matches(self, doc, flt):
        return all(doc.get(k) == v for k, v in (flt or {}).items())

    def find(self, flt=None, projection=None):
        out = []
        for d in self.docs:
            if self._matches(d, flt):
                d = copy.deepcopy(d)
                for k, v in (projection or {}).items():
                    if v == 0:
                        d.pop(k, None)
                out.append(d)
        return out

    def find_one(self, flt=None, sort=None):
        docs = self.find(flt)
        if sort:
            key, direction = sort[0]
            docs.sort(key=lambda d: d[key], reverse=direction < 0)
        return docs[0] if docs else None

    def find_one_and_update(self, flt, update, return_document=None):
        for d in self.docs:
            if self._matches(d, flt):
                d.update(copy.deepcopy(update.get("$set", {})))
                for k, v in update.get("$push", {}).items():
                    d.setdefault(k, []).append(copy.deepcopy(v))
                return copy.deepcopy(d)
        return None


@pytest.fixture
def fake_db(monkeypatch):
    from voice2product.db import mongo

    colls = {"transcriptions": FakeCollection(), "orders": FakeCollection(), "products": FakeCollection()}
    for name, coll in colls.items():
        monkeypatch.setattr(mongo, name, coll)
    return colls


@pytest.fixture
def client(loaded_catalog, fake_db):
    from fastapi.testclient import TestClient

    from voice2product.main import app

    # no context manager: the lifespan would reload the catalog from disk
    return TestClient(app)
