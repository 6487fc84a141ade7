"""Tests for pending product persistence."""

from __future__ import annotations

from clickcrate_actions.services import pending_product_service
from clickcrate_actions.storage import pending_products


def _record(**overrides):
    record = {
        "product_type": "hat",
        "image_uri": "https://example.com/hat.png",
        "name": "Team Hat",
        "description": "",
        "quantity": 1,
        "unit_price": 0.25,
        "email": "creator@example.com",
        "account": "Creator111",
        "verification_code": "123456",
        "created_at": 1_700_000_000,
    }
    record.update(overrides)
    return record


def test_save_writes_memory_and_mongo(mongo_db):
    pending_product_service.save_pending_product("prod_a", _record())

    assert pending_products["prod_a"]["verification_code"] == "123456"
    stored = mongo_db.pending_products.find_one({"product_id": "prod_a"})
    assert stored["name"] == "Team Hat"
    assert "saved_at" in stored


def test_get_reloads_from_mongo_after_restart():
    pending_product_service.save_pending_product("prod_b", _record(name="Cap"))
    pending_products.clear()

    record = pending_product_service.get_pending_product("prod_b")

    assert record is not None
    assert record["name"] == "Cap"
    assert "_id" not in record
    assert "saved_at" not in record
    assert "prod_b" in pending_products


def test_get_unknown_returns_none():
    assert pending_product_service.get_pending_product("prod_missing") is None


def test_delete_removes_from_both_stores(mongo_db):
    pending_product_service.save_pending_product("prod_c", _record())

    assert pending_product_service.delete_pending_product("prod_c") is True
    assert "prod_c" not in pending_products
    assert mongo_db.pending_products.count_documents({"product_id": "prod_c"}) == 0
    assert pending_product_service.delete_pending_product("prod_c") is False


def test_memory_only_when_mongodb_disabled(monkeypatch, mongo_db):
    monkeypatch.setenv("ENABLE_MONGODB", "false")

    pending_product_service.save_pending_product("prod_d", _record())

    assert "prod_d" in pending_products
    assert mongo_db.pending_products.count_documents({}) == 0
    pending_products.clear()
    assert pending_product_service.get_pending_product("prod_d") is None
