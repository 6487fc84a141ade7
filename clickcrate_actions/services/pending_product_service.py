"""Pending product submissions, kept in memory and optionally mirrored to MongoDB."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from pymongo.errors import PyMongoError

from clickcrate_actions import database
from clickcrate_actions.storage import pending_products

_LOGGER = logging.getLogger(__name__)


def save_pending_product(product_id: str, record: Dict[str, Any]) -> str:
    """
    Store a product submission until its verification code is redeemed.

    Args:
        product_id: Temporary identifier handed back to the wallet
        record: Product fields plus the generated ``verification_code``

    Returns:
        The product id that was saved
    """
    pending_products[product_id] = dict(record, product_id=product_id)

    if database.mongodb_enabled():
        try:
            database.get_database().pending_products.update_one(
                {"product_id": product_id},
                {"$set": dict(record, product_id=product_id, saved_at=datetime.utcnow())},
                upsert=True,
            )
        except PyMongoError as e:
            _LOGGER.error(f"Failed to save pending product to MongoDB: {e}")

    return product_id


def get_pending_product(product_id: str) -> Optional[Dict[str, Any]]:
    """
    Look up a pending submission, preferring the in-memory copy.

    Args:
        product_id: Temporary identifier from the verify link

    Returns:
        The stored record or None
    """
    record = pending_products.get(product_id)
    if record is not None or not database.mongodb_enabled():
        return record

    try:
        document = database.get_database().pending_products.find_one(
            {"product_id": product_id}, {"_id": 0, "saved_at": 0}
        )
    except PyMongoError as e:
        _LOGGER.error(f"Failed to load pending product from MongoDB: {e}")
        return None

    if document:
        # Cache in memory for the rest of the flow
        pending_products[product_id] = document
    return document


def delete_pending_product(product_id: str) -> bool:
    """Remove a redeemed submission. Returns True if anything was removed."""
    removed = pending_products.pop(product_id, None) is not None

    if database.mongodb_enabled():
        try:
            result = database.get_database().pending_products.delete_one({"product_id": product_id})
            removed = removed or result.deleted_count > 0
        except PyMongoError as e:
            _LOGGER.error(f"Failed to delete pending product from MongoDB: {e}")

    return removed


def create_indexes() -> None:
    """Create the MongoDB indexes used by pending product lookups."""
    database.get_database().pending_products.create_index("product_id", unique=True)
