"""/storefront Blink: several ClickCrate POS combined into one shop."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from flask import Blueprint, current_app, request
from pydantic import ValidationError

from clickcrate_actions.routes.merch import listing_icon
from clickcrate_actions.schemas import StorefrontOrder
from clickcrate_actions.services import clickcrate_api, metaplex_service, solana_service
from clickcrate_actions.utils.actions import (
    STOREFRONT_ICON,
    action_response,
    completed_action,
    inline_next,
    parameter,
)
from clickcrate_actions.utils.conversions import find_attribute, lamports_to_sol, size_options

bp = Blueprint("storefront", __name__, url_prefix="/storefront")

MAX_POS = 6
STOREFRONT_FEE_LAMPORTS = 1_000_000  # 0.001 SOL

ORDER_FIELDS = [
    ("buyerName", "Name & Last Name", "text"),
    ("shippingEmail", "Email", "email"),
    ("shippingAddress", "Address (Including Apt, Suite etc)", "text"),
    ("shippingCity", "City", "text"),
    ("shippingStateProvince", "State/Province", "text"),
    ("shippingCountryRegion", "Country/Region", "text"),
    ("shippingZipCode", "Zip Code", "text"),
]


def _pos_ids() -> List[str]:
    keys = sorted(key for key in request.args if key.startswith("pos"))
    return [value for value in (request.args.get(key, "").strip() for key in keys) if value]


def _product_action(pos_id: str) -> Optional[Dict[str, Any]]:
    """Build the linked action for the product placed in ``pos_id``."""
    clickcrate = clickcrate_api.fetch_registered_clickcrate(pos_id)
    product_id = (clickcrate.data or {}).get("product") if clickcrate.ok else None
    if not product_id:
        current_app.logger.warning(f"Skipping POS {pos_id}: no product placed")
        return None

    listing_asset = metaplex_service.fetch_das_asset(product_id)
    listing_response = clickcrate_api.fetch_registered_product_listing(product_id)
    listing = listing_response.data if listing_response.ok else {}
    name = listing_asset.get("content", {}).get("metadata", {}).get("name") or product_id
    price = lamports_to_sol(int(listing.get("price", 0)))

    query = {"clickcrateId": pos_id, "icon": listing_icon(listing_asset)}
    sizes = find_attribute(listing_asset, "Size(s)")
    if sizes:
        query["sizes"] = str(sizes)
    return {
        "type": "transaction",
        "label": f"{name} ({price} SOL)",
        "href": f"/storefront/input/{product_id}?" + urlencode(query),
    }


@bp.get("")
def get_storefront_action():
    """Return one Blink listing the products of up to six POS."""
    pos_ids = _pos_ids()
    if len(pos_ids) > MAX_POS:
        return action_response({"message": f"Too many POS values. Maximum allowed is {MAX_POS}."}, 400)

    try:
        actions = [action for action in (_product_action(pos_id) for pos_id in pos_ids) if action]
    except Exception as e:
        current_app.logger.error(f"Error fetching storefront actions: {e}")
        return action_response({"message": "Internal server error"}, 500)

    body = {
        "type": "action",
        "icon": STOREFRONT_ICON,
        "label": "Choose a product",
        "title": "ClickCrate Storefront",
        "description": "Collection of physical ClickCrate products for sale! Select a product to purchase below:",
        "links": {"actions": actions},
    }
    return action_response(body)


@bp.post("/input/<product_id>")
def product_input(product_id: str):
    """Charge the storefront fee and ask for the buyer's delivery details."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    clickcrate_id = request.args.get("clickcrateId")
    icon = request.args.get("icon") or STOREFRONT_ICON

    try:
        if not clickcrate_id:
            raise ValueError("Missing clickcrateId")
        buyer = solana_service.parse_public_key(payload.get("account"))
        transaction = solana_service.relay_payment_transaction(STOREFRONT_FEE_LAMPORTS, buyer)
    except (ValueError, RuntimeError) as e:
        current_app.logger.error(f"Error in POST /storefront/input/{product_id}: {e}")
        return action_response({"message": "Invalid data"}, 400)

    parameters = [parameter(name, label, type_=type_) for name, label, type_ in ORDER_FIELDS]
    options = size_options(request.args.get("sizes"))
    if options:
        parameters.insert(0, parameter("size", "Select a size", type_="select", options=options))

    body = {
        "type": "transaction",
        "transaction": transaction,
        "message": "This blink allows you to purchase",
        "links": inline_next(
            {
                "type": "action",
                "icon": icon,
                "label": "Buy product",
                "title": "Buy the specific product",
                "description": "Buy the product from this blink",
                "links": {
                    "actions": [
                        {
                            "type": "post",
                            "href": f"/storefront/purchase/{clickcrate_id}",
                            "label": "Place order",
                            "parameters": parameters,
                        }
                    ]
                },
            }
        ),
    }
    return action_response(body)


@bp.post("/purchase/<clickcrate_id>")
def purchase(clickcrate_id: str):
    """Place the order for the product in ``clickcrate_id``."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    try:
        buyer = solana_service.parse_public_key(payload.get("account"))
        order = StorefrontOrder.model_validate(payload.get("data") or {})
        result = clickcrate_api.place_order(clickcrate_id, str(buyer), order)
        if not result.ok or not isinstance(result.data, dict) or not result.data.get("transaction"):
            raise RuntimeError(f"Purchase initiation failed: {result.message()}")
    except (ValueError, ValidationError, RuntimeError) as e:
        current_app.logger.error(f"Error in POST /storefront/purchase/{clickcrate_id}: {e}")
        return action_response({"message": "Failed to process purchase"}, 400)

    body = {
        "type": "transaction",
        "transaction": result.data["transaction"],
        "message": result.data.get("message") or "Your order has been successfully placed.",
        "links": inline_next(
            completed_action(
                STOREFRONT_ICON,
                "Purchase Complete",
                "Thank you for your purchase!",
                f"Your order has been successfully placed. Updates will be sent to {order.shipping_email}.",
            )
        ),
    }
    return action_response(body)
