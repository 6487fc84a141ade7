"""/merch Blink: buy a product placed in a ClickCrate POS."""

from __future__ import annotations

from typing import Any, Dict
from urllib.parse import urlencode

from flask import Blueprint, current_app, request
from pydantic import ValidationError

from clickcrate_actions.schemas import PurchaseDetails
from clickcrate_actions.services import clickcrate_api, metaplex_service, solana_service
from clickcrate_actions.utils.actions import (
    POS_PLACEHOLDER_ICON,
    action_response,
    completed_action,
    inline_next,
    parameter,
)
from clickcrate_actions.utils.conversions import find_attribute, lamports_to_sol, size_options

bp = Blueprint("merch", __name__, url_prefix="/merch")


def listing_icon(listing_asset: Dict[str, Any]) -> str:
    json_uri = listing_asset.get("content", {}).get("json_uri")
    if json_uri:
        try:
            image = metaplex_service.fetch_json(json_uri).get("image")
            if image:
                return image
        except Exception as e:
            current_app.logger.warning(f"Could not load listing metadata {json_uri}: {e}")
    return listing_asset.get("content", {}).get("links", {}).get("image") or POS_PLACEHOLDER_ICON


@bp.get("/<clickcrate_id>")
def get_merch_action(clickcrate_id: str):
    """Return the purchase Blink for the product placed in ``clickcrate_id``."""
    try:
        clickcrate_response = clickcrate_api.fetch_registered_clickcrate(clickcrate_id)
        if not clickcrate_response.ok:
            raise RuntimeError(f"ClickCrate lookup failed: {clickcrate_response.message()}")

        product_id = (clickcrate_response.data or {}).get("product")
        if not product_id:
            return action_response({"message": "Product not found in ClickCrate"}, 404)

        listing_asset = metaplex_service.fetch_das_asset(product_id)
        listing_response = clickcrate_api.fetch_registered_product_listing(product_id)
        listing = listing_response.data if listing_response.ok else None
        if not listing_asset or not listing:
            return action_response({"message": "Product info not found"}, 404)

        metadata = listing_asset.get("content", {}).get("metadata", {})
        name = metadata.get("name", "")
        description = metadata.get("description", "")
        icon = listing_icon(listing_asset)
        size_value = find_attribute(listing_asset, "Size(s)")

        try:
            in_stock = int(listing.get("inStock"))
        except (TypeError, ValueError):
            in_stock = None
        disabled = in_stock is None or in_stock < 1

        sale_price = lamports_to_sol(int(listing.get("price", 0)))
        usd_price = round(sale_price * solana_service.get_sol_usd_price(), 2)

        purchase_href = "/merch/purchase?" + urlencode(
            {"clickcrateId": clickcrate_id, "productName": name, "productIcon": icon}
        )
        body = {
            "type": "action",
            "icon": icon,
            "label": f"Purchase {name}",
            "title": name,
            "description": (
                f"IN STOCK: {listing.get('inStock')} | SIZE: {size_value or 'N/A'} | "
                f"PRICE: {sale_price} SOL (~${usd_price} USD) | DELIVERY: ~2 weeks\n"
                f"\n{description}\n"
                "\nOrder confirmations and updates will be sent to your provided email address. "
                "To avoid delays ensure all information is correct."
            ),
            "disabled": disabled,
            "links": {
                "actions": [
                    {
                        "type": "transaction",
                        "href": purchase_href,
                        "label": "Sold Out" if disabled else "Purchase",
                        "parameters": [
                            parameter("size", "Select a size", type_="select", options=size_options(size_value)),
                            parameter("buyerName", "First & Last name", type_="text"),
                            parameter("shippingEmail", "Email", type_="email"),
                            parameter("shippingAddress", "Address (including Apt., Suite, etc.)", type_="text"),
                            parameter("shippingCity", "City", type_="text"),
                            parameter("shippingStateProvince", "State/Province", type_="text"),
                            parameter("shippingCountryRegion", "Country/Region", type_="text"),
                            parameter("shippingZipCode", "ZIP code", type_="text"),
                        ],
                    }
                ]
            },
        }
        return action_response(body)
    except Exception as e:
        current_app.logger.error(f"Error in GET merch blink {clickcrate_id}: {e}")
        return action_response({"message": "Failed to get merch blink"}, 400)


@bp.post("/purchase")
def purchase():
    """Ask the merchant API for the buyer's purchase transaction."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    clickcrate_id = request.args.get("clickcrateId")
    product_name = request.args.get("productName")
    product_icon = request.args.get("productIcon")

    try:
        if not clickcrate_id or not product_name or not product_icon:
            raise ValueError("Missing required parameters")
        buyer = solana_service.parse_public_key(payload.get("account"))
        details = PurchaseDetails.model_validate(payload.get("data") or {})

        result = clickcrate_api.place_order(clickcrate_id, str(buyer), details)
        if not result.ok or not isinstance(result.data, dict) or not result.data.get("transaction"):
            raise RuntimeError(f"Purchase initiation failed: {result.message()}")
    except (ValueError, ValidationError, RuntimeError) as e:
        current_app.logger.error(f"Error in POST /merch/purchase: {e}")
        return action_response({"message": "Failed to purchase"}, 400)

    confirmation = (
        f"Your purchase of {product_name} is confirmed! "
        f"An order confirmation has been emailed to: {details.shipping_email}"
    )
    body = {
        "type": "transaction",
        "transaction": result.data["transaction"],
        "message": confirmation,
        "links": inline_next(completed_action(product_icon, "Purchase Complete", "Order Confirmed", confirmation)),
    }
    return action_response(body)
