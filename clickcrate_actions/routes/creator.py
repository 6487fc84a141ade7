"""/creator Blink: create a product, verify the creator's email, place it for sale."""

from __future__ import annotations

from typing import Any, Dict
from urllib.parse import urlencode

from flask import Blueprint, current_app, request

from clickcrate_actions.errors import ActionError
from clickcrate_actions.schemas import PRODUCT_TYPES, ProductInfo, find_product_type
from clickcrate_actions.services import clickcrate_api, email_service, pending_product_service, solana_service
from clickcrate_actions.utils.actions import (
    CREATOR_ICON,
    action_response,
    completed_action,
    inline_next,
    parameter,
)
from clickcrate_actions.utils.codes import codes_match, generate_token, generate_verification_code, now_seconds
from clickcrate_actions.utils.conversions import placement_type_value, product_category_value, sol_to_lamports

bp = Blueprint("creator", __name__, url_prefix="/creator")

TITLE = "ClickCrate Merch Creator"


def _request_account() -> str:
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    account = payload.get("account")
    try:
        solana_service.parse_public_key(account)
    except ValueError:
        raise ActionError("Invalid account", 400) from None
    return account.strip()


def _request_data() -> Dict[str, Any]:
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    data = payload.get("data")
    return data if isinstance(data, dict) else {}


def _require_ok(response: clickcrate_api.ApiResponse, step: str) -> None:
    if not response.ok:
        current_app.logger.error(f"Failed to {step}: {response.data}")
        raise ActionError(f"Failed to {step}: {response.message()}", 500)


@bp.get("")
def get_creator_action():
    """Return the product creation form."""
    body = {
        "icon": CREATOR_ICON,
        "label": "CREATE",
        "type": "action",
        "title": TITLE,
        "description": (
            "Start selling your own branded merch directly on Twitter in just a few clicks "
            "using blinks! To get started simply select a product to create below:"
        ),
        "links": {
            "actions": [
                {
                    "type": "post",
                    "href": "/creator/create-product",
                    "label": "CREATE",
                    "parameters": [
                        parameter(
                            "type",
                            "Select a product",
                            type_="select",
                            options=[{"label": pt["label"], "value": pt["value"]} for pt in PRODUCT_TYPES],
                        ),
                        parameter("imageUri", "Product Image URL", type_="url"),
                        parameter("name", "Product Name", type_="text"),
                        parameter("description", "Product Description", type_="textarea"),
                        parameter(
                            "quantity",
                            "Quantity (1-3)",
                            type_="select",
                            options=[{"label": str(n), "value": str(n)} for n in range(1, 4)],
                        ),
                        parameter("unitPrice", "Unit Price (in SOL)", type_="number"),
                        parameter("email", "Email", type_="email"),
                    ],
                }
            ]
        },
    }
    return action_response(body)


@bp.post("/create-product")
def create_product():
    """Validate a product submission, hold it and email a verification code."""
    account = _request_account()
    product = ProductInfo.model_validate(_request_data())

    product_id = generate_token("prod")
    verification_code = generate_verification_code()
    pending_product_service.save_pending_product(
        product_id,
        {
            "product_type": product.type,
            "image_uri": str(product.image_uri),
            "name": product.name,
            "description": product.description,
            "quantity": product.quantity,
            "unit_price": product.unit_price,
            "email": product.email,
            "account": account,
            "verification_code": verification_code,
            "created_at": now_seconds(),
        },
    )
    current_app.logger.info(f"Stored pending product {product_id} for {account}")

    email_service.send_verification_email(product.email, verification_code)

    verify_href = "/creator/verify-and-place?" + urlencode({"id": product_id})
    body = {
        "type": "post",
        "message": "Please check your email for the verification code.",
        "links": inline_next(
            {
                "type": "action",
                "icon": CREATOR_ICON,
                "label": "Verify Email",
                "title": "Enter Verification Code",
                "description": f"Please enter the 6-digit code sent to: {product.email}",
                "links": {
                    "actions": [
                        {
                            "type": "post",
                            "href": verify_href,
                            "label": "Verify and Place Product",
                            "parameters": [
                                parameter("code", "6-digit Verification Code", type_="text"),
                            ],
                        }
                    ]
                },
            }
        ),
    }
    return action_response(body)


@bp.post("/verify-and-place")
def verify_and_place():
    """Redeem the emailed code, mint the product NFTs and list them for sale."""
    product_id = request.args.get("id", "").strip()
    code = str(_request_data().get("code") or "").strip()
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if not product_id or not code or not payload.get("account"):
        raise ActionError("Missing required parameters", 400)

    account = _request_account()
    record = pending_product_service.get_pending_product(product_id)
    if record is None:
        raise ActionError("Product submission not found", 404)
    if record["account"] != account:
        raise ActionError("Account does not match the product submission", 403)
    if not codes_match(record["verification_code"], code):
        raise ActionError("Invalid verification code", 400)

    product_type = find_product_type(record["product_type"])
    category = product_type["category"] if product_type else "Clothing"
    creator = solana_service.parse_public_key(account)
    try:
        plan = solana_service.prepare_products(record, creator, category)
    except ValueError as e:
        raise ActionError(f"Failed to prepare product metadata: {e}", 400) from e

    pending_product_service.delete_pending_product(product_id)
    current_app.logger.info(f"Verified product {product_id} for {account}")

    minted = solana_service.create_products(plan, creator)

    pos_id = minted["pos_address"]
    listing_id = minted["listing_address"]
    price = sol_to_lamports(record["unit_price"])

    _require_ok(
        clickcrate_api.register_clickcrate(
            pos_id, placement_type_value("Digitalreplica"), product_category_value(category), account
        ),
        "register ClickCrate",
    )
    _require_ok(clickcrate_api.activate_clickcrate(pos_id), "activate ClickCrate")
    _require_ok(
        clickcrate_api.register_product_listing(
            listing_id,
            "clickcrate",
            placement_type_value("Relatedpurchase"),
            product_category_value(category),
            account,
            price,
            "clickcrate",
        ),
        "register listing",
    )
    _require_ok(clickcrate_api.activate_product_listing(listing_id), "activate listing")
    _require_ok(clickcrate_api.place_product_listing(listing_id, pos_id, price), "place products")

    blink_url = clickcrate_api.generate_blink_url(pos_id)
    transaction = solana_service.relay_payment_transaction(minted["total_cost"], creator)

    body = {
        "type": "transaction",
        "transaction": transaction,
        "message": "Product creation completed successfully!",
        "links": inline_next(
            completed_action(
                CREATOR_ICON,
                "Created!",
                TITLE,
                f"Your product is ready for sale! Share this Blink URL to start selling: {blink_url}",
            )
        ),
    }
    return action_response(body)
