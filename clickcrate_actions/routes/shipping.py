"""/shipping Blink: mint an NFT holding the wallet's encrypted shipping address."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, request

from clickcrate_actions.errors import ActionError
from clickcrate_actions.schemas import ShippingDetails
from clickcrate_actions.services import metaplex_service, solana_service
from clickcrate_actions.utils.actions import CREATOR_ICON, action_response, completed_action, inline_next, parameter
from clickcrate_actions.utils.crypto import encrypt_shipping_info

bp = Blueprint("shipping", __name__, url_prefix="/shipping")

SHIPPING_NFT_NAME = "ClickCrate Shipping Info"


@bp.get("")
def get_shipping_action():
    """Return the shipping details form."""
    body = {
        "type": "action",
        "icon": CREATOR_ICON,
        "label": "Shipping address",
        "title": "Enter your shipping address",
        "description": (
            "Create and mint an NFT that has your shipping info tied to it. "
            "This NFT can later be used to auto-fill your shipping info."
        ),
        "links": {
            "actions": [
                {
                    "type": "transaction",
                    "href": "/shipping/create-shipping-info-nft",
                    "label": "Shipping address",
                    "parameters": [
                        parameter("shippingName", "Full name", type_="text"),
                        parameter("shippingEmail", "Email", type_="email"),
                        parameter("shippingPhone", "Phone number", type_="text"),
                        parameter("shippingAddress", "Address", type_="text"),
                        parameter("shippingCity", "City", type_="text"),
                        parameter("shippingStateProvince", "State/Province", type_="text"),
                        parameter("shippingCountryRegion", "Country", type_="text"),
                        parameter("shippingZipCode", "Zip/Postal Code", type_="text"),
                    ],
                }
            ]
        },
    }
    return action_response(body)


@bp.post("/create-shipping-info-nft")
def create_shipping_info_nft():
    """Encrypt the shipping details to the wallet and return the mint transaction."""
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    try:
        owner = solana_service.parse_public_key(payload.get("account"))
    except ValueError:
        raise ActionError("Invalid account", 400) from None

    details = ShippingDetails.model_validate(payload.get("data") or {})
    encrypted = encrypt_shipping_info(bytes(owner), details.model_dump(by_alias=True))

    attributes = [
        {"key": "Type", "value": "Shipping Info"},
        {"key": "shippingInfo", "value": encrypted},
    ]
    uri = metaplex_service.store_metadata(
        metaplex_service.build_metadata(
            SHIPPING_NFT_NAME,
            "CCSHIP",
            "Encrypted shipping details for ClickCrate checkout autofill.",
            CREATOR_ICON,
            attributes,
            owner,
        )
    )
    transaction = solana_service.build_shipping_nft_transaction(owner, SHIPPING_NFT_NAME, uri, attributes)
    current_app.logger.info(f"Built shipping info NFT transaction for {owner}")

    body = {
        "type": "transaction",
        "transaction": transaction,
        "message": "Sign to mint your shipping info NFT.",
        "links": inline_next(
            completed_action(
                CREATOR_ICON,
                "Saved!",
                "Shipping info saved",
                "Your encrypted shipping info NFT has been minted to your wallet.",
            )
        ),
    }
    return action_response(body)
