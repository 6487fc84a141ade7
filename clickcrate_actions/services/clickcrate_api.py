"""Client for the ClickCrate merchant REST API."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

_LOGGER = logging.getLogger(__name__)

BLINK_BASE_URL = "https://api.clickcrate.xyz/blink"
REQUEST_TIMEOUT_SECONDS = 30

_session: Optional[requests.Session] = None


@dataclass
class ApiResponse:
    """Status code and decoded body of a merchant API call."""

    status: int
    data: Any

    @property
    def ok(self) -> bool:
        return self.status == 200

    def message(self) -> str:
        if isinstance(self.data, dict) and self.data.get("message"):
            return str(self.data["message"])
        return str(self.data)


def get_session() -> requests.Session:
    """Get or create the authenticated HTTP session."""
    global _session
    if _session is None:
        _session = requests.Session()
        _session.headers.update(
            {
                "Authorization": f"Bearer {os.getenv('CLICKCRATE_API_KEY', '')}",
                "Content-Type": "application/json",
            }
        )
    return _session


def _url(path: str) -> str:
    base_url = os.getenv("CLICKCRATE_API_URL")
    if not base_url:
        raise RuntimeError("CLICKCRATE_API_URL environment variable is not set")
    return f"{base_url.rstrip('/')}{path}"


def _request(method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> ApiResponse:
    """Call the merchant API, returning error responses instead of raising them."""
    try:
        response = get_session().request(method, _url(path), json=payload, timeout=REQUEST_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        _LOGGER.error("ClickCrate API %s %s failed: %s", method, path, e)
        return ApiResponse(status=500, data={"message": str(e) or "Unknown error occurred"})

    try:
        data = response.json()
    except ValueError:
        data = {"message": response.text or "Unknown error occurred"}

    if response.status_code != 200:
        _LOGGER.warning("ClickCrate API %s %s returned %s: %s", method, path, response.status_code, data)
    return ApiResponse(status=response.status_code, data=data)


def register_clickcrate(
    clickcrate_id: str,
    eligible_placement_type: str,
    eligible_product_category: str,
    manager: str,
) -> ApiResponse:
    return _request(
        "POST",
        "/v1/clickcrate/register",
        {
            "clickcrateId": clickcrate_id,
            "eligiblePlacementType": eligible_placement_type,
            "eligibleProductCategory": eligible_product_category,
            "manager": manager,
        },
    )


def activate_clickcrate(clickcrate_id: str) -> ApiResponse:
    return _request("POST", "/v1/clickcrate/activate", {"clickcrateId": clickcrate_id})


def register_product_listing(
    product_listing_id: str,
    origin: str,
    eligible_placement_type: str,
    eligible_product_category: str,
    manager: str,
    price: int,
    order_manager: str,
) -> ApiResponse:
    """Register a listing. ``price`` is in lamports."""
    return _request(
        "POST",
        "/v1/product-listing/register",
        {
            "productListingId": product_listing_id,
            "origin": origin,
            "eligiblePlacementType": eligible_placement_type,
            "eligibleProductCategory": eligible_product_category,
            "manager": manager,
            "price": price,
            "orderManager": order_manager,
        },
    )


def activate_product_listing(product_listing_id: str) -> ApiResponse:
    return _request("POST", "/v1/product-listing/activate", {"productListingId": product_listing_id})


def place_product_listing(product_listing_id: str, clickcrate_id: str, price: int) -> ApiResponse:
    """Place a listing into a POS. ``price`` is in lamports."""
    return _request(
        "POST",
        "/v1/product-listing/place",
        {"productListingId": product_listing_id, "clickcrateId": clickcrate_id, "price": price},
    )


def fetch_registered_clickcrate(clickcrate_id: str) -> ApiResponse:
    return _request("GET", f"/v1/clickcrate/{clickcrate_id}")


def fetch_registered_product_listing(product_listing_id: str) -> ApiResponse:
    return _request("GET", f"/v1/product-listing/{product_listing_id}")


def make_blink_purchase(purchase: Dict[str, Any]) -> ApiResponse:
    """Ask the merchant API for a purchase transaction for the buyer to sign."""
    return _request("POST", "/v1/blink/purchase", purchase)


def place_order(clickcrate_id: str, buyer: str, details: Any, quantity: int = 1) -> ApiResponse:
    """Request a Solana-paid purchase from a validated order form."""
    return make_blink_purchase(
        {
            "clickcrateId": clickcrate_id,
            "size": getattr(details, "size", None),
            "quantity": quantity,
            "buyer": buyer,
            "payer": buyer,
            "paymentProcessor": "solana",
            "shippingName": details.buyer_name,
            "shippingEmail": details.shipping_email,
            "shippingAddress": details.shipping_address,
            "shippingCity": details.shipping_city,
            "shippingStateProvince": details.shipping_state_province,
            "shippingCountryRegion": details.shipping_country_region,
            "shippingZipCode": details.shipping_zip_code,
        }
    )


def generate_blink_url(pos_id: str) -> str:
    return f"{BLINK_BASE_URL}/{pos_id}"
