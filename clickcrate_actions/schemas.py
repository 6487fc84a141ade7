"""Request schemas for the Action endpoints."""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator

from clickcrate_actions.utils.media import validate_image_uri

PRODUCT_TYPES: List[Dict[str, str]] = [
    {"value": "hat", "label": "Embroidered Dad Hat", "category": "Clothing"},
]

_LETTERS_RE = re.compile(r"^[a-zA-Z\s]+$")
_PHONE_RE = re.compile(r"^[+]?[(]?[0-9]{1,4}[)]?[-\s./0-9]*$")
_ZIP_RE = re.compile(r"^[a-zA-Z0-9\s-]+$")


def find_product_type(value: str) -> Optional[Dict[str, str]]:
    """Return the product type entry whose ``value`` matches."""
    return next((pt for pt in PRODUCT_TYPES if pt["value"] == value), None)


class _FormModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class ProductInfo(_FormModel):
    """Product details submitted from the creator form."""

    type: str
    image_uri: HttpUrl = Field(alias="imageUri")
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(max_length=500)
    quantity: int = Field(ge=1, le=3)
    unit_price: float = Field(alias="unitPrice", gt=0)
    email: EmailStr

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        if find_product_type(value) is None:
            raise ValueError(f"Invalid product type: {value}")
        return value

    @field_validator("image_uri")
    @classmethod
    def _supported_media(cls, value: HttpUrl) -> HttpUrl:
        validate_image_uri(str(value))
        return value


class ShippingDetails(_FormModel):
    """Shipping details sealed into the shipping-info NFT."""

    shipping_name: str = Field(alias="shippingName")
    shipping_email: EmailStr = Field(alias="shippingEmail")
    shipping_phone: Optional[str] = Field(default=None, alias="shippingPhone")
    shipping_address: str = Field(alias="shippingAddress", min_length=1)
    shipping_city: str = Field(alias="shippingCity")
    shipping_state_province: str = Field(alias="shippingStateProvince", min_length=1)
    shipping_country_region: str = Field(alias="shippingCountryRegion", min_length=1)
    shipping_zip_code: str = Field(alias="shippingZipCode")

    @field_validator("shipping_name", "shipping_city")
    @classmethod
    def _letters_only(cls, value: str) -> str:
        if not _LETTERS_RE.match(value):
            raise ValueError("must contain only letters and spaces")
        return value

    @field_validator("shipping_phone")
    @classmethod
    def _phone(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _PHONE_RE.match(value):
            raise ValueError("invalid phone number")
        return value

    @field_validator("shipping_zip_code")
    @classmethod
    def _zip(cls, value: str) -> str:
        if not _ZIP_RE.match(value):
            raise ValueError("invalid zip/postal code")
        return value


class OrderDetails(_FormModel):
    """Buyer and delivery fields shared by every purchase form."""

    buyer_name: str = Field(alias="buyerName", min_length=1)
    shipping_email: EmailStr = Field(alias="shippingEmail")
    shipping_address: str = Field(alias="shippingAddress", min_length=1)
    shipping_city: str = Field(alias="shippingCity", min_length=1)
    shipping_state_province: str = Field(alias="shippingStateProvince", min_length=1)
    shipping_country_region: str = Field(alias="shippingCountryRegion", min_length=1)
    shipping_zip_code: str = Field(alias="shippingZipCode", min_length=1)


class PurchaseDetails(OrderDetails):
    """Buyer input for a merch purchase."""

    size: str = Field(min_length=1)


class StorefrontOrder(OrderDetails):
    """Buyer input for a storefront purchase. Size is only asked for sized listings."""

    size: Optional[str] = None
