"""Conversions between merchant API enums, NFT attributes and form options."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

LAMPORTS_PER_SOL = 1_000_000_000

PLACEMENT_TYPES = ("Digitalreplica", "Relatedpurchase", "Targetedplacement")

PRODUCT_CATEGORIES = (
    "Clothing",
    "Electronics",
    "Books",
    "Home",
    "Beauty",
    "Toys",
    "Sports",
    "Automotive",
    "Grocery",
    "Health",
)


def placement_type_value(placement_type: str) -> str:
    """Return the merchant API value for a placement type name."""
    if placement_type not in PLACEMENT_TYPES:
        raise ValueError(f"Invalid placement type: {placement_type}")
    return placement_type.lower()


def product_category_value(product_category: str) -> str:
    """Return the merchant API value for a product category name."""
    if product_category not in PRODUCT_CATEGORIES:
        raise ValueError(f"Invalid product category: {product_category}")
    return product_category.lower()


def sol_to_lamports(amount_sol: float) -> int:
    return int(round(amount_sol * LAMPORTS_PER_SOL))


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL


def parse_sizes(value: str) -> List[Dict[str, str]]:
    """Turn a comma separated ``Size(s)`` attribute into select options."""
    sizes = [size.strip() for size in value.split(",")]
    return [{"label": size, "value": size} for size in sizes if size]


def find_attribute(asset: Dict[str, Any], name: str) -> Optional[Any]:
    """Return an attribute value from DAS metadata or the Attributes plugin."""
    metadata = asset.get("content", {}).get("metadata", {})
    for attr in metadata.get("attributes") or []:
        if attr.get("trait_type") == name:
            return attr.get("value")

    plugin = asset.get("plugins", {}).get("attributes", {})
    for attr in plugin.get("data", {}).get("attribute_list") or []:
        if attr.get("key") == name:
            return attr.get("value")
    return None


def size_options(size_value: Optional[Any]) -> List[Dict[str, str]]:
    """Build the size select options for a listing's size attribute."""
    if size_value is None:
        return []
    if isinstance(size_value, str) and "," in size_value:
        return parse_sizes(size_value)
    return [{"label": str(size_value), "value": str(size_value)}]


def to_metaplex_attributes(attributes: Iterable[Dict[str, str]]) -> List[Dict[str, str]]:
    """Convert ``key``/``value`` plugin attributes into JSON metadata traits."""
    return [{"trait_type": attr["key"], "value": attr["value"]} for attr in attributes]
