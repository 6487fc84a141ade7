"""In-memory data stores backing the prototype state."""

from typing import Any, Dict

# Product submissions waiting for their emailed code to be redeemed.
pending_products: Dict[str, Dict[str, Any]] = {}

# NFT metadata documents served from /metadata, keyed by metadata id.
nft_metadata: Dict[str, Dict[str, Any]] = {}
