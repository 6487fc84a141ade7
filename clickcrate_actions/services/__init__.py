"""Service layer modules for the ClickCrate Actions API."""

from . import clickcrate_api, email_service, metaplex_service, pending_product_service, solana_service

__all__ = [
    "clickcrate_api",
    "email_service",
    "metaplex_service",
    "pending_product_service",
    "solana_service",
]
