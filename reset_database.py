#!/usr/bin/env python3
"""Drop the MongoDB collections used by the Actions API."""

import os
from dotenv import load_dotenv

load_dotenv()

# Check if MongoDB is enabled
ENABLE_MONGODB = os.getenv("ENABLE_MONGODB", "false").lower() == "true"

if not ENABLE_MONGODB:
    print("MongoDB is not enabled. Set ENABLE_MONGODB=true in .env")
    raise SystemExit(1)

from clickcrate_actions.database import get_database

COLLECTIONS = [
    "pending_products",
    "nft_metadata",
]


def reset_all_collections():
    """Drop all collections and start fresh."""
    db = get_database()

    print("Clearing all collections...")
    for collection_name in COLLECTIONS:
        try:
            db[collection_name].drop()
            print(f"   Dropped {collection_name}")
        except Exception as e:
            print(f"   Could not drop {collection_name}: {e}")

    print("\nDatabase reset complete.")
    print("Pending product submissions and hosted NFT metadata have been removed.")
    print("   - Existing NFTs will point at metadata URIs that now return 404")


if __name__ == "__main__":
    print("Resetting ClickCrate Actions database...")
    print("   This will DELETE ALL existing data.")

    confirm = input("\nAre you sure? Type 'yes' to continue: ")
    if confirm.lower() == 'yes':
        reset_all_collections()
    else:
        print("Reset cancelled.")
