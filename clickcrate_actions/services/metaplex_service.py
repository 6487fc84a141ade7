"""Metaplex Core instruction builders, hosted NFT metadata and DAS lookups."""

from __future__ import annotations

import logging
import os
import struct
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import requests
from pymongo.errors import PyMongoError
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYS_PROGRAM_ID

from clickcrate_actions import database
from clickcrate_actions.storage import nft_metadata
from clickcrate_actions.utils.codes import generate_token
from clickcrate_actions.utils.conversions import to_metaplex_attributes
from clickcrate_actions.utils.media import get_media_category, get_mime_type, validate_image_uri

_LOGGER = logging.getLogger(__name__)

MPL_CORE_PROGRAM_ID = Pubkey.from_string("CoREENxT6tW1HoK8ypY1SxRMZTcVPm7R94rH4PZNhX7d")

# mpl-core instruction discriminators (u8).
CREATE_V1 = 0
CREATE_COLLECTION_V1 = 1

# Plugin enum index of the Attributes plugin and the AccountState data state.
ATTRIBUTES_PLUGIN = 6
DATA_STATE_ACCOUNT = 0

CLICKCRATE_URL = "https://www.clickcrate.xyz/"
DAS_TIMEOUT_SECONDS = 15


def _u32(value: int) -> bytes:
    return struct.pack("<I", value)


def _string(value: str) -> bytes:
    encoded = value.encode("utf-8")
    return _u32(len(encoded)) + encoded


def encode_attributes_plugin(attributes: Iterable[Dict[str, str]]) -> bytes:
    """Borsh-encode ``Some(vec![Attributes plugin])`` with no explicit authority."""
    attribute_list = list(attributes)
    data = bytearray([1])  # Option::Some
    data += _u32(1)
    data.append(ATTRIBUTES_PLUGIN)
    data += _u32(len(attribute_list))
    for attr in attribute_list:
        data += _string(str(attr["key"]))
        data += _string(str(attr["value"]))
    data.append(0)  # authority: None
    return bytes(data)


def _optional(pubkey: Optional[Pubkey], *, signer: bool = False, writable: bool = False) -> AccountMeta:
    # Omitted optional accounts are passed as the program id.
    if pubkey is None:
        return AccountMeta(pubkey=MPL_CORE_PROGRAM_ID, is_signer=False, is_writable=False)
    return AccountMeta(pubkey=pubkey, is_signer=signer, is_writable=writable)


def create_collection_instruction(
    collection: Pubkey,
    payer: Pubkey,
    name: str,
    uri: str,
    attributes: Iterable[Dict[str, str]],
    *,
    update_authority: Optional[Pubkey] = None,
) -> Instruction:
    """Build a ``CreateCollectionV1`` instruction carrying an Attributes plugin."""
    data = bytes([CREATE_COLLECTION_V1]) + _string(name) + _string(uri) + encode_attributes_plugin(attributes)
    accounts = [
        AccountMeta(pubkey=collection, is_signer=True, is_writable=True),
        _optional(update_authority),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id=MPL_CORE_PROGRAM_ID, data=data, accounts=accounts)


def create_asset_instruction(
    asset: Pubkey,
    payer: Pubkey,
    name: str,
    uri: str,
    attributes: Iterable[Dict[str, str]],
    *,
    collection: Optional[Pubkey] = None,
    authority: Optional[Pubkey] = None,
    owner: Optional[Pubkey] = None,
) -> Instruction:
    """Build a ``CreateV1`` instruction, optionally minting into ``collection``."""
    data = (
        bytes([CREATE_V1, DATA_STATE_ACCOUNT])
        + _string(name)
        + _string(uri)
        + encode_attributes_plugin(attributes)
    )
    accounts = [
        AccountMeta(pubkey=asset, is_signer=True, is_writable=True),
        _optional(collection, writable=True),
        _optional(authority, signer=True),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        _optional(owner),
        _optional(None),  # update authority comes from the collection
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
        _optional(None),  # log wrapper
    ]
    return Instruction(program_id=MPL_CORE_PROGRAM_ID, data=data, accounts=accounts)


def build_metadata(
    name: str,
    symbol: str,
    description: str,
    image_uri: str,
    attributes: List[Dict[str, str]],
    creator: Pubkey,
    *,
    external_url: str = CLICKCRATE_URL,
) -> Dict[str, Any]:
    """Return the off-chain JSON metadata matching the on-chain attributes."""
    extension = validate_image_uri(image_uri)
    category = get_media_category(extension)
    return {
        "name": name,
        "symbol": symbol,
        "description": description,
        "image": image_uri,
        "animation_url": "" if category == "image" else image_uri,
        "external_url": external_url,
        "creator_url": external_url,
        "attributes": to_metaplex_attributes(attributes),
        "properties": {
            "files": [{"uri": image_uri, "type": get_mime_type(extension)}],
            "category": category,
            "creators": [{"address": str(creator), "share": 100}],
        },
    }


def metadata_uri(metadata_id: str) -> str:
    base_url = os.getenv("PUBLIC_BASE_URL", "http://localhost:8080").rstrip("/")
    return f"{base_url}/metadata/{metadata_id}"


def store_metadata(document: Dict[str, Any]) -> str:
    """Persist a metadata document and return the URI it is served from."""
    metadata_id = generate_token("meta")
    nft_metadata[metadata_id] = document

    if database.mongodb_enabled():
        try:
            database.get_database().nft_metadata.insert_one(
                {"metadata_id": metadata_id, "document": document, "created_at": datetime.utcnow()}
            )
        except PyMongoError as e:
            _LOGGER.error(f"Failed to save NFT metadata to MongoDB: {e}")

    return metadata_uri(metadata_id)


def get_metadata(metadata_id: str) -> Optional[Dict[str, Any]]:
    """Return a stored metadata document, or None."""
    document = nft_metadata.get(metadata_id)
    if document is not None or not database.mongodb_enabled():
        return document

    try:
        record = database.get_database().nft_metadata.find_one({"metadata_id": metadata_id})
    except PyMongoError as e:
        _LOGGER.error(f"Failed to load NFT metadata from MongoDB: {e}")
        return None

    if record is None:
        return None
    nft_metadata[metadata_id] = record["document"]
    return record["document"]


def fetch_das_asset(asset_id: str) -> Dict[str, Any]:
    """Fetch an asset or collection through the DAS ``getAsset`` RPC method."""
    rpc_url = os.getenv("DAS_RPC_URL") or os.getenv("SOLANA_RPC_URL", "https://api.devnet.solana.com")
    response = requests.post(
        rpc_url,
        json={"jsonrpc": "2.0", "id": "clickcrate", "method": "getAsset", "params": {"id": asset_id}},
        timeout=DAS_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    payload = response.json()
    if payload.get("error"):
        raise RuntimeError(f"DAS getAsset failed: {payload['error']}")
    return payload["result"]


def fetch_json(uri: str) -> Dict[str, Any]:
    """Fetch an off-chain metadata document."""
    response = requests.get(uri, timeout=DAS_TIMEOUT_SECONDS)
    response.raise_for_status()
    return response.json()


def create_indexes() -> None:
    """Create the MongoDB indexes used by metadata lookups."""
    database.get_database().nft_metadata.create_index("metadata_id", unique=True)
