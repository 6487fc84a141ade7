"""Solana RPC access, relay wallet signing and the product minting sequence."""

from __future__ import annotations

import base64
import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import base58
import requests
from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message, MessageV0, to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction, VersionedTransaction

from clickcrate_actions.services import metaplex_service

_LOGGER = logging.getLogger(__name__)

DEFAULT_RPC_URL = "https://api.devnet.solana.com"
PRIORITY_FEE_MICRO_LAMPORTS = 1000
MIN_COMPUTE_UNITS = 200_000
COINGECKO_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"

POS_ATTRIBUTES = [
    {"key": "Type", "value": "ClickCrate"},
    {"key": "Placement Type", "value": "Related Purchase"},
    {"key": "Additional Placement Requirements", "value": "None"},
    {"key": "Placement Fee (USDC)", "value": "0"},
    {"key": "User Profile Uri", "value": "None"},
]

_client: Optional[Client] = None
_relay_keypair: Optional[Keypair] = None


def get_client() -> Client:
    """Get or create the RPC client for ``SOLANA_RPC_URL``."""
    global _client
    if _client is None:
        _client = Client(os.getenv("SOLANA_RPC_URL", DEFAULT_RPC_URL), commitment=Confirmed)
    return _client


def load_keypair(secret: str) -> Keypair:
    """Load a keypair from a base58 string or a JSON array of 64 bytes."""
    raw = secret.strip()
    if raw.startswith("["):
        return Keypair.from_bytes(bytes(json.loads(raw)))
    return Keypair.from_bytes(base58.b58decode(raw))


def get_relay_keypair() -> Keypair:
    """Return the relay wallet that pays for minting on the creator's behalf."""
    global _relay_keypair
    if _relay_keypair is None:
        secret = os.getenv("PROXY_WALLET_SK")
        if not secret:
            raise RuntimeError("PROXY_WALLET_SK environment variable is not set")
        _relay_keypair = load_keypair(secret)
    return _relay_keypair


def parse_public_key(value: Any) -> Pubkey:
    """Parse a base58 wallet address, raising ValueError when malformed."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Missing account")
    return Pubkey.from_string(value.strip())


def create_transaction(
    instructions: Sequence[Instruction],
    fee_payer: Pubkey,
    compute_units: Optional[int] = None,
) -> MessageV0:
    """Compile ``instructions`` behind a priority fee into a v0 message."""
    budget: List[Instruction] = [set_compute_unit_price(PRIORITY_FEE_MICRO_LAMPORTS)]
    if compute_units is not None:
        if compute_units <= MIN_COMPUTE_UNITS:
            raise ValueError(f"Compute units must be greater than {MIN_COMPUTE_UNITS:,}")
        budget.append(set_compute_unit_limit(compute_units))

    blockhash = get_client().get_latest_blockhash().value.blockhash
    return MessageV0.try_compile(fee_payer, [*budget, *instructions], [], blockhash)


def partially_sign(message: MessageV0, signers: Sequence[Keypair]) -> VersionedTransaction:
    """Sign ``message`` with ``signers`` and leave the other signature slots empty."""
    by_key = {signer.pubkey(): signer for signer in signers}
    payload = to_bytes_versioned(message)
    required = message.header.num_required_signatures
    signatures = [
        by_key[key].sign_message(payload) if key in by_key else Signature.default()
        for key in message.account_keys[:required]
    ]
    return VersionedTransaction.populate(message, signatures)


def sign_and_send_transaction(message: MessageV0, signers: Sequence[Keypair]) -> str:
    """Sign with the relay wallet (plus any new account keys), send and confirm."""
    if not signers:
        raise ValueError("Signers unavailable")

    transaction = VersionedTransaction(message, list(signers))
    client = get_client()
    try:
        signature = client.send_raw_transaction(
            bytes(transaction), opts=TxOpts(skip_preflight=False, preflight_commitment=Confirmed)
        ).value
        _LOGGER.info("Transaction sent with ID: %s", signature)
        client.confirm_transaction(signature, commitment=Confirmed)
    except Exception as e:
        _LOGGER.error("Error in sign_and_send_transaction: %s", e)
        raise RuntimeError(f"Failed to sign and send transaction: {e}") from e

    _LOGGER.info("Transaction confirmed: %s", signature)
    return str(signature)


def transaction_cost(signature: str) -> int:
    """Return the lamports the fee payer spent on a confirmed transaction."""
    response = get_client().get_transaction(
        Signature.from_string(signature),
        commitment=Confirmed,
        max_supported_transaction_version=0,
    )
    if response.value is None or response.value.transaction.meta is None:
        raise RuntimeError(f"Transaction {signature} not found")
    meta = response.value.transaction.meta
    return meta.pre_balances[0] - meta.post_balances[0]


def _mint(instruction_factory, new_account: Keypair, relay: Keypair) -> Dict[str, Any]:
    message = create_transaction([instruction_factory(new_account.pubkey())], relay.pubkey())
    signature = sign_and_send_transaction(message, [relay, new_account])
    return {
        "address": str(new_account.pubkey()),
        "signature": signature,
        "cost": transaction_cost(signature),
    }


def _planned(name: str, uri: str, attributes: List[Dict[str, str]]) -> Dict[str, Any]:
    return {"name": name, "uri": uri, "attributes": attributes}


def prepare_products(product: Dict[str, Any], creator: Pubkey, category: str) -> Dict[str, Any]:
    """
    Build and store the metadata for every NFT ``create_products`` will mint.

    Nothing touches the chain here, so a bad image URI or unsupported media
    type fails before any lamports are spent.

    Args:
        product: Pending product record (name, description, image_uri, quantity)
        creator: Creator wallet
        category: Product category attribute value

    Returns:
        Name, metadata URI and attributes for the POS, the listing and each unit
    """
    name = product["name"]
    description = product["description"]
    image_uri = product["image_uri"]

    pos_name = f"{name} ClickCrate POS"
    pos_uri = metaplex_service.store_metadata(
        metaplex_service.build_metadata(pos_name, "CPOS", pos_name, image_uri, POS_ATTRIBUTES, creator)
    )

    listing_attributes = [
        {"key": "Type", "value": "Product Listing"},
        {"key": "Product Category", "value": category},
        {"key": "Brand", "value": "ClickCrate"},
        {"key": "Size(s)", "value": "Unisex"},
        {"key": "Placement Type", "value": "Related Purchase"},
        {"key": "Additional Placement Requirements", "value": "None"},
        {"key": "Discount", "value": "None"},
        {"key": "Customer Profile Uri", "value": "None"},
    ]
    listing_uri = metaplex_service.store_metadata(
        metaplex_service.build_metadata(name, "PLCC", description, image_uri, listing_attributes, creator)
    )

    product_attributes = [
        {"key": "Type", "value": "Product"},
        {"key": "Product Category", "value": category},
        {"key": "Brand", "value": "ClickCrate"},
        {"key": "Size", "value": "Unisex"},
    ]
    units = []
    for index in range(product["quantity"]):
        unit_name = f"{name} #{index + 1}"
        unit_uri = metaplex_service.store_metadata(
            metaplex_service.build_metadata(
                unit_name, f"PCC{index}", description, image_uri, product_attributes, creator
            )
        )
        units.append(_planned(unit_name, unit_uri, product_attributes))

    return {
        "pos": _planned(pos_name, pos_uri, POS_ATTRIBUTES),
        "listing": _planned(name, listing_uri, listing_attributes),
        "products": units,
    }


def create_products(plan: Dict[str, Any], creator: Pubkey) -> Dict[str, Any]:
    """
    Mint the POS collection, the listing collection and one NFT per unit.

    The relay wallet pays for and signs every transaction. The listing collection
    stays under relay authority so product NFTs can be minted into it, and every
    product NFT is owned by the creator.

    Args:
        plan: Output of :func:`prepare_products`
        creator: Creator wallet

    Returns:
        Addresses, signatures and the summed lamport cost of the sequence
    """
    relay = get_relay_keypair()
    pos_plan = plan["pos"]
    listing_plan = plan["listing"]

    pos = _mint(
        lambda address: metaplex_service.create_collection_instruction(
            address,
            relay.pubkey(),
            pos_plan["name"],
            pos_plan["uri"],
            pos_plan["attributes"],
            update_authority=creator,
        ),
        Keypair(),
        relay,
    )

    listing = _mint(
        lambda address: metaplex_service.create_collection_instruction(
            address,
            relay.pubkey(),
            listing_plan["name"],
            listing_plan["uri"],
            listing_plan["attributes"],
            update_authority=relay.pubkey(),
        ),
        Keypair(),
        relay,
    )
    listing_address = Pubkey.from_string(listing["address"])

    products = []
    for unit in plan["products"]:

        def product_instruction(address: Pubkey, unit: Dict[str, Any] = unit) -> Instruction:
            return metaplex_service.create_asset_instruction(
                address,
                relay.pubkey(),
                unit["name"],
                unit["uri"],
                unit["attributes"],
                collection=listing_address,
                authority=relay.pubkey(),
                owner=creator,
            )

        products.append(_mint(product_instruction, Keypair(), relay))

    total_cost = pos["cost"] + listing["cost"] + sum(item["cost"] for item in products)
    _LOGGER.info("Minted %s product NFTs for %s, total cost %s lamports", len(products), creator, total_cost)

    return {
        "total_cost": total_cost,
        "pos_address": pos["address"],
        "pos_signature": pos["signature"],
        "listing_address": listing["address"],
        "listing_signature": listing["signature"],
        "product_addresses": [item["address"] for item in products],
        "product_signatures": [item["signature"] for item in products],
    }


def build_shipping_nft_transaction(owner: Pubkey, name: str, uri: str, attributes: List[Dict[str, str]]) -> str:
    """Return a base64 mint transaction paid by ``owner`` and pre-signed by the new asset key."""
    asset = Keypair()
    instruction = metaplex_service.create_asset_instruction(
        asset.pubkey(), owner, name, uri, attributes, owner=owner
    )
    message = create_transaction([instruction], owner)
    return base64.b64encode(bytes(partially_sign(message, [asset]))).decode("ascii")


def relay_payment_transaction(lamports: int, from_pubkey: Pubkey) -> str:
    """Return an unsigned base64 transfer from the buyer to the relay wallet."""
    instruction = transfer(
        TransferParams(from_pubkey=from_pubkey, to_pubkey=get_relay_keypair().pubkey(), lamports=lamports)
    )
    blockhash = get_client().get_latest_blockhash().value.blockhash
    message = Message.new_with_blockhash([instruction], from_pubkey, blockhash)
    return base64.b64encode(bytes(Transaction.new_unsigned(message))).decode("ascii")


def get_sol_usd_price() -> float:
    """Return the current SOL price in USD from CoinGecko."""
    response = requests.get(
        COINGECKO_PRICE_URL,
        params={"ids": "solana", "vs_currencies": "usd"},
        timeout=10,
    )
    response.raise_for_status()
    return float(response.json()["solana"]["usd"])
