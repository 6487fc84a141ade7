"""Encryption of shipping details to a wallet's public key.

The shipping JSON is sealed with a random secretbox key, and that key is sealed
with a NaCl box from a throwaway key pair to the curve25519 form of the
wallet's ed25519 key. Only the wallet owner can recover it.

Payload layout (base64)::

    nonce(24) | ciphertext | box_nonce(24) | sealed_key(48) | ephemeral_pub(32)
"""

from __future__ import annotations

import base64
import json
from typing import Any, Dict

import nacl.utils
from nacl.public import Box, PrivateKey, PublicKey
from nacl.secret import SecretBox
from nacl.signing import SigningKey, VerifyKey

_SEALED_KEY_SIZE = SecretBox.KEY_SIZE + SecretBox.MACBYTES
_TRAILER_SIZE = Box.NONCE_SIZE + _SEALED_KEY_SIZE + PublicKey.SIZE


def encrypt_shipping_info(wallet_public_key: bytes, shipping_info: Dict[str, Any]) -> str:
    """Encrypt ``shipping_info`` so only the owner of ``wallet_public_key`` can read it."""
    symmetric_key = nacl.utils.random(SecretBox.KEY_SIZE)
    nonce = nacl.utils.random(SecretBox.NONCE_SIZE)
    plaintext = json.dumps(shipping_info, separators=(",", ":")).encode("utf-8")
    encrypted = SecretBox(symmetric_key).encrypt(plaintext, nonce).ciphertext

    recipient = VerifyKey(bytes(wallet_public_key)).to_curve25519_public_key()
    ephemeral = PrivateKey.generate()
    box_nonce = nacl.utils.random(Box.NONCE_SIZE)
    sealed_key = Box(ephemeral, recipient).encrypt(symmetric_key, box_nonce).ciphertext

    payload = nonce + encrypted + box_nonce + sealed_key + bytes(ephemeral.public_key)
    return base64.b64encode(payload).decode("ascii")


def decrypt_shipping_info(wallet_secret_key: bytes, payload: str) -> Dict[str, Any]:
    """Reverse :func:`encrypt_shipping_info` with the wallet's secret key.

    Accepts either the 32-byte seed or the 64-byte Solana keypair encoding.
    """
    raw = base64.b64decode(payload)
    if len(raw) <= SecretBox.NONCE_SIZE + _TRAILER_SIZE:
        raise ValueError("Encrypted shipping info is truncated")

    nonce = raw[: SecretBox.NONCE_SIZE]
    encrypted = raw[SecretBox.NONCE_SIZE : len(raw) - _TRAILER_SIZE]
    trailer = raw[len(raw) - _TRAILER_SIZE :]
    box_nonce = trailer[: Box.NONCE_SIZE]
    sealed_key = trailer[Box.NONCE_SIZE : Box.NONCE_SIZE + _SEALED_KEY_SIZE]
    ephemeral_public = trailer[Box.NONCE_SIZE + _SEALED_KEY_SIZE :]

    signing_key = SigningKey(bytes(wallet_secret_key)[:32])
    recipient = signing_key.to_curve25519_private_key()
    symmetric_key = Box(recipient, PublicKey(ephemeral_public)).decrypt(sealed_key, box_nonce)
    plaintext = SecretBox(symmetric_key).decrypt(encrypted, nonce)
    return json.loads(plaintext.decode("utf-8"))
