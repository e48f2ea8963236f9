"""
Wire codec for the transactions served by the antibot endpoint.

The endpoint returns base64 text wrapping a bincode-serialized legacy Solana
transaction: a short-vec of 64-byte signatures followed by the message
(header, account keys, recent blockhash, instructions).
"""

import base64
import binascii

from solders.errors import BincodeError
from solders.transaction import Transaction

from .errors import Base64DecodeError, DeserializationError


def decode_base64(text: str) -> bytes:
    cleaned = (text or "").strip()
    if not cleaned:
        raise Base64DecodeError("Empty transaction payload")
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise Base64DecodeError(f"Transaction payload is not valid base64: {e}") from e


def deserialize(raw: bytes) -> Transaction:
    try:
        tx = Transaction.from_bytes(raw)
    except (BincodeError, ValueError) as e:
        raise DeserializationError(f"Could not deserialize transaction ({len(raw)} bytes): {e}") from e

    required = tx.message.header.num_required_signatures
    if len(tx.signatures) != required:
        raise DeserializationError(
            f"Transaction carries {len(tx.signatures)} signatures but declares {required} signers"
        )
    return tx


def decode(text: str) -> Transaction:
    """Base64 text -> bytes -> Transaction"""
    return deserialize(decode_base64(text))


def encode(tx: Transaction) -> str:
    return base64.b64encode(bytes(tx)).decode('utf-8')
