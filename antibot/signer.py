import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from .errors import InvalidKeyEncoding, MalformedKeyBytes

KEYPAIR_LENGTH = 64


class LocalSigner:
    """In-memory signer for the buyer wallet. Swappable for KMS/HSM later."""

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @classmethod
    def from_base58(cls, private_key_base58: str) -> "LocalSigner":
        try:
            raw = base58.b58decode(private_key_base58.strip())
        except ValueError:
            # never echo the secret back
            raise InvalidKeyEncoding("Private key is not valid base58") from None

        if len(raw) != KEYPAIR_LENGTH:
            raise MalformedKeyBytes(
                f"Private key decodes to {len(raw)} bytes, expected {KEYPAIR_LENGTH}"
            )
        try:
            keypair = Keypair.from_bytes(raw)
        except (ValueError, TypeError):
            raise MalformedKeyBytes("Private key bytes are not a valid ed25519 keypair") from None
        return cls(keypair)

    @property
    def pubkey(self) -> Pubkey:
        return self._keypair.pubkey()

    @property
    def pubkey_str(self) -> str:
        return str(self._keypair.pubkey())

    def sign(self, message_bytes: bytes) -> Signature:
        return self._keypair.sign_message(message_bytes)
