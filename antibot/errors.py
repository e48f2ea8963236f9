from typing import Any, Optional


class AntibotError(Exception):
    """Base class for every failure the buy pipeline surfaces.

    ``stage`` is filled in by the executor with the pipeline stage the error
    escaped from, so the entry point can name it in a single log line.
    """

    stage: Optional[str] = None

    def describe(self) -> str:
        if self.stage:
            return f"{self.stage} failed: {self}"
        return str(self)


class ConfigurationError(AntibotError):
    """Missing or invalid environment input"""


class KeyMaterialError(AntibotError):
    pass


class InvalidKeyEncoding(KeyMaterialError):
    """Private key is not valid base58"""


class MalformedKeyBytes(KeyMaterialError):
    """Private key decoded but is not a 64-byte ed25519 keypair"""


class NetworkError(AntibotError):
    """Transport-level failure (connect, timeout, reset)"""


class HttpError(AntibotError):
    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        snippet = body[:200] if body else ""
        super().__init__(f"HTTP {status}" + (f" - {snippet}" if snippet else ""))


class TransactionDecodeError(AntibotError):
    pass


class Base64DecodeError(TransactionDecodeError):
    pass


class DeserializationError(TransactionDecodeError):
    pass


class SignerNotFound(AntibotError):
    def __init__(self, pubkey: str, reason: str = "is not in the list of signers"):
        self.pubkey = pubkey
        super().__init__(f"Our public key {pubkey} {reason}")


class SubmissionRejected(AntibotError):
    """The RPC node refused the transaction (bad signature, stale blockhash, funds...)"""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        self.code = code
        self.data = data
        super().__init__(f"RPC error {code}: {message}" if code is not None else message)
