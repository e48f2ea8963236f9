"""
Pytest configuration and shared fixtures for the test suite.
"""

from typing import Any, List, Optional, Tuple

import base58
import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from antibot.antibot_client import AntibotClient
from antibot.config import BuyerSettings, load_buyer_settings
from antibot.executor import AntibotExecutor
from antibot.signer import LocalSigner
from antibot.wallet import SolanaWallet


# ============================================================================
# Keys
# ============================================================================

@pytest.fixture
def buyer_keypair() -> Keypair:
    """The caller's keypair (``A`` in the scenarios)."""
    return Keypair()


@pytest.fixture
def cosigner_keypair() -> Keypair:
    """The antibot service's keypair (``B`` in the scenarios)."""
    return Keypair()


@pytest.fixture
def buyer_secret(buyer_keypair: Keypair) -> str:
    return base58.b58encode(bytes(buyer_keypair)).decode()


@pytest.fixture
def buyer_signer(buyer_secret: str) -> LocalSigner:
    return LocalSigner.from_base58(buyer_secret)


# ============================================================================
# Transactions
# ============================================================================

def build_unsigned_tx(payer: Pubkey, cosigner: Pubkey, recipient: Optional[Pubkey] = None) -> Transaction:
    """Build an unsigned transaction whose signers are ``[payer, cosigner]``.

    The cosigner is the source of a transfer so it must sign too.
    """
    recipient = recipient or Keypair().pubkey()
    ix = transfer(TransferParams(from_pubkey=cosigner, to_pubkey=recipient, lamports=1_000))
    message = Message.new_with_blockhash([ix], payer, Hash.default())
    return Transaction.new_unsigned(message)


def build_single_signer_tx(payer: Pubkey, recipient: Pubkey) -> Transaction:
    """Build an unsigned transaction where only ``payer`` signs and ``recipient`` is a plain account."""
    ix = transfer(TransferParams(from_pubkey=payer, to_pubkey=recipient, lamports=1_000))
    message = Message.new_with_blockhash([ix], payer, Hash.default())
    return Transaction.new_unsigned(message)


@pytest.fixture
def tx_service_first(cosigner_keypair: Keypair, buyer_keypair: Keypair) -> Transaction:
    """Account list ``[B, A, ...]`` with both slots empty."""
    return build_unsigned_tx(cosigner_keypair.pubkey(), buyer_keypair.pubkey())


@pytest.fixture
def tx_buyer_first(buyer_keypair: Keypair, cosigner_keypair: Keypair) -> Transaction:
    """Account list ``[A, B, ...]`` with both slots empty."""
    return build_unsigned_tx(buyer_keypair.pubkey(), cosigner_keypair.pubkey())


# ============================================================================
# Configuration
# ============================================================================

def make_env(secret: str, **overrides: str) -> dict:
    env = {
        "SOLANA_RPC_URL": "https://rpc.test",
        "PRIVATE_KEY_BASE58": secret,
        "BUY_AMOUNT": "0.1",
        "TOKEN_TO_BUY": "XYZ",
        "ANTIBOT_API_URL": "https://antibot.test",
    }
    env.update(overrides)
    return env


@pytest.fixture
def test_settings(buyer_secret: str) -> BuyerSettings:
    return load_buyer_settings(make_env(buyer_secret))


# ============================================================================
# Fake aiohttp session
# ============================================================================

class FakeResponse:
    """Stands in for ``aiohttp.ClientResponse`` inside ``async with``."""

    def __init__(self, status: int = 200, text: str = "", json_data: Any = None, json_error: Optional[Exception] = None):
        self.status = status
        self._text = text
        self._json_data = json_data
        self._json_error = json_error

    async def text(self) -> str:
        return self._text

    async def json(self, content_type: Optional[str] = None) -> Any:
        if self._json_error is not None:
            raise self._json_error
        return self._json_data

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc) -> bool:
        return False


class FakeSession:
    """Records requests and replays canned responses (or raises)."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None):
        self.response = response or FakeResponse()
        self.error = error
        self.closed = False
        self.calls: List[Tuple[str, str, dict]] = []

    def _request(self, method: str, url: str, **kwargs) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url: str, **kwargs) -> FakeResponse:
        return self._request("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> FakeResponse:
        return self._request("POST", url, **kwargs)

    async def close(self) -> None:
        self.closed = True


# ============================================================================
# Executor wiring
# ============================================================================

SIGNATURE = "5abcVd1f9mZ3CrkNjSz1GZxYcJj3XhTLuF4X2r1kEkqR7ZLXm2M5CzSGFRXz8k9UVuVq9YqRkWAz3AQv5o6t8W1E"


def make_executor(settings: BuyerSettings, payload: str, rpc_response: Optional[FakeResponse] = None, on_status=None):
    """Build an executor whose antibot and RPC endpoints are fake sessions."""
    antibot_session = FakeSession(FakeResponse(200, payload))
    rpc_session = FakeSession(
        rpc_response or FakeResponse(200, json_data={"jsonrpc": "2.0", "id": 1, "result": SIGNATURE})
    )
    executor = AntibotExecutor(
        settings,
        antibot=AntibotClient(settings.antibot_api_url, session=antibot_session),
        wallet=SolanaWallet(settings.rpc_url, commitment=settings.commitment, session=rpc_session),
        on_status=on_status,
    )
    return executor, antibot_session, rpc_session
