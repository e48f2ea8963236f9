import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
from solders.transaction import Transaction

from . import codec
from .errors import NetworkError, SubmissionRejected

logger = logging.getLogger(__name__)

COMMITMENTS = ("processed", "confirmed", "finalized")


class SolanaWallet:
    """Submits finished transactions to a Solana RPC node"""

    def __init__(
        self,
        rpc_url: str,
        commitment: str = "confirmed",
        skip_preflight: bool = False,
        timeout_seconds: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        if commitment not in COMMITMENTS:
            raise ValueError(f"Unknown commitment: {commitment}")
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.skip_preflight = skip_preflight
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds) if timeout_seconds is not None else None
        self.session = session
        self._owns_session = session is None
        self._request_id = 0

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session"""
        if self.session is None or self.session.closed:
            kwargs = {
                'headers': {
                    'Content-Type': 'application/json',
                    'User-Agent': 'AntibotBuyer/1.0'
                }
            }
            if self.timeout is not None:
                kwargs['timeout'] = self.timeout
            self.session = aiohttp.ClientSession(**kwargs)
            self._owns_session = True
        return self.session

    async def close(self):
        """Clean shutdown"""
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def __aenter__(self) -> "SolanaWallet":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def _rpc_call(self, method: str, params: list) -> Any:
        """Make a single JSON-RPC call and return its ``result``"""

        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params
        }

        try:
            session = await self._get_session()
            async with session.post(self.rpc_url, json=payload) as response:
                if not 200 <= response.status < 300:
                    text = await response.text()
                    raise NetworkError(f"RPC HTTP error: {response.status} - {text[:200]}")
                try:
                    data: Dict[str, Any] = await response.json(content_type=None)
                except ValueError as e:
                    raise NetworkError(f"RPC returned invalid JSON: {e}") from e

        except asyncio.TimeoutError as e:
            raise NetworkError(f"RPC call timed out ({method})") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"RPC call failed ({method}): {e}") from e

        if not isinstance(data, dict):
            raise NetworkError(f"Unexpected RPC reply: {data!r}")

        error = data.get("error")
        if error:
            if isinstance(error, dict):
                raise SubmissionRejected(
                    error.get("message", "unknown error"),
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise SubmissionRejected(str(error))

        if "result" not in data or data["result"] is None:
            raise SubmissionRejected(f"RPC reply has no result: {data}")
        return data["result"]

    async def send_transaction(self, tx: Transaction) -> str:
        """Submit a signed transaction and return its signature. No retries."""

        params = [
            codec.encode(tx),
            {
                "encoding": "base64",
                "skipPreflight": self.skip_preflight,
                "preflightCommitment": self.commitment,
            }
        ]
        signature = await self._rpc_call("sendTransaction", params)
        logger.info(f"✅ Transaction sent: {signature}")
        return str(signature)
