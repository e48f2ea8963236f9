import asyncio
import logging
from typing import Optional

import aiohttp

from .errors import HttpError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://www.degen.fund"


class AntibotClient:
    """Client for the degen.fund antibot endpoint, which hands out pre-built buy transactions"""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout_seconds: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.api_url = api_url.rstrip('/')
        # None keeps aiohttp's default timeout
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds) if timeout_seconds is not None else None
        self.session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session"""
        if self.session is None or self.session.closed:
            kwargs = {
                'headers': {
                    'Accept': 'text/plain, */*',
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

    async def __aenter__(self) -> "AntibotClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    def build_url(self, token: str, buy_amount: str, buyer: str) -> str:
        return f"{self.api_url}/api/antibot/{token}?&buy-amount={buy_amount}&buyer={buyer}"

    async def fetch_transaction(self, token: str, buy_amount: str, buyer: str) -> str:
        """Fetch the base64 buy transaction for ``buyer``. Single attempt."""

        url = self.build_url(token, buy_amount, buyer)
        logger.debug(f"GET {url}")

        try:
            session = await self._get_session()
            async with session.get(url) as response:
                body = await response.text()
                if not 200 <= response.status < 300:
                    raise HttpError(response.status, body)
                return body.strip()

        except asyncio.TimeoutError as e:
            raise NetworkError(f"Antibot request timed out: {url}") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Antibot request failed: {e}") from e
