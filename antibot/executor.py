import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from . import codec
from .antibot_client import AntibotClient
from .config import BuyerSettings
from .errors import AntibotError
from .metrics import LatencyTracker, RUNS_FAILED, RUNS_STARTED, RUNS_SUBMITTED, SLOTS_ALREADY_SIGNED
from .models import SubmissionReceipt
from .signer import LocalSigner
from .slot_filler import fill_signature_slot
from .wallet import SolanaWallet

logger = logging.getLogger(__name__)

StatusCallback = Callable[[str], None]


@contextmanager
def stage(name: str) -> Iterator[None]:
    """Tag any pipeline error escaping the block with the stage it came from."""
    try:
        yield
    except AntibotError as e:
        if e.stage is None:
            e.stage = name
        RUNS_FAILED.labels(stage=e.stage).inc()
        raise


class AntibotExecutor:
    """Runs one buy: fetch -> decode -> sign our slot -> submit.

    Any failure aborts the run; nothing is retried and a signed transaction
    that fails to submit is simply dropped.
    """

    def __init__(
        self,
        settings: BuyerSettings,
        signer: Optional[LocalSigner] = None,
        antibot: Optional[AntibotClient] = None,
        wallet: Optional[SolanaWallet] = None,
        on_status: Optional[StatusCallback] = None,
    ):
        self.settings = settings

        with stage("key"):
            self.signer = signer or LocalSigner.from_base58(settings.private_key)

        self.antibot = antibot or AntibotClient(
            settings.antibot_api_url,
            timeout_seconds=settings.http_timeout_seconds,
        )
        self.wallet = wallet or SolanaWallet(
            settings.rpc_url,
            commitment=settings.commitment,
            skip_preflight=settings.skip_preflight,
            timeout_seconds=settings.http_timeout_seconds,
        )
        self._on_status = on_status

    def _status(self, message: str) -> None:
        if self._on_status is not None:
            self._on_status(message)

    async def run(self) -> SubmissionReceipt:
        RUNS_STARTED.inc()
        tracker = LatencyTracker()
        buyer = self.signer.pubkey_str

        logger.info(f"🛒 Buying {self.settings.buy_amount} of {self.settings.token} using wallet {buyer}")
        self._status("Preparing transaction...")

        with stage("fetch"):
            tracker.mark_fetch_started()
            payload = await self.antibot.fetch_transaction(
                self.settings.token,
                self.settings.buy_amount,
                buyer,
            )
            tracker.mark_fetched()

        with stage("decode"):
            tx = codec.decode(payload)

        with stage("sign"):
            fill = fill_signature_slot(tx, self.signer)
            tracker.mark_signed()
        if not fill.signed:
            SLOTS_ALREADY_SIGNED.inc()

        self._status("Transaction prepared successfully!")
        self._status("Sending transaction...")

        with stage("submit"):
            signature = await self.wallet.send_transaction(fill.transaction)
            tracker.mark_submitted()

        RUNS_SUBMITTED.inc()
        self._status("Transaction sent successfully!")
        logger.info(f"⏱️  Pipeline finished in {tracker.total_ms():.0f}ms")

        return SubmissionReceipt(signature=signature, explorer_host=self.settings.explorer_host)

    async def close(self) -> None:
        await self.antibot.close()
        await self.wallet.close()
