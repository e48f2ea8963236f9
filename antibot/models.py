from dataclasses import dataclass
from enum import Enum

from solders.transaction import Transaction


class SlotState(Enum):
    EMPTY = "empty"
    FILLED = "filled"


@dataclass
class SlotFill:
    """Outcome of filling the caller's signature slot"""
    transaction: Transaction
    index: int
    previous_state: SlotState

    @property
    def signed(self) -> bool:
        """True when this run wrote the signature (slot was empty)"""
        return self.previous_state is SlotState.EMPTY


@dataclass(frozen=True)
class SubmissionReceipt:
    signature: str
    explorer_host: str = "solscan.io"

    @property
    def explorer_url(self) -> str:
        return f"https://{self.explorer_host}/tx/{self.signature}"
