"""
Fill the buyer's signature slot in a partially-signed transaction.

The antibot endpoint co-signs the transaction on its side and leaves one
zeroed slot for the buyer. We find the buyer among the message's account
keys, and sign the message into that slot unless it is already filled.
"""

import logging
from typing import Protocol

from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from .errors import SignerNotFound
from .models import SlotFill, SlotState

logger = logging.getLogger(__name__)

EMPTY_SIGNATURE = Signature.default()


class MessageSigner(Protocol):
    @property
    def pubkey(self) -> Pubkey: ...

    def sign(self, message_bytes: bytes) -> Signature: ...


def slot_state(signature: Signature) -> SlotState:
    return SlotState.EMPTY if signature == EMPTY_SIGNATURE else SlotState.FILLED


def find_signer_index(tx: Transaction, pubkey: Pubkey) -> int:
    """Index of the first account key equal to ``pubkey``.

    Only the first match counts, even if the key appears more than once.
    """
    account_keys = tx.message.account_keys
    index = next((i for i, key in enumerate(account_keys) if key == pubkey), None)
    if index is None:
        raise SignerNotFound(str(pubkey))
    if index >= len(tx.signatures):
        # present as a plain account, but there is no signature slot for it
        raise SignerNotFound(str(pubkey), reason=f"is account #{index} but not a required signer")
    return index


def fill_signature_slot(tx: Transaction, signer: MessageSigner) -> SlotFill:
    index = find_signer_index(tx, signer.pubkey)
    signatures = tx.signatures
    state = slot_state(signatures[index])

    if state is SlotState.FILLED:
        logger.info(f"Signature slot {index} already filled, leaving it as is")
        return SlotFill(transaction=tx, index=index, previous_state=state)

    signatures[index] = signer.sign(tx.message_data())
    tx.signatures = signatures
    logger.debug(f"Signed slot {index} of {len(signatures)}")
    return SlotFill(transaction=tx, index=index, previous_state=state)
