"""
Transaction Senders
===================
Interchangeable submission strategies for close instructions.

- DirectSender: operator pays fees, signs, submits and waits for confirmation
- RelaySender:  fee-sponsoring relay, not wired yet (always fails)

The dispatcher only talks to TransactionSender.send().
"""

from abc import ABC, abstractmethod
from typing import Protocol

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import close_account
from spl.token.models import CloseAccountParams

from rent_reclaimer.modules.reclaimer.errors import RelaySenderError, SubmissionError
from rent_reclaimer.modules.reclaimer.models import PolicyParameters
from rent_reclaimer.shared.system.logging import Logger


class LedgerWriter(Protocol):
    """Write-side of the ledger collaborator used by DirectSender."""

    async def get_fresh_reference(self) -> Hash: ...

    async def submit(self, tx: VersionedTransaction) -> Signature: ...

    async def confirm(self, signature: Signature) -> None: ...


def build_close_instruction(account: str, operator: Pubkey) -> Instruction:
    """Close `account`, send its rent to the operator, operator signs as authority."""
    return close_account(
        CloseAccountParams(
            program_id=TOKEN_PROGRAM_ID,
            account=Pubkey.from_string(account),
            dest=operator,
            owner=operator,
            signers=[],
        )
    )


class TransactionSender(ABC):
    """Submit-and-confirm capability for a single instruction."""

    name = "base"

    @abstractmethod
    async def send(self, instruction: Instruction, signer: Keypair) -> str:
        """
        Submit `instruction` signed by `signer` and wait for confirmation.

        Returns:
            Transaction signature (base58)

        Raises:
            SubmissionError: rejected, failed, or not confirmed
        """


class DirectSender(TransactionSender):
    """Signer pays fees and submits straight to the RPC node."""

    name = "direct"

    def __init__(self, ledger: LedgerWriter):
        self.ledger = ledger

    async def send(self, instruction: Instruction, signer: Keypair) -> str:
        try:
            blockhash = await self.ledger.get_fresh_reference()
            msg = MessageV0.try_compile(
                payer=signer.pubkey(),
                instructions=[instruction],
                address_lookup_table_accounts=[],
                recent_blockhash=blockhash,
            )
            tx = VersionedTransaction(msg, [signer])

            sig = await self.ledger.submit(tx)
            await self.ledger.confirm(sig)
        except SubmissionError:
            raise
        except Exception as e:
            raise SubmissionError(f"direct send failed: {e}") from e

        return str(sig)


class RelaySender(TransactionSender):
    """
    Fee-sponsoring relay path.

    Intended to hand the signed intent to a relay JSON-RPC service
    (signAndSendTransaction) that pays fees on the operator's behalf.
    Keep USE_RELAY=0 until it is implemented.
    """

    name = "relay"

    def __init__(self, relay_url: str):
        self.relay_url = relay_url

    async def send(self, instruction: Instruction, signer: Keypair) -> str:
        raise RelaySenderError(
            f"Relay send not wired yet ({self.relay_url}). Set USE_RELAY=0 for now."
        )


def build_sender(policy: PolicyParameters, ledger: LedgerWriter, relay_url: str) -> TransactionSender:
    """Pick the sender the policy asks for."""
    if policy.use_relay:
        Logger.warning("[RELAY] USE_RELAY=1 but the relay sender is not wired; live closes will fail")
        return RelaySender(relay_url)
    return DirectSender(ledger)
