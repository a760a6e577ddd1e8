"""
Solana Ledger Client
====================
Thin async wrapper over solana-py's AsyncClient exposing exactly the calls
the reclaim engine needs. Every read uses the configured commitment.

Usage:
    async with SolanaLedgerClient(rpc_url, commitment="confirmed") as ledger:
        accounts = await ledger.enumerate_sub_accounts(owner)
"""

from typing import List, Optional

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.models import TokenAccountOpts, TxOpts
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction
from spl.token.constants import TOKEN_PROGRAM_ID

from rent_reclaimer.modules.reclaimer.errors import (
    EnumerationError,
    RecordDecodeError,
    SubmissionError,
    ValueLookupError,
)
from rent_reclaimer.modules.reclaimer.models import SubAccountRecord
from rent_reclaimer.shared.infrastructure.token_layout import decode_token_account
from rent_reclaimer.shared.system.logging import Logger

VALID_COMMITMENTS = ("processed", "confirmed", "finalized")


class SolanaLedgerClient:
    """
    Ledger collaborator backed by a Solana JSON-RPC endpoint.

    Stateless between calls; safe to share across sequential runs.
    """

    def __init__(
        self,
        rpc_url: str,
        commitment: str = "confirmed",
        client: Optional[AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.commitment = Commitment(commitment)
        self.client = client or AsyncClient(rpc_url, commitment=self.commitment)

    async def __aenter__(self) -> "SolanaLedgerClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    # =========================================================================
    # READS
    # =========================================================================

    async def enumerate_sub_accounts(self, owner: str) -> List[str]:
        """List every SPL token account owned by `owner` (single RPC call)."""
        try:
            resp = await self.client.get_token_accounts_by_owner(
                Pubkey.from_string(owner),
                TokenAccountOpts(program_id=TOKEN_PROGRAM_ID),
                commitment=self.commitment,
            )
        except Exception as e:
            raise EnumerationError(f"getTokenAccountsByOwner failed for {owner}: {e}") from e

        return [str(entry.pubkey) for entry in resp.value]

    async def get_decoded_account(self, address: str) -> SubAccountRecord:
        """
        Fetch and decode one token account.

        The returned record carries no lamports; those come from
        get_account_value() so the value lookup stays a separate step.
        """
        try:
            resp = await self.client.get_account_info(
                Pubkey.from_string(address), commitment=self.commitment
            )
        except Exception as e:
            raise RecordDecodeError(address, f"getAccountInfo failed: {e}") from e

        if resp.value is None:
            raise RecordDecodeError(address, "account not found")

        if resp.value.owner != TOKEN_PROGRAM_ID:
            raise RecordDecodeError(address, f"not owned by the token program ({resp.value.owner})")

        return decode_token_account(address, bytes(resp.value.data))

    async def get_account_value(self, address: str) -> Optional[int]:
        """Lamport balance of `address`, or None if the account does not exist."""
        try:
            resp = await self.client.get_account_info(
                Pubkey.from_string(address), commitment=self.commitment
            )
        except Exception as e:
            raise ValueLookupError(address, str(e)) from e

        if resp.value is None:
            return None
        return resp.value.lamports

    async def get_fresh_reference(self) -> Hash:
        """Latest blockhash at the configured commitment."""
        resp = await self.client.get_latest_blockhash(commitment=self.commitment)
        return resp.value.blockhash

    # =========================================================================
    # WRITES
    # =========================================================================

    async def submit(self, tx: VersionedTransaction) -> Signature:
        try:
            resp = await self.client.send_transaction(
                tx,
                opts=TxOpts(skip_preflight=False, preflight_commitment=self.commitment),
            )
        except Exception as e:
            raise SubmissionError(f"sendTransaction failed: {e}") from e
        Logger.debug(f"[SENDER] Transaction sent: {resp.value}")
        return resp.value

    async def confirm(self, signature: Signature) -> None:
        try:
            resp = await self.client.confirm_transaction(signature, commitment=self.commitment)
        except Exception as e:
            raise SubmissionError(f"confirmation failed for {signature}: {e}") from e

        statuses = resp.value if resp is not None else None
        if statuses:
            status = statuses[0]
            if status is not None and status.err is not None:
                raise SubmissionError(f"transaction {signature} failed: {status.err}")
