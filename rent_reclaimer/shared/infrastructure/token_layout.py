"""
SPL Token Account Layout
========================
Decoder for raw SPL token account data (165 bytes).

Offsets:
    0   mint             Pubkey
    32  owner            Pubkey
    64  amount           u64
    72  delegate         COption<Pubkey>
    108 state            u8   (0 = uninitialized, 1 = initialized, 2 = frozen)
    109 is_native        COption<u64>
    121 delegated_amount u64
    129 close_authority  COption<Pubkey>
"""

import struct
from typing import Optional

from solders.pubkey import Pubkey

from rent_reclaimer.modules.reclaimer.errors import RecordDecodeError
from rent_reclaimer.modules.reclaimer.models import SubAccountRecord

TOKEN_ACCOUNT_SIZE = 165

MINT_OFFSET = 0
OWNER_OFFSET = 32
AMOUNT_OFFSET = 64
STATE_OFFSET = 108
CLOSE_AUTHORITY_OFFSET = 129

STATE_UNINITIALIZED = 0


def _read_pubkey(data: bytes, offset: int) -> str:
    return str(Pubkey.from_bytes(data[offset:offset + 32]))


def _read_option_pubkey(address: str, data: bytes, offset: int) -> Optional[str]:
    (tag,) = struct.unpack_from("<I", data, offset)
    if tag == 0:
        return None
    if tag != 1:
        raise RecordDecodeError(address, f"invalid COption tag {tag} at offset {offset}")
    return _read_pubkey(data, offset + 4)


def decode_token_account(
    address: str,
    data: bytes,
    lamports: Optional[int] = None,
) -> SubAccountRecord:
    """
    Decode raw token account bytes into a SubAccountRecord.

    Raises:
        RecordDecodeError: data too short, uninitialized, or malformed
    """
    if data is None or len(data) < TOKEN_ACCOUNT_SIZE:
        size = 0 if data is None else len(data)
        raise RecordDecodeError(address, f"expected {TOKEN_ACCOUNT_SIZE} bytes, got {size}")

    if data[STATE_OFFSET] == STATE_UNINITIALIZED:
        raise RecordDecodeError(address, "account is not initialized")

    (amount,) = struct.unpack_from("<Q", data, AMOUNT_OFFSET)

    return SubAccountRecord(
        address=address,
        mint=_read_pubkey(data, MINT_OFFSET),
        owner=_read_pubkey(data, OWNER_OFFSET),
        amount=amount,
        close_authority=_read_option_pubkey(address, data, CLOSE_AUTHORITY_OFFSET),
        lamports=lamports,
    )


def encode_token_account(
    mint: Pubkey,
    owner: Pubkey,
    amount: int = 0,
    close_authority: Optional[Pubkey] = None,
    state: int = 1,
) -> bytes:
    """Build raw token account bytes (fixtures and local simulation)."""
    data = bytearray(TOKEN_ACCOUNT_SIZE)
    data[MINT_OFFSET:MINT_OFFSET + 32] = bytes(mint)
    data[OWNER_OFFSET:OWNER_OFFSET + 32] = bytes(owner)
    struct.pack_into("<Q", data, AMOUNT_OFFSET, amount)
    data[STATE_OFFSET] = state
    if close_authority is not None:
        struct.pack_into("<I", data, CLOSE_AUTHORITY_OFFSET, 1)
        data[CLOSE_AUTHORITY_OFFSET + 4:CLOSE_AUTHORITY_OFFSET + 36] = bytes(close_authority)
    return bytes(data)
