"""
Operator Wallet
===============
Loads the operator keypair from a Solana CLI style JSON file
(array of 64 secret key bytes).
"""

import json
import os

from solders.keypair import Keypair

from rent_reclaimer.modules.reclaimer.errors import ConfigurationError


def load_keypair_from_file(path: str) -> Keypair:
    """
    Read a keypair file.

    Raises:
        ConfigurationError: file missing, unreadable or malformed
    """
    if not path or not os.path.isfile(path):
        raise ConfigurationError(f"Keypair file not found: {path!r}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            secret = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Could not read keypair file {path}: {e}") from e

    if not isinstance(secret, list) or len(secret) != 64:
        raise ConfigurationError(f"Keypair file {path} must hold a JSON array of 64 bytes")

    try:
        return Keypair.from_bytes(bytes(secret))
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Invalid keypair bytes in {path}: {e}") from e
