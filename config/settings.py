import os
from dataclasses import dataclass
from typing import FrozenSet, Mapping, Optional

from dotenv import load_dotenv

from rent_reclaimer.modules.reclaimer.errors import ConfigurationError
from rent_reclaimer.modules.reclaimer.models import PolicyParameters
from rent_reclaimer.shared.infrastructure.ledger_client import VALID_COMMITMENTS

# Load Environment Variables from project root .env
env_path = os.path.join(os.path.dirname(__file__), "../.env")
load_dotenv(env_path)


def _flag(value: str) -> bool:
    return value.strip() == "1"


def _int(env: Mapping[str, str], name: str, default: str) -> int:
    raw = env.get(name, default).strip()
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _int_or(env: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(env.get(name, str(default)).strip())
    except ValueError:
        return default


def parse_allow_mints(raw: Optional[str]) -> Optional[FrozenSet[str]]:
    """Comma-separated mint list -> set, or None when empty/unset."""
    if not raw:
        return None
    mints = frozenset(part.strip() for part in raw.split(",") if part.strip())
    return mints or None


@dataclass(frozen=True)
class Settings:
    # ═══════════════════════════════════════════════════════════════════
    # RENT RECLAIMER CONFIGURATION (.env based)
    # ═══════════════════════════════════════════════════════════════════

    # --- Connection ---
    SOLANA_RPC_URL: str = ""
    COMMITMENT: str = "confirmed"  # processed | confirmed | finalized

    # --- Credentials ---
    OWNER_KEYPAIR_PATH: str = ""

    # --- Sender ---
    USE_RELAY: bool = False  # Relay sender is not wired yet
    RELAY_RPC_URL: str = "http://localhost:8080"

    # --- Policy ---
    DRY_RUN: bool = True  # Safe default: report only
    MIN_RENT_LAMPORTS: int = 0
    MAX_CLOSE_PER_RUN: int = 25
    ALLOW_MINTS: Optional[FrozenSet[str]] = None

    # --- Logging ---
    LOG_LEVEL: str = "info"

    # --- Telegram Notifier ---
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_DEFAULT_INTERVAL_SEC: int = 60
    TELEGRAM_MIN_ALERT_LAMPORTS: int = 0

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from the environment (or a supplied mapping)."""
        env = os.environ if env is None else env

        default_interval = _int_or(env, "TELEGRAM_DEFAULT_INTERVAL_SEC", 60)
        min_alert = _int_or(env, "TELEGRAM_MIN_ALERT_LAMPORTS", 0)

        return cls(
            SOLANA_RPC_URL=env.get("SOLANA_RPC_URL", "").strip(),
            COMMITMENT=env.get("COMMITMENT", "confirmed").strip().lower(),
            OWNER_KEYPAIR_PATH=env.get("OWNER_KEYPAIR_PATH", "").strip(),
            USE_RELAY=_flag(env.get("USE_RELAY", "0")),
            RELAY_RPC_URL=env.get("RELAY_RPC_URL", "http://localhost:8080").strip(),
            DRY_RUN=_flag(env.get("DRY_RUN", "1")),
            MIN_RENT_LAMPORTS=_int(env, "MIN_RENT_LAMPORTS", "0"),
            MAX_CLOSE_PER_RUN=_int(env, "MAX_CLOSE_PER_RUN", "25"),
            ALLOW_MINTS=parse_allow_mints(env.get("ALLOW_MINTS")),
            LOG_LEVEL=env.get("LOG_LEVEL", "info").strip().lower(),
            TELEGRAM_BOT_TOKEN=env.get("TELEGRAM_BOT_TOKEN", "").strip(),
            # Invalid notifier values fall back to defaults instead of failing
            TELEGRAM_DEFAULT_INTERVAL_SEC=default_interval if default_interval > 0 else 60,
            TELEGRAM_MIN_ALERT_LAMPORTS=min_alert if min_alert >= 0 else 0,
        )

    def validate(self) -> "Settings":
        """Raise ConfigurationError before any run if settings are unusable."""
        if not self.SOLANA_RPC_URL:
            raise ConfigurationError("Missing SOLANA_RPC_URL")
        if not self.OWNER_KEYPAIR_PATH:
            raise ConfigurationError("Missing OWNER_KEYPAIR_PATH")
        if self.COMMITMENT not in VALID_COMMITMENTS:
            raise ConfigurationError(
                f"COMMITMENT must be one of {', '.join(VALID_COMMITMENTS)}, got {self.COMMITMENT!r}"
            )
        self.policy()
        return self

    def policy(self) -> PolicyParameters:
        return PolicyParameters(
            min_rent_lamports=self.MIN_RENT_LAMPORTS,
            max_close_per_run=self.MAX_CLOSE_PER_RUN,
            allow_mints=self.ALLOW_MINTS,
            dry_run=self.DRY_RUN,
            use_relay=self.USE_RELAY,
        ).validate()

    def describe(self) -> dict:
        """Config view safe to print (no secrets)."""
        return {
            "RPC": self.SOLANA_RPC_URL,
            "Commitment": self.COMMITMENT,
            "DRY_RUN": "1" if self.DRY_RUN else "0",
            "USE_RELAY": "1" if self.USE_RELAY else "0",
            "MAX_CLOSE_PER_RUN": self.MAX_CLOSE_PER_RUN,
            "MIN_RENT_LAMPORTS": self.MIN_RENT_LAMPORTS,
            "ALLOW_MINTS": "set" if self.ALLOW_MINTS else "not set",
            "Default interval": f"{self.TELEGRAM_DEFAULT_INTERVAL_SEC}s",
            "Alert threshold": f"{self.TELEGRAM_MIN_ALERT_LAMPORTS} lamports",
        }
