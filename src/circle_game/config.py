from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    ledger_rpc_url: str | None
    signer_key: str | None
    pay_once: bool = True

    @staticmethod
    def from_env(rpc_url_override: str | None = None) -> "Settings":
        load_dotenv()

        # If user provides --rpc-url, trust it.
        rpc_url = rpc_url_override or os.getenv("LEDGER_RPC_URL", "").strip() or None
        signer_key = os.getenv("ENTRY_SIGNER_KEY", "").strip() or None

        return Settings(
            ledger_rpc_url=rpc_url,
            signer_key=signer_key,
            pay_once=_env_flag("CIRCLE_GAME_PAY_ONCE", True),
        )

    def require_rpc_url(self) -> str:
        if not self.ledger_rpc_url:
            raise RuntimeError("Missing LEDGER_RPC_URL. Put it in .env, export it or pass --rpc-url.")
        return self.ledger_rpc_url

    def require_signer_key(self) -> str:
        if not self.signer_key:
            raise RuntimeError("Missing ENTRY_SIGNER_KEY. Put it in .env or export it.")
        return self.signer_key
