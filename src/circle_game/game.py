"""
The circle game.

Whitelisted participants claim one unique coordinate while the game is in the
Entry phase, either directly or through a relayer carrying their signature.
The authority then commits a winning circle once, which resolves the game.
After that anyone may claim on behalf of a batch of addresses; every entrant
inside the circle (boundary included) gets a fixed payout from the game's
token custody.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, Optional, Sequence, Union

from eth_utils import is_address, to_checksum_address

from .claims import ClaimReport, ClaimResolver
from .errors import (
    AuthorityRequired,
    NotWhitelisted,
    ZeroAuthority,
    ZeroGameAddress,
    ZeroTokenHandle,
    ZeroWhitelistRoot,
)
from .geometry import Position, WinningCircle
from .ledger import TokenLedger
from .merkle import HashLike, verify
from .phase import Phase, PhaseController
from .project_constants import PAYOUT_AMOUNT, ZERO_ADDRESS
from .registry import PositionRegistry
from .relay import GaslessEntryRelay
from .signatures import SignatureLike

log = logging.getLogger(__name__)


def _nonzero_address(value: Optional[str], error: type) -> str:
    if not value or not is_address(value) or to_checksum_address(value) == ZERO_ADDRESS:
        raise error(f"Expected a non-zero address, got {value!r}.")
    return to_checksum_address(value)


def _nonzero_root(value: Union[bytes, str, None]) -> bytes:
    if isinstance(value, str):
        text = value[2:] if value.startswith(("0x", "0X")) else value
        try:
            value = bytes.fromhex(text)
        except ValueError as e:
            raise ZeroWhitelistRoot(f"Whitelist root is not hex: {e}") from e
    if not value or len(value) != 32 or not any(value):
        raise ZeroWhitelistRoot("Whitelist root must be 32 non-zero bytes.")
    return bytes(value)


class Game:
    def __init__(
        self,
        authority: str,
        token: str,
        whitelist_root: Union[bytes, str],
        ledger: TokenLedger,
        address: str,
        payout_amount: int = PAYOUT_AMOUNT,
        pay_once: bool = True,
    ) -> None:
        self.authority = _nonzero_address(authority, ZeroAuthority)
        self.token = _nonzero_address(token, ZeroTokenHandle)
        self.whitelist_root = _nonzero_root(whitelist_root)
        self.address = _nonzero_address(address, ZeroGameAddress)
        self.ledger = ledger

        self._lock = threading.RLock()
        self._phases = PhaseController()
        self._registry = PositionRegistry(self._phases)
        self._relay = GaslessEntryRelay(self.address, self.whitelist_root, self._registry)
        self._claims = ClaimResolver(
            self.address,
            self._phases,
            self._registry,
            ledger,
            payout_amount=payout_amount,
            pay_once=pay_once,
        )
        log.info("Game %s created (authority %s, token %s)", self.address, self.authority, self.token)

    # --- entry phase ---

    def enter(self, sender: str, position: Position, proof: Sequence[HashLike]) -> None:
        """Direct entry: ``sender`` is the participant."""
        with self._lock:
            self._phases.require(Phase.ENTRY)
            if not verify(self.whitelist_root, sender, proof):
                raise NotWhitelisted(f"{sender} is not whitelisted.")
            self._registry.assign(sender, position)

    def gasless_enter(
        self,
        position: Position,
        signature: SignatureLike,
        proof: Sequence[HashLike],
    ) -> str:
        """Relayed entry; returns the participant recovered from ``signature``."""
        with self._lock:
            return self._relay.relay_entry(position, signature, proof)

    # --- resolution ---

    def set_winning_position(self, sender: str, circle: WinningCircle) -> None:
        with self._lock:
            if not is_address(sender) or to_checksum_address(sender) != self.authority:
                raise AuthorityRequired("Only the authority can set the winning position.")
            self._phases.commit_winning_circle(circle)

    def claim(self, identities: Iterable[str]) -> ClaimReport:
        with self._lock:
            report = self._claims.resolve_and_pay(identities)
        log.info("Claim batch paid %d winner(s)", len(report.paid))
        return report

    # --- queries ---

    @property
    def phase(self) -> Phase:
        return self._phases.phase

    @property
    def pay_once(self) -> bool:
        return self._claims.pay_once

    @property
    def payout_amount(self) -> int:
        return self._claims.payout_amount

    def position_of(self, identity: str) -> Optional[Position]:
        return self._registry.position_of(identity)

    def is_position_unique(self, position: Position) -> bool:
        return self._registry.is_unique(position)

    def is_winner(self, identity: str) -> bool:
        return self._claims.is_winner(identity)

    def has_been_paid(self, identity: str) -> bool:
        return self._claims.has_been_paid(identity)

    def current_winning_circle(self) -> Optional[WinningCircle]:
        return self._phases.winning_circle

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready state, consumed by the settlement audit."""
        with self._lock:
            circle = self._phases.winning_circle
            return {
                "game": self.address,
                "authority": self.authority,
                "token": self.token,
                "whitelist_root": "0x" + self.whitelist_root.hex(),
                "phase": self.phase.value,
                "payout_amount": str(self.payout_amount),
                "pay_once": self.pay_once,
                "payouts": self._claims.payouts(),
                "winning_circle": circle.to_json() if circle else None,
                "positions": [
                    {"address": addr, **pos.to_json()} for addr, pos in self._registry.entries()
                ],
            }
