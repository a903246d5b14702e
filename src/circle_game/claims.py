from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from eth_utils import to_checksum_address

from .errors import InsufficientPayoutBalance, TransferFailed
from .ledger import TokenLedger
from .phase import PhaseController
from .project_constants import PAYOUT_AMOUNT
from .registry import PositionRegistry

log = logging.getLogger(__name__)


@dataclass
class ClaimReport:
    paid: List[str] = field(default_factory=list)
    not_entered: List[str] = field(default_factory=list)
    outside: List[str] = field(default_factory=list)
    already_paid: List[str] = field(default_factory=list)
    amount_each: int = PAYOUT_AMOUNT

    @property
    def total_paid(self) -> int:
        return self.amount_each * len(self.paid)


class ClaimResolver:
    def __init__(
        self,
        game_address: str,
        phases: PhaseController,
        registry: PositionRegistry,
        ledger: TokenLedger,
        payout_amount: int = PAYOUT_AMOUNT,
        pay_once: bool = True,
    ) -> None:
        self.game_address = game_address
        self.phases = phases
        self.registry = registry
        self.ledger = ledger
        self.payout_amount = payout_amount
        self.pay_once = pay_once
        self._paid: Set[str] = set()
        # Every transfer made, including repeats when pay_once is off
        self._payouts: Dict[str, int] = defaultdict(int)

    def is_winner(self, identity: str) -> bool:
        circle = self.phases.winning_circle
        if circle is None:
            return False
        position = self.registry.position_of(identity)
        return position is not None and circle.contains(position)

    def has_been_paid(self, identity: str) -> bool:
        return to_checksum_address(identity) in self._paid

    def payouts(self) -> Dict[str, int]:
        """Number of payouts made to each identity, in address order."""
        return dict(sorted(self._payouts.items()))

    def resolve_and_pay(self, identities: Iterable[str]) -> ClaimReport:
        """
        Pay every winner in ``identities`` once per call, in input order.

        Unknown or losing identities are skipped. With ``pay_once`` an identity
        paid by an earlier call (or earlier in the same batch) is skipped too.
        The full batch total is checked against custody before moving anything.
        """
        circle = self.phases.require_circle()
        report = ClaimReport(amount_each=self.payout_amount)
        seen: Set[str] = set()

        for raw in identities:
            position = self.registry.position_of(raw)
            if position is None:
                report.not_entered.append(raw)
                log.debug("Skipping %s: no position", raw)
                continue
            identity = to_checksum_address(raw)
            if not circle.contains(position):
                report.outside.append(identity)
                continue
            if self.pay_once and (identity in self._paid or identity in seen):
                report.already_paid.append(identity)
                log.debug("Skipping %s: already paid", identity)
                continue
            seen.add(identity)
            report.paid.append(identity)

        if not report.paid:
            return report

        available = self.ledger.balance_of(self.game_address)
        if available < report.total_paid:
            raise InsufficientPayoutBalance(
                f"Game holds {available}, batch needs {report.total_paid}."
            )

        for winner in report.paid:
            if not self.ledger.transfer(self.game_address, winner, self.payout_amount):
                raise TransferFailed(f"Transfer of {self.payout_amount} to {winner} failed.")
            if self.pay_once:
                self._paid.add(winner)
            self._payouts[winner] += 1
            log.info("Paid %d to %s", self.payout_amount, winner)

        return report
