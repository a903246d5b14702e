from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Optional

from .errors import WinningCircleAlreadySet, WinningCircleNotSet, WrongPhase
from .geometry import WinningCircle

log = logging.getLogger(__name__)


class Phase(Enum):
    ENTRY = "entry"
    RESOLVED = "resolved"


class PhaseController:
    """Entry -> Resolved, driven only by committing the winning circle."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._circle: Optional[WinningCircle] = None

    @property
    def phase(self) -> Phase:
        return Phase.ENTRY if self._circle is None else Phase.RESOLVED

    @property
    def winning_circle(self) -> Optional[WinningCircle]:
        return self._circle

    def require(self, phase: Phase) -> None:
        current = self.phase
        if current is not phase:
            raise WrongPhase(f"Operation requires phase {phase.value}, game is {current.value}.")

    def require_circle(self) -> WinningCircle:
        circle = self._circle
        if circle is None:
            raise WinningCircleNotSet("Winning circle has not been set yet.")
        return circle

    def commit_winning_circle(self, circle: WinningCircle) -> None:
        with self._lock:
            if self._circle is not None:
                raise WinningCircleAlreadySet("Winning circle is already set.")
            circle.validate()
            self._circle = circle
        log.info("Winning circle committed: (%d, %d) r=%d", circle.x, circle.y, circle.radius)
