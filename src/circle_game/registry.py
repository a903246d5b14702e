from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Tuple

from eth_utils import is_address, to_checksum_address

from .errors import PositionAlreadySet, PositionNotUnique
from .geometry import Position
from .phase import Phase, PhaseController

log = logging.getLogger(__name__)


class PositionRegistry:
    """One immutable position per identity; a coordinate pair is never reused."""

    def __init__(self, phases: PhaseController) -> None:
        self._phases = phases
        self._lock = threading.Lock()
        self._positions: Dict[str, Position] = {}
        self._owners: Dict[Tuple[int, int], str] = {}

    def assign(self, identity: str, position: Position) -> None:
        identity = to_checksum_address(identity)
        with self._lock:
            self._phases.require(Phase.ENTRY)
            if identity in self._positions:
                raise PositionAlreadySet(f"{identity} already has a position.")
            position.validate()
            if position.key in self._owners:
                raise PositionNotUnique(f"Position ({position.x}, {position.y}) is taken.")

            self._positions[identity] = position
            self._owners[position.key] = identity
        log.info("Position (%d, %d) assigned to %s", position.x, position.y, identity)

    def is_unique(self, position: Position) -> bool:
        return position.key not in self._owners

    def position_of(self, identity: str) -> Optional[Position]:
        if not isinstance(identity, str) or not is_address(identity):
            return None
        return self._positions.get(to_checksum_address(identity))

    def owner_of(self, position: Position) -> Optional[str]:
        return self._owners.get(position.key)

    def entries(self) -> List[Tuple[str, Position]]:
        # Deterministic ordering (by address)
        return sorted(self._positions.items(), key=lambda kv: kv[0])

    def __len__(self) -> int:
        return len(self._positions)
