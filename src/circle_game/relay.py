from __future__ import annotations

import logging
from typing import Sequence

from .errors import NotWhitelisted
from .geometry import Position
from .merkle import HashLike, verify
from .registry import PositionRegistry
from .signatures import SignatureLike, entry_digest, recover

log = logging.getLogger(__name__)


class GaslessEntryRelay:
    """
    Accepts entries submitted by anyone on behalf of a participant.

    The submitter pays for submission; authorization comes only from the
    participant's signature over (x, y, game address) and their whitelist proof.
    """

    def __init__(self, game_address: str, whitelist_root: bytes, registry: PositionRegistry) -> None:
        self.game_address = game_address
        self.whitelist_root = whitelist_root
        self.registry = registry

    def relay_entry(
        self,
        position: Position,
        signature: SignatureLike,
        proof: Sequence[HashLike],
    ) -> str:
        digest = entry_digest(position.x, position.y, self.game_address)
        identity = recover(digest, signature)
        if not verify(self.whitelist_root, identity, proof):
            raise NotWhitelisted(f"{identity} is not whitelisted.")
        self.registry.assign(identity, position)
        log.debug("Relayed entry for %s", identity)
        return identity
