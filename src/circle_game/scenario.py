"""
Replay a scripted game against an in-memory ledger.

Scenario file layout::

    {
      "game": "0x...", "authority": "0x...", "token": "0x...",
      "whitelist": ["0x...", ...],
      "custody": "400000000000000000000",
      "entries": [
        {"address": "0x...", "x": 40, "y": 40},
        {"address": "0x...", "x": 10, "y": 11, "signature": "0x..."}
      ],
      "circle": {"x": 50, "y": 50, "radius": 20},
      "claims": [["0x...", "0x..."]]
    }

Entries with a signature go through the gasless relay, the others enter
directly as ``address``. Proofs are looked up by ``address`` in the
scenario's own whitelist; for relayed entries the signature alone decides who
enters.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .claims import ClaimReport
from .errors import GameError
from .game import Game
from .geometry import Position, WinningCircle
from .ledger import InMemoryTokenLedger
from .merkle import MerkleTree

log = logging.getLogger(__name__)


@dataclass
class ScenarioResult:
    game: Game
    ledger: InMemoryTokenLedger
    rejected: List[Dict[str, Any]] = field(default_factory=list)
    claims: List[ClaimReport] = field(default_factory=list)


def _proof(tree: MerkleTree, who: Optional[str]) -> List[bytes]:
    if who not in tree:
        return []
    return tree.proof(who)


def load_scenario(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def run_scenario(scenario: Dict[str, Any], pay_once: bool = True) -> ScenarioResult:
    tree = MerkleTree(scenario["whitelist"])
    ledger = InMemoryTokenLedger()
    game = Game(
        authority=scenario["authority"],
        token=scenario["token"],
        whitelist_root=tree.root,
        ledger=ledger,
        address=scenario["game"],
        pay_once=pay_once,
    )
    ledger.mint(game.address, int(scenario.get("custody", 0)))
    result = ScenarioResult(game=game, ledger=ledger)

    for entry in scenario.get("entries", []):
        pos = Position(int(entry["x"]), int(entry["y"]))
        proof = _proof(tree, entry.get("address"))
        try:
            if "signature" in entry:
                game.gasless_enter(pos, entry["signature"], proof)
            else:
                game.enter(entry["address"], pos, proof)
        except GameError as e:
            log.warning("Entry %s rejected: %s: %s", entry, type(e).__name__, e)
            result.rejected.append({"entry": entry, "error": type(e).__name__})

    circle = scenario.get("circle")
    if circle is not None:
        game.set_winning_position(game.authority, WinningCircle.from_json(circle))

    for batch in scenario.get("claims", []):
        result.claims.append(game.claim(batch))

    return result
