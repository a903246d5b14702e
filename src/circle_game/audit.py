from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List

from .geometry import Position, WinningCircle

TOOL_NAME = "circle-game"
TOOL_VERSION = "1.0.0"


def _score(entrants: List[Dict[str, Any]], circle: WinningCircle) -> List[Dict[str, Any]]:
    scored = []
    for e in sorted(entrants, key=lambda e: e["address"]):
        pos = Position(int(e["x"]), int(e["y"]))
        pos.validate()
        d2 = circle.squared_distance(pos)
        scored.append(
            {
                "address": e["address"],
                "x": pos.x,
                "y": pos.y,
                "squared_distance": d2,
                "winner": d2 <= circle.radius * circle.radius,
            }
        )
    return scored


def build_audit(snapshot: Dict[str, Any]) -> Dict[str, Any]:
    if snapshot.get("winning_circle") is None:
        raise RuntimeError("Game is not resolved; no winning circle in snapshot.")
    circle = WinningCircle.from_json(snapshot["winning_circle"])
    entrants = _score(snapshot["positions"], circle)
    winners = [e["address"] for e in entrants if e["winner"]]
    payout = int(snapshot["payout_amount"])
    payouts = {addr: int(n) for addr, n in sorted(snapshot.get("payouts", {}).items())}

    return {
        "metadata": {
            "tool": TOOL_NAME,
            "version": TOOL_VERSION,
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "game": snapshot["game"],
            "token": snapshot["token"],
            "whitelist_root": snapshot["whitelist_root"],
            "winning_circle": circle.to_json(),
            "radius_squared": circle.radius * circle.radius,
            "payout_amount": str(payout),  # big int; store as string for safety
            "pay_once": bool(snapshot.get("pay_once", True)),
            # What the winners are owed once each, and what was actually transferred.
            "eligible_payout": str(payout * len(winners)),
            "total_paid": str(payout * sum(payouts.values())),
        },
        "winners": winners,
        "payouts": payouts,
        # Entrants in address order with distances so anyone can re-run.
        "all_entrants": entrants,
    }


def write_audit(audit: Dict[str, Any], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(audit, f, indent=2)


def verify_audit(audit_path: str) -> Dict[str, Any]:
    with open(audit_path, "r", encoding="utf-8") as f:
        audit = json.load(f)

    meta = audit["metadata"]
    circle = WinningCircle.from_json(meta["winning_circle"])
    circle.validate()

    if int(meta["radius_squared"]) != circle.radius * circle.radius:
        raise RuntimeError(
            f"Radius mismatch: audit={meta['radius_squared']} recomputed={circle.radius ** 2}"
        )

    recomputed = _score(audit["all_entrants"], circle)
    for stored, fresh in zip(sorted(audit["all_entrants"], key=lambda e: e["address"]), recomputed):
        if int(stored["squared_distance"]) != fresh["squared_distance"]:
            raise RuntimeError(
                f"Distance mismatch for {fresh['address']}: "
                f"audit={stored['squared_distance']} recomputed={fresh['squared_distance']}"
            )

    coords = [(e["x"], e["y"]) for e in recomputed]
    if len(set(coords)) != len(coords):
        raise RuntimeError("Two entrants share a position.")

    winners = [e["address"] for e in recomputed if e["winner"]]
    if winners != audit["winners"]:
        raise RuntimeError(f"Winner mismatch: audit={audit['winners']} recomputed={winners}")

    payout = int(meta["payout_amount"])
    if int(meta["eligible_payout"]) != payout * len(winners):
        raise RuntimeError(
            f"Eligible payout mismatch: audit={meta['eligible_payout']} "
            f"recomputed={payout * len(winners)}"
        )

    payouts = {addr: int(n) for addr, n in audit.get("payouts", {}).items()}
    strangers = sorted(set(payouts) - set(winners))
    if strangers:
        raise RuntimeError(f"Payouts to non-winners: {strangers}")
    if meta.get("pay_once", True):
        repeated = sorted(addr for addr, n in payouts.items() if n > 1)
        if repeated:
            raise RuntimeError(f"Paid more than once under pay-once: {repeated}")

    total_paid = payout * sum(payouts.values())
    if int(meta["total_paid"]) != total_paid:
        raise RuntimeError(
            f"Total paid mismatch: audit={meta['total_paid']} recomputed={total_paid}"
        )

    return {
        "ok": True,
        "game": meta["game"],
        "winners": winners,
        "entrants": len(recomputed),
        "eligible_payout": payout * len(winners),
        "total_paid": total_paid,
        "unpaid": [w for w in winners if w not in payouts],
    }
