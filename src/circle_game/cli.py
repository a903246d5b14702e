from __future__ import annotations

import argparse
import json
import logging

from .audit import build_audit, verify_audit, write_audit
from .config import Settings
from .errors import GameError
from .geometry import Position
from .ledger import RpcTokenLedger
from .merkle import verify
from .project_constants import TOKEN_DECIMALS
from .scenario import load_scenario, run_scenario
from .signatures import sign_entry
from .whitelist import build_bundle, load_addresses, load_bundle, proof_for, write_bundle


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def to_tokens(raw_amount: int) -> float:
    return round(raw_amount / (10**TOKEN_DECIMALS), 1)


def cmd_whitelist(args: argparse.Namespace) -> int:
    log = logging.getLogger("whitelist")
    addresses = load_addresses(args.addresses)
    log.info("Whitelisted addresses: %d", len(addresses))

    bundle = build_bundle(addresses)
    write_bundle(bundle, args.out)

    print(f"Root          : {bundle['root']}")
    print(f"🧾 Wrote bundle: {args.out}")
    return 0


def cmd_proof(args: argparse.Namespace) -> int:
    bundle = load_bundle(args.bundle)
    print(json.dumps(proof_for(bundle, args.address), indent=2))
    return 0


def cmd_verify_proof(args: argparse.Namespace) -> int:
    proof = [p for p in args.proof.split(",") if p] if args.proof else []
    if verify(args.root, args.address, proof):
        print(f"✅ {args.address} is whitelisted")
        return 0
    print(f"❌ {args.address} is NOT whitelisted under {args.root}")
    return 1


def cmd_sign(args: argparse.Namespace) -> int:
    settings = Settings.from_env(rpc_url_override=args.rpc_url)
    signature = sign_entry(settings.require_signer_key(), Position(args.x, args.y), args.game)
    print("0x" + signature.hex())
    return 0


def cmd_play(args: argparse.Namespace) -> int:
    settings = Settings.from_env(rpc_url_override=args.rpc_url)
    log = logging.getLogger("play")

    result = run_scenario(load_scenario(args.scenario), pay_once=settings.pay_once)
    game = result.game
    log.info("Entrants          : %d", len(game.snapshot()["positions"]))
    log.info("Rejected entries  : %d", len(result.rejected))

    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(game.snapshot(), f, indent=2)

    print("========================================")
    print("🎯 CIRCLE GAME")
    print("========================================")
    print(f"Game          : {game.address}")
    print(f"Phase         : {game.phase.value}")
    for i, report in enumerate(result.claims, start=1):
        print(f"Claim batch {i}  : {len(report.paid)} paid, {to_tokens(report.total_paid)} tokens")
    print(f"Custody left  : {to_tokens(result.ledger.balance_of(game.address))}")
    print(f"🧾 Wrote state: {args.out}")
    return 0


def cmd_audit(args: argparse.Namespace) -> int:
    with open(args.state, "r", encoding="utf-8") as f:
        snapshot = json.load(f)
    audit = build_audit(snapshot)
    write_audit(audit, args.out)

    print("🏆 WINNERS")
    for addr in audit["winners"]:
        print(f"Address       : {addr}")
    print(f"Eligible      : {to_tokens(int(audit['metadata']['eligible_payout']))}")
    print(f"Paid          : {to_tokens(int(audit['metadata']['total_paid']))}")
    print(f"🧾 Wrote audit: {args.out}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    result = verify_audit(args.audit)
    print("✅ AUDIT VERIFIED")
    print(f"Game          : {result['game']}")
    print(f"Entrants      : {result['entrants']}")
    print(f"Winners       : {len(result['winners'])}")
    print(f"Eligible      : {to_tokens(result['eligible_payout'])}")
    print(f"Paid          : {to_tokens(result['total_paid'])}")
    if result["unpaid"]:
        print(f"Unpaid        : {', '.join(result['unpaid'])}")
    return 0


def cmd_balance(args: argparse.Namespace) -> int:
    settings = Settings.from_env(rpc_url_override=args.rpc_url)
    ledger = RpcTokenLedger(settings.require_rpc_url(), args.token, timeout_s=args.timeout)
    try:
        balance = ledger.balance_of(args.address)
    finally:
        ledger.close()
    print(f"Balance       : {to_tokens(balance)} ({balance} raw)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="circle-game",
        description="Whitelisted two-phase circle game tooling.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--rpc-url", default=None, help="Override ledger RPC URL (else use env).")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    w = sub.add_parser("whitelist", help="Build the Merkle root and proofs for an address list.")
    w.add_argument("--addresses", required=True, help="File with one address per line.")
    w.add_argument("--out", default="whitelist.json", help="Bundle output JSON path.")
    w.set_defaults(func=cmd_whitelist)

    pr = sub.add_parser("proof", help="Print the proof of one address from a bundle.")
    pr.add_argument("--bundle", required=True, help="Path to whitelist.json.")
    pr.add_argument("--address", required=True)
    pr.set_defaults(func=cmd_proof)

    vp = sub.add_parser("verify-proof", help="Check a proof against a root.")
    vp.add_argument("--root", required=True, help="Whitelist root (hex).")
    vp.add_argument("--address", required=True)
    vp.add_argument("--proof", default="", help="Comma separated sibling hashes.")
    vp.set_defaults(func=cmd_verify_proof)

    s = sub.add_parser("sign", help="Sign an entry with ENTRY_SIGNER_KEY for relaying.")
    s.add_argument("--game", required=True, help="Game address the entry is bound to.")
    s.add_argument("--x", required=True, type=int)
    s.add_argument("--y", required=True, type=int)
    s.set_defaults(func=cmd_sign)

    pl = sub.add_parser("play", help="Replay a scenario file and write the game state.")
    pl.add_argument("--scenario", required=True, help="Path to scenario JSON.")
    pl.add_argument("--out", default="state.json", help="State output JSON path.")
    pl.set_defaults(func=cmd_play)

    a = sub.add_parser("audit", help="Write a settlement audit from a game state.")
    a.add_argument("--state", required=True, help="Path to state.json.")
    a.add_argument("--out", default="audit.json", help="Audit output JSON path.")
    a.set_defaults(func=cmd_audit)

    v = sub.add_parser("verify", help="Verify an existing audit.json deterministically.")
    v.add_argument("--audit", required=True, help="Path to audit.json.")
    v.set_defaults(func=cmd_verify)

    b = sub.add_parser("balance", help="Query a token balance on the ledger RPC.")
    b.add_argument("--token", required=True, help="Payout token address.")
    b.add_argument("--address", required=True)
    b.set_defaults(func=cmd_balance)

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)
    try:
        code = args.func(args)
    except GameError as e:
        raise SystemExit(f"{type(e).__name__}: {e}")
    raise SystemExit(code)
