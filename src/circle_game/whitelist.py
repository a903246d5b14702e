from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List

from eth_utils import is_address, to_checksum_address

from .merkle import MerkleTree


def load_addresses(path: str) -> List[str]:
    """One address per line; blank lines and '#' comments are ignored."""
    out = set()
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            w = line.split("#", 1)[0].strip()
            if not w:
                continue
            if not is_address(w):
                raise ValueError(f"{path}:{lineno}: not an address: {w!r}")
            out.add(to_checksum_address(w))

    # Deterministic ordering (critical for reproducibility)
    return sorted(out)


def build_bundle(addresses: Iterable[str]) -> Dict[str, Any]:
    tree = MerkleTree(addresses)
    return {
        "root": tree.hex_root,
        "proofs": {addr: tree.hex_proof(addr) for addr in tree.members},
    }


def write_bundle(bundle: Dict[str, Any], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(bundle, f, indent=2)


def load_bundle(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        bundle = json.load(f)
    if "root" not in bundle or "proofs" not in bundle:
        raise RuntimeError(f"{path}: expected a whitelist bundle with root and proofs.")
    return bundle


def proof_for(bundle: Dict[str, Any], address: str) -> List[str]:
    try:
        return bundle["proofs"][to_checksum_address(address)]
    except KeyError:
        raise RuntimeError(f"{address} is not in the whitelist bundle.") from None
