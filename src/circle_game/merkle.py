"""
Merkle whitelist.

Leaves are keccak256 of the 20 raw address bytes. Each internal node hashes
its two children sorted (smaller first), so a proof needs no left/right flags.
Leaves are de-duplicated and sorted before building, which makes the root
independent of the order of the input list. An odd node at the end of a level
is carried up unchanged.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Union

from eth_utils import is_address, keccak, to_canonical_address, to_checksum_address

HashLike = Union[bytes, str]


def address_leaf(identity: str) -> bytes:
    return keccak(to_canonical_address(identity))


def hash_pair(a: bytes, b: bytes) -> bytes:
    if b < a:
        a, b = b, a
    return keccak(a + b)


def _as_hash(value: HashLike) -> Optional[bytes]:
    """Return 32 raw bytes, or None when the value cannot be a keccak hash."""
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        text = value[2:] if value.startswith(("0x", "0X")) else value
        try:
            raw = bytes.fromhex(text)
        except ValueError:
            return None
    else:
        return None
    return raw if len(raw) == 32 else None


class MerkleTree:
    def __init__(self, identities: Iterable[str]) -> None:
        members = sorted({to_checksum_address(a) for a in identities})
        if not members:
            raise ValueError("Cannot build a whitelist from an empty address list.")

        self._leaf_of: Dict[str, bytes] = {a: address_leaf(a) for a in members}
        level = sorted(set(self._leaf_of.values()))
        self._index: Dict[bytes, int] = {leaf: i for i, leaf in enumerate(level)}
        self._levels: List[List[bytes]] = [level]
        while len(level) > 1:
            nxt = [hash_pair(level[i], level[i + 1]) for i in range(0, len(level) - 1, 2)]
            if len(level) % 2:
                nxt.append(level[-1])
            self._levels.append(nxt)
            level = nxt

    @property
    def root(self) -> bytes:
        return self._levels[-1][0]

    @property
    def hex_root(self) -> str:
        return "0x" + self.root.hex()

    @property
    def members(self) -> List[str]:
        return list(self._leaf_of)

    def __contains__(self, identity: object) -> bool:
        if not isinstance(identity, str) or not is_address(identity):
            return False
        return to_checksum_address(identity) in self._leaf_of

    def proof(self, identity: str) -> List[bytes]:
        """Sibling hashes from leaf to root. Raises KeyError for non-members."""
        leaf = self._leaf_of[to_checksum_address(identity)]
        idx = self._index[leaf]
        out: List[bytes] = []
        for level in self._levels[:-1]:
            sibling = idx ^ 1
            if sibling < len(level):
                out.append(level[sibling])
            idx //= 2
        return out

    def hex_proof(self, identity: str) -> List[str]:
        return ["0x" + p.hex() for p in self.proof(identity)]


def build_root(identities: Iterable[str]) -> bytes:
    return MerkleTree(identities).root


def verify(root: HashLike, identity: str, proof: Sequence[HashLike]) -> bool:
    """True iff ``identity`` with ``proof`` folds up to ``root``. Never raises."""
    expected = _as_hash(root)
    if expected is None or not isinstance(proof, (list, tuple)):
        return False
    if not isinstance(identity, str) or not is_address(identity):
        return False
    try:
        node = address_leaf(identity)
    except ValueError:
        return False

    for sibling in proof:
        raw = _as_hash(sibling)
        if raw is None:
            return False
        node = hash_pair(node, raw)
    return node == expected
