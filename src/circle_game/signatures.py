"""
Entry signatures.

A participant authorizes an entry by signing keccak256(x, y, game) (packed,
uint256/uint256/address) with the EIP-191 personal-message prefix. Anyone
holding the signature may relay it; the recovered signer is the participant.
"""

from __future__ import annotations

from typing import Tuple, Union

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import keccak, to_canonical_address

from .errors import CoordinateOutOfBounds, InvalidSignature
from .geometry import Position
from .project_constants import MAX_AXIS

# secp256k1 group order
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2

UINT256_MAX = 2**256 - 1

SignatureLike = Union[bytes, str, Tuple[int, int, int]]


def entry_digest(x: int, y: int, game_address: str) -> bytes:
    for axis, value in (("x", x), ("y", y)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{axis} must be an int, got {type(value).__name__}")
        if not 0 <= value <= UINT256_MAX:
            raise CoordinateOutOfBounds(axis, value, MAX_AXIS)
    packed = x.to_bytes(32, "big") + y.to_bytes(32, "big") + to_canonical_address(game_address)
    return keccak(packed)


def split_signature(signature: SignatureLike) -> Tuple[int, int, int]:
    """Normalize a signature to (v, r, s) with v in {27, 28}."""
    if isinstance(signature, tuple):
        if len(signature) != 3:
            raise InvalidSignature("Signature tuple must be (v, r, s).")
        try:
            v, r, s = (int(part) for part in signature)
        except (TypeError, ValueError) as e:
            raise InvalidSignature(f"Signature tuple is not numeric: {e}") from e
    else:
        if isinstance(signature, str):
            text = signature[2:] if signature.startswith(("0x", "0X")) else signature
            try:
                raw = bytes.fromhex(text)
            except ValueError as e:
                raise InvalidSignature(f"Signature is not valid hex: {e}") from e
        elif isinstance(signature, (bytes, bytearray)):
            raw = bytes(signature)
        else:
            raise InvalidSignature(f"Unsupported signature type: {type(signature).__name__}")
        if len(raw) != 65:
            raise InvalidSignature(f"Signature must be 65 bytes, got {len(raw)}.")
        r = int.from_bytes(raw[0:32], "big")
        s = int.from_bytes(raw[32:64], "big")
        v = raw[64]

    if v in (0, 1):
        v += 27
    if v not in (27, 28):
        raise InvalidSignature(f"Invalid recovery id v={v}.")
    if not 0 < r < SECP256K1_N:
        raise InvalidSignature("Signature r is out of range.")
    if not 0 < s <= SECP256K1_HALF_N:
        # High-s encodings are a second valid form of the same signature.
        raise InvalidSignature("Signature s is not canonical (malleable).")
    return v, r, s


def recover(digest: bytes, signature: SignatureLike) -> str:
    """Recover the checksum address that signed the prefixed ``digest``."""
    if len(digest) != 32:
        raise InvalidSignature(f"Digest must be 32 bytes, got {len(digest)}.")
    vrs = split_signature(signature)
    try:
        return Account.recover_message(encode_defunct(primitive=digest), vrs=vrs)
    except (BadSignature, ValidationError, ValueError) as e:
        raise InvalidSignature(f"Signature recovery failed: {e}") from e


def sign_entry(private_key: Union[str, bytes], position: Position, game_address: str) -> bytes:
    digest = entry_digest(position.x, position.y, game_address)
    signed = Account.sign_message(encode_defunct(primitive=digest), private_key=private_key)
    return bytes(signed.signature)
