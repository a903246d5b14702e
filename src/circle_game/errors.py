from __future__ import annotations


class GameError(RuntimeError):
    """Base class for every rejected game operation."""


class AuthorityRequired(GameError):
    pass


class ZeroAuthority(GameError):
    pass


class ZeroTokenHandle(GameError):
    pass


class ZeroWhitelistRoot(GameError):
    pass


class ZeroGameAddress(GameError):
    pass


class WrongPhase(GameError):
    pass


class PositionAlreadySet(GameError):
    pass


class ZeroCoordinate(GameError):
    pass


class CoordinateOutOfBounds(GameError):
    def __init__(self, axis: str, value: int, limit: int) -> None:
        super().__init__(f"{axis}={value} is outside [1, {limit}]")
        self.axis = axis
        self.value = value
        self.limit = limit


class PositionNotUnique(GameError):
    pass


class NotWhitelisted(GameError):
    pass


class InvalidSignature(GameError):
    pass


class WinningCircleAlreadySet(GameError):
    pass


class WinningCircleNotSet(GameError):
    pass


class InsufficientPayoutBalance(GameError):
    pass


class TransferFailed(GameError):
    pass
