import threading

import pytest
from eth_account import Account

from circle_game.errors import (
    PositionAlreadySet,
    PositionNotUnique,
    WinningCircleAlreadySet,
    WrongPhase,
    ZeroCoordinate,
)
from circle_game.geometry import Position, WinningCircle
from circle_game.phase import Phase, PhaseController
from circle_game.registry import PositionRegistry


@pytest.fixture
def phases():
    return PhaseController()


@pytest.fixture
def registry(phases):
    return PositionRegistry(phases)


def test_assign_and_lookup(registry, alice):
    registry.assign(alice.address.lower(), Position(10, 10))
    assert registry.position_of(alice.address) == Position(10, 10)
    assert registry.owner_of(Position(10, 10)) == alice.address
    assert not registry.is_unique(Position(10, 10))
    assert registry.is_unique(Position(10, 11))


def test_duplicate_identity_rejected(registry, alice):
    registry.assign(alice.address, Position(10, 10))
    with pytest.raises(PositionAlreadySet):
        registry.assign(alice.address, Position(20, 20))
    assert registry.position_of(alice.address) == Position(10, 10)


def test_duplicate_identity_checked_before_bounds(registry, alice):
    registry.assign(alice.address, Position(10, 10))
    with pytest.raises(PositionAlreadySet):
        registry.assign(alice.address, Position(0, 0))


def test_duplicate_coordinates_rejected(registry, alice, bob):
    registry.assign(alice.address, Position(10, 10))
    with pytest.raises(PositionNotUnique):
        registry.assign(bob.address, Position(10, 10))
    assert registry.position_of(bob.address) is None
    registry.assign(bob.address, Position(10, 11))
    assert len(registry) == 2


def test_invalid_position_leaves_no_trace(registry, alice):
    with pytest.raises(ZeroCoordinate):
        registry.assign(alice.address, Position(0, 0))
    assert registry.position_of(alice.address) is None
    assert registry.is_unique(Position(0, 0))


def test_is_unique_has_no_side_effects(registry):
    assert registry.is_unique(Position(5, 5))
    assert registry.is_unique(Position(5, 5))
    assert len(registry) == 0


def test_position_of_unknown_or_garbage(registry, alice):
    assert registry.position_of(alice.address) is None
    assert registry.position_of("nope") is None


def test_assign_requires_entry_phase(phases, registry, alice):
    phases.commit_winning_circle(WinningCircle(50, 50, 20))
    assert phases.phase is Phase.RESOLVED
    with pytest.raises(WrongPhase):
        registry.assign(alice.address, Position(10, 10))


def test_circle_commits_once(phases):
    phases.commit_winning_circle(WinningCircle(50, 50, 20))
    with pytest.raises(WinningCircleAlreadySet):
        phases.commit_winning_circle(WinningCircle(10, 10, 5))
    assert phases.winning_circle == WinningCircle(50, 50, 20)


def test_invalid_circle_keeps_entry_phase(phases):
    with pytest.raises(ZeroCoordinate):
        phases.commit_winning_circle(WinningCircle(0, 0, 1))
    assert phases.phase is Phase.ENTRY
    assert phases.winning_circle is None


def test_entries_sorted_by_address(registry):
    accounts = [Account.from_key((n + 40).to_bytes(32, "big")) for n in range(5)]
    for i, acct in enumerate(accounts, start=1):
        registry.assign(acct.address, Position(i, i))
    addrs = [addr for addr, _ in registry.entries()]
    assert addrs == sorted(addrs)


def test_concurrent_claims_on_one_coordinate(registry):
    accounts = [Account.from_key((n + 100).to_bytes(32, "big")) for n in range(16)]
    barrier = threading.Barrier(len(accounts))
    outcomes = []

    def attempt(acct):
        barrier.wait()
        try:
            registry.assign(acct.address, Position(7, 7))
            outcomes.append("ok")
        except PositionNotUnique:
            outcomes.append("taken")

    threads = [threading.Thread(target=attempt, args=(a,)) for a in accounts]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("taken") == len(accounts) - 1
