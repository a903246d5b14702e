import pytest
from eth_account import Account

from circle_game.game import Game
from circle_game.ledger import InMemoryTokenLedger
from circle_game.merkle import MerkleTree
from circle_game.project_constants import PAYOUT_AMOUNT

GAME_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
OTHER_GAME_ADDRESS = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
TOKEN_ADDRESS = "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0"


def _account(n: int):
    return Account.from_key(n.to_bytes(32, "big"))


@pytest.fixture
def authority():
    return _account(1)


@pytest.fixture
def alice():
    return _account(2)


@pytest.fixture
def bob():
    return _account(3)


@pytest.fixture
def mallory():
    return _account(4)


@pytest.fixture
def tree(alice, bob):
    return MerkleTree([alice.address, bob.address])


@pytest.fixture
def ledger():
    ledger = InMemoryTokenLedger()
    ledger.mint(GAME_ADDRESS, 10 * PAYOUT_AMOUNT)
    return ledger


@pytest.fixture
def game(authority, tree, ledger):
    return Game(
        authority=authority.address,
        token=TOKEN_ADDRESS,
        whitelist_root=tree.root,
        ledger=ledger,
        address=GAME_ADDRESS,
    )
