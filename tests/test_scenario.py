import json

import pytest

from circle_game import cli
from circle_game.config import Settings
from circle_game.geometry import Position
from circle_game.phase import Phase
from circle_game.project_constants import PAYOUT_AMOUNT
from circle_game.scenario import run_scenario
from circle_game.signatures import sign_entry

from conftest import GAME_ADDRESS, TOKEN_ADDRESS


@pytest.fixture
def scenario(authority, alice, bob, mallory):
    return {
        "game": GAME_ADDRESS,
        "authority": authority.address,
        "token": TOKEN_ADDRESS,
        "whitelist": [alice.address, bob.address],
        "custody": str(4 * PAYOUT_AMOUNT),
        "entries": [
            {"address": alice.address, "x": 40, "y": 40},
            {
                "address": bob.address,
                "x": 40,
                "y": 40,
                "signature": "0x" + sign_entry(bob.key, Position(40, 40), GAME_ADDRESS).hex(),
            },
            {
                "address": bob.address,
                "x": 45,
                "y": 45,
                "signature": "0x" + sign_entry(bob.key, Position(45, 45), GAME_ADDRESS).hex(),
            },
            {"address": mallory.address, "x": 50, "y": 50},
        ],
        "circle": {"x": 50, "y": 50, "radius": 20},
        "claims": [[alice.address, bob.address, mallory.address], [alice.address]],
    }


def test_run_scenario(scenario, alice, bob):
    result = run_scenario(scenario)
    game = result.game

    assert game.phase is Phase.RESOLVED
    assert game.position_of(bob.address) == Position(45, 45)
    assert [r["error"] for r in result.rejected] == ["PositionNotUnique", "NotWhitelisted"]
    assert result.claims[0].paid == [alice.address, bob.address]
    assert result.claims[1].already_paid == [alice.address]
    assert result.ledger.balance_of(GAME_ADDRESS) == 2 * PAYOUT_AMOUNT


def test_run_scenario_records_oversized_relayed_entry(scenario, alice, bob):
    scenario["entries"].insert(
        0, {"address": bob.address, "x": 2**256, "y": 1, "signature": "0x" + "01" * 65}
    )
    result = run_scenario(scenario)

    assert result.rejected[0]["error"] == "CoordinateOutOfBounds"
    assert [r["error"] for r in result.rejected[1:]] == ["PositionNotUnique", "NotWhitelisted"]
    assert result.game.position_of(alice.address) == Position(40, 40)
    assert result.game.position_of(bob.address) == Position(45, 45)


def test_run_scenario_reference_policy(scenario, alice):
    result = run_scenario(scenario, pay_once=False)
    assert result.claims[1].paid == [alice.address]
    assert result.ledger.balance_of(alice.address) == 2 * PAYOUT_AMOUNT


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("LEDGER_RPC_URL", "http://ledger.local")
    monkeypatch.setenv("ENTRY_SIGNER_KEY", "0x" + "11" * 32)
    monkeypatch.setenv("CIRCLE_GAME_PAY_ONCE", "false")
    settings = Settings.from_env()
    assert settings.ledger_rpc_url == "http://ledger.local"
    assert settings.require_signer_key() == "0x" + "11" * 32
    assert settings.pay_once is False

    assert Settings.from_env(rpc_url_override="http://other").ledger_rpc_url == "http://other"


def test_settings_missing_values(monkeypatch):
    monkeypatch.setenv("LEDGER_RPC_URL", "")
    monkeypatch.setenv("ENTRY_SIGNER_KEY", "")
    monkeypatch.delenv("CIRCLE_GAME_PAY_ONCE", raising=False)
    settings = Settings.from_env()
    assert settings.pay_once is True
    with pytest.raises(RuntimeError, match="LEDGER_RPC_URL"):
        settings.require_rpc_url()
    with pytest.raises(RuntimeError, match="ENTRY_SIGNER_KEY"):
        settings.require_signer_key()


def _run(argv, monkeypatch):
    monkeypatch.setattr("sys.argv", ["circle-game", *argv])
    with pytest.raises(SystemExit) as exc:
        cli.main()
    return exc.value.code


def test_cli_play_audit_verify(tmp_path, monkeypatch, scenario, capsys):
    monkeypatch.setenv("CIRCLE_GAME_PAY_ONCE", "true")
    scenario_path = tmp_path / "scenario.json"
    scenario_path.write_text(json.dumps(scenario), encoding="utf-8")
    state = tmp_path / "state.json"
    audit = tmp_path / "audit.json"

    assert _run(["play", "--scenario", str(scenario_path), "--out", str(state)], monkeypatch) == 0
    assert _run(["audit", "--state", str(state), "--out", str(audit)], monkeypatch) == 0
    assert _run(["verify", "--audit", str(audit)], monkeypatch) == 0
    assert "AUDIT VERIFIED" in capsys.readouterr().out


def test_cli_whitelist_and_verify_proof(tmp_path, monkeypatch, alice, bob, mallory, capsys):
    addresses = tmp_path / "whitelist.txt"
    addresses.write_text(f"{alice.address}\n{bob.address}\n", encoding="utf-8")
    bundle_path = tmp_path / "whitelist.json"

    assert _run(["whitelist", "--addresses", str(addresses), "--out", str(bundle_path)], monkeypatch) == 0
    bundle = json.loads(bundle_path.read_text(encoding="utf-8"))
    proof = ",".join(bundle["proofs"][alice.address])

    args = ["verify-proof", "--root", bundle["root"], "--address", alice.address, "--proof", proof]
    assert _run(args, monkeypatch) == 0
    args = ["verify-proof", "--root", bundle["root"], "--address", mallory.address, "--proof", proof]
    assert _run(args, monkeypatch) == 1


def test_cli_sign(monkeypatch, alice, capsys):
    monkeypatch.setenv("ENTRY_SIGNER_KEY", alice.key.hex())
    args = ["sign", "--game", GAME_ADDRESS, "--x", "12", "--y", "34"]
    assert _run(args, monkeypatch) == 0
    printed = capsys.readouterr().out.strip()
    assert printed == "0x" + sign_entry(alice.key, Position(12, 34), GAME_ADDRESS).hex()
