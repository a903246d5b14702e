from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Optional, Protocol

import httpx
from eth_utils import to_checksum_address


class TokenLedger(Protocol):
    def balance_of(self, owner: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...


class InMemoryTokenLedger:
    """Local fungible-token ledger; used by tests and offline runs."""

    def __init__(self) -> None:
        self._balances: Dict[str, int] = defaultdict(int)

    def mint(self, owner: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Cannot mint a negative amount.")
        self._balances[to_checksum_address(owner)] += amount

    def balance_of(self, owner: str) -> int:
        return self._balances.get(to_checksum_address(owner), 0)

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        sender = to_checksum_address(sender)
        to = to_checksum_address(to)
        if amount < 0 or self._balances.get(sender, 0) < amount:
            return False
        self._balances[sender] -= amount
        self._balances[to] += amount
        return True


class RpcTokenLedger:
    """JSON-RPC client for a token custody service."""

    def __init__(
        self,
        rpc_url: str,
        token: str,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.token = to_checksum_address(token)
        self.client = httpx.Client(timeout=timeout_s, transport=transport)

    def close(self) -> None:
        self.client.close()

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data

    def balance_of(self, owner: str) -> int:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "token_balanceOf",
            "params": [self.token, to_checksum_address(owner)],
        }
        data = self._post(payload)
        if data.get("result") is None:
            raise RuntimeError(f"Balance not available for {owner}")
        # Amounts may exceed 2**53; the service sends them as strings.
        return int(data["result"])

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "token_transfer",
            "params": [
                self.token,
                to_checksum_address(sender),
                to_checksum_address(to),
                str(amount),
            ],
        }
        data = self._post(payload)
        return bool(data.get("result"))
