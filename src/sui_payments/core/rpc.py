"""
JSON-RPC client for a Sui full node.
"""

from __future__ import annotations

import base64
import itertools
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests

from .errors import RpcError
from .transaction import CoinRef

__all__ = ["SuiRpcClient"]

_SUI_COIN_TYPE = "0x2::sui::SUI"


class SuiRpcClient:
    """
    Thin wrapper around the handful of full-node methods a payment needs.

    Calls are not retried; transport timeouts come from ``timeout``.
    """

    def __init__(
        self,
        url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ) -> None:
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout
        self._ids = itertools.count(1)

    def call(self, method: str, params: Sequence[Any]) -> Any:
        body = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params),
        }
        logging.debug("Calling %s on %s", method, self.url)
        response = self.session.post(self.url, json=body, timeout=self.timeout)
        if response.status_code >= 400:
            raise RpcError(
                f"Full node responded with {response.status_code}: {response.text}"
            )
        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            raise RpcError(
                f"Failed to parse JSON from full node at {self.url}: {response.text}"
            ) from exc

        error = payload.get("error")
        if error:
            if isinstance(error, Mapping):
                raise RpcError(str(error.get("message", error)), code=error.get("code"))
            raise RpcError(str(error))
        if "result" not in payload:
            raise RpcError(f"Full node response to {method} has no result: {payload}")
        return payload["result"]

    def get_coins(self, owner: str, coin_type: str = _SUI_COIN_TYPE) -> List[CoinRef]:
        coins: List[CoinRef] = []
        cursor = None
        while True:
            page = self.call("suix_getCoins", [owner, coin_type, cursor, None])
            coins.extend(CoinRef.from_rpc(item) for item in page.get("data", []))
            cursor = page.get("nextCursor")
            if not page.get("hasNextPage") or cursor is None:
                return coins

    def get_reference_gas_price(self) -> int:
        return int(self.call("suix_getReferenceGasPrice", []))

    def get_object(self, object_id: str) -> Dict[str, Any]:
        result = self.call("sui_getObject", [object_id, {"showOwner": True}])
        data = result.get("data")
        if not data:
            raise RpcError(f"Object {object_id} not found: {result.get('error')}")
        return data

    def dry_run(self, tx_bytes: bytes) -> Dict[str, Any]:
        return self.call(
            "sui_dryRunTransactionBlock",
            [base64.b64encode(tx_bytes).decode("ascii")],
        )

    def execute(
        self,
        tx_bytes: bytes,
        signatures: Sequence[str],
        *,
        show_effects: bool = True,
        show_events: bool = True,
    ) -> Dict[str, Any]:
        options = {"showEffects": show_effects, "showEvents": show_events}
        return self.call(
            "sui_executeTransactionBlock",
            [
                base64.b64encode(tx_bytes).decode("ascii"),
                list(signatures),
                options,
                "WaitForLocalExecution",
            ],
        )
