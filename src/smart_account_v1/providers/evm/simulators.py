"""
Simulate-and-Decode-Revert Strategies

The gas estimator and the quoter helpers need a single capability: run an
``eth_call`` and hand back either the return data or the revert data. Nodes
and web3 versions disagree on how revert data is surfaced, so the transport
is an interchangeable strategy behind ``CallSimulator``:

    - Web3CallSimulator: ``AsyncWeb3.eth.call``; revert data is read from
      ``ContractLogicError.data``.
    - JsonRpcCallSimulator: raw ``eth_call`` over ``httpx.AsyncClient``;
      revert data is read from the ``error.data`` field of the JSON-RPC
      envelope. Useful when the web3 middleware stack swallows revert data.

Both return a ``SimulationOutcome``; neither decodes the payload.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError

from ...engine.exceptions import JsonRpcError, RevertDecodingError
from ...schemas.bases import hex_to_bytes, to_hex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationOutcome:
    """
    Result of a simulated call.

    Attributes:
        success: True when the call returned, False when it reverted
        data: Return data on success, revert data otherwise
    """
    success: bool
    data: bytes


class CallSimulator(ABC):
    """Abstract ``eth_call`` transport returning return or revert data."""

    @abstractmethod
    async def call(self, to: str, data: bytes, from_address: Optional[str] = None) -> SimulationOutcome:
        """
        Simulate a call against the latest block.

        Args:
            to: Target contract address.
            data: Calldata.
            from_address: Optional ``from`` of the simulated call.

        Returns:
            SimulationOutcome: Return data or revert data.

        Raises:
            RevertDecodingError: When the call failed but no revert data
                could be extracted.
            JsonRpcError: When the transport returned an unusable envelope.
        """


def _build_call_params(to: str, data: bytes, from_address: Optional[str]) -> Dict[str, Any]:
    params: Dict[str, Any] = {"to": to, "data": to_hex(data)}
    if from_address is not None:
        params["from"] = from_address
    return params


def _extract_revert_hex(value: Any) -> Optional[str]:
    """Find a hex revert payload in the shapes nodes commonly return."""
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    if isinstance(value, dict):
        return _extract_revert_hex(value.get("data"))
    if isinstance(value, str):
        marker = value.find("0x")
        if marker == -1:
            return None
        candidate = value[marker:].split()[0]
        try:
            hex_to_bytes(candidate)
        except ValueError:
            return None
        return candidate
    return None


class Web3CallSimulator(CallSimulator):
    """
    ``CallSimulator`` backed by ``AsyncWeb3.eth.call``.

    web3 raises ``ContractLogicError`` (or a subclass such as
    ``ContractCustomError``) on revert; the raw revert payload is carried
    in its ``data`` attribute.
    """

    def __init__(self, w3: AsyncWeb3):
        self._w3 = w3

    async def call(self, to: str, data: bytes, from_address: Optional[str] = None) -> SimulationOutcome:
        params = _build_call_params(to, data, from_address)
        try:
            result = await self._w3.eth.call(params)
        except ContractLogicError as exc:
            revert_hex = _extract_revert_hex(exc.data)
            if revert_hex is None:
                raise RevertDecodingError(
                    f"Call to {to} reverted without usable revert data: {exc}",
                    payload=exc.data if exc.data is not None else str(exc),
                ) from exc
            logger.debug("Simulated call to %s reverted with %s", to, revert_hex[:10])
            return SimulationOutcome(success=False, data=hex_to_bytes(revert_hex))
        return SimulationOutcome(success=True, data=bytes(result))


class JsonRpcCallSimulator(CallSimulator):
    """
    ``CallSimulator`` issuing raw JSON-RPC ``eth_call`` requests via httpx.

    Args:
        rpc_url: JSON-RPC endpoint.
        timeout: Request timeout in seconds, applied by httpx.
        client: Optional pre-built ``httpx.AsyncClient`` (shared connection
            pool, custom transport). When omitted a client is opened per call.
    """

    _ids = itertools.count(1)

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._client = client

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self.rpc_url, json=payload)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.rpc_url, json=payload)

    async def call(self, to: str, data: bytes, from_address: Optional[str] = None) -> SimulationOutcome:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": "eth_call",
            "params": [_build_call_params(to, data, from_address), "latest"],
        }
        response = await self._post(payload)
        response.raise_for_status()
        try:
            envelope = response.json()
        except ValueError as exc:
            raise JsonRpcError(
                f"eth_call returned a non-JSON body: {response.text[:200]!r}",
                rpc_method="eth_call",
                error=response.text,
            ) from exc
        return self.parse_envelope(envelope)

    @staticmethod
    def parse_envelope(envelope: Any) -> SimulationOutcome:
        """
        Parse a decoded JSON-RPC ``eth_call`` response envelope.

        Args:
            envelope: The response body as returned by ``response.json()``.

        Returns:
            SimulationOutcome: ``result`` as success data, or ``error.data``
            as revert data.

        Raises:
            JsonRpcError: If the envelope is neither a result nor an error
                object, or carries an error without revert data.
            RevertDecodingError: If ``result`` is not a hex string.
        """
        if not isinstance(envelope, dict):
            raise JsonRpcError(
                f"eth_call returned an unexpected envelope: {envelope!r}",
                rpc_method="eth_call",
                error=envelope,
            )

        if "result" in envelope:
            result = envelope["result"]
            try:
                return SimulationOutcome(success=True, data=hex_to_bytes(result))
            except ValueError as exc:
                raise RevertDecodingError(
                    f"eth_call result is not hex data: {result!r}", payload=result
                ) from exc

        error = envelope.get("error")
        if error is None:
            raise JsonRpcError(
                f"eth_call envelope has neither result nor error: {envelope!r}",
                rpc_method="eth_call",
                error=envelope,
            )

        revert_hex = _extract_revert_hex(error.get("data")) if isinstance(error, dict) else None
        if revert_hex is None:
            message = error.get("message") if isinstance(error, dict) else error
            raise JsonRpcError(
                f"eth_call failed without revert data: {message}",
                rpc_method="eth_call",
                error=error,
            )
        return SimulationOutcome(success=False, data=hex_to_bytes(revert_hex))
