"""
Call Simulator Test Suite

Tests for the interchangeable eth_call transports:
- Web3CallSimulator: revert data from ContractLogicError
- JsonRpcCallSimulator: revert data from the JSON-RPC error envelope,
  driven through httpx.MockTransport

Usage:
    pytest test_simulators.py -v
"""

import json
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest
from web3.exceptions import ContractLogicError

from test_mocks import MOCK_ENTRYPOINT_ADDRESS, MOCK_SMART_ACCOUNT, create_validation_result_revert

from smart_account_v1.engine.exceptions import JsonRpcError, RevertDecodingError
from smart_account_v1.providers.evm.simulators import JsonRpcCallSimulator, Web3CallSimulator

REVERT = create_validation_result_revert()
REVERT_HEX = "0x" + REVERT.hex()
RPC_URL = "http://localhost:8545"


def create_web3(side_effect=None, return_value=None) -> Mock:
    web3 = Mock()
    web3.eth = Mock()
    web3.eth.call = AsyncMock(side_effect=side_effect, return_value=return_value)
    return web3


def create_json_rpc_simulator(handler) -> JsonRpcCallSimulator:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return JsonRpcCallSimulator(RPC_URL, client=client)


def json_response(payload) -> httpx.Response:
    return httpx.Response(200, json=payload)


class TestWeb3CallSimulator:
    """Test suite for the web3-backed simulator."""

    @pytest.mark.asyncio
    async def test_success(self):
        web3 = create_web3(return_value=b"\x01\x02")

        outcome = await Web3CallSimulator(web3).call(MOCK_ENTRYPOINT_ADDRESS, b"\xaa")

        assert outcome.success is True
        assert outcome.data == b"\x01\x02"
        params = web3.eth.call.call_args[0][0]
        assert params == {"to": MOCK_ENTRYPOINT_ADDRESS, "data": "0xaa"}

    @pytest.mark.asyncio
    async def test_from_address_is_forwarded(self):
        web3 = create_web3(return_value=b"")

        await Web3CallSimulator(web3).call(MOCK_ENTRYPOINT_ADDRESS, b"", from_address=MOCK_SMART_ACCOUNT)

        assert web3.eth.call.call_args[0][0]["from"] == MOCK_SMART_ACCOUNT

    @pytest.mark.asyncio
    async def test_revert_hex_data(self):
        """Revert data carried as a hex string."""
        web3 = create_web3(side_effect=ContractLogicError("execution reverted", data=REVERT_HEX))

        outcome = await Web3CallSimulator(web3).call(MOCK_ENTRYPOINT_ADDRESS, b"")

        assert outcome.success is False
        assert outcome.data == REVERT

    @pytest.mark.asyncio
    async def test_revert_nested_data(self):
        """Some nodes nest the payload in a {"data": ...} object."""
        web3 = create_web3(
            side_effect=ContractLogicError("execution reverted", data={"message": "reverted", "data": REVERT_HEX})
        )

        outcome = await Web3CallSimulator(web3).call(MOCK_ENTRYPOINT_ADDRESS, b"")

        assert outcome.data == REVERT

    @pytest.mark.asyncio
    async def test_revert_without_data(self):
        """A revert with no payload cannot be decoded."""
        web3 = create_web3(side_effect=ContractLogicError("execution reverted"))

        with pytest.raises(RevertDecodingError):
            await Web3CallSimulator(web3).call(MOCK_ENTRYPOINT_ADDRESS, b"")

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self):
        web3 = create_web3(side_effect=ConnectionError("refused"))

        with pytest.raises(ConnectionError):
            await Web3CallSimulator(web3).call(MOCK_ENTRYPOINT_ADDRESS, b"")


class TestJsonRpcCallSimulator:
    """Test suite for the raw JSON-RPC simulator."""

    @pytest.mark.asyncio
    async def test_request_shape_and_result(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(json.loads(request.content))
            return json_response({"jsonrpc": "2.0", "id": 1, "result": "0xbeef"})

        simulator = create_json_rpc_simulator(handler)
        outcome = await simulator.call(MOCK_ENTRYPOINT_ADDRESS, b"\x01", from_address=MOCK_SMART_ACCOUNT)

        assert outcome.success is True
        assert outcome.data == b"\xbe\xef"
        body = requests[0]
        assert body["method"] == "eth_call"
        assert body["params"] == [
            {"to": MOCK_ENTRYPOINT_ADDRESS, "data": "0x01", "from": MOCK_SMART_ACCOUNT},
            "latest",
        ]

    @pytest.mark.asyncio
    async def test_error_data_is_revert(self):
        def handler(request):
            return json_response(
                {"jsonrpc": "2.0", "id": 1, "error": {"code": 3, "message": "execution reverted", "data": REVERT_HEX}}
            )

        outcome = await create_json_rpc_simulator(handler).call(MOCK_ENTRYPOINT_ADDRESS, b"")

        assert outcome.success is False
        assert outcome.data == REVERT

    @pytest.mark.asyncio
    async def test_nested_error_data(self):
        def handler(request):
            return json_response(
                {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "reverted", "data": {"data": REVERT_HEX}}}
            )

        outcome = await create_json_rpc_simulator(handler).call(MOCK_ENTRYPOINT_ADDRESS, b"")

        assert outcome.data == REVERT

    @pytest.mark.asyncio
    async def test_error_without_data(self):
        """An error envelope without revert data is a JsonRpcError."""
        def handler(request):
            return json_response({"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "method not found"}})

        with pytest.raises(JsonRpcError) as exc_info:
            await create_json_rpc_simulator(handler).call(MOCK_ENTRYPOINT_ADDRESS, b"")

        assert exc_info.value.rpc_method == "eth_call"
        assert exc_info.value.error["code"] == -32601

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>bad gateway</html>")

        with pytest.raises(JsonRpcError) as exc_info:
            await create_json_rpc_simulator(handler).call(MOCK_ENTRYPOINT_ADDRESS, b"")

        assert exc_info.value.error == "<html>bad gateway</html>"
        assert "bad gateway" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_envelope_decoded_by_response_json(self):
        """The simulator hands the httpx-decoded envelope to parse_envelope."""
        envelope = {"jsonrpc": "2.0", "id": 1, "result": "0x01"}

        def handler(request):
            return json_response(envelope)

        with patch.object(
            JsonRpcCallSimulator, "parse_envelope", wraps=JsonRpcCallSimulator.parse_envelope
        ) as parse:
            outcome = await create_json_rpc_simulator(handler).call(MOCK_ENTRYPOINT_ADDRESS, b"")

        parse.assert_called_once_with(envelope)
        assert outcome.data == b"\x01"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request):
            return httpx.Response(500, text="internal error")

        with pytest.raises(httpx.HTTPStatusError):
            await create_json_rpc_simulator(handler).call(MOCK_ENTRYPOINT_ADDRESS, b"")


class TestParseEnvelope:
    """Test suite for envelope parsing edge cases."""

    def test_neither_result_nor_error(self):
        with pytest.raises(JsonRpcError):
            JsonRpcCallSimulator.parse_envelope({"jsonrpc": "2.0", "id": 1})

    def test_non_object_envelope(self):
        with pytest.raises(JsonRpcError):
            JsonRpcCallSimulator.parse_envelope([1, 2])

    def test_non_hex_result(self):
        with pytest.raises(RevertDecodingError):
            JsonRpcCallSimulator.parse_envelope({"jsonrpc": "2.0", "id": 1, "result": "not-hex"})

    def test_revert_data_inside_message_string(self):
        """A string error.data with a prefix still yields the payload."""
        envelope = {"error": {"code": 3, "data": f"Reverted {REVERT_HEX}"}}

        outcome = JsonRpcCallSimulator.parse_envelope(envelope)

        assert outcome.data == REVERT
