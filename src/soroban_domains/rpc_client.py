"""
Soroban RPC client.

This module wraps stellar_sdk's SorobanServerAsync for the calls the name
service needs: account lookup, transaction simulation, transaction
preparation and a health check. HTTP goes through httpx via a small
BaseAsyncClient adapter. SDK and transport failures are mapped onto
RpcError subclasses and raised, never retried.
"""

from typing import Any, Awaitable, Optional, Protocol, TypeVar, runtime_checkable

import httpx
from stellar_sdk import Account, TransactionEnvelope
from stellar_sdk.client.base_async_client import BaseAsyncClient
from stellar_sdk.client.response import Response
from stellar_sdk.exceptions import (
    AccountNotFoundException,
    BaseRequestError,
    PrepareTransactionException,
    SorobanRpcErrorResponse,
)
from stellar_sdk.soroban_rpc import SimulateTransactionResponse
from stellar_sdk.soroban_server_async import SorobanServerAsync

from .enums import ErrorCode
from .exceptions import (
    AccountNotFoundError,
    RpcResponseError,
    RpcTransportError,
    SimulationFailedError,
)


T = TypeVar("T")


@runtime_checkable
class LedgerRpc(Protocol):
    """Protocol for the RPC collaborator used by SorobanDomainsClient."""

    async def get_account(self, address: str) -> Account:
        """Load an account with its current sequence number."""
        ...

    async def simulate_transaction(
        self, tx: TransactionEnvelope
    ) -> SimulateTransactionResponse:
        """Dry-run a transaction without committing it."""
        ...

    async def prepare_transaction(
        self,
        tx: TransactionEnvelope,
        simulation: SimulateTransactionResponse,
    ) -> TransactionEnvelope:
        """Apply a successful simulation to a copy of tx."""
        ...


class HttpxAsyncClient(BaseAsyncClient):
    """
    BaseAsyncClient backed by httpx.AsyncClient.

    The httpx client is created on first request. Timeouts and connection
    failures raise RpcTransportError; HTTP error statuses raise
    RpcResponseError.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def get(
        self,
        url: str,
        params: Optional[dict] = None,
        max_content_size: Optional[int] = None,
    ) -> Response:
        return await self._send("GET", url, params=params)

    async def post(
        self,
        url: str,
        data: Optional[dict] = None,
        json_data: Optional[dict] = None,
    ) -> Response:
        return await self._send("POST", url, data=data, json=json_data)

    def stream(self, url: str, params: Optional[dict] = None):
        raise NotImplementedError("Soroban RPC does not use event streams")

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _send(self, method: str, url: str, **kwargs: Any) -> Response:
        client = self._ensure_client()
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise RpcTransportError(
                code=ErrorCode.TIMEOUT.value,
                message=f"RPC request timed out after {self._timeout}s",
                details={"rpc_url": url},
            ) from e
        except httpx.HTTPError as e:
            raise RpcTransportError(
                code=ErrorCode.NETWORK_ERROR.value,
                message=f"Connection error: {e}",
                details={"rpc_url": url},
            ) from e

        if response.status_code >= 400:
            raise RpcResponseError(
                code=ErrorCode.RPC_ERROR.value,
                message=f"RPC server error: {response.status_code}",
                details={"rpc_url": url, "http_status_code": response.status_code},
            )

        return Response(
            status_code=response.status_code,
            text=response.text,
            headers=dict(response.headers),
            url=str(response.url),
        )


class SorobanRpcClient:
    """
    Async client for a Soroban RPC endpoint.

    Usable as an async context manager; the underlying HTTP client is
    closed on exit.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the RPC client.

        Args:
            rpc_url: URL of the Soroban RPC server
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._rpc_url = rpc_url
        self._server = SorobanServerAsync(
            rpc_url,
            client=HttpxAsyncClient(timeout=timeout, transport=transport),
        )

    async def __aenter__(self) -> "SorobanRpcClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    async def _call(self, method: str, request: Awaitable[T]) -> T:
        """
        Await one SorobanServerAsync request.

        Raises:
            RpcResponseError: On JSON-RPC errors and malformed replies
        """
        try:
            return await request
        except SorobanRpcErrorResponse as e:
            raise RpcResponseError(
                code=ErrorCode.RPC_ERROR.value,
                message=e.message or "Unknown RPC error",
                details={"method": method, "rpc_code": e.code},
            ) from e
        except (BaseRequestError, ValueError) as e:
            raise RpcResponseError(
                code=ErrorCode.PARSE_ERROR.value,
                message=f"Failed to parse RPC response: {e}",
                details={"method": method},
            ) from e

    async def get_account(self, address: str) -> Account:
        """
        Load an account and its sequence number from the ledger.

        Args:
            address: Account strkey (G...)

        Returns:
            stellar_sdk Account ready to be used as transaction source

        Raises:
            AccountNotFoundError: If the ledger has no such account
        """
        try:
            return await self._call(
                "getLedgerEntries", self._server.load_account(address)
            )
        except AccountNotFoundException:
            raise AccountNotFoundError(address) from None

    async def simulate_transaction(
        self, tx: TransactionEnvelope
    ) -> SimulateTransactionResponse:
        """Simulate a transaction. Check `error` before using the results."""
        return await self._call(
            "simulateTransaction", self._server.simulate_transaction(tx)
        )

    async def prepare_transaction(
        self,
        tx: TransactionEnvelope,
        simulation: SimulateTransactionResponse,
    ) -> TransactionEnvelope:
        """
        Assemble tx with the footprint, auth entries and resource fee of a simulation.

        No request is sent; the simulation passed in is reused. The
        envelope passed in is left untouched.

        Raises:
            SimulationFailedError: If the simulation reported an error
            RpcResponseError: If the simulation carries no resource data
        """
        if not simulation.error and (
            simulation.transaction_data is None or simulation.min_resource_fee is None
        ):
            raise RpcResponseError(
                code=ErrorCode.PARSE_ERROR.value,
                message="Simulation has no resource data to assemble",
                details={"method": "simulateTransaction"},
            )

        try:
            return await self._call(
                "simulateTransaction",
                self._server.prepare_transaction(tx, simulation),
            )
        except PrepareTransactionException as e:
            raise SimulationFailedError(simulation.error) from e

    async def get_health(self) -> dict:
        """Query the server health status."""
        health = await self._call("getHealth", self._server.get_health())
        return health.model_dump(by_alias=True)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._server.close()
