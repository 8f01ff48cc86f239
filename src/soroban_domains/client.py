"""
Soroban Domains client.

This module provides the async client that resolves domains, reads and
writes domain attributes, and manages reverse domains. Every operation:

1. checks that the contract id it needs is configured,
2. encodes its arguments (so bad input fails before any network call),
3. loads the source account and simulates a contract call through the RPC.

Read operations decode the simulated return value. Write operations return
an assembled, unsigned transaction that the caller signs and submits. When
the simulation reports archived ledger entries a WARN entry is logged and
PreparedTransaction.needs_restore is set; such a transaction fails until the
entries are restored.
"""

from typing import Any, Optional, Sequence, Union

from stellar_sdk import TransactionEnvelope, scval
from stellar_sdk import xdr as stellar_xdr
from stellar_sdk.soroban_rpc import SimulateTransactionResponse

from . import node_hasher
from .audit_logger import AuditLogger
from .config import SDKConfig
from .domain_validator import is_valid_domain
from .enums import DefaultStorageKeys, LogLevel, RecordKey
from .exceptions import ConfigurationMissingError, SimulationFailedError, SorobanDomainsError
from .models import DomainStorageValue, PreparedTransaction, Record
from .record_codec import (
    decode_domain_data,
    decode_record,
    decode_reverse_domain,
    encode_node,
    encode_reverse_domain,
    encode_storage_value,
)
from .rpc_client import LedgerRpc, SorobanRpcClient
from .transactions import build_contract_call


StorageKey = Union[str, DefaultStorageKeys]


class SorobanDomainsClient:
    """
    Async client for the Soroban Domains contracts.

    The configuration is immutable and shared by every call. When no RPC
    collaborator is given, a SorobanRpcClient is created from config.rpc_url
    on first use and closed with the client.
    """

    hash = staticmethod(node_hasher.hash)
    parse_domain = staticmethod(node_hasher.parse_domain)
    is_valid_domain = staticmethod(is_valid_domain)

    def __init__(
        self,
        config: SDKConfig,
        rpc: Optional[LedgerRpc] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Contract ids, network and transaction defaults
            rpc: Optional RPC collaborator (defaults to SorobanRpcClient)
            logger: Optional audit logger for call logging
        """
        self._config = config
        self._rpc = rpc
        self._owns_rpc = False
        self._logger = logger

    async def __aenter__(self) -> "SorobanDomainsClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def config(self) -> SDKConfig:
        """Get the client configuration."""
        return self._config

    async def close(self) -> None:
        """Close the RPC client if this client created it."""
        if self._owns_rpc and isinstance(self._rpc, SorobanRpcClient):
            await self._rpc.close()
            self._rpc = None
            self._owns_rpc = False

    # -- registry --------------------------------------------------------

    async def search_domain(
        self,
        domain: str,
        sub_domain: Optional[str] = None,
    ) -> Record:
        """
        Look up the record of a domain or subdomain.

        The labels are lowercased before hashing but not validated.

        Args:
            domain: Second level label, e.g. 'stellar'
            sub_domain: Optional subdomain label, e.g. 'payments'

        Returns:
            Record holding a Domain or a SubDomain

        Raises:
            ConfigurationMissingError: If no registry contract id is configured
            DomainNotFoundError: If the registry has no such record
            SimulationFailedError: If the RPC reports a simulation error
        """
        contract_id = self._require_setting(
            "registry_contract_id",
            "Registry contract id was not provided",
        )

        node = node_hasher.node_bytes(
            domain.lower(),
            sub_domain=sub_domain.lower() if sub_domain else None,
        )
        record_key = scval.to_vec([
            scval.to_symbol(
                RecordKey.SUB_RECORD.value if sub_domain else RecordKey.RECORD.value
            ),
            scval.to_bytes(node),
        ])

        raw = await self._read(contract_id, "record", [record_key])
        return decode_record(raw)

    # -- key-value database ----------------------------------------------

    async def get_domain_data(self, node: str, key: StorageKey) -> DomainStorageValue:
        """
        Read an attribute stored against a domain node.

        Args:
            node: Hex encoded domain node (see parse_domain)
            key: Attribute key, e.g. 'WEBSITE'

        Returns:
            The stored value with its type tag

        Raises:
            ConfigurationMissingError: If no key-value contract id is configured
            DomainDataNotFoundError: If nothing is stored under the key
        """
        contract_id = self._require_setting(
            "key_value_contract_id",
            "KeyValue Database contract id was not provided",
        )
        parameters = [encode_node(node), scval.to_symbol(_key_name(key))]

        raw = await self._read(contract_id, "get", parameters)
        return decode_domain_data(raw)

    async def set_domain_data(
        self,
        node: str,
        key: StorageKey,
        value: Union[DomainStorageValue, tuple, list],
        source: str,
    ) -> PreparedTransaction:
        """
        Prepare a transaction storing an attribute against a domain node.

        Args:
            node: Hex encoded domain node
            key: Attribute key
            value: DomainStorageValue or (tag, payload) with tag Bytes, Number or String
            source: Account that will sign the transaction (the domain owner)

        Returns:
            Assembled, unsigned transaction and its simulation; check
            needs_restore before submitting it

        Raises:
            UnsupportedValueTypeError: If the value type is not supported
        """
        contract_id = self._require_setting(
            "key_value_contract_id",
            "KeyValue Database contract id was not provided",
        )
        parameters = [
            encode_node(node),
            scval.to_symbol(_key_name(key)),
            encode_storage_value(value),
        ]

        return await self._prepare(contract_id, "set", parameters, source)

    async def remove_domain_data(
        self,
        node: str,
        key: StorageKey,
        source: str,
    ) -> PreparedTransaction:
        """Prepare a transaction removing an attribute from a domain node."""
        contract_id = self._require_setting(
            "key_value_contract_id",
            "KeyValue Database contract id was not provided",
        )
        parameters = [encode_node(node), scval.to_symbol(_key_name(key))]

        return await self._prepare(contract_id, "remove", parameters, source)

    # -- reverse registrar -----------------------------------------------

    async def set_reverse_domain(
        self,
        address: str,
        domain: Optional[str],
        source: str,
    ) -> PreparedTransaction:
        """
        Prepare a transaction setting or clearing the reverse domain of an address.

        Args:
            address: Address the reverse domain is set for
            domain: Domain such as 'example.xlm', or None to clear it
            source: Account that will sign the transaction

        Returns:
            Assembled, unsigned transaction and its simulation; check
            needs_restore before submitting it

        Raises:
            ConfigurationMissingError: If no reverse registrar contract id is configured
            InvalidDomainFormatError: If the domain has fewer than two labels
            SimulationFailedError: If the RPC reports a simulation error
        """
        contract_id = self._require_setting(
            "reverse_registrar_contract_id",
            "Reverse Registrar contract id was not provided",
        )
        parameters = [scval.to_address(address), encode_reverse_domain(domain)]

        return await self._prepare(contract_id, "set", parameters, source)

    async def get_reverse_domain(self, address: str) -> str:
        """
        Look up the reverse domain of an address.

        Args:
            address: Address to look up

        Returns:
            The full domain name, e.g. 'example.xlm'

        Raises:
            ConfigurationMissingError: If no reverse registrar contract id is configured
            ReverseDomainNotFoundError: If no reverse domain is set for the address
            SimulationFailedError: If the RPC reports a simulation error
        """
        contract_id = self._require_setting(
            "reverse_registrar_contract_id",
            "Reverse Registrar contract id was not provided",
        )

        raw = await self._read(contract_id, "get", [scval.to_address(address)])
        return decode_reverse_domain(raw)

    # -- plumbing ----------------------------------------------------------

    def _require_setting(self, setting: str, message: str) -> str:
        value = getattr(self._config, setting)
        if not value:
            raise ConfigurationMissingError(setting, message)
        return value

    def _require_rpc(self) -> LedgerRpc:
        if self._rpc is None:
            rpc_url = self._require_setting("rpc_url", "A URL of the RPC was not provided")
            self._rpc = SorobanRpcClient(rpc_url)
            self._owns_rpc = True
        return self._rpc

    async def _simulate(
        self,
        contract_id: str,
        function_name: str,
        parameters: Sequence[stellar_xdr.SCVal],
        source: str,
    ) -> tuple[TransactionEnvelope, SimulateTransactionResponse]:
        rpc = self._require_rpc()
        context = {
            "contract_id": contract_id,
            "function": function_name,
            "source": source,
        }
        self._log(LogLevel.INFO, f"Simulating {function_name} call", context)

        try:
            account = await rpc.get_account(source)
            tx = build_contract_call(
                account, contract_id, function_name, parameters, self._config
            )
            simulation = await rpc.simulate_transaction(tx)
            if simulation.error:
                raise SimulationFailedError(simulation.error, details=context)
        except SorobanDomainsError as e:
            self._log_failure(function_name, e, context)
            raise

        self._log(
            LogLevel.DEBUG,
            f"Simulated {function_name} call",
            {**context, "latest_ledger": simulation.latest_ledger},
        )
        if simulation.restore_preamble is not None:
            self._log(
                LogLevel.WARN,
                f"{function_name} call touches archived ledger entries",
                {
                    **context,
                    "restore_min_resource_fee": simulation.restore_preamble.min_resource_fee,
                },
            )
        return tx, simulation

    async def _read(
        self,
        contract_id: str,
        function_name: str,
        parameters: Sequence[stellar_xdr.SCVal],
    ) -> Any:
        _, simulation = await self._simulate(
            contract_id, function_name, parameters, self._config.simulation_account
        )
        if not simulation.results:
            return None
        return scval.to_native(simulation.results[0].xdr)

    async def _prepare(
        self,
        contract_id: str,
        function_name: str,
        parameters: Sequence[stellar_xdr.SCVal],
        source: str,
    ) -> PreparedTransaction:
        tx, simulation = await self._simulate(contract_id, function_name, parameters, source)
        try:
            assembled = await self._require_rpc().prepare_transaction(tx, simulation)
        except SorobanDomainsError as e:
            self._log_failure(
                function_name,
                e,
                {"contract_id": contract_id, "function": function_name, "source": source},
            )
            raise
        return PreparedTransaction(tx=assembled, simulation=simulation)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        """Log a message if logger is available."""
        if self._logger:
            self._logger.log(level, "SorobanDomainsClient", message, data)

    def _log_failure(self, function_name: str, error: Exception, context: dict) -> None:
        if self._logger:
            self._logger.log_error(
                "SorobanDomainsClient",
                f"{function_name} call failed",
                error=error,
                additional_data=context,
            )


def _key_name(key: StorageKey) -> str:
    if isinstance(key, DefaultStorageKeys):
        return key.value
    return key
