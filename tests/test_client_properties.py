"""
Tests for the Soroban Domains client.

The RPC collaborator is replaced by an in-memory fake so that every
operation can be checked for the calls it makes and the errors it raises.
"""

import asyncio
import io
from typing import Optional

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from stellar_sdk import Account, Address, SorobanDataBuilder, TransactionEnvelope, scval
from stellar_sdk import xdr as stellar_xdr
from stellar_sdk.soroban_rpc import SimulateTransactionResponse

from soroban_domains.audit_logger import AuditLogger
from soroban_domains.client import SorobanDomainsClient
from soroban_domains.config import SIMULATION_ACCOUNT, SDKConfig
from soroban_domains.enums import DefaultStorageKeys, ErrorCode, LogLevel, RecordType
from soroban_domains.exceptions import (
    ConfigurationMissingError,
    DomainDataNotFoundError,
    DomainNotFoundError,
    InvalidDomainFormatError,
    ReverseDomainNotFoundError,
    SimulationFailedError,
    UnknownValueTypeError,
    UnsupportedValueTypeError,
)
from soroban_domains.node_hasher import parse_domain
from soroban_domains.rpc_client import LedgerRpc


ADDRESS = "GAQNRDY5RPF4CZUQ4OUA7J2MSHQDE64H7WGWMS3HNZXVUL3LTYH5JAT2"
NODE = parse_domain("stellar")


def simulation(
    retval: Optional[stellar_xdr.SCVal] = None,
    error: Optional[str] = None,
    min_resource_fee: int = 0,
    latest_ledger: int = 10,
    restore: bool = False,
) -> SimulateTransactionResponse:
    """Build a simulateTransaction reply as the RPC server would send it."""
    raw = {"latestLedger": latest_ledger}
    if error is not None:
        raw["error"] = error
    else:
        raw["transactionData"] = (
            SorobanDataBuilder().set_resource_fee(min_resource_fee).build().to_xdr()
        )
        raw["minResourceFee"] = min_resource_fee
        if retval is None:
            retval = scval.to_void()
        raw["results"] = [{"auth": [], "xdr": retval.to_xdr()}]
    if restore:
        raw["restorePreamble"] = {
            "transactionData": SorobanDataBuilder().build().to_xdr(),
            "minResourceFee": 75,
        }
    return SimulateTransactionResponse.model_validate(raw)


class FakeRpc:
    """In-memory RPC that records calls and replays one simulation."""

    def __init__(self, simulation_reply: Optional[SimulateTransactionResponse] = None):
        self.simulation = simulation_reply or simulation()
        self.accounts: list[str] = []
        self.transactions: list[TransactionEnvelope] = []
        self.prepared: list[tuple[TransactionEnvelope, SimulateTransactionResponse]] = []

    @property
    def call_count(self) -> int:
        return len(self.accounts) + len(self.transactions) + len(self.prepared)

    async def get_account(self, address: str) -> Account:
        self.accounts.append(address)
        return Account(address, 1)

    async def simulate_transaction(self, tx: TransactionEnvelope) -> SimulateTransactionResponse:
        self.transactions.append(tx)
        return self.simulation

    async def prepare_transaction(
        self,
        tx: TransactionEnvelope,
        simulation_reply: SimulateTransactionResponse,
    ) -> TransactionEnvelope:
        self.prepared.append((tx, simulation_reply))
        return tx


def plain(value):
    """Addresses as strkeys, everything else unchanged."""
    if isinstance(value, Address):
        return value.address
    return value


def invoked(tx: TransactionEnvelope):
    """Return (function name, native arguments) of the contract call in tx."""
    invoke = tx.transaction.operations[0].host_function.invoke_contract
    return (
        invoke.function_name.sc_symbol.decode(),
        [plain(scval.to_native(arg)) for arg in invoke.args],
    )


def make_client(
    rpc: FakeRpc,
    logger: Optional[AuditLogger] = None,
    **overrides,
) -> SorobanDomainsClient:
    config = SDKConfig.with_published_contracts(**overrides)
    return SorobanDomainsClient(config, rpc=rpc, logger=logger)


class TestClientBasics:
    """Offline helpers exposed on the client."""

    def test_static_helpers(self) -> None:
        assert SorobanDomainsClient.parse_domain("stellar") == NODE
        assert SorobanDomainsClient.is_valid_domain("stellar.xlm")
        assert len(SorobanDomainsClient.hash("xlm")) == 32

    def test_fake_rpc_satisfies_protocol(self) -> None:
        assert isinstance(FakeRpc(), LedgerRpc)

class TestSearchDomain:
    """Registry lookups."""

    def test_domain_found(self) -> None:
        fields = scval.to_map({
            scval.to_symbol("address"): scval.to_address(ADDRESS),
            scval.to_symbol("collateral"): scval.to_int128(10_000_000),
            scval.to_symbol("exp_date"): scval.to_uint64(1735689600),
            scval.to_symbol("node"): scval.to_bytes(bytes.fromhex(NODE)),
            scval.to_symbol("owner"): scval.to_address(ADDRESS),
            scval.to_symbol("snapshot"): scval.to_uint64(1704067200),
        })
        retval = scval.to_vec([scval.to_symbol("Domain"), fields])
        rpc = FakeRpc(simulation(retval))

        record = asyncio.run(make_client(rpc).search_domain("Stellar"))

        assert record.type == RecordType.DOMAIN
        assert record.value.node == NODE
        assert record.value.collateral == "10000000"
        # Reads simulate from the simulation account
        assert rpc.accounts == [SIMULATION_ACCOUNT]
        name, args = invoked(rpc.transactions[0])
        assert name == "record"
        assert args == [["Record", bytes.fromhex(NODE)]]

    def test_sub_domain_key(self) -> None:
        rpc = FakeRpc()
        with pytest.raises(DomainNotFoundError):
            asyncio.run(make_client(rpc).search_domain("stellar", sub_domain="Payments"))

        _, args = invoked(rpc.transactions[0])
        expected = parse_domain("stellar", sub_domain="payments")
        assert args == [["SubRecord", bytes.fromhex(expected)]]

    def test_empty_reply_not_found(self) -> None:
        rpc = FakeRpc(simulation(scval.to_void()))
        with pytest.raises(DomainNotFoundError):
            asyncio.run(make_client(rpc).search_domain("stellar"))

    def test_missing_registry_contract(self) -> None:
        rpc = FakeRpc()
        client = make_client(rpc, registry_contract_id=None)

        with pytest.raises(ConfigurationMissingError) as exc_info:
            asyncio.run(client.search_domain("stellar"))

        assert exc_info.value.message == "Registry contract id was not provided"
        assert rpc.call_count == 0

    def test_simulation_error_kept_verbatim(self) -> None:
        rpc = FakeRpc(simulation(error="HostError: Error(Contract, #1)"))

        with pytest.raises(SimulationFailedError) as exc_info:
            asyncio.run(make_client(rpc).search_domain("stellar"))

        assert exc_info.value.message == "HostError: Error(Contract, #1)"
        assert exc_info.value.code == ErrorCode.SIMULATION_FAILED.value

    def test_missing_rpc_url(self) -> None:
        client = SorobanDomainsClient(SDKConfig.with_published_contracts())
        with pytest.raises(ConfigurationMissingError) as exc_info:
            asyncio.run(client.search_domain("stellar"))
        assert exc_info.value.message == "A URL of the RPC was not provided"


class TestDomainData:
    """Key-value database reads and writes."""

    def test_get_domain_data(self) -> None:
        retval = scval.to_vec([scval.to_symbol("String"), scval.to_string("https://stellar.org")])
        rpc = FakeRpc(simulation(retval))

        value = asyncio.run(
            make_client(rpc).get_domain_data(NODE, DefaultStorageKeys.WEBSITE)
        )

        assert value.as_tuple() == ("String", "https://stellar.org")
        name, args = invoked(rpc.transactions[0])
        assert name == "get"
        assert args == [bytes.fromhex(NODE), "WEBSITE"]

    def test_get_domain_data_not_found(self) -> None:
        rpc = FakeRpc()
        with pytest.raises(DomainDataNotFoundError):
            asyncio.run(make_client(rpc).get_domain_data(NODE, "TOML"))

    def test_missing_key_value_contract(self) -> None:
        rpc = FakeRpc()
        client = make_client(rpc, key_value_contract_id=None)

        with pytest.raises(ConfigurationMissingError) as exc_info:
            asyncio.run(client.get_domain_data(NODE, "TOML"))
        assert exc_info.value.message == "KeyValue Database contract id was not provided"

        with pytest.raises(ConfigurationMissingError):
            asyncio.run(client.set_domain_data(NODE, "TOML", ("String", "x"), ADDRESS))
        with pytest.raises(ConfigurationMissingError):
            asyncio.run(client.remove_domain_data(NODE, "TOML", ADDRESS))
        assert rpc.call_count == 0

    def test_set_domain_data(self) -> None:
        rpc = FakeRpc(simulation(latest_ledger=5, min_resource_fee=250))

        prepared = asyncio.run(
            make_client(rpc).set_domain_data(NODE, "WEBSITE", ("Number", 42), ADDRESS)
        )

        assert rpc.accounts == [ADDRESS]
        name, args = invoked(prepared.tx)
        assert name == "set"
        assert args == [bytes.fromhex(NODE), "WEBSITE", ["Number", 42]]
        # The simulated envelope is assembled with its own simulation
        assert rpc.prepared == [(rpc.transactions[0], rpc.simulation)]
        assert prepared.simulation.latest_ledger == 5
        assert prepared.simulation.min_resource_fee == 250
        assert not prepared.needs_restore

    @given(value=st.one_of(
        st.tuples(st.just("Float"), st.floats(allow_nan=False)),
        st.tuples(st.just("Number"), st.text()),
        st.tuples(st.just("Bool"), st.booleans()),
    ))
    @settings(max_examples=30)
    def test_unsupported_value_makes_no_call(self, value) -> None:
        """Encoding errors are raised before any network call."""
        rpc = FakeRpc()
        with pytest.raises(UnsupportedValueTypeError):
            asyncio.run(make_client(rpc).set_domain_data(NODE, "TOML", value, ADDRESS))
        assert rpc.call_count == 0

    def test_remove_domain_data(self) -> None:
        rpc = FakeRpc()
        prepared = asyncio.run(make_client(rpc).remove_domain_data(NODE, "TOML", ADDRESS))

        name, args = invoked(prepared.tx)
        assert name == "remove"
        assert args == [bytes.fromhex(NODE), "TOML"]

    def test_set_simulation_failure(self) -> None:
        rpc = FakeRpc(simulation(error="not the owner"))
        with pytest.raises(SimulationFailedError) as exc_info:
            asyncio.run(make_client(rpc).remove_domain_data(NODE, "TOML", ADDRESS))
        assert exc_info.value.message == "not the owner"
        assert rpc.prepared == []

    def test_unknown_stored_value(self) -> None:
        retval = scval.to_vec([scval.to_symbol("Float"), scval.to_uint32(1)])
        rpc = FakeRpc(simulation(retval))

        with pytest.raises(UnknownValueTypeError) as exc_info:
            asyncio.run(make_client(rpc).get_domain_data(NODE, "TOML"))
        assert exc_info.value.code == ErrorCode.UNKNOWN_VALUE_TYPE.value

    def test_reply_without_results_not_found(self) -> None:
        rpc = FakeRpc(SimulateTransactionResponse.model_validate({"latestLedger": 3}))
        with pytest.raises(DomainDataNotFoundError):
            asyncio.run(make_client(rpc).get_domain_data(NODE, "TOML"))


class TestReverseDomain:
    """Reverse registrar reads and writes."""

    def test_get_reverse_domain(self) -> None:
        retval = scval.to_struct({
            "sld": scval.to_symbol("overcat"),
            "subs": scval.to_vec([scval.to_symbol("hello")]),
            "tld": scval.to_symbol("xlm"),
        })
        rpc = FakeRpc(simulation(retval))

        domain = asyncio.run(make_client(rpc).get_reverse_domain(ADDRESS))

        assert domain == "hello.overcat.xlm"
        name, args = invoked(rpc.transactions[0])
        assert name == "get"
        assert args == [ADDRESS]

    def test_get_reverse_domain_not_found(self) -> None:
        rpc = FakeRpc(simulation(scval.to_void()))
        with pytest.raises(ReverseDomainNotFoundError):
            asyncio.run(make_client(rpc).get_reverse_domain(ADDRESS))

    def test_set_reverse_domain(self) -> None:
        rpc = FakeRpc()
        prepared = asyncio.run(
            make_client(rpc).set_reverse_domain(ADDRESS, "hello.overcat.xlm", ADDRESS)
        )

        name, args = invoked(prepared.tx)
        assert name == "set"
        assert args == [ADDRESS, {"tld": "xlm", "sld": "overcat", "subs": ["hello"]}]

    def test_clear_reverse_domain(self) -> None:
        rpc = FakeRpc()
        prepared = asyncio.run(make_client(rpc).set_reverse_domain(ADDRESS, None, ADDRESS))

        _, args = invoked(prepared.tx)
        assert args == [ADDRESS, None]

    def test_invalid_reverse_domain_makes_no_call(self) -> None:
        rpc = FakeRpc()
        with pytest.raises(InvalidDomainFormatError):
            asyncio.run(make_client(rpc).set_reverse_domain(ADDRESS, "notld", ADDRESS))
        assert rpc.call_count == 0

    def test_missing_reverse_registrar(self) -> None:
        rpc = FakeRpc()
        client = make_client(rpc, reverse_registrar_contract_id=None)
        with pytest.raises(ConfigurationMissingError) as exc_info:
            asyncio.run(client.get_reverse_domain(ADDRESS))
        assert exc_info.value.message == "Reverse Registrar contract id was not provided"
        assert rpc.call_count == 0


class TestClientLogging:
    """Calls and failures are written to the audit logger."""

    def test_logs_simulation(self) -> None:
        stream = io.StringIO()
        logger = AuditLogger(output_format="json", output_stream=stream, level=LogLevel.DEBUG)
        rpc = FakeRpc()

        with pytest.raises(DomainNotFoundError):
            asyncio.run(make_client(rpc, logger=logger).search_domain("stellar"))

        messages = [entry.message for entry in logger.entries]
        assert messages == ["Simulating record call", "Simulated record call"]
        assert logger.entries[0].data["function"] == "record"

    def test_logs_failure(self) -> None:
        logger = AuditLogger(output_stream=io.StringIO())
        rpc = FakeRpc(simulation(error="boom"))

        with pytest.raises(SimulationFailedError):
            asyncio.run(make_client(rpc, logger=logger).search_domain("stellar"))

        error_entry = logger.entries[-1]
        assert error_entry.level == LogLevel.ERROR
        assert error_entry.data["error_code"] == ErrorCode.SIMULATION_FAILED.value
        assert error_entry.data["error_message"] == "boom"

    def test_restore_needed_is_logged(self) -> None:
        logger = AuditLogger(output_stream=io.StringIO())
        rpc = FakeRpc(simulation(restore=True))

        prepared = asyncio.run(
            make_client(rpc, logger=logger).set_reverse_domain(ADDRESS, "overcat.xlm", ADDRESS)
        )

        assert prepared.needs_restore
        warnings = [entry for entry in logger.entries if entry.level == LogLevel.WARN]
        assert len(warnings) == 1
        assert warnings[0].message == "set call touches archived ledger entries"
        assert warnings[0].data["restore_min_resource_fee"] == 75

    def test_no_restore_no_warning(self) -> None:
        logger = AuditLogger(output_stream=io.StringIO())
        prepared = asyncio.run(
            make_client(FakeRpc(), logger=logger).remove_domain_data(NODE, "TOML", ADDRESS)
        )

        assert not prepared.needs_restore
        assert all(entry.level != LogLevel.WARN for entry in logger.entries)

    def test_long_lived_client_keeps_bounded_history(self) -> None:
        """Repeated calls on one client do not grow the logger's history."""
        stream = io.StringIO()
        logger = AuditLogger(output_stream=stream, level=LogLevel.DEBUG, history_size=20)
        retval = scval.to_struct({
            "sld": scval.to_symbol("overcat"),
            "subs": scval.to_vec([]),
            "tld": scval.to_symbol("xlm"),
        })
        client = make_client(FakeRpc(simulation(retval)), logger=logger)

        async def lookups() -> None:
            for _ in range(200):
                await client.get_reverse_domain(ADDRESS)

        asyncio.run(lookups())

        assert len(logger.entries) == 20
        # Every entry still reached the stream
        assert len(stream.getvalue().splitlines()) == 400
