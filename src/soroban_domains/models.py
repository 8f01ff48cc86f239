"""
Data models for the Soroban Domains client.

This module defines the entities decoded from contract replies (domains,
subdomains, typed storage values, reverse domains) and the result objects
returned by write operations.
"""

from dataclasses import dataclass
from typing import Any, Union

from .enums import RecordType, StorageValueType


@dataclass(frozen=True)
class Domain:
    """A registered domain as stored by the registry contract."""

    node: str  # hex encoded domain node
    owner: str  # owner address, hex when stored as bytes
    address: str  # where the node resolves to
    exp_date: str  # expiration timestamp
    collateral: str  # deposited reserves
    snapshot: str  # creation timestamp, used as freshness flag


@dataclass(frozen=True)
class SubDomain:
    """
    A subdomain nested under a Domain.

    A subdomain is only valid while its snapshot equals the snapshot of its
    parent domain. Decoding does not check this; use is_fresh() with the
    parent record before trusting the subdomain.
    """

    node: str
    parent: str  # hex encoded node of the parent domain
    address: str
    snapshot: str

    def is_fresh(self, parent: Domain) -> bool:
        """Check that the parent was not re-registered since this subdomain was set."""
        return parent.node == self.parent and parent.snapshot == self.snapshot


@dataclass(frozen=True)
class Record:
    """Tagged result of a registry lookup."""

    type: RecordType
    value: Union[Domain, SubDomain]


StoragePayload = Union[bytes, int, str]


@dataclass(frozen=True)
class DomainStorageValue:
    """A typed attribute value stored in the key-value database contract."""

    type: StorageValueType
    value: StoragePayload

    def as_tuple(self) -> tuple[str, StoragePayload]:
        """Return the value in its wire-shaped (tag, payload) form."""
        return (self.type.value, self.value)


@dataclass(frozen=True)
class ReverseDomain:
    """A reverse domain split into top-level, second-level and sub labels."""

    tld: str
    sld: str
    subs: tuple[str, ...] = ()

    def render(self) -> str:
        """Render the dotted name, e.g. hello.overcat.xlm."""
        return ".".join([*self.subs, self.sld, self.tld])

    def __str__(self) -> str:
        return self.render()


@dataclass
class PreparedTransaction:
    """
    An assembled, unsigned transaction ready for the caller to sign and submit.

    When needs_restore is set, some ledger entries the call touches have
    been archived. The transaction will fail until a RestoreFootprint
    transaction built from simulation.restore_preamble has been submitted.
    """

    tx: Any  # stellar_sdk.TransactionEnvelope
    simulation: Any  # stellar_sdk.soroban_rpc.SimulateTransactionResponse

    @property
    def needs_restore(self) -> bool:
        return self.simulation.restore_preamble is not None
