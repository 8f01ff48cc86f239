"""
Soroban Domains - client for the Soroban Domains name service.

This package computes domain nodes, validates domain names, decodes and
encodes the records and attributes stored by the protocol contracts, and
prepares contract calls through a Soroban RPC server.
"""

__version__ = "0.1.0"
__author__ = "Soroban Domains Team"

from soroban_domains.exceptions import (
    SorobanDomainsError,
    NotFoundError,
    DomainNotFoundError,
    DomainDataNotFoundError,
    ReverseDomainNotFoundError,
    EncodingError,
    UnsupportedValueTypeError,
    InvalidDomainFormatError,
    DecodingError,
    UnknownValueTypeError,
    ConfigurationError,
    ConfigurationMissingError,
    RpcError,
    SimulationFailedError,
    AccountNotFoundError,
    RpcTransportError,
    RpcResponseError,
)
from soroban_domains.enums import (
    RecordType,
    RecordKey,
    StorageValueType,
    DefaultStorageKeys,
    LogLevel,
    DomainValidationErrorCode,
    ErrorCode,
)
from soroban_domains.models import (
    Domain,
    SubDomain,
    Record,
    DomainStorageValue,
    ReverseDomain,
    PreparedTransaction,
)
from soroban_domains.config import (
    SIMULATION_ACCOUNT,
    RegistryContract,
    KeyValueDbContract,
    ReverseRegistrarContract,
    LoggingConfig,
    SDKConfig,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)
from soroban_domains.node_hasher import (
    hash,
    node_bytes,
    parse_domain,
)
from soroban_domains.domain_validator import (
    is_valid_domain,
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
)
from soroban_domains.record_codec import (
    decode_record,
    decode_domain_data,
    decode_reverse_domain,
    encode_storage_value,
    encode_reverse_domain,
    encode_node,
    split_reverse_domain,
)
from soroban_domains.rpc_client import (
    LedgerRpc,
    HttpxAsyncClient,
    SorobanRpcClient,
)
from soroban_domains.transactions import (
    build_contract_call,
)
from soroban_domains.audit_logger import (
    AuditLogger,
    LogEntry,
)
from soroban_domains.client import SorobanDomainsClient
from soroban_domains.cli import (
    main as cli_main,
    create_parser,
)

__all__ = [
    # Exceptions
    "SorobanDomainsError",
    "NotFoundError",
    "DomainNotFoundError",
    "DomainDataNotFoundError",
    "ReverseDomainNotFoundError",
    "EncodingError",
    "UnsupportedValueTypeError",
    "InvalidDomainFormatError",
    "DecodingError",
    "UnknownValueTypeError",
    "ConfigurationError",
    "ConfigurationMissingError",
    "RpcError",
    "SimulationFailedError",
    "AccountNotFoundError",
    "RpcTransportError",
    "RpcResponseError",
    # Enums
    "RecordType",
    "RecordKey",
    "StorageValueType",
    "DefaultStorageKeys",
    "LogLevel",
    "DomainValidationErrorCode",
    "ErrorCode",
    # Models
    "Domain",
    "SubDomain",
    "Record",
    "DomainStorageValue",
    "ReverseDomain",
    "PreparedTransaction",
    # Configuration
    "SIMULATION_ACCOUNT",
    "RegistryContract",
    "KeyValueDbContract",
    "ReverseRegistrarContract",
    "LoggingConfig",
    "SDKConfig",
    "load_config_from_env",
    "load_config_from_file",
    "save_config_to_file",
    # Node Hasher
    "hash",
    "node_bytes",
    "parse_domain",
    # Domain Validator
    "is_valid_domain",
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    # Record Codec
    "decode_record",
    "decode_domain_data",
    "decode_reverse_domain",
    "encode_storage_value",
    "encode_reverse_domain",
    "encode_node",
    "split_reverse_domain",
    # RPC
    "LedgerRpc",
    "HttpxAsyncClient",
    "SorobanRpcClient",
    "build_contract_call",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Client
    "SorobanDomainsClient",
    # CLI
    "cli_main",
    "create_parser",
]
