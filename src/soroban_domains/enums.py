"""
Enumeration types for the Soroban Domains client.

These enums close the tag sets used on the wire (record kinds, record keys,
storage value types) and provide type-safe constants for error codes and
logging throughout the package.
"""

from enum import Enum


class RecordType(Enum):
    """Kind of record returned by the registry contract."""

    DOMAIN = "Domain"
    SUB_DOMAIN = "SubDomain"


class RecordKey(Enum):
    """Storage key variant used to look up a record in the registry."""

    RECORD = "Record"
    SUB_RECORD = "SubRecord"


class StorageValueType(Enum):
    """Tags accepted by the key-value database contract."""

    BYTES = "Bytes"
    NUMBER = "Number"
    STRING = "String"


class DefaultStorageKeys(Enum):
    """Well-known attribute keys stored against a domain node."""

    TOML = "TOML"
    TOML_HASH = "TOML_HASH"
    WEBSITE = "WEBSITE"
    WEBSITE_IPFS = "WEBSITE_IPFS"
    WEBSITE_IPNS = "WEBSITE_IPNS"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    TOO_MANY_LABELS = "too_many_labels"
    LABEL_TOO_LONG = "label_too_long"


class ErrorCode(Enum):
    """Machine readable codes carried by every SorobanDomainsError."""

    DOMAIN_NOT_FOUND = "domain_not_found"
    DOMAIN_DATA_NOT_FOUND = "domain_data_not_found"
    REVERSE_DOMAIN_NOT_FOUND = "reverse_domain_not_found"
    UNSUPPORTED_VALUE_TYPE = "unsupported_value_type"
    UNKNOWN_VALUE_TYPE = "unknown_value_type"
    INVALID_DOMAIN_FORMAT = "invalid_domain_format"
    INVALID_NODE = "invalid_node"
    CONFIGURATION_MISSING = "configuration_missing"
    INVALID_CONFIGURATION = "invalid_configuration"
    SIMULATION_FAILED = "simulation_failed"
    ACCOUNT_NOT_FOUND = "account_not_found"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    RPC_ERROR = "rpc_error"
    PARSE_ERROR = "parse_error"
