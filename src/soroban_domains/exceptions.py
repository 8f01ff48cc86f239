"""
Exception classes for the Soroban Domains client.

All exceptions inherit from SorobanDomainsError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional

from .enums import ErrorCode


class SorobanDomainsError(Exception):
    """Base exception for all Soroban Domains errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(SorobanDomainsError):
    """Raised when a contract lookup returns an empty value."""

    pass


class DomainNotFoundError(NotFoundError):
    """Raised when a domain or subdomain record doesn't exist."""

    def __init__(self, details: Optional[dict] = None) -> None:
        super().__init__(
            code=ErrorCode.DOMAIN_NOT_FOUND.value,
            message="Domain doesn't exist",
            details=details,
        )


class DomainDataNotFoundError(NotFoundError):
    """Raised when an attribute lookup for a domain node returns nothing."""

    def __init__(self, details: Optional[dict] = None) -> None:
        super().__init__(
            code=ErrorCode.DOMAIN_DATA_NOT_FOUND.value,
            message="Domain data doesn't exist",
            details=details,
        )


class ReverseDomainNotFoundError(NotFoundError):
    """Raised when no reverse domain is set for an address."""

    def __init__(self, details: Optional[dict] = None) -> None:
        super().__init__(
            code=ErrorCode.REVERSE_DOMAIN_NOT_FOUND.value,
            message="Reverse domain doesn't exist",
            details=details,
        )


class EncodingError(SorobanDomainsError):
    """Raised when a value cannot be encoded for a contract call."""

    pass


class UnsupportedValueTypeError(EncodingError):
    """Raised when a storage value is not one of Bytes, Number or String."""

    def __init__(
        self,
        message: str = "Supported data types are: Bytes, Number and String",
        details: Optional[dict] = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UNSUPPORTED_VALUE_TYPE.value,
            message=message,
            details=details,
        )


class InvalidDomainFormatError(EncodingError):
    """Raised when a reverse domain has fewer than two labels."""

    def __init__(self, details: Optional[dict] = None) -> None:
        super().__init__(
            code=ErrorCode.INVALID_DOMAIN_FORMAT.value,
            message="Invalid domain format",
            details=details,
        )


class DecodingError(SorobanDomainsError):
    """Raised when a contract reply does not match the shape the client expects."""

    pass


class UnknownValueTypeError(DecodingError):
    """Raised when the key-value database returns a value tag the client does not know."""

    def __init__(self, details: Optional[dict] = None) -> None:
        super().__init__(
            code=ErrorCode.UNKNOWN_VALUE_TYPE.value,
            message="Stored value has an unknown type",
            details=details,
        )


class ConfigurationError(SorobanDomainsError):
    """Raised when configuration cannot be loaded or is inconsistent."""

    pass


class ConfigurationMissingError(ConfigurationError):
    """Raised when an operation needs a setting that was not provided."""

    def __init__(self, setting: str, message: str) -> None:
        super().__init__(
            code=ErrorCode.CONFIGURATION_MISSING.value,
            message=message,
            details={"setting": setting},
        )


class RpcError(SorobanDomainsError):
    """Raised when the RPC server or the simulation reports a failure."""

    pass


class SimulationFailedError(RpcError):
    """Raised when the RPC server returns a simulation error (message kept verbatim)."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(
            code=ErrorCode.SIMULATION_FAILED.value,
            message=message,
            details=details,
        )


class AccountNotFoundError(RpcError):
    """Raised when the ledger has no entry for the requested account."""

    def __init__(self, address: str) -> None:
        super().__init__(
            code=ErrorCode.ACCOUNT_NOT_FOUND.value,
            message=f"Account not found: {address}",
            details={"address": address},
        )


class RpcTransportError(RpcError):
    """Raised when the RPC endpoint cannot be reached or times out."""

    pass


class RpcResponseError(RpcError):
    """Raised when the RPC endpoint answers with a JSON-RPC error or garbage."""

    pass
