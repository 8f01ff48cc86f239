"""
Record codec for registry, key-value and reverse registrar contract values.

Read path: replies already converted to native Python values (see
stellar_sdk.scval.to_native) are mapped to typed entities. An empty reply
means "not found", and which not-found error is raised depends on the
lookup.

Write path: typed values are encoded into contract wire values (XDR SCVal)
before a transaction is built, so encoding errors never reach the network.
"""

from typing import Any, Optional, Union

from stellar_sdk import Address, scval
from stellar_sdk import xdr as stellar_xdr

from .enums import ErrorCode, RecordType, StorageValueType
from .exceptions import (
    DomainDataNotFoundError,
    DomainNotFoundError,
    EncodingError,
    InvalidDomainFormatError,
    ReverseDomainNotFoundError,
    UnknownValueTypeError,
    UnsupportedValueTypeError,
)
from .models import Domain, DomainStorageValue, Record, ReverseDomain, SubDomain
from .node_hasher import NODE_SIZE


INT128_MIN = -(2**127)
INT128_MAX = 2**127 - 1

_PAYLOAD_TYPES = {
    StorageValueType.BYTES: (bytes, bytearray, memoryview),
    StorageValueType.NUMBER: (int,),
    StorageValueType.STRING: (str,),
}


def _hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return _str(value)


def _str(value: Any) -> str:
    if isinstance(value, Address):
        return value.address
    return str(value)


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return str(value)


# -- read path ---------------------------------------------------------------


def decode_record(raw: Any) -> Record:
    """
    Decode a registry reply into a Domain or SubDomain record.

    Only the exact tag 'Domain' selects a Domain; every other tag is read as
    a SubDomain.

    Args:
        raw: Native reply, [tag, fields] or empty

    Returns:
        The decoded Record

    Raises:
        DomainNotFoundError: If the reply is empty
    """
    if not raw:
        raise DomainNotFoundError()

    tag, fields = raw[0], raw[1]

    if tag == RecordType.DOMAIN.value:
        return Record(
            type=RecordType.DOMAIN,
            value=Domain(
                node=_hex(fields["node"]),
                owner=_hex(fields["owner"]),
                address=_str(fields["address"]),
                exp_date=_str(fields["exp_date"]),
                collateral=_str(fields["collateral"]),
                snapshot=_str(fields["snapshot"]),
            ),
        )
    else:
        return Record(
            type=RecordType.SUB_DOMAIN,
            value=SubDomain(
                node=_hex(fields["node"]),
                parent=_hex(fields["parent"]),
                address=_str(fields["address"]),
                snapshot=_str(fields["snapshot"]),
            ),
        )


def decode_domain_data(raw: Any) -> DomainStorageValue:
    """
    Decode a key-value database reply.

    Args:
        raw: Native reply, [tag, payload] or empty

    Returns:
        The stored value with its tag

    Raises:
        DomainDataNotFoundError: If the reply is empty
        UnknownValueTypeError: If the stored tag is not Bytes, Number or
            String, or the payload does not match its tag
    """
    if not raw:
        raise DomainDataNotFoundError()
    try:
        return to_storage_value(raw)
    except UnsupportedValueTypeError as e:
        raise UnknownValueTypeError(details=e.details) from e


def decode_reverse_domain(raw: Any) -> str:
    """
    Decode a reverse registrar reply into a dotted domain name.

    Args:
        raw: Native reply, a mapping with tld, sld and subs, or empty

    Returns:
        The rendered domain, e.g. 'hello.overcat.xlm'

    Raises:
        ReverseDomainNotFoundError: If the reply is empty
    """
    if not raw:
        raise ReverseDomainNotFoundError()

    reverse = ReverseDomain(
        tld=_text(raw["tld"]),
        sld=_text(raw["sld"]),
        subs=tuple(_text(sub) for sub in raw.get("subs") or ()),
    )
    return reverse.render()


# -- write path --------------------------------------------------------------


def to_storage_value(
    value: Union[DomainStorageValue, tuple, list],
) -> DomainStorageValue:
    """
    Coerce a DomainStorageValue or a (tag, payload) pair into a checked value.

    Raises:
        UnsupportedValueTypeError: Unknown tag, payload of the wrong type,
            or a Number outside the signed 128-bit range
    """
    if isinstance(value, DomainStorageValue):
        tag, payload = value.type, value.value
    else:
        try:
            raw_tag, payload = value
        except (TypeError, ValueError):
            raise UnsupportedValueTypeError(details={"value": repr(value)}) from None
        try:
            tag = StorageValueType(raw_tag)
        except ValueError:
            raise UnsupportedValueTypeError(details={"type": repr(raw_tag)}) from None

    if isinstance(payload, bool) or not isinstance(payload, _PAYLOAD_TYPES[tag]):
        raise UnsupportedValueTypeError(
            message=f"{tag.value} values need a {_PAYLOAD_TYPES[tag][0].__name__} payload",
            details={"type": tag.value, "payload_type": type(payload).__name__},
        )

    if tag == StorageValueType.NUMBER and not INT128_MIN <= payload <= INT128_MAX:
        raise UnsupportedValueTypeError(
            message="Number values must fit in a signed 128-bit integer",
            details={"type": tag.value, "value": str(payload)},
        )

    if tag == StorageValueType.BYTES:
        payload = bytes(payload)

    return DomainStorageValue(type=tag, value=payload)


def encode_storage_value(
    value: Union[DomainStorageValue, tuple, list],
) -> stellar_xdr.SCVal:
    """
    Encode a storage value as vec[symbol(tag), payload].

    Args:
        value: A DomainStorageValue or a (tag, payload) pair

    Returns:
        Wire value accepted by the key-value database 'set' function

    Raises:
        UnsupportedValueTypeError: If the value is not Bytes, Number or String
    """
    checked = to_storage_value(value)

    if checked.type == StorageValueType.BYTES:
        payload = scval.to_bytes(checked.value)
    elif checked.type == StorageValueType.NUMBER:
        payload = scval.to_int128(checked.value)
    else:
        payload = scval.to_string(checked.value)

    return scval.to_vec([scval.to_symbol(checked.type.value), payload])


def split_reverse_domain(domain: str) -> ReverseDomain:
    """
    Lowercase a domain and split it into tld, sld and subs.

    Raises:
        InvalidDomainFormatError: If the domain has fewer than two labels
    """
    parts = domain.lower().split(".")
    if len(parts) < 2:
        raise InvalidDomainFormatError(details={"domain": domain})
    return ReverseDomain(tld=parts[-1], sld=parts[-2], subs=tuple(parts[:-2]))


def encode_reverse_domain(domain: Optional[str]) -> stellar_xdr.SCVal:
    """
    Encode the domain argument of the reverse registrar 'set' function.

    Args:
        domain: Domain to point the address at, or None to clear it

    Returns:
        void for None, otherwise struct {tld, sld, subs} of symbols

    Raises:
        InvalidDomainFormatError: If the domain has fewer than two labels
    """
    if domain is None:
        return scval.to_void()

    reverse = split_reverse_domain(domain)
    return scval.to_struct({
        "tld": scval.to_symbol(reverse.tld),
        "sld": scval.to_symbol(reverse.sld),
        "subs": scval.to_vec([scval.to_symbol(sub) for sub in reverse.subs]),
    })


def encode_node(node: str) -> stellar_xdr.SCVal:
    """
    Encode a hex domain node as a 32 byte contract argument.

    Raises:
        EncodingError: If the node is not 64 hex characters
    """
    try:
        raw = bytes.fromhex(node)
    except (TypeError, ValueError):
        raw = b""
    if len(raw) != NODE_SIZE:
        raise EncodingError(
            code=ErrorCode.INVALID_NODE.value,
            message="Domain node must be 32 bytes encoded as 64 hex characters",
            details={"node": node},
        )
    return scval.to_bytes(raw)
