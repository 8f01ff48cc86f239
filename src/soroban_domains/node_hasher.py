"""
Domain node hashing.

A domain is looked up in the registry by its "node", a 32 byte Keccak-256
digest derived in two keyed stages:

    node    = H( H(tld)  || H(domain) )
    subnode = H( H(node) || H(subdomain) )

where || concatenates the two digests. Hashing is exact-byte: callers must
lowercase domain, subdomain and tld before hashing.
"""

from typing import Optional, Union

from eth_hash.auto import keccak


DEFAULT_TLD = "xlm"
NODE_SIZE = 32


def hash(data: Union[str, bytes]) -> bytes:  # noqa: A001
    """
    Keccak-256 digest of text (UTF-8 encoded) or raw bytes.

    Args:
        data: Text or bytes to hash, may be empty

    Returns:
        The 32 byte digest
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return keccak(bytes(data))


def node_bytes(
    domain: str,
    sub_domain: Optional[str] = None,
    tld: Optional[str] = None,
) -> bytes:
    """
    Compute the raw node of a domain, or of a subdomain when one is given.

    Args:
        domain: Second level label, e.g. 'stellar'
        sub_domain: Optional subdomain label, e.g. 'payments'
        tld: Top level label, defaults to 'xlm'

    Returns:
        The 32 byte node
    """
    node = hash(hash(tld or DEFAULT_TLD) + hash(domain))
    if sub_domain:
        return hash(hash(node) + hash(sub_domain))
    return node


def parse_domain(
    domain: str,
    sub_domain: Optional[str] = None,
    tld: Optional[str] = None,
) -> str:
    """
    Generate the hex encoded node used to fetch a Record or SubRecord.

    The domain is not validated or normalized here.

    Args:
        domain: Second level label, e.g. 'stellar'
        sub_domain: Optional subdomain label, e.g. 'payments'
        tld: Top level label, defaults to 'xlm'

    Returns:
        64 lowercase hex characters
    """
    return node_bytes(domain, sub_domain=sub_domain, tld=tld).hex()
