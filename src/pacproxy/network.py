"""Subnet membership test (``isInNet``)."""

from .address import encode_address, parse_dotted_quad
from .resolver import DnsResolver


def is_ipv4_literal(text: str) -> bool:
    """True if text is a dotted quad with every octet in [0, 255]."""
    octets = parse_dotted_quad(text)
    return octets is not None and all(octet <= 255 for octet in octets)


def is_in_net(address: str, pattern: str, mask: str, resolver: DnsResolver) -> bool:
    """Check whether an address or hostname lies in ``pattern``/``mask``.

    A dotted-quad ``address`` is used as-is; one with an octet above 255
    is rejected without consulting the resolver. Anything else is treated
    as a hostname and resolved; an unresolvable name does not match.

    Args:
        address: IPv4 literal or hostname
        pattern: Network address, e.g. "10.0.0.0"
        mask: Network mask, e.g. "255.0.0.0"
        resolver: Used only when address is not a dotted quad

    Returns:
        True if ``address & mask == pattern & mask``
    """
    octets = parse_dotted_quad(address)
    if octets is None:
        resolved = resolver.resolve(address)
        if resolved is None:
            return False
        address = resolved
    elif any(octet > 255 for octet in octets):
        return False  # shaped like an IP, but not one

    try:
        host = encode_address(address)
        net = encode_address(pattern)
        netmask = encode_address(mask)
    except ValueError:
        return False
    return (host & netmask) == (net & netmask)
