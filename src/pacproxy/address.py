"""Dotted-quad IPv4 address codec.

Addresses are packed big-endian into a 32-bit unsigned integer so that
subnet membership is a pair of masks and a comparison.
"""

import re

# Four groups of 1-3 digits. Octet range is checked separately.
DOTTED_QUAD_RE = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$")


def parse_dotted_quad(text: str) -> tuple[int, int, int, int] | None:
    """Split an address into its four octets if it has dotted-quad shape.

    Only the shape is checked: ``"999.1.1.1"`` parses to ``(999, 1, 1, 1)``.

    Returns:
        The four octets, or None if the text is not four dot-separated
        groups of 1-3 digits.
    """
    match = DOTTED_QUAD_RE.match(text)
    if match is None:
        return None
    a, b, c, d = (int(group) for group in match.groups())
    return a, b, c, d


def encode_address(text: str) -> int:
    """Pack a dotted-quad address into a 32-bit integer.

    Each octet is masked to 8 bits; range validation is the caller's job.
    Used alike for candidate addresses, pattern addresses and masks.

    Example:
        encode_address("104.16.41.2")  # 1745889538
    """
    parts = text.split(".")
    if len(parts) != 4:
        raise ValueError(f"not a dotted-quad address: {text!r}")
    result = 0
    for part in parts:
        result = (result << 8) | (int(part) & 0xFF)
    return result


def decode_address(value: int) -> str:
    """Unpack a 32-bit integer into dotted-quad text."""
    value &= 0xFFFFFFFF
    return ".".join(str((value >> shift) & 0xFF) for shift in (24, 16, 8, 0))
