"""Parsed return values of a PAC script.

A script returns text such as ``"PROXY a.example:8080; SOCKS5 b:1080; DIRECT"``.
:meth:`ProxyResult.parse` turns it into an ordered list of
:class:`ProxyDirective` values.
"""

import random
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .errors import InvalidProxyResultError

RESULT_SEPARATOR = ";"


class ConnectionType(Enum):
    DIRECT = "DIRECT"
    HTTP = "HTTP"
    HTTPS = "HTTPS"
    PROXY = "PROXY"
    SOCKS = "SOCKS"
    SOCKS4 = "SOCKS4"
    SOCKS5 = "SOCKS5"

    @classmethod
    def from_value(cls, value: str) -> "ConnectionType":
        """Look up a connection type by name, ignoring case."""
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(f"{value!r} is not a valid {cls.__name__}") from None


# Longest names first so SOCKS5 is not read as SOCKS followed by "5"
_TYPES_UNION = "|".join(
    sorted((ct.value for ct in ConnectionType), key=len, reverse=True)
)
_DIRECTIVE_RE = re.compile(rf"({_TYPES_UNION})(?:\s+([^\s;]+))?", re.IGNORECASE)


@dataclass(frozen=True)
class ProxyDirective:
    """One entry of a proxy result, e.g. ``DIRECT`` or ``PROXY 10.1.1.1:8080``."""

    connection_type: ConnectionType
    proxy_host_and_port: str | None = None

    def __post_init__(self):
        if self.connection_type is not ConnectionType.DIRECT and not self.proxy_host_and_port:
            raise ValueError(
                f"When connection type is not {ConnectionType.DIRECT.value} proxy is required"
            )

    @property
    def is_direct(self) -> bool:
        return self.connection_type is ConnectionType.DIRECT

    @property
    def is_proxy(self) -> bool:
        return not self.is_direct

    @property
    def proxy_host(self) -> str | None:
        if self.proxy_host_and_port is None:
            return None
        return self.proxy_host_and_port.split(":")[0]

    @property
    def proxy_port(self) -> int | None:
        if self.proxy_host_and_port is None:
            return None
        parts = self.proxy_host_and_port.split(":")
        if len(parts) < 2:
            return None
        return int(parts[1])

    def __str__(self) -> str:
        if self.proxy_host_and_port is None:
            return self.connection_type.value
        return f"{self.connection_type.value} {self.proxy_host_and_port}"

    @classmethod
    def parse(cls, value: str | None) -> "ProxyDirective":
        """Parse a single directive. None means DIRECT.

        Raises:
            InvalidProxyResultError: If the text is not a directive
        """
        if value is None:
            return cls(ConnectionType.DIRECT)

        match = _DIRECTIVE_RE.fullmatch(value.strip())
        if match is None:
            raise InvalidProxyResultError(f'Invalid proxy find result: "{value}"')

        connection_type = ConnectionType.from_value(match.group(1))
        if connection_type is ConnectionType.DIRECT:
            return cls(connection_type)

        proxy = match.group(2)
        if proxy is None:
            raise InvalidProxyResultError(
                f'Proxy host missing for {connection_type.value} in "{value}"'
            )
        return cls(connection_type, proxy)


class ProxyResult:
    """Ordered, immutable list of directives returned for one URL."""

    def __init__(self, directives):
        self._directives = tuple(directives)

    @property
    def directives(self) -> tuple[ProxyDirective, ...]:
        return self._directives

    def first(self) -> ProxyDirective:
        return self._directives[0]

    def first_proxy(self) -> ProxyDirective | None:
        """First directive that is not DIRECT, if any."""
        return next((d for d in self._directives if d.is_proxy), None)

    def get(self, index: int) -> ProxyDirective:
        return self._directives[index]

    def random(self) -> ProxyDirective:
        return random.choice(self._directives)

    def normalize(self) -> "ProxyResult":
        """Copy without duplicate directives, keeping first occurrences."""
        return ProxyResult(dict.fromkeys(self._directives))

    def __len__(self) -> int:
        return len(self._directives)

    def __iter__(self) -> Iterator[ProxyDirective]:
        return iter(self._directives)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ProxyResult):
            return NotImplemented
        return self._directives == other._directives

    def __hash__(self) -> int:
        return hash(self._directives)

    def __str__(self) -> str:
        return f"{RESULT_SEPARATOR} ".join(str(d) for d in self._directives)

    def __repr__(self) -> str:
        return f"ProxyResult({str(self)!r})"

    @classmethod
    def parse(cls, text: str | None) -> "ProxyResult":
        """Parse a script's return value. None means a single DIRECT.

        Raises:
            InvalidProxyResultError: If any directive is invalid
        """
        if text is None:
            return cls([ProxyDirective.parse(None)])

        pieces = text.split(RESULT_SEPARATOR)
        # "PROXY a:1;" has a terminating separator, not an empty directive
        while len(pieces) > 1 and not pieces[-1].strip():
            pieces.pop()
        return cls(ProxyDirective.parse(piece) for piece in pieces)
