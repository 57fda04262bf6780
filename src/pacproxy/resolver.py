"""Name resolution capability consumed by the network predicates.

``isInNet`` (for hostnames), ``isResolvable``, ``dnsResolve`` and
``myIpAddress`` all go through a :class:`DnsResolver`. Failures never
propagate: an unresolvable name is reported as ``None``.

Nothing here caches. Each call issues a fresh lookup.
"""

import logging
import socket
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Mapping, Protocol

logger = logging.getLogger(__name__)

# Returned by myIpAddress() when the local hostname cannot be resolved
FALLBACK_LOCAL_ADDRESS = "127.0.0.1"

# gaierror and herror are OSError subclasses; embedded NUL bytes raise
# TypeError or ValueError depending on the Python version
_LOOKUP_ERRORS = (OSError, UnicodeError, ValueError, TypeError)


class DnsResolver(Protocol):
    """Resolves hostnames to IPv4 address strings.

    Implementations must be safe to call from several threads at once.
    """

    def resolve(self, hostname: str) -> str | None:
        """Return the address for hostname, or None if it cannot be resolved."""
        ...

    def local_address(self) -> str:
        """Return this machine's own outward-facing address."""
        ...


class SocketResolver:
    """Resolver backed by the operating system (``socket.gethostbyname``).

    Example:
        resolver = SocketResolver(timeout=2.0)
        resolver.resolve("localhost")        # "127.0.0.1"
        resolver.resolve("no-such-host.")    # None
    """

    def __init__(self, timeout: float | None = None):
        self._timeout = timeout

    def _lookup(self, hostname: str) -> str | None:
        try:
            return socket.gethostbyname(hostname)
        except _LOOKUP_ERRORS as e:
            logger.debug(f"Could not resolve {hostname!r}: {e}")
            return None

    def resolve(self, hostname: str) -> str | None:
        if not hostname:
            return None
        if self._timeout is None:
            return self._lookup(hostname)
        return self._lookup_with_timeout(hostname)

    def _lookup_with_timeout(self, hostname: str) -> str | None:
        """Run one lookup on its own daemon thread and wait up to the timeout.

        gethostbyname cannot be interrupted, so a lookup that times out keeps
        its thread until the OS resolver gives up. Each lookup gets a thread
        of its own so hung lookups never delay later ones.
        """
        future: Future = Future()

        def run() -> None:
            future.set_result(self._lookup(hostname))

        threading.Thread(target=run, name="pac-resolver", daemon=True).start()
        try:
            return future.result(timeout=self._timeout)
        except FutureTimeoutError:
            logger.debug(f"Resolving {hostname!r} timed out after {self._timeout}s")
            return None

    def local_address(self) -> str:
        address = self.resolve(socket.gethostname())
        return address if address is not None else FALLBACK_LOCAL_ADDRESS


class StaticResolver:
    """Resolver answering from a fixed hostname -> address table.

    Hostnames are matched case-insensitively, like a hosts file.
    """

    def __init__(
        self,
        hosts: Mapping[str, str] | None = None,
        local_address: str = FALLBACK_LOCAL_ADDRESS,
    ):
        self._hosts = {name.lower(): addr for name, addr in (hosts or {}).items()}
        self._local_address = local_address

    def resolve(self, hostname: str) -> str | None:
        return self._hosts.get(hostname.lower())

    def local_address(self) -> str:
        return self._local_address
