"""The PAC function set, bound to a resolver and a clock.

A configuration script receives a :class:`PacFunctions` instance and
calls predicates either as methods (``pac.is_in_net(...)``) or by their
standard PAC names through :meth:`PacFunctions.bindings`::

    def find_proxy(pac, url, host):
        js = pac.bindings()
        if js["isPlainHostName"](host) or js["dnsDomainIs"](host, ".corp"):
            return "DIRECT"
        return "PROXY proxy.corp:3128"
"""

from typing import Any, Callable

from . import hostname, network, pattern, timewindow
from .address import encode_address
from .clock import Clock, SystemClock
from .resolver import DnsResolver, SocketResolver


class PacFunctions:
    """Predicates with their external capabilities injected.

    Holds no mutable state, so one instance may be shared between
    concurrent evaluations as long as the resolver is thread-safe.
    """

    def __init__(self, resolver: DnsResolver | None = None, clock: Clock | None = None):
        self.resolver = resolver if resolver is not None else SocketResolver()
        self.clock = clock if clock is not None else SystemClock()

    # Hostname predicates

    def dns_domain_is(self, host: str, domain: str) -> bool:
        return hostname.dns_domain_is(host, domain)

    def dns_domain_levels(self, host: str) -> int:
        return hostname.dns_domain_levels(host)

    def is_plain_host_name(self, host: str) -> bool:
        return hostname.is_plain_host_name(host)

    def local_host_or_domain_is(self, host: str, host_domain: str) -> bool:
        return hostname.local_host_or_domain_is(host, host_domain)

    def is_resolvable(self, host: str) -> bool:
        return hostname.is_resolvable(host, self.resolver)

    # Network predicates

    def is_in_net(self, address: str, pattern_address: str, mask: str) -> bool:
        return network.is_in_net(address, pattern_address, mask, self.resolver)

    def dns_resolve(self, host: str) -> str | None:
        return self.resolver.resolve(host)

    def my_ip_address(self) -> str:
        return self.resolver.local_address()

    def convert_addr(self, address: str) -> int:
        return encode_address(address)

    # Pattern

    def sh_exp_match(self, subject: str, glob: str) -> bool:
        return pattern.sh_exp_match(subject, glob)

    # Time windows

    def weekday_range(self, *args) -> bool:
        return timewindow.weekday_range(*args, clock=self.clock)

    def date_range(self, *args) -> bool:
        return timewindow.date_range(*args, clock=self.clock)

    def time_range(self, *args) -> bool:
        return timewindow.time_range(*args, clock=self.clock)

    def bindings(self) -> dict[str, Callable[..., Any]]:
        """Map standard PAC function names to bound methods."""
        return {
            "dnsDomainIs": self.dns_domain_is,
            "dnsDomainLevels": self.dns_domain_levels,
            "isPlainHostName": self.is_plain_host_name,
            "localHostOrDomainIs": self.local_host_or_domain_is,
            "isResolvable": self.is_resolvable,
            "isInNet": self.is_in_net,
            "dnsResolve": self.dns_resolve,
            "myIpAddress": self.my_ip_address,
            "convert_addr": self.convert_addr,
            "shExpMatch": self.sh_exp_match,
            "weekdayRange": self.weekday_range,
            "dateRange": self.date_range,
            "timeRange": self.time_range,
        }
