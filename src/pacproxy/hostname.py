"""Hostname shape predicates.

All of these work on the literal strings. In particular ``dns_domain_is``
is a plain suffix test and is not aware of label boundaries:
``dns_domain_is("notexample.com", "example.com")`` is True.
"""

from .resolver import DnsResolver


def dns_domain_is(host: str, domain: str) -> bool:
    return len(host) >= len(domain) and host.endswith(domain)


def is_plain_host_name(host: str) -> bool:
    return "." not in host


def local_host_or_domain_is(host: str, host_domain: str) -> bool:
    """True on an exact match, or if host is the leading label of host_domain.

    Example:
        local_host_or_domain_is("www", "www.mozilla.org")               # True
        local_host_or_domain_is("home.mozilla.org", "www.mozilla.org")  # False
    """
    return host == host_domain or host_domain.startswith(host + ".")


def dns_domain_levels(host: str) -> int:
    """Number of dots in host."""
    return host.count(".")


def is_resolvable(host: str, resolver: DnsResolver) -> bool:
    return resolver.resolve(host) is not None
