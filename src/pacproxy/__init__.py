"""Proxy Auto-Config (PAC) predicate library and evaluator."""

from .address import encode_address, decode_address, parse_dotted_quad
from .clock import Clock, SystemClock, FixedClock
from .errors import PacError, PacUsageError, PacInterpreterError, InvalidProxyResultError
from .functions import PacFunctions
from .hostname import (
    dns_domain_is,
    dns_domain_levels,
    is_plain_host_name,
    is_resolvable,
    local_host_or_domain_is,
)
from .interpreter import PacInterpreter, ReloadablePacInterpreter
from .network import is_in_net, is_ipv4_literal
from .pattern import sh_exp_match
from .resolver import DnsResolver, SocketResolver, StaticResolver
from .result import ConnectionType, ProxyDirective, ProxyResult
from .timewindow import date_range, time_range, weekday_range

__all__ = [
    # Address codec
    "encode_address",
    "decode_address",
    "parse_dotted_quad",
    # Predicates
    "dns_domain_is",
    "dns_domain_levels",
    "is_plain_host_name",
    "is_resolvable",
    "local_host_or_domain_is",
    "is_in_net",
    "is_ipv4_literal",
    "sh_exp_match",
    "weekday_range",
    "date_range",
    "time_range",
    # Capabilities
    "Clock",
    "SystemClock",
    "FixedClock",
    "DnsResolver",
    "SocketResolver",
    "StaticResolver",
    "PacFunctions",
    # Evaluation
    "PacInterpreter",
    "ReloadablePacInterpreter",
    "ConnectionType",
    "ProxyDirective",
    "ProxyResult",
    # Errors
    "PacError",
    "PacUsageError",
    "PacInterpreterError",
    "InvalidProxyResultError",
]
