"""Exceptions raised by the PAC evaluator.

Predicates degrade to ``False`` on bad input. The only predicate-level
exception is :class:`PacUsageError`, raised when a call has no sane
interpretation (e.g. ``timeRange`` with three arguments).
"""


class PacError(Exception):
    """Base class for all PAC evaluation errors."""


class PacUsageError(PacError):
    """A predicate was called with an argument list it cannot interpret."""


class PacInterpreterError(PacError):
    """Loading or executing a PAC script failed."""


class InvalidProxyResultError(PacInterpreterError):
    """A PAC script returned text that is not a valid proxy result."""
