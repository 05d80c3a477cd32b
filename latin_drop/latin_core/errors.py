"""
Errors
======

Exception hierarchy for contract violations inside the core.

Designed reject paths (a drop too far from any slot, an invalid filled grid)
are reported through return values, never through these exceptions.
"""


class LatinDropError(Exception):
    """Base exception for core failures."""


class UnknownTokenError(LatinDropError, KeyError):
    """Raised when an operation names a token the resolver does not own."""


class UnknownSlotError(LatinDropError, KeyError):
    """Raised when an operation names a slot that is not part of the puzzle."""


class IncompleteGridError(LatinDropError, RuntimeError):
    """Raised when validation is requested while some slot is still open."""


class SessionStateError(LatinDropError, RuntimeError):
    """Raised when a session operation is not allowed in the current state."""
