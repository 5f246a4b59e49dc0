"""Error kinds raised by the MKLHS core.

Every error reaches the direct caller unchanged. Nothing here is retried
or logged; a failed call leaves the parameter context untouched.
"""


class MklhsError(Exception):
    """Base class for all errors raised by this package."""


class PrimitiveFailure(MklhsError):
    """The hash-to-G1 primitive rejected its domain tag or message."""


class RandomnessFailure(MklhsError):
    """The randomness source could not supply the requested bytes."""


class InvalidInput(MklhsError, ValueError):
    """A structural precondition was violated (lengths, types, key sizes)."""
