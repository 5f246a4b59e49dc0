"""Randomness sources.

A randomness source is any callable ``rng(n) -> bytes`` returning exactly
``n`` bytes. Any failure of the source, including a short read, surfaces as
``RandomnessFailure`` and is never retried here.
"""

import os

from Crypto.Hash import SHAKE256
from petlib.bn import Bn

from mklhs.errors import RandomnessFailure

BYTEORDER = "big"


class OsRandom:
    """Operating system CSPRNG (``os.urandom``)."""

    def __call__(self, n):
        return os.urandom(n)


class DeterministicRandom:
    """
    Reproducible byte stream expanded from a seed with SHAKE256.

    For tests and benchmarks only: anyone who knows the seed knows every key.
    """

    def __init__(self, seed):
        if isinstance(seed, str):
            seed = seed.encode("utf-8")
        self._xof = SHAKE256.new(bytes(seed))

    def __call__(self, n):
        return self._xof.read(n)


def default_rng():
    return OsRandom()


def random_bytes(rng, n: int) -> bytes:
    try:
        out = rng(n)
    except Exception as e:
        raise RandomnessFailure(f"randomness source failed to supply {n} bytes") from e

    if not isinstance(out, (bytes, bytearray)) or len(out) != n:
        got = len(out) if isinstance(out, (bytes, bytearray)) else type(out).__name__
        raise RandomnessFailure(f"randomness source returned {got} instead of {n} bytes")
    return bytes(out)


def random_scalar(rng, order: Bn) -> Bn:
    """Uniform scalar in [0, order), by rejection sampling on masked source bytes."""
    q = int(order)
    nbits = q.bit_length()
    nbytes = (nbits + 7) // 8
    mask = (1 << nbits) - 1

    while True:
        x = int.from_bytes(random_bytes(rng, nbytes), BYTEORDER) & mask
        if x < q:
            return Bn.from_num(x)
