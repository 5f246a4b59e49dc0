"""Thin adapter over the bplib pairing group (BN254).

The rest of the package only talks to the curve through this module: the
two generators, the point at infinity of G1, scalar reduction modulo the
group order, and a domain-separated hash into G1.
"""

from bplib.bp import BpGroup, G1Elem, G2Elem
from Crypto.Hash import SHA256
from petlib.bn import Bn

from mklhs.errors import InvalidInput, PrimitiveFailure

# DSTs longer than this cannot be length-prefixed with a single byte.
MAX_DST_LENGTH = 255


def new_group():
    return BpGroup()


def g1_gen(group):
    return group.gen1()


def g2_gen(group):
    return group.gen2()


def g1_identity(group):
    return G1Elem.inf(group)


def to_scalar(value, order: Bn) -> Bn:
    """Reduce an int or Bn into the scalar field. Floats and other types are rejected."""
    if isinstance(value, Bn):
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"scalars must be int or Bn, got {type(value).__name__}")
    return Bn.from_num(value % int(order))


def is_g1(element):
    return isinstance(element, G1Elem)


def is_g2(element):
    return isinstance(element, G2Elem)


class HashToG1:
    """
    Deterministic hash of byte strings into G1, bound to one DST.

    The input to ``BpGroup.hashG1`` is SHA256(len(dst) || dst || msg), so two
    different DSTs never share a preimage.
    """

    def __init__(self, group, dst):
        if not isinstance(dst, (bytes, bytearray)):
            raise PrimitiveFailure(f"DST must be bytes, got {type(dst).__name__}")
        if not 0 < len(dst) <= MAX_DST_LENGTH:
            raise PrimitiveFailure(f"DST length must be between 1 and {MAX_DST_LENGTH}, got {len(dst)}")

        self._group = group
        self._dst = bytes(dst)
        self._prefix = bytes([len(dst)]) + self._dst

    @property
    def dst(self):
        return self._dst

    def __call__(self, msg) -> G1Elem:
        if not isinstance(msg, (bytes, bytearray)):
            raise PrimitiveFailure(f"hash_to_g1 expects bytes, got {type(msg).__name__}")

        digest = SHA256.new(self._prefix + bytes(msg)).digest()
        try:
            return self._group.hashG1(digest)
        except Exception as e:
            raise PrimitiveFailure("hash-to-G1 failed") from e


def make_h2g1(group, dst) -> HashToG1:
    return HashToG1(group, dst)


def hash_to_g1(group, dst, msg) -> G1Elem:
    """One-shot hash into G1. Builds a fresh hasher; prefer a cached one."""
    return make_h2g1(group, dst)(msg)
