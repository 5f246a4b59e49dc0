"""Data model of the MKLHS scheme: identities, labels, keys, shares and aggregates.

Identities and tags are fixed-length byte strings. The length ``K`` is part
of the type: ``sized_type(Id, 32)`` and ``sized_type(Id, 16)`` are distinct
classes, their instances never compare equal, and every protocol entry point
checks that it was handed the type built for its own ``K``.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import ClassVar, Optional, Tuple

from bplib.bp import G1Elem, G2Elem
from petlib.bn import Bn

from mklhs.errors import InvalidInput


@dataclass(frozen=True)
class _FixedBytes:
    raw: bytes

    # Byte length enforced by sized subclasses; None accepts any length.
    K: ClassVar[Optional[int]] = None

    def __post_init__(self):
        raw = self.raw
        if isinstance(raw, bytearray):
            raw = bytes(raw)
            object.__setattr__(self, "raw", raw)
        if not isinstance(raw, bytes):
            raise InvalidInput(f"{type(self).__name__} expects bytes, got {type(raw).__name__}")
        if self.K is not None and len(raw) != self.K:
            raise InvalidInput(f"{type(self).__name__} expects {self.K} bytes, got {len(raw)}")

    def __bytes__(self):
        return self.raw

    def __len__(self):
        return len(self.raw)

    def hex(self):
        return self.raw.hex()

    def __repr__(self):
        return f"{type(self).__name__}({self.raw.hex()})"


class Id(_FixedBytes):
    """Signer identity, ``K`` opaque bytes."""


class Tag(_FixedBytes):
    """Per-message tag, ``K`` opaque bytes, unique per label of one identity."""


@lru_cache(maxsize=None)
def sized_type(base, k):
    """The subclass of ``Id`` or ``Tag`` that only accepts exactly ``k`` bytes."""
    return type(f"{base.__name__}{k}", (base,), {"K": k, "__module__": base.__module__})


@dataclass(frozen=True)
class Label:
    id: Id
    tag: Tag

    def __post_init__(self):
        if not isinstance(self.id, Id):
            raise InvalidInput(f"label id must be an Id, got {type(self.id).__name__}")
        if not isinstance(self.tag, Tag):
            raise InvalidInput(f"label tag must be a Tag, got {type(self.tag).__name__}")
        if len(self.id) != len(self.tag):
            raise InvalidInput(f"label id and tag lengths differ: {len(self.id)} != {len(self.tag)}")

    def to_bytes(self) -> bytes:
        # id || tag, no delimiter: both halves have the same fixed length.
        return self.id.raw + self.tag.raw


@dataclass(frozen=True)
class SecretKey:
    id: Id
    value: Bn = field(repr=False)


@dataclass(frozen=True)
class PublicKey:
    id: Id
    value: G2Elem


@dataclass(frozen=True)
class SignShare:
    """One signer's signature over one labeled message: gamma = (H(label) + mu*g1) * x."""

    id: Id
    gamma: G1Elem
    mu: Bn


@dataclass(frozen=True)
class LabeledProgram:
    """
    Public linear function ``sum(coeffs[i] * message_of(labels[i]))``.

    Coefficients are kept as given (int or Bn) and reduced into the scalar
    field when the program is evaluated.
    """

    coeffs: Tuple
    labels: Tuple[Label, ...]

    def __post_init__(self):
        coeffs = tuple(self.coeffs)
        labels = tuple(self.labels)
        if len(coeffs) != len(labels):
            raise InvalidInput(f"program has {len(coeffs)} coefficients but {len(labels)} labels")

        for c in coeffs:
            if isinstance(c, bool) or not isinstance(c, (int, Bn)):
                raise InvalidInput(f"coefficients must be int or Bn, got {type(c).__name__}")
        for label in labels:
            if not isinstance(label, Label):
                raise InvalidInput(f"program labels must be Label, got {type(label).__name__}")

        object.__setattr__(self, "coeffs", coeffs)
        object.__setattr__(self, "labels", labels)

    @classmethod
    def from_pairs(cls, pairs):
        """Build a program from an iterable of ``(coefficient, label)`` pairs."""
        pairs = list(pairs)
        return cls(tuple(c for c, _ in pairs), tuple(label for _, label in pairs))

    def __len__(self):
        return len(self.labels)


@dataclass(frozen=True)
class SignAggr:
    """
    Result of evaluating a program: the aggregated G1 signature and, for each
    signer in first-occurrence order, the combination of its messages.
    """

    gamma: G1Elem
    ord_ids: Tuple[Id, ...]
    mus: Tuple[Bn, ...]

    def __post_init__(self):
        ord_ids = tuple(self.ord_ids)
        mus = tuple(self.mus)
        if len(ord_ids) != len(mus):
            raise InvalidInput(f"aggregate has {len(ord_ids)} signers but {len(mus)} messages")
        object.__setattr__(self, "ord_ids", ord_ids)
        object.__setattr__(self, "mus", mus)

    def signer_messages(self):
        """Pairs of (signer id, combined message), positionally matched."""
        return list(zip(self.ord_ids, self.mus))
