"""
Signer and evaluator side of the Aranha-Pagnin MKLHS scheme (ePrint 2019/830).

    keygen:   x <- Zp \\ {0},  X = x * g2
    sign:     gamma = (H(id || tag) + mu * g1) * x
    evaluate: Gamma = sum_i f_i * gamma_i
              mu_id = sum_{i : label_i.id == id} f_i * mu_i
"""

import logging
from typing import Dict, List, Sequence, Tuple

from mklhs.algebra import g1_gen, g1_identity, g2_gen, is_g1, to_scalar
from mklhs.errors import InvalidInput
from mklhs.models import Id, Label, LabeledProgram, PublicKey, SecretKey, SignAggr, SignShare
from mklhs.params import Params
from mklhs.rng import default_rng, random_bytes, random_scalar

logger = logging.getLogger(__name__)


# --- Key Generation ---

def keygen(pp: Params, rng=None) -> Tuple[SecretKey, PublicKey]:
    """
    Generate a key pair for one signer.

    The identity is ``pp.k`` bytes drawn from ``rng``; the secret scalar is
    resampled until nonzero. Raises ``RandomnessFailure`` if the source fails.
    """
    rng = rng if rng is not None else default_rng()

    id_ = pp.new_id(random_bytes(rng, pp.k))

    x = random_scalar(rng, pp.order)
    while x == 0:
        x = random_scalar(rng, pp.order)

    sk = SecretKey(id_, x)
    pk = PublicKey(id_, g2_gen(pp.group) * x)
    logger.debug(f"Generated key pair for signer {id_.hex()}")
    return sk, pk


# --- Signing ---

def sign(pp: Params, sk: SecretKey, label: Label, msg, strict=False) -> SignShare:
    """
    Sign the message ``msg`` (int or Bn, reduced mod the group order) under ``label``.

    Deterministic in its inputs. Only a failure of the label hash can make it
    fail on well-formed input. With ``strict=True`` the label must also name
    the signer itself.
    """
    pp.check_id(sk.id)
    pp.check_label(label)
    if strict and label.id != sk.id:
        raise InvalidInput(f"label identity {label.id.hex()} does not match signer {sk.id.hex()}")
    mu = to_scalar(msg, pp.order)

    h = pp.h2g1_label(label.to_bytes())
    gamma = (h + g1_gen(pp.group) * mu) * sk.value
    return SignShare(sk.id, gamma, mu)


# --- Grouping ---

def organize(labels: Sequence[Label]) -> Tuple[Tuple[Id, ...], Tuple[Tuple[int, ...], ...]]:
    """
    Group label positions by signer identity.

    Returns ``(ord_ids, groups)``: the distinct identities in order of first
    appearance, and for each of them the indices of its labels in input order.
    """
    ord_ids: List[Id] = []
    groups: List[List[int]] = []
    position: Dict[Id, int] = {}

    for i, label in enumerate(labels):
        j = position.get(label.id)
        if j is None:
            j = len(ord_ids)
            position[label.id] = j
            ord_ids.append(label.id)
            groups.append([])
        groups[j].append(i)

    return tuple(ord_ids), tuple(tuple(g) for g in groups)


# --- Evaluation ---

def _check_inputs(pp, program, shares, strict):
    if not isinstance(program, LabeledProgram):
        raise InvalidInput(f"expected a LabeledProgram, got {type(program).__name__}")
    if len(shares) != len(program.labels):
        raise InvalidInput(f"program has {len(program.labels)} labels but {len(shares)} shares were given")

    for i, (label, share) in enumerate(zip(program.labels, shares)):
        pp.check_label(label)
        if not isinstance(share, SignShare) or not is_g1(share.gamma):
            raise InvalidInput(f"share {i} is not a SignShare over G1")
        pp.check_id(share.id)
        if strict and share.id != label.id:
            raise InvalidInput(f"share {i} was signed by {share.id.hex()} but label {i} names {label.id.hex()}")


def evaluate(pp: Params, program: LabeledProgram, shares: Sequence[SignShare], strict=False) -> SignAggr:
    """
    Homomorphically evaluate ``program`` over ``shares``.

    ``shares[i]`` must be the share for ``program.labels[i]``. By default that
    pairing is trusted; with ``strict=True`` each share's identity is checked
    against its label's identity. All validation happens before any group
    operation, so an error never leaves a partial result.
    """
    shares = tuple(shares)
    _check_inputs(pp, program, shares, strict)

    order = pp.order
    coeffs = [to_scalar(c, order) for c in program.coeffs]

    gamma = g1_identity(pp.group)
    for f, share in zip(coeffs, shares):
        gamma = gamma + share.gamma * f

    ord_ids, groups = organize(program.labels)

    mus = []
    for indices in groups:
        mu = to_scalar(0, order)
        for i in indices:
            mu = mu.mod_add(coeffs[i].mod_mul(shares[i].mu, order), order)
        mus.append(mu)

    logger.debug(f"Evaluated program over {len(shares)} shares from {len(ord_ids)} signers")
    return SignAggr(gamma, ord_ids, tuple(mus))
