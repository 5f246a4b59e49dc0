import pytest
from petlib.bn import Bn

from mklhs.algebra import g1_gen, g1_identity, g2_gen
from mklhs.errors import InvalidInput, PrimitiveFailure, RandomnessFailure
from mklhs.models import LabeledProgram
from mklhs.params import Params
from mklhs.protocol import evaluate, keygen, organize, sign
from mklhs.rng import DeterministicRandom
from tests.conftest import ScriptedRandom


def _times(point, n):
    return point * Bn.from_num(n)


# --- keygen ---

def test_keygen_smoke(pp, rng):
    sk, pk = keygen(pp, rng)
    assert len(pk.id) == pp.k
    assert sk.id == pk.id
    assert pk.value == g2_gen(pp.group) * sk.value
    assert sk.value != 0


def test_keygen_default_source(pp):
    (sk1, _), (sk2, _) = keygen(pp), keygen(pp)
    assert sk1.id != sk2.id


def test_keygen_is_reproducible_with_seeded_source(pp):
    sk1, pk1 = keygen(pp, DeterministicRandom(b"seed"))
    sk2, pk2 = keygen(pp, DeterministicRandom(b"seed"))
    assert sk1 == sk2
    assert pk1 == pk2


def test_keygen_resamples_zero_scalar(pp):
    nbytes = (int(pp.order).bit_length() + 7) // 8
    rng = ScriptedRandom([b"\x07" * pp.k, b"\x00" * nbytes, (1).to_bytes(nbytes, "big")])
    sk, pk = keygen(pp, rng)
    assert sk.id.raw == b"\x07" * pp.k
    assert int(sk.value) == 1
    assert pk.value == g2_gen(pp.group)


def test_keygen_randomness_failure(pp):
    def broken(n):
        raise OSError("no entropy")

    with pytest.raises(RandomnessFailure):
        keygen(pp, broken)


def test_secret_not_in_repr(pp, rng):
    sk, _ = keygen(pp, rng)
    assert sk.value.hex() not in repr(sk)


# --- sign ---

@pytest.fixture
def signer(pp, rng):
    return keygen(pp, rng)


def test_sign_formula(pp, signer, make_tag):
    sk, _ = signer
    label = pp.label(sk.id, make_tag(1))
    share = sign(pp, sk, label, 12345)

    h = pp.h2g1_label(label.to_bytes())
    assert share.id == sk.id
    assert int(share.mu) == 12345
    assert share.gamma == (h + g1_gen(pp.group) * Bn.from_num(12345)) * sk.value


def test_sign_is_deterministic(pp, signer, make_tag):
    sk, _ = signer
    label = pp.label(sk.id, make_tag(1))
    assert sign(pp, sk, label, 99) == sign(pp, sk, label, 99)


def test_sign_depends_on_tag(pp, signer, make_tag):
    sk, _ = signer
    s1 = sign(pp, sk, pp.label(sk.id, make_tag(1)), 99)
    s2 = sign(pp, sk, pp.label(sk.id, make_tag(2)), 99)
    assert s1.gamma != s2.gamma


def test_sign_reduces_message(pp, signer, make_tag):
    sk, _ = signer
    label = pp.label(sk.id, make_tag(1))
    q = int(pp.order)
    assert sign(pp, sk, label, q + 3) == sign(pp, sk, label, 3)


def test_sign_accepts_label_of_another_identity(pp, rng, make_tag):
    sk_a, _ = keygen(pp, rng)
    sk_b, _ = keygen(pp, rng)
    label = pp.label(sk_b.id, make_tag(1))

    share = sign(pp, sk_a, label, 1)

    h = pp.h2g1_label(label.to_bytes())
    assert share.id == sk_a.id
    assert share.gamma == (h + g1_gen(pp.group) * Bn.from_num(1)) * sk_a.value


def test_sign_strict_rejects_label_of_another_identity(pp, rng, make_tag):
    sk_a, _ = keygen(pp, rng)
    sk_b, _ = keygen(pp, rng)
    assert sign(pp, sk_a, pp.label(sk_a.id, make_tag(1)), 1, strict=True).id == sk_a.id
    with pytest.raises(InvalidInput):
        sign(pp, sk_a, pp.label(sk_b.id, make_tag(1)), 1, strict=True)


class BrokenHashGroup:
    """Real pairing group whose hash into G1 always fails."""

    def __init__(self, group):
        self._group = group

    def __getattr__(self, name):
        return getattr(self._group, name)

    def hashG1(self, data):
        raise RuntimeError("map failed")


def test_sign_propagates_hash_failure(pp, make_tag):
    broken = Params(group=BrokenHashGroup(pp.group))
    sk, _ = keygen(broken, DeterministicRandom(b"broken"))
    label = broken.label(sk.id, make_tag(1).raw)

    with pytest.raises(PrimitiveFailure) as excinfo:
        sign(broken, sk, label, 5)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_sign_rejects_other_length(pp, pp16, rng):
    sk16, _ = keygen(pp16, rng)
    label16 = pp16.label(sk16.id, b"\x00" * 16)
    with pytest.raises(InvalidInput):
        sign(pp, sk16, label16, 1)


# --- organize ---

def test_organize_first_occurrence_order(pp):
    a, b, c = (pp.new_id(bytes([i]) * pp.k) for i in (1, 2, 3))
    labels = [pp.label(x, bytes([i]) * pp.k) for i, x in enumerate([b, a, b, c, a, a])]

    ord_ids, groups = organize(labels)
    assert ord_ids == (b, a, c)
    assert groups == ((0, 2), (1, 4, 5), (3,))


def test_organize_partitions_indices(pp):
    ids = [pp.new_id(bytes([i % 4]) * pp.k) for i in (3, 1, 3, 0, 2, 1, 1, 0, 3)]
    labels = [pp.label(x, bytes([i]) * pp.k) for i, x in enumerate(ids)]

    ord_ids, groups = organize(labels)
    assert len(set(ord_ids)) == len(ord_ids) == len(set(ids))
    flat = sorted(i for g in groups for i in g)
    assert flat == list(range(len(labels)))
    for id_, group in zip(ord_ids, groups):
        assert list(group) == [i for i, x in enumerate(ids) if x == id_]


def test_organize_empty():
    assert organize([]) == ((), ())


# --- evaluate ---

def _sign_all(pp, keys, msgs, make_tag):
    labels, shares = [], []
    for i, (sk, m) in enumerate(zip(keys, msgs)):
        label = pp.label(sk.id, make_tag(i))
        labels.append(label)
        shares.append(sign(pp, sk, label, m))
    return labels, shares


def test_single_signer_weighted_sum(pp, signer, make_tag):
    sk, _ = signer
    msgs = [11, 22, 33]
    labels, shares = _sign_all(pp, [sk] * 3, msgs, make_tag)

    aggr = evaluate(pp, LabeledProgram([2, 3, 5], labels), shares)

    q = int(pp.order)
    assert aggr.ord_ids == (sk.id,)
    assert [int(mu) for mu in aggr.mus] == [(2 * 11 + 3 * 22 + 5 * 33) % q]
    expected = _times(shares[0].gamma, 2) + _times(shares[1].gamma, 3) + _times(shares[2].gamma, 5)
    assert aggr.gamma == expected


def test_multi_signer_separation(pp, rng, make_tag):
    sk_a, _ = keygen(pp, rng)
    sk_b, _ = keygen(pp, rng)
    m1, m2, m3 = 101, 202, 303
    labels, shares = _sign_all(pp, [sk_a, sk_b, sk_a], [m1, m2, m3], make_tag)

    aggr = evaluate(pp, LabeledProgram([2, 3, 4], labels), shares)

    assert aggr.ord_ids == (sk_a.id, sk_b.id)
    assert [int(mu) for mu in aggr.mus] == [2 * m1 + 4 * m3, 3 * m2]
    expected = _times(shares[0].gamma, 2) + _times(shares[1].gamma, 3) + _times(shares[2].gamma, 4)
    assert aggr.gamma == expected
    assert aggr.signer_messages()[1] == (sk_b.id, aggr.mus[1])


def test_zero_coefficient_contributes_nothing(pp, rng, make_tag):
    sk_a, _ = keygen(pp, rng)
    sk_b, _ = keygen(pp, rng)
    labels, shares = _sign_all(pp, [sk_a, sk_b, sk_a], [5, 6, 7], make_tag)

    aggr = evaluate(pp, LabeledProgram([3, 0, 0], labels), shares)

    assert aggr.gamma == _times(shares[0].gamma, 3)
    assert [int(mu) for mu in aggr.mus] == [15, 0]


def test_all_zero_program(pp, signer, make_tag):
    sk, _ = signer
    labels, shares = _sign_all(pp, [sk, sk], [5, 6], make_tag)
    aggr = evaluate(pp, LabeledProgram([0, 0], labels), shares)
    assert aggr.gamma.isinf()
    assert [int(mu) for mu in aggr.mus] == [0]


def test_identity_program_round_trip(pp, signer, make_tag):
    sk, _ = signer
    labels, shares = _sign_all(pp, [sk], [77], make_tag)

    aggr = evaluate(pp, LabeledProgram([1], labels), shares)

    assert aggr.gamma == shares[0].gamma
    assert aggr.ord_ids == (sk.id,)
    assert aggr.mus == (shares[0].mu,)


def test_negative_and_large_coefficients_reduce(pp, signer, make_tag):
    sk, _ = signer
    q = int(pp.order)
    labels, shares = _sign_all(pp, [sk, sk], [10, 10], make_tag)

    aggr = evaluate(pp, LabeledProgram([-1, q + 1], labels), shares)

    assert int(aggr.mus[0]) == 0
    assert aggr.gamma == _times(shares[1].gamma, 1) + _times(shares[0].gamma, q - 1)


def test_evaluate_matches_combined_signature(pp, signer, make_tag):
    # Evaluating f over shares equals the share algebra of the combined message.
    sk, _ = signer
    labels, shares = _sign_all(pp, [sk, sk], [4, 9], make_tag)
    aggr = evaluate(pp, LabeledProgram([3, 2], labels), shares)

    h = [pp.h2g1_label(label.to_bytes()) for label in labels]
    combined = _times(h[0], 3) + _times(h[1], 2) + g1_gen(pp.group) * aggr.mus[0]
    assert aggr.gamma == combined * sk.value


def test_evaluate_empty_program(pp):
    aggr = evaluate(pp, LabeledProgram([], []), [])
    assert aggr.gamma == g1_identity(pp.group)
    assert aggr.ord_ids == ()
    assert aggr.mus == ()


def test_evaluate_share_count_mismatch(pp, signer, make_tag):
    sk, _ = signer
    labels, shares = _sign_all(pp, [sk, sk], [1, 2], make_tag)
    with pytest.raises(InvalidInput):
        evaluate(pp, LabeledProgram([1, 1], labels), shares[:1])
    with pytest.raises(InvalidInput):
        evaluate(pp, LabeledProgram([1], labels[:1]), shares)


def test_evaluate_validates_before_any_group_operation(pp, signer, make_tag):
    sk, _ = signer
    labels, shares = _sign_all(pp, [sk, sk], [1, 2], make_tag)
    with pytest.raises(InvalidInput):
        evaluate(pp, LabeledProgram([1, 1], labels), [shares[0], "not a share"])


def test_evaluate_trusts_share_alignment_by_default(pp, rng, make_tag):
    sk_a, _ = keygen(pp, rng)
    sk_b, _ = keygen(pp, rng)
    labels, shares = _sign_all(pp, [sk_a, sk_b], [1, 2], make_tag)

    aggr = evaluate(pp, LabeledProgram([1, 1], labels), list(reversed(shares)))
    assert aggr.ord_ids == (sk_a.id, sk_b.id)


def test_evaluate_strict_rejects_misaligned_shares(pp, rng, make_tag):
    sk_a, _ = keygen(pp, rng)
    sk_b, _ = keygen(pp, rng)
    labels, shares = _sign_all(pp, [sk_a, sk_b], [1, 2], make_tag)

    program = LabeledProgram([1, 1], labels)
    assert evaluate(pp, program, shares, strict=True).ord_ids == (sk_a.id, sk_b.id)
    with pytest.raises(InvalidInput):
        evaluate(pp, program, list(reversed(shares)), strict=True)


def test_evaluate_rejects_other_length_labels(pp, pp16, rng):
    sk16, _ = keygen(pp16, rng)
    label16 = pp16.label(sk16.id, b"\x01" * 16)
    share16 = sign(pp16, sk16, label16, 3)
    with pytest.raises(InvalidInput):
        evaluate(pp, LabeledProgram([1], [label16]), [share16])
