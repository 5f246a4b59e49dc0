"""Hex/JSON export and import of keys, shares, programs and aggregates.

Group elements are packed with ``petlib.pack`` and hex encoded, scalars are
``Bn.hex()`` strings and identities/tags are plain hex. Every ``*_from_dict``
checks element types and byte lengths against the given ``Params``.
"""

from bplib.bp import G1Elem, G2Elem
from petlib.bn import Bn
from petlib.pack import decode, encode

from mklhs.errors import InvalidInput
from mklhs.models import LabeledProgram, PublicKey, SecretKey, SignAggr, SignShare


# Serialization and Deserialization
def group_element_to_hex(element):
    """Serialize a group element and convert it to a hex string."""
    return encode(element).hex()


def hex_to_group_element(hex_str, expected_type=None):
    """Deserialize a group element from a hex string."""
    try:
        element = decode(bytes.fromhex(hex_str))
    except Exception as e:
        raise InvalidInput("malformed group element encoding") from e

    if expected_type is not None and not isinstance(element, expected_type):
        raise InvalidInput(f"expected {expected_type.__name__}, got {type(element).__name__}")
    return element


def scalar_to_hex(value):
    return value.hex()


def hex_to_scalar(hex_str, order):
    try:
        value = Bn.from_hex(hex_str)
    except Exception as e:
        raise InvalidInput(f"malformed scalar {hex_str!r}") from e
    if value < 0 or value >= order:
        raise InvalidInput("scalar out of range")
    return value


def _bytes_from_hex(hex_str):
    try:
        return bytes.fromhex(hex_str)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"malformed hex string {hex_str!r}") from e


def _field(data, key):
    try:
        return data[key]
    except (KeyError, TypeError) as e:
        raise InvalidInput(f"missing field {key!r}") from e


# --- Keys ---

def public_key_to_dict(pk: PublicKey):
    return {"id": pk.id.hex(), "value": group_element_to_hex(pk.value)}


def public_key_from_dict(pp, data) -> PublicKey:
    id_ = pp.new_id(_bytes_from_hex(_field(data, "id")))
    return PublicKey(id_, hex_to_group_element(_field(data, "value"), G2Elem))


def secret_key_to_dict(sk: SecretKey):
    return {"id": sk.id.hex(), "value": scalar_to_hex(sk.value)}


def secret_key_from_dict(pp, data) -> SecretKey:
    id_ = pp.new_id(_bytes_from_hex(_field(data, "id")))
    x = hex_to_scalar(_field(data, "value"), pp.order)
    if x == 0:
        raise InvalidInput("secret key scalar is zero")
    return SecretKey(id_, x)


# --- Labels and programs ---

def label_to_dict(label):
    return {"id": label.id.hex(), "tag": label.tag.hex()}


def label_from_dict(pp, data):
    return pp.label(_bytes_from_hex(_field(data, "id")), _bytes_from_hex(_field(data, "tag")))


def program_to_dict(program: LabeledProgram):
    return {
        "coeffs": [str(int(c)) for c in program.coeffs],
        "labels": [label_to_dict(label) for label in program.labels],
    }


def _list_field(data, key):
    value = _field(data, key)
    if not isinstance(value, list):
        raise InvalidInput(f"field {key!r} must be a list, got {type(value).__name__}")
    return value


def _coefficient(value):
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise InvalidInput(f"coefficients must be decimal integers, got {value!r}")
    try:
        return int(value)
    except ValueError as e:
        raise InvalidInput(f"coefficients must be decimal integers, got {value!r}") from e


def program_from_dict(pp, data) -> LabeledProgram:
    coeffs = [_coefficient(c) for c in _list_field(data, "coeffs")]
    labels = [label_from_dict(pp, label) for label in _list_field(data, "labels")]
    return LabeledProgram(coeffs, labels)


# --- Shares and aggregates ---

def share_to_dict(share: SignShare):
    return {
        "id": share.id.hex(),
        "gamma": group_element_to_hex(share.gamma),
        "mu": scalar_to_hex(share.mu),
    }


def share_from_dict(pp, data) -> SignShare:
    return SignShare(
        pp.new_id(_bytes_from_hex(_field(data, "id"))),
        hex_to_group_element(_field(data, "gamma"), G1Elem),
        hex_to_scalar(_field(data, "mu"), pp.order),
    )


def aggregate_to_dict(aggr: SignAggr):
    return {
        "gamma": group_element_to_hex(aggr.gamma),
        "ord_ids": [id_.hex() for id_ in aggr.ord_ids],
        "mus": [scalar_to_hex(mu) for mu in aggr.mus],
    }


def aggregate_from_dict(pp, data) -> SignAggr:
    ord_ids = [pp.new_id(_bytes_from_hex(h)) for h in _list_field(data, "ord_ids")]
    if len(set(ord_ids)) != len(ord_ids):
        raise InvalidInput("aggregate lists a signer more than once")
    mus = [hex_to_scalar(h, pp.order) for h in _list_field(data, "mus")]
    return SignAggr(hex_to_group_element(_field(data, "gamma"), G1Elem), ord_ids, mus)
