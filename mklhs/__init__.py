"""mklhs: multi-key linearly homomorphic signatures (Aranha-Pagnin, ePrint 2019/830)
over the BN254 pairing group of bplib.

Research code. Not audited.
"""

from mklhs.config import DEFAULT_ID_LENGTH, DST_H2G1_LABEL, MklhsConfig, load_config
from mklhs.errors import InvalidInput, MklhsError, PrimitiveFailure, RandomnessFailure
from mklhs.models import Id, Label, LabeledProgram, PublicKey, SecretKey, SignAggr, SignShare, Tag
from mklhs.params import Params
from mklhs.protocol import evaluate, keygen, organize, sign

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_ID_LENGTH",
    "DST_H2G1_LABEL",
    "Id",
    "InvalidInput",
    "Label",
    "LabeledProgram",
    "MklhsConfig",
    "MklhsError",
    "Params",
    "PrimitiveFailure",
    "PublicKey",
    "RandomnessFailure",
    "SecretKey",
    "SignAggr",
    "SignShare",
    "Tag",
    "evaluate",
    "keygen",
    "load_config",
    "organize",
    "sign",
]
