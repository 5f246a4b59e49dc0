"""Configuration for an MKLHS deployment.

A deployment is fixed by two values: the byte length ``K`` shared by every
identity and tag, and the domain separation tag (DST) used when hashing
labels into G1. Both can be kept in a JSON parameter file.
"""

import json
import logging
import os
from dataclasses import dataclass

from mklhs.errors import InvalidInput

logger = logging.getLogger(__name__)

# --- Defaults ---
DEFAULT_ID_LENGTH = 32

# Fixed DST for hashing labels into G1.
DST_H2G1_LABEL = b"MKLHS-AP-2019-830:ELL->G1:BN254:V01"

# Environment variable naming a parameter file, used when no path is given.
CONFIG_ENV_VAR = "MKLHS_CONFIG"


@dataclass(frozen=True)
class MklhsConfig:
    id_length: int = DEFAULT_ID_LENGTH
    dst: bytes = DST_H2G1_LABEL

    def __post_init__(self):
        # Parameter files store the DST as text.
        if not isinstance(self.dst, bytes):
            raise InvalidInput(f"dst must be bytes, got {type(self.dst).__name__}")
        try:
            self.dst.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidInput(f"dst must be valid UTF-8, got {self.dst!r}") from e

    def to_dict(self):
        return {"id_length": self.id_length, "dst": self.dst.decode("utf-8")}

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise InvalidInput(f"configuration must be a JSON object, got {type(data).__name__}")

        id_length = data.get("id_length", DEFAULT_ID_LENGTH)
        if isinstance(id_length, bool) or not isinstance(id_length, int) or id_length <= 0:
            raise InvalidInput(f"id_length must be a positive integer, got {id_length!r}")

        dst = data.get("dst")
        if dst is None:
            dst = DST_H2G1_LABEL
        elif isinstance(dst, str):
            dst = dst.encode("utf-8")
        else:
            raise InvalidInput(f"dst must be a string, got {type(dst).__name__}")

        return cls(id_length=id_length, dst=dst)


def read_json_file(file_path):
    """Reads and parses a JSON file."""
    try:
        with open(file_path, "r") as file:
            return json.load(file)
    except FileNotFoundError as e:
        raise InvalidInput(f"file not found at {file_path}") from e
    except json.JSONDecodeError as e:
        raise InvalidInput(f"could not parse JSON file at {file_path}") from e


def save_values(file_path, values):
    """Save values to a JSON file."""
    with open(file_path, "w") as file:
        json.dump(values, file, indent=4)


def load_config(path=None) -> MklhsConfig:
    """
    Load the deployment configuration.

    Looks at ``path`` first, then at the file named by ``MKLHS_CONFIG``. With
    neither set, the built-in defaults are returned.
    """
    path = path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return MklhsConfig()

    config = MklhsConfig.from_dict(read_json_file(path))
    logger.debug(f"Loaded configuration from {path}: id_length={config.id_length}")
    return config


def save_config(config: MklhsConfig, path):
    save_values(path, config.to_dict())
