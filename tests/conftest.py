import pytest

from mklhs.params import Params
from mklhs.rng import DeterministicRandom


class ScriptedRandom:
    """Hands out pre-set chunks in order; each request must match the next chunk's length."""

    def __init__(self, chunks):
        self.chunks = list(chunks)

    def __call__(self, n):
        chunk = self.chunks.pop(0)
        assert len(chunk) == n
        return chunk


@pytest.fixture(scope="session")
def pp():
    return Params()


@pytest.fixture(scope="session")
def pp16():
    return Params(k=16)


@pytest.fixture
def rng():
    return DeterministicRandom(b"mklhs-tests")


@pytest.fixture
def make_tag(pp):
    def _make(n):
        return pp.new_tag(n.to_bytes(pp.k, "big"))
    return _make
