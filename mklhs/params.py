"""Public parameters shared by every signer and evaluator of a deployment."""

import logging

from mklhs.algebra import make_h2g1, new_group
from mklhs.config import DEFAULT_ID_LENGTH, DST_H2G1_LABEL, MklhsConfig
from mklhs.errors import InvalidInput
from mklhs.models import Id, Label, Tag, sized_type

logger = logging.getLogger(__name__)


class Params:
    """
    Pairing group, identity/tag length ``k`` and the cached label hasher.

    Read-only after construction, so one instance can be shared by any number
    of concurrent keygen/sign/evaluate calls. Construction fails with
    ``PrimitiveFailure`` if the DST is rejected by the hasher.
    """

    __slots__ = ("_k", "_dst", "_group", "_order", "_h2g1_label", "_id_type", "_tag_type")

    def __init__(self, k=DEFAULT_ID_LENGTH, dst=DST_H2G1_LABEL, group=None):
        if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
            raise InvalidInput(f"identity length must be a positive integer, got {k!r}")

        group = group if group is not None else new_group()
        # Stored hasher to avoid building one per signature.
        h2g1_label = make_h2g1(group, dst)

        self._k = k
        self._dst = bytes(dst)
        self._group = group
        self._order = group.order()
        self._h2g1_label = h2g1_label
        self._id_type = sized_type(Id, k)
        self._tag_type = sized_type(Tag, k)
        logger.debug(f"Params ready: k={k}, dst={self._dst!r}")

    @classmethod
    def from_config(cls, config: MklhsConfig, group=None):
        return cls(k=config.id_length, dst=config.dst, group=group)

    @property
    def k(self):
        return self._k

    @property
    def dst(self):
        return self._dst

    @property
    def group(self):
        return self._group

    @property
    def order(self):
        return self._order

    @property
    def h2g1_label(self):
        return self._h2g1_label

    @property
    def id_type(self):
        return self._id_type

    @property
    def tag_type(self):
        return self._tag_type

    # --- Typed constructors ---

    def new_id(self, raw) -> Id:
        return self._id_type(raw)

    def new_tag(self, raw) -> Tag:
        return self._tag_type(raw)

    def label(self, id_, tag) -> Label:
        """Build a label, accepting typed values or raw ``k``-byte strings."""
        if not isinstance(id_, Id):
            id_ = self.new_id(id_)
        if not isinstance(tag, Tag):
            tag = self.new_tag(tag)
        return self.check_label(Label(id_, tag))

    # --- Validation ---

    def check_id(self, id_):
        if not isinstance(id_, self._id_type):
            raise InvalidInput(f"expected a {self._k}-byte identity, got {id_!r}")
        return id_

    def check_tag(self, tag):
        if not isinstance(tag, self._tag_type):
            raise InvalidInput(f"expected a {self._k}-byte tag, got {tag!r}")
        return tag

    def check_label(self, label):
        if not isinstance(label, Label):
            raise InvalidInput(f"expected a Label, got {type(label).__name__}")
        self.check_id(label.id)
        self.check_tag(label.tag)
        return label

    def __repr__(self):
        return f"Params(k={self._k}, dst={self._dst!r})"
