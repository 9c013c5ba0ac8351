"""
Structural equality engine.

Value objects are compared, hashed and rendered from their *declared*
fields only.  A value type declares its fields once, as a frozen
dataclass deriving from ``ValueType``; the free functions below do the
rest for every such type.

Rules
-----
* ``structural_eq``: same concrete type and every field pair equal
  (two ``None`` fields are equal, ``None`` vs a value is not).
* ``structural_hash``: equal values hash equally; field values are
  mixed in declaration order.
* ``structural_str``: ``TypeName(a: 1; b: 2)`` with fields sorted by
  name.
"""

from __future__ import annotations

import dataclasses
from functools import lru_cache
from typing import Any

from .errors import InvalidArgument

_HASH_SEED = 354564456
_HASH_MULTIPLIER = -1521134295
_HASH_MASK = (1 << 64) - 1


@lru_cache(maxsize=None)
def declared_fields(cls: type) -> tuple[str, ...]:
    """Names of the fields *cls* declares, in declaration order."""
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__name__} does not declare its fields")
    return tuple(f.name for f in dataclasses.fields(cls))


def field_values(obj: Any) -> tuple[Any, ...]:
    return tuple(getattr(obj, name) for name in declared_fields(type(obj)))


def structural_eq(left: Any, right: Any) -> bool:
    if left is right:
        return True
    if left is None or right is None:
        return False
    if type(left) is not type(right):
        return False
    return all(
        (a is None and b is None) or (a is not None and a == b)
        for a, b in zip(field_values(left), field_values(right))
    )


def structural_hash(obj: Any) -> int:
    code = _HASH_SEED
    for value in field_values(obj):
        code ^= ((code << 4) + hash(value) + (code >> 7)) & _HASH_MASK
    code = (_HASH_MULTIPLIER * (_HASH_MULTIPLIER * code)) & _HASH_MASK
    return hash(code)


def structural_str(obj: Any) -> str:
    parts = "; ".join(
        f"{name}: {getattr(obj, name)}"
        for name in sorted(declared_fields(type(obj)))
    )
    return f"{type(obj).__name__}({parts})"


# ── Base class ────────────────────────────────────────────────────────


class ValueType:
    """Mixin for immutable value objects.

    Subclasses are declared with
    ``@dataclass(frozen=True, eq=False, repr=False)`` so the dataclass
    machinery supplies the field list while equality, hashing and the
    string form stay structural.  Construction rejects ``None`` fields.
    """

    def __post_init__(self) -> None:
        for name in declared_fields(type(self)):
            if getattr(self, name) is None:
                raise InvalidArgument(
                    f"{type(self).__name__}.{name} must not be None"
                )

    def __eq__(self, other: object) -> bool:
        if other is None:
            return False
        if type(other) is not type(self):
            return NotImplemented
        return structural_eq(self, other)

    def __hash__(self) -> int:
        return structural_hash(self)

    def __repr__(self) -> str:
        return structural_str(self)

    __str__ = __repr__
