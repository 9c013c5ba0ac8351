"""Identity-based equality for entities.

Entities embed an ``id`` field and borrow these functions as their
``__eq__`` / ``__hash__``; attribute values never take part.
"""

from typing import Any


def same_identity(left: Any, right: Any) -> bool:
    """True when both are the same kind of entity with the same id."""
    if left is None or right is None:
        return False
    return type(left) is type(right) and left.id == right.id


def identity_eq(self: Any, other: object) -> bool:
    if other is None:
        return False
    if type(other) is not type(self):
        return NotImplemented
    return same_identity(self, other)


def identity_hash(self: Any) -> int:
    return hash((type(self).__name__, self.id))
