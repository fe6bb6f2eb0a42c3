"""Symbolic identity constants.

An identity equal to ``_$<key>`` is shown as the value of constant ``key``.
Only a whole-value match is substituted, never a substring.
"""

from typing import Iterable, Optional

from .errors import ValidationError
from .models import ConstantPair

REFERENCE_PREFIX = "_$"


def reference(key: str) -> str:
    """The identity placeholder that refers to ``key``."""
    return f"{REFERENCE_PREFIX}{key}"


def resolve(value: str, constants: Iterable[ConstantPair]) -> str:
    """Replace an exact ``_$<key>`` reference with its constant value."""
    if not value.startswith(REFERENCE_PREFIX):
        return value
    return next(
        (pair.value for pair in constants if reference(pair.key) == value), value
    )


def validate_pair(key: Optional[str], value: Optional[str]) -> ConstantPair:
    """Build a constant pair, rejecting empty keys or values."""
    if not key:
        raise ValidationError("key")
    if not value:
        raise ValidationError("value")
    return ConstantPair(key=key, value=value)
