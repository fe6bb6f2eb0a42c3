"""Breach screening against embedded brute-force password lists.

The corpus is split by passphrase length into ``resources/breach/<length>.txt``
files, one password per line, sorted in ordinal (code point) order. A length
with no file has an empty list. Lists are loaded lazily and cached for the
process lifetime.
"""

import logging
from bisect import bisect_left
from functools import lru_cache
from importlib import resources
from typing import Sequence, Tuple

from .config import Config

logger = logging.getLogger(__name__)

RESOURCE_PACKAGE = "passenger"
RESOURCE_DIR = ("resources", "breach")


@lru_cache(maxsize=None)
def load_breach_list(length: int) -> Tuple[str, ...]:
    """Load the sorted breach list of one passphrase length."""
    resource = resources.files(RESOURCE_PACKAGE)
    for part in RESOURCE_DIR:
        resource = resource / part
    resource = resource / f"{length}.txt"

    if not resource.is_file():
        return ()

    content = resource.read_text(encoding="utf-8")
    passwords = tuple(line for line in content.split("\n") if line)
    logger.debug("Loaded %d breached passwords of length %d", len(passwords), length)
    return passwords


def binary_search(items: Sequence[str], target: str) -> int:
    """Index of ``target`` in the sorted ``items``, or -1."""
    index = bisect_left(items, target)
    if index < len(items) and items[index] == target:
        return index
    return -1


def is_known_breached(passphrase: str) -> bool:
    """Check whether a passphrase appears in the breach corpus.

    Passphrases longer than ``Config.BREACH_LENGTH_CEILING`` are never
    checked: no list exists past that length.
    """
    if len(passphrase) > Config.BREACH_LENGTH_CEILING:
        return False
    return binary_search(load_breach_list(len(passphrase)), passphrase) >= 0
