"""Secure passphrase generator, manipulator and clipboard utilities."""

import logging
import secrets
from typing import Dict, Tuple

import pyperclip

from .config import Config

logger = logging.getLogger(__name__)

LOWERS = "abcdefghijklmnopqrstuvwxyz"
UPPERS = LOWERS.upper()
NUMBERS = "0123456789"
SPECIALS = "@_.-$~!#%^&*()+=[]{}|;:,<>?/"
CHARSET = LOWERS + UPPERS + NUMBERS + SPECIALS

CHARACTER_SETS: Tuple[str, ...] = (LOWERS, UPPERS, NUMBERS, SPECIALS)
MIN_PER_SET = 2

# Look-alike substitutions, still readable by humans
SUBSTITUTIONS: Dict[str, Tuple[str, ...]] = {
    "q": ("Q", "q"),
    "w": ("W", "m", "M", "w"),
    "e": ("E", "€", "£", "e"),
    "r": ("R", "r"),
    "t": ("T", "7", "t"),
    "y": ("Y", "h", "y"),
    "u": ("U", "u", "n"),
    "i": ("I", "1", "i"),
    "o": ("O", "0", "o"),
    "p": ("P", "p"),
    "a": ("A", "4", "@", "a"),
    "s": ("S", "$", "5", "s"),
    "d": ("D", "d"),
    "f": ("F", "f"),
    "g": ("G", "6", "9", "g"),
    "h": ("H", "y", "h"),
    "j": ("J", "j"),
    "k": ("K", "k"),
    "l": ("L", "l"),
    "z": ("Z", "2", "z"),
    "x": ("X", "x"),
    "c": ("C", "c"),
    "v": ("V", "v"),
    "b": ("B", "3", "8", "b"),
    "n": ("N", "n", "u"),
    "m": ("M", "W", "w", "m"),
    "0": ("O", "o", "0"),
    "1": ("i", "1"),
    "2": ("Z", "z", "2"),
    "3": ("B", "3"),
    "4": ("A", "4"),
    "5": ("S", "s", "$"),
    "6": ("G", "6"),
    "7": ("7", "?", "T"),
    "8": ("B", "8"),
    "9": ("g", "9"),
    "@": ("A", "a"),
    "$": ("S", "s", "5"),
    "€": ("E", "e"),
    "£": ("E", "e"),
    "?": ("7",),
}


def generate_passphrase(length: int = Config.DEFAULT_GENERATED_LENGTH) -> str:
    """Generate a random passphrase.

    Lengths under ``Config.MIN_GENERATED_LENGTH`` are raised to it. At least
    two characters of every set are placed at distinct random positions.
    """
    length = max(length, Config.MIN_GENERATED_LENGTH)

    chars = [secrets.choice(CHARSET) for _ in range(length)]

    positions = list(range(length))
    for i in range(len(positions) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        positions[i], positions[j] = positions[j], positions[i]

    required = len(CHARACTER_SETS) * MIN_PER_SET
    for slot, position in enumerate(positions[:required]):
        charset = CHARACTER_SETS[slot % len(CHARACTER_SETS)]
        chars[position] = secrets.choice(charset)

    return "".join(chars)


def manipulate(text: str) -> str:
    """Swap characters for random look-alikes; others are lowercased."""
    result = []
    for character in text:
        lowered = character.lower()
        choices = SUBSTITUTIONS.get(lowered)
        result.append(secrets.choice(choices) if choices else lowered)
    return "".join(result)


def copy_to_clipboard(text: str) -> bool:
    """Copy text to clipboard. Returns True on success, False on failure."""
    try:
        pyperclip.copy(text)
        return True
    except pyperclip.PyperclipException as e:
        logger.debug("Clipboard unavailable: %s", e)
        return False
