"""Deterministic passphrase strength scoring.

The score starts at -1 and every satisfied criterion adds its weight. Scores
are informational: breach screening is the only hard gate on persistence.
"""

import re
from enum import Enum
from typing import Callable, Dict, List, NamedTuple

BASE_SCORE = -1

_DIGITS = "0123456789"
_ALPHABET = "abcdefghijklmnopqrstuvwxyz"
_KEYBOARD_ROWS = ("qwertyuiop", "asdfghjkl", "zxcvbnm")


def _runs(sequences, size: int = 3) -> List[str]:
    """Every window of ``size`` characters, read forwards and backwards."""
    windows = []
    for sequence in sequences:
        for text in (sequence, sequence[::-1]):
            windows.extend(text[i : i + size] for i in range(len(text) - size + 1))
    return sorted(set(windows))


_REPEATED = re.compile(r"(.)\1{2,}", re.DOTALL)
_SEQUENTIAL_DIGITS = re.compile("|".join(_runs([_DIGITS])))
_SEQUENTIAL_LETTERS = re.compile("|".join(_runs([_ALPHABET, *_KEYBOARD_ROWS])))


class Criterion(str, Enum):
    """Strength criteria, valued by the label shown to users."""

    LOWERCASE = "At least one lowercase letter"
    UPPERCASE = "At least one uppercase letter"
    NUMBERS = "At least one number"
    SPECIAL = "At least one special character"
    REPEATED = "No more than 2 repeated characters"
    SEQUENTIAL_NUMBERS = "No sequential numbers"
    SEQUENTIAL_LETTERS = "No sequential letters"
    SHORT = "At least 8 characters"
    MEDIUM = "At least 12 characters"
    LONG = "At least 16 characters"
    VERY_LONG = "At least 20 characters"
    EXTREMELY_LONG = "At least 24 characters"


class _Rule(NamedTuple):
    weight: int
    matches: Callable[[str], bool]


_RULES: Dict[Criterion, _Rule] = {
    Criterion.LOWERCASE: _Rule(1, lambda p: re.search(r"[a-z]", p) is not None),
    Criterion.UPPERCASE: _Rule(1, lambda p: re.search(r"[A-Z]", p) is not None),
    Criterion.NUMBERS: _Rule(1, lambda p: re.search(r"[0-9]", p) is not None),
    Criterion.SPECIAL: _Rule(1, lambda p: re.search(r"[^a-zA-Z0-9]", p) is not None),
    Criterion.REPEATED: _Rule(-2, lambda p: _REPEATED.search(p) is not None),
    Criterion.SEQUENTIAL_NUMBERS: _Rule(
        -1, lambda p: _SEQUENTIAL_DIGITS.search(p) is not None
    ),
    Criterion.SEQUENTIAL_LETTERS: _Rule(
        -1, lambda p: _SEQUENTIAL_LETTERS.search(p) is not None
    ),
    Criterion.SHORT: _Rule(1, lambda p: len(p) >= 8),
    Criterion.MEDIUM: _Rule(1, lambda p: len(p) >= 12),
    Criterion.LONG: _Rule(1, lambda p: len(p) >= 16),
    Criterion.VERY_LONG: _Rule(1, lambda p: len(p) >= 20),
    Criterion.EXTREMELY_LONG: _Rule(1, lambda p: len(p) >= 24),
}

# -3 is reachable ("11123": digit, repeat and digit run) and shares the
# lowest label and color.
SCORE_LABELS: Dict[int, str] = {
    -3: "Immediately change this",
    -2: "Immediately change this",
    -1: "Do not consider this",
    0: "Good start",
    1: "Unacceptable",
    2: "Extremely weak",
    3: "Easily guessable",
    4: "Should be more varied",
    5: "Acceptable",
    6: "Good",
    7: "Strong",
    8: "Perfect",
}

SCORE_COLORS: Dict[int, str] = {
    -3: "#FF0000",
    -2: "#FF0000",
    -1: "#FF3300",
    0: "#FF6600",
    1: "#FF9900",
    2: "#FFCC00",
    3: "#FFFF00",
    4: "#CCFF00",
    5: "#99FF00",
    6: "#66FF00",
    7: "#33FF00",
    8: "#00FF00",
}


def calculate(passphrase: str) -> int:
    """Score a passphrase."""
    return BASE_SCORE + sum(
        rule.weight for rule in _RULES.values() if rule.matches(passphrase)
    )


def evaluate(passphrase: str) -> Dict[str, bool]:
    """Raw pass/fail of every criterion, keyed by its label.

    Penalty criteria pass when their pattern is absent, so ``True`` for
    "No sequential numbers" means no digit run was found.
    """
    return {
        criterion.value: rule.matches(passphrase) != (rule.weight < 0)
        for criterion, rule in _RULES.items()
    }


def weight(criterion: Criterion) -> int:
    return _RULES[criterion].weight


def strength_label(score: int) -> str:
    """Label of a score; unknown scores raise ``KeyError``."""
    return SCORE_LABELS[score]


def strength_color(score: int) -> str:
    """Hex color of a score; unknown scores raise ``KeyError``."""
    return SCORE_COLORS[score]
