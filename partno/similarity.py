"""
String similarity scorers.

All scorers return a float in [0.0, 1.0] where 1.0 means identical.
"""

from collections import Counter
from difflib import SequenceMatcher
from typing import Callable, Dict

Scorer = Callable[[str, str], float]


def _bigrams(text: str) -> Counter:
    return Counter(text[i:i + 2] for i in range(len(text) - 1))


def dice_coefficient(first: str, second: str) -> float:
    """
    Sørensen-Dice coefficient over character bigrams.

    Whitespace is ignored. Bigrams are counted as a multiset, so repeated
    pairs ("AAAA") only match as often as they occur on both sides.
    """
    first = ''.join(first.split())
    second = ''.join(second.split())

    if first == second:
        # Empty vs empty scores 0.0, not 1.0: an empty key never matches
        return 1.0 if first else 0.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    first_bigrams = _bigrams(first)
    second_bigrams = _bigrams(second)
    overlap = sum((first_bigrams & second_bigrams).values())

    return (2.0 * overlap) / (len(first) + len(second) - 2)


def sequence_ratio(first: str, second: str) -> float:
    """difflib ratio; 0.0 when either side is empty."""
    if not first or not second:
        return 0.0
    return SequenceMatcher(None, first, second).ratio()


SCORERS: Dict[str, Scorer] = {
    'dice': dice_coefficient,
    'sequence': sequence_ratio,
}


def get_scorer(name: str) -> Scorer:
    """Resolve a scorer by name ("dice" or "sequence")."""
    try:
        return SCORERS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown scorer {name!r}, expected one of: {', '.join(SCORERS)}")
