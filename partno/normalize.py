"""
Text normalization helpers shared by the parser and the matcher.
"""

import re
from typing import List

# Uppercase Latin, digits and Hangul syllables survive; everything else
# (whitespace, punctuation, symbols, lowercase leftovers) is stripped.
_NON_KEY_CHARS = re.compile(r'[^A-Z0-9가-힣]')
_NON_DIGITS = re.compile(r'[^0-9]')
_NAME_DELIMITERS = re.compile(r'[,/]+')


def normalize_str(text: str) -> str:
    """
    Build a dense comparison key from free text.

    "hex bolt, M10 x 30" -> "HEXBOLTM10X30"
    """
    if not text:
        return ""
    return _NON_KEY_CHARS.sub('', text.upper())


def extract_digits(token: str) -> str:
    """Keep only the digits of a quantity token ("5pcs" -> "5"), "0" if none."""
    digits = _NON_DIGITS.sub('', token or '')
    return digits or '0'


def split_name_parts(raw_name: str) -> List[str]:
    """
    Split a name token on runs of commas/slashes.

    Empty parts are dropped, so "SW,,PW/" -> ["SW", "PW"] and ",/" -> [].
    """
    parts = _NAME_DELIMITERS.split(raw_name or '')
    return [p.strip() for p in parts if p.strip()]
