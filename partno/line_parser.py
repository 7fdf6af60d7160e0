"""
Line Parser - OCR text to purchase-order item records

Turns the raw text of a photographed parts table into ParsedItem records.
Column order on the source sheet is fixed:

    NAME  MATERIAL  QUANTITY  SPEC...

Header rows and remark/part-number rows are dropped before tokenizing.
Compound names ("SW,PW" or "SW/PW") fan out into one record per sub-name,
and known abbreviations are expanded through a substitution table.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .normalize import extract_digits, split_name_parts

logger = logging.getLogger(__name__)

MIN_TOKENS = 4
REASON_INSUFFICIENT_TOKENS = "insufficient tokens"

# Keys are compared upper-cased; values are emitted verbatim.
DEFAULT_NAME_SUBSTITUTIONS: Dict[str, str] = {
    'HEX SOCKET HEAD BOLT': 'HEX BOLT',
    'SW': 'SW (SPRING WASHER)',
    'PW': 'PW (PLAIN WASHER)',
    'NUT': 'NUT',
}

# One tuple per column; a header row hits at least one synonym of every column.
DEFAULT_HEADER_KEYWORDS: Tuple[Tuple[str, ...], ...] = (
    ('명칭', 'name', 'description'),
    ('재료', '재질', 'material'),
    ('수량', 'qty', 'quantity'),
    ('규격', 'spec', 'size'),
)

# Any of these anywhere in a line marks it as a non-item row.
DEFAULT_NOISE_MARKERS: Tuple[str, ...] = ('p.no', '비고', 'remarks')


@dataclass(frozen=True)
class ParsedItem:
    """
    One reconciliation unit extracted from a line of OCR text.

    Valid items carry name/material/quantity/spec. Parse-error items carry
    only raw_line and reason.
    """
    name: str = ""
    material: str = ""
    quantity: str = "0"
    spec: str = ""
    parse_error: bool = False
    raw_line: str = ""
    reason: str = ""

    @classmethod
    def error(cls, raw_line: str, reason: str = REASON_INSUFFICIENT_TOKENS) -> 'ParsedItem':
        return cls(parse_error=True, raw_line=raw_line, reason=reason, quantity="")

    @property
    def comparison_text(self) -> str:
        """Name, material and spec joined for similarity scoring."""
        return f"{self.name} {self.material} {self.spec}"

    def to_dict(self) -> Dict[str, object]:
        if self.parse_error:
            return {'parseError': True, 'rawLine': self.raw_line, 'reason': self.reason}
        return {
            'parseError': False,
            'name': self.name,
            'material': self.material,
            'quantity': self.quantity,
            'spec': self.spec,
        }


def is_header_line(line: str, header_keywords: Sequence[Sequence[str]] = DEFAULT_HEADER_KEYWORDS) -> bool:
    """True when the line names every column (the table's header row)."""
    if not header_keywords:
        return False
    lower = line.lower()
    return all(
        any(keyword.lower() in lower for keyword in synonyms)
        for synonyms in header_keywords
    )


def is_noise_line(
    line: str,
    header_keywords: Sequence[Sequence[str]] = DEFAULT_HEADER_KEYWORDS,
    noise_markers: Iterable[str] = DEFAULT_NOISE_MARKERS
) -> bool:
    """Header rows and rows carrying a non-item marker are noise."""
    if is_header_line(line, header_keywords):
        return True
    lower = line.lower()
    return any(marker.lower() in lower for marker in noise_markers)


def substitute_name(name: str, substitutions: Mapping[str, str] = DEFAULT_NAME_SUBSTITUTIONS) -> str:
    """Expand/collapse a known name; unknown names come back unchanged."""
    key = name.strip().upper()
    for source, replacement in substitutions.items():
        if source.upper() == key:
            return replacement
    return name


def split_name(
    raw_name: str,
    substitutions: Mapping[str, str] = DEFAULT_NAME_SUBSTITUTIONS
) -> List[str]:
    """Split a compound name on commas/slashes and substitute each part."""
    return [substitute_name(part, substitutions) for part in split_name_parts(raw_name)]


def tokenize_line(line: str, substitutions: Mapping[str, str] = DEFAULT_NAME_SUBSTITUTIONS) -> List[str]:
    """
    Split a line on whitespace.

    A multi-word substitution phrase at the start of the line
    ("HEX SOCKET HEAD BOLT ...") is kept together as the first token,
    together with anything glued to it by a comma or slash.
    """
    phrases = sorted(
        (key for key in substitutions if len(key.split()) > 1),
        key=len,
        reverse=True
    )
    for phrase in phrases:
        words = [re.escape(w) for w in phrase.split()]
        pattern = r'^' + r'\s+'.join(words) + r'(?=$|[\s,/])'
        match = re.match(pattern, line, re.IGNORECASE)
        if not match:
            continue
        rest = line[match.end():]
        # Glue "...BOLT,SW" or "...BOLT/PW" onto the phrase token
        glued = re.match(r'^[,/]\S*', rest)
        head = match.group(0)
        if glued:
            head += glued.group(0)
            rest = rest[glued.end():]
        return [head] + rest.split()
    return line.split()


def parse_line(
    line: str,
    substitutions: Mapping[str, str] = DEFAULT_NAME_SUBSTITUTIONS
) -> List[ParsedItem]:
    """
    Parse one retained (non-noise, non-empty) line.

    Returns a single parse-error item when the line has fewer than
    MIN_TOKENS tokens, otherwise one item per sub-name (possibly none).
    """
    tokens = tokenize_line(line, substitutions)
    if len(tokens) < MIN_TOKENS:
        return [ParsedItem.error(line)]

    raw_name, material, raw_quantity = tokens[0], tokens[1], tokens[2]
    spec = ' '.join(tokens[3:])

    quantity = extract_digits(raw_quantity)
    if not re.search(r'[0-9]', raw_quantity):
        logger.warning(f"No digits in quantity token {raw_quantity!r}, defaulting to 0: {line!r}")

    names = split_name(raw_name, substitutions)
    if not names:
        logger.warning(f"Name token {raw_name!r} has no sub-names, line dropped: {line!r}")

    return [
        ParsedItem(name=name, material=material, quantity=quantity, spec=spec)
        for name in names
    ]


def parse_ocr_text(
    text: str,
    substitutions: Optional[Mapping[str, str]] = None,
    header_keywords: Optional[Sequence[Sequence[str]]] = None,
    noise_markers: Optional[Iterable[str]] = None
) -> List[ParsedItem]:
    """
    Parse raw OCR text into ParsedItem records, preserving line order.

    Args:
        text: Raw recognized text, one table row per line
        substitutions: Name substitution table (defaults to DEFAULT_NAME_SUBSTITUTIONS)
        header_keywords: Column synonym groups used to spot the header row
        noise_markers: Substrings that mark non-item rows

    Returns:
        List of ParsedItem (valid and parse-error records, in source order)
    """
    if substitutions is None:
        substitutions = DEFAULT_NAME_SUBSTITUTIONS
    if header_keywords is None:
        header_keywords = DEFAULT_HEADER_KEYWORDS
    if noise_markers is None:
        noise_markers = DEFAULT_NOISE_MARKERS
    noise_markers = tuple(noise_markers)

    lines = [line.strip() for line in (text or '').split('\n')]
    lines = [line for line in lines if line]

    items: List[ParsedItem] = []
    skipped = 0
    for line in lines:
        if is_noise_line(line, header_keywords, noise_markers):
            skipped += 1
            continue
        items.extend(parse_line(line, substitutions))

    logger.debug(f"Parsed {len(items)} items from {len(lines)} lines ({skipped} noise lines skipped)")
    return items
