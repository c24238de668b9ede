"""
Ordered strategies for recovering a file size from listing markup.

Each extractor is a pure function from an AnchorContext to an optional
byte count. extract_size() runs them in order and the first positive
result wins.
"""

import re
from typing import Callable, Optional, Sequence

from remote.listing_parser import AnchorContext

UNIT_MULTIPLIERS = {
    "K": 1024,
    "M": 1024 * 1024,
    "G": 1024 * 1024 * 1024,
}

# Numbers glued to ':', '/' or '-' are date or time fragments, not sizes.
SIZE_TOKEN = re.compile(
    r"(?<![\d.:/-])(\d+(?:\.\d+)?)(?![\d:/-])\s*(bytes?|KB|MB|GB|K|M|G|B)?\b",
    re.IGNORECASE,
)

TRAILING_PATTERNS = (
    re.compile(r"\s+(\d+)\s*$"),
    re.compile(r"(\d+(?:\.\d+)?)\s*(bytes?|KB|MB|GB|K|M|G|B)\b", re.IGNORECASE),
    re.compile(r"\d{2}[-:]\d{2}\s+(\d+)"),
    re.compile(r"\s+(\d+)\s+"),
)

SizeExtractor = Callable[[AnchorContext], Optional[int]]


def parse_size(value: str, unit: Optional[str] = None) -> int:
    """
    Convert a number and optional unit to bytes using 1024-based multipliers.

    >>> parse_size("1.5", "MB")
    1572864
    """
    multiplier = UNIT_MULTIPLIERS.get(unit[0].upper(), 1) if unit else 1
    return int(float(value) * multiplier + 0.5)


def sibling_size(context: AnchorContext) -> Optional[int]:
    """
    Look for a size token in the nodes following the anchor.

    Plain numbers of 10 or less are ignored unless they carry a unit.
    """
    for text in context.sibling_texts:
        for match in SIZE_TOKEN.finditer(text):
            value, unit = match.group(1), match.group(2)
            size = parse_size(value, unit)
            if size > 10 or (unit and unit.upper() != "B"):
                return size
    return None


def trailing_text_size(context: AnchorContext) -> Optional[int]:
    """
    Match the text right after the anchor against the trailing-size patterns.
    """
    if not context.text_after:
        return None
    for pattern in TRAILING_PATTERNS:
        match = pattern.search(context.text_after)
        if match:
            unit = match.group(2) if pattern.groups >= 2 else None
            return parse_size(match.group(1), unit)
    return None


SIZE_EXTRACTORS: Sequence[SizeExtractor] = (sibling_size, trailing_text_size)


def extract_size(context: AnchorContext, extractors: Sequence[SizeExtractor] = SIZE_EXTRACTORS) -> Optional[int]:
    """
    Run the extractors in order.

    Returns:
        The first positive size found, or None
    """
    for extractor in extractors:
        size = extractor(context)
        if size:
            return size
    return None
