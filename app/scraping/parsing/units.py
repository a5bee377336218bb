"""
Unit and label normalization for scraped field values.

Byte sizes are 1024-based throughout (``KB`` = 1024 bytes, ``MB`` = 1024**2);
count suffixes are decimal (``K`` = 1e3, ``M`` = 1e6, ``B`` = 1e9).
"""

from __future__ import annotations

import re

BYTE_UNIT_MULTIPLIERS: dict[str, int] = {
    "B": 1,
    "BYTE": 1,
    "BYTES": 1,
    "K": 1024,
    "KB": 1024,
    "KIB": 1024,
    "M": 1024**2,
    "MB": 1024**2,
    "MIB": 1024**2,
    "G": 1024**3,
    "GB": 1024**3,
    "GIB": 1024**3,
    "T": 1024**4,
    "TB": 1024**4,
    "TIB": 1024**4,
}

COUNT_SUFFIX_MULTIPLIERS: dict[str, int] = {
    "": 1,
    "K": 1_000,
    "M": 1_000_000,
    "B": 1_000_000_000,
}

SIZE_PATTERN = re.compile(
    r"(?P<value>\d[\d,]*(?:\.\d+)?|\.\d+)\s*(?P<unit>bytes?|[kmgt]i?b|[kmgt])(?![a-z])",
    flags=re.IGNORECASE,
)
COUNT_PATTERN = re.compile(
    r"(?P<value>\d[\d,]*(?:\.\d+)?)\s*(?P<suffix>[kmb])?(?![a-z])",
    flags=re.IGNORECASE,
)
PRICE_NUMBER_PATTERN = re.compile(r"\d[\d,]*(?:\.\d+)?|\.\d+")
RATING_PATTERN = re.compile(r"\d+(?:\.\d+)?")
VERSION_LABEL_PATTERN = re.compile(r"^\s*version\b[\s:]*", flags=re.IGNORECASE)
VERSION_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)*")
WHITESPACE_PATTERN = re.compile(r"\s+")
FREE_LABELS = {"free", "free download", "freeware", "$0", "$0.00", "0", "0.00"}


def clean_text(value: str | None) -> str:
    if not value:
        return ""
    return WHITESPACE_PATTERN.sub(" ", value).strip()


def _to_float(raw: str) -> float | None:
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return None


def parse_size_bytes(text: str | None) -> int | None:
    """
    Normalize a human-readable size such as ``"1.0 MB"`` to bytes.

    >>> parse_size_bytes("1.0 MB")
    1048576
    """

    cleaned = clean_text(text)
    if not cleaned:
        return None
    match = SIZE_PATTERN.search(cleaned)
    if match is None:
        return None
    value = _to_float(match.group("value"))
    multiplier = BYTE_UNIT_MULTIPLIERS.get(match.group("unit").upper())
    if value is None or multiplier is None:
        return None
    return int(round(value * multiplier))


def parse_count(text: str | None) -> int | None:
    """
    Normalize an abbreviated count such as ``"10K Ratings"`` to an integer.

    >>> parse_count("10K Ratings")
    10000
    """

    cleaned = clean_text(text)
    if not cleaned:
        return None
    match = COUNT_PATTERN.search(cleaned)
    if match is None:
        return None
    value = _to_float(match.group("value"))
    if value is None:
        return None
    suffix = (match.group("suffix") or "").upper()
    return int(round(value * COUNT_SUFFIX_MULTIPLIERS[suffix]))


def clean_version(text: str | None) -> str | None:
    """
    Strip a leading ``Version`` label and keep the first numeric dotted
    sequence; text without any number is returned cleaned but otherwise as is.
    """

    cleaned = VERSION_LABEL_PATTERN.sub("", clean_text(text)).strip()
    if not cleaned:
        return None
    match = VERSION_NUMBER_PATTERN.search(cleaned)
    if match is None:
        return cleaned
    return match.group(0)


def parse_price(text: str | None) -> float | None:
    """
    Parse a display price. ``"Free"`` maps to ``0.0``; no number maps to None.
    """

    cleaned = clean_text(text)
    if not cleaned:
        return None
    if cleaned.lower() in FREE_LABELS or cleaned.lower().startswith("free"):
        return 0.0
    match = PRICE_NUMBER_PATTERN.search(cleaned)
    if match is None:
        return None
    return _to_float(match.group(0))


def parse_rating(text: str | None, *, scale: float = 5.0) -> float | None:
    """
    First decimal number in ``text`` that fits the rating scale.
    """

    for match in RATING_PATTERN.finditer(clean_text(text)):
        value = _to_float(match.group(0))
        if value is not None and 0.0 <= value <= scale:
            return value
    return None


def format_price_cents(cents: float) -> str:
    if cents <= 0:
        return "Free"
    return f"${cents / 100:.2f}"
