"""
Name and developer similarity scoring for store lookups.
"""

from __future__ import annotations

import re

NON_WORD_PATTERN = re.compile(r"[^\w\s]")
WHITESPACE_PATTERN = re.compile(r"\s+")
UNKNOWN_DEVELOPER_LABELS = {"", "unknown", "unknown developer"}


def clean_name(value: str | None) -> str:
    lowered = (value or "").lower()
    return WHITESPACE_PATTERN.sub(" ", NON_WORD_PATTERN.sub("", lowered)).strip()


def name_similarity(left: str | None, right: str | None) -> float:
    """
    1.0 for equal cleaned names, 0.9 when one contains the other, otherwise
    the share of words in common relative to the longer name.
    """

    clean_left = clean_name(left)
    clean_right = clean_name(right)
    if not clean_left or not clean_right:
        return 0.0
    if clean_left == clean_right:
        return 1.0
    if clean_left in clean_right or clean_right in clean_left:
        return 0.9

    left_words = clean_left.split(" ")
    right_words = set(clean_right.split(" "))
    common = sum(1 for word in left_words if word in right_words)
    return common / max(len(left_words), len(right_words))


def is_unknown_developer(developer: str | None) -> bool:
    return clean_name(developer) in UNKNOWN_DEVELOPER_LABELS


def developer_similarity(candidate: str | None, developer: str | None) -> float:
    if is_unknown_developer(developer):
        return 0.0
    return name_similarity(candidate, developer)


def compute_confidence(
    *,
    candidate_name: str | None,
    candidate_developer: str | None,
    name: str,
    developer: str | None,
    name_weight: float = 0.6,
    developer_weight: float = 0.4,
) -> float:
    """
    Weighted confidence in [0, 1]. When the developer is unknown, name
    similarity fills the developer share.
    """

    name_score = name_similarity(candidate_name, name)
    if is_unknown_developer(developer):
        developer_score = name_score
    else:
        developer_score = developer_similarity(candidate_developer, developer)
    total_weight = name_weight + developer_weight
    if total_weight <= 0:
        return 0.0
    score = (name_weight * name_score + developer_weight * developer_score) / total_weight
    return min(1.0, max(0.0, score))
