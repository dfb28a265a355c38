"""Grade-level sight-word defaults and suggestion merging."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

GRADE_RANGE: Final[range] = range(0, 6)
DEFAULT_SUGGESTION_LIMIT: Final[int] = 20

# Grade 0 is kindergarten.
GRADE_SIGHT_WORDS: Final[dict[int, tuple[str, ...]]] = {
    0: ("a", "and", "the", "i", "see", "like", "to", "go", "is", "my"),
    1: ("he", "she", "we", "they", "was", "for", "are", "you", "have", "with"),
    2: ("because", "from", "or", "this", "that", "had", "not", "what", "when", "your"),
    3: ("about", "many", "then", "them", "these", "would", "could", "should", "their", "people"),
    4: ("through", "every", "always", "around", "where", "before", "which", "there", "know", "write"),
    5: (
        "though",
        "thought",
        "enough",
        "different",
        "language",
        "important",
        "together",
        "between",
        "against",
        "special",
    ),
}


def is_valid_grade(grade: int) -> bool:
    return grade in GRADE_RANGE


def suggest_words(
    grade: int,
    popular: Iterable[str] = (),
    *,
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> list[str]:
    """Merge popular words for a grade with its defaults, popular first."""
    if not is_valid_grade(grade):
        raise ValueError(f"grade must be between {GRADE_RANGE.start} and {GRADE_RANGE.stop - 1}")
    merged: list[str] = []
    seen: set[str] = set()
    for word in [*popular, *GRADE_SIGHT_WORDS[grade]]:
        normalized = word.strip().lower()
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        merged.append(normalized)
    return merged[:limit]
