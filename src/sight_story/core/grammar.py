"""Regex-driven grammar normalization for freshly built story sentences.

Each pass takes and returns a plain string. ``correct_grammar`` applies the
passes in a fixed order; later passes assume the earlier ones already ran.
"""

from __future__ import annotations

import random
import re
from collections.abc import Callable, Sequence
from functools import partial, reduce
from typing import Final

SentencePass = Callable[[str], str]

_VOWELS: Final[frozenset[str]] = frozenset("aeiou")
# True means the word takes "an" regardless of its first letter.
ARTICLE_EXCEPTIONS: Final[dict[str, bool]] = {
    "university": False,
    "unique": False,
    "one": False,
    "user": False,
    "hour": True,
    "honest": True,
    "honor": True,
}
DETERMINER_NOUNS: Final[tuple[str, ...]] = (
    "friend",
    "teacher",
    "dog",
    "cat",
    "boy",
    "girl",
    "man",
    "woman",
    "car",
    "house",
    "book",
    "school",
    "store",
    "park",
    "ball",
    "game",
)
AGREEMENT_FIXES: Final[tuple[tuple[str, str], ...]] = (
    ("I is", "I am"),
    ("I are", "I am"),
    ("I has", "I have"),
    ("You is", "You are"),
    ("You has", "You have"),
    ("We is", "We are"),
    ("We has", "We have"),
    ("They is", "They are"),
    ("They has", "They have"),
    ("He are", "He is"),
    ("She are", "She is"),
    ("It are", "It is"),
    ("He have", "He has"),
    ("She have", "She has"),
    ("It have", "It has"),
)
_THIRD_PERSON_SUBJECTS: Final[frozenset[str]] = frozenset(
    {"he", "she", "it", "the", "this", "that"}
)
_NON_THIRD_PERSON_SUBJECTS: Final[frozenset[str]] = frozenset({"i", "you", "we", "they"})
THIRD_PERSON_VERBS: Final[dict[str, str]] = {
    "run": "runs",
    "walk": "walks",
    "play": "plays",
    "read": "reads",
    "write": "writes",
    "eat": "eats",
    "sleep": "sleeps",
    "go": "goes",
    "do": "does",
    "make": "makes",
    "take": "takes",
    "come": "comes",
    "see": "sees",
    "know": "knows",
    "want": "wants",
    "look": "looks",
    "use": "uses",
    "find": "finds",
    "give": "gives",
    "tell": "tells",
}
PROPER_NAMES: Final[tuple[str, ...]] = (
    "Mason",
    "Emma",
    "Noah",
    "Olivia",
    "Liam",
    "Ava",
    "Ethan",
    "Sophia",
    "Lucas",
    "Isabella",
    "Jackson",
    "Mia",
    "Aiden",
    "Charlotte",
    "Elijah",
    "Amelia",
    "Grayson",
    "Harper",
    "Oliver",
    "Evelyn",
    "Jacob",
    "Abigail",
    "Carter",
    "Emily",
    "James",
    "Ella",
    "Jayden",
    "Scarlett",
    "Benjamin",
    "Aria",
)
NAMING_PHRASES: Final[tuple[str, ...]] = ("named", "called", "whose name is", "with the name")
NAMING_NOUNS: Final[tuple[str, ...]] = (
    "friend",
    "teacher",
    "dog",
    "cat",
    "boy",
    "girl",
    "man",
    "woman",
    "person",
    "student",
    "child",
    "baby",
    "animal",
    "pet",
)
NAME_POOL: Final[tuple[str, ...]] = PROPER_NAMES[:8]
TRANSITIONS: Final[tuple[str, ...]] = ("After that", "Next", "Soon", "Later", "Eventually")
PAST_MARKERS: Final[tuple[str, ...]] = (
    "yesterday",
    "last week",
    "last year",
    "ago",
    "in the past",
)
PRESENT_MARKERS: Final[tuple[str, ...]] = ("today", "now", "currently", "this week", "this year")
TO_PAST: Final[tuple[tuple[str, str], ...]] = (
    ("go|goes", "went"),
    ("play|plays", "played"),
    ("run|runs", "ran"),
    ("walk|walks", "walked"),
    ("see|sees", "saw"),
    ("have|has", "had"),
    ("do|does", "did"),
)
TO_PRESENT: Final[tuple[tuple[str, str], ...]] = (
    ("went", "goes"),
    ("played", "plays"),
    ("ran", "runs"),
    ("walked", "walks"),
    ("saw", "sees"),
)

_NOUN_ALTERNATION = "|".join(DETERMINER_NOUNS)
_ARTICLE = re.compile(r"\b(a|an)\s+(\w+)\b", re.IGNORECASE)
_I_AND_NOUN = re.compile(rf"\b(I|i)\s+and\s+({_NOUN_ALTERNATION})\b")
_I_AND_NAME = re.compile(r"\b(I|i)\s+and\s+([A-Z][a-z]+)\b")
_NOUN_AND_I = re.compile(
    rf"(^|\.|,|\sand\s|\sbut\s|\sor\s)\s*({_NOUN_ALTERNATION})\s+and\s+(I|i)\b",
    re.IGNORECASE,
)
_SENTENCE_START_NOUN = re.compile(rf"(^|\.)\s+({_NOUN_ALTERNATION})\s+", re.IGNORECASE)
_FIRST_WORD_PAIR = re.compile(r"\b(\w+)\s+(\w+s?)\b")
_PROPER_NAME_PATTERNS: Final[tuple[tuple[re.Pattern[str], str], ...]] = tuple(
    (re.compile(rf"\b{name.lower()}\b"), name) for name in PROPER_NAMES
)
_NAMING_PATTERNS: Final[tuple[tuple[str, re.Pattern[str]], ...]] = tuple(
    (phrase, re.compile(rf"\b{phrase}\s+{noun}\b", re.IGNORECASE))
    for phrase in NAMING_PHRASES
    for noun in NAMING_NOUNS
)
_TERMINAL_PUNCTUATION = re.compile(r"[.!?]$")
_PAST_MARKER = re.compile(rf"\b({'|'.join(PAST_MARKERS)})\b", re.IGNORECASE)
_PRESENT_MARKER = re.compile(rf"\b({'|'.join(PRESENT_MARKERS)})\b", re.IGNORECASE)
_POSSESSIVES: Final[dict[str, str]] = {
    "I": "my",
    "You": "your",
    "He": "his",
    "She": "her",
    "We": "our",
    "They": "their",
}
_PRONOUN_OBJECTS: Final[tuple[str, ...]] = ("book", "friend", "home")
_ME_SUBJECT_VERBS: Final[tuple[str, ...]] = (
    "go",
    "goes",
    "went",
    "run",
    "runs",
    "ran",
    "walk",
    "walks",
    "walked",
    "play",
    "plays",
    "played",
    "see",
    "sees",
    "saw",
    "like",
    "likes",
    "liked",
    "have",
    "has",
    "had",
)


def should_use_an(word: str) -> bool:
    """Return True when ``word`` takes "an" under the vowel-sound heuristic."""
    if not word:
        return False
    lowered = word.lower()
    if lowered in ARTICLE_EXCEPTIONS:
        return ARTICLE_EXCEPTIONS[lowered]
    return lowered[0] in _VOWELS


def fix_articles(sentence: str) -> str:
    def replace(match: re.Match[str]) -> str:
        article, next_word = match.group(1), match.group(2)
        correct = "an" if should_use_an(next_word) else "a"
        if article[0] == "A":
            correct = correct.capitalize()
        return f"{correct} {next_word}"

    return _ARTICLE.sub(replace, sentence)


def fix_missing_determiners(sentence: str) -> str:
    """Insert "My"/"my"/"The" before bare common nouns used as subjects."""
    result = _I_AND_NOUN.sub(
        lambda match: f"My {match.group(2).lower()} and {match.group(1)}", sentence
    )
    result = _I_AND_NAME.sub(lambda match: f"{match.group(2)} and {match.group(1)}", result)

    def possessive(match: re.Match[str]) -> str:
        prefix, noun, pronoun = match.group(1), match.group(2), match.group(3)
        determiner = "My" if prefix == "" or prefix.endswith(".") else "my"
        return f"{prefix} {determiner} {noun.lower()} and {pronoun}"

    result = _NOUN_AND_I.sub(possessive, result)
    return _SENTENCE_START_NOUN.sub(
        lambda match: f"{match.group(1)} The {match.group(2)} ", result
    )


def fix_subject_verb_agreement(sentence: str) -> str:
    result = sentence
    for wrong, right in AGREEMENT_FIXES:
        result = re.sub(rf"\b{wrong}\b", right, result)

    pair = _FIRST_WORD_PAIR.search(sentence)
    if pair is None:
        return result
    subject, verb = pair.group(1), pair.group(2)
    lowered_subject = subject.lower()
    third_person = lowered_subject in _THIRD_PERSON_SUBJECTS or (
        lowered_subject not in _NON_THIRD_PERSON_SUBJECTS and not lowered_subject.endswith("s")
    )
    inflected = THIRD_PERSON_VERBS.get(verb.lower())
    if third_person and inflected is not None:
        pattern = re.compile(
            rf"\b{re.escape(lowered_subject)}\s+{re.escape(verb.lower())}\b", re.IGNORECASE
        )
        result = pattern.sub(f"{subject} {inflected}", result, count=1)
    return result


def fix_proper_nouns(sentence: str) -> str:
    result = sentence
    for pattern, name in _PROPER_NAME_PATTERNS:
        result = pattern.sub(name, result)
    return result


def fix_naming_patterns(sentence: str, rng: random.Random | None = None) -> str:
    """Replace "named friend"-style phrases with a name drawn from ``rng``."""
    generator = rng or random.Random()
    result = sentence
    for phrase, pattern in _NAMING_PATTERNS:
        if pattern.search(result):
            name = generator.choice(NAME_POOL)
            result = pattern.sub(f"{phrase} {name}", result)
    return result


def fix_punctuation(sentence: str) -> str:
    trimmed = sentence.strip()
    if _TERMINAL_PUNCTUATION.search(trimmed):
        return trimmed
    return f"{trimmed}."


def fix_capitalization(sentence: str) -> str:
    if not sentence:
        return sentence
    return sentence[0].upper() + sentence[1:]


def fix_pronouns(sentence: str) -> str:
    """Repair subject-case "Me" and pronoun-for-possessive slips."""
    result = re.sub(r"\bMe and\b", "I and", sentence)
    for verb in _ME_SUBJECT_VERBS:
        result = re.sub(rf"\bMe {verb}\b", f"I {verb}", result)
    for pronoun, possessive in _POSSESSIVES.items():
        for noun in _PRONOUN_OBJECTS:
            result = re.sub(rf"\b{pronoun} {noun}\b", f"{possessive} {noun}", result)
    return result


def fix_tense_consistency(sentence: str) -> str:
    """Shift a few common verbs to match "yesterday"/"today"-style time markers."""
    result = sentence
    if _PAST_MARKER.search(sentence):
        for present, past in TO_PAST:
            result = re.sub(rf"\b(?:{present})\b", past, result)
    if _PRESENT_MARKER.search(sentence):
        for past, present in TO_PRESENT:
            result = re.sub(rf"\b{past}\b", present, result)
    return result


def grammar_passes(rng: random.Random | None = None) -> tuple[SentencePass, ...]:
    """Return the ordered sentence passes used by ``correct_grammar``."""
    return (
        fix_articles,
        fix_missing_determiners,
        fix_subject_verb_agreement,
        fix_proper_nouns,
        partial(fix_naming_patterns, rng=rng),
        fix_punctuation,
        fix_capitalization,
    )


def correct_grammar(sentence: str, *, rng: random.Random | None = None) -> str:
    """Run every sentence pass in order; never raises."""
    if not sentence:
        return ""
    return reduce(lambda text, step: step(text), grammar_passes(rng), sentence)


def correct_story_grammar(
    sentences: Sequence[str], *, rng: random.Random | None = None
) -> list[str]:
    """Normalize a whole story, varying repeated "Then" openers after the second."""
    generator = rng or random.Random()
    corrected: list[str] = []
    then_count = 0
    for sentence in sentences:
        text = sentence
        if text.startswith("Then "):
            then_count += 1
            if then_count > 2:
                text = f"{generator.choice(TRANSITIONS)} {text[len('Then '):]}"
        corrected.append(correct_grammar(fix_pronouns(text), rng=generator))
    return corrected
