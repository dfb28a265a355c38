"""Scene-based story composition that maximizes sight-word coverage."""

from __future__ import annotations

import logging
import random
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Final

from sight_story.core.grammar import correct_grammar
from sight_story.core.scene_library import (
    ACTIVITY_PHASES,
    NAME_PLACEHOLDER,
    PHASE_ORDER,
    REQUIRED_PHASES,
    SCENE_LIBRARY,
    Phase,
    Scene,
    scenes_by_phase,
)

DEFAULT_PROTAGONIST: Final[str] = "Alex"
NEW_WORD_WEIGHT: Final[int] = 10
BACKFILL_COVERAGE_RATIO: Final[float] = 0.7
BACKFILL_MAX_SCENES: Final[int] = 8
MAX_FILLER_SENTENCES: Final[int] = 10
_WORD_TOKEN = re.compile(r"[a-z][a-z'-]*")
GENERIC_TITLES: Final[tuple[str, ...]] = (
    "A Wonderful Day",
    "The Best Day Ever",
    "A Special Adventure",
    "One Amazing Day",
)
# First matching rule wins; a rule matches when any keyword occurs in a scene id.
TITLE_RULES: Final[tuple[tuple[tuple[str, ...], str], ...]] = (
    (("ride", "bike"), "A Bike Ride Adventure"),
    (("park",), "A Day at the Park"),
    (("school", "learn"), "A School Day Adventure"),
    (("friend", "play_together"), "A Day with Friends"),
)
FILLER_SENTENCES: Final[dict[str, str]] = {
    "ride": "{name} also got to ride around on a bike.",
    "eight": "{name} counted eight special things that day.",
    "work": "All the work was worth it in the end.",
    "always": "{name} would always remember this day.",
    "round": "They found a pretty round stone on the ground.",
    "tell": '"Let me tell you about my day," said {name}.',
    "around": "{name} looked around and smiled.",
    "gave": "{name} gave a big thank you hug.",
    "their": "All the friends shared their favorite things.",
    "because": "{name} was happy because it was such a good day.",
    "does": '"What does this do?" asked {name}.',
    "these": '"I love these!" said {name}.',
    "been": "It had been an amazing adventure.",
    "those": "{name} wanted to try those games next time.",
    "before": "This was better than ever before.",
    "is": '"This is wonderful!" said {name}.',
    "on": "{name} put everything back on the shelf.",
    "best": "It was the best time ever.",
    "made": "{name} made so many happy memories.",
    "both": "Both friends agreed it was perfect.",
    "many": "There were so many things to be thankful for.",
    "use": "{name} learned to use new skills.",
    "buy": "Maybe they could buy a treat tomorrow.",
    "off": "{name} took off running one more time.",
    "very": "{name} was very grateful.",
    "call": '"I will call you tomorrow!" said {name}.',
    "for": "This day was one for the books!",
    "wash": "It was time to wash up and rest.",
    "cold": "A cold drink tasted so good.",
    "full": "{name}'s heart was full of joy.",
    "which": "{name} knew which memories to treasure.",
    "read": "{name} wanted to read about more adventures.",
    "why": "Now {name} understood why this day was special.",
    "do": '"What should we do next?" wondered {name}.',
    "right": "Everything felt just right.",
    "with": "Being with friends made it special.",
    "fast": "Time went by so fast!",
    "sing": "{name} felt like singing a happy song.",
    "first": "This was the first of many good days.",
    "sit": "{name} sat down to think about the day.",
    "would": "{name} would never forget this.",
    "five": "{name} could think of five amazing moments.",
    "sleep": "Soon it would be time to sleep.",
    "write": "{name} wanted to write about this adventure.",
    "come": '"Come back soon!" called the friends.',
}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComposedStory:
    """Rendered story plus the coverage metadata callers persist and display."""

    title: str
    sentences: tuple[str, ...]
    used_words: tuple[str, ...]
    total_target_words: int
    coverage_percent: int
    scenes_used: tuple[str, ...]
    uncovered_words: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "title": self.title,
            "sentences": list(self.sentences),
            "usedWords": list(self.used_words),
            "totalTargetWords": self.total_target_words,
            "coveragePercent": self.coverage_percent,
            "scenesUsed": list(self.scenes_used),
        }


def normalize_target_words(target_words: Iterable[str]) -> list[str]:
    """Lowercase and trim targets, dropping blanks and repeats in first-seen order."""
    return list(
        dict.fromkeys(word.strip().lower() for word in target_words if word.strip())
    )


def compose_story(
    target_words: Sequence[str],
    protagonist_name: str = DEFAULT_PROTAGONIST,
    *,
    rng: random.Random | None = None,
    scenes: Sequence[Scene] = SCENE_LIBRARY,
) -> ComposedStory:
    """Compose a day-arc story covering as many target words as the scenes allow.

    Scenes are chosen one phase at a time in chronological order. Wake-up and
    bedtime always contribute a scene; other phases only when the best scene
    touches a target word. Low coverage triggers a backfill over the activity
    phases, and leftover words get filler sentences before the trip home.
    """
    generator = rng or random.Random()
    targets = normalize_target_words(target_words)
    target_set = frozenset(targets)
    used_words: dict[str, None] = {}
    used_scene_ids: set[str] = set()
    selected: list[Scene] = []
    grouped = scenes_by_phase(scenes)

    def mark_used(scene: Scene) -> None:
        used_scene_ids.add(scene.scene_id)
        for word in scene.words:
            lowered = word.lower()
            if lowered in target_set:
                used_words.setdefault(lowered, None)

    for phase in PHASE_ORDER:
        candidates = grouped.get(phase, [])
        if not candidates:
            continue
        best = select_best_scene(
            candidates,
            target_set=target_set,
            used_words=used_words.keys(),
            used_scene_ids=used_scene_ids,
            required=phase in REQUIRED_PHASES,
        )
        if best is not None:
            selected.append(best)
            mark_used(best)

    if (
        len(used_words) < len(targets) * BACKFILL_COVERAGE_RATIO
        and len(selected) < BACKFILL_MAX_SCENES
    ):
        for phase in ACTIVITY_PHASES:
            candidates = [
                scene
                for scene in grouped.get(phase, [])
                if scene.scene_id not in used_scene_ids
                and new_word_count(scene, target_set, used_words.keys()) > 0
            ]
            best = select_best_scene(
                candidates,
                target_set=target_set,
                used_words=used_words.keys(),
                used_scene_ids=used_scene_ids,
                required=False,
            )
            if best is not None:
                selected.insert(phase_insert_index(selected, phase), best)
                mark_used(best)

    sentences: list[str] = []
    for scene in selected:
        sentences.extend(scene.render(protagonist_name))

    uncovered = [word for word in targets if word not in used_words]
    if uncovered:
        fillers = filler_sentences(uncovered, protagonist_name, rng=generator)
        if fillers:
            index = filler_insert_index(selected, len(sentences))
            sentences[index:index] = [sentence for _, sentence in fillers]
            for word, _ in fillers:
                used_words.setdefault(word, None)

    coverage_percent = round(len(used_words) / len(targets) * 100) if targets else 0
    story = ComposedStory(
        title=choose_title(selected, rng=generator),
        sentences=tuple(sentences),
        used_words=tuple(used_words),
        total_target_words=len(targets),
        coverage_percent=coverage_percent,
        scenes_used=tuple(scene.scene_id for scene in selected),
        uncovered_words=tuple(word for word in targets if word not in used_words),
    )
    logger.info(
        "story.compose targets=%s scenes=%s sentences=%s coverage=%s",
        story.total_target_words,
        len(story.scenes_used),
        len(story.sentences),
        story.coverage_percent,
    )
    return story


def new_word_count(scene: Scene, target_set: frozenset[str], used_words: Iterable[str]) -> int:
    """Count target words the scene would newly cover."""
    used = set(used_words)
    return sum(1 for word in scene.words if word.lower() in target_set - used)


def score_scene(scene: Scene, target_set: frozenset[str], used_words: Iterable[str]) -> int:
    relevant = sum(1 for word in scene.words if word.lower() in target_set)
    return NEW_WORD_WEIGHT * new_word_count(scene, target_set, used_words) + relevant


def select_best_scene(
    candidates: Sequence[Scene],
    *,
    target_set: frozenset[str],
    used_words: Iterable[str],
    used_scene_ids: set[str],
    required: bool,
) -> Scene | None:
    """Pick the highest-scoring unused candidate; earlier candidates win ties.

    Required phases accept a zero score; other phases need a positive one.
    """
    used = set(used_words)
    best: Scene | None = None
    best_score = -1
    for scene in candidates:
        if scene.scene_id in used_scene_ids:
            continue
        score = score_scene(scene, target_set, used)
        if score > best_score:
            best, best_score = scene, score
    if required:
        return best
    return best if best_score > 0 else None


def phase_insert_index(selected: Sequence[Scene], phase: Phase) -> int:
    """Index after every scene of a lower or equal phase."""
    for index, scene in enumerate(selected):
        if scene.phase > phase:
            return index
    return len(selected)


def filler_insert_index(selected: Sequence[Scene], sentence_count: int) -> int:
    """Sentence index where the trip home begins, else two from the end."""
    index = 0
    for scene in selected:
        if scene.phase >= Phase.RETURN_HOME:
            return index
        index += len(scene.sentences)
    return max(0, sentence_count - 2)


def filler_sentences(
    uncovered: Sequence[str],
    name: str,
    *,
    rng: random.Random | None = None,
) -> list[tuple[str, str]]:
    """Return up to ten (word, sentence) fillers; words without a template are skipped."""
    fillers: list[tuple[str, str]] = []
    for word in uncovered:
        if len(fillers) >= MAX_FILLER_SENTENCES:
            break
        template = FILLER_SENTENCES.get(word.lower())
        if template is None:
            continue
        rendered = template.replace(NAME_PLACEHOLDER, name)
        fillers.append((word.lower(), correct_grammar(rendered, rng=rng)))
    return fillers


def choose_title(selected: Sequence[Scene], *, rng: random.Random | None = None) -> str:
    scene_ids = [scene.scene_id for scene in selected]
    for keywords, title in TITLE_RULES:
        if any(keyword in scene_id for scene_id in scene_ids for keyword in keywords):
            return title
    return (rng or random.Random()).choice(GENERIC_TITLES)


def measure_coverage(
    sentences: Iterable[str], target_words: Iterable[str]
) -> tuple[list[str], int]:
    """Return the targets that appear as words in the text and the coverage percent."""
    targets = normalize_target_words(target_words)
    tokens = {
        token.strip("'-")
        for sentence in sentences
        for token in _WORD_TOKEN.findall(sentence.lower())
    }
    used = [word for word in targets if word in tokens]
    percent = round(len(used) / len(targets) * 100) if targets else 0
    return used, percent
