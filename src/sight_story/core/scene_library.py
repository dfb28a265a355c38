"""Fixed library of day-in-the-life scenes used by the story composer."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import Final


class Phase(IntEnum):
    """Chronological rank of a scene within one story day."""

    WAKE_UP = 1
    MORNING_ROUTINE = 2
    LEAVE_HOME = 3
    TRAVEL = 4
    ACTIVITY_1 = 5
    ACTIVITY_2 = 6
    ACTIVITY_3 = 7
    RETURN_HOME = 8
    EVENING = 9
    BEDTIME = 10


class Setting(StrEnum):
    """Descriptive location tag; not used as a selection constraint."""

    HOME = "home"
    PARK = "park"
    SCHOOL = "school"
    OUTSIDE = "outside"
    STORE = "store"
    ANYWHERE = "anywhere"


PHASE_ORDER: Final[tuple[Phase, ...]] = tuple(sorted(Phase))
REQUIRED_PHASES: Final[frozenset[Phase]] = frozenset({Phase.WAKE_UP, Phase.BEDTIME})
ACTIVITY_PHASES: Final[tuple[Phase, ...]] = (
    Phase.ACTIVITY_1,
    Phase.ACTIVITY_2,
    Phase.ACTIVITY_3,
)
NAME_PLACEHOLDER: Final[str] = "{name}"


@dataclass(frozen=True)
class Scene:
    """Pre-written sentence group tagged with phase, setting, and vocabulary."""

    scene_id: str
    phase: Phase
    setting: Setting
    sentences: tuple[str, ...]
    words: tuple[str, ...]

    def render(self, name: str) -> list[str]:
        return [sentence.replace(NAME_PLACEHOLDER, name) for sentence in self.sentences]


def _scene(
    scene_id: str,
    phase: Phase,
    setting: Setting,
    sentences: tuple[str, ...],
    words: str,
) -> Scene:
    return Scene(
        scene_id=scene_id,
        phase=phase,
        setting=setting,
        sentences=sentences,
        words=tuple(words.split()),
    )


SCENE_LIBRARY: Final[tuple[Scene, ...]] = (
    # Wake up
    _scene(
        "morning_wake",
        Phase.WAKE_UP,
        Setting.HOME,
        (
            "One morning, {name} woke up very early.",
            "The sun was bright, and it was going to be a good day.",
        ),
        "one morning woke up very early the sun was bright and it going to be a good day",
    ),
    _scene(
        "excited_morning",
        Phase.WAKE_UP,
        Setting.HOME,
        (
            "{name} jumped out of bed with a big smile.",
            '"Today is going to be the best day!" said {name}.',
        ),
        "jumped out of bed with a big smile today is going to be the best day said",
    ),
    _scene(
        "special_day_start",
        Phase.WAKE_UP,
        Setting.HOME,
        (
            "This was no ordinary day for {name}.",
            "Something very special was about to happen.",
        ),
        "this was no ordinary day for something very special about to happen",
    ),
    # Morning routine
    _scene(
        "wash_up",
        Phase.MORNING_ROUTINE,
        Setting.HOME,
        (
            "First, {name} went to wash up.",
            "The cold water helped {name} feel awake and ready.",
        ),
        "first went to wash up the cold water helped feel awake and ready",
    ),
    _scene(
        "get_dressed",
        Phase.MORNING_ROUTINE,
        Setting.HOME,
        (
            "{name} put on the best clothes from the closet.",
            '"Which shirt should I use today?" wondered {name}.',
        ),
        "put on the best clothes from closet which shirt should i use today wondered",
    ),
    _scene(
        "eat_breakfast",
        Phase.MORNING_ROUTINE,
        Setting.HOME,
        (
            "Mom made a full breakfast for everyone.",
            "{name} ate quickly because there was so much to do.",
        ),
        "mom made a full breakfast for everyone ate quickly because there was so much to do",
    ),
    # Leave home
    _scene(
        "go_outside",
        Phase.LEAVE_HOME,
        Setting.OUTSIDE,
        (
            "After getting ready, {name} went outside.",
            "The air was fresh and the sky was very blue.",
        ),
        "after getting ready went outside the air was fresh and sky very blue",
    ),
    _scene(
        "leave_with_mom",
        Phase.LEAVE_HOME,
        Setting.OUTSIDE,
        (
            '"Let us go now," said Mom.',
            "{name} was very excited to leave the house.",
        ),
        "let us go now said mom was very excited to leave the house",
    ),
    # Travel
    _scene(
        "walk_around",
        Phase.TRAVEL,
        Setting.OUTSIDE,
        (
            "{name} took a walk around the block.",
            "Many birds were singing in the trees along the way.",
        ),
        "took a walk around the block many birds were singing in trees along way",
    ),
    _scene(
        "ride_bike",
        Phase.TRAVEL,
        Setting.OUTSIDE,
        (
            "{name} wanted to ride a bike around the neighborhood.",
            "Going fast down the road was always the best part!",
        ),
        "wanted to ride a bike around the neighborhood going fast down road was always best part",
    ),
    # Activities
    _scene(
        "arrive_park",
        Phase.ACTIVITY_1,
        Setting.PARK,
        (
            "At the park, {name} found many things to do.",
            "There were swings, slides, and a big round sandbox.",
        ),
        "at the park found many things to do there were swings slides and a big round sandbox",
    ),
    _scene(
        "meet_friend",
        Phase.ACTIVITY_1,
        Setting.ANYWHERE,
        (
            "A friend came over to say hello.",
            '"Do you want to play with me?" asked the friend.',
        ),
        "a friend came over to say hello do you want play with me asked the",
    ),
    _scene(
        "play_together",
        Phase.ACTIVITY_2,
        Setting.ANYWHERE,
        (
            "Both friends played together for a long time.",
            "They ran around and had so much fun.",
        ),
        "both friends played together for a long time they ran around and had so much fun",
    ),
    _scene(
        "share_snack",
        Phase.ACTIVITY_2,
        Setting.ANYWHERE,
        (
            "{name} gave some snacks to share with friends.",
            '"These are for you," said {name}. "I made them myself!"',
        ),
        "gave some snacks to share with friends these are for you said i made them myself",
    ),
    _scene(
        "read_book",
        Phase.ACTIVITY_2,
        Setting.ANYWHERE,
        (
            "{name} found a good book to read.",
            "The story would tell about many adventures.",
        ),
        "found a good book to read the story would tell about many adventures",
    ),
    _scene(
        "sing_song",
        Phase.ACTIVITY_2,
        Setting.ANYWHERE,
        (
            "{name} began to sing a happy song.",
            "The music made everyone want to dance around.",
        ),
        "began to sing a happy song the music made everyone want dance around",
    ),
    _scene(
        "count_things",
        Phase.ACTIVITY_2,
        Setting.ANYWHERE,
        (
            "{name} counted eight birds sitting on the fence.",
            "Then five more came, which made many birds in all!",
        ),
        "counted eight birds sitting on the fence then five more came which made many in all",
    ),
    _scene(
        "try_hard",
        Phase.ACTIVITY_3,
        Setting.ANYWHERE,
        (
            "It was hard work, but {name} did not give up.",
            '"I will try again," said {name}. "I can do this!"',
        ),
        "it was hard work but did not give up i will try again said can do this",
    ),
    _scene(
        "ask_why",
        Phase.ACTIVITY_3,
        Setting.ANYWHERE,
        (
            '"Why does it work that way?" asked {name}.',
            'Mom smiled and said, "Let me tell you."',
        ),
        "why does it work that way asked mom smiled and said let me tell you",
    ),
    _scene(
        "write_story",
        Phase.ACTIVITY_3,
        Setting.ANYWHERE,
        (
            "{name} wanted to write a story of their own.",
            '"I will use all the words I know," said {name}.',
        ),
        "wanted to write a story of their own i will use all the words know said",
    ),
    _scene(
        "sit_rest",
        Phase.ACTIVITY_3,
        Setting.ANYWHERE,
        (
            "After all that work, it was time to sit down and rest.",
            "{name} sat on a bench and thought about the fun day.",
        ),
        "after all that work it was time to sit down and rest sat on a bench thought about fun day",
    ),
    _scene(
        "buy_treat",
        Phase.ACTIVITY_3,
        Setting.STORE,
        (
            "They went to buy a cold treat from the store.",
            "The ice cream was very good on such a warm day.",
        ),
        "they went to buy a cold treat from the store ice cream was very good on such warm day",
    ),
    _scene(
        "call_friend",
        Phase.ACTIVITY_1,
        Setting.ANYWHERE,
        (
            "{name} wanted to call a friend on the phone.",
            '"Can you come over to play?" {name} asked.',
        ),
        "wanted to call a friend on the phone can you come over play asked",
    ),
    _scene(
        "find_something",
        Phase.ACTIVITY_2,
        Setting.OUTSIDE,
        (
            "{name} found something round and shiny on the ground.",
            '"What is this?" {name} asked. "I have never seen one before!"',
        ),
        "found something round and shiny on the ground what is this asked i have never seen one before",
    ),
    _scene(
        "look_flowers",
        Phase.ACTIVITY_2,
        Setting.OUTSIDE,
        (
            "{name} looked around at all the pretty flowers.",
            "There were so many colors - red, yellow, and blue!",
        ),
        "looked around at all the pretty flowers there were so many colors red yellow and blue",
    ),
    _scene(
        "see_animals",
        Phase.ACTIVITY_2,
        Setting.OUTSIDE,
        (
            '"Look at those animals!" said {name}.',
            "A rabbit and its babies were playing by the tree.",
        ),
        "look at those animals said a rabbit and its babies were playing by the tree",
    ),
    _scene(
        "kind_help",
        Phase.ACTIVITY_2,
        Setting.ANYWHERE,
        (
            "{name} always tries to help others.",
            "Being kind is the right thing to do.",
        ),
        "always tries to help others being kind is the right thing do",
    ),
    _scene(
        "give_gift",
        Phase.ACTIVITY_2,
        Setting.ANYWHERE,
        (
            "{name} had been working on a special gift.",
            '"I made this for you because you are my best friend."',
        ),
        "had been working on a special gift i made this for you because are my best friend",
    ),
    _scene(
        "learn_new",
        Phase.ACTIVITY_2,
        Setting.SCHOOL,
        (
            "At school, {name} learned five new things.",
            '"Why does that work?" {name} asked the teacher.',
        ),
        "at school learned five new things why does that work asked the teacher",
    ),
    _scene(
        "feel_happy",
        Phase.ACTIVITY_3,
        Setting.ANYWHERE,
        (
            "{name} felt very happy because everything went well.",
            "A big smile came across their face.",
        ),
        "felt very happy because everything went well a big smile came across their face",
    ),
    _scene(
        "proud_work",
        Phase.ACTIVITY_3,
        Setting.ANYWHERE,
        (
            "{name} was proud of all the hard work.",
            '"I did my best," {name} said with a smile.',
        ),
        "was proud of all the hard work i did my best said with a smile",
    ),
    _scene(
        "off_adventure",
        Phase.ACTIVITY_1,
        Setting.OUTSIDE,
        (
            "{name} was off on a new adventure!",
            "Who knows what they would find today?",
        ),
        "was off on a new adventure who knows what they would find today",
    ),
    _scene(
        "their_toys",
        Phase.ACTIVITY_1,
        Setting.ANYWHERE,
        (
            "The children brought out their favorite toys.",
            "These were the ones they always played with.",
        ),
        "the children brought out their favorite toys these were ones they always played with",
    ),
    _scene(
        "come_see",
        Phase.ACTIVITY_2,
        Setting.ANYWHERE,
        (
            '"Come and see what I found!" called {name}.',
            "Everyone ran over to take a look.",
        ),
        "come and see what i found called everyone ran over to take a look",
    ),
    # Return home
    _scene(
        "time_go_home",
        Phase.RETURN_HOME,
        Setting.OUTSIDE,
        (
            "It was getting late, and it was time to go home.",
            "{name} said goodbye to all the friends.",
        ),
        "it was getting late and time to go home said goodbye all the friends",
    ),
    _scene(
        "walk_home",
        Phase.RETURN_HOME,
        Setting.OUTSIDE,
        (
            "{name} walked home as the sun began to set.",
            "The sky turned pretty colors of orange and pink.",
        ),
        "walked home as the sun began to set sky turned pretty colors of orange and pink",
    ),
    # Evening
    _scene(
        "dinner_time",
        Phase.EVENING,
        Setting.HOME,
        (
            "The family sat down for dinner together.",
            "{name} told everyone about the full day of fun.",
        ),
        "the family sat down for dinner together told everyone about full day of fun",
    ),
    _scene(
        "bedtime_read",
        Phase.EVENING,
        Setting.HOME,
        (
            "Before bed, Mom read a story to {name}.",
            "It was about a brave child who went on an adventure.",
        ),
        "before bed mom read a story to it was about brave child who went on an adventure",
    ),
    # Bedtime
    _scene(
        "sleep_happy",
        Phase.BEDTIME,
        Setting.HOME,
        (
            "It had been a very good day.",
            "{name} went to sleep with a happy heart, ready for more fun tomorrow.",
        ),
        "it had been a very good day went to sleep with happy heart ready for more fun tomorrow",
    ),
    _scene(
        "best_day",
        Phase.BEDTIME,
        Setting.HOME,
        (
            "This was one of the best days ever!",
            "{name} could not wait to do it all again.",
        ),
        "this was one of the best days ever could not wait to do it all again",
    ),
    _scene(
        "remember_day",
        Phase.BEDTIME,
        Setting.HOME,
        (
            "{name} would always remember this special day.",
            "It was full of fun, friends, and many good things.",
        ),
        "would always remember this special day it was full of fun friends and many good things",
    ),
    _scene(
        "dream_tonight",
        Phase.BEDTIME,
        Setting.HOME,
        (
            "As {name} drifted off to sleep, dreams of the day came.",
            "What a wonderful time it had been!",
        ),
        "as drifted off to sleep dreams of the day came what a wonderful time it had been",
    ),
)


def scenes_by_phase(scenes: Iterable[Scene]) -> dict[Phase, list[Scene]]:
    """Group scenes by phase, keeping declaration order inside each bucket."""
    grouped: dict[Phase, list[Scene]] = {}
    for scene in scenes:
        grouped.setdefault(scene.phase, []).append(scene)
    return grouped


def all_scene_words(scenes: Iterable[Scene] = SCENE_LIBRARY) -> list[str]:
    """Return the sorted vocabulary covered by the given scenes."""
    return sorted({word.lower() for scene in scenes for word in scene.words})


def validate_scene_library(scenes: Iterable[Scene]) -> list[str]:
    """Return authoring issues for a scene collection; empty means valid."""
    issues: list[str] = []
    seen_ids: set[str] = set()
    scene_list = list(scenes)
    for scene in scene_list:
        if scene.scene_id in seen_ids:
            issues.append(f"duplicate scene id: {scene.scene_id}")
        seen_ids.add(scene.scene_id)
        if scene.phase not in PHASE_ORDER:
            issues.append(f"{scene.scene_id}: unknown phase {scene.phase!r}")
        if not scene.sentences:
            issues.append(f"{scene.scene_id}: no sentences")
        if not scene.words:
            issues.append(f"{scene.scene_id}: no words")
        if any(word != word.lower() for word in scene.words):
            issues.append(f"{scene.scene_id}: words must be lowercase")
    grouped = scenes_by_phase(scene_list)
    for phase in PHASE_ORDER:
        count = len(grouped.get(phase, []))
        if phase in REQUIRED_PHASES and count < 1:
            issues.append(f"required phase {phase.name} has no scenes")
        elif phase not in REQUIRED_PHASES and count < 2:
            issues.append(f"phase {phase.name} has fewer than two scenes")
    return issues
