from __future__ import annotations

import re

from sight_story.core.scene_library import (
    NAME_PLACEHOLDER,
    PHASE_ORDER,
    SCENE_LIBRARY,
    Phase,
    Scene,
    Setting,
    all_scene_words,
    scenes_by_phase,
    validate_scene_library,
)


def _tokens(text: str) -> set[str]:
    return set(re.findall(r"[a-z']+", text.lower()))


def test_builtin_library_passes_validation() -> None:
    assert validate_scene_library(SCENE_LIBRARY) == []


def test_every_scene_word_appears_in_rendered_sentences() -> None:
    for scene in SCENE_LIBRARY:
        tokens = _tokens(" ".join(scene.render("Alex")))
        missing = [word for word in scene.words if word not in tokens]
        assert missing == [], scene.scene_id


def test_every_phase_is_populated_in_declaration_order() -> None:
    grouped = scenes_by_phase(SCENE_LIBRARY)
    assert list(grouped) == list(PHASE_ORDER)
    assert [scene.scene_id for scene in grouped[Phase.BEDTIME]] == [
        "sleep_happy",
        "best_day",
        "remember_day",
        "dream_tonight",
    ]
    assert [scene.scene_id for scene in grouped[Phase.ACTIVITY_1]] == [
        "arrive_park",
        "meet_friend",
        "call_friend",
        "off_adventure",
        "their_toys",
    ]


def test_library_holds_the_full_day_catalog() -> None:
    ids = [scene.scene_id for scene in SCENE_LIBRARY]

    assert len(ids) == 42
    assert len(set(ids)) == 42
    assert ids[0] == "morning_wake"
    assert ids[-1] == "dream_tonight"
    assert {"morning_wake", "arrive_park", "play_together", "best_day", "time_go_home"} <= set(ids)
    assert {phase: len(scenes) for phase, scenes in scenes_by_phase(SCENE_LIBRARY).items()} == {
        Phase.WAKE_UP: 3,
        Phase.MORNING_ROUTINE: 3,
        Phase.LEAVE_HOME: 2,
        Phase.TRAVEL: 2,
        Phase.ACTIVITY_1: 5,
        Phase.ACTIVITY_2: 12,
        Phase.ACTIVITY_3: 7,
        Phase.RETURN_HOME: 2,
        Phase.EVENING: 2,
        Phase.BEDTIME: 4,
    }


def test_wake_up_scenes_introduce_the_protagonist_first() -> None:
    for scene in scenes_by_phase(SCENE_LIBRARY)[Phase.WAKE_UP]:
        assert NAME_PLACEHOLDER in scene.sentences[0]


def test_render_substitutes_every_placeholder() -> None:
    scene = next(scene for scene in SCENE_LIBRARY if scene.scene_id == "walk_home")
    rendered = scene.render("Mia")
    assert rendered == [
        "Mia walked home as the sun began to set.",
        "The sky turned pretty colors of orange and pink.",
    ]
    assert scene.sentences[0].startswith(NAME_PLACEHOLDER)
    assert scene.setting is Setting.OUTSIDE


def test_all_scene_words_is_sorted_vocabulary() -> None:
    words = all_scene_words()
    assert words == sorted(set(words))
    assert {"park", "friends", "rabbit", "flowers", "happy"} <= set(words)
    assert "zebra" not in words


def test_validation_reports_authoring_problems() -> None:
    wake = Scene(
        scene_id="wake",
        phase=Phase.WAKE_UP,
        setting=Setting.HOME,
        sentences=("{name} woke up.",),
        words=("woke", "Up"),
    )
    empty = Scene(
        scene_id="wake",
        phase=Phase.TRAVEL,
        setting=Setting.OUTSIDE,
        sentences=(),
        words=(),
    )

    issues = validate_scene_library([wake, empty])

    assert "duplicate scene id: wake" in issues
    assert "wake: words must be lowercase" in issues
    assert "wake: no sentences" in issues
    assert "wake: no words" in issues
    assert "required phase BEDTIME has no scenes" in issues
    assert "phase TRAVEL has fewer than two scenes" in issues
