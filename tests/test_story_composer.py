from __future__ import annotations

import random

from sight_story.core.grammar import correct_grammar
from sight_story.core.scene_library import SCENE_LIBRARY, Phase, Scene, Setting
from sight_story.core.story_composer import (
    FILLER_SENTENCES,
    GENERIC_TITLES,
    MAX_FILLER_SENTENCES,
    choose_title,
    compose_story,
    filler_insert_index,
    filler_sentences,
    measure_coverage,
    normalize_target_words,
    select_best_scene,
)

_SCENES_BY_ID = {scene.scene_id: scene for scene in SCENE_LIBRARY}


def _scene_phases(scene_ids: tuple[str, ...]) -> list[Phase]:
    return [_SCENES_BY_ID[scene_id].phase for scene_id in scene_ids]


def test_park_story_covers_every_word_in_day_order() -> None:
    story = compose_story(["the", "and", "park", "happy", "friends"], "Mia", rng=random.Random(3))

    assert story.scenes_used == (
        "morning_wake",
        "wash_up",
        "go_outside",
        "walk_around",
        "arrive_park",
        "play_together",
        "feel_happy",
        "time_go_home",
        "dinner_time",
        "remember_day",
    )
    assert story.coverage_percent == 100
    assert story.total_target_words == 5
    assert set(story.used_words) == {"the", "and", "park", "happy", "friends"}
    assert story.uncovered_words == ()
    assert story.title == "A Day at the Park"
    assert story.sentences[0] == "One morning, Mia woke up very early."
    assert len(story.sentences) == 20


def test_scenes_follow_phase_order_and_are_never_reused() -> None:
    for words in (
        ["the", "and", "dog", "park", "happy"],
        ["rabbit", "flowers", "zzz", "qqq"],
        ["friend", "school", "cream", "phone", "dinner", "dreams"],
    ):
        story = compose_story(words, rng=random.Random(0))
        phases = _scene_phases(story.scenes_used)
        assert phases == sorted(phases)
        assert len(set(story.scenes_used)) == len(story.scenes_used)
        assert phases[0] is Phase.WAKE_UP
        assert phases[-1] is Phase.BEDTIME


def test_empty_word_list_still_wakes_up_and_goes_to_bed() -> None:
    story = compose_story([], rng=random.Random(5))

    assert story.scenes_used == ("morning_wake", "sleep_happy")
    assert len(story.sentences) == 4
    assert story.total_target_words == 0
    assert story.coverage_percent == 0
    assert story.used_words == ()
    assert story.title in GENERIC_TITLES


def test_protagonist_name_replaces_every_placeholder() -> None:
    story = compose_story(["rabbit", "sleep"], "Zoe", rng=random.Random(1))

    assert all("{name}" not in sentence for sentence in story.sentences)
    assert story.sentences[0] == "One morning, Zoe woke up very early."
    assert '"Look at those animals!" said Zoe.' in story.sentences
    assert "Zoe went to sleep with a happy heart, ready for more fun tomorrow." in story.sentences


def test_default_protagonist_is_alex() -> None:
    story = compose_story([], rng=random.Random(0))
    assert story.sentences[0] == "One morning, Alex woke up very early."


def test_targets_are_normalized_and_deduplicated() -> None:
    assert normalize_target_words([" The", "the", "", "DOG ", "  "]) == ["the", "dog"]
    story = compose_story(["The", " the ", "dog", ""], rng=random.Random(0))
    assert story.total_target_words == 2
    assert set(story.used_words) <= {"the", "dog"}


def test_low_coverage_backfills_activity_scenes_in_phase_position() -> None:
    story = compose_story(["rabbit", "flowers", "zzz", "qqq"], rng=random.Random(0))

    assert story.scenes_used == ("morning_wake", "look_flowers", "see_animals", "sleep_happy")
    assert story.used_words == ("flowers", "rabbit")
    assert story.coverage_percent == 50
    assert story.uncovered_words == ("zzz", "qqq")


def test_filler_sentence_lands_before_the_trip_home() -> None:
    story = compose_story(["ever", "wait", "sleep"], rng=random.Random(0))

    assert story.scenes_used == ("morning_wake", "best_day")
    assert len(story.sentences) == 5
    assert story.sentences[2] == "Soon it would be time to sleep."
    assert story.sentences[3] == "This was one of the best days ever!"
    assert story.used_words == ("ever", "wait", "sleep")
    assert story.coverage_percent == 100


def test_word_crowded_out_of_its_phase_gets_a_filler() -> None:
    story = compose_story(["come", "park", "swings", "babies", "rabbit"], "Mia", rng=random.Random(0))

    assert story.scenes_used == ("morning_wake", "arrive_park", "see_animals", "sleep_happy")
    assert story.sentences[6] == '"Come back soon!" called the friends.'
    assert story.sentences[7] == "It had been a very good day."
    assert len(story.sentences) == 9
    assert story.coverage_percent == 100
    assert story.uncovered_words == ()


def test_filler_sentences_render_name_and_skip_unknown_words() -> None:
    fillers = filler_sentences(["zebra", "come", "full", "Very"], "Mia", rng=random.Random(0))

    assert fillers == [
        ("come", '"Come back soon!" called the friends.'),
        ("full", "Mia's heart was full of joy."),
        ("very", "Mia was very grateful."),
    ]


def test_fillers_fall_back_near_the_end_without_a_return_home_scene() -> None:
    scenes = (
        Scene("sun_up", Phase.WAKE_UP, Setting.HOME, ("{name} woke up.", "It was sunny."), ("woke", "up")),
        Scene(
            "zoo_trip",
            Phase.ACTIVITY_1,
            Setting.OUTSIDE,
            ("{name} went to the zoo.", "The zoo was big."),
            ("went", "to", "the", "zoo", "was", "big"),
        ),
    )

    story = compose_story(["zoo", "sleep"], "Sam", rng=random.Random(0), scenes=scenes)

    assert story.scenes_used == ("sun_up", "zoo_trip")
    assert story.sentences[2] == "Soon it would be time to sleep."
    assert len(story.sentences) == 5
    assert story.coverage_percent == 100


def test_filler_count_is_capped() -> None:
    words = list(FILLER_SENTENCES)
    fillers = filler_sentences(words, "Mia", rng=random.Random(0))

    assert len(FILLER_SENTENCES) == 45
    assert [word for word, _ in fillers] == words[:MAX_FILLER_SENTENCES]

    story = compose_story(words, rng=random.Random(0))
    filler_words = {
        word
        for word in words
        if word in story.used_words
        and all(word not in _SCENES_BY_ID[scene_id].words for scene_id in story.scenes_used)
    }
    assert len(filler_words) <= MAX_FILLER_SENTENCES


def test_fillers_are_already_grammar_normalized() -> None:
    for template in FILLER_SENTENCES.values():
        rendered = template.replace("{name}", "Mia")
        assert correct_grammar(rendered, rng=random.Random(0)) == rendered


def test_adding_a_scene_never_lowers_coverage() -> None:
    zebra = Scene(
        "zebra_zoo",
        Phase.ACTIVITY_2,
        Setting.OUTSIDE,
        ("{name} saw a zebra at the zoo.",),
        ("saw", "a", "zebra", "at", "the", "zoo"),
    )

    before = compose_story(["zebra"], rng=random.Random(0))
    after = compose_story(["zebra"], rng=random.Random(0), scenes=(*SCENE_LIBRARY, zebra))

    assert before.coverage_percent == 0
    assert after.coverage_percent == 100
    assert "zebra_zoo" in after.scenes_used


def test_seeded_composition_is_reproducible() -> None:
    first = compose_story(["moon", "zebra"], "Mia", rng=random.Random(11))
    second = compose_story(["moon", "zebra"], "Mia", rng=random.Random(11))
    assert first == second


def test_select_best_scene_prefers_earlier_candidates_on_ties() -> None:
    candidates = [_SCENES_BY_ID["ride_bike"], _SCENES_BY_ID["walk_around"]]

    best = select_best_scene(
        candidates,
        target_set=frozenset({"the"}),
        used_words=(),
        used_scene_ids=set(),
        required=False,
    )
    skipped = select_best_scene(
        candidates,
        target_set=frozenset({"zebra"}),
        used_words=(),
        used_scene_ids=set(),
        required=False,
    )
    required = select_best_scene(
        candidates,
        target_set=frozenset({"zebra"}),
        used_words=(),
        used_scene_ids={"ride_bike"},
        required=True,
    )

    assert best is not None and best.scene_id == "ride_bike"
    assert skipped is None
    assert required is not None and required.scene_id == "walk_around"


def test_filler_insert_index_targets_first_return_home_scene() -> None:
    selected = [_SCENES_BY_ID["morning_wake"], _SCENES_BY_ID["arrive_park"], _SCENES_BY_ID["walk_home"]]
    assert filler_insert_index(selected, 6) == 4
    assert filler_insert_index(selected[:2], 4) == 2
    assert filler_insert_index([], 1) == 0


def test_titles_follow_keyword_rules_then_generic() -> None:
    def title_for(*scene_ids: str) -> str:
        return choose_title([_SCENES_BY_ID[scene_id] for scene_id in scene_ids], rng=random.Random(0))

    assert title_for("ride_bike", "arrive_park") == "A Bike Ride Adventure"
    assert title_for("arrive_park") == "A Day at the Park"
    assert title_for("learn_new") == "A School Day Adventure"
    assert title_for("meet_friend") == "A Day with Friends"
    assert title_for("play_together") == "A Day with Friends"
    assert title_for("morning_wake", "sleep_happy") in GENERIC_TITLES


def test_measure_coverage_matches_whole_words() -> None:
    used, percent = measure_coverage(["We saw an owl.", "The park was fun!"], ["owl", "park", "zebra"])
    assert used == ["owl", "park"]
    assert percent == 67
    assert measure_coverage(["Parks are fun."], ["park"]) == ([], 0)
    assert measure_coverage(["Anything."], []) == ([], 0)


def test_to_dict_uses_camel_case_keys() -> None:
    payload = compose_story(["rabbit"], "Mia", rng=random.Random(0)).to_dict()

    assert set(payload) == {
        "title",
        "sentences",
        "usedWords",
        "totalTargetWords",
        "coveragePercent",
        "scenesUsed",
    }
    assert payload["usedWords"] == ["rabbit"]
    assert payload["coveragePercent"] == 100
