"""CLI entrypoint for composing one sight-word story."""

from __future__ import annotations

import argparse
import json
import random

from sight_story.adapters.observability import configure_runtime_logging
from sight_story.core.story_composer import DEFAULT_PROTAGONIST, ComposedStory, compose_story


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compose a sight-word story.")
    parser.add_argument(
        "--words",
        default="",
        help="Comma-separated target words, e.g. the,and,park.",
    )
    parser.add_argument("--name", default=DEFAULT_PROTAGONIST, help="Protagonist name.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible choices.")
    parser.add_argument("--json", action="store_true", help="Print the story as JSON.")
    return parser


def parse_words(raw: str) -> list[str]:
    return [word.strip() for word in raw.split(",") if word.strip()]


def render_text(story: ComposedStory) -> str:
    """Plain-text rendering: title, body, then a coverage line."""
    lines = [story.title, "", *story.sentences, ""]
    lines.append(
        f"coverage: {story.coverage_percent}% "
        f"({len(story.used_words)}/{story.total_target_words} words)"
    )
    if story.uncovered_words:
        lines.append(f"uncovered: {', '.join(story.uncovered_words)}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> None:
    configure_runtime_logging()
    parsed = build_arg_parser().parse_args(argv)
    name = str(parsed.name).strip()
    if not name:
        raise SystemExit("--name must not be blank.")
    rng = random.Random(parsed.seed) if parsed.seed is not None else None
    story = compose_story(parse_words(str(parsed.words)), name, rng=rng)
    if parsed.json:
        print(json.dumps(story.to_dict(), indent=2))
    else:
        print(render_text(story))


if __name__ == "__main__":
    main()
