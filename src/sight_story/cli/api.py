"""CLI entrypoint for the sight-word story service.

The service composes stories from target sight words, stores them per
teacher account, hands out share links, and tracks word usage by grade.
"""

from __future__ import annotations

import argparse
import os

import uvicorn

from sight_story.adapters.observability import configure_runtime_logging

APP_IMPORT_PATH = "sight_story.api.app:app"


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sight-story-api",
        description=(
            "Run the sight-word story service: compose stories, save and share them, "
            "and report word usage analytics."
        ),
    )
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")
    parser.add_argument(
        "--reload", action="store_true", help="Restart on source changes during development."
    )
    parser.add_argument(
        "--db-path",
        default="",
        help=(
            "SQLite file holding accounts, saved stories, share grants, and word counts "
            "(default: SIGHT_STORY_DB_PATH or work/local/sight_story.db)."
        ),
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Export the story database location, then hand the app to uvicorn."""
    configure_runtime_logging()
    parsed = build_arg_parser().parse_args(argv)
    db_path = str(parsed.db_path).strip()
    if db_path:
        os.environ["SIGHT_STORY_DB_PATH"] = db_path
    uvicorn.run(
        APP_IMPORT_PATH,
        host=str(parsed.host),
        port=int(parsed.port),
        reload=bool(parsed.reload),
    )


if __name__ == "__main__":
    main()
