from __future__ import annotations

import json
import os
import runpy

import pytest

from sight_story.cli import api as api_cli
from sight_story.cli import compose as compose_cli


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sight_story.cli.compose.configure_runtime_logging", lambda: None)
    monkeypatch.setattr("sight_story.cli.api.configure_runtime_logging", lambda: None)


def test_compose_cli_prints_json_story(capsys: pytest.CaptureFixture[str]) -> None:
    compose_cli.main(["--words", "the, and,park,happy,friends", "--name", "Mia", "--seed", "3", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["title"] == "A Day at the Park"
    assert payload["coveragePercent"] == 100
    assert payload["totalTargetWords"] == 5
    assert payload["sentences"][0] == "One morning, Mia woke up very early."


def test_compose_cli_prints_text_story_with_coverage(capsys: pytest.CaptureFixture[str]) -> None:
    compose_cli.main(["--words", "rabbit,flowers,zzz,qqq", "--seed", "1"])

    lines = capsys.readouterr().out.splitlines()
    assert lines[1] == ""
    assert lines[2] == "One morning, Alex woke up very early."
    assert "coverage: 50% (2/4 words)" in lines
    assert lines[-1] == "uncovered: zzz, qqq"


def test_compose_cli_rejects_blank_name() -> None:
    with pytest.raises(SystemExit, match="--name must not be blank."):
        compose_cli.main(["--name", "   "])


def test_parse_words_drops_blanks() -> None:
    assert compose_cli.parse_words(" the,,dog , ") == ["the", "dog"]


def test_package_main_module_executes_compose_main(monkeypatch: pytest.MonkeyPatch) -> None:
    called = {"value": False}

    def fake_main() -> None:
        called["value"] = True

    monkeypatch.setattr("sight_story.cli.compose.main", fake_main)
    runpy.run_module("sight_story", run_name="__main__")
    assert called["value"] is True


def test_api_cli_calls_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, object]] = []

    def fake_run(app: str, host: str, port: int, reload: bool) -> None:
        calls.append({"app": app, "host": host, "port": port, "reload": reload})

    monkeypatch.setattr("sight_story.cli.api.uvicorn.run", fake_run)
    api_cli.main(["--host", "0.0.0.0", "--port", "9000", "--reload"])

    assert calls == [
        {
            "app": "sight_story.api.app:app",
            "host": "0.0.0.0",
            "port": 9000,
            "reload": True,
        }
    ]


def test_api_cli_sets_db_path_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SIGHT_STORY_DB_PATH", raising=False)
    monkeypatch.setattr("sight_story.cli.api.uvicorn.run", lambda *args, **kwargs: None)
    api_cli.main(["--db-path", "work/local/custom.db"])
    assert os.environ["SIGHT_STORY_DB_PATH"] == "work/local/custom.db"


def test_api_cli_help_describes_the_story_service(capsys: pytest.CaptureFixture[str]) -> None:
    parser = api_cli.build_arg_parser()

    assert parser.prog == "sight-story-api"
    assert "sight-word story service" in str(parser.description)
    with pytest.raises(SystemExit):
        api_cli.main(["--help"])
    help_text = capsys.readouterr().out
    assert "share" in help_text
    assert "analytics" in help_text
    assert "SIGHT_STORY_DB_PATH" in help_text
