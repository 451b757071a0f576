import json
import sys
from pathlib import Path

from typer.testing import CliRunner

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from quizgen.cli.main import app
from quizgen.core.types import INITIAL_BATCH_SIZE, LOAD_MORE_BATCH_SIZE

runner = CliRunner()


def test_cli_mock_play_with_load_more(monkeypatch):
    monkeypatch.setenv("QUIZGEN_ENV", "mock")
    answers = ["B"] * INITIAL_BATCH_SIZE + ["y"] + ["A"] * LOAD_MORE_BATCH_SIZE + ["n"]
    result = runner.invoke(app, ["play", "Ninja turtles", "--difficulty", "Easy"], input="\n".join(answers) + "\n")

    assert result.exit_code == 0, result.output
    total = INITIAL_BATCH_SIZE + LOAD_MORE_BATCH_SIZE
    assert f"Final score: {INITIAL_BATCH_SIZE} / {total}" in result.output


def test_cli_quit_early(monkeypatch):
    monkeypatch.setenv("QUIZGEN_ENV", "mock")
    result = runner.invoke(app, ["play", "Owls"], input="x\nB\nq\n")

    assert result.exit_code == 0, result.output
    assert "Please enter one of A, B, C, D." in result.output
    assert f"Final score: 1 / {INITIAL_BATCH_SIZE}" in result.output


def test_cli_requires_api_key(monkeypatch):
    monkeypatch.delenv("QUIZGEN_ENV", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    result = runner.invoke(app, ["play", "Owls"])

    assert result.exit_code == 1
    assert "GEMINI_API_KEY" in result.output


def test_cli_rejects_unknown_language():
    result = runner.invoke(app, ["play", "Owls", "--language", "Klingon"])
    assert result.exit_code == 2


def test_cli_payload_prints_request_body():
    result = runner.invoke(app, ["payload", "Owls", "--count", "10", "--language", "German"])

    assert result.exit_code == 0, result.output
    body = json.loads(result.output)
    assert body["contents"][0]["parts"][0]["text"].startswith("Generate 10 multiple-choice")
    assert "German" in body["systemInstruction"]["parts"][0]["text"]


def test_cli_options():
    result = runner.invoke(app, ["options"])
    assert result.exit_code == 0
    assert "Easy, Medium, Hard" in result.output
