from __future__ import annotations

import asyncio
import json
from string import ascii_uppercase

import typer
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from ..core.generation_config import GenerationConfigLoader
from ..core.logging_utils import configure_logging
from ..core.prompt import build_payload
from ..core.session import QuizSession
from ..core.types import (
    INITIAL_BATCH_SIZE,
    LOAD_MORE_BATCH_SIZE,
    SUPPORTED_LANGUAGES,
    Difficulty,
    Failure,
    GenerationRequest,
)

app = typer.Typer()


def _ask(session: QuizSession, index: int) -> bool:
    """Show one question and record the answer. Returns False if the user quits."""
    record = session.merger.questions[index]
    typer.echo("")
    typer.echo(f"{index + 1}. {record.question}")
    letters = ascii_uppercase[: len(record.options)]
    for letter, option in zip(letters, record.options):
        typer.echo(f"   {letter}. {option}")
    while True:
        raw = typer.prompt(f"Your answer ({letters[0]}-{letters[-1]}, q to quit)").strip().upper()
        if raw == "Q":
            return False
        if len(raw) == 1 and raw in letters:
            break
        typer.echo(f"Please enter one of {', '.join(letters)}.")
    selected = record.options[letters.index(raw)]
    session.select_answer(index, selected)
    correct, total = session.score()
    if selected == record.correct_answer:
        typer.echo(f"✅ Correct! Score: {correct} / {total}")
    else:
        typer.echo(f"❌ Wrong, the answer is: {record.correct_answer}. Score: {correct} / {total}")
    return True


async def _play(session: QuizSession, topic: str, difficulty: str, language: str) -> int:
    try:
        typer.echo(f"🧠 Generating {INITIAL_BATCH_SIZE} {difficulty} questions about '{topic}' in {language}...")
        outcome = await session.generate(topic, difficulty, language)
        if isinstance(outcome, Failure):
            typer.echo(f"❌ Failed to generate quiz ({outcome.kind.value}): {outcome.message}", err=True)
            return 1

        asked = 0
        while True:
            questions = session.merger.questions
            for idx in range(asked, len(questions)):
                if not _ask(session, idx):
                    return 0
            asked = len(questions)
            if not typer.confirm(f"Load {LOAD_MORE_BATCH_SIZE} more questions?", default=False):
                return 0
            outcome = await session.load_more()
            if isinstance(outcome, Failure):
                typer.echo(f"⚠️  Could not load more questions ({outcome.kind.value}): {outcome.message}", err=True)
    finally:
        correct, total = session.score()
        typer.echo(f"\n📊 Final score: {correct} / {total}")
        await session.close()
        await session.adapter.aclose()


@app.command("play")
def play(
    topic: str,
    difficulty: Difficulty = typer.Option(Difficulty.MEDIUM, help="Question difficulty"),
    language: str = typer.Option("English", help="Language the questions are written in"),
) -> None:
    """Generate a quiz on TOPIC and answer it in the terminal."""
    configure_logging()
    try:
        GenerationRequest(topic, difficulty, language)
    except ValueError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(2)

    loader = GenerationConfigLoader()
    if not loader.is_available():
        api_key_env = loader.get_settings()["api_key_env"]
        typer.echo(f"❌ {api_key_env} not found in environment. Set it or use QUIZGEN_ENV=mock", err=True)
        raise typer.Exit(1)

    session = QuizSession(loader.create_adapter())
    code = asyncio.run(_play(session, topic, difficulty.value, language))
    if code:
        raise typer.Exit(code)


@app.command("options")
def list_options() -> None:
    """List supported difficulties and languages."""
    typer.echo("🎚️  Difficulties: " + ", ".join(d.value for d in Difficulty))
    typer.echo("🌐 Languages: " + ", ".join(SUPPORTED_LANGUAGES))
    typer.echo(f"📦 Batch sizes: {INITIAL_BATCH_SIZE} initial, {LOAD_MORE_BATCH_SIZE} per load-more")


@app.command("payload")
def show_payload(
    topic: str,
    difficulty: Difficulty = typer.Option(Difficulty.MEDIUM),
    language: str = typer.Option("English"),
    count: int = typer.Option(INITIAL_BATCH_SIZE),
) -> None:
    """Print the request body that would be sent for TOPIC."""
    try:
        request = GenerationRequest(topic, difficulty, language, count)
    except ValueError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(2)
    typer.echo(json.dumps(build_payload(request), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
