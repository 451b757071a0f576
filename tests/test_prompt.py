import pathlib
import sys

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))
from quizgen.core.prompt import QUIZ_SCHEMA, build_payload
from quizgen.core.types import Difficulty, GenerationRequest


def test_payload_matches_generate_content_shape():
    request = GenerationRequest("Photosynthesis", Difficulty.HARD, "Spanish", 10)
    payload = build_payload(request)

    user_text = payload["contents"][0]["parts"][0]["text"]
    system_text = payload["systemInstruction"]["parts"][0]["text"]
    assert user_text == "Generate 10 multiple-choice questions about the topic: Photosynthesis"
    assert "generate 10" in system_text
    assert "Hard" in system_text
    assert "Spanish" in system_text
    assert payload["generationConfig"] == {
        "responseMimeType": "application/json",
        "responseSchema": QUIZ_SCHEMA,
    }


def test_schema_requires_all_fields():
    items = QUIZ_SCHEMA["items"]
    assert QUIZ_SCHEMA["type"] == "ARRAY"
    assert items["required"] == ["question", "options", "correctAnswer"]
    assert items["properties"]["options"]["items"] == {"type": "STRING"}


def test_topic_is_trimmed():
    request = GenerationRequest("  Rust  ", "Easy", "English")
    assert request.topic == "Rust"
    assert request.difficulty is Difficulty.EASY
    assert request.with_count(10).count == 10
