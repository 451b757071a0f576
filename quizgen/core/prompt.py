from __future__ import annotations

from .types import GenerationRequest

SYSTEM_TEMPLATE = (
    "You are a helpful education assistant. "
    "Your task is to generate {count} high-quality, professional multiple-choice questions "
    "about the user's requested topic at {difficulty} difficulty, written in {language}. "
    "Every question must have exactly four distinct options, and the correct answer must be "
    "the exact text of one of those options. "
    "Your response MUST be a single JSON array that strictly adheres to the provided schema. "
    "Do not include any introductory or concluding text outside of the JSON block."
)

USER_TEMPLATE = "Generate {count} multiple-choice questions about the topic: {topic}"

QUIZ_SCHEMA: dict[str, object] = {
    "type": "ARRAY",
    "description": "A list of multiple-choice questions.",
    "items": {
        "type": "OBJECT",
        "properties": {
            "question": {
                "type": "STRING",
                "description": "The text of the multiple-choice question.",
            },
            "options": {
                "type": "ARRAY",
                "items": {"type": "STRING"},
                "description": "Exactly four possible answer choices for the question.",
            },
            "correctAnswer": {
                "type": "STRING",
                "description": "The exact text of the correct answer, which must match one of the options.",
            },
        },
        "required": ["question", "options", "correctAnswer"],
    },
}


def render_system_instruction(request: GenerationRequest) -> str:
    return SYSTEM_TEMPLATE.format(
        count=request.count,
        difficulty=request.difficulty.value,
        language=request.language,
    )


def render_user_query(request: GenerationRequest) -> str:
    return USER_TEMPLATE.format(count=request.count, topic=request.topic)


def build_payload(request: GenerationRequest) -> dict[str, object]:
    """Build the generateContent request body for a batch of questions."""
    return {
        "contents": [{"parts": [{"text": render_user_query(request)}]}],
        "systemInstruction": {"parts": [{"text": render_system_instruction(request)}]},
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": QUIZ_SCHEMA,
        },
    }
