from __future__ import annotations

from typing import Any

from src.models.errors import InvalidActionError

ANALYSIS_ACTIONS = ("translate", "explain", "grammar", "vocabulary", "conjugation")
DEFAULT_MAX_PHRASES = 25

_TOKEN_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "word": {"type": "string"},
        "reading": {"type": "string"},
        "romaji": {"type": "string"},
        "partOfSpeech": {"type": "array", "items": {"type": "string"}},
        "hasKanji": {"type": "boolean"},
        "isCommon": {"type": "boolean"},
    },
    "required": ["word", "reading", "romaji"],
}

_PHRASE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "phrase": {"type": "string"},
        "romaji": {"type": "string"},
        "boundingBox": {
            "type": "array",
            "items": {"type": "number"},
            "minItems": 4,
            "maxItems": 4,
        },
        "tokens": {"type": "array", "items": _TOKEN_SCHEMA},
    },
    "required": ["phrase", "romaji", "boundingBox", "tokens"],
}

_ANALYSIS_SCHEMAS: dict[str, dict[str, Any]] = {
    "translate": {
        "type": "object",
        "properties": {
            "translation": {"type": "string", "description": "Natural English translation"},
            "literalTranslation": {
                "type": "string",
                "description": "Literal translation if significantly different from natural translation",
            },
            "notes": {"type": "string", "description": "Contextual nuances or cultural notes"},
        },
        "required": ["translation"],
    },
    "explain": {
        "type": "object",
        "properties": {
            "meaning": {"type": "string", "description": "Core meaning and usage"},
            "contextUsage": {"type": "string", "description": "How it functions in this specific context"},
            "commonSituations": {"type": "string", "description": "Common situations where this phrase appears"},
            "nuances": {"type": "string", "description": "Important nuances, connotations, or formality level"},
        },
        "required": ["meaning", "contextUsage"],
    },
    "grammar": {
        "type": "object",
        "properties": {
            "breakdown": {"type": "string", "description": "Step-by-step grammatical breakdown"},
            "elements": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "element": {"type": "string"},
                        "type": {"type": "string"},
                        "explanation": {"type": "string"},
                    },
                },
                "description": "Individual grammatical elements with explanations",
            },
            "variations": {"type": "string", "description": "Common variations or alternative constructions"},
            "learnerTips": {"type": "string", "description": "Tips for learners, common mistakes"},
        },
        "required": ["breakdown"],
    },
    "vocabulary": {
        "type": "object",
        "properties": {
            "reading": {"type": "string", "description": "Hiragana/katakana reading"},
            "romaji": {"type": "string", "description": "Romaji reading"},
            "kanjiBreakdown": {"type": "string", "description": "Kanji breakdown with individual meanings"},
            "wordType": {"type": "string", "description": "Part of speech (noun, verb, adjective, etc.)"},
            "meanings": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Primary and alternative meanings",
            },
            "collocations": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Common collocations and phrases",
            },
            "examples": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "japanese": {"type": "string"},
                        "english": {"type": "string"},
                    },
                },
                "description": "Example sentences with translations",
            },
            "jlptLevel": {"type": "string", "description": "JLPT level if applicable (N5, N4, N3, N2, N1)"},
        },
        "required": ["reading", "meanings"],
    },
    "conjugation": {
        "type": "object",
        "properties": {
            "dictionaryForm": {"type": "string", "description": "Dictionary (plain non-past) form"},
            "wordType": {"type": "string", "description": "Verb or adjective class (godan, ichidan, i-adjective, ...)"},
            "currentForm": {"type": "string", "description": "Name of the form used in the phrase"},
            "conjugations": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "form": {"type": "string"},
                        "japanese": {"type": "string"},
                        "romaji": {"type": "string"},
                        "meaning": {"type": "string"},
                    },
                },
                "description": "Common conjugated forms",
            },
            "notes": {"type": "string", "description": "Irregularities or usage notes"},
        },
        "required": ["dictionaryForm", "conjugations"],
    },
}

_ACTION_INSTRUCTIONS: dict[str, str] = {
    "translate": """Provide an accurate English translation with the following:
1. Natural English translation considering the context
2. Literal translation if significantly different
3. Brief explanation of any contextual nuances or cultural notes

Be concise but complete.""",
    "explain": """Provide a comprehensive explanation including:
1. Core meaning and how the phrase is used
2. How it functions in this specific context
3. Common situations where this phrase appears
4. Important nuances, connotations, or formality level

Focus on helping the learner understand practical usage.""",
    "grammar": """Provide a grammatical breakdown:
1. Identify all grammatical elements (particles, verb forms, conjugations, etc.)
2. Explain the grammatical structure step-by-step
3. Explain why each element is used in this context
4. Common variations or alternative constructions
5. Tips for learners (common mistakes, similar patterns)

Be clear and educational.""",
    "vocabulary": """Provide vocabulary information:
1. Reading (hiragana/katakana) and romaji
2. Kanji breakdown (if applicable) with individual meanings
3. Word type (noun, verb, adjective, etc.)
4. Primary meaning and alternative meanings
5. Common collocations and phrases using this word
6. 2-3 example sentences with translations
7. JLPT level if applicable

Format your response to be clear and structured.""",
    "conjugation": """Provide conjugation information for the main verb or adjective:
1. Dictionary form and word class
2. The form used in this phrase and what it expresses
3. A table of common forms (polite, negative, past, te-form, potential, volitional, passive, causative)
4. Any irregularities learners should watch for

Keep the forms accurate and include romaji for each.""",
}


def build_identify_prompt(
    *,
    selection_x: float,
    selection_y: float,
    image_width: int,
    image_height: int,
) -> str:
    return f"""You are analyzing a screenshot of a Japanese webpage.
The image was cropped to the user's selection at x={selection_x}, y={selection_y}.
Image size: {image_width}x{image_height}

Identify the Japanese phrase in this image.
Provide precise bounding box coordinates [y_min, x_min, y_max, x_max] (normalized 0-1000).
Tokenize the phrase into words with readings and romaji."""


def build_identify_phrases_prompt(max_phrases: int = DEFAULT_MAX_PHRASES) -> str:
    return f"""You are analyzing a full-viewport screenshot of a Japanese webpage.

Identify up to {max_phrases} distinct Japanese phrases visible in the image, in reading order.
For each phrase provide precise bounding box coordinates [y_min, x_min, y_max, x_max] (normalized 0-1000).
Tokenize each phrase into words with readings and romaji.
Skip navigation chrome, advertisements and text that is not Japanese."""


def build_analysis_prompt(
    phrase: str,
    action: str,
    *,
    full_phrase: str | None = None,
    has_image: bool = False,
) -> str:
    instructions = _ACTION_INSTRUCTIONS.get(action)
    if instructions is None:
        raise InvalidActionError(message=f"Unknown action: {action}")

    image_context = "The phrase appears in the provided screenshot.\n" if has_image else ""
    full_context = f'The phrase appears in this full context: "{full_phrase}"\n' if full_phrase else ""
    base = (
        "You are analyzing Japanese text for a language learner.\n"
        f"{image_context}{full_context}\n"
        f'Selected phrase: "{phrase}"\n'
    )
    return f"{base}\n{instructions}"


def phrase_schema() -> dict[str, Any]:
    return _PHRASE_SCHEMA


def phrases_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {"phrases": {"type": "array", "items": _PHRASE_SCHEMA}},
        "required": ["phrases"],
    }


def analysis_schema(action: str) -> dict[str, Any]:
    schema = _ANALYSIS_SCHEMAS.get(action)
    if schema is None:
        raise InvalidActionError(message=f"Unknown action: {action}")
    return schema
