"""
Emotion and appearance analysis of a pet photo with Gemini.
"""

from typing import Any

import core.config as config
from services.ai.common import AIServiceError, extract_json, infer_mime_type, post_json, require_key
from services.image_service import encode_image_to_base64

EMOTIONS = ("happy", "calm", "sad", "angry", "sleepy", "curious")


def build_analysis_prompt() -> str:
    return "\n".join(
        [
            "You are a vision model. Analyze the pet photo and return STRICT JSON only.",
            "The JSON must follow this shape:",
            "{",
            '  "analysis": {',
            f'    "emotion": "{"|".join(EMOTIONS)}",',
            '    "confidence": 0.0-1.0,',
            '    "reasoning": "short reason"',
            "  },",
            '  "pet_features": {',
            '    "species": "dog|cat|other",',
            '    "breed": "string",',
            '    "primary_color": "string",',
            '    "markings": "string",',
            '    "eye_color": "string",',
            '    "pose": "string"',
            "  }",
            "}",
            "Do NOT add any other text. JSON only.",
        ]
    )


def gemini_endpoint(model: str) -> str:
    return f"{config.GEMINI_API_BASE_URL}/models/{model}:generateContent"


def gemini_image_request(image_path: str, text: str) -> dict[str, Any]:
    """Builds a single-turn generateContent body holding an inline image followed by text."""
    return {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {
                        "inline_data": {
                            "mime_type": infer_mime_type(image_path),
                            "data": encode_image_to_base64(image_path),
                        }
                    },
                    {"text": text},
                ],
            }
        ]
    }


def candidate_parts(payload: dict[str, Any]) -> list[dict[str, Any]]:
    candidates = payload.get("candidates") or [{}]
    return (candidates[0].get("content") or {}).get("parts") or []


def analyze_emotion(image_path: str) -> dict[str, Any]:
    """Classifies the pet's emotion and visible features.

    Args:
        image_path (str): Local path of the photo.

    Returns:
        dict[str, Any]: ``{"analysis": {...}, "pet_features": {...}}`` as answered by the model.

    Raises:
        AIServiceError: On missing credentials, a failed request, or an answer without JSON.
    """
    api_key = require_key(config.GEMINI_API_KEY, "GEMINI_API_KEY")

    payload = post_json(
        gemini_endpoint(config.GEMINI_MODEL),
        {"x-goog-api-key": api_key},
        gemini_image_request(image_path, build_analysis_prompt()),
        "Gemini request failed",
    )

    text = "\n".join(p["text"] for p in candidate_parts(payload) if p.get("text"))
    if not text:
        raise AIServiceError("Gemini returned empty content")

    result = extract_json(text)
    if not isinstance(result, dict):
        raise AIServiceError("Gemini analysis is not a JSON object")
    return result
