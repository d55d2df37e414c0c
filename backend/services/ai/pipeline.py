"""
Sticker pipeline: emotion analysis, then prompt construction, then image generation.
"""

from datetime import datetime, timezone
from typing import Any

import core.state as state
from services.ai.common import AIServiceError
from services.ai.emotion_analyzer import analyze_emotion
from services.ai.sticker_generator import generate_sticker_image
from services.ai.sticker_prompt import build_sticker_prompt

PIPELINE_VERSION = "v1"


def generate_sticker_pipeline(image_path: str, base_url: str, fallback_url: str) -> dict[str, Any]:
    """Runs the three steps in order for one photo.

    Analysis errors propagate. If only the image generation fails, the
    original photo stands in as the sticker and ``sticker.fallback`` is set.

    Args:
        image_path (str): Local path of the uploaded photo.
        base_url (str): Public base URL used for the stored sticker.
        fallback_url (str): Public URL of the original photo.

    Returns:
        dict[str, Any]: The analysis merged with ``sticker`` and ``meta`` sections.
    """
    analysis_result = analyze_emotion(image_path)
    prompt = build_sticker_prompt(analysis_result)

    meta: dict[str, Any] = {
        "pipelineVersion": PIPELINE_VERSION,
        "generatedAt": datetime.now(timezone.utc).isoformat(),
    }
    try:
        image_url = generate_sticker_image(image_path, prompt, base_url)
        fallback = False
    except (AIServiceError, OSError) as e:
        state.add_log(f"Sticker generation failed, returning original photo: {e}")
        image_url = fallback_url
        fallback = True
        meta["error"] = str(e)

    return {
        **analysis_result,
        "sticker": {"style": "chibi", "prompt": prompt, "imageUrl": image_url, "fallback": fallback},
        "meta": meta,
    }
