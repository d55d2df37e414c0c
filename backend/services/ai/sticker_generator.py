"""
Sticker image generation through Gemini or ARK Seedream.
"""

import base64
import binascii
import os
import uuid
from typing import Any

import core.config as config
import core.state as state
from services.ai.common import AIServiceError, infer_mime_type, post_json, require_key
from services.ai.emotion_analyzer import candidate_parts, gemini_endpoint, gemini_image_request
from services.image_service import encode_image_to_base64


def extract_inline_image(parts: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Returns the first inline image part; Gemini answers in snake_case or camelCase."""
    for part in parts:
        for key in ("inline_data", "inlineData"):
            inline = part.get(key)
            if inline and inline.get("data"):
                return inline
    return None


def _generate_with_gemini(image_path: str, prompt: str) -> tuple[str, str]:
    api_key = require_key(config.GEMINI_API_KEY, "GEMINI_API_KEY")
    payload = post_json(
        gemini_endpoint(config.GEMINI_IMAGE_MODEL),
        {"x-goog-api-key": api_key},
        gemini_image_request(image_path, prompt),
        "Gemini image request failed",
    )

    inline = extract_inline_image(candidate_parts(payload))
    if not inline:
        raise AIServiceError("Gemini image response missing inline image data")
    mime_type = inline.get("mime_type") or inline.get("mimeType") or "image/png"
    return inline["data"], mime_type


def _generate_with_seedream(image_path: str, prompt: str) -> tuple[str, str]:
    api_key = require_key(config.ARK_API_KEY, "ARK_API_KEY")
    reference = f"data:{infer_mime_type(image_path)};base64,{encode_image_to_base64(image_path)}"
    payload = post_json(
        f"{config.ARK_API_BASE_URL}/images/generations",
        {"Authorization": f"Bearer {api_key}"},
        {
            "model": config.ARK_IMAGE_MODEL,
            "prompt": prompt,
            "image": reference,
            "response_format": "b64_json",
            "size": "1024x1024",
            "watermark": False,
        },
        "Seedream image request failed",
    )

    data = payload.get("data") or [{}]
    encoded = data[0].get("b64_json")
    if not encoded:
        raise AIServiceError("Seedream image response missing b64_json data")
    return encoded, "image/jpeg"


def generate_sticker_image(image_path: str, prompt: str, base_url: str) -> str:
    """Generates a sticker from the photo and prompt and stores it under ``uploads/stickers``.

    Args:
        image_path (str): Reference photo sent along with the prompt.
        prompt (str): Sticker description produced by the prompt builder.
        base_url (str): Scheme and host used to build the public URL, e.g. ``http://host:3000``.

    Returns:
        str: Public URL of the stored sticker.

    Raises:
        AIServiceError: On unknown provider, failed request or undecodable image data.
    """
    provider = config.STICKER_PROVIDER.lower()
    if provider == "gemini":
        encoded, mime_type = _generate_with_gemini(image_path, prompt)
    elif provider == "seedream":
        encoded, mime_type = _generate_with_seedream(image_path, prompt)
    else:
        raise AIServiceError(f"Unknown sticker provider: {config.STICKER_PROVIDER}")

    try:
        image_bytes = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AIServiceError(f"Sticker image data is not valid base64: {e}") from e

    ext = mime_type.split("/")[-1] or "png"
    sticker_dir = os.path.join(config.UPLOAD_DIR, "stickers")
    os.makedirs(sticker_dir, exist_ok=True)
    filename = f"{uuid.uuid4()}.{ext}"
    with open(os.path.join(sticker_dir, filename), "wb") as f:
        f.write(image_bytes)

    if config.VERBOSE:
        state.add_log(f"Sticker generated with {provider}: {filename} ({len(image_bytes)} bytes)")
    return f"{base_url.rstrip('/')}/uploads/stickers/{filename}"
