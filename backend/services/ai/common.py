"""
Helpers shared by the Gemini and ARK integrations.
"""

import json
import os
import re
from typing import Any

import requests

import core.config as config


class AIServiceError(Exception):
    """Raised when a generative model call fails or returns unusable content."""
    pass


_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def infer_mime_type(filepath: str) -> str:
    ext = os.path.splitext(filepath)[1].lower()
    if ext == ".png":
        return "image/png"
    if ext == ".webp":
        return "image/webp"
    if ext == ".heic":
        return "image/heic"
    return "image/jpeg"


def extract_json(text: str) -> Any:
    """Parses a JSON object out of model output that may be wrapped in prose or code fences.

    Raises:
        AIServiceError: If no parseable object is present.
    """
    trimmed = text.strip()
    candidate = trimmed
    if not (trimmed.startswith("{") and trimmed.endswith("}")):
        match = _JSON_OBJECT.search(trimmed)
        if not match:
            raise AIServiceError("Model response did not contain JSON")
        candidate = match.group(0)
    try:
        return json.loads(candidate)
    except ValueError as e:
        raise AIServiceError(f"Model response contained invalid JSON: {e}") from e


def require_key(value: str, name: str) -> str:
    if not value:
        raise AIServiceError(f"Missing {name}")
    return value


def post_json(url: str, headers: dict[str, str], body: dict[str, Any], default_error: str) -> dict[str, Any]:
    """POSTs a JSON body and returns the decoded payload.

    Non-2xx answers raise with the vendor's ``error.message`` when present,
    otherwise ``default_error``.
    """
    try:
        response = requests.post(
            url,
            headers={"Content-Type": "application/json", **headers},
            json=body,
            timeout=config.AI_REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        raise AIServiceError(f"{default_error}: {e}") from e

    try:
        payload = response.json()
    except ValueError:
        payload = {}

    if not response.ok:
        error = payload.get("error") if isinstance(payload, dict) else None
        message = error.get("message") if isinstance(error, dict) else None
        raise AIServiceError(message or default_error)

    if not isinstance(payload, dict):
        raise AIServiceError(f"{default_error}: unexpected response body")
    return payload
