"""
Prompt text for the chibi sticker image, built from the emotion analysis.
"""

from typing import Any


def build_sticker_prompt(analysis_result: dict[str, Any]) -> str:
    """Turns an emotion analysis into the image-generation prompt for a chibi sticker."""
    analysis = analysis_result.get("analysis") or {}
    features = analysis_result.get("pet_features") or {}

    breed = features.get("breed") or features.get("species") or "pet"
    color = features.get("primary_color") or "natural"
    markings = features.get("markings") or "no distinctive markings"
    emotion = analysis.get("emotion") or "happy"

    return "\n".join(
        [
            f"A professional 2D vector pet sticker, CLOSE-UP HEADSHOT of a {breed}.",
            f"The pet has {color} fur and {markings}.",
            f"Showing an extreme {emotion} expression, looking at the camera.",
            "High-quality digital illustration, thick clean outlines, bold flat colors,",
            "white border around the character, sticker aesthetic.",
            "Isolated on a pure white background, cute chibi style.",
            "Focus entirely on the head and face.",
        ]
    )
