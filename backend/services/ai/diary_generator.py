"""
First-person pet diary generation with the ARK vision chat model.

The diary text is one chat completion over all of the day's photos. A second,
best-effort completion lists the animals seen in the photos so the app can
show who was mentioned; its failure never fails the diary.
"""

from datetime import datetime, timezone
from typing import Any

import core.config as config
import core.state as state
from services.ai.common import AIServiceError, extract_json, infer_mime_type, post_json, require_key
from services.image_service import encode_image_to_base64

SPECIES_WORDS = {"cat": "cat", "dog": "dog"}
SPECIES_SOUNDS = {"cat": "Meow~", "dog": "Woof~"}
GENDER_WORDS = {"male": "a boy", "female": "a girl"}

ANIMALS_PROMPT = """Analyze every animal that appears in these photos. Return JSON:
{
  "animals": [
    {"species": "cat|dog|other", "description": "short description", "is_main": true|false}
  ]
}
is_main marks the protagonist of the photos (usually the most prominent one). Return JSON only, no other text."""


def _species_word(species: str | None) -> str:
    return SPECIES_WORDS.get(species or "", "pet")


def build_diary_prompt(pet: dict[str, Any], date: str, image_count: int, other_pets: list[dict[str, Any]]) -> str:
    """Builds the instruction asking the model to write the diary as the pet itself."""
    species = _species_word(pet.get("species"))
    name = pet.get("name") or "Buddy"

    identity = f'You are a {species} named "{name}", a {pet.get("breed") or "lovely " + species}'
    gender = GENDER_WORDS.get(pet.get("gender") or "")
    if gender:
        identity += f", and you are {gender}"
    if pet.get("personality"):
        identity += f", with a {pet['personality']} personality"
    identity += f'. Your owner is called "{pet.get("ownerNickname") or "Owner"}".'

    siblings = ""
    if other_pets:
        listed = ", ".join(f"{p.get('name')} ({_species_word(p.get('species'))})" for p in other_pets)
        siblings = (
            f"\nYour owner also has other pets: {listed}. "
            'If they appear in the photos you may call them "my brother/sister <name>".'
        )

    sound = SPECIES_SOUNDS.get(pet.get("species") or "", "")
    ending = f" (for example {sound})" if sound else ""

    return f"""{identity}{siblings}

Today is {date}. Based on these {image_count} photo(s), write a diary entry from your own first-person view.

Requirements:
1. Use a cute, lively tone, like a real {species} writing its diary
2. Describe the scenes, activities and moods you see in the photos
3. Add some {species}-specific actions (like a cat licking its fur or a dog wagging its tail)
4. If other animals appear in the photos:
   - if it is one of the owner's other pets, call it "my brother/sister <name>"
   - if it is an unfamiliar animal, describe it as "the <animal> I met"
5. The diary should be 200-400 characters long
6. You may end with a typical {species} sound{ending}

Output only the diary content, with no explanation or prefix. Write in {config.DIARY_LANGUAGE}."""


def _image_parts(image_paths: list[str]) -> list[dict[str, Any]]:
    return [
        {
            "type": "image_url",
            "image_url": {"url": f"data:{infer_mime_type(p)};base64,{encode_image_to_base64(p)}"},
        }
        for p in image_paths
    ]


def _chat(image_parts: list[dict[str, Any]], prompt: str, **options: Any) -> str:
    api_key = require_key(config.ARK_API_KEY, "ARK_API_KEY")
    payload = post_json(
        f"{config.ARK_API_BASE_URL}/chat/completions",
        {"Authorization": f"Bearer {api_key}"},
        {
            "model": config.ARK_VISION_MODEL,
            "messages": [{"role": "user", "content": [*image_parts, {"type": "text", "text": prompt}]}],
            **options,
        },
        "ARK Vision request failed",
    )
    choices = payload.get("choices") or [{}]
    return str((choices[0].get("message") or {}).get("content") or "")


def analyze_other_animals(image_parts: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Lists the animals in the photos. Any failure yields an empty list."""
    if not config.ARK_API_KEY:
        return []
    try:
        result = extract_json(_chat(image_parts, ANIMALS_PROMPT, max_tokens=512))
    except AIServiceError as e:
        if config.VERBOSE:
            state.add_log(f"[DiaryGen] Other animal analysis failed: {e}")
        return []
    animals = result.get("animals") if isinstance(result, dict) else None
    return animals if isinstance(animals, list) else []


def generate_diary(
    image_paths: list[str],
    pet: dict[str, Any],
    date: str,
    other_pets: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Writes the day's diary entry for ``pet`` from its photos.

    Args:
        image_paths (list[str]): Local photo paths, at least one.
        pet (dict[str, Any]): Pet profile (name, species, breed, gender, personality, ownerNickname).
        date (str): Diary date, ``YYYY-MM-DD``.
        other_pets (list[dict[str, Any]] | None): The owner's other pets.

    Returns:
        dict[str, Any]: ``content``, ``mentionedAnimals`` and ``meta``.

    Raises:
        AIServiceError: If no photo is given or the diary completion fails.
    """
    if not image_paths:
        raise AIServiceError("At least one photo is required")
    other_pets = other_pets or []

    if config.VERBOSE:
        state.add_log(
            f"[DiaryGen] Generating diary for {pet.get('name')} ({pet.get('species')}) on {date}, "
            f"{len(image_paths)} photo(s), other pets: {', '.join(str(p.get('name')) for p in other_pets) or 'none'}"
        )

    parts = _image_parts(image_paths)
    prompt = build_diary_prompt(pet, date, len(image_paths), other_pets)
    content = _chat(parts, prompt, max_tokens=1024, temperature=0.8)

    if config.VERBOSE:
        state.add_log(f"[DiaryGen] Diary generated, {len(content)} characters")

    return {
        "content": content,
        "mentionedAnimals": analyze_other_animals(parts),
        "meta": {
            "imageCount": len(image_paths),
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "model": config.ARK_VISION_MODEL,
        },
    }
