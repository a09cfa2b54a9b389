"""Client utilities for medicine name lookups through the Gemini API."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from pharmafind.core.config import get_settings

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

KNOWN_MEDICINES = {
    "paracetamol",
    "ibuprofen",
    "metformin",
    "aspirin",
    "atorvastatin",
    "amoxicillin",
    "cetirizine",
    "metformin 500mg",
    "dolo 650",
}
MOCK_SUGGESTIONS = {
    "para": ["Paracetamol", "Paracetamol 500mg", "Paracetamol 650mg"],
    "ibu": ["Ibuprofen", "Ibuprofen 400mg"],
    "met": ["Metformin", "Metformin 500mg", "Methotrexate"],
    "dolo": ["Dolo 650"],
}
MAX_SUGGESTIONS = 5


class GeminiError(RuntimeError):
    """Raised when the Gemini API returns an unusable response."""


@dataclass(frozen=True)
class NameValidation:
    valid: bool
    corrected_name: str
    reason: str = ""


def generate_content(prompt: str, json_response: bool = False) -> str:
    """Send a text prompt and return the text of the first candidate."""
    settings = get_settings()
    if not settings.gemini_api_key:
        raise GeminiError("GEMINI_API_KEY is not configured")

    body: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
    if json_response:
        body["generationConfig"] = {"responseMimeType": "application/json"}

    response = _SESSION.post(
        f"{_BASE_URL}/{settings.gemini_model}:generateContent",
        params={"key": settings.gemini_api_key},
        json=body,
        timeout=15,
    )
    if response.status_code >= 400:
        logger.error("generateContent failed: status=%s body=%s", response.status_code, response.text[:300])
        raise GeminiError(f"Gemini returned HTTP {response.status_code}")

    payload = response.json()
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise GeminiError("Gemini response has no text candidate") from exc
    return text.strip()


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise GeminiError(f"Gemini returned non-JSON text: {text[:100]!r}") from exc


def _offline_validation(name: str) -> NameValidation:
    lowered = name.lower()
    if lowered in KNOWN_MEDICINES:
        proper = "Dolo 650" if lowered == "dolo 650" else name[:1].upper() + name[1:].lower()
        return NameValidation(valid=True, corrected_name=proper)
    if lowered == "paracetmol":
        return NameValidation(valid=True, corrected_name="Paracetamol", reason="Corrected spelling.")
    if len(name) < 3:
        return NameValidation(valid=False, corrected_name="", reason=f'"{name}" is too short to be a valid medicine name.')
    return NameValidation(
        valid=False,
        corrected_name="",
        reason=f'"{name}" does not seem to be a valid medicine name. Please check the spelling.',
    )


def validate_medicine_name(name: str) -> NameValidation:
    """Check a typed medicine name and return a spelling-corrected form when possible.

    Service failures let the name through unchanged so a search is never blocked.
    """
    name = name.strip()
    if not get_settings().gemini_api_key:
        return _offline_validation(name)

    prompt = (
        "You are a helpful medical assistant. The user has entered a medicine name. Please validate it.\n"
        f'User input: "{name}"\n'
        "Is this a recognized medicine name? If it is a common misspelling, correct it.\n"
        'Respond in JSON with "valid" (boolean), "correctedName" (string, properly capitalized, '
        'empty when invalid) and "reason" (a brief explanation for the user).'
    )
    try:
        result = _parse_json(generate_content(prompt, json_response=True))
    except (GeminiError, requests.RequestException) as exc:
        logger.warning("Medicine name validation failed for %r: %s", name, exc)
        return NameValidation(
            valid=True,
            corrected_name=name,
            reason="Could not validate medicine name, but proceeding with search.",
        )
    if not isinstance(result, dict):
        return NameValidation(valid=True, corrected_name=name)
    return NameValidation(
        valid=bool(result.get("valid")),
        corrected_name=str(result.get("correctedName") or ""),
        reason=str(result.get("reason") or ""),
    )


def get_medicine_suggestions(prefix: str) -> List[str]:
    """Autocomplete up to five medicine names starting with ``prefix``."""
    prefix = prefix.strip()
    if not prefix:
        return []
    if not get_settings().gemini_api_key:
        lowered = prefix.lower()
        for key, names in MOCK_SUGGESTIONS.items():
            if lowered.startswith(key):
                return list(names)
        return []

    prompt = (
        f"Based on the user's partial input, provide up to {MAX_SUGGESTIONS} common medicine names "
        f'that start with these letters.\nUser input: "{prefix}"\n'
        "Provide the response as a JSON array of strings."
    )
    try:
        result = _parse_json(generate_content(prompt, json_response=True))
    except (GeminiError, requests.RequestException) as exc:
        logger.warning("Medicine suggestions failed for %r: %s", prefix, exc)
        return []
    if not isinstance(result, list):
        return []
    return [str(item).strip() for item in result if str(item).strip()][:MAX_SUGGESTIONS]


def _split_names(text: str) -> List[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


def get_medicine_recommendations(symptom: str) -> List[str]:
    """Suggest one to three medicines for a disease or symptom description."""
    symptom = symptom.strip()
    if not symptom:
        return []
    if not get_settings().gemini_api_key:
        lowered = symptom.lower()
        if "fever" in lowered:
            return ["Paracetamol", "Ibuprofen", "Dolo 650"]
        if "headache" in lowered:
            return ["Paracetamol", "Ibuprofen", "Aspirin"]
        return []

    prompt = (
        "Based on the user's query for a disease or symptom, recommend relevant medicine names. "
        "Provide the response as a single, comma-separated string of the top 1-3 medicine names. "
        f"For example, for 'headache', return 'Paracetamol, Ibuprofen'. User query: '{symptom}'"
    )
    try:
        return _split_names(generate_content(prompt))
    except (GeminiError, requests.RequestException) as exc:
        logger.warning("Medicine recommendations failed for %r: %s", symptom, exc)
        return []


def get_medicine_description(name: str) -> Optional[str]:
    name = name.strip()
    if not name:
        return None
    if not get_settings().gemini_api_key:
        lowered = name.lower()
        if "paracetamol" in lowered or "dolo 650" in lowered:
            return (
                "Paracetamol, the active ingredient in Dolo 650, is a common pain reliever and fever "
                "reducer. It is used to treat many conditions such as headaches, muscle aches, "
                "arthritis, backache, toothaches, colds, and fevers."
            )
        return f"Information about {name} would be shown here."

    prompt = (
        f'Provide a brief, simple, one-paragraph description for the medicine "{name}". '
        "Write it for a layperson, focusing on its common use."
    )
    try:
        return generate_content(prompt)
    except (GeminiError, requests.RequestException) as exc:
        logger.warning("Medicine description failed for %r: %s", name, exc)
        return f"Could not load information for {name}."
