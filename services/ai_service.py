"""
PlantCare AI - AI Service
Gemini callers for diagnosis, transcript clean-up, encyclopedia, crop insights,
weather advice and captions, using the google-genai SDK.

Every caller returns its typed result and never raises: configuration,
transport and format failures all come back as `error` on the result.
"""

import base64
import binascii
import json
import logging
import os
from dataclasses import replace
from typing import Optional, Union

from google import genai
from google.genai import types

from services.response_parser import (
    ParseOutcome, ResultSchema, extract_json, parse_ai_response,
)
from services.results import (
    ADVICE_SCHEMA, CAPTION_SCHEMA, CROP_INSIGHT_SCHEMA, DIAGNOSIS_SCHEMA,
    ENCYCLOPEDIA_SCHEMA, CaptionResult, CropInsight, DiagnosisResult,
    EncyclopediaEntry, FarmingAdvice, TranscriptCorrection,
)

logger = logging.getLogger(__name__)

API_KEY_MISSING = "API Key not configured."
NO_RESPONSE = "AI did not return a response."
DEFAULT_MODEL = "gemini-2.5-flash"

# Global client, created on first use
client = None

ImagePayload = Union[bytes, str, None]


def _api_key() -> str:
    return os.getenv("GEMINI_API_KEY", "")


def text_model() -> str:
    return os.getenv("GEMINI_TEXT_MODEL", DEFAULT_MODEL)


def vision_model() -> str:
    return os.getenv("GEMINI_VISION_MODEL", DEFAULT_MODEL)


def is_configured() -> bool:
    return bool(_api_key())


def initialize_gemini():
    """Initialize the Gemini API client."""
    global client
    api_key = _api_key()
    if not api_key:
        raise ValueError("GEMINI_API_KEY environment variable is missing.")
    client = genai.Client(api_key=api_key)
    logger.info("✅ Gemini client initialized.")


def _generate(contents, model: str) -> str:
    """Single generate_content call asking for JSON. Returns the raw text."""
    global client
    if not client:
        initialize_gemini()

    response = client.models.generate_content(
        model=model,
        contents=contents,
        config=types.GenerateContentConfig(response_mime_type="application/json"),
    )
    logger.info(f"✅ Used model: {model}")
    return (response.text or "").strip()


def decode_image(image: ImagePayload) -> bytes:
    """Accept raw bytes, plain base64, or a data URL (`data:image/png;base64,...`)."""
    if not image:
        return b""
    if isinstance(image, bytes):
        return image
    encoded = image.split(",", 1)[1] if image.startswith("data:") else image
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Image is not valid base64: {e}") from e


def _call_for_json(task: str, contents, model: str, schema: ResultSchema) -> ParseOutcome:
    """Shared pipeline: credential gate → Gemini → extractor → normalizer."""
    if not is_configured():
        return ParseOutcome(error=API_KEY_MISSING)

    try:
        text = _generate(contents, model)
    except Exception as e:
        logger.error(f"Error {task}: {e}")
        return ParseOutcome(error=f"Error from AI: {e}")

    if not text:
        return ParseOutcome(error=NO_RESPONSE)

    outcome = parse_ai_response(text, schema)
    if not outcome.ok:
        logger.warning(f"⚠️  Unusable AI response while {task}.")
    return outcome


# ── Diagnosis ─────────────────────────────────────────────────────────────────

DIAGNOSIS_PROMPT = """
You are a plant health expert. Analyze the attached plant image.
Respond ONLY in JSON format with these keys:
- "plantName": most likely species or common name (e.g. "Mango", "Rose"), or "Unknown".
- "plantEmoji": an emoji for the plant, or "🪴" if unknown.
- "plantConfidencePercent": number 0-100, confidence in the plant identification.
- "condition": e.g. "Healthy", "Diseased", "Needs Attention", "Unknown".
- "statusTag": one of "Healthy", "Diseased", "NeedsAttention", "Unknown", matching the condition.
- "diseaseName": the specific disease or issue, or "N/A".
- "careSuggestions": array of short, actionable care tips. General tips if healthy.
- "confidenceLevel": "High", "Medium", "Low", or "N/A" if not a plant.
- "confidencePercent": number 0-100, confidence in the diagnosis.
Respond with exactly ONE JSON object and no other text. Do not repeat keys.
If the image is not a plant, set plantName to "Unknown", plantEmoji to "🪴",
plantConfidencePercent to 0, condition and statusTag to "Unknown", and the rest to "N/A".
"""

CORRECTION_INSTRUCTION = (
    "Rewrite the above as a clear, grammatically correct, natural sentence in the same "
    "language. If the text is a question, make it a polite, complete question. "
    "Do not translate. Do not add extra information."
)


def diagnose_plant(image: ImagePayload, mime_type: Optional[str],
                   custom_prompt: Optional[str] = None) -> DiagnosisResult:
    """
    Diagnose a plant photo.

    Called with neither image nor MIME type, this performs the text-only
    transcript correction instead and returns the cleaned text in `condition`.
    New code should call correct_transcript() directly.
    """
    if not image and not mime_type:
        corrected = correct_transcript(custom_prompt or "")
        if corrected.error:
            return DiagnosisResult.failed(corrected.error)
        return DiagnosisResult(condition=corrected.text, status_tag="Unknown")

    if not is_configured():
        return DiagnosisResult.failed(API_KEY_MISSING)

    try:
        image_bytes = decode_image(image)
    except ValueError as e:
        return DiagnosisResult.failed(str(e))
    if not image_bytes:
        return DiagnosisResult.failed("No image provided.")

    prompt = f"{custom_prompt} {DIAGNOSIS_PROMPT}" if custom_prompt else DIAGNOSIS_PROMPT
    image_part = types.Part.from_bytes(data=image_bytes, mime_type=mime_type or "image/jpeg")

    outcome = _call_for_json("diagnosing plant", [image_part, prompt],
                             vision_model(), DIAGNOSIS_SCHEMA)
    if not outcome.ok:
        return DiagnosisResult.failed(outcome.error)
    return DiagnosisResult.from_fields(outcome.fields)


def _transcript_from_reply(reply: str) -> str:
    """The model may answer with a JSON string, an object, or plain text."""
    try:
        value = json.loads(reply)
    except json.JSONDecodeError:
        value = None
    if isinstance(value, str):
        return value.strip()

    if "{" in reply:
        parsed = extract_json(reply)
        if isinstance(parsed, dict):
            for key in ("text", "correctedText", "sentence"):
                if isinstance(parsed.get(key), str):
                    return parsed[key].strip()
    return reply.strip()


def correct_transcript(text: str) -> TranscriptCorrection:
    """Ask Gemini to tidy up a speech-to-text transcript without translating it."""
    if not is_configured():
        return TranscriptCorrection(error=API_KEY_MISSING)
    if not text.strip():
        return TranscriptCorrection(error="No text provided.")

    prompt = f"{text}\n{CORRECTION_INSTRUCTION}"
    try:
        reply = _generate(prompt, text_model())
    except Exception as e:
        logger.error(f"Error correcting transcript: {e}")
        return TranscriptCorrection(error=f"Error from AI: {e}")

    if not reply:
        return TranscriptCorrection(error=NO_RESPONSE)
    return TranscriptCorrection(text=_transcript_from_reply(reply))


# ── Encyclopedia ──────────────────────────────────────────────────────────────

def get_encyclopedia_entry(plant_name: str) -> EncyclopediaEntry:
    default = EncyclopediaEntry(plant_name=plant_name)
    prompt = (
        f'Provide an encyclopedia-style summary for the plant "{plant_name}". '
        'Respond ONLY in JSON format with the keys "plantName", "summary", "sunlight", '
        '"watering", "care" and "commonDiseases", all strings. If the plant is not found, '
        'put a message under an "error" key and leave the other fields empty.'
    )
    outcome = _call_for_json("fetching encyclopedia entry", prompt,
                             text_model(), ENCYCLOPEDIA_SCHEMA)
    if not outcome.ok:
        return replace(default, error=outcome.error)
    return EncyclopediaEntry.from_fields(outcome.fields, plant_name)


# ── Crop insights ─────────────────────────────────────────────────────────────

def get_crop_insights(district: str, month: str, state: str = "Karnataka") -> CropInsight:
    default = CropInsight(district=district, month=month)
    prompt = (
        f"For {district} district in {state}, during the month of {month}, which crops are "
        'most suitable to grow? Respond ONLY in JSON format with keys: "district" (string), '
        '"month" (string), "suitableCrops" (array of strings), "allCrops" (array of every '
        'major crop grown in this district and month), "tips" (string, farming tips for '
        'these crops here), "climatePatterns" (string, typical climate for this district '
        "and month)."
    )
    outcome = _call_for_json("fetching crop insights", prompt,
                             text_model(), CROP_INSIGHT_SCHEMA)
    if not outcome.ok:
        return replace(default, error=outcome.error)
    return CropInsight.from_fields(outcome.fields, district, month)


# ── Weather advice ────────────────────────────────────────────────────────────

def get_weather_based_advice(weather_json: str, context: str) -> FarmingAdvice:
    prompt = (
        f"Given the following weather data for {context}: {weather_json}. "
        "You are a strict, highly experienced agricultural advisor. If the crop or farming "
        "context does NOT suit the current weather, location or season, give a clear, strict "
        "and detailed warning: explain the water, soil and climate requirements, advise the "
        "farmer against it and suggest better alternatives. Do not sugar-coat unsuitable "
        "choices. If the crop is suitable, give a detailed, practical plan for today. "
        'Respond ONLY in JSON format with one key: "advice" (string, at least 5-10 '
        "sentences for a warning, always detailed)."
    )
    outcome = _call_for_json("fetching weather-based advice", prompt,
                             text_model(), ADVICE_SCHEMA)
    if not outcome.ok:
        return FarmingAdvice(error=outcome.error)
    return FarmingAdvice(advice=outcome.fields["advice"])


# ── Captions ──────────────────────────────────────────────────────────────────

CAPTION_PROMPT = (
    "Generate a fun, engaging and informative Instagram-style caption for this plant photo. "
    'Keep it to 1-3 sentences. Respond ONLY in JSON format with one key: "caption" (string).'
)


def generate_caption(image: ImagePayload, mime_type: str) -> CaptionResult:
    if not is_configured():
        return CaptionResult(error=API_KEY_MISSING)
    try:
        image_bytes = decode_image(image)
    except ValueError as e:
        return CaptionResult(error=str(e))
    if not image_bytes:
        return CaptionResult(error="No image provided.")

    image_part = types.Part.from_bytes(data=image_bytes, mime_type=mime_type or "image/jpeg")
    outcome = _call_for_json("generating caption", [image_part, CAPTION_PROMPT],
                             vision_model(), CAPTION_SCHEMA)
    if not outcome.ok:
        return CaptionResult(error=outcome.error)
    return CaptionResult(caption=outcome.fields["caption"])
