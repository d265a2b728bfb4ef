"""
PlantCare AI - Speech & Translation Relay
Thin pass-throughs to Google Cloud Translation (REST), Text-to-Speech and
Speech-to-Text. No retries, no caching, no persistence.

Cloud TTS/STT clients pick up credentials from GOOGLE_APPLICATION_CREDENTIALS.
"""

import base64
import binascii
import logging
import os
from typing import List, Optional, Tuple

import requests
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.cloud import speech, texttospeech

from constants import STT_LANGUAGE_CODES

logger = logging.getLogger(__name__)

TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"
STT_MAX_ALTERNATIVES = 3  # Cloud STT accepts at most three alternative languages

# Global clients, created on first use
tts_client = None
speech_client = None


class RelayError(Exception):
    """A provider call failed. `details` carries the provider's payload, if any."""

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.details = details


# ── Translation ──────────────────────────────────────────────────────────────

def translate_texts(texts: List[str], target: str) -> List[str]:
    """Translate a batch of strings. All-or-nothing: any failure raises RelayError."""
    api_key = os.getenv("GOOGLE_TRANSLATE_API_KEY")
    if not api_key:
        raise RelayError("Translation API key not configured.")

    try:
        response = requests.post(
            TRANSLATE_URL,
            params={"key": api_key},
            json={"q": texts, "target": target, "format": "text"},
            timeout=15,
        )
        data = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Translation error: {e}")
        raise RelayError("Translation failed", details=str(e)) from e

    translations = (data.get("data") or {}).get("translations") if isinstance(data, dict) else None
    if not translations:
        raise RelayError("Translation API error", details=data)
    return [t.get("translatedText", "") for t in translations]


# ── Text-to-Speech ───────────────────────────────────────────────────────────

def _get_tts_client():
    global tts_client
    if tts_client is None:
        tts_client = texttospeech.TextToSpeechClient()
    return tts_client


def synthesize_speech(text: str, language_code: str, voice_name: Optional[str] = None) -> str:
    """Returns base64-encoded MP3 audio."""
    if voice_name:
        voice = texttospeech.VoiceSelectionParams(language_code=language_code, name=voice_name)
    else:
        voice = texttospeech.VoiceSelectionParams(
            language_code=language_code,
            ssml_gender=texttospeech.SsmlVoiceGender.NEUTRAL,
        )

    try:
        response = _get_tts_client().synthesize_speech(
            input=texttospeech.SynthesisInput(text=text),
            voice=voice,
            audio_config=texttospeech.AudioConfig(
                audio_encoding=texttospeech.AudioEncoding.MP3
            ),
        )
    except (google_exceptions.GoogleAPIError, google_auth_exceptions.DefaultCredentialsError) as e:
        logger.error(f"TTS error: {e}")
        raise RelayError(f"TTS failed: {e}") from e

    if not response.audio_content:
        logger.error("TTS: No audioContent returned")
        raise RelayError("TTS failed: No audio generated.")
    return base64.b64encode(response.audio_content).decode("utf-8")


# ── Speech-to-Text ───────────────────────────────────────────────────────────

def _get_speech_client():
    global speech_client
    if speech_client is None:
        speech_client = speech.SpeechClient()
    return speech_client


def build_recognition_config(mime_type: Optional[str],
                             language_code: Optional[str]) -> speech.RecognitionConfig:
    """wav/pcm uploads are 16 kHz LINEAR16; anything else is treated as webm/opus."""
    primary = language_code or "en-US"
    alternatives = [code for code in STT_LANGUAGE_CODES if code != primary]

    config = {
        "encoding": speech.RecognitionConfig.AudioEncoding.WEBM_OPUS,
        "language_code": primary,
        "enable_automatic_punctuation": True,
        "alternative_language_codes": alternatives[:STT_MAX_ALTERNATIVES],
    }
    if mime_type in ("audio/wav", "audio/pcm"):
        config["encoding"] = speech.RecognitionConfig.AudioEncoding.LINEAR16
        config["sample_rate_hertz"] = 16000
    return speech.RecognitionConfig(**config)


def detected_language(tag: Optional[str]) -> str:
    """Map the provider's tag onto the supported shortlist, defaulting to English."""
    if tag:
        for code in STT_LANGUAGE_CODES:
            if code.lower() == tag.lower():
                return code
    return "en"


def recognize_speech(audio_content: str, mime_type: Optional[str] = None,
                     language_code: Optional[str] = None) -> Tuple[str, str]:
    """Returns (transcript, language tag)."""
    try:
        audio_bytes = base64.b64decode(audio_content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"audioContent is not valid base64: {e}") from e

    logger.info(f"Received STT request. audio bytes: {len(audio_bytes)}, mimeType: {mime_type}")
    try:
        response = _get_speech_client().recognize(
            config=build_recognition_config(mime_type, language_code),
            audio=speech.RecognitionAudio(content=audio_bytes),
        )
    except (google_exceptions.GoogleAPIError, google_auth_exceptions.DefaultCredentialsError) as e:
        logger.error(f"Error in STT: {e}")
        raise RelayError(str(e)) from e

    results = list(response.results)
    transcript = " ".join(r.alternatives[0].transcript for r in results if r.alternatives)
    language = detected_language(results[0].language_code if results else None)
    return transcript, language
