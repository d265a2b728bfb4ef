import base64
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.cloud import speech

from services.speech_service import (
    RelayError, build_recognition_config, detected_language,
    recognize_speech, synthesize_speech, translate_texts,
)


# ---------------------------
# Translation
# ---------------------------
@pytest.fixture
def translate_key(monkeypatch):
    monkeypatch.setenv("GOOGLE_TRANSLATE_API_KEY", "translate-key")


@patch("services.speech_service.requests.post")
def test_translate_texts(mock_post, translate_key):
    mock_post.return_value.json.return_value = {
        "data": {"translations": [{"translatedText": "ನಮಸ್ಕಾರ"}, {"translatedText": "ಗಿಡ"}]}
    }

    assert translate_texts(["Hello", "Plant"], "kn") == ["ನಮಸ್ಕಾರ", "ಗಿಡ"]
    assert mock_post.call_args.kwargs["json"] == {
        "q": ["Hello", "Plant"], "target": "kn", "format": "text",
    }


@patch("services.speech_service.requests.post")
def test_translate_error_payload_is_all_or_nothing(mock_post, translate_key):
    mock_post.return_value.json.return_value = {"error": {"code": 403}}

    with pytest.raises(RelayError) as excinfo:
        translate_texts(["Hello"], "kn")
    assert excinfo.value.details == {"error": {"code": 403}}


def test_translate_without_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_TRANSLATE_API_KEY", raising=False)
    with pytest.raises(RelayError):
        translate_texts(["Hello"], "kn")


# ---------------------------
# Text-to-Speech
# ---------------------------
@patch("services.speech_service._get_tts_client")
def test_synthesize_returns_base64_audio(mock_client):
    mock_client.return_value.synthesize_speech.return_value = SimpleNamespace(audio_content=b"ID3")

    assert synthesize_speech("Hello", "en-US") == base64.b64encode(b"ID3").decode()
    voice = mock_client.return_value.synthesize_speech.call_args.kwargs["voice"]
    assert voice.language_code == "en-US"


@patch("services.speech_service._get_tts_client")
def test_synthesize_without_audio_fails(mock_client):
    mock_client.return_value.synthesize_speech.return_value = SimpleNamespace(audio_content=b"")
    with pytest.raises(RelayError, match="No audio generated"):
        synthesize_speech("Hello", "en-US")


@patch("services.speech_service._get_tts_client",
       side_effect=google_auth_exceptions.DefaultCredentialsError("no credentials"))
def test_synthesize_without_credentials(mock_client):
    with pytest.raises(RelayError, match="no credentials"):
        synthesize_speech("Hello", "en-US")


@patch("services.speech_service._get_tts_client")
def test_synthesize_provider_error(mock_client):
    mock_client.return_value.synthesize_speech.side_effect = \
        google_exceptions.ServiceUnavailable("down")
    with pytest.raises(RelayError, match="TTS failed"):
        synthesize_speech("Hello", "kn-IN", voice_name="kn-IN-Standard-A")


# ---------------------------
# Speech-to-Text
# ---------------------------
def test_wav_uses_linear16_at_16k():
    config = build_recognition_config("audio/wav", None)
    assert config.encoding == speech.RecognitionConfig.AudioEncoding.LINEAR16
    assert config.sample_rate_hertz == 16000


def test_webm_and_missing_mime_use_opus():
    for mime in ("audio/webm", None):
        config = build_recognition_config(mime, None)
        assert config.encoding == speech.RecognitionConfig.AudioEncoding.WEBM_OPUS
        assert config.sample_rate_hertz == 0


def test_default_alternatives_drop_tamil():
    config = build_recognition_config(None, None)
    assert config.language_code == "en-US"
    assert list(config.alternative_language_codes) == ["hi-IN", "kn-IN", "te-IN"]


def test_alternatives_exclude_primary_language():
    config = build_recognition_config(None, "ta-IN")
    assert config.language_code == "ta-IN"
    assert list(config.alternative_language_codes) == ["en-US", "hi-IN", "kn-IN"]


def test_detected_language_is_limited_to_shortlist():
    assert detected_language("kn-in") == "kn-IN"
    assert detected_language("fr-FR") == "en"
    assert detected_language(None) == "en"


@patch("services.speech_service._get_speech_client")
def test_recognize_joins_transcripts(mock_client):
    mock_client.return_value.recognize.return_value = SimpleNamespace(results=[
        SimpleNamespace(alternatives=[SimpleNamespace(transcript="my tomato")],
                        language_code="en-us"),
        SimpleNamespace(alternatives=[SimpleNamespace(transcript="has spots")],
                        language_code="en-us"),
    ])
    audio = base64.b64encode(b"webm-bytes").decode()

    assert recognize_speech(audio, "audio/webm") == ("my tomato has spots", "en-US")


@patch("services.speech_service._get_speech_client")
def test_recognize_with_no_results(mock_client):
    mock_client.return_value.recognize.return_value = SimpleNamespace(results=[])
    assert recognize_speech(base64.b64encode(b"x").decode()) == ("", "en")


def test_recognize_rejects_bad_base64():
    with pytest.raises(ValueError):
        recognize_speech("***")


@patch("services.speech_service._get_speech_client")
def test_recognize_provider_error(mock_client):
    mock_client.return_value = MagicMock()
    mock_client.return_value.recognize.side_effect = google_exceptions.InvalidArgument("bad audio")
    with pytest.raises(RelayError, match="bad audio"):
        recognize_speech(base64.b64encode(b"x").decode())


@patch("services.speech_service._get_speech_client",
       side_effect=google_auth_exceptions.DefaultCredentialsError("no credentials"))
def test_recognize_without_credentials(mock_client):
    with pytest.raises(RelayError, match="no credentials"):
        recognize_speech(base64.b64encode(b"x").decode())
