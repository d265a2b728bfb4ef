import base64
from unittest.mock import patch

import pytest

from services import ai_service
from services.ai_service import (
    API_KEY_MISSING, NO_RESPONSE, correct_transcript, diagnose_plant,
    generate_caption, get_crop_insights, get_encyclopedia_entry, get_weather_based_advice,
)
from services.response_parser import UNSPECIFIED_ERROR

IMAGE = b"\x89PNG\r\n\x1a\nfake-image"
DATA_URL = "data:image/png;base64," + base64.b64encode(IMAGE).decode()

FENCED_DIAGNOSIS = (
    'Sure! ```json\n{"condition":"Healthy","statusTag":"Healthy","diseaseName":"N/A",'
    '"careSuggestions":"- Water daily\\n- Keep in sun","confidenceLevel":"High",'
    '"confidencePercent":"85","plantConfidencePercent":140,"plantName":"Mango"}\n```'
)


# ---------------------------
# Missing credential
# ---------------------------
@pytest.mark.parametrize("call", [
    lambda: diagnose_plant(IMAGE, "image/png"),
    lambda: correct_transcript("where my plant"),
    lambda: get_encyclopedia_entry("Rose"),
    lambda: get_crop_insights("Mandya", "June"),
    lambda: get_weather_based_advice("{}", "rice in Mandya"),
    lambda: generate_caption(IMAGE, "image/png"),
])
def test_missing_key_short_circuits_without_network_call(no_gemini_key, call):
    with patch("services.ai_service._generate") as mock_generate, \
         patch("services.ai_service.genai.Client") as mock_client:
        result = call()

    assert result.error == API_KEY_MISSING
    mock_generate.assert_not_called()
    mock_client.assert_not_called()


def test_missing_key_diagnosis_carries_defaults(no_gemini_key):
    result = diagnose_plant(IMAGE, "image/png")
    assert result.condition == ""
    assert result.care_suggestions == []
    assert result.confidence_percent is None


# ---------------------------
# Diagnosis
# ---------------------------
@patch("services.ai_service._generate", return_value=FENCED_DIAGNOSIS)
def test_diagnose_success(mock_generate, gemini_key):
    result = diagnose_plant(DATA_URL, "image/png", "Leaves curling?")

    assert result.error is None
    assert result.condition == "Healthy"
    assert result.status_tag == "Healthy"
    assert result.care_suggestions == ["Water daily", "Keep in sun"]
    assert result.confidence_percent == 85
    assert result.plant_confidence_percent == 100
    assert result.plant_name == "Mango"
    assert "error" not in result.to_dict()

    contents, model = mock_generate.call_args[0]
    assert model == ai_service.vision_model()
    assert contents[1].startswith("Leaves curling?")


@patch("services.ai_service._generate", return_value="not json at all")
def test_diagnose_format_error(mock_generate, gemini_key):
    result = diagnose_plant(IMAGE, "image/jpeg")
    assert result.error
    assert result.condition == ""
    assert result.care_suggestions == []


@patch("services.ai_service._generate", side_effect=RuntimeError("quota exhausted"))
def test_diagnose_transport_error_never_raises(mock_generate, gemini_key):
    result = diagnose_plant(IMAGE, "image/jpeg")
    assert result.error == "Error from AI: quota exhausted"
    assert result.disease_name == ""


@patch("services.ai_service._generate", return_value='{"condition": ' + "[" * 100000)
def test_diagnose_runaway_nesting_never_raises(mock_generate, gemini_key):
    result = diagnose_plant(IMAGE, "image/png")
    assert result.error
    assert result.condition == ""


@patch("services.ai_service._generate",
       return_value='{"condition": "Rust", "confidencePercent": "NaN"}')
def test_non_finite_percent_is_dropped(mock_generate, gemini_key):
    assert diagnose_plant(IMAGE, "image/jpeg").confidence_percent is None


@patch("services.ai_service._generate", return_value="")
def test_diagnose_empty_reply(mock_generate, gemini_key):
    assert diagnose_plant(IMAGE, "image/jpeg").error == NO_RESPONSE


@patch("services.ai_service._generate", return_value='{"condition": "Odd", "statusTag": "Weird"}')
def test_unknown_status_tag_becomes_unknown(mock_generate, gemini_key):
    assert diagnose_plant(IMAGE, "image/jpeg").status_tag == "Unknown"


def test_diagnose_rejects_bad_base64(gemini_key):
    with patch("services.ai_service._generate") as mock_generate:
        result = diagnose_plant("data:image/png;base64,@@@", "image/png")
    assert result.error.startswith("Image is not valid base64")
    mock_generate.assert_not_called()


@patch("services.ai_service._generate", return_value='"Where is my plant?"')
def test_diagnose_without_image_corrects_text(mock_generate, gemini_key):
    result = diagnose_plant(None, None, "where my plant")
    assert result.condition == "Where is my plant?"
    assert result.error is None


# ---------------------------
# Transcript correction
# ---------------------------
@pytest.mark.parametrize("reply, expected", [
    ('"Why are the leaves yellow?"', "Why are the leaves yellow?"),
    ('{"text": "Why are the leaves yellow?"}', "Why are the leaves yellow?"),
    ("Why are the leaves yellow?", "Why are the leaves yellow?"),
])
def test_correct_transcript_reply_shapes(gemini_key, reply, expected):
    with patch("services.ai_service._generate", return_value=reply) as mock_generate:
        result = correct_transcript("why leaves yellow")

    assert result.text == expected
    assert result.error is None
    prompt = mock_generate.call_args[0][0]
    assert prompt.startswith("why leaves yellow\n")
    assert "Do not translate." in prompt


def test_correct_transcript_empty_text(gemini_key):
    assert correct_transcript("   ").error == "No text provided."


# ---------------------------
# Encyclopedia / crops / advice / caption
# ---------------------------
@patch("services.ai_service._generate", return_value='{"error": "No such plant"}')
def test_encyclopedia_model_error(mock_generate, gemini_key):
    entry = get_encyclopedia_entry("Snarfblossom")
    assert entry.error == "No such plant"
    assert entry.plant_name == "Snarfblossom"
    assert entry.summary == ""


@patch("services.ai_service._generate",
       return_value='{"plantName": "Rose", "summary": "A shrub.", "sunlight": "Full sun"}')
def test_encyclopedia_success(mock_generate, gemini_key):
    entry = get_encyclopedia_entry("rose")
    assert entry.error is None
    assert entry.plant_name == "Rose"
    assert entry.sunlight == "Full sun"
    assert entry.watering == ""


@patch("services.ai_service._generate",
       return_value='{"suitableCrops": "- Ragi\\n- Paddy", "tips": "Sow early"}')
def test_crop_insights_normalizes_lists(mock_generate, gemini_key):
    insight = get_crop_insights("Mandya", "June")
    assert insight.suitable_crops == ["Ragi", "Paddy"]
    assert insight.all_crops == ["Ragi", "Paddy"]
    assert insight.district == "Mandya"
    assert insight.month == "June"


@patch("services.ai_service._generate", return_value='{"tips": "Sow early"}')
def test_crop_insights_missing_key(mock_generate, gemini_key):
    insight = get_crop_insights("Mandya", "June")
    assert insight.error == UNSPECIFIED_ERROR
    assert insight.suitable_crops == []
    assert insight.district == "Mandya"


@patch("services.ai_service._generate", return_value='{"advice": "Delay transplanting."}')
def test_weather_advice_success(mock_generate, gemini_key):
    advice = get_weather_based_advice('{"temperature": 31}', "rice in Kolar")
    assert advice.advice == "Delay transplanting."
    assert advice.to_dict() == {"advice": "Delay transplanting."}
    assert "rice in Kolar" in mock_generate.call_args[0][0]


@patch("services.ai_service._generate", return_value='{"caption": "Leafy love"}')
def test_caption_success(mock_generate, gemini_key):
    assert generate_caption(DATA_URL, "image/png").caption == "Leafy love"


def test_caption_without_image(gemini_key):
    assert generate_caption(b"", "image/png").error == "No image provided."
