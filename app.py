"""
PlantCare AI - Main Flask Application
Plant diagnosis, encyclopedia, crop and weather advice, community feed,
and the speech/translation relay, served as a JSON API.
"""

import base64
import logging
import os
import traceback
from functools import wraps

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_cors import CORS

# ── Load Environment ──────────────────────────────────────────────────────────
load_dotenv()

# ── Services ──────────────────────────────────────────────────────────────────
from constants import APP_NAME, KARNATAKA_DISTRICTS, MONTHS, PLANT_CATEGORIES
from models import CommunityPost, ScanRecord, db
from services import ai_service
from services.ai_service import (
    correct_transcript, diagnose_plant, generate_caption,
    get_crop_insights, get_encyclopedia_entry, get_weather_based_advice,
)
from services.community_service import seed_posts_if_empty
from services.outlook_service import get_regional_outlook
from services.result_store import SqlKeyValueStorage, community_posts, scan_history
from services.speech_service import (
    RelayError, recognize_speech, synthesize_speech, translate_texts,
)
from services.translation_cache import TranslationCache
from services.video_service import fetch_related_videos, video_query
from services.weather_service import fetch_current_weather, weather_snapshot

# ── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("plantcare")

# ── Flask App ─────────────────────────────────────────────────────────────────
app = Flask(__name__)
app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///plantcare.db")
app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
app.config["MAX_CONTENT_LENGTH"] = 16 * 1024 * 1024  # 16 MB max upload
CORS(app)

# ── Database & Stores ─────────────────────────────────────────────────────────
db.init_app(app)


def create_tables():
    with app.app_context():
        db.create_all()


# every entry point (flask run, WSGI servers, tests) needs the tables before the stores
create_tables()

storage = SqlKeyValueStorage()
history_store = scan_history(storage)
post_store = community_posts(storage)
translation_cache = TranslationCache(translate_texts)

if ai_service.is_configured():
    logger.info("✅ Gemini AI ready.")
else:
    logger.warning("⚠️  GEMINI_API_KEY not set. AI features will report a configuration error.")


# ── Helpers ───────────────────────────────────────────────────────────────────
def handle_errors(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except ValueError as e:
            return jsonify({"error": str(e), "type": "validation_error"}), 400
        except Exception:
            logger.error(traceback.format_exc())
            return jsonify({"error": "Server error.", "type": "server_error"}), 500
    return wrapper


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object.")
    return data


def _required(source: dict, name: str) -> str:
    value = source.get(name)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{name}' is required.")
    return value.strip()


def _uploaded_image():
    if "image" not in request.files:
        raise ValueError("No image file provided.")
    image_file = request.files["image"]
    image_bytes = image_file.read()
    if not image_bytes:
        raise ValueError("Uploaded image is empty.")
    return image_bytes, image_file.mimetype or "image/jpeg"


def _data_url(image_bytes: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"


# ── Routes: app ───────────────────────────────────────────────────────────────

@app.route("/")
def index():
    return jsonify({"name": APP_NAME, "gemini_available": ai_service.is_configured()})


@app.route("/api/reference", methods=["GET"])
def reference_data():
    return jsonify({
        "districts":       KARNATAKA_DISTRICTS,
        "months":          MONTHS,
        "plantCategories": PLANT_CATEGORIES,
    })


# ── Routes: plant scan & history ──────────────────────────────────────────────

@app.route("/api/scan", methods=["POST"])
@handle_errors
def scan_plant():
    image_bytes, mime_type = _uploaded_image()
    custom_prompt = (request.form.get("prompt") or "").strip()

    diagnosis = diagnose_plant(image_bytes, mime_type, custom_prompt or None)

    if diagnosis.error:
        return jsonify({"diagnosis": diagnosis.to_dict(), "scan": None})

    if diagnosis.is_not_a_plant:
        return jsonify({"diagnosis": diagnosis.to_dict(), "scan": None, "notAPlant": True})

    record = ScanRecord.create(
        image_preview_url=_data_url(image_bytes, mime_type),
        diagnosis=diagnosis,
        original_prompt=custom_prompt or ai_service.DIAGNOSIS_PROMPT.strip(),
    )
    history_store.add(record)
    return jsonify({"diagnosis": diagnosis.to_dict(), "scan": {"id": record.id,
                                                               "timestamp": record.timestamp}})


@app.route("/api/transcript/correct", methods=["POST"])
@handle_errors
def correct_transcript_route():
    text = _required(_json_body(), "text")
    return jsonify(correct_transcript(text).to_dict())


@app.route("/api/history", methods=["GET"])
def list_history():
    scans = history_store.get_all()
    return jsonify({"count": len(scans), "scans": [s.to_dict() for s in scans]})


@app.route("/api/history", methods=["DELETE"])
def clear_history():
    history_store.clear()
    return jsonify({"cleared": True})


@app.route("/api/history/<scan_id>", methods=["DELETE"])
def delete_history_item(scan_id):
    history_store.delete(scan_id)
    return jsonify({"deleted": scan_id})


# ── Routes: encyclopedia, crops, weather ─────────────────────────────────────

@app.route("/api/encyclopedia", methods=["GET"])
@handle_errors
def encyclopedia():
    plant = _required(request.args, "plant")
    return jsonify(get_encyclopedia_entry(plant).to_dict())


@app.route("/api/crop-insights", methods=["GET"])
@handle_errors
def crop_insights():
    district = _required(request.args, "district")
    month = _required(request.args, "month")
    return jsonify(get_crop_insights(district, month).to_dict())


@app.route("/api/regional-outlook", methods=["GET"])
@handle_errors
def regional_outlook():
    district = _required(request.args, "district")
    month = _required(request.args, "month")
    return jsonify(get_regional_outlook(district, month))


@app.route("/api/weather", methods=["GET"])
@handle_errors
def weather():
    city = _required(request.args, "city")
    return jsonify(fetch_current_weather(city))


@app.route("/api/weather-advice", methods=["POST"])
@handle_errors
def weather_advice():
    data = _json_body()
    city = _required(data, "city")
    context = (data.get("context") or "general farming").strip()

    current = fetch_current_weather(city)
    if "error" in current:
        return jsonify({"weather": None, "advice": None, "error": current["error"]})

    advice = get_weather_based_advice(weather_snapshot(current), f"{context} in {current['city']}")
    return jsonify({"weather": current, "advice": advice.to_dict()})


# ── Routes: community feed ────────────────────────────────────────────────────

@app.route("/api/posts", methods=["GET"])
def list_posts():
    posts = seed_posts_if_empty(post_store)
    return jsonify({"count": len(posts), "posts": [p.to_dict() for p in posts]})


@app.route("/api/posts", methods=["POST"])
@handle_errors
def create_post():
    data = _json_body()
    image_url = _required(data, "imageUrl")
    caption = data.get("caption")
    if not isinstance(caption, str) or not caption.strip():
        raise ValueError("Please enter a caption or generate one.")
    post = CommunityPost.create(image_url=image_url, caption=caption.strip())
    post_store.add(post)
    return jsonify(post.to_dict()), 201


@app.route("/api/posts", methods=["DELETE"])
def clear_posts():
    post_store.clear()
    return jsonify({"cleared": True})


@app.route("/api/posts/<post_id>", methods=["DELETE"])
def delete_post(post_id):
    post_store.delete(post_id)
    return jsonify({"deleted": post_id})


@app.route("/api/posts/caption", methods=["POST"])
@handle_errors
def caption_post():
    image_bytes, mime_type = _uploaded_image()
    return jsonify(generate_caption(image_bytes, mime_type).to_dict())


@app.route("/api/videos", methods=["GET"])
def related_videos():
    query = (request.args.get("q") or "").strip()
    if not query:
        query = video_query(request.args.get("plant", ""), request.args.get("disease", ""))
    return jsonify({"videos": fetch_related_videos(query)})


# ── Routes: speech & translation relay ───────────────────────────────────────

@app.route("/api/translate", methods=["POST"])
@handle_errors
def translate():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    texts = data.get("texts")
    target = data.get("target")
    if not isinstance(texts, list) or not target:
        return jsonify({"error": "Invalid request. Provide texts (array) and target "
                                 "(language code)."}), 400
    try:
        translations = translate_texts([str(t) for t in texts], target)
    except RelayError as e:
        return jsonify({"error": str(e), "details": e.details}), 500
    return jsonify({"translations": translations})


@app.route("/api/translate/cached", methods=["POST"])
@handle_errors
def translate_cached():
    data = _json_body()
    text = data.get("text") or ""
    target = _required(data, "target")
    translated, script_ok = translation_cache.get(text, target)
    return jsonify({"translated": translated, "scriptOk": script_ok})


@app.route("/api/speak", methods=["POST"])
@handle_errors
def speak():
    data = _json_body()
    text = _required(data, "text")
    language_code = _required(data, "languageCode")
    try:
        audio = synthesize_speech(text, language_code, data.get("voiceName"))
    except RelayError as e:
        return jsonify({"error": str(e)}), 500
    return jsonify({"audioContent": audio})


@app.route("/api/stt", methods=["POST"])
@handle_errors
def speech_to_text():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    audio_content = data.get("audioContent")
    if not audio_content:
        logger.error("No audioContent received in /api/stt")
        return jsonify({"error": "No audioContent provided"}), 400
    try:
        text, language = recognize_speech(audio_content, data.get("mimeType"),
                                          data.get("languageCode"))
    except RelayError as e:
        return jsonify({"error": str(e)}), 500
    return jsonify({"text": text, "language": language})


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5001")), debug=True)
