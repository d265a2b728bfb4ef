"""
PlantCare AI - AI Result Types
Typed results returned by the Gemini callers, with their declared JSON shapes.

Every result carries an optional `error`. When it is set, all other fields hold
their defaults. Serialized forms use the camelCase keys the front end expects
and omit absent optional values.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from services.response_parser import FieldKind, ResultSchema, normalize

STATUS_TAGS = ("Healthy", "Diseased", "NeedsAttention", "Unknown")


def _clamp_percent(value):
    if value is None:
        return None
    return max(0, min(100, value))


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ── Diagnosis ─────────────────────────────────────────────────────────────────

DIAGNOSIS_SCHEMA = ResultSchema(
    required_key="condition",
    fields={
        "condition":              FieldKind.STRING,
        "statusTag":              FieldKind.STRING,
        "diseaseName":            FieldKind.STRING,
        "careSuggestions":        FieldKind.STRING_LIST,
        "confidenceLevel":        FieldKind.STRING,
        "confidencePercent":      FieldKind.OPTIONAL_NUMBER,
        "plantConfidencePercent": FieldKind.OPTIONAL_NUMBER,
        "plantName":              FieldKind.STRING,
        "plantEmoji":             FieldKind.STRING,
    },
)


@dataclass(frozen=True)
class DiagnosisResult:
    condition: str = ""
    status_tag: str = "Unknown"
    disease_name: str = ""
    care_suggestions: List[str] = field(default_factory=list)
    confidence_level: str = ""
    confidence_percent: Optional[float] = None
    plant_confidence_percent: Optional[float] = None
    plant_name: str = ""
    plant_emoji: str = ""
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "DiagnosisResult":
        return cls(error=error)

    @classmethod
    def from_fields(cls, fields: Dict[str, Any]) -> "DiagnosisResult":
        tag = fields.get("statusTag") or "Unknown"
        return cls(
            condition=fields.get("condition", ""),
            status_tag=tag if tag in STATUS_TAGS else "Unknown",
            disease_name=fields.get("diseaseName", ""),
            care_suggestions=list(fields.get("careSuggestions") or []),
            confidence_level=fields.get("confidenceLevel", ""),
            confidence_percent=_clamp_percent(fields.get("confidencePercent")),
            plant_confidence_percent=_clamp_percent(fields.get("plantConfidencePercent")),
            plant_name=fields.get("plantName", ""),
            plant_emoji=fields.get("plantEmoji", ""),
        )

    @property
    def is_not_a_plant(self) -> bool:
        return self.status_tag == "Unknown" and self.condition == "Unknown"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "condition":              self.condition,
            "statusTag":              self.status_tag,
            "diseaseName":            self.disease_name,
            "careSuggestions":        list(self.care_suggestions),
            "confidenceLevel":        self.confidence_level,
            "confidencePercent":      self.confidence_percent,
            "plantConfidencePercent": self.plant_confidence_percent,
            "plantName":              self.plant_name or None,
            "plantEmoji":             self.plant_emoji or None,
            "error":                  self.error,
        }
        return _drop_none(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiagnosisResult":
        """Rebuild a stored diagnosis; stored data passes through the same coercion."""
        result = cls.from_fields(normalize(data, DIAGNOSIS_SCHEMA))
        if data.get("error"):
            return replace(result, error=str(data["error"]))
        return result


# ── Transcript correction ────────────────────────────────────────────────────

@dataclass(frozen=True)
class TranscriptCorrection:
    text: str = ""
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({"text": self.text, "error": self.error})


# ── Encyclopedia ──────────────────────────────────────────────────────────────

ENCYCLOPEDIA_SCHEMA = ResultSchema(
    required_key="summary",
    fields={
        "plantName":      FieldKind.STRING,
        "summary":        FieldKind.STRING,
        "sunlight":       FieldKind.STRING,
        "watering":       FieldKind.STRING,
        "care":           FieldKind.STRING,
        "commonDiseases": FieldKind.STRING,
    },
)


@dataclass(frozen=True)
class EncyclopediaEntry:
    plant_name: str = ""
    summary: str = ""
    sunlight: str = ""
    watering: str = ""
    care: str = ""
    common_diseases: str = ""
    error: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: Dict[str, Any], plant_name: str) -> "EncyclopediaEntry":
        return cls(
            plant_name=fields.get("plantName") or plant_name,
            summary=fields.get("summary", ""),
            sunlight=fields.get("sunlight", ""),
            watering=fields.get("watering", ""),
            care=fields.get("care", ""),
            common_diseases=fields.get("commonDiseases", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "plantName":      self.plant_name,
            "summary":        self.summary,
            "sunlight":       self.sunlight,
            "watering":       self.watering,
            "care":           self.care,
            "commonDiseases": self.common_diseases,
            "error":          self.error,
        })


# ── Crop insight ──────────────────────────────────────────────────────────────

CROP_INSIGHT_SCHEMA = ResultSchema(
    required_key="suitableCrops",
    fields={
        "district":        FieldKind.STRING,
        "month":           FieldKind.STRING,
        "suitableCrops":   FieldKind.STRING_LIST,
        "allCrops":        FieldKind.STRING_LIST,
        "tips":            FieldKind.STRING,
        "climatePatterns": FieldKind.STRING,
    },
)


@dataclass(frozen=True)
class CropInsight:
    district: str = ""
    month: str = ""
    suitable_crops: List[str] = field(default_factory=list)
    all_crops: List[str] = field(default_factory=list)
    tips: str = ""
    climate_patterns: str = ""
    error: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: Dict[str, Any], district: str, month: str) -> "CropInsight":
        suitable = list(fields.get("suitableCrops") or [])
        return cls(
            district=fields.get("district") or district,
            month=fields.get("month") or month,
            suitable_crops=suitable,
            # models often skip allCrops; the suitable list is a subset of it
            all_crops=list(fields.get("allCrops") or suitable),
            tips=fields.get("tips", ""),
            climate_patterns=fields.get("climatePatterns", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "district":        self.district,
            "month":           self.month,
            "suitableCrops":   list(self.suitable_crops),
            "allCrops":        list(self.all_crops),
            "tips":            self.tips,
            "climatePatterns": self.climate_patterns,
            "error":           self.error,
        })


# ── Farming advice / caption ──────────────────────────────────────────────────

ADVICE_SCHEMA = ResultSchema(required_key="advice", fields={"advice": FieldKind.STRING})
CAPTION_SCHEMA = ResultSchema(required_key="caption", fields={"caption": FieldKind.STRING})


@dataclass(frozen=True)
class FarmingAdvice:
    advice: str = ""
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({"advice": self.advice, "error": self.error})


@dataclass(frozen=True)
class CaptionResult:
    caption: str = ""
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({"caption": self.caption, "error": self.error})
