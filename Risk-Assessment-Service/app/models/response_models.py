import math
from enum import Enum
from typing import Any, List

from pydantic import Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.models.request_models import CamelModel, HealthData


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very-high"

    @property
    def severity(self) -> int:
        """Ordinal position, 0 for LOW up to 3 for VERY_HIGH."""
        return list(RiskLevel).index(self)


# --- Building blocks of a report ---

class RiskPrediction(CamelModel):
    risk_level: RiskLevel
    risk_percentage: int = Field(..., ge=0, le=100)
    confidence: int = Field(..., ge=0, le=100)
    key_factors: List[str] = Field(default_factory=list, description="May be empty for rule-based predictions.")


class PersonalizedAdvice(CamelModel):
    diet: List[str]
    exercise: List[str]
    lifestyle: List[str]
    monitoring: List[str]


class RiskAnalysis(CamelModel):
    """Prediction plus advice, as produced by either the oracle path or the rule-based scorer."""
    prediction: RiskPrediction
    personalized_advice: PersonalizedAdvice
    next_steps: List[str]


# --- Decode schema for the oracle's JSON answer ---

ORACLE_DEFAULTS = {
    "risk_level": RiskLevel.MODERATE.value,
    "risk_percentage": 50,
    "confidence": 75,
    "key_factors": ["Unable to determine risk factors"],
    "diet_advice": ["Consult with a nutritionist for personalized dietary advice"],
    "exercise_advice": ["Consult with a healthcare provider for exercise recommendations"],
    "lifestyle_advice": ["Maintain healthy lifestyle habits"],
    "monitoring_advice": ["Regular health checkups recommended"],
    "next_steps": ["Consult with your healthcare provider"],
}


class OracleAnalysis(CamelModel):
    """
    The flat JSON object the oracle is asked to return.

    Every key is optional. Missing or falsy values are replaced from
    ORACLE_DEFAULTS in a single pass before any field is validated, so a
    partially filled answer is never trusted field by field.
    """
    risk_level: RiskLevel
    risk_percentage: int
    confidence: int
    key_factors: List[str]
    diet_advice: List[str]
    exercise_advice: List[str]
    lifestyle_advice: List[str]
    monitoring_advice: List[str]
    next_steps: List[str]

    @model_validator(mode="before")
    @classmethod
    def apply_default_table(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError("Oracle analysis must be a JSON object")
        filled = {}
        for name, default in ORACLE_DEFAULTS.items():
            value = data.get(to_camel(name))
            filled[name] = value if value else default
        return filled

    @field_validator("risk_level", mode="before")
    @classmethod
    def unknown_level_is_default(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() in {level.value for level in RiskLevel}:
            return v.strip().lower()
        return ORACLE_DEFAULTS["risk_level"]

    @field_validator("risk_percentage", "confidence", mode="before")
    @classmethod
    def clamp_percentage(cls, v: Any, info: ValidationInfo) -> int:
        if isinstance(v, bool):
            return ORACLE_DEFAULTS[info.field_name]
        try:
            number = float(v)
        except (TypeError, ValueError, OverflowError):
            return ORACLE_DEFAULTS[info.field_name]
        if not math.isfinite(number):
            return ORACLE_DEFAULTS[info.field_name]
        return max(0, min(100, int(round(number))))

    @field_validator(
        "key_factors", "diet_advice", "exercise_advice", "lifestyle_advice", "monitoring_advice", "next_steps",
        mode="before",
    )
    @classmethod
    def clean_string_list(cls, v: Any, info: ValidationInfo) -> List[str]:
        if not isinstance(v, list):
            raise ValueError(f"{info.field_name} must be a list of strings")
        items = []
        for item in v:
            if not isinstance(item, str):
                raise ValueError(f"{info.field_name} must contain only strings")
            if item.strip():
                items.append(item.strip())
        return items or list(ORACLE_DEFAULTS[info.field_name])

    def to_analysis(self) -> RiskAnalysis:
        return RiskAnalysis(
            prediction=RiskPrediction(
                risk_level=self.risk_level,
                risk_percentage=self.risk_percentage,
                confidence=self.confidence,
                key_factors=self.key_factors,
            ),
            personalized_advice=PersonalizedAdvice(
                diet=self.diet_advice,
                exercise=self.exercise_advice,
                lifestyle=self.lifestyle_advice,
                monitoring=self.monitoring_advice,
            ),
            next_steps=self.next_steps,
        )


# --- Final report ---

class HealthReport(CamelModel):
    patient_data: HealthData
    prediction: RiskPrediction
    personalized_advice: PersonalizedAdvice
    next_steps: List[str]
    disclaimer: str
    generated_at: str = Field(..., description="ISO 8601 timestamp")
