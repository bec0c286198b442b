"""
Rule-based diabetes risk scorer.

Used whenever the analysis oracle is unavailable or returns something
that cannot be decoded. It has no external dependencies, never fails for
a validated questionnaire, and always returns the same analysis for the
same input.
"""
from typing import List

from app.models.request_models import HealthData
from app.models.response_models import PersonalizedAdvice, RiskAnalysis, RiskLevel, RiskPrediction

# Fixed confidence marks a prediction as rule-based rather than model-derived.
FALLBACK_CONFIDENCE = 70

# (level, percentage) pairs, highest severity first.
VERY_HIGH_RISK = (RiskLevel.VERY_HIGH, 85)
HIGH_RISK = (RiskLevel.HIGH, 70)
MODERATE_RISK = (RiskLevel.MODERATE, 40)
LOW_RISK = (RiskLevel.LOW, 20)

FALLBACK_ADVICE = PersonalizedAdvice(
    diet=[
        "Focus on whole grains, lean proteins, and vegetables",
        "Limit refined sugars and processed foods",
        "Control portion sizes",
        "Eat regular, balanced meals",
    ],
    exercise=[
        "Aim for 150 minutes of moderate exercise per week",
        "Include both cardio and strength training",
        "Start gradually and increase intensity over time",
    ],
    lifestyle=[
        "Maintain a healthy sleep schedule",
        "Manage stress through relaxation techniques",
        "Avoid smoking and limit alcohol consumption",
    ],
    monitoring=[
        "Regular blood glucose monitoring",
        "Annual comprehensive health checkups",
        "Monitor blood pressure and cholesterol",
    ],
)

FALLBACK_NEXT_STEPS = [
    "Consult with your healthcare provider",
    "Consider diabetes prevention program",
    "Schedule regular health screenings",
]


def _classify(data: HealthData, bmi: float):
    """First matching rule wins; the order of these checks is significant."""
    if data.blood_glucose_fasting >= 126 or data.blood_glucose_post_meal >= 200:
        return VERY_HIGH_RISK
    if data.blood_glucose_fasting >= 100 or data.blood_glucose_post_meal >= 140 or bmi >= 30:
        return HIGH_RISK
    if data.family_history or bmi >= 25 or data.age >= 45:
        return MODERATE_RISK
    return LOW_RISK


def _key_factors(data: HealthData, bmi: float) -> List[str]:
    checks = [
        (bmi >= 25, "Elevated BMI"),
        (data.family_history, "Family history of diabetes"),
        (data.blood_glucose_fasting >= 100, "Elevated fasting glucose"),
        (data.physical_activity_days < 3, "Low physical activity"),
        (data.age >= 45, "Age factor"),
    ]
    return [label for applies, label in checks if applies]


def score(data: HealthData) -> RiskAnalysis:
    """Scores a questionnaire with fixed thresholds and returns the static advice set."""
    bmi = data.bmi
    risk_level, risk_percentage = _classify(data, bmi)
    return RiskAnalysis(
        prediction=RiskPrediction(
            risk_level=risk_level,
            risk_percentage=risk_percentage,
            confidence=FALLBACK_CONFIDENCE,
            key_factors=_key_factors(data, bmi),
        ),
        personalized_advice=FALLBACK_ADVICE.model_copy(deep=True),
        next_steps=list(FALLBACK_NEXT_STEPS),
    )
