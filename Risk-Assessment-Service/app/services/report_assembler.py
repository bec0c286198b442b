from datetime import datetime, timezone
from typing import List

from app.models.request_models import HealthData
from app.models.response_models import HealthReport, PersonalizedAdvice, RiskAnalysis, RiskPrediction

DISCLAIMER = (
    "This assessment is for informational purposes only and should not replace professional medical advice. "
    "Please consult with a qualified healthcare provider for proper diagnosis and treatment recommendations."
)


def assemble(
        prediction: RiskPrediction,
        advice: PersonalizedAdvice,
        next_steps: List[str],
        original_data: HealthData,
) -> HealthReport:
    """Wraps a prediction and its advice into the final report, stamped with the current UTC time."""
    return HealthReport(
        patient_data=original_data,
        prediction=prediction,
        personalized_advice=advice,
        next_steps=list(next_steps),
        disclaimer=DISCLAIMER,
        generated_at=datetime.now(timezone.utc).isoformat(),
    )


def assemble_from_analysis(analysis: RiskAnalysis, original_data: HealthData) -> HealthReport:
    return assemble(analysis.prediction, analysis.personalized_advice, analysis.next_steps, original_data)
