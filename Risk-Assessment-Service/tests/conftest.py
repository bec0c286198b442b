from typing import List

import pytest

from app.models.request_models import HealthData
from app.services.diagnostics import DiagnosticEvent


class RecordingSink:
    """Diagnostics sink that keeps every event in memory."""

    def __init__(self):
        self.events: List[DiagnosticEvent] = []

    def emit(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    @property
    def names(self) -> List[str]:
        return [event.name for event in self.events]


def build_health_data(**overrides) -> HealthData:
    """A healthy 25-year-old (BMI ~22.9) unless fields are overridden by snake_case name."""
    fields = {
        "age": 25,
        "gender": "female",
        "weight": 66.2,
        "height": 170,
        "blood_glucose_fasting": 85,
        "blood_glucose_post_meal": 110,
        "sleep_hours": 7.5,
        "physical_activity_days": 5,
        "physical_activity_intensity": "moderate",
        "family_history": False,
        "ethnicity": "Asian",
        "existing_conditions": [],
        "medications": [],
        "dietary_habits": {"fruits_vegetables": 4, "processed_foods": 1, "sugary_drinks": 0},
        "stress_level": 4,
        "symptoms": {},
    }
    fields.update(overrides)
    return HealthData(**fields)


def weight_for_bmi(bmi: float, height_cm: float = 170) -> float:
    return round(bmi * (height_cm / 100) ** 2, 2)


@pytest.fixture
def health_data() -> HealthData:
    return build_health_data()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
