"""
Pydantic models for the assessment request body.

This module defines the questionnaire record the API expects to receive
from clients, together with the fixed suggestion vocabularies the form
offers. Every numeric field carries its accepted range; a record that
fails validation never reaches the assessment engine.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ETHNICITY_OPTIONS = [
    "Caucasian",
    "African American",
    "Hispanic/Latino",
    "Asian",
    "Native American",
    "Pacific Islander",
    "Middle Eastern",
    "Mixed/Other",
]

CONDITION_OPTIONS = [
    "Hypertension",
    "High Cholesterol",
    "Heart Disease",
    "Kidney Disease",
    "PCOS",
    "Thyroid Disorders",
    "Depression/Anxiety",
    "Sleep Apnea",
    "Gestational Diabetes (Previous)",
    "Prediabetes",
]

MEDICATION_OPTIONS = [
    "None",
    "Blood Pressure Medications",
    "Cholesterol Medications",
    "Insulin",
    "Metformin",
    "Steroids",
    "Antidepressants",
    "Thyroid Medications",
    "Birth Control",
    "Anti-inflammatory drugs",
]


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityIntensity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class CamelModel(BaseModel):
    """Immutable model that reads and writes the camelCase keys used on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class DietaryHabits(CamelModel):
    """Average servings per day."""
    fruits_vegetables: int = Field(..., ge=0, le=10)
    processed_foods: int = Field(..., ge=0, le=10)
    sugary_drinks: int = Field(..., ge=0, le=10)


class Symptoms(CamelModel):
    increased_thirst: bool = False
    frequent_urination: bool = False
    unexplained_weight_loss: bool = False
    fatigue: bool = False
    blurred_vision: bool = False
    slow_healing_sores: bool = False
    frequent_infections: bool = False


def _dedupe_against(values: List[str], vocabulary: List[str], label: str) -> List[str]:
    # Order of first appearance is kept.
    seen = []
    for value in values:
        if value not in vocabulary:
            raise ValueError(f"Unknown {label}: '{value}'")
        if value not in seen:
            seen.append(value)
    return seen


class HealthData(CamelModel):
    """
    A submitted diabetes-risk questionnaire.

    The record is frozen once validated; the engine echoes it back unchanged
    inside the final report.
    """
    age: int = Field(..., ge=18, le=100, description="Age in years")
    gender: Gender
    weight: float = Field(..., ge=30, le=200, description="Weight in kg")
    height: float = Field(..., ge=120, le=220, description="Height in cm")
    blood_glucose_fasting: float = Field(..., ge=60, le=300, description="Fasting blood glucose in mg/dL")
    blood_glucose_post_meal: float = Field(..., ge=80, le=400, description="Post-meal blood glucose in mg/dL")
    sleep_hours: float = Field(..., ge=3, le=12, description="Average hours of sleep per night")
    physical_activity_days: int = Field(..., ge=0, le=7, description="Active days per week")
    physical_activity_intensity: ActivityIntensity
    family_history: bool = Field(..., description="Family history of diabetes")
    ethnicity: str = Field(..., min_length=1, description="Free-form; the form suggests ETHNICITY_OPTIONS")
    existing_conditions: List[str] = Field(default_factory=list)
    medications: List[str] = Field(default_factory=list)
    dietary_habits: DietaryHabits
    stress_level: int = Field(..., ge=1, le=10)
    symptoms: Symptoms = Field(default_factory=Symptoms)

    @field_validator("existing_conditions")
    def conditions_must_be_known(cls, v: List[str]) -> List[str]:
        return _dedupe_against(v, CONDITION_OPTIONS, "existing condition")

    @field_validator("medications")
    def medications_must_be_known(cls, v: List[str]) -> List[str]:
        return _dedupe_against(v, MEDICATION_OPTIONS, "medication")

    @property
    def bmi(self) -> float:
        """Body Mass Index in kg/m², unrounded."""
        return self.weight / ((self.height / 100) ** 2)

    def reported_symptoms(self) -> List[str]:
        """Human-readable names of the symptoms answered 'yes', in form order."""
        return [
            name.replace("_", " ")
            for name, present in self.symptoms.model_dump().items()
            if present
        ]


# Initial values shown by the questionnaire form.
DEFAULT_FORM_VALUES = {
    "age": 30,
    "gender": Gender.MALE.value,
    "weight": 70,
    "height": 170,
    "bloodGlucoseFasting": 90,
    "bloodGlucosePostMeal": 140,
    "sleepHours": 7,
    "physicalActivityDays": 3,
    "physicalActivityIntensity": ActivityIntensity.MODERATE.value,
    "familyHistory": False,
    "ethnicity": "Caucasian",
    "existingConditions": [],
    "medications": [],
    "dietaryHabits": {"fruitsVegetables": 3, "processedFoods": 2, "sugaryDrinks": 1},
    "stressLevel": 5,
    "symptoms": {name: False for name in Symptoms().model_dump(by_alias=True)},
}
