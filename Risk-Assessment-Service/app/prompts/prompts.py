from app.models.request_models import HealthData

BASE_INSTRUCTIONS = """
You are a medical AI assistant specializing in diabetes risk assessment. Analyze the following patient data and provide a comprehensive diabetes risk evaluation.
"""

RESPONSE_FORMAT_INSTRUCTIONS = """
Please provide your analysis in the following JSON format (respond ONLY with valid JSON, no additional text):

{
  "riskLevel": "low|moderate|high|very-high",
  "riskPercentage": number (0-100),
  "confidence": number (0-100),
  "keyFactors": [
    "list of 3-5 most significant risk factors specific to this patient"
  ],
  "dietAdvice": [
    "5-7 specific, actionable dietary recommendations"
  ],
  "exerciseAdvice": [
    "4-6 specific exercise recommendations with intensity and frequency"
  ],
  "lifestyleAdvice": [
    "4-6 lifestyle modifications for diabetes prevention"
  ],
  "monitoringAdvice": [
    "4-5 specific health monitoring recommendations"
  ],
  "nextSteps": [
    "3-5 prioritized action items for the patient"
  ]
}
"""

ANALYSIS_GUIDANCE = """
Consider these factors in your analysis:
- Blood glucose levels (normal fasting <100, normal post-meal <140)
- BMI categories and diabetes risk
- Age and ethnicity risk factors
- Family history significance
- Existing conditions and medication effects
- Lifestyle factors (sleep, exercise, diet, stress)
- Current symptoms indicating diabetes risk

Provide practical, evidence-based recommendations tailored to this specific patient profile.
"""


def format_patient_data(data: HealthData) -> str:
    """Renders the questionnaire as the bulleted PATIENT DATA block of the prompt."""
    diet = data.dietary_habits
    lines = [
        f"- Age: {data.age} years",
        f"- Gender: {data.gender.value}",
        f"- BMI: {data.bmi:.1f} (Weight: {data.weight:g}kg, Height: {data.height:g}cm)",
        f"- Ethnicity: {data.ethnicity}",
        f"- Fasting Blood Glucose: {data.blood_glucose_fasting:g} mg/dL",
        f"- Post-Meal Blood Glucose: {data.blood_glucose_post_meal:g} mg/dL",
        f"- Sleep: {data.sleep_hours:g} hours/night",
        f"- Physical Activity: {data.physical_activity_days} days/week, "
        f"{data.physical_activity_intensity.value} intensity",
        f"- Family History of Diabetes: {'Yes' if data.family_history else 'No'}",
        f"- Existing Conditions: {', '.join(data.existing_conditions) or 'None'}",
        f"- Current Medications: {', '.join(data.medications) or 'None'}",
        f"- Diet (daily servings): Fruits/Vegetables: {diet.fruits_vegetables}, "
        f"Processed Foods: {diet.processed_foods}, Sugary Drinks: {diet.sugary_drinks}",
        f"- Stress Level: {data.stress_level}/10",
        f"- Current Symptoms: {', '.join(data.reported_symptoms()) or 'None reported'}",
    ]
    return "\n".join(lines)


def build_analysis_prompt(data: HealthData) -> str:
    """Builds the full oracle prompt for one questionnaire. Pure; safe to call repeatedly."""
    return (
        f"{BASE_INSTRUCTIONS}\n"
        f"PATIENT DATA:\n{format_patient_data(data)}\n"
        f"{RESPONSE_FORMAT_INSTRUCTIONS}\n"
        f"{ANALYSIS_GUIDANCE}"
    )
