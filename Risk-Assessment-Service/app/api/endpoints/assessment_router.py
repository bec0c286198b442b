import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from app.core.config import settings
from app.models.request_models import (
    CONDITION_OPTIONS,
    DEFAULT_FORM_VALUES,
    ETHNICITY_OPTIONS,
    MEDICATION_OPTIONS,
    HealthData,
)
from app.models.response_models import HealthReport
from app.services.assessment_service import AssessmentService, build_assessment_service

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def get_assessment_service() -> AssessmentService:
    """Dependency to get the shared assessment service instance."""
    return build_assessment_service(settings)


@router.post("/assessment", response_model=HealthReport)
async def submit_assessment(
        health_data: HealthData,
        assessment_service: AssessmentService = Depends(get_assessment_service)
):
    """
    Produce a diabetes risk report for one questionnaire.

    Oracle and parsing failures are recovered inside the service, so this
    endpoint only fails on an invalid body (422) or an unexpected error (500).
    """
    try:
        return await assessment_service.submit_assessment(health_data)
    except Exception:
        logger.exception("Unexpected error while generating assessment.")
        raise HTTPException(status_code=500, detail="An error occurred while generating the assessment.")


@router.get("/assessment/options")
async def get_form_options():
    """Suggestion vocabularies and initial values for the questionnaire form."""
    return {
        "ethnicities": ETHNICITY_OPTIONS,
        "conditions": CONDITION_OPTIONS,
        "medications": MEDICATION_OPTIONS,
        "defaults": DEFAULT_FORM_VALUES,
    }
