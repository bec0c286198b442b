"""
Unit Tests for the assessment engine and report assembly.
"""
import asyncio
import json
from datetime import datetime

import httpx
import pytest
from pydantic import ValidationError

from app.core.config import Settings
from app.models.response_models import RiskLevel
from app.services import fallback_scorer, report_assembler
from app.services.assessment_service import AssessmentService, build_assessment_service
from app.services.diagnostics import (
    ASSESSMENT_COMPLETED,
    ORACLE_RESPONSE_UNPARSABLE,
    ORACLE_SKIPPED,
    ORACLE_UNAVAILABLE,
    SOURCE_FALLBACK,
    SOURCE_ORACLE,
)
from app.services.oracle_client import OracleClient, OracleUnavailable
from conftest import build_health_data


class StubOracle:
    """Stands in for OracleClient; returns a canned answer or raises."""

    def __init__(self, answer=None, error=None, delay=0.0, configured=True):
        self.answer = answer
        self.error = error
        self.delay = delay
        self.is_configured = configured
        self.prompts = []

    async def call(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.answer


ORACLE_ANSWER = json.dumps({
    "riskLevel": "very-high",
    "riskPercentage": 91,
    "confidence": 88,
    "keyFactors": ["Fasting glucose 180 mg/dL"],
    "dietAdvice": ["Remove sugary drinks"],
    "exerciseAdvice": ["Walk after every meal"],
    "lifestyleAdvice": ["Sleep 7-8 hours"],
    "monitoringAdvice": ["Daily glucose checks"],
    "nextSteps": ["See a doctor this week"],
})


class TestAssessmentService:

    @pytest.mark.asyncio
    async def test_oracle_answer_becomes_report(self, health_data, sink):
        oracle = StubOracle(answer=f"Here you go:\n```json\n{ORACLE_ANSWER}\n```")
        service = AssessmentService(oracle, diagnostics=sink, timeout=1)

        report, source = await service.assess(health_data)

        assert source == SOURCE_ORACLE
        assert report.prediction.risk_level == RiskLevel.VERY_HIGH
        assert report.prediction.risk_percentage == 91
        assert report.personalized_advice.diet == ["Remove sugary drinks"]
        assert report.next_steps == ["See a doctor this week"]
        assert report.patient_data == health_data
        assert len(oracle.prompts) == 1
        assert "PATIENT DATA" in oracle.prompts[0]
        assert sink.names == [ASSESSMENT_COMPLETED]
        assert sink.events[0].source == SOURCE_ORACLE

    @pytest.mark.asyncio
    async def test_oracle_failure_falls_back(self, health_data, sink):
        service = AssessmentService(StubOracle(error=OracleUnavailable("Oracle request failed: 503")),
                                    diagnostics=sink)

        report, source = await service.assess(health_data)

        expected = fallback_scorer.score(health_data)
        assert source == SOURCE_FALLBACK
        assert report.prediction == expected.prediction
        assert report.personalized_advice == expected.personalized_advice
        assert sink.names == [ORACLE_UNAVAILABLE, ASSESSMENT_COMPLETED]
        assert "503" in sink.events[0].reason

    @pytest.mark.asyncio
    async def test_unparsable_answer_falls_back(self, health_data, sink):
        service = AssessmentService(StubOracle(answer="I cannot analyze this."), diagnostics=sink)

        report, source = await service.assess(health_data)

        assert source == SOURCE_FALLBACK
        assert report.prediction == fallback_scorer.score(health_data).prediction
        assert sink.names == [ORACLE_RESPONSE_UNPARSABLE, ASSESSMENT_COMPLETED]

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self, health_data, sink):
        service = AssessmentService(StubOracle(answer=ORACLE_ANSWER, delay=1.0), diagnostics=sink, timeout=0.01)

        report, source = await service.assess(health_data)

        assert source == SOURCE_FALLBACK
        assert report.prediction.confidence == 70
        assert sink.names == [ORACLE_UNAVAILABLE, ASSESSMENT_COMPLETED]
        assert "exceeded" in sink.events[0].reason

    @pytest.mark.asyncio
    async def test_unconfigured_oracle_is_skipped(self, health_data, sink):
        oracle = StubOracle(answer=ORACLE_ANSWER, configured=False)
        service = AssessmentService(oracle, diagnostics=sink)

        report = await service.submit_assessment(health_data)

        assert oracle.prompts == []
        assert report.prediction == fallback_scorer.score(health_data).prediction
        assert sink.names == [ORACLE_SKIPPED, ASSESSMENT_COMPLETED]

    @pytest.mark.asyncio
    async def test_no_oracle_at_all_is_skipped(self, health_data, sink):
        report = await AssessmentService(None, diagnostics=sink).submit_assessment(health_data)
        assert report.prediction.confidence == 70
        assert sink.names[0] == ORACLE_SKIPPED

    @pytest.mark.asyncio
    async def test_concurrent_assessments_are_independent(self, sink):
        service = AssessmentService(StubOracle(error=OracleUnavailable("down")), diagnostics=sink)
        low = build_health_data()
        very_high = build_health_data(blood_glucose_fasting=200)

        reports = await asyncio.gather(service.submit_assessment(low), service.submit_assessment(very_high))

        assert reports[0].prediction.risk_level == RiskLevel.LOW
        assert reports[1].prediction.risk_level == RiskLevel.VERY_HIGH
        assert reports[0].patient_data == low
        assert reports[1].patient_data == very_high

    @pytest.mark.asyncio
    async def test_wired_from_settings_end_to_end(self, health_data, sink):
        def handler(request):
            return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": ORACLE_ANSWER}]}}]})

        settings = Settings(GEMINI_API_KEY="AIzaTEST", ORACLE_TIMEOUT_SECONDS=2)
        service = build_assessment_service(settings, diagnostics=sink)
        service.oracle = OracleClient.from_settings(
            settings, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        report, source = await service.assess(health_data)

        assert source == SOURCE_ORACLE
        assert service.timeout == 2
        assert report.prediction.risk_percentage == 91

    @pytest.mark.asyncio
    async def test_closed_http_client_falls_back(self, health_data, sink):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        await http_client.aclose()
        settings = Settings(GEMINI_API_KEY="AIzaTEST")
        service = AssessmentService(OracleClient.from_settings(settings, http_client=http_client),
                                    diagnostics=sink, timeout=1)

        report, source = await service.assess(health_data)

        assert source == SOURCE_FALLBACK
        assert report.prediction == fallback_scorer.score(health_data).prediction
        assert sink.names == [ORACLE_UNAVAILABLE, ASSESSMENT_COMPLETED]

    @pytest.mark.asyncio
    async def test_default_sink_logs_events(self, health_data, caplog):
        service = AssessmentService(StubOracle(answer="nope"))
        with caplog.at_level("INFO"):
            await service.submit_assessment(health_data)
        messages = [record.getMessage() for record in caplog.records]
        assert any(ORACLE_RESPONSE_UNPARSABLE in message for message in messages)
        assert any(ASSESSMENT_COMPLETED in message for message in messages)
        diagnostic = next(r for r in caplog.records if ASSESSMENT_COMPLETED in r.getMessage()).diagnostic
        assert diagnostic["source"] == SOURCE_FALLBACK


class TestReportAssembler:

    def test_attaches_disclaimer_and_iso_timestamp(self, health_data):
        analysis = fallback_scorer.score(health_data)
        report = report_assembler.assemble(
            analysis.prediction, analysis.personalized_advice, analysis.next_steps, health_data)

        assert report.disclaimer == report_assembler.DISCLAIMER
        assert datetime.fromisoformat(report.generated_at).tzinfo is not None
        assert report.patient_data == health_data
        assert report.prediction == analysis.prediction

    def test_report_is_immutable(self, health_data):
        report = report_assembler.assemble_from_analysis(fallback_scorer.score(health_data), health_data)
        with pytest.raises(ValidationError):
            report.disclaimer = "changed"
        with pytest.raises(ValidationError):
            report.patient_data.age = 99

    def test_serializes_with_wire_keys(self, health_data):
        report = report_assembler.assemble_from_analysis(fallback_scorer.score(health_data), health_data)
        payload = report.model_dump(mode="json", by_alias=True)
        assert set(payload) == {"patientData", "prediction", "personalizedAdvice", "nextSteps",
                                "disclaimer", "generatedAt"}
        assert set(payload["prediction"]) == {"riskLevel", "riskPercentage", "confidence", "keyFactors"}
        assert payload["patientData"]["bloodGlucoseFasting"] == 85
        assert payload["prediction"]["riskLevel"] == "low"

    @pytest.mark.parametrize("overrides", [
        {},
        {"blood_glucose_fasting": 300, "blood_glucose_post_meal": 400, "weight": 200, "height": 120, "age": 100},
        {"blood_glucose_fasting": 60, "blood_glucose_post_meal": 80, "weight": 30, "height": 220, "age": 18},
    ])
    def test_fallback_reports_never_raise(self, overrides):
        data = build_health_data(**overrides)
        report = report_assembler.assemble_from_analysis(fallback_scorer.score(data), data)
        assert report.prediction.confidence == 70
