"""
Orchestration service for diabetes risk assessments.

One call to submit_assessment runs the whole pipeline for a single
questionnaire:
1. Build the analysis prompt from the validated HealthData.
2. Ask the oracle, bounded by the configured timeout.
3. Decode its answer, falling back to the rule-based scorer on failure.
4. Assemble the final HealthReport.

Any oracle or parse failure is reported to the diagnostics sink and
recovered locally, so the caller always receives a report.
"""
import asyncio
import logging
from typing import Optional, Tuple

from app.models.request_models import HealthData
from app.models.response_models import HealthReport, RiskAnalysis
from app.prompts import prompts
from app.services import fallback_scorer, report_assembler, response_parser
from app.services.diagnostics import (
    ASSESSMENT_COMPLETED,
    ORACLE_SKIPPED,
    ORACLE_UNAVAILABLE,
    SOURCE_FALLBACK,
    DiagnosticEvent,
    DiagnosticsSink,
    LoggingDiagnosticsSink,
)
from app.services.oracle_client import OracleClient, OracleUnavailable

logger = logging.getLogger(__name__)


class AssessmentService:
    """
    Stateless between calls; concurrent assessments share only the
    injected collaborators, none of which hold per-request data.
    """

    def __init__(
            self,
            oracle: Optional[OracleClient],
            diagnostics: Optional[DiagnosticsSink] = None,
            timeout: Optional[float] = None,
    ):
        self.oracle = oracle
        self.diagnostics = diagnostics or LoggingDiagnosticsSink()
        self.timeout = timeout

    async def _ask_oracle(self, data: HealthData) -> str:
        if self.oracle is None or not self.oracle.is_configured:
            raise OracleUnavailable("No oracle API key configured")
        prompt = prompts.build_analysis_prompt(data)
        logger.debug(f"Requesting oracle analysis ({len(prompt)} prompt characters).")
        try:
            return await asyncio.wait_for(self.oracle.call(prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise OracleUnavailable(f"Oracle call exceeded {self.timeout}s") from None

    async def _analyze(self, data: HealthData) -> Tuple[RiskAnalysis, str]:
        try:
            raw_text = await self._ask_oracle(data)
        except OracleUnavailable as e:
            skipped = self.oracle is None or not self.oracle.is_configured
            self.diagnostics.emit(DiagnosticEvent(
                name=ORACLE_SKIPPED if skipped else ORACLE_UNAVAILABLE,
                source=SOURCE_FALLBACK,
                reason=str(e),
            ))
            return fallback_scorer.score(data), SOURCE_FALLBACK

        return response_parser.parse_with_source(raw_text, data, self.diagnostics)

    async def assess(self, data: HealthData) -> Tuple[HealthReport, str]:
        """Returns the report together with its provenance ("oracle" or "fallback")."""
        analysis, source = await self._analyze(data)
        report = report_assembler.assemble_from_analysis(analysis, data)
        self.diagnostics.emit(DiagnosticEvent(
            name=ASSESSMENT_COMPLETED,
            source=source,
            detail={
                "risk_level": report.prediction.risk_level.value,
                "confidence": report.prediction.confidence,
            },
        ))
        return report, source

    async def submit_assessment(self, data: HealthData) -> HealthReport:
        report, _ = await self.assess(data)
        return report


def build_assessment_service(settings, diagnostics: Optional[DiagnosticsSink] = None) -> AssessmentService:
    """Wires the engine from application settings; the oracle credential is passed in here and nowhere else."""
    return AssessmentService(
        oracle=OracleClient.from_settings(settings),
        diagnostics=diagnostics,
        timeout=settings.ORACLE_TIMEOUT_SECONDS,
    )
