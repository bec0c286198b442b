"""
Structured diagnostic events for recovered failures.

The assessment engine never lets an oracle or parse failure reach the
user, but each one is reported here so operators can see how often the
rule-based path is serving traffic. Sinks are injected into the engine;
the default writes to the standard logging system.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Event names
ORACLE_SKIPPED = "oracle_skipped"
ORACLE_UNAVAILABLE = "oracle_unavailable"
ORACLE_RESPONSE_UNPARSABLE = "oracle_response_unparsable"
ASSESSMENT_COMPLETED = "assessment_completed"

SOURCE_ORACLE = "oracle"
SOURCE_FALLBACK = "fallback"


class DiagnosticEvent(BaseModel):
    name: str
    source: str = Field(..., description="Which path produced (or will produce) the report: oracle or fallback")
    reason: Optional[str] = None
    detail: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class DiagnosticsSink(Protocol):
    def emit(self, event: DiagnosticEvent) -> None:
        ...


class LoggingDiagnosticsSink:
    """Writes each event as one log record, with the event fields attached under `diagnostic`."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def emit(self, event: DiagnosticEvent) -> None:
        level = logging.INFO if event.name == ASSESSMENT_COMPLETED else logging.WARNING
        self.log.log(
            level,
            f"{event.name} (source={event.source}, reason={event.reason})",
            extra={"diagnostic": event.model_dump()},
        )
