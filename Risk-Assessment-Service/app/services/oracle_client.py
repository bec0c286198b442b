"""
HTTP client for the external analysis oracle (Google Gemini generateContent).

The client sends one prompt per call and returns the model's raw text.
Every failure mode (missing credential, transport error, non-2xx status,
unexpected envelope) is raised as OracleUnavailable; the client never
retries. The API key travels only in the request header and is never
written to logs or exception messages.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import SecretStr

from app.core.config import Settings

logger = logging.getLogger(__name__)

HARM_CATEGORIES = [
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]


class OracleUnavailable(Exception):
    """The oracle could not be reached or did not answer in the expected shape."""


class OracleClient:
    """
    Thin async wrapper around a single generateContent endpoint.

    Args:
        api_key: The oracle credential. When None, every call raises OracleUnavailable.
        api_url: Full generateContent URL for the chosen model.
        generation_config: Sampling parameters sent with every request.
        safety_threshold: Block threshold applied to each harm category.
        timeout: Per-request timeout in seconds.
        http_client: Optional shared httpx.AsyncClient; a short-lived one is opened per call otherwise.
    """

    def __init__(
            self,
            api_key: Optional[SecretStr],
            api_url: str,
            generation_config: Dict[str, Any],
            safety_threshold: str = "BLOCK_MEDIUM_AND_ABOVE",
            timeout: float = 30.0,
            http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self.api_url = api_url
        self.generation_config = dict(generation_config)
        self.safety_threshold = safety_threshold
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> "OracleClient":
        return cls(
            api_key=settings.GEMINI_API_KEY,
            api_url=settings.GEMINI_API_URL,
            generation_config={
                "temperature": settings.TEMPERATURE,
                "topP": settings.TOP_P,
                "topK": settings.TOP_K,
                "maxOutputTokens": settings.MAX_OUTPUT_TOKENS,
            },
            safety_threshold=settings.SAFETY_THRESHOLD,
            timeout=settings.ORACLE_TIMEOUT_SECONDS,
            http_client=http_client,
        )

    @property
    def is_configured(self) -> bool:
        return self._api_key is not None

    def build_request_body(self, prompt: str) -> Dict[str, Any]:
        safety_settings: List[Dict[str, str]] = [
            {"category": category, "threshold": self.safety_threshold}
            for category in HARM_CATEGORIES
        ]
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": self.generation_config,
            "safetySettings": safety_settings,
        }

    async def call(self, prompt: str) -> str:
        """Sends the prompt and returns the first candidate's text."""
        if not self.is_configured:
            raise OracleUnavailable("No oracle API key configured")

        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self._api_key.get_secret_value(),
        }
        body = self.build_request_body(prompt)

        try:
            if self._http_client is not None:
                response = await self._http_client.post(self.api_url, headers=headers, json=body,
                                                        timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.api_url, headers=headers, json=body)
        except httpx.TimeoutException as e:
            raise OracleUnavailable(f"Oracle request timed out ({type(e).__name__})") from None
        except httpx.HTTPError as e:
            raise OracleUnavailable(f"Oracle transport error ({type(e).__name__})") from None
        except RuntimeError as e:
            # Raised by httpx when the shared client has already been closed.
            raise OracleUnavailable(f"Oracle client error ({type(e).__name__})") from None

        if not response.is_success:
            raise OracleUnavailable(f"Oracle request failed: {response.status_code} {response.reason_phrase}")

        try:
            envelope = response.json()
            text = envelope["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError):
            raise OracleUnavailable("Oracle response envelope is malformed") from None

        if not isinstance(text, str):
            raise OracleUnavailable("Oracle response envelope is malformed")

        logger.debug(f"Oracle returned {len(text)} characters.")
        return text
