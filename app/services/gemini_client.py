"""
Client for the Gemini ``generateContent`` REST endpoint.

One prompt in, the reply text out.  The reply is NOT guaranteed to be JSON:
it may be fenced in ```json … ``` or surrounded by prose, which is the JSON
repairer's problem, not this module's.

Failure modes are distinct exception types (see app.exceptions):

* ConfigurationError   no API key; raised before any network I/O
* TransportError       timeout, connection failure, non-2xx, non-JSON envelope
* EmptyResponseError   2xx envelope with no text under candidates/content/parts

No retries happen here.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from app.config import settings
from app.exceptions import ConfigurationError, EmptyResponseError, TransportError

logger = logging.getLogger(__name__)


class GeminiClient:
    """Thin async wrapper around ``POST /models/{model}:generateContent``."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.timeout = httpx.Timeout(
            float(timeout if timeout is not None else settings.GEMINI_TIMEOUT),
            connect=10.0,
        )
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    async def generate(self, prompt: str) -> str:
        """Send *prompt* and return the raw reply text."""
        if not self.is_configured():
            raise ConfigurationError("GEMINI_API_KEY is not configured")

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": settings.GEMINI_TEMPERATURE},
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    self.endpoint,
                    json=payload,
                    headers={"x-goog-api-key": self.api_key},
                )
        except httpx.TimeoutException as exc:
            logger.error("generate: request timed out after %s", self.timeout)
            raise TransportError(f"Gemini request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.error("generate: connection error: %s", exc)
            raise TransportError(f"Gemini request failed: {exc}") from exc

        if resp.status_code < 200 or resp.status_code >= 300:
            logger.error(
                "generate: Gemini returned HTTP %d: %s",
                resp.status_code,
                resp.text[:300],
            )
            raise TransportError(
                f"Gemini returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            envelope = resp.json()
        except ValueError as exc:
            logger.error("generate: non-JSON envelope: %s", resp.text[:300])
            raise TransportError("Gemini returned a non-JSON envelope") from exc

        text = self.extract_text(envelope)
        if not text:
            logger.warning("generate: envelope carried no text payload")
            raise EmptyResponseError("No text content in the Gemini response")

        logger.info("generate: received %d chars from %s", len(text), self.model)
        return text

    @staticmethod
    def extract_text(envelope: Any) -> str:
        """
        Navigate ``candidates[0].content.parts[*].text``.

        Any missing level or unexpected type yields an empty string; text
        from multiple parts is concatenated.
        """
        if not isinstance(envelope, dict):
            return ""
        candidates = envelope.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return ""
        first = candidates[0]
        if not isinstance(first, dict):
            return ""
        content = first.get("content")
        if not isinstance(content, dict):
            return ""
        parts = content.get("parts")
        if not isinstance(parts, list):
            return ""

        texts = [
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        joined = "".join(texts)
        return joined if joined.strip() else ""
