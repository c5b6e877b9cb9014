"""
Language Model Integration for Sprint Capacity Compass

Sends a sprint snapshot to an OpenAI-compatible chat-completions endpoint
and parses the risks and best practices it returns.
"""

import asyncio
import json
import os
from typing import Optional

import httpx
from pydantic import ValidationError

from ..log import get_logger
from ..prompt import build_messages
from ..schemas import AnalysisRequest, AnalysisResult


logger = get_logger("capacity_compass.analysis")

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"

RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}
REQUIRED_KEYS = {"risks", "bestPractices"}


class AnalysisUnavailable(Exception):
    """The analysis backend failed, timed out, or answered with unusable output."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class _TransientError(Exception):
    """A failure worth retrying."""


def parse_analysis_content(content: Optional[str]) -> AnalysisResult:
    """
    Parse the model's message content into an AnalysisResult.

    Markdown code fences around the JSON are tolerated. Anything else that is
    not a JSON object with string lists under "risks" and "bestPractices"
    raises AnalysisUnavailable.
    """
    if content is None or not content.strip():
        raise AnalysisUnavailable("Backend returned no output")

    text = content.strip()
    if text.startswith("```"):
        text = text.replace("```json", "").replace("```", "").strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise AnalysisUnavailable(f"Backend returned malformed JSON: {e.msg}") from e

    # Field names are accepted in code, but the backend must use the wire names
    if not isinstance(data, dict) or not REQUIRED_KEYS <= data.keys():
        raise AnalysisUnavailable("Backend output is missing risks or bestPractices")

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        raise AnalysisUnavailable(f"Backend output failed schema validation: {e.error_count()} error(s)") from e


class AnalysisClient:
    """
    Client for the sprint analysis backend.

    Usage:
        client = AnalysisClient(api_key="sk-...")
        result = await client.analyze(request)
        for risk in result.risks:
            print(risk)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 30.0,
        max_retries: int = 2,
        retry_base_delay: float = 0.5,
        temperature: float = 0.3,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key or os.getenv("ANALYSIS_API_KEY") or os.getenv("OPENAI_API_KEY")
        self.base_url = (base_url or os.getenv("ANALYSIS_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.model = model or os.getenv("ANALYSIS_MODEL", DEFAULT_MODEL)
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.retry_base_delay = max(0.0, retry_base_delay)
        self.temperature = temperature
        self.transport = transport

        if not self.api_key:
            raise ValueError(
                "Analysis API key required. Set ANALYSIS_API_KEY or OPENAI_API_KEY env var "
                "or pass api_key."
            )

    @classmethod
    def from_config(cls, config, transport: Optional[httpx.AsyncBaseTransport] = None) -> "AnalysisClient":
        """Build a client from a Config instance."""
        return cls(
            api_key=config.analysis_api_key,
            base_url=config.analysis_base_url,
            model=config.analysis_model,
            timeout=config.analysis_timeout,
            max_retries=config.analysis_max_retries,
            transport=transport
        )

    async def _request(self, payload: dict) -> dict:
        """POST a chat completion, classifying failures as transient or not."""
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json"
                    },
                    timeout=self.timeout
                )
        except (httpx.TimeoutException, httpx.TransportError) as e:
            raise _TransientError(f"Backend unreachable: {e.__class__.__name__}") from e

        if response.status_code in RETRYABLE_STATUS_CODES:
            raise _TransientError(f"Backend returned HTTP {response.status_code}")

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise AnalysisUnavailable(f"Backend returned HTTP {response.status_code}") from e

        try:
            return response.json() if response.content else {}
        except ValueError as e:
            raise AnalysisUnavailable("Backend response is not JSON") from e

    @staticmethod
    def _extract_content(body) -> Optional[str]:
        if not isinstance(body, dict):
            return None
        choices = body.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None

    async def complete(self, request: AnalysisRequest) -> str:
        """
        Run the prompt for a request and return the raw message content.

        Transient failures are retried up to max_retries times with
        exponential backoff.
        """
        payload = {
            "model": self.model,
            "messages": build_messages(request),
            "temperature": self.temperature,
            "response_format": {"type": "json_object"}
        }

        attempts = self.max_retries + 1
        for attempt in range(attempts):
            try:
                body = await self._request(payload)
                break
            except _TransientError as e:
                if attempt + 1 >= attempts:
                    logger.error("Analysis failed after %d attempt(s): %s", attempts, e)
                    raise AnalysisUnavailable(str(e)) from e

                delay = self.retry_base_delay * (2 ** attempt)
                logger.warning("Analysis attempt %d failed (%s), retrying in %.1fs", attempt + 1, e, delay)
                await asyncio.sleep(delay)

        content = self._extract_content(body)
        if content is None:
            raise AnalysisUnavailable("Backend returned no output")
        return content

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Analyze a sprint plan.

        Args:
            request: Sprint snapshot (dates must already be resolved)

        Returns:
            AnalysisResult with risks and best practices (possibly empty)

        Raises:
            AnalysisUnavailable: backend unreachable, erroring, or output invalid
        """
        logger.info(
            "Requesting sprint analysis for %s..%s (%d resources)",
            request.start_date, request.end_date, len(request.resources)
        )
        content = await self.complete(request)

        try:
            result = parse_analysis_content(content)
        except AnalysisUnavailable as e:
            logger.error("Discarding analysis output: %s", e.reason)
            raise

        logger.info("Analysis returned %d risk(s), %d best practice(s)", len(result.risks), len(result.best_practices))
        return result


# Convenience function
async def analyze_sprint(
    request: AnalysisRequest,
    api_key: Optional[str] = None,
    model: Optional[str] = None
) -> AnalysisResult:
    """
    Quick function to analyze a sprint plan.

    Example:
        result = await analyze_sprint(planner.build_analysis_request())
        print(result.risks)
    """
    client = AnalysisClient(api_key=api_key, model=model)
    return await client.analyze(request)
