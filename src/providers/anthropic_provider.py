"""Anthropic Messages API backend for the Hyperbeam assistant."""
import logging
from typing import Any, Dict, List, Optional

import requests

from src.hyperbeam.config import ANTHROPIC_API_VERSION
from src.hyperbeam.models.exceptions import BackendRateLimitError, BackendResponseError
from src.providers.base import AssistantBackend


logger = logging.getLogger(__name__)


class AnthropicProvider(AssistantBackend):
    """
    Backend speaking the Anthropic Messages API over HTTPS.

    A single ``requests.Session`` is reused so consecutive questions share the
    connection pool.
    """

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self._session = session or requests.Session()

    @property
    def provider_name(self) -> str:
        return "Anthropic"

    def send(
        self,
        endpoint: str,
        api_key: str,
        model_name: str,
        system_prompt: str,
        user_prompt: str,
        *,
        timeout: float,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> str:
        body = {
            "model": model_name,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
            "content-type": "application/json",
        }
        logger.debug("POST %s (model=%s)", endpoint, model_name)
        response = self._session.post(endpoint, json=body, headers=headers, timeout=timeout)

        if response.status_code == 429:
            raise BackendRateLimitError(
                f"Backend rate limit reached ({response.status_code}).",
                status_code=response.status_code,
            )
        if not 200 <= response.status_code < 300:
            raise BackendResponseError(
                f"Backend answered with HTTP {response.status_code}: {self._error_detail(response)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise BackendResponseError("Backend returned a body that is not JSON.", cause=exc) from exc
        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: Any) -> str:
        """Join the text blocks of a Messages API reply."""
        if not isinstance(data, dict):
            raise BackendResponseError("Backend reply is not a JSON object.")
        blocks: List[Dict[str, Any]] = data.get("content") or []
        if not isinstance(blocks, list):
            raise BackendResponseError("Backend reply has no content list.")
        parts = [
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        text = "".join(parts).strip()
        if not text:
            raise BackendResponseError("Backend reply contained no text.")
        return text

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return (response.text or "").strip()[:200]
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return str(payload)[:200]
