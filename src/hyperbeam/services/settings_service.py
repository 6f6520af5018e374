import logging
import os
from typing import Any, Dict, Mapping, Optional

from pydantic import SecretStr, ValidationError

from src.hyperbeam.config import (
    DEFAULT_API_ENDPOINT,
    DEFAULT_MODEL_NAME,
    ENV_API_ENDPOINT,
    ENV_API_KEY,
    ENV_MODEL_NAME,
)
from src.hyperbeam.models.settings import AssistantSettings

logger = logging.getLogger(__name__)


def _normalize_api_key(value: Any) -> Optional[SecretStr]:
    if isinstance(value, SecretStr):
        value = value.get_secret_value()
    if not isinstance(value, str):
        return None
    value = value.strip()
    return SecretStr(value) if value else None


def _normalize_text(value: Any, fallback: str) -> str:
    if not isinstance(value, str):
        return fallback
    value = value.strip()
    return value or fallback


class SettingsHolder:
    """
    Holds the current assistant settings.

    The settings panel writes through ``update``; the dispatcher only ever
    reads an immutable ``snapshot`` when it builds a request.
    """

    def __init__(self, settings: Optional[AssistantSettings] = None) -> None:
        self._settings = settings or AssistantSettings()

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "SettingsHolder":
        """
        Seed settings from the HYPERBEAM_AI_* environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.
        """
        environ = os.environ if environ is None else environ
        holder = cls()
        holder.update(
            api_key=environ.get(ENV_API_KEY),
            model_name=environ.get(ENV_MODEL_NAME),
            api_endpoint=environ.get(ENV_API_ENDPOINT),
        )
        if holder.snapshot().has_api_key():
            logger.info("Loaded AI API key from %s environment variable", ENV_API_KEY)
        return holder

    def snapshot(self) -> AssistantSettings:
        return self._settings

    def update(self, **changes: Any) -> AssistantSettings:
        """
        Apply changes from the settings panel.

        ``api_key``, ``model_name`` and ``api_endpoint`` are normalized: blank
        keys clear the credential and blank names fall back to the defaults.
        Values that fail validation are ignored and logged.

        Returns:
            The new settings snapshot.
        """
        values: Dict[str, Any] = self._settings.model_dump()
        for field, value in changes.items():
            if field == "api_key":
                values["api_key"] = _normalize_api_key(value)
            elif field == "model_name":
                values["model_name"] = _normalize_text(value, DEFAULT_MODEL_NAME)
            elif field == "api_endpoint":
                values["api_endpoint"] = _normalize_text(value, DEFAULT_API_ENDPOINT)
            elif field in AssistantSettings.model_fields:
                if value is not None:
                    values[field] = value
            else:
                logger.warning("Ignoring unknown assistant setting '%s'.", field)

        try:
            self._settings = AssistantSettings(**values)
        except ValidationError as exc:
            logger.warning("Rejected invalid assistant settings: %s", exc)
        return self._settings
