from typing import Optional

from pydantic import BaseModel, ConfigDict, SecretStr

from src.hyperbeam.config import (
    DEFAULT_API_ENDPOINT,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL_NAME,
    DEFAULT_TEMPERATURE,
)


class AssistantSettings(BaseModel):
    """
    Read-only snapshot of the assistant's backend configuration.

    Attributes:
        api_key: Secret credential for the backend, ``None`` when not configured.
        model_name: Model identifier sent with each request.
        api_endpoint: URL of the backend messages endpoint.
        temperature: Sampling temperature forwarded to the backend.
        max_tokens: Upper bound on the length of a reply.
        code_suggestions_enabled: Whether cursor completion requests are honoured.
    """

    model_config = ConfigDict(frozen=True)

    api_key: Optional[SecretStr] = None
    model_name: str = DEFAULT_MODEL_NAME
    api_endpoint: str = DEFAULT_API_ENDPOINT
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    code_suggestions_enabled: bool = True

    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.get_secret_value().strip())

    def api_key_value(self) -> str:
        return self.api_key.get_secret_value() if self.api_key else ""
