from abc import ABC, abstractmethod


class AssistantBackend(ABC):
    """
    Abstract Base Class for every language-model backend the assistant can call.
    This defines the contract that all concrete backend implementations must follow.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """The official name of the provider (e.g., 'Anthropic', 'Simulated')."""
        pass

    @abstractmethod
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
        """
        Send one request and block until the full answer is available.

        The dispatcher always calls this from a worker thread, never from the
        UI thread.

        Args:
            endpoint: URL of the backend's messages endpoint.
            api_key: Credential for the backend.
            model_name: The specific model to use.
            system_prompt: Persona and project context.
            user_prompt: The user's request.
            timeout: Seconds to wait for the backend before giving up.
            temperature: Sampling temperature.
            max_tokens: Upper bound on the reply length.

        Returns:
            The answer text.

        Raises:
            BackendError: Or any transport exception; the dispatcher classifies
                whatever is raised.
        """
        pass
