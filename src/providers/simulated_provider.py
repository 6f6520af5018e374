"""Offline backend that answers every request with a canned reply."""
import logging

from src.providers.base import AssistantBackend

logger = logging.getLogger(__name__)


class SimulatedProvider(AssistantBackend):
    """
    Stand-in backend for demos and for editors without network access.

    It never contacts a server; the reply echoes the question so the whole
    request cycle can be exercised end to end.
    """

    @property
    def provider_name(self) -> str:
        return "Simulated"

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
        logger.debug("Simulating a reply for model '%s'.", model_name)
        return (
            "I'm a simulated AI response! In a full implementation, I would:\n\n"
            f"- Analyze your question: \"{user_prompt}\"\n"
            "- Consider the current project context\n"
            "- Provide specific GDScript/C# code examples\n"
            "- Offer game development best practices\n\n"
            "To enable real AI responses, configure an AI service backend in the editor settings."
        )
