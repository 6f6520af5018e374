import logging
from typing import Optional

from src.hyperbeam.models.pending_request import PendingRequest
from src.hyperbeam.prompts.prompt_builder import PromptIntent, build_completion_prompt
from src.hyperbeam.services.request_dispatcher import RequestDispatcher

logger = logging.getLogger(__name__)


def split_at_cursor(code: str, cursor_offset: int) -> tuple:
    """Split ``code`` at ``cursor_offset``, clamped to ``[0, len(code)]``."""
    code = code or ""
    offset = min(max(cursor_offset, 0), len(code))
    if offset != cursor_offset:
        logger.debug("Clamped cursor offset %d to %d.", cursor_offset, offset)
    return code[:offset], code[offset:]


class CodeAssistService:
    """Code completion and code analysis requests from the script editor."""

    def __init__(self, dispatcher: RequestDispatcher) -> None:
        self.dispatcher = dispatcher

    def request_completion(self, code: str, cursor_offset: int) -> Optional[PendingRequest]:
        """
        Ask for completions at the cursor position.

        Out-of-range offsets are clamped rather than rejected. Returns ``None``
        without contacting the backend when code suggestions are disabled in
        the settings.

        Raises:
            AssistantBusyError: If another request is in progress.
        """
        if not self.dispatcher.settings.snapshot().code_suggestions_enabled:
            logger.info("Code suggestions are disabled; ignoring completion request.")
            return None
        before, after = split_at_cursor(code, cursor_offset)
        prompt = build_completion_prompt(before, after, self.dispatcher.prompts)
        return self.dispatcher.submit(PromptIntent.FREE_QUESTION, prompt)

    def analyze_code_context(self, code: str) -> PendingRequest:
        return self.dispatcher.submit(PromptIntent.EXPLAIN_CODE, code)
