"""Prompt construction for every kind of assistant request."""

from __future__ import annotations

import logging
import re
from enum import Enum
from functools import lru_cache
from typing import Any, NamedTuple, Optional

from src.hyperbeam.models.context_snapshot import ContextSnapshot
from src.hyperbeam.models.exceptions import PromptBuildError
from src.hyperbeam.models.settings import AssistantSettings
from src.hyperbeam.prompts.prompt_manager import PromptManager


logger = logging.getLogger(__name__)

_BACKTICK_RUN = re.compile(r"`+")


class PromptIntent(str, Enum):
    """What the user asked the assistant to do."""

    FREE_QUESTION = "free_question"
    EXPLAIN_CODE = "explain_code"
    SUGGEST_IMPROVEMENTS = "suggest_improvements"
    EXPLAIN_ERROR = "explain_error"


class ErrorReport(NamedTuple):
    """Payload of an EXPLAIN_ERROR request."""

    message: str
    context_text: str = ""


class PromptPayload(NamedTuple):
    """The finished request text handed to the backend."""

    system_prompt: str
    user_prompt: str


@lru_cache(maxsize=1)
def default_prompt_manager() -> PromptManager:
    try:
        return PromptManager()
    except FileNotFoundError as exc:
        raise PromptBuildError("Prompt templates are not installed.", cause=exc) from exc


def fence_for(code: str) -> str:
    """Return a backtick fence longer than any backtick run inside ``code``."""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(code or "")), default=0)
    return "`" * max(3, longest + 1)


def build_system_prompt(settings: Optional[AssistantSettings] = None, prompts: Optional[PromptManager] = None) -> str:
    """
    Render the assistant persona.

    The text is identical for every settings snapshot; ``settings`` is accepted
    so backends that vary the persona per model can be added without changing
    callers.
    """
    prompts = prompts or default_prompt_manager()
    return prompts.render("system_prompt.jinja2")


def build_context_summary(context: Optional[ContextSnapshot], prompts: Optional[PromptManager] = None) -> str:
    """Describe the project snapshot in a short block appended to the system prompt."""
    prompts = prompts or default_prompt_manager()
    return prompts.render("context_summary.jinja2", context=context or ContextSnapshot())


def build_user_prompt(
    intent: PromptIntent,
    payload: Any,
    context: Optional[ContextSnapshot] = None,
    prompts: Optional[PromptManager] = None,
) -> str:
    """
    Turn a user intent into the user-role prompt.

    Args:
        intent: The kind of request.
        payload: Free text for FREE_QUESTION, source code for EXPLAIN_CODE and
            SUGGEST_IMPROVEMENTS, an ErrorReport (or a bare message string) for
            EXPLAIN_ERROR. ``None`` is treated as empty.
        context: Project snapshot; currently only used by the system prompt.
        prompts: Template renderer, defaults to the shared PromptManager.

    Returns:
        Non-empty prompt text.

    Raises:
        PromptBuildError: If the intent is unknown or a template cannot be rendered.
    """
    prompts = prompts or default_prompt_manager()

    if intent == PromptIntent.FREE_QUESTION:
        text = "" if payload is None else str(payload)
        if text.strip():
            return text
        logger.debug("Empty free question; falling back to the generic pattern prompt.")
        return prompts.render("explain_code.jinja2", code="", fence="")

    if intent in (PromptIntent.EXPLAIN_CODE, PromptIntent.SUGGEST_IMPROVEMENTS):
        code = "" if payload is None else str(payload)
        template = "explain_code.jinja2" if intent == PromptIntent.EXPLAIN_CODE else "suggest_improvements.jinja2"
        return prompts.render(template, code=code, fence=fence_for(code))

    if intent == PromptIntent.EXPLAIN_ERROR:
        report = payload if isinstance(payload, ErrorReport) else ErrorReport(message="" if payload is None else str(payload))
        return prompts.render(
            "explain_error.jinja2",
            message=report.message or "",
            context_text=report.context_text or "",
        )

    raise PromptBuildError(f"Unsupported prompt intent: {intent!r}")


def describe_payload(payload: Any) -> str:
    """Plain text of what the user sent, used when no prompt could be built."""
    if payload is None:
        return ""
    if isinstance(payload, ErrorReport):
        if payload.context_text:
            return f"{payload.message}\n\n{payload.context_text}"
        return payload.message
    return str(payload)


def build_completion_prompt(before: str, after: str, prompts: Optional[PromptManager] = None) -> str:
    """Request completions for the code around a cursor marker."""
    prompts = prompts or default_prompt_manager()
    return prompts.render("code_completion.jinja2", strip=False, before=before, after=after)


def build_request(
    intent: PromptIntent,
    payload: Any,
    settings: AssistantSettings,
    context: Optional[ContextSnapshot] = None,
    prompts: Optional[PromptManager] = None,
) -> PromptPayload:
    """Assemble the system and user prompts for one backend call."""
    prompts = prompts or default_prompt_manager()
    system_prompt = build_system_prompt(settings, prompts)
    summary = build_context_summary(context, prompts)
    return PromptPayload(
        system_prompt=f"{system_prompt}\n\n{summary}",
        user_prompt=build_user_prompt(intent, payload, context, prompts),
    )
