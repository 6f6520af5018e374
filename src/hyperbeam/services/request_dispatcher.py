import logging
from functools import partial
from typing import Any, Optional

from src.hyperbeam.app.event_bus import EventBus
from src.hyperbeam.config import DEFAULT_REQUEST_TIMEOUT_SECONDS
from src.hyperbeam.context.context_analyzer import ContextAnalyzer
from src.hyperbeam.models.event_types import (
    BACKEND_ERROR,
    CONVERSATION_CLEARED,
    DISPATCHER_STATE_CHANGED,
    TURN_APPENDED,
    TURN_REPLACED,
)
from src.hyperbeam.models.events import Event
from src.hyperbeam.models.exceptions import (
    AssistantBusyError,
    AssistantError,
    BackendResponseError,
    BackendTimeoutError,
    MissingCredentialsError,
    PromptBuildError,
)
from src.hyperbeam.models.pending_request import DispatcherState, PendingRequest, RequestState
from src.hyperbeam.models.settings import AssistantSettings
from src.hyperbeam.models.turn import Sender, Turn
from src.hyperbeam.prompts.assistant_rules import (
    BACKEND_FAILURE_MESSAGE,
    MISSING_CREDENTIALS_MESSAGE,
    SESSION_CLOSED_MESSAGE,
    THINKING_PLACEHOLDER,
    TIMEOUT_FAILURE_MESSAGE,
)
from src.hyperbeam.prompts.prompt_builder import PromptIntent, PromptPayload, build_request, describe_payload
from src.hyperbeam.prompts.prompt_manager import PromptManager
from src.hyperbeam.services.conversation_log import ConversationLog
from src.hyperbeam.services.error_classifier import classify_backend_exception
from src.hyperbeam.services.settings_service import SettingsHolder
from src.providers.base import AssistantBackend

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """
    Single-flight state machine driving one backend request at a time.

    ``IDLE -> BUILDING -> IN_FLIGHT -> COMPLETED|FAILED -> IDLE``

    Submissions while a request is building or in flight are rejected with
    ``AssistantBusyError``. The backend call runs on the task runner; its
    outcome comes back on the main thread, where the "thinking" placeholder is
    replaced in place by the answer or by a failure message. A timer armed
    before the call fails the request if no outcome arrives in time, and any
    outcome arriving after that is discarded.

    The dispatcher is the only writer of the conversation log.
    """

    def __init__(
        self,
        event_bus: EventBus,
        conversation_log: ConversationLog,
        settings: SettingsHolder,
        context_analyzer: ContextAnalyzer,
        backend: AssistantBackend,
        task_runner: Any,
        timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        prompts: Optional[PromptManager] = None,
    ) -> None:
        """
        Args:
            event_bus: Bus used to notify subscribers of turns and state changes.
            conversation_log: The transcript this dispatcher writes to.
            settings: Source of the settings snapshot read at build time.
            context_analyzer: Produces the project snapshot for each request.
            backend: Capability performing the actual model call.
            task_runner: Object with ``submit(fn, on_result, on_error)`` and
                ``call_later(seconds, callback)``; see ``QtTaskRunner``.
            timeout_seconds: How long an in-flight request may take.
            prompts: Template renderer, defaults to the shared PromptManager.
        """
        self.event_bus = event_bus
        self.conversation_log = conversation_log
        self.settings = settings
        self.context_analyzer = context_analyzer
        self.backend = backend
        self.task_runner = task_runner
        self.timeout_seconds = timeout_seconds
        self.prompts = prompts
        self._state = DispatcherState.IDLE
        self._pending: Optional[PendingRequest] = None
        self._timeout_handle: Any = None

    @property
    def state(self) -> DispatcherState:
        return self._state

    @property
    def pending_request(self) -> Optional[PendingRequest]:
        return self._pending

    def is_idle(self) -> bool:
        return self._state == DispatcherState.IDLE

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    def submit(self, intent: PromptIntent, payload: Any) -> PendingRequest:
        """
        Start a request for the given intent.

        Returns:
            The request; it is already COMPLETED or FAILED when it never
            reached the backend (missing credentials, prompt build failure).

        Raises:
            AssistantBusyError: If another request is building or in flight.
        """
        if not self.is_idle():
            logger.info("Rejecting %s request: dispatcher is %s.", intent.value, self._state.value)
            raise AssistantBusyError(f"The assistant is busy ({self._state.value}); try again when it is idle.")

        settings = self.settings.snapshot()
        context = self.context_analyzer.analyze_current_project()
        request = PendingRequest(prompt="", context=context)
        self._pending = request
        self._set_state(DispatcherState.BUILDING, request)

        try:
            prompt = build_request(intent, payload, settings, context, self.prompts)
        except PromptBuildError as exc:
            logger.error("Could not build a %s prompt: %s", intent.value, exc)
            self._append_turn(Sender.USER, describe_payload(payload))
            self._append_turn(Sender.ASSISTANT, BACKEND_FAILURE_MESSAGE)
            self._finish(request, RequestState.FAILED)
            return request

        request.prompt = prompt.user_prompt
        self._append_turn(Sender.USER, prompt.user_prompt)

        try:
            self._require_credentials(settings)
        except MissingCredentialsError as exc:
            logger.warning("Request %s not sent: %s", request.id, exc)
            self._append_turn(Sender.ASSISTANT, MISSING_CREDENTIALS_MESSAGE)
            self._finish(request, RequestState.FAILED)
            return request

        placeholder = self._append_turn(Sender.ASSISTANT, THINKING_PLACEHOLDER)
        request.placeholder_sequence = placeholder.sequence
        request.state = RequestState.IN_FLIGHT
        self._set_state(DispatcherState.IN_FLIGHT, request)

        self._timeout_handle = self.task_runner.call_later(
            self.timeout_seconds, partial(self._handle_timeout, request.id)
        )
        self.task_runner.submit(
            partial(self._call_backend, settings, prompt),
            partial(self._handle_result, request.id),
            partial(self._handle_error, request.id),
        )
        return request

    def clear(self) -> int:
        """
        Empty the conversation log.

        Raises:
            AssistantBusyError: If a request is building or in flight.
        """
        if not self.is_idle():
            raise AssistantBusyError("Cannot clear the conversation while a request is in progress.")
        removed = self.conversation_log.clear()
        self._dispatch(CONVERSATION_CLEARED, {"removed_turns": removed})
        return removed

    def announce(self, content: str) -> Turn:
        """Append an assistant message that answers no request, such as the greeting."""
        return self._append_turn(Sender.ASSISTANT, content)

    def shutdown(self) -> None:
        """
        Abandon any outstanding request.

        The request fails and its placeholder is replaced by a closing notice;
        the backend reply is discarded when it arrives.
        """
        self._cancel_timeout()
        request = self._pending
        if request is None:
            return
        logger.info("Abandoning request %s on shutdown.", request.id)
        if request.state == RequestState.IN_FLIGHT:
            self._replace_turn(request.placeholder_sequence, SESSION_CLOSED_MESSAGE)
        self._finish(request, RequestState.FAILED)

    @staticmethod
    def _require_credentials(settings: AssistantSettings) -> None:
        if not settings.has_api_key():
            raise MissingCredentialsError("No AI API key is configured.")

    # ------------------------------------------------------------------ #
    # Backend call (worker thread)
    # ------------------------------------------------------------------ #

    def _call_backend(self, settings: AssistantSettings, prompt: PromptPayload) -> str:
        return self.backend.send(
            settings.api_endpoint,
            settings.api_key_value(),
            settings.model_name,
            prompt.system_prompt,
            prompt.user_prompt,
            timeout=self.timeout_seconds,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )

    # ------------------------------------------------------------------ #
    # Outcomes (main thread)
    # ------------------------------------------------------------------ #

    def _handle_result(self, request_id: str, result: Any) -> None:
        request = self._current(request_id)
        if request is None:
            logger.info("Discarding late reply for request %s.", request_id)
            return
        if not isinstance(result, str) or not result.strip():
            self._fail(request, BackendResponseError("Backend returned an empty reply."))
            return

        self._cancel_timeout()
        self._replace_turn(request.placeholder_sequence, result)
        logger.debug("Request %s completed (%d chars).", request.id, len(result))
        self._finish(request, RequestState.COMPLETED)

    def _handle_error(self, request_id: str, exc: Exception) -> None:
        request = self._current(request_id)
        if request is None:
            logger.info("Discarding late failure for request %s: %s", request_id, exc)
            return
        self._fail(request, classify_backend_exception(exc))

    def _handle_timeout(self, request_id: str) -> None:
        request = self._current(request_id)
        if request is None:
            return
        self._fail(
            request,
            BackendTimeoutError(f"No reply from the backend within {self.timeout_seconds:g} seconds."),
        )

    def _fail(self, request: PendingRequest, error: AssistantError) -> None:
        self._cancel_timeout()
        logger.error("Request %s failed: %s", request.id, error, exc_info=error.__cause__)
        message = TIMEOUT_FAILURE_MESSAGE if isinstance(error, BackendTimeoutError) else BACKEND_FAILURE_MESSAGE
        self._replace_turn(request.placeholder_sequence, message)
        self._dispatch(
            BACKEND_ERROR,
            {"request_id": request.id, "message": str(error), "error_type": type(error).__name__},
        )
        self._finish(request, RequestState.FAILED)

    def _finish(self, request: PendingRequest, outcome: RequestState) -> None:
        request.state = outcome
        terminal = DispatcherState.COMPLETED if outcome == RequestState.COMPLETED else DispatcherState.FAILED
        self._set_state(terminal, request)
        self._pending = None
        self._set_state(DispatcherState.IDLE, request)

    def _current(self, request_id: str) -> Optional[PendingRequest]:
        if self._pending is None or self._pending.id != request_id:
            return None
        if self._state != DispatcherState.IN_FLIGHT:
            return None
        return self._pending

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None

    # ------------------------------------------------------------------ #
    # Log writes and notifications
    # ------------------------------------------------------------------ #

    def _append_turn(self, sender: Sender, content: str) -> Turn:
        turn = self.conversation_log.append(sender, content)
        self._dispatch(TURN_APPENDED, {"turn": turn})
        return turn

    def _replace_turn(self, sequence: int, content: str) -> Turn:
        previous = self.conversation_log.get(sequence)
        turn = self.conversation_log.replace(sequence, content)
        self._dispatch(TURN_REPLACED, {"turn": turn, "previous": previous})
        return turn

    def _set_state(self, state: DispatcherState, request: Optional[PendingRequest] = None) -> None:
        previous = self._state
        self._state = state
        logger.debug("Dispatcher %s -> %s", previous.value, state.value)
        self._dispatch(
            DISPATCHER_STATE_CHANGED,
            {
                "state": state,
                "previous_state": previous,
                "request_id": request.id if request else None,
            },
        )

    def _dispatch(self, event_type: str, payload: dict) -> None:
        self.event_bus.dispatch(Event(event_type=event_type, payload=payload))
