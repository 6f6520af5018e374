import logging
import uuid
from typing import Any, Callable, Optional, Tuple

from src.hyperbeam.app.event_bus import EventBus
from src.hyperbeam.app.task_runner import QtTaskRunner
from src.hyperbeam.config import DEFAULT_REQUEST_TIMEOUT_SECONDS
from src.hyperbeam.context.context_analyzer import ContextAnalyzer, ProjectIntrospector
from src.hyperbeam.models.event_types import (
    CONVERSATION_CLEARED,
    DISPATCHER_STATE_CHANGED,
    SESSION_ENDED,
    SESSION_STARTED,
    TURN_APPENDED,
    TURN_REPLACED,
)
from src.hyperbeam.models.events import Event
from src.hyperbeam.models.exceptions import AssistantError
from src.hyperbeam.models.pending_request import DispatcherState, PendingRequest
from src.hyperbeam.models.turn import Turn
from src.hyperbeam.prompts.assistant_rules import WELCOME_MESSAGE
from src.hyperbeam.prompts.prompt_builder import ErrorReport, PromptIntent
from src.hyperbeam.services.code_assist_service import CodeAssistService
from src.hyperbeam.services.conversation_log import ConversationLog
from src.hyperbeam.services.request_dispatcher import RequestDispatcher
from src.hyperbeam.services.settings_service import SettingsHolder
from src.providers.base import AssistantBackend

logger = logging.getLogger(__name__)


class AssistantSession:
    """
    One assistant conversation, owned by the hosting editor.

    The editor creates the session when the assistant plugin is enabled,
    calls ``start()``, routes its buttons and input fields to the command
    methods below, and calls ``shutdown()`` when the plugin is disabled.
    Surfaces observe the conversation through the ``on_*`` subscriptions and
    read it with ``turns()``; they never write to it.
    """

    def __init__(
        self,
        backend: AssistantBackend,
        settings: Optional[SettingsHolder] = None,
        introspector: Optional[ProjectIntrospector] = None,
        event_bus: Optional[EventBus] = None,
        task_runner: Any = None,
        timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        greet: bool = True,
    ) -> None:
        self.id = str(uuid.uuid4())
        self.event_bus = event_bus or EventBus()
        self.settings = settings or SettingsHolder()
        self.conversation_log = ConversationLog()
        self.context_analyzer = ContextAnalyzer(introspector)
        task_runner = task_runner or QtTaskRunner()
        self.dispatcher = RequestDispatcher(
            event_bus=self.event_bus,
            conversation_log=self.conversation_log,
            settings=self.settings,
            context_analyzer=self.context_analyzer,
            backend=backend,
            task_runner=task_runner,
            timeout_seconds=timeout_seconds,
        )
        self.code_assist = CodeAssistService(self.dispatcher)
        self.greet = greet
        self._active = False

    # ------------------------------------------------------------------ #
    # Lifetime
    # ------------------------------------------------------------------ #

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> None:
        """Begin accepting commands; greets the user when ``greet`` is set."""
        if self._active:
            return
        self._active = True
        logger.info("Assistant session %s started.", self.id)
        self.event_bus.dispatch(Event(event_type=SESSION_STARTED, payload={"session_id": self.id}))
        if self.greet:
            self.dispatcher.announce(WELCOME_MESSAGE)

    def shutdown(self) -> None:
        """Stop accepting commands. Replies still in flight are discarded."""
        if not self._active:
            return
        self._active = False
        self.dispatcher.shutdown()
        logger.info("Assistant session %s ended.", self.id)
        self.event_bus.dispatch(Event(event_type=SESSION_ENDED, payload={"session_id": self.id}))

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def ask_question(self, text: str) -> Optional[PendingRequest]:
        """Send a typed chat message; blank input is ignored like the chat field does."""
        if not (text or "").strip():
            logger.debug("Ignoring blank question.")
            return None
        return self._submit(PromptIntent.FREE_QUESTION, text)

    def explain_code(self, code: str = "") -> PendingRequest:
        return self._submit(PromptIntent.EXPLAIN_CODE, code)

    def suggest_improvements(self, code: str = "") -> PendingRequest:
        return self._submit(PromptIntent.SUGGEST_IMPROVEMENTS, code)

    def help_with_error(self, message: str, context: str = "") -> PendingRequest:
        return self._submit(PromptIntent.EXPLAIN_ERROR, ErrorReport(message=message, context_text=context))

    def request_completion(self, code: str, cursor_offset: int) -> Optional[PendingRequest]:
        self._ensure_active()
        return self.code_assist.request_completion(code, cursor_offset)

    def analyze_code_context(self, code: str) -> PendingRequest:
        self._ensure_active()
        return self.code_assist.analyze_code_context(code)

    def clear_conversation(self) -> None:
        self._ensure_active()
        self.dispatcher.clear()

    # ------------------------------------------------------------------ #
    # Observation
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> DispatcherState:
        return self.dispatcher.state

    def turns(self) -> Tuple[Turn, ...]:
        return self.conversation_log.all()

    def on_turn_appended(self, callback: Callable[[Turn], None]) -> None:
        self.event_bus.subscribe(TURN_APPENDED, lambda event: callback(event.payload["turn"]))

    def on_turn_replaced(self, callback: Callable[[Turn], None]) -> None:
        self.event_bus.subscribe(TURN_REPLACED, lambda event: callback(event.payload["turn"]))

    def on_state_changed(self, callback: Callable[[DispatcherState], None]) -> None:
        self.event_bus.subscribe(DISPATCHER_STATE_CHANGED, lambda event: callback(event.payload["state"]))

    def on_conversation_cleared(self, callback: Callable[[], None]) -> None:
        self.event_bus.subscribe(CONVERSATION_CLEARED, lambda event: callback())

    def _submit(self, intent: PromptIntent, payload: Any) -> PendingRequest:
        self._ensure_active()
        return self.dispatcher.submit(intent, payload)

    def _ensure_active(self) -> None:
        if not self._active:
            raise AssistantError("The assistant session is not running.")
