from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pytest

from src.hyperbeam.app.assistant_session import AssistantSession
from src.hyperbeam.models.events import Event
from src.hyperbeam.models.context_snapshot import ContextSnapshot, EditorState
from src.hyperbeam.services.settings_service import SettingsHolder
from src.providers.base import AssistantBackend


class RecordingEventBus:
    """Synchronous in-memory event bus used by tests."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Callable[[Event], None]]] = {}
        self.dispatched: List[Event] = []

    def subscribe(self, event_type: str, callback: Callable[[Event], None]) -> None:
        self._subscribers.setdefault(event_type, []).append(callback)

    def dispatch(self, event: Event) -> None:
        self.dispatched.append(event)
        for callback in self._subscribers.get(event.event_type, []):
            callback(event)

    def of_type(self, event_type: str) -> List[Event]:
        return [event for event in self.dispatched if event.event_type == event_type]


@dataclass
class SubmittedTask:
    fn: Callable[[], Any]
    on_result: Callable[[Any], None]
    on_error: Callable[[Exception], None]


class ManualTimer:
    def __init__(self, seconds: float, callback: Callable[[], None]) -> None:
        self.seconds = seconds
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()


class ManualTaskRunner:
    """
    Task runner that holds submitted work until the test decides its outcome,
    mirroring how QtTaskRunner resumes the dispatcher later on the main thread.
    """

    def __init__(self) -> None:
        self.tasks: List[SubmittedTask] = []
        self.timers: List[ManualTimer] = []

    def submit(self, fn, on_result, on_error) -> None:
        self.tasks.append(SubmittedTask(fn, on_result, on_error))

    def call_later(self, seconds: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(seconds, callback)
        self.timers.append(timer)
        return timer

    def run_next(self) -> None:
        """Execute the oldest submitted task and deliver its outcome."""
        task = self.tasks.pop(0)
        try:
            result = task.fn()
        except Exception as exc:
            task.on_error(exc)
        else:
            task.on_result(result)

    def fire_timers(self) -> None:
        for timer in list(self.timers):
            timer.fire()


class FakeBackend(AssistantBackend):
    """Backend returning a canned reply or raising a configured error."""

    def __init__(self, reply: str = "Use linear interpolation.", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "Fake"

    def send(self, endpoint, api_key, model_name, system_prompt, user_prompt, *, timeout, temperature=0.7, max_tokens=2048):
        self.calls.append(
            {
                "endpoint": endpoint,
                "api_key": api_key,
                "model_name": model_name,
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "timeout": timeout,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


class StaticIntrospector:
    def __init__(self, snapshot: Optional[ContextSnapshot] = None, editor: Optional[EditorState] = None) -> None:
        self.snapshot = snapshot or ContextSnapshot(
            project_name="Space Miner",
            scene_files=frozenset({"res://main.tscn", "res://player.tscn"}),
            script_files=frozenset({"res://player.gd"}),
        )
        self.editor = editor or EditorState(current_scene="Main", current_script="res://player.gd")

    def snapshot_project(self) -> ContextSnapshot:
        return self.snapshot

    def snapshot_editor(self) -> EditorState:
        return self.editor


@dataclass
class SessionHarness:
    session: AssistantSession
    event_bus: RecordingEventBus
    runner: ManualTaskRunner
    backend: FakeBackend
    settings: SettingsHolder = field(default_factory=SettingsHolder)


@pytest.fixture
def session_factory() -> Callable[..., SessionHarness]:
    """Factory that builds a started AssistantSession wired to test doubles."""

    def _factory(
        *,
        api_key: Optional[str] = "sk-ant-test",
        backend: Optional[FakeBackend] = None,
        timeout_seconds: float = 30.0,
        greet: bool = False,
        introspector: Any = None,
    ) -> SessionHarness:
        event_bus = RecordingEventBus()
        runner = ManualTaskRunner()
        backend = backend or FakeBackend()
        settings = SettingsHolder()
        settings.update(api_key=api_key)
        session = AssistantSession(
            backend,
            settings=settings,
            introspector=introspector or StaticIntrospector(),
            event_bus=event_bus,
            task_runner=runner,
            timeout_seconds=timeout_seconds,
            greet=greet,
        )
        session.start()
        return SessionHarness(session=session, event_bus=event_bus, runner=runner, backend=backend, settings=settings)

    return _factory
