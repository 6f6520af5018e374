from __future__ import annotations

from typing import List

import pytest

from src.hyperbeam.app.event_bus import EventBus
from src.hyperbeam.models.event_types import SESSION_ENDED, SESSION_STARTED
from src.hyperbeam.models.events import Event
from src.hyperbeam.models.exceptions import AssistantError
from src.hyperbeam.models.pending_request import DispatcherState
from src.hyperbeam.models.turn import Sender, Turn
from src.hyperbeam.prompts.assistant_rules import SESSION_CLOSED_MESSAGE, THINKING_PLACEHOLDER, WELCOME_MESSAGE
from src.hyperbeam.services.conversation_log import FIRST_SEQUENCE


def test_start_greets_and_announces_session(session_factory) -> None:
    harness = session_factory(greet=True)

    turns = harness.session.turns()
    assert len(turns) == 1
    assert turns[0].sender == Sender.ASSISTANT
    assert turns[0].content == WELCOME_MESSAGE
    assert harness.event_bus.of_type(SESSION_STARTED)[0].payload["session_id"] == harness.session.id


def test_subscribers_observe_turns_and_states(session_factory) -> None:
    harness = session_factory()
    appended: List[Turn] = []
    replaced: List[Turn] = []
    states: List[DispatcherState] = []
    harness.session.on_turn_appended(appended.append)
    harness.session.on_turn_replaced(replaced.append)
    harness.session.on_state_changed(states.append)

    harness.session.ask_question("How do I move a character?")
    harness.runner.run_next()

    assert [turn.content for turn in appended] == ["How do I move a character?", THINKING_PLACEHOLDER]
    assert [turn.content for turn in replaced] == ["Use linear interpolation."]
    assert states[-1] == DispatcherState.IDLE
    assert harness.session.turns()[-1] == replaced[0]


def test_help_with_error_and_suggest_improvements(session_factory) -> None:
    harness = session_factory()

    harness.session.help_with_error("Invalid call. Nonexistent function 'jump'", "player.gd:14")
    harness.runner.run_next()
    harness.session.suggest_improvements("")
    harness.runner.run_next()

    user_turns = [turn.content for turn in harness.session.turns() if turn.sender == Sender.USER]
    assert user_turns[0].startswith("I'm getting this error:")
    assert "Context:\nplayer.gd:14" in user_turns[0]
    assert "general code improvement tips" in user_turns[1]


def test_blank_question_is_ignored(session_factory) -> None:
    harness = session_factory()

    assert harness.session.ask_question("   ") is None
    assert harness.session.turns() == ()


def test_clear_after_five_turns_restarts_numbering(session_factory) -> None:
    harness = session_factory(greet=True)
    harness.session.ask_question("one")
    harness.runner.run_next()
    harness.session.ask_question("two")
    harness.runner.run_next()
    assert len(harness.session.turns()) == 5
    cleared: List[bool] = []
    harness.session.on_conversation_cleared(lambda: cleared.append(True))

    harness.session.clear_conversation()

    assert harness.session.turns() == ()
    assert cleared == [True]
    harness.session.ask_question("three")
    assert harness.session.turns()[0].sequence == FIRST_SEQUENCE


def test_shutdown_discards_reply_and_rejects_commands(session_factory) -> None:
    harness = session_factory()
    harness.session.ask_question("still waiting")

    harness.session.shutdown()
    harness.runner.run_next()

    assert harness.session.state == DispatcherState.IDLE
    assert harness.session.turns()[-1].content == SESSION_CLOSED_MESSAGE
    assert harness.event_bus.of_type(SESSION_ENDED)
    with pytest.raises(AssistantError):
        harness.session.ask_question("anyone there?")


def test_qt_event_bus_delivers_to_every_subscriber_and_survives_errors() -> None:
    bus = EventBus()
    received: List[str] = []

    def _broken(event: Event) -> None:
        raise RuntimeError("subscriber bug")

    bus.subscribe("PING", _broken)
    bus.subscribe("PING", lambda event: received.append(event.payload["value"]))

    bus.dispatch(Event(event_type="PING", payload={"value": "pong"}))

    assert received == ["pong"]
