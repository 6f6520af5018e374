from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.hyperbeam.config import ANTHROPIC_API_VERSION
from src.hyperbeam.models.exceptions import BackendRateLimitError, BackendResponseError
from src.providers.anthropic_provider import AnthropicProvider
from src.providers.simulated_provider import SimulatedProvider


def _response(status_code: int = 200, json_data=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


def _send(provider: AnthropicProvider) -> str:
    return provider.send(
        "https://api.anthropic.com/v1/messages",
        "sk-ant-test",
        "claude-test",
        "You are helpful.",
        "How do I jump?",
        timeout=15.0,
        temperature=0.2,
        max_tokens=256,
    )


def test_send_posts_messages_payload_and_joins_text_blocks() -> None:
    session = MagicMock()
    session.post.return_value = _response(
        json_data={
            "content": [
                {"type": "text", "text": "Call "},
                {"type": "tool_use", "name": "ignored"},
                {"type": "text", "text": "move_and_slide()."},
            ]
        }
    )

    answer = _send(AnthropicProvider(session=session))

    assert answer == "Call move_and_slide()."
    _, kwargs = session.post.call_args
    assert session.post.call_args.args[0] == "https://api.anthropic.com/v1/messages"
    assert kwargs["timeout"] == 15.0
    assert kwargs["headers"]["x-api-key"] == "sk-ant-test"
    assert kwargs["headers"]["anthropic-version"] == ANTHROPIC_API_VERSION
    assert kwargs["json"] == {
        "model": "claude-test",
        "max_tokens": 256,
        "temperature": 0.2,
        "system": "You are helpful.",
        "messages": [{"role": "user", "content": "How do I jump?"}],
    }


def test_rate_limit_status_raises_rate_limit_error() -> None:
    session = MagicMock()
    session.post.return_value = _response(status_code=429, json_data={})

    with pytest.raises(BackendRateLimitError):
        _send(AnthropicProvider(session=session))


def test_error_status_includes_backend_message() -> None:
    session = MagicMock()
    session.post.return_value = _response(
        status_code=401, json_data={"error": {"type": "authentication_error", "message": "invalid x-api-key"}}
    )

    with pytest.raises(BackendResponseError) as excinfo:
        _send(AnthropicProvider(session=session))

    assert excinfo.value.status_code == 401
    assert "invalid x-api-key" in str(excinfo.value)


@pytest.mark.parametrize(
    "json_data",
    [ValueError("not json"), ["a", "list"], {"content": []}, {"content": "text"}],
)
def test_malformed_replies_raise_response_error(json_data) -> None:
    session = MagicMock()
    session.post.return_value = _response(json_data=json_data)

    with pytest.raises(BackendResponseError):
        _send(AnthropicProvider(session=session))


def test_simulated_provider_echoes_question() -> None:
    answer = SimulatedProvider().send("", "", "model", "system", "What is a signal?", timeout=1.0)

    assert "What is a signal?" in answer
    assert SimulatedProvider().provider_name == "Simulated"
