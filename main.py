import argparse
import logging
import sys

from PySide6.QtCore import QCoreApplication

from src.hyperbeam.app.assistant_session import AssistantSession
from src.hyperbeam.config import DEFAULT_REQUEST_TIMEOUT_SECONDS
from src.hyperbeam.models.pending_request import DispatcherState
from src.hyperbeam.models.turn import Sender
from src.hyperbeam.services.logging_service import LoggingService
from src.hyperbeam.services.settings_service import SettingsHolder
from src.providers.anthropic_provider import AnthropicProvider
from src.providers.simulated_provider import SimulatedProvider


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask the Hyperbeam assistant a single question.")
    parser.add_argument("question", help="Question to send to the assistant.")
    parser.add_argument("--simulate", action="store_true", help="Answer with the offline simulated backend.")
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_REQUEST_TIMEOUT_SECONDS, help="Seconds to wait for the backend."
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """
    Headless entry point: runs one request through a full assistant session
    and prints the transcript once the dispatcher is idle again.
    """
    args = parse_args(argv)
    LoggingService.setup_logging(console_level=logging.WARNING)

    app = QCoreApplication(sys.argv[:1])
    backend = SimulatedProvider() if args.simulate else AnthropicProvider()
    settings = SettingsHolder.from_environment()
    if args.simulate and not settings.snapshot().has_api_key():
        settings.update(api_key="simulated")

    session = AssistantSession(backend, settings=settings, timeout_seconds=args.timeout, greet=False)

    def _print_transcript_when_idle(state: DispatcherState) -> None:
        if state != DispatcherState.IDLE:
            return
        for turn in session.turns():
            label = "You" if turn.sender == Sender.USER else "Hyperbeam"
            print(f"{label}: {turn.content}\n")
        session.shutdown()
        app.quit()

    session.start()
    session.on_state_changed(_print_transcript_when_idle)
    session.ask_question(args.question)
    if session.is_active:
        app.exec()
    return 0


if __name__ == "__main__":
    sys.exit(main())
