import logging
from typing import Callable, Dict, List

from PySide6.QtCore import QObject, Signal

from src.hyperbeam.models.events import Event

logger = logging.getLogger(__name__)


class EventBusSignaller(QObject):
    """
    A QObject to emit signals on the main (UI) thread.
    """
    signal = Signal(Event)


class EventBus:
    """
    A simple event bus for decoupled communication between the assistant core
    and the editor surfaces that render it.
    Ensures all event dispatches are handled on the main UI thread.
    """
    def __init__(self):
        """Initializes the EventBus."""
        self._subscribers: Dict[str, List[Callable[[Event], None]]] = {}
        self._signaller = EventBusSignaller()
        self._signaller.signal.connect(self._handle_event_on_main_thread)

    def subscribe(self, event_type: str, callback: Callable[[Event], None]) -> None:
        """
        Subscribe a callback function to a specific event type.

        Args:
            event_type: The type of event to subscribe to.
            callback: The function to call when the event is dispatched.
        """
        self._subscribers.setdefault(event_type, []).append(callback)
        logger.debug("Subscribed %s to event '%s'", getattr(callback, "__name__", callback), event_type)

    def unsubscribe(self, event_type: str, callback: Callable[[Event], None]) -> None:
        """Remove a previously registered callback; unknown callbacks are ignored."""
        callbacks = self._subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def dispatch(self, event: Event) -> None:
        """
        Dispatch an event to all subscribed callbacks.
        Emits a signal, ensuring the event is processed on the main thread.

        Args:
            event: The Event object to dispatch.
        """
        logger.debug("Dispatching event '%s'", event.event_type)
        self._signaller.signal.emit(event)

    def _handle_event_on_main_thread(self, event: Event) -> None:
        """
        This slot is connected to the signaller's signal and ensures callbacks
        are executed on the main (UI) thread.
        """
        event_type = event.event_type
        for callback in list(self._subscribers.get(event_type, [])):
            try:
                callback(event)
            except Exception:
                logger.error(
                    "Error in callback %s for event '%s'",
                    getattr(callback, "__name__", callback),
                    event_type,
                    exc_info=True,
                )
