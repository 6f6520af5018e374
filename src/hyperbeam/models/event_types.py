"""
Event Type Constants

Centralized definitions for all event types used by the assistant's event bus.
"""

# Session lifecycle events
SESSION_STARTED = "SESSION_STARTED"
"""
Dispatched when an assistant session is started by the host editor.

Payload:
    session_id (str): Identifier for the session
"""

SESSION_ENDED = "SESSION_ENDED"
"""
Dispatched when the host editor shuts the session down.

Payload:
    session_id (str): Identifier for the session
"""

# Conversation log events
TURN_APPENDED = "TURN_APPENDED"
"""
Dispatched whenever a Turn is appended to the conversation log.

Payload:
    turn (Turn): The appended, immutable Turn
"""

TURN_REPLACED = "TURN_REPLACED"
"""
Dispatched when a placeholder Turn is swapped for its final content.

Payload:
    turn (Turn): The Turn now occupying the placeholder's sequence number
    previous (Turn): The placeholder that was replaced
"""

CONVERSATION_CLEARED = "CONVERSATION_CLEARED"
"""
Dispatched after the conversation log has been emptied.

Payload:
    removed_turns (int): Number of Turns that were discarded
"""

# Request dispatcher events
DISPATCHER_STATE_CHANGED = "DISPATCHER_STATE_CHANGED"
"""
Dispatched on every request dispatcher state transition.

Payload:
    state (DispatcherState): The new state
    previous_state (DispatcherState): The state being left
    request_id (str, optional): Identifier of the request driving the transition
"""

# Backend diagnostics
BACKEND_ERROR = "BACKEND_ERROR"
"""
Dispatched when a backend call fails or times out.

Payload:
    request_id (str): Identifier of the failed request
    message (str): Diagnostic description of the failure
    error_type (str): Exception class name
"""
