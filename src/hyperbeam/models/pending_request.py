import uuid
from enum import Enum

from pydantic import BaseModel, Field

from src.hyperbeam.models.context_snapshot import ContextSnapshot


class DispatcherState(str, Enum):
    """Lifecycle states of the request dispatcher."""

    IDLE = "idle"
    BUILDING = "building"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    FAILED = "failed"


class RequestState(str, Enum):
    """States a single PendingRequest moves through."""

    BUILDING = "building"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    FAILED = "failed"


class PendingRequest(BaseModel):
    """
    The one request a conversation may have outstanding.

    Attributes:
        id: Opaque token identifying the request.
        prompt: The user prompt sent to the backend.
        context: Snapshot captured when the request was submitted.
        state: Where the request is in its lifecycle.
        placeholder_sequence: Sequence of the "thinking" Turn awaiting replacement.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    prompt: str
    context: ContextSnapshot = Field(default_factory=ContextSnapshot)
    state: RequestState = RequestState.BUILDING
    placeholder_sequence: int = 0
