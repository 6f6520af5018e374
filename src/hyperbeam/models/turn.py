from enum import Enum

from pydantic import BaseModel, ConfigDict


class Sender(str, Enum):
    """Author of a Turn."""

    USER = "user"
    ASSISTANT = "assistant"


class Turn(BaseModel):
    """
    One message of the visible conversation.

    Turns are immutable; the conversation log hands the same instances to
    every subscriber.

    Attributes:
        sender: Who authored the message.
        content: Message text.
        sequence: Position in the transcript, strictly increasing within a log.
    """

    model_config = ConfigDict(frozen=True)

    sender: Sender
    content: str
    sequence: int
