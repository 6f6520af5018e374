import logging
from typing import Dict, List, Optional, Tuple

from src.hyperbeam.models.turn import Sender, Turn

logger = logging.getLogger(__name__)

FIRST_SEQUENCE = 1


class ConversationLog:
    """
    Append-only transcript of the conversation.

    Sequence numbers start at 1 and restart at 1 after ``clear()``. Turns are
    never removed individually or reordered; ``replace`` swaps the content of
    an existing Turn while keeping its sequence and position.
    """

    def __init__(self) -> None:
        self._turns: List[Turn] = []
        self._index_by_sequence: Dict[int, int] = {}
        self._next_sequence = FIRST_SEQUENCE

    def append(self, sender: Sender, content: str) -> Turn:
        turn = Turn(sender=sender, content=content, sequence=self._next_sequence)
        self._index_by_sequence[turn.sequence] = len(self._turns)
        self._turns.append(turn)
        self._next_sequence += 1
        return turn

    def replace(self, sequence: int, content: str) -> Turn:
        """
        Swap the Turn at ``sequence`` for one with new content.

        Raises:
            KeyError: If no Turn with that sequence is in the log.
        """
        index = self._index_by_sequence[sequence]
        previous = self._turns[index]
        turn = previous.model_copy(update={"content": content})
        self._turns[index] = turn
        return turn

    def get(self, sequence: int) -> Optional[Turn]:
        index = self._index_by_sequence.get(sequence)
        return None if index is None else self._turns[index]

    def all(self) -> Tuple[Turn, ...]:
        """Snapshot of every Turn in transcript order."""
        return tuple(self._turns)

    def last(self) -> Optional[Turn]:
        return self._turns[-1] if self._turns else None

    def clear(self) -> int:
        """Empty the log and restart numbering; returns how many Turns were dropped."""
        removed = len(self._turns)
        self._turns = []
        self._index_by_sequence = {}
        self._next_sequence = FIRST_SEQUENCE
        logger.debug("Conversation log cleared (%d turns removed).", removed)
        return removed

    def __len__(self) -> int:
        return len(self._turns)
