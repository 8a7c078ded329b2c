"""
In-memory conversation history.

Every change produces a new immutable snapshot chained to the one before it,
so any snapshot handed out stays valid and can be restored later.
"""

import uuid
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from work_queue.models import ChatMessage


class ConversationSnapshot(BaseModel):
    """Immutable state of the conversation at one point in time."""

    snapshot_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    parent_id: Optional[str] = None
    messages: Tuple[ChatMessage, ...] = ()

    model_config = ConfigDict(frozen=True)


class ChatHistory:
    """
    Conversation store holding the active snapshot.

    A current snapshot of None is an empty conversation.
    """

    def __init__(self, instructions: Optional[str] = None):
        self.instructions = instructions
        self._current: Optional[ConversationSnapshot] = None

    def get_current_snapshot(self) -> Optional[ConversationSnapshot]:
        return self._current

    def set_current_snapshot(self, snapshot: Optional[ConversationSnapshot]) -> None:
        self._current = snapshot

    def get_instructions(self) -> Optional[str]:
        return self.instructions

    def messages(self) -> List[ChatMessage]:
        """Messages of the active conversation, oldest first."""
        if self._current is None:
            return []
        return list(self._current.messages)

    def append(self, messages: List[ChatMessage]) -> ConversationSnapshot:
        """
        Append messages to the active conversation.

        Returns:
            The new active snapshot
        """
        parent = self._current
        snapshot = ConversationSnapshot(
            parent_id=parent.snapshot_id if parent else None,
            messages=(parent.messages if parent else ()) + tuple(messages),
        )
        self._current = snapshot
        return snapshot
