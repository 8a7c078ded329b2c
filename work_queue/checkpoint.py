"""
Checkpoint log.

Records the conversation state at workflow boundaries so a bad queued task
can be rolled back without touching unrelated history.
"""

import logging
from pathlib import Path
from typing import List, Optional

from work_queue.atomic import AtomicFileWriter
from work_queue.interfaces import ConversationStore
from work_queue.models import Checkpoint


logger = logging.getLogger(__name__)


class CheckpointLog:
    """
    Checkpoint facility backed by an in-memory list.

    When a file is given, the whole log is rewritten atomically after
    every checkpoint. Write failures propagate to the caller.
    """

    def __init__(self, conversation: ConversationStore, checkpoint_file: Optional[Path] = None):
        """
        Initialize the checkpoint log.

        Args:
            conversation: Store whose current snapshot each checkpoint records
            checkpoint_file: Optional JSON file to persist the log to
        """
        self.conversation = conversation
        self.checkpoint_file = Path(checkpoint_file) if checkpoint_file else None
        self._checkpoints: List[Checkpoint] = []

    def create_checkpoint(self, label: str) -> Checkpoint:
        """Record a checkpoint of the current conversation state."""
        checkpoint = Checkpoint(
            label=label,
            snapshot=self.conversation.get_current_snapshot(),
        )
        self._checkpoints.append(checkpoint)
        logger.info(f"Checkpoint created: {label}")

        if self.checkpoint_file:
            self._save()

        return checkpoint

    def list_checkpoints(self) -> List[Checkpoint]:
        return list(self._checkpoints)

    def latest(self) -> Optional[Checkpoint]:
        return self._checkpoints[-1] if self._checkpoints else None

    def _save(self) -> None:
        """Write the log to the checkpoint file."""
        AtomicFileWriter.write_json(
            self.checkpoint_file,
            [checkpoint.model_dump(mode="json") for checkpoint in self._checkpoints],
            indent=2
        )
        logger.debug(f"Checkpoint log saved: {self.checkpoint_file}")
