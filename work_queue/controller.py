"""
Workflow controller for the work queue.

Moves work items from the queue into a single "current item" slot and back,
swapping the conversation state in and out and checkpointing at every
workflow boundary.

States:
- idle     - no run active (initial, and after every run ends)
- running  - a run is active; at most one item is loaded for execution
"""

import logging
from typing import List, Optional

from work_queue.interfaces import CheckpointFacility, ConversationStore, ExecutionEngine, ReportSink
from work_queue.models import ChatMessage, ExecutionContext, ExecutionResult, WorkItem, WorkflowState
from work_queue.queue_store import WorkQueue


logger = logging.getLogger(__name__)


START_CHECKPOINT_LABEL = "Start of queue operation"
END_CHECKPOINT_LABEL = "End of queue operation"

NOT_STARTED_MESSAGE = "Queue not started. Use /queue start to start the queue."
NO_ITEM_MESSAGE = (
    "No queue item loaded. Use /queue next to load the next item in the queue, "
    "or /queue done to end the queue."
)


class WorkflowController:
    """
    State machine driving one workflow run at a time over a WorkQueue.

    Invalid actions never raise: they are rejected with a status line and
    leave the state untouched. Only checkpoint failures propagate.
    """

    def __init__(
        self,
        queue: WorkQueue,
        checkpoints: CheckpointFacility,
        conversation: ConversationStore,
        engine: ExecutionEngine,
        reporter: ReportSink,
        system_prompt: Optional[str] = None,
        model: str = "auto"
    ):
        """
        Initialize the controller.

        Args:
            queue: Queue of pending work items
            checkpoints: Facility that marks workflow boundaries
            conversation: Store of the active conversation state
            engine: Engine that executes prompts
            reporter: Sink for user-facing status lines
            system_prompt: System prompt handed to the engine
            model: Model handed to the engine
        """
        self.queue = queue
        self.checkpoints = checkpoints
        self.conversation = conversation
        self.engine = engine
        self.reporter = reporter
        self.system_prompt = system_prompt
        self.model = model

        self._state = WorkflowState()

    # State access

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def started(self) -> bool:
        return self._state.started

    @property
    def current_item(self) -> Optional[WorkItem]:
        return self._state.current_item

    @property
    def initial_message(self):
        return self._state.initial_message

    # Queue-level operations

    def add(self, name: str, input: List[ChatMessage]) -> bool:
        """
        Enqueue a prompt, capturing the conversation active right now.

        Returns:
            True if queued, False if the queue is full
        """
        item = WorkItem(
            name=name,
            input=input,
            snapshot_message=self.conversation.get_current_snapshot(),
        )
        if not self.queue.enqueue(item):
            logger.warning(f"[{name}] Rejected, queue is full ({self.queue.max_size} items)")
            self.reporter.report_error(
                f"Queue is full ({self.queue.max_size} items). \"{name}\" was not added."
            )
            return False

        logger.debug(f"[{name}] Enqueued, queue length {self.queue.size()}")
        return True

    # Workflow transitions

    def start(self) -> bool:
        """Begin a workflow run over the current queue contents."""
        if self.queue.is_empty():
            self.reporter.report_line("Queue is empty.")
            return False

        if self._state.started:
            self.reporter.report_line(
                "Queue already started. Use /queue next to load the next item in the queue, "
                "or /queue done to end the queue."
            )
            return False

        initial_message = self.conversation.get_current_snapshot()
        self.checkpoints.create_checkpoint(START_CHECKPOINT_LABEL)
        self._state.initial_message = initial_message
        self._state.started = True

        logger.info(f"Queue run started with {self.queue.size()} item(s)")
        self.reporter.report_line(
            "Queue started, use /queue next to start working on the first item in the queue, "
            "or /queue done to end the queue."
        )
        return True

    def next(self) -> bool:
        """Finish the current item and load the next one, ending the run when the queue is drained."""
        return self._advance(finish=False)

    def done(self) -> bool:
        """Finish the current item and end the run regardless of what is left in the queue."""
        return self._advance(finish=True)

    def skip(self) -> bool:
        """Return the current item to the tail of the queue."""
        if not self._state.started:
            self.reporter.report_line(NOT_STARTED_MESSAGE)
            return False

        item = self._state.current_item
        if item is None:
            self.reporter.report_line(NO_ITEM_MESSAGE)
            return False

        if not self.queue.enqueue(item):
            logger.warning(f"[{item.name}] Cannot skip, queue is full")
            self.reporter.report_error(
                f"Queue is full ({self.queue.max_size} items). "
                f"\"{item.name}\" remains the current item."
            )
            return False

        self._state.current_item = None
        logger.info(f"[{item.name}] Skipped, moved to end of queue")
        self.reporter.report_line(
            "Queue item skipped. It has been added to the end of the queue in case you would like "
            "to run it later, and you can use /queue next to load the next item in the queue, "
            "or /queue done to end the queue."
        )
        return True

    async def run(self) -> Optional[ExecutionResult]:
        """
        Execute the current item in its own conversation context.

        The item stays current whether or not execution succeeds, so a
        failed run can be retried or skipped.

        Returns:
            The execution result, or None if nothing ran or execution failed
        """
        if not self._state.started:
            self.reporter.report_line(NOT_STARTED_MESSAGE)
            return None

        item = self._state.current_item
        if item is None:
            self.reporter.report_line(NO_ITEM_MESSAGE)
            return None

        snapshot = item.snapshot_message
        if snapshot is None:
            snapshot = self._state.initial_message
        self.conversation.set_current_snapshot(snapshot)

        context = ExecutionContext(system_prompt=self.system_prompt, model=self.model)

        logger.info(f"[{item.name}] Running queued prompt")
        try:
            result = await self.engine.execute(item.input, context)
        except Exception as e:
            logger.error(f"[{item.name}] Execution failed: {type(e).__name__}: {e}")
            self.reporter.report_error(f"Error running queued prompt: {e}")
            return None

        logger.info(f"[{item.name}] Queued prompt finished")
        return result

    def _advance(self, finish: bool) -> bool:
        """Shared transition of next and done."""
        if not self._state.started:
            self.reporter.report_line(NOT_STARTED_MESSAGE)
            return False

        item = self._state.current_item
        if item is not None:
            self.checkpoints.create_checkpoint(f"{END_CHECKPOINT_LABEL}: {item.name}")

        if finish or self.queue.is_empty():
            self.conversation.set_current_snapshot(self._state.initial_message)
            self._state = WorkflowState()

            logger.info("Queue run ended" if finish else "Queue run complete")
            if finish:
                self.reporter.report_line("Restored chat state to preserved state.")
            else:
                self.reporter.report_line("Queue complete.")
            return True

        self.conversation.set_current_snapshot(None)
        new_item = self.queue.dequeue()
        self._state.current_item = new_item

        logger.info(f"[{new_item.name}] Loaded, {self.queue.size()} item(s) remaining")
        self.reporter.report_line(
            f"Queue Item loaded: {new_item.name} Use /queue run to run the queue item, "
            f"and /queue next|skip|done to move on to the next item."
        )
        return True
