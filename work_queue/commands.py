"""
/queue command dispatcher.

Maps one subcommand per queue or workflow operation:
- add, remove, update, details, clear, list, load  - queue editing
- start, next, done, skip, run                      - workflow transitions
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from work_queue.controller import WorkflowController
from work_queue.interfaces import ReportSink
from work_queue.models import ChatMessage, MessageRole, WorkItem
from work_queue.prompt_files import DEFAULT_PATTERN, find_prompt_files, load_prompt_file


logger = logging.getLogger(__name__)


def help() -> List[str]:
    """Usage lines of the /queue command."""
    return [
        "/queue [add|remove|update|details|clear|list|load|start|next|run|skip|done] [args...]",
        "  - With no arguments: shows command help",
        "  - add <prompt>: Add a new prompt to the end of the queue",
        "  - remove <index>: Remove the prompt at the given zero-based index",
        "  - update <index> <prompt>: Replace the prompt at given index",
        "  - details <index>: Show the full queue item at the given index",
        "  - clear: Remove all prompts from the queue",
        "  - list: Display all queued prompts with their indices",
        "  - load <path>: Add a prompt file, or every task-*.md file in a directory",
        "  - start: Begin queue processing",
        "  - next: Load the next queued item (does not execute it)",
        "  - run: Execute the currently loaded queued prompt",
        "  - skip: Skip current item and re-add to end of queue",
        "  - done: End queue processing and restore previous state",
    ]


class QueueCommand:
    """
    Dispatches /queue subcommands to a WorkflowController.

    All problems are reported through the sink; nothing here raises for
    bad user input.
    """

    def __init__(self, controller: WorkflowController, reporter: ReportSink, patterns: Optional[List[str]] = None):
        self.controller = controller
        self.reporter = reporter
        self.patterns = patterns or [DEFAULT_PATTERN]

    @property
    def queue(self):
        return self.controller.queue

    async def execute(self, remainder: Optional[str]) -> None:
        """
        Run one /queue subcommand.

        Args:
            remainder: Text after "/queue", e.g. "add fix the tests"
        """
        parts = (remainder or "").strip().split(None, 1)
        action = parts[0] if parts else ""
        rest = parts[1] if len(parts) > 1 else ""

        logger.debug(f"/queue {action} {rest}".rstrip())

        if action == "add":
            self._add(rest)
        elif action == "remove":
            self._remove(rest)
        elif action == "update":
            self._update(rest)
        elif action == "details":
            self._details(rest)
        elif action == "clear":
            self.queue.clear()
            self.reporter.report_line("Queue cleared!")
        elif action == "list":
            self._list()
        elif action == "load":
            self._load(rest)
        elif action == "start":
            self.controller.start()
        elif action == "next":
            self.controller.next()
        elif action == "done":
            self.controller.done()
        elif action == "skip":
            self.controller.skip()
        elif action == "run":
            result = await self.controller.run()
            if result is not None and result.output:
                self.reporter.report_line(result.output)
        else:
            for line in help():
                self.reporter.report_line(line)

    def enqueue_files(self, paths: List[Path]) -> Tuple[int, List[Path]]:
        """
        Add prompt files to the queue.

        Every file that is not queued is reported, whether it failed to
        load or the queue was full.

        Returns:
            (number of files queued, files that were not queued)
        """
        added = 0
        rejected = []
        for path in paths:
            try:
                name, input = load_prompt_file(path)
            except (OSError, ValueError) as e:
                self.reporter.report_error(f"Could not load {path}: {e}")
                rejected.append(path)
                continue

            if not self.controller.add(name, input):
                rejected.append(path)
                continue
            added += 1
            logger.info(f"[{name}] Queued from {Path(path).name}")

        return added, rejected

    # Subcommands

    def _add(self, prompt: str) -> None:
        if not prompt:
            self.reporter.report_error("Usage: /queue add <prompt>")
            return

        if self.controller.add(prompt, [ChatMessage(role=MessageRole.USER, content=prompt)]):
            self.reporter.report_line(f"Added to queue. Queue length: {self.queue.size()}")

    def _parse_index(self, text: str, usage: str) -> Optional[int]:
        """Parse a zero-based index, reporting usage when it is invalid."""
        try:
            idx = int(text.split(None, 1)[0]) if text else -1
        except ValueError:
            idx = -1

        if idx < 0 or idx >= self.queue.size():
            self.reporter.report_error(f"Usage: /queue {usage}  (index starts from 0)")
            return None
        return idx

    def _remove(self, args: str) -> None:
        idx = self._parse_index(args, "remove <index>")
        if idx is None:
            return

        removed = self.queue.remove_range(idx, 1)
        self.reporter.report_line(
            f"Removed \"{removed[0].name}\" from queue. Remaining: {self.queue.size()}"
        )

    def _update(self, args: str) -> None:
        parts = args.split(None, 1)
        prompt = parts[1].strip() if len(parts) > 1 else ""
        idx = self._parse_index(args, "update <index> <prompt>")
        if idx is None:
            return
        if not prompt:
            self.reporter.report_error("Usage: /queue update <index> <prompt>  (index starts from 0)")
            return

        old = self.queue.get(idx)
        replacement = WorkItem(
            name=prompt,
            input=[ChatMessage(role=MessageRole.USER, content=prompt)],
            snapshot_message=old.snapshot_message,
        )
        self.queue.remove_range(idx, 1, replacement)
        self.reporter.report_line(f"Updated queue item [{idx}]: \"{old.name}\" -> \"{prompt}\"")

    def _details(self, args: str) -> None:
        idx = self._parse_index(args, "details <index>")
        if idx is None:
            return

        item = self.queue.get(idx)
        self.reporter.report_line("Queue item details:")
        for line in json.dumps(item.model_dump(mode="json"), indent=2, default=str).splitlines():
            self.reporter.report_line(line)

    def _list(self) -> None:
        if self.queue.is_empty():
            self.reporter.report_line("Queue is empty.")
            return

        self.reporter.report_line("Queue contents:")
        for i, item in enumerate(self.queue.snapshot_all()):
            self.reporter.report_line(f"[{i}] {item.name}")

    def _load(self, args: str) -> None:
        if not args:
            self.reporter.report_error("Usage: /queue load <file-or-directory>")
            return

        path = Path(args.strip()).expanduser()
        if path.is_dir():
            paths = []
            for pattern in self.patterns:
                paths.extend(p for p in find_prompt_files(path, pattern) if p not in paths)
            paths.sort(key=lambda p: p.name)
        elif path.is_file():
            paths = [path]
        else:
            self.reporter.report_error(f"No such file or directory: {path}")
            return

        if not paths:
            self.reporter.report_line(f"No prompt files found in {path}")
            return

        added, _ = self.enqueue_files(paths)
        self.reporter.report_line(
            f"Loaded {added} prompt file(s). Queue length: {self.queue.size()}"
        )
