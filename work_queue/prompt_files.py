"""
Prompt file loading.

Turns Markdown prompt documents (task-*.md) into queue entries.
"""

import re
from pathlib import Path
from typing import List, Tuple

from work_queue.models import ChatMessage, MessageRole


DEFAULT_PATTERN = "task-*.md"

_HEADING_RE = re.compile(r"^#\s+(?:Task:\s*)?(.+?)\s*$", re.MULTILINE)


def load_prompt_file(path: Path) -> Tuple[str, List[ChatMessage]]:
    """
    Read a prompt document.

    The name is the first level-one heading (a leading "Task:" is dropped),
    falling back to the file stem.

    Args:
        path: Prompt document

    Returns:
        (name, input) for the work item

    Raises:
        ValueError: If the file is empty
        OSError: If the file cannot be read
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")

    if not text.strip():
        raise ValueError(f"Prompt file is empty: {path}")

    match = _HEADING_RE.search(text)
    name = match.group(1) if match else path.stem

    return name, [ChatMessage(role=MessageRole.USER, content=text.strip())]


def find_prompt_files(directory: Path, pattern: str = DEFAULT_PATTERN) -> List[Path]:
    """
    List prompt documents in a directory.

    Returns:
        Matching files sorted by filename (task-YYYYMMDD-HHMMSS-* sorts chronologically)
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    return sorted(
        (p for p in directory.glob(pattern) if p.is_file()),
        key=lambda p: p.name
    )
