"""User-facing output for queue status and errors."""

import logging
import sys


logger = logging.getLogger(__name__)


class ConsoleReporter:
    """Prints status lines to stdout and errors to stderr."""

    def __init__(self, out=None, err=None):
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def report_line(self, text: str) -> None:
        logger.debug(text)
        print(text, file=self.out)

    def report_error(self, text: str) -> None:
        logger.debug(f"error: {text}")
        print(f"❌ {text}", file=self.err)
