"""
Exception types raised at the load and write boundaries.

Rule-level and event-level problems are never raised; they are collected
as issues in a ProcessingReport (see stemsplit.report).
"""

from typing import List, Optional, Tuple


class StemSplitError(Exception):
    """Base class for all stemsplit errors."""

    pass


class FatalLoadError(StemSplitError):
    """Raised when the rule table or the input sequence cannot be loaded."""

    pass


class RuleTableNotFoundError(FatalLoadError):
    """Raised when the rule table file does not exist."""

    pass


class RuleTableParseError(FatalLoadError):
    """
    Raised by a strict rule table load that skipped one or more rows.

    Attributes:
        skipped_rows: (line number, reason, raw line) for every rejected row
    """

    def __init__(self, skipped_rows: List[Tuple[int, str, str]], message: Optional[str] = None):
        self.skipped_rows = skipped_rows
        if message is None:
            lines = ", ".join(str(row[0]) for row in skipped_rows)
            message = f"Rule table has {len(skipped_rows)} invalid row(s) (lines: {lines})"
        super().__init__(message)


class MidiReadError(FatalLoadError):
    """Raised when an input MIDI file cannot be read."""

    pass


class FatalWriteError(StemSplitError):
    """Raised when the assembled sequence cannot be written."""

    pass
