"""
Rule table loader.

Reads the 7-column CSV rule table:

    TrackName,OriginalProgramChange,RemappedProgramChange,OriginalNote,
    RemappedNoteOrOffset,LayeredNotes,ChannelType

The first row is a header. Malformed rows are skipped with a warning and
loading continues; the surviving rows are indexed into a RuleIndex.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from stemsplit.errors import FatalLoadError, RuleTableNotFoundError, RuleTableParseError
from stemsplit.models.rule import ChannelType, PROGRAM_CHANGE_NOTE, Rule
from stemsplit.report import ProcessingReport
from stemsplit.rules.index import RuleIndex
from stemsplit.utils.validation import (
    ValidationError,
    offset_in_typical_range,
    validate_original_note,
    validate_program,
)

logger = logging.getLogger(__name__)


class RuleRepository:
    """
    Loader for rule tables.

    Example:
        report = ProcessingReport()
        index = RuleRepository.read("rules.csv", report=report)
        print(f"{len(index)} rules, {report.warnings} warnings")
    """

    FIELD_COUNT = 7

    def __init__(self, report: Optional[ProcessingReport] = None):
        self.report = report if report is not None else ProcessingReport()
        self.skipped_rows: List[Tuple[int, str, str]] = []

    @classmethod
    def read(
        cls,
        filepath: Union[str, Path],
        report: Optional[ProcessingReport] = None,
        strict: bool = False,
    ) -> RuleIndex:
        """
        Read a rule table file.

        Args:
            filepath: Path to the CSV rule table
            report: Report receiving rule warnings
            strict: Raise RuleTableParseError if any row was skipped

        Returns:
            Indexed rules
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise RuleTableNotFoundError(f"Rule table not found: {filepath}")

        try:
            with open(filepath, "rb") as f:
                data = f.read()
        except OSError as e:
            raise FatalLoadError(f"Cannot read rule table {filepath}: {e}") from e

        logger.info("Loading rule table %s", filepath)
        return cls(report).load(data, strict=strict)

    def load(self, data: Union[bytes, str], strict: bool = False) -> RuleIndex:
        """
        Parse rule table contents.

        Args:
            data: Raw file contents
            strict: Raise RuleTableParseError if any row was skipped

        Returns:
            Indexed rules
        """
        text = self._decode(data)
        index = RuleIndex()
        self.skipped_rows = []

        lines = text.splitlines()
        for line_number, line in enumerate(lines[1:], start=2):
            if not line.strip():
                continue

            rule = self._parse_row(line, line_number)
            if rule is None:
                continue

            logger.debug("Line %d: %s", line_number, rule.describe())
            if not index._add(rule):
                self.report.rule_warning(
                    f"Redundant note manipulation rule for original program "
                    f"{rule.original_program}, original note {rule.original_note}. "
                    f"Skipping. Line: {line}",
                    line=line_number,
                )

        logger.info(
            "Loaded %d rules (%d program change, %d note manipulation), %d rows skipped",
            len(index),
            len(index.program_change_rules),
            len(index.note_manipulation_rules),
            len(self.skipped_rows),
        )
        logger.debug("%r", index)

        if strict and self.skipped_rows:
            raise RuleTableParseError(self.skipped_rows)

        return index

    def _decode(self, data: Union[bytes, str]) -> str:
        if isinstance(data, str):
            return data
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FatalLoadError(f"Rule table is not valid UTF-8 text: {e}") from e

    def _skip(self, line_number: int, reason: str, line: str) -> None:
        self.skipped_rows.append((line_number, reason, line))
        self.report.rule_warning(f"Skipping malformed line in CSV ({reason}): {line}", line=line_number)

    def _parse_row(self, line: str, line_number: int) -> Optional[Rule]:
        """Parse one row, or record why it was skipped and return None."""
        parts = line.split(",")
        if len(parts) < self.FIELD_COUNT:
            self._skip(line_number, f"too few columns, expected {self.FIELD_COUNT}", line)
            return None

        # parts[0] is the track name, which is not used
        try:
            original_program = int(parts[1].strip())
            remapped_program = int(parts[2].strip())
            original_note = int(parts[3].strip())
            remapped_note_or_offset = int(parts[4].strip())
        except ValueError as e:
            self._skip(line_number, f"number format error: {e}", line)
            return None

        layered = parts[5].strip().lower() == "true"

        try:
            channel_type = ChannelType.from_token(parts[6])
        except ValueError as e:
            self._skip(line_number, str(e), line)
            return None

        try:
            validate_program(original_program, "OriginalProgramChange")
            validate_program(remapped_program, "RemappedProgramChange")
            validate_original_note(original_note)
        except ValidationError as e:
            self._skip(line_number, str(e), line)
            return None

        if (
            original_note != PROGRAM_CHANGE_NOTE
            and remapped_note_or_offset != PROGRAM_CHANGE_NOTE
            and not offset_in_typical_range(remapped_note_or_offset)
        ):
            self.report.rule_warning(
                f"RemappedNoteOrOffset is outside typical range (-127 to 127) "
                f"for note manipulation: {line}",
                line=line_number,
            )

        return Rule(
            original_program=original_program,
            remapped_program=remapped_program,
            original_note=original_note,
            remapped_note_or_offset=remapped_note_or_offset,
            layered=layered,
            channel_type=channel_type,
            line=line_number,
        )
