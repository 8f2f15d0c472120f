"""
Rule data model.

A rule table row is either a program-change rule (both note fields are
-999) or a note-manipulation rule (specific remap, general shift, or
layering).
"""

from dataclasses import dataclass, field
from enum import Enum

# Sentinel values used by the rule table
PROGRAM_CHANGE_NOTE = -999
ALL_NOTES = -1
ANY_PROGRAM = -1


class ChannelType(Enum):
    """Content type of a segment, a note, or an output track."""

    DRUM = "DRUM"
    MELODIC = "MELODIC"
    GLOBAL = "GLOBAL"  # reserved for channel-independent events

    @classmethod
    def from_token(cls, token: str) -> "ChannelType":
        """
        Parse a rule table channel type token (case-insensitive).

        Only DRUM and MELODIC may appear in a rule table.

        Raises:
            ValueError: If the token is not DRUM or MELODIC
        """
        value = token.strip().upper()
        if value == cls.DRUM.value:
            return cls.DRUM
        if value == cls.MELODIC.value:
            return cls.MELODIC
        raise ValueError(f"Unknown channel type: '{token.strip()}' (expected DRUM or MELODIC)")


@dataclass(frozen=True)
class Rule:
    """
    A single row of the rule table.

    Attributes:
        original_program: Program the rule applies to (0-127, or -1)
        remapped_program: Program written instead (0-127, or -1)
        original_note: Specific note (0-127), -1 for all notes, -999 for a
            program-change rule
        remapped_note_or_offset: Target note for a specific rule, signed
            offset for general rules, -999 for a program-change rule
        layered: Whether the rule adds a layered note instead of shifting
        channel_type: DRUM or MELODIC
        line: Source line in the rule table (not part of equality)
    """

    original_program: int
    remapped_program: int
    original_note: int
    remapped_note_or_offset: int
    layered: bool
    channel_type: ChannelType
    line: int = field(default=0, compare=False)

    @property
    def is_program_change(self) -> bool:
        return (
            self.original_note == PROGRAM_CHANGE_NOTE
            and self.remapped_note_or_offset == PROGRAM_CHANGE_NOTE
        )

    @property
    def is_note_manipulation(self) -> bool:
        return not self.is_program_change

    @property
    def is_specific(self) -> bool:
        """Remaps one particular note to a target note."""
        return self.is_note_manipulation and 0 <= self.original_note <= 127

    @property
    def is_general_shift(self) -> bool:
        """Shifts every note by an offset."""
        return self.is_note_manipulation and self.original_note == ALL_NOTES and not self.layered

    @property
    def is_layering(self) -> bool:
        """Adds an extra note at an offset from every note."""
        return self.is_note_manipulation and self.original_note == ALL_NOTES and self.layered

    def describe(self) -> str:
        """Short human-readable description used in logs and tables."""
        kind = self.channel_type.value
        if self.is_program_change:
            return f"P{self.original_program} -> P{self.remapped_program} [{kind}]"
        if self.is_specific:
            return (
                f"P{self.original_program} note {self.original_note} -> "
                f"{self.remapped_note_or_offset} [{kind}]"
            )
        action = "layer" if self.layered else "shift"
        return f"P{self.original_program} {action} {self.remapped_note_or_offset:+d} [{kind}]"
