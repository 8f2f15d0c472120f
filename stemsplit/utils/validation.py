"""
Range checks for rule table values and MIDI data bytes.
"""

from stemsplit.models.rule import ALL_NOTES, ANY_PROGRAM, PROGRAM_CHANGE_NOTE

MIDI_MIN = 0
MIDI_MAX = 127

# Soft limit for remapped note / offset values in note rules
OFFSET_LIMIT = 127


class ValidationError(Exception):
    """Raised when a rule table value is out of range."""

    pass


def in_midi_range(value: int) -> bool:
    """Check that a value fits a MIDI data byte (0-127)."""
    return MIDI_MIN <= value <= MIDI_MAX


def validate_program(value: int, name: str = "program") -> None:
    """
    Validate a rule table program field (0-127, or -1).

    Raises:
        ValidationError: If value is out of range
    """
    if value != ANY_PROGRAM and not in_midi_range(value):
        raise ValidationError(f"Invalid {name} (0-127 or -1 expected), got {value}")


def validate_original_note(value: int) -> None:
    """
    Validate a rule table OriginalNote field (0-127, -1 or -999).

    Raises:
        ValidationError: If value is out of range
    """
    if value not in (ALL_NOTES, PROGRAM_CHANGE_NOTE) and not in_midi_range(value):
        raise ValidationError(f"Invalid OriginalNote (0-127, -1, or -999 expected), got {value}")


def offset_in_typical_range(value: int) -> bool:
    """Check a remapped note / offset against the soft -127..127 limit."""
    return -OFFSET_LIMIT <= value <= OFFSET_LIMIT
