"""Utility functions for stemsplit."""

from stemsplit.utils.gm_names import get_track_name, get_instrument_name, get_drum_kit_name
from stemsplit.utils.markers import replace_loop_brackets
from stemsplit.utils.validation import ValidationError, in_midi_range

__all__ = [
    "get_track_name",
    "get_instrument_name",
    "get_drum_kit_name",
    "replace_loop_brackets",
    "ValidationError",
    "in_midi_range",
]
