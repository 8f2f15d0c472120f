"""Standard MIDI file support."""

from stemsplit.formats.smf.reader import MidiReader
from stemsplit.formats.smf.writer import MidiWriter

__all__ = ["MidiReader", "MidiWriter"]
