"""
Standard MIDI file reader.
"""

import logging
from pathlib import Path
from typing import Union

import mido

from stemsplit.errors import MidiReadError

logger = logging.getLogger(__name__)


class MidiReader:
    """
    Reader for .mid / .midi files.

    Example:
        midi = MidiReader.read("song.mid")
        print(f"{len(midi.tracks)} tracks, {midi.ticks_per_beat} ticks per beat")
    """

    @classmethod
    def read(cls, filepath: Union[str, Path]) -> mido.MidiFile:
        """
        Read a MIDI file.

        Args:
            filepath: Path to the MIDI file

        Returns:
            Parsed mido.MidiFile

        Raises:
            MidiReadError: If the file is missing or is not a valid MIDI file
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise MidiReadError(f"File not found: {filepath}")

        try:
            midi = mido.MidiFile(filepath)
        except (OSError, EOFError, ValueError, KeyError) as e:
            raise MidiReadError(f"Cannot read MIDI file {filepath}: {e}") from e

        logger.debug(
            "Read %s: type %d, %d tracks, %d ticks per beat",
            filepath.name,
            midi.type,
            len(midi.tracks),
            midi.ticks_per_beat,
        )
        return midi
