"""
Standard MIDI file writer.
"""

import logging
from pathlib import Path
from typing import Union

import mido

from stemsplit.errors import FatalWriteError

logger = logging.getLogger(__name__)


class MidiWriter:
    """
    Writer for assembled sequences.

    A single-track sequence is written as type 0, anything else as type 1.
    """

    @staticmethod
    def file_type_for(track_count: int) -> int:
        """MIDI file type used for a given number of tracks."""
        return 0 if track_count == 1 else 1

    @classmethod
    def write(cls, midi: mido.MidiFile, filepath: Union[str, Path]) -> Path:
        """
        Write a sequence to disk.

        Args:
            midi: Sequence to write
            filepath: Output file path (parent directories are created)

        Returns:
            The path written

        Raises:
            FatalWriteError: If the sequence or the file cannot be written
        """
        filepath = Path(filepath)
        midi.type = cls.file_type_for(len(midi.tracks))

        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            midi.save(filepath)
        except (OSError, ValueError, TypeError) as e:
            raise FatalWriteError(f"Cannot write MIDI file {filepath}: {e}") from e

        logger.info("File generated with %d tracks: %s", len(midi.tracks), filepath)
        return filepath
