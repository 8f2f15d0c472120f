"""
stemsplit - MIDI program-change stem splitter and remapper.

Splits a MIDI sequence into one track per program-change "stem" and
channel, remapping programs and notes from a CSV rule table. Melodic
content stays on its channel; percussion content moves to the drum
channel (MIDI channel 10).

Example usage:
    from stemsplit import process_file

    result = process_file("song.mid", "out/", "rules.csv")
    print(f"{result.tracks_written} tracks, {result.warnings} warnings")
"""

import logging

__version__ = "0.1.0"
__author__ = "stemsplit Contributors"

from stemsplit.engine.assembler import SequenceAssembler
from stemsplit.errors import FatalLoadError, FatalWriteError, StemSplitError
from stemsplit.models.rule import ChannelType, Rule
from stemsplit.models.settings import SplitterSettings
from stemsplit.models.track_key import TrackKey
from stemsplit.pipeline import ProcessResult, process_file, process_files
from stemsplit.report import Issue, IssueKind, ProcessingReport
from stemsplit.rules.index import RuleIndex
from stemsplit.rules.repository import RuleRepository

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "SequenceAssembler",
    "StemSplitError",
    "FatalLoadError",
    "FatalWriteError",
    "ChannelType",
    "Rule",
    "SplitterSettings",
    "TrackKey",
    "ProcessResult",
    "process_file",
    "process_files",
    "Issue",
    "IssueKind",
    "ProcessingReport",
    "RuleIndex",
    "RuleRepository",
]
