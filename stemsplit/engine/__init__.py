"""Remapping and splitting engine."""

from stemsplit.engine.assembler import SequenceAssembler, prescan_first_programs
from stemsplit.engine.channel_pool import MelodicChannelPool
from stemsplit.engine.multiplexer import OutputTrack, TrackMultiplexer
from stemsplit.engine.note_transform import NoteTransformResult, transform_note
from stemsplit.engine.program_change import ProgramChangeResult, handle_program_change

__all__ = [
    "SequenceAssembler",
    "prescan_first_programs",
    "MelodicChannelPool",
    "OutputTrack",
    "TrackMultiplexer",
    "NoteTransformResult",
    "transform_note",
    "ProgramChangeResult",
    "handle_program_change",
]
