"""
Per-channel state tracked while a sequence is assembled.
"""

from dataclasses import dataclass, replace
from typing import Tuple, Union

from stemsplit.models.rule import ChannelType


@dataclass(frozen=True)
class RemapInfo:
    """
    The program context that is active on a channel.

    Two RemapInfo values are equal when all three fields are equal; a
    program change that resolves to an equal value does not start a new
    segment.
    """

    original_program: int
    remapped_program: int
    channel_type: ChannelType


@dataclass
class ChannelContext:
    """
    Mutable state of one original MIDI channel during one run.

    Attributes:
        channel: Original channel (0-15)
        active_remap: Program context of the current segment
        segment_index: Incremented each time a program change resolves to a
            different RemapInfo
        bank_msb: Last bank select MSB (CC#0) value
        bank_lsb: Last bank select LSB (CC#32) value
    """

    channel: int
    active_remap: RemapInfo
    segment_index: int = 0
    bank_msb: int = 0
    bank_lsb: int = 0

    @property
    def channel_type(self) -> ChannelType:
        return self.active_remap.channel_type

    @property
    def remapped_program(self) -> int:
        return self.active_remap.remapped_program

    @property
    def program_key(self) -> int:
        """Program used to look up note-manipulation rules."""
        return self.active_remap.original_program

    def advance(self, remap: RemapInfo) -> Tuple["ChannelContext", bool]:
        """
        Return a copy of this context with remap active.

        Returns:
            (new context, True if remap differs from the current context and
            the segment index was incremented)
        """
        if remap == self.active_remap:
            return replace(self, active_remap=remap), False
        return replace(self, active_remap=remap, segment_index=self.segment_index + 1), True


class Unseen:
    """State of a channel before its first event."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "Unseen()"


@dataclass
class Active:
    """State of a channel once its first event has been processed."""

    context: ChannelContext


ChannelState = Union[Unseen, Active]

UNSEEN = Unseen()

