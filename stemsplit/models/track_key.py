"""
Output track grouping key.
"""

from typing import NamedTuple

from stemsplit.models.rule import ChannelType

GLOBAL_CHANNEL = -1


class TrackKey(NamedTuple):
    """
    Identifies one output track.

    Two events with equal keys always land in the same output track.
    """

    remapped_program: int
    effective_channel: int
    channel_type: ChannelType
    segment_index: int

    @classmethod
    def global_key(cls) -> "TrackKey":
        """Reserved key for channel-independent meta and SysEx events."""
        return cls(0, GLOBAL_CHANNEL, ChannelType.GLOBAL, 0)

    @property
    def is_global(self) -> bool:
        return self.channel_type == ChannelType.GLOBAL

    def __str__(self) -> str:
        if self.is_global:
            return "GLOBAL"
        return (
            f"P{self.remapped_program} Ch {self.effective_channel + 1} "
            f"[{self.channel_type.value}] Segment {self.segment_index}"
        )
