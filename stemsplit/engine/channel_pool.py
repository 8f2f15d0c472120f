"""
Melodic channel pool.

Tracks which channels carry melodic content during a run. A channel, once
claimed, stays claimed until the run ends.
"""

from typing import Iterator, Optional, Set, Tuple


class MelodicChannelPool:
    """
    First-fit allocator over the non-drum channels.

    Attributes:
        drum_channel: Channel never handed out (0-indexed)
        max_channel: Highest channel number (0-indexed)
    """

    def __init__(self, drum_channel: int = 9, max_channel: int = 15):
        self.drum_channel = drum_channel
        self.max_channel = max_channel
        self._claimed: Set[int] = set()

    def _candidates(self) -> Iterator[int]:
        yield from range(0, self.drum_channel)
        yield from range(self.drum_channel + 1, self.max_channel + 1)

    def allocate(self) -> Optional[int]:
        """
        Claim the lowest free channel, skipping the drum channel.

        Returns:
            The claimed channel, or None if every channel is taken
        """
        for channel in self._candidates():
            if channel not in self._claimed:
                self._claimed.add(channel)
                return channel
        return None

    def claim(self, channel: int) -> None:
        """Mark a channel as carrying melodic content."""
        self._claimed.add(channel)

    def is_claimed(self, channel: int) -> bool:
        return channel in self._claimed

    @property
    def claimed(self) -> Tuple[int, ...]:
        return tuple(sorted(self._claimed))

    @property
    def exhausted(self) -> bool:
        return all(channel in self._claimed for channel in self._candidates())

    def __len__(self) -> int:
        return len(self._claimed)
