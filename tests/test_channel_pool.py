"""Tests for the melodic channel pool."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from stemsplit.engine.channel_pool import MelodicChannelPool


class TestMelodicChannelPool:
    """Test cases for first-fit channel allocation."""

    def test_first_fit_skips_drum_channel(self):
        """Test allocation is ascending and never hands out the drum channel."""
        pool = MelodicChannelPool()
        allocated = [pool.allocate() for _ in range(15)]

        assert allocated == [0, 1, 2, 3, 4, 5, 6, 7, 8, 10, 11, 12, 13, 14, 15]
        assert 9 not in allocated

    def test_claimed_channels_skipped(self):
        """Test channels claimed by melodic content are not allocated."""
        pool = MelodicChannelPool()
        pool.claim(0)
        pool.claim(2)

        assert pool.allocate() == 1
        assert pool.allocate() == 3

    def test_exhaustion(self):
        """Test an exhausted pool returns None."""
        pool = MelodicChannelPool()
        for _ in range(15):
            pool.allocate()

        assert pool.exhausted
        assert pool.allocate() is None
        assert len(pool) == 15

    def test_never_released(self):
        """Test claimed channels stay claimed."""
        pool = MelodicChannelPool()
        first = pool.allocate()
        pool.claim(first)

        assert pool.is_claimed(first)
        assert pool.allocate() != first

    def test_claimed_sorted(self):
        """Test claimed channels are reported in ascending order."""
        pool = MelodicChannelPool()
        pool.claim(12)
        pool.claim(3)
        assert pool.claimed == (3, 12)

    def test_custom_drum_channel(self):
        """Test a different drum channel is skipped instead."""
        pool = MelodicChannelPool(drum_channel=0, max_channel=3)
        assert [pool.allocate() for _ in range(4)] == [1, 2, 3, None]
