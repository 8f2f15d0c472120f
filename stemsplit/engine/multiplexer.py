"""
Output track multiplexer.

Maps TrackKeys to output tracks, creating and naming a track the first
time its key is seen. Tracks are written in creation order.
"""

import logging
from typing import Dict, List, Tuple

import mido

from stemsplit.models.track_key import TrackKey
from stemsplit.utils.gm_names import GLOBAL_TRACK_NAME, get_track_name

logger = logging.getLogger(__name__)


class OutputTrack:
    """
    One output track under construction.

    Events are stored with absolute ticks and an insertion counter so
    that events at the same tick keep the order they were added in.
    """

    def __init__(self, key: TrackKey, name: str):
        self.key = key
        self.name = name
        self._events: List[Tuple[int, int, mido.Message]] = []

    def add(self, tick: int, message) -> None:
        self._events.append((tick, len(self._events), message))

    @property
    def events(self) -> List[Tuple[int, object]]:
        """(tick, message) pairs in output order."""
        return [(tick, msg) for tick, _, msg in sorted(self._events, key=lambda e: (e[0], e[1]))]

    @property
    def last_tick(self) -> int:
        return max((tick for tick, _, _ in self._events), default=0)

    @property
    def has_end_of_track(self) -> bool:
        events = self.events
        return bool(events) and events[-1][1].type == "end_of_track"

    def __len__(self) -> int:
        return len(self._events)

    def to_midi_track(self) -> mido.MidiTrack:
        """Convert absolute ticks to delta times."""
        track = mido.MidiTrack()
        previous = 0
        for tick, message in self.events:
            track.append(message.copy(time=tick - previous))
            previous = tick
        return track


class TrackMultiplexer:
    """
    Get-or-create registry of output tracks keyed by TrackKey.

    Example:
        mux = TrackMultiplexer()
        mux.add(key, 480, message)
        tracks = mux.finalize()
    """

    def __init__(self, drum_channel: int = 9):
        self.drum_channel = drum_channel
        self._tracks: Dict[TrackKey, OutputTrack] = {}

    def track_name(self, key: TrackKey) -> str:
        """Name of the track for a key."""
        if key.is_global:
            return GLOBAL_TRACK_NAME
        return get_track_name(key.remapped_program, key.effective_channel, self.drum_channel)

    def get_or_create(self, key: TrackKey) -> OutputTrack:
        """
        Return the track for a key, creating it on first use.

        A new track starts with a track name meta event at tick 0.
        """
        track = self._tracks.get(key)
        if track is None:
            name = self.track_name(key)
            track = OutputTrack(key, name)
            track.add(0, mido.MetaMessage("track_name", name=name, time=0))
            self._tracks[key] = track
            logger.debug("Creating new track '%s' for %s", name, key)
        return track

    def add(self, key: TrackKey, tick: int, message) -> OutputTrack:
        """Route one message to the track for a key."""
        track = self.get_or_create(key)
        track.add(tick, message)
        return track

    @property
    def keys(self) -> List[TrackKey]:
        """Track keys in creation order."""
        return list(self._tracks)

    @property
    def tracks(self) -> List[OutputTrack]:
        """Tracks in creation order."""
        return list(self._tracks.values())

    def __contains__(self, key: TrackKey) -> bool:
        return key in self._tracks

    def __len__(self) -> int:
        return len(self._tracks)

    def finalize(self) -> List[mido.MidiTrack]:
        """
        Terminate every track and convert it to a mido track.

        A track without a final end-of-track event gets one at its last
        tick + 1 (tick 1 for an empty track).
        """
        result = []
        for track in self._tracks.values():
            if not track.has_end_of_track:
                end_tick = track.last_tick + 1 if len(track) else 1
                track.add(end_tick, mido.MetaMessage("end_of_track", time=0))
            result.append(track.to_midi_track())
        return result
