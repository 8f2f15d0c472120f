"""Test configuration and fixtures."""

import sys
from pathlib import Path

import mido
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from stemsplit.models.context import ChannelContext, RemapInfo
from stemsplit.models.rule import ChannelType
from stemsplit.models.settings import SplitterSettings
from stemsplit.report import ProcessingReport
from stemsplit.rules.repository import RuleRepository

HEADER = (
    "TrackName,OriginalProgramChange,RemappedProgramChange,OriginalNote,"
    "RemappedNoteOrOffset,LayeredNotes,ChannelType"
)


def rule_table(*rows):
    """CSV text with a header row followed by rows."""
    return "\n".join((HEADER,) + rows) + "\n"


@pytest.fixture
def settings():
    """Default run settings (drum channel 9)."""
    return SplitterSettings()


@pytest.fixture
def report():
    """Empty processing report."""
    return ProcessingReport()


@pytest.fixture
def build_index():
    """Return a factory building a RuleIndex from CSV rows."""

    def _build(*rows, report=None):
        return RuleRepository(report).load(rule_table(*rows))

    return _build


@pytest.fixture
def empty_index(build_index):
    """Rule index with no rules (identity remapping)."""
    return build_index()


@pytest.fixture
def rules_file(tmp_path):
    """Return a factory writing CSV rows to a rule table file."""

    def _write(*rows, name="rules.csv"):
        path = tmp_path / name
        path.write_text(rule_table(*rows), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_midi():
    """Return a factory building a MidiFile, one message list per track."""

    def _make(*tracks, ticks_per_beat=480):
        midi = mido.MidiFile(type=1, ticks_per_beat=ticks_per_beat)
        for messages in tracks:
            track = mido.MidiTrack()
            track.extend(messages)
            midi.tracks.append(track)
        return midi

    return _make


@pytest.fixture
def midi_file(tmp_path, make_midi):
    """Return a factory saving a MidiFile to tmp_path."""

    def _save(*tracks, name="song.mid"):
        path = tmp_path / name
        make_midi(*tracks).save(path)
        return path

    return _save


@pytest.fixture
def context():
    """Return a factory building a ChannelContext."""

    def _context(channel=0, original=0, remapped=None, channel_type=ChannelType.MELODIC, **kwargs):
        if remapped is None:
            remapped = original
        return ChannelContext(
            channel=channel,
            active_remap=RemapInfo(original, remapped, channel_type),
            **kwargs,
        )

    return _context


def absolute_events(track):
    """(tick, message) pairs of a track with absolute ticks."""
    tick = 0
    events = []
    for msg in track:
        tick += msg.time
        events.append((tick, msg))
    return events


def track_name(track):
    """Name of a track from its first track_name meta."""
    for msg in track:
        if msg.type == "track_name":
            return msg.name
    return None


def note_events(midi):
    """Sorted (tick, type, channel, note, velocity) of every note message in a file."""
    events = []
    for track in midi.tracks:
        for tick, msg in absolute_events(track):
            if msg.type in ("note_on", "note_off"):
                events.append((tick, msg.type, msg.channel, msg.note, msg.velocity))
    return sorted(events)


@pytest.fixture
def helpers():
    """Access to the track inspection helpers."""

    class Helpers:
        absolute_events = staticmethod(absolute_events)
        track_name = staticmethod(track_name)
        note_events = staticmethod(note_events)

    return Helpers
