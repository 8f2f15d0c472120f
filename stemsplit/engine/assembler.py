"""
Sequence assembler.

Drives one processing run over a MIDI file:

1. Prescan every track for the first explicit program change per channel.
2. Walk the tracks in order, and the events of each track in order.
3. Dispatch each event:
   - bank select (CC#0 / CC#32) updates the channel's bank accumulators
   - program change -> handle_program_change
   - note on / note off -> transform_note
   - other channel messages are routed with the channel's current context
   - marker text has its loop brackets replaced
   - meta, SysEx and system messages go to the global track
4. Terminate every output track.

A channel moves from Unseen to Active on its first event, exactly once.
"""

import logging
from typing import Dict, Optional

import mido

from stemsplit.engine.channel_pool import MelodicChannelPool
from stemsplit.engine.multiplexer import TrackMultiplexer
from stemsplit.engine.note_transform import NOTE_MESSAGE_TYPES, transform_note
from stemsplit.engine.program_change import (
    effective_channel,
    handle_program_change,
    initial_context,
)
from stemsplit.formats.smf.writer import MidiWriter
from stemsplit.models.context import UNSEEN, Active, ChannelContext, ChannelState, Unseen
from stemsplit.models.settings import SplitterSettings
from stemsplit.models.track_key import TrackKey
from stemsplit.report import ProcessingReport
from stemsplit.rules.index import RuleIndex
from stemsplit.utils.markers import MARKER_META_TYPES, replace_loop_brackets

logger = logging.getLogger(__name__)

BANK_SELECT_MSB = 0
BANK_SELECT_LSB = 32

PROGRESS_INTERVAL = 1000


def prescan_first_programs(midi_file: mido.MidiFile) -> Dict[int, int]:
    """
    Find the first explicit program change of every channel.

    Tracks are scanned in file order and events in track order, so the
    first program change found wins even if a later track has an earlier
    tick.

    Returns:
        Mapping of channel (0-15) to program number
    """
    first: Dict[int, int] = {}
    for track in midi_file.tracks:
        for msg in track:
            if msg.type == "program_change" and msg.channel not in first:
                first[msg.channel] = msg.program
    return first


class SequenceAssembler:
    """
    Splits and remaps one MIDI sequence into a new multi-track sequence.

    The rule index is shared read-only; channel states, the melodic
    channel pool and the track multiplexer are created fresh for every
    call to assemble().

    Example:
        assembler = SequenceAssembler(index)
        output = assembler.assemble(mido.MidiFile("song.mid"))
        output.save("song_split_remapped.mid")
    """

    def __init__(
        self,
        index: RuleIndex,
        settings: Optional[SplitterSettings] = None,
        report: Optional[ProcessingReport] = None,
    ):
        self.index = index
        self.settings = settings or SplitterSettings()
        self.report = report if report is not None else ProcessingReport()
        self._reset()

    def _reset(self) -> None:
        self.states: Dict[int, ChannelState] = {}
        self.first_programs: Dict[int, int] = {}
        self.pool = MelodicChannelPool(self.settings.drum_channel, self.settings.max_channel)
        self.multiplexer = TrackMultiplexer(self.settings.drum_channel)
        self.events_processed = 0

    def state(self, channel: int) -> ChannelState:
        """Current state of an original channel."""
        return self.states.get(channel, UNSEEN)

    @property
    def contexts(self) -> Dict[int, ChannelState]:
        """States of every channel seen in the last run."""
        return dict(self.states)

    def context(self, channel: int) -> Optional[ChannelContext]:
        """Active context of a channel, or None while the channel is unseen."""
        state = self.state(channel)
        if isinstance(state, Active):
            return state.context
        return None

    def assemble(self, midi_file: mido.MidiFile) -> mido.MidiFile:
        """
        Process a sequence.

        Args:
            midi_file: Input sequence

        Returns:
            New sequence with the same ticks_per_beat as the input
        """
        self._reset()
        self.first_programs = prescan_first_programs(midi_file)

        track_count = len(midi_file.tracks)
        logger.info("Original sequence has %d tracks", track_count)
        logger.info("Tick resolution: %d", midi_file.ticks_per_beat)

        for track_index, track in enumerate(midi_file.tracks):
            logger.info("Processing original track %d of %d...", track_index + 1, track_count)
            tick = 0
            for event_number, msg in enumerate(track):
                tick += msg.time
                if event_number and event_number % PROGRESS_INTERVAL == 0:
                    logger.debug("Processed %d events in current track...", event_number)
                self._dispatch(msg, tick)
                self.events_processed += 1

        tracks = self.multiplexer.finalize()
        output = mido.MidiFile(
            type=MidiWriter.file_type_for(len(tracks)), ticks_per_beat=midi_file.ticks_per_beat
        )
        output.tracks.extend(tracks)

        if self.report.event_issues:
            logger.warning(
                "Encountered %d event warnings during processing", len(self.report.event_issues)
            )
        logger.info(
            "Assembled %d output tracks from %d events", len(tracks), self.events_processed
        )
        return output

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _dispatch(self, msg, tick: int) -> None:
        if msg.is_meta:
            self._meta_message(msg, tick)
        elif hasattr(msg, "channel"):
            self._channel_message(msg, tick)
        else:
            # SysEx and system common/real-time messages
            self.multiplexer.add(TrackKey.global_key(), tick, msg.copy(time=0))

    def _meta_message(self, msg: mido.MetaMessage, tick: int) -> None:
        if msg.type == "end_of_track":
            return

        if msg.type in MARKER_META_TYPES:
            text = replace_loop_brackets(
                msg.text, self.settings.loop_start_token, self.settings.loop_end_token
            )
            if text != msg.text:
                logger.debug("Marker text modified: '%s' -> '%s' at tick %d", msg.text, text, tick)
                msg = msg.copy(text=text)

        self.multiplexer.add(TrackKey.global_key(), tick, msg.copy(time=0))

    def _activate(self, channel: int) -> ChannelContext:
        """Return the channel's context, initialising it on the first event."""
        state = self.state(channel)
        if not isinstance(state, Unseen):
            return state.context

        if channel in self.first_programs:
            program = self.first_programs[channel]
            logger.debug("First explicit PC for ch %d is P%d", channel + 1, program)
        else:
            program = 0
            logger.debug("No explicit PC found for ch %d, using program 0", channel + 1)

        context = initial_context(program, channel, self.index, self.settings)
        self.states[channel] = Active(context)
        logger.debug(
            "First event on ch %d. Initial context: orig P%d, remap P%d, type %s",
            channel + 1,
            context.active_remap.original_program,
            context.active_remap.remapped_program,
            context.channel_type.value,
        )
        return context

    def _channel_message(self, msg: mido.Message, tick: int) -> None:
        channel = msg.channel
        context = self._activate(channel)
        msg = msg.copy(time=0)

        if msg.type == "control_change":
            if msg.control == BANK_SELECT_MSB:
                context.bank_msb = msg.value
            elif msg.control == BANK_SELECT_LSB:
                context.bank_lsb = msg.value

        if msg.type == "program_change":
            result = handle_program_change(msg, tick, context, self.index, self.settings)
            self.states[channel] = Active(result.context)
            self.report.extend(result.issues)
            self.multiplexer.add(result.key, tick, result.message)

        elif msg.type in NOTE_MESSAGE_TYPES:
            result = transform_note(msg, tick, context, self.index, self.pool, self.settings)
            self.report.extend(result.issues)
            track = self.multiplexer.get_or_create(result.key)
            for out in result.messages:
                track.add(tick, out)

        else:
            target = effective_channel(channel, context.channel_type, self.settings)
            if target != channel:
                msg = msg.copy(channel=target)
            key = TrackKey(
                context.remapped_program, target, context.channel_type, context.segment_index
            )
            self.multiplexer.add(key, tick, msg)
