"""
Note transformation.

Applies note-manipulation rules to a note-on/note-off message:

1. Specific remap - a rule for exactly this note (DRUM rules searched
   before MELODIC rules) replaces the note and decides its channel type.
2. General shift - without a specific remap, every general-shift rule of
   the segment's channel type offsets the note, cumulatively.
3. Layering - every layering rule adds an extra note at an offset from
   the original note, on a channel chosen by the rule's own type.

The primary note is then placed on the drum channel (DRUM) or kept on its
channel (MELODIC). Melodic notes that start on the drum channel are moved
to a free channel from the melodic pool.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import mido

from stemsplit.engine.channel_pool import MelodicChannelPool
from stemsplit.models.context import ChannelContext
from stemsplit.models.rule import ChannelType, Rule
from stemsplit.models.settings import SplitterSettings
from stemsplit.models.track_key import TrackKey
from stemsplit.report import Issue, IssueKind
from stemsplit.rules.index import RuleIndex
from stemsplit.utils.validation import in_midi_range

logger = logging.getLogger(__name__)

NOTE_MESSAGE_TYPES = ("note_on", "note_off")


@dataclass
class NoteTransformResult:
    """
    Outcome of transforming one note message.

    Attributes:
        primary: The transformed note message
        layered: Extra layered note messages (emitted before primary)
        key: Output track key of the primary message
        note_type: Effective channel type of the note
        issues: Event warnings raised by skipped steps
    """

    primary: mido.Message
    layered: List[mido.Message]
    key: TrackKey
    note_type: ChannelType
    issues: List[Issue] = field(default_factory=list)

    @property
    def messages(self) -> List[mido.Message]:
        """Messages in output order: layered notes first, then the primary."""
        return self.layered + [self.primary]


class _NoteStep:
    """Working state of one note transformation."""

    def __init__(self, message: mido.Message, tick: int):
        self.message = message
        self.tick = tick
        self.channel = message.channel
        self.issues: List[Issue] = []

    def warn(self, text: str) -> None:
        self.issues.append(Issue(IssueKind.EVENT, text, tick=self.tick, channel=self.channel))


def find_specific_rule(
    note: int, drum_rules: Tuple[Rule, ...], melodic_rules: Tuple[Rule, ...]
) -> Optional[Rule]:
    """First rule for exactly this note, DRUM rules before MELODIC rules."""
    for rule in drum_rules + melodic_rules:
        if rule.original_note == note:
            return rule
    return None


def apply_general_shifts(
    note: int, rules: Tuple[Rule, ...], step: Optional[_NoteStep] = None
) -> int:
    """
    Apply every general-shift rule cumulatively.

    A shift that would leave 0-127 is skipped; the remaining shifts still
    apply to the last valid note.
    """
    for rule in rules:
        if not rule.is_general_shift:
            continue
        shifted = note + rule.remapped_note_or_offset
        if in_midi_range(shifted):
            note = shifted
        elif step is not None:
            step.warn(
                f"All notes shift for note {note} results in out-of-range note: "
                f"{shifted}. Rule skipped."
            )
    return note


def _pool_channel(
    step: _NoteStep, pool: MelodicChannelPool, what: str, claim_fallback: bool
) -> int:
    allocated = pool.allocate()
    if allocated is not None:
        logger.debug(
            "%s remapped to MELODIC. Rechannelling from ch %d to ch %d",
            what,
            step.channel + 1,
            allocated + 1,
        )
        return allocated
    if claim_fallback:
        pool.claim(step.channel)
    step.warn(
        f"{what} remapped to MELODIC, but no available melodic channel found. "
        f"Keeping on original ch {step.channel + 1}."
    )
    return step.channel


def _layer_channel(
    rule: Rule, step: _NoteStep, pool: MelodicChannelPool, settings: SplitterSettings
) -> int:
    if rule.channel_type == ChannelType.DRUM:
        return settings.drum_channel
    if step.channel == settings.drum_channel:
        return _pool_channel(step, pool, "Layered note", claim_fallback=False)
    return step.channel


def _primary_channel(
    note_type: ChannelType, step: _NoteStep, pool: MelodicChannelPool, settings: SplitterSettings
) -> int:
    if note_type == ChannelType.DRUM:
        return settings.drum_channel
    if step.channel == settings.drum_channel:
        return _pool_channel(step, pool, "Note", claim_fallback=True)
    pool.claim(step.channel)
    return step.channel


def transform_note(
    message: mido.Message,
    tick: int,
    context: ChannelContext,
    index: RuleIndex,
    pool: MelodicChannelPool,
    settings: SplitterSettings,
) -> NoteTransformResult:
    """
    Transform a note-on or note-off message.

    Args:
        message: mido note_on / note_off message
        tick: Absolute tick of the message
        context: Active context of the message's channel
        index: Rule index
        pool: Melodic channel pool of the run (claimed channels are added)
        settings: Run settings

    Returns:
        NoteTransformResult with the primary and layered messages
    """
    step = _NoteStep(message, tick)
    note = message.note
    segment_type = context.channel_type
    program_key = context.program_key

    drum_rules = index.note_rules(ChannelType.DRUM, program_key)
    melodic_rules = index.note_rules(ChannelType.MELODIC, program_key)

    final_note = note
    note_type = segment_type
    specific_applied = False

    specific = find_specific_rule(note, drum_rules, melodic_rules)
    if specific is not None:
        target = specific.remapped_note_or_offset
        if in_midi_range(target):
            final_note = target
            note_type = specific.channel_type
            specific_applied = True
            logger.debug(
                "Specific note remap: %d -> %d (type %s)", note, final_note, note_type.value
            )
        else:
            step.warn(
                f"Specific note remapping for note {note} results in out-of-range "
                f"target note: {target}. Rule skipped."
            )

    if not specific_applied:
        shift_rules = drum_rules if segment_type == ChannelType.DRUM else melodic_rules
        final_note = apply_general_shifts(final_note, shift_rules, step)

    layered: List[mido.Message] = []
    for rule in drum_rules + melodic_rules:
        if not rule.is_layering:
            continue
        layered_note = note + rule.remapped_note_or_offset
        if not in_midi_range(layered_note):
            step.warn(
                f"Layering for note {note} results in out-of-range note: {layered_note}. "
                f"Layering rule skipped."
            )
            continue
        layer_channel = _layer_channel(rule, step, pool, settings)
        try:
            layered.append(message.copy(note=layered_note, channel=layer_channel))
        except (ValueError, TypeError) as e:
            step.warn(f"Error creating layered note {layered_note}: {e}")
            continue
        logger.debug(
            "Layering note %d -> %d on ch %d (type %s)",
            note,
            layered_note,
            layer_channel + 1,
            rule.channel_type.value,
        )

    primary = message
    if final_note != note:
        try:
            primary = primary.copy(note=final_note)
        except (ValueError, TypeError) as e:
            step.warn(f"Error updating note {note} -> {final_note}: {e}")

    final_channel = _primary_channel(note_type, step, pool, settings)
    if final_channel != primary.channel:
        try:
            primary = primary.copy(channel=final_channel)
        except (ValueError, TypeError) as e:
            step.warn(
                f"Error rechannelling event to ch {final_channel + 1}: {e}. "
                f"Event keeps its original channel."
            )

    key = TrackKey(context.remapped_program, final_channel, note_type, context.segment_index)
    return NoteTransformResult(primary, layered, key, note_type, step.issues)
