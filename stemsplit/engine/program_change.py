"""
Program change handling.

Resolves program changes through the rule index, detects segment
boundaries, and rewrites the program-change message.
"""

import logging
from dataclasses import dataclass, field
from typing import List

import mido

from stemsplit.models.context import ChannelContext, RemapInfo
from stemsplit.models.rule import ChannelType
from stemsplit.models.settings import SplitterSettings
from stemsplit.models.track_key import TrackKey
from stemsplit.report import Issue, IssueKind
from stemsplit.rules.index import RuleIndex

logger = logging.getLogger(__name__)


@dataclass
class ProgramChangeResult:
    """
    Outcome of one program change.

    Attributes:
        message: Program change to emit (remapped and rechannelled if needed)
        context: Channel context after the program change
        key: Output track key
        new_segment: Whether the program change started a new segment
        issues: Event warnings raised while rewriting the message
    """

    message: mido.Message
    context: ChannelContext
    key: TrackKey
    new_segment: bool
    issues: List[Issue] = field(default_factory=list)


def fallback_type(channel: int, settings: SplitterSettings) -> ChannelType:
    """Channel type of a program that no rule mentions."""
    if channel == settings.drum_channel:
        return ChannelType.DRUM
    return ChannelType.MELODIC


def effective_channel(channel: int, channel_type: ChannelType, settings: SplitterSettings) -> int:
    """Channel that non-note messages of a segment are written on."""
    if channel_type == ChannelType.DRUM:
        return settings.drum_channel
    return channel


def resolve_initial_remap(
    program: int, channel: int, index: RuleIndex, settings: SplitterSettings
) -> RemapInfo:
    """
    Resolve the starting program context of a channel.

    Args:
        program: First explicit program of the channel (0 if none)
        channel: Original channel
        index: Rule index
        settings: Run settings

    Returns:
        RemapInfo from the first matching program-change rule, else a
        self-remap using the program's default type
    """
    return index.resolve_program(program, fallback_type=fallback_type(channel, settings))


def initial_context(
    program: int, channel: int, index: RuleIndex, settings: SplitterSettings
) -> ChannelContext:
    """Build the context a channel starts with on its first event."""
    return ChannelContext(
        channel=channel,
        active_remap=resolve_initial_remap(program, channel, index, settings),
        segment_index=0,
        bank_lsb=settings.initial_bank_lsb(channel),
    )


def handle_program_change(
    message: mido.Message,
    tick: int,
    context: ChannelContext,
    index: RuleIndex,
    settings: SplitterSettings,
) -> ProgramChangeResult:
    """
    Apply program-change rules to a program-change message.

    The rule lookup key is bank_lsb * 128 + program. Bank MSB is tracked
    by the context but is not part of the key.

    Args:
        message: mido program_change message
        tick: Absolute tick of the message
        context: Current context of the message's channel
        index: Rule index
        settings: Run settings

    Returns:
        ProgramChangeResult with the updated context
    """
    channel = message.channel
    program = message.program
    patch = context.bank_lsb * 128 + program

    remap = index.resolve_program(
        patch, fallback_program=program, fallback_type=fallback_type(channel, settings)
    )
    new_context, new_segment = context.advance(remap)

    if new_segment:
        logger.debug(
            "PC at tick %d on ch %d starts segment %d", tick, channel + 1, new_context.segment_index
        )
    logger.debug(
        "PC: original P%d, remapped P%d, type %s at tick %d",
        program,
        remap.remapped_program,
        remap.channel_type.value,
        tick,
    )

    issues: List[Issue] = []
    out = message

    if remap.remapped_program != program:
        try:
            out = out.copy(program=remap.remapped_program)
        except (ValueError, TypeError) as e:
            issues.append(
                Issue(
                    IssueKind.EVENT,
                    f"Cannot remap program change {program} -> {remap.remapped_program}: {e}. "
                    f"Event keeps its original program.",
                    tick=tick,
                    channel=channel,
                )
            )

    target_channel = effective_channel(channel, remap.channel_type, settings)
    if target_channel != channel:
        out = out.copy(channel=target_channel)

    key = TrackKey(
        remap.remapped_program, target_channel, remap.channel_type, new_context.segment_index
    )
    return ProgramChangeResult(out, new_context, key, new_segment, issues)
