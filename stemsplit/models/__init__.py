"""Data models for rules, channel state and output tracks."""

from stemsplit.models.rule import Rule, ChannelType
from stemsplit.models.context import ChannelContext, RemapInfo, Active, Unseen, UNSEEN
from stemsplit.models.track_key import TrackKey
from stemsplit.models.settings import SplitterSettings

__all__ = [
    "Rule",
    "ChannelType",
    "ChannelContext",
    "RemapInfo",
    "Active",
    "Unseen",
    "UNSEEN",
    "TrackKey",
    "SplitterSettings",
]
