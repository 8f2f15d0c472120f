"""
Indexed, read-only view of a loaded rule table.
"""

from typing import Dict, List, Optional, Tuple

from stemsplit.models.context import RemapInfo
from stemsplit.models.rule import ChannelType, Rule


class RuleIndex:
    """
    Rule lookups used by the splitting engine.

    Built once by RuleRepository and shared read-only by every run. All
    lists keep rule table order; "first match" always means the earliest
    row in the table.

    Attributes:
        rules: Every accepted rule, in load order
        remapped_program_default_type: Default channel type per remapped
            program (DRUM may be overridden by MELODIC, never the reverse)
        original_program_default_type: Default channel type per original
            program (DRUM, once seen, always wins)
    """

    def __init__(self):
        self.rules: List[Rule] = []
        self.remapped_program_default_type: Dict[int, ChannelType] = {}
        self.original_program_default_type: Dict[int, ChannelType] = {}
        self._program_change: Dict[int, Rule] = {}
        self._note_rules: Dict[ChannelType, Dict[int, List[Rule]]] = {
            ChannelType.DRUM: {},
            ChannelType.MELODIC: {},
        }

    # ------------------------------------------------------------------
    # Building (used by RuleRepository only)
    # ------------------------------------------------------------------

    def _add(self, rule: Rule) -> bool:
        """
        Add an accepted rule.

        Returns:
            False if the rule is a redundant note-manipulation rule and was
            not added to the note index
        """
        self._record_default_types(rule)

        if rule.is_note_manipulation:
            bucket = self._note_rules[rule.channel_type].setdefault(rule.original_program, [])
            if rule in bucket:
                return False
            bucket.append(rule)
        elif rule.original_program not in self._program_change:
            self._program_change[rule.original_program] = rule

        self.rules.append(rule)
        return True

    def _record_default_types(self, rule: Rule) -> None:
        kind = rule.channel_type

        if 0 <= rule.remapped_program <= 127:
            existing = self.remapped_program_default_type.get(rule.remapped_program)
            if existing is None or (existing == ChannelType.DRUM and kind == ChannelType.MELODIC):
                self.remapped_program_default_type[rule.remapped_program] = kind

        if 0 <= rule.original_program <= 127:
            if kind == ChannelType.DRUM:
                self.original_program_default_type[rule.original_program] = ChannelType.DRUM
            elif self.original_program_default_type.get(rule.original_program) != ChannelType.DRUM:
                self.original_program_default_type[rule.original_program] = ChannelType.MELODIC

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def program_change_rule(self, program: int) -> Optional[Rule]:
        """First program-change rule whose original program matches."""
        return self._program_change.get(program)

    def note_rules(self, channel_type: ChannelType, program: int) -> Tuple[Rule, ...]:
        """Note-manipulation rules of one channel type for a program, in load order."""
        return tuple(self._note_rules[channel_type].get(program, ()))

    def default_type(self, program: int, fallback: ChannelType = ChannelType.MELODIC) -> ChannelType:
        """Default channel type of an original program."""
        return self.original_program_default_type.get(program, fallback)

    def resolve_program(
        self,
        lookup_program: int,
        fallback_program: Optional[int] = None,
        fallback_type: ChannelType = ChannelType.MELODIC,
    ) -> RemapInfo:
        """
        Resolve the program context for a program number.

        Args:
            lookup_program: Key searched in the program-change rules
            fallback_program: Program used for the self-remap when no rule
                matches (defaults to lookup_program)
            fallback_type: Type used when the program has no default type

        Returns:
            RemapInfo from the first matching rule, else a self-remap
        """
        rule = self.program_change_rule(lookup_program)
        if rule is not None:
            return RemapInfo(rule.original_program, rule.remapped_program, rule.channel_type)

        program = lookup_program if fallback_program is None else fallback_program
        return RemapInfo(program, program, self.default_type(program, fallback_type))

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    @property
    def program_change_rules(self) -> List[Rule]:
        return [r for r in self.rules if r.is_program_change]

    @property
    def note_manipulation_rules(self) -> List[Rule]:
        return [r for r in self.rules if r.is_note_manipulation]

    def note_rule_set_count(self, channel_type: ChannelType) -> int:
        """Number of programs with at least one note rule of a type."""
        return len(self._note_rules[channel_type])

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return (
            f"RuleIndex(rules={len(self.rules)}, "
            f"program_change={len(self._program_change)}, "
            f"drum_sets={self.note_rule_set_count(ChannelType.DRUM)}, "
            f"melodic_sets={self.note_rule_set_count(ChannelType.MELODIC)})"
        )
