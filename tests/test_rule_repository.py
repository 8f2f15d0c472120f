"""Tests for rule table loading and indexing."""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from stemsplit.errors import FatalLoadError, RuleTableNotFoundError, RuleTableParseError
from stemsplit.models.context import RemapInfo
from stemsplit.models.rule import ChannelType, Rule
from stemsplit.report import IssueKind, ProcessingReport
from stemsplit.rules.repository import RuleRepository


class TestRuleParsing:
    """Test cases for parsing rule table rows."""

    def test_program_change_rule(self, build_index):
        """Test a row with both note fields -999 is a program-change rule."""
        index = build_index("Kit,60,40,-999,-999,false,DRUM")

        assert len(index) == 1
        rule = index.program_change_rule(60)
        assert rule.is_program_change
        assert rule.remapped_program == 40
        assert rule.channel_type == ChannelType.DRUM
        assert rule.line == 2

    def test_note_rule_kinds(self, build_index):
        """Test specific, shift and layering rules are told apart."""
        index = build_index(
            "A,5,5,36,38,false,DRUM",
            "B,5,5,-1,12,false,MELODIC",
            "C,5,5,-1,7,true,MELODIC",
        )

        (specific,) = index.note_rules(ChannelType.DRUM, 5)
        shift, layer = index.note_rules(ChannelType.MELODIC, 5)
        assert specific.is_specific
        assert shift.is_general_shift
        assert layer.is_layering
        assert not layer.is_general_shift

    def test_header_and_blank_lines_skipped(self, report):
        """Test the header row and blank lines produce no rules or warnings."""
        data = (
            "TrackName,OriginalProgramChange,RemappedProgramChange,OriginalNote,"
            "RemappedNoteOrOffset,LayeredNotes,ChannelType\n"
            "\n"
            "Piano,1,2,-999,-999,false,MELODIC\n"
            "   \n"
        )
        index = RuleRepository(report).load(data)

        assert len(index) == 1
        assert report.warnings == 0

    def test_utf8_bom_is_ignored(self):
        """Test a byte order mark before the header does not break parsing."""
        data = (
            "\ufeffTrackName,a,b,c,d,e,f\nPiano,1,2,-999,-999,false,MELODIC\n"
        ).encode("utf-8")

        index = RuleRepository().load(data)
        assert index.program_change_rule(1).remapped_program == 2

    def test_case_insensitive_tokens(self, build_index):
        """Test channel type and boolean tokens ignore case and padding."""
        index = build_index("X, 3 , 3 , -1 , 5 , TRUE , drum ")

        (rule,) = index.note_rules(ChannelType.DRUM, 3)
        assert rule.layered
        assert rule.remapped_note_or_offset == 5

    def test_non_true_layered_is_false(self, build_index):
        """Test any value other than 'true' means not layered."""
        index = build_index("X,3,3,-1,5,yes,MELODIC")

        (rule,) = index.note_rules(ChannelType.MELODIC, 3)
        assert not rule.layered
        assert rule.is_general_shift

    def test_extra_columns_ignored(self, build_index):
        """Test trailing fields beyond the seventh are ignored."""
        index = build_index("X,1,2,-999,-999,false,MELODIC,comment")
        assert index.program_change_rule(1) is not None


class TestMalformedRows:
    """Test cases for rows skipped with a warning."""

    @pytest.mark.parametrize(
        "row,reason",
        [
            ("X,1,2", "too few columns"),
            ("X,one,2,-999,-999,false,MELODIC", "number format"),
            ("X,1,2,-999,-999,false,BASS", "Unknown channel type"),
            ("X,200,2,-999,-999,false,MELODIC", "OriginalProgramChange"),
            ("X,1,-5,-999,-999,false,MELODIC", "RemappedProgramChange"),
            ("X,1,2,-7,3,false,MELODIC", "OriginalNote"),
            ("X,1,2,128,3,false,MELODIC", "OriginalNote"),
        ],
    )
    def test_row_skipped(self, build_index, report, row, reason):
        """Test malformed rows are skipped and reported."""
        index = build_index(row, "Ok,9,9,-999,-999,false,MELODIC", report=report)

        assert len(index) == 1
        assert report.warnings == 1
        issue = report.issues[0]
        assert issue.kind == IssueKind.RULE
        assert issue.line == 2
        assert reason in issue.message

    def test_skipped_rows_recorded(self):
        """Test the repository keeps (line, reason, text) of skipped rows."""
        repository = RuleRepository()
        repository.load("header\nX,1,2\nOk,1,2,-999,-999,false,MELODIC\nY,a,b,c,d,e,f\n")

        assert [row[0] for row in repository.skipped_rows] == [2, 4]
        assert repository.skipped_rows[0][2] == "X,1,2"

    def test_offset_outside_typical_range_is_kept(self, build_index, report):
        """Test a large offset only produces a soft warning."""
        index = build_index("X,1,1,-1,200,false,MELODIC", report=report)

        assert len(index) == 1
        assert report.warnings == 1
        assert "outside typical range" in report.issues[0].message

    def test_program_change_sentinel_not_range_checked(self, build_index, report):
        """Test -999 offsets of program-change rules are not soft warnings."""
        build_index("X,1,2,-999,-999,false,MELODIC", report=report)
        assert report.warnings == 0

    def test_redundant_note_rule(self, build_index, report):
        """Test an exact duplicate note rule is rejected."""
        index = build_index(
            "A,5,5,-1,12,false,MELODIC",
            "B,5,5,-1,12,false,MELODIC",
            report=report,
        )

        assert len(index.note_rules(ChannelType.MELODIC, 5)) == 1
        assert len(index) == 1
        assert report.warnings == 1
        assert "Redundant" in report.issues[0].message
        assert report.issues[0].line == 3

    def test_duplicate_program_change_first_wins(self, build_index, report):
        """Test duplicate program-change rules are kept but the first wins."""
        index = build_index(
            "A,10,20,-999,-999,false,MELODIC",
            "B,10,30,-999,-999,false,MELODIC",
            report=report,
        )

        assert len(index) == 2
        assert index.program_change_rule(10).remapped_program == 20
        assert report.warnings == 0


class TestRuleOrdering:
    """Test cases pinning load order as the tie-break."""

    def test_note_rules_keep_load_order(self, build_index):
        """Test note rules for one program are returned in table order."""
        index = build_index(
            "A,5,5,-1,3,false,MELODIC",
            "B,5,5,40,41,false,MELODIC",
            "C,5,5,40,42,false,MELODIC",
        )

        rules = index.note_rules(ChannelType.MELODIC, 5)
        assert [r.remapped_note_or_offset for r in rules] == [3, 41, 42]

    def test_rules_list_keeps_load_order(self, build_index):
        """Test all rules are listed in table order."""
        index = build_index(
            "A,5,5,-1,3,false,MELODIC",
            "B,1,2,-999,-999,false,DRUM",
        )
        assert [r.line for r in index.rules] == [2, 3]
        assert len(index.program_change_rules) == 1
        assert len(index.note_manipulation_rules) == 1

    def test_rules_compare_without_line(self):
        """Test rule equality ignores the source line."""
        a = Rule(1, 2, -1, 3, False, ChannelType.MELODIC, line=2)
        b = Rule(1, 2, -1, 3, False, ChannelType.MELODIC, line=9)
        assert a == b


class TestDefaultTypes:
    """Test cases for the default channel type maps."""

    def test_original_drum_wins(self, build_index):
        """Test DRUM, once seen for an original program, is never replaced."""
        index = build_index(
            "A,10,20,-999,-999,false,DRUM",
            "B,10,21,-999,-999,false,MELODIC",
        )
        assert index.original_program_default_type[10] == ChannelType.DRUM

    def test_original_melodic_upgraded_to_drum(self, build_index):
        """Test a later DRUM row overrides MELODIC for an original program."""
        index = build_index(
            "A,10,20,-999,-999,false,MELODIC",
            "B,10,21,-999,-999,false,DRUM",
        )
        assert index.original_program_default_type[10] == ChannelType.DRUM

    def test_remapped_drum_overridden_by_melodic(self, build_index):
        """Test MELODIC overrides DRUM for a remapped program."""
        index = build_index(
            "A,10,20,-999,-999,false,DRUM",
            "B,11,20,-999,-999,false,MELODIC",
        )
        assert index.remapped_program_default_type[20] == ChannelType.MELODIC

    def test_remapped_melodic_not_overridden(self, build_index):
        """Test DRUM never replaces MELODIC for a remapped program."""
        index = build_index(
            "A,10,20,-999,-999,false,MELODIC",
            "B,11,20,-999,-999,false,DRUM",
        )
        assert index.remapped_program_default_type[20] == ChannelType.MELODIC

    def test_wildcard_programs_not_recorded(self, build_index):
        """Test -1 programs do not enter the default type maps."""
        index = build_index("A,-1,-1,-1,2,false,DRUM")

        assert index.original_program_default_type == {}
        assert index.remapped_program_default_type == {}


class TestResolveProgram:
    """Test cases for program lookups."""

    def test_rule_match(self, build_index):
        """Test a matching program-change rule is used."""
        index = build_index("A,10,20,-999,-999,false,DRUM")
        assert index.resolve_program(10) == RemapInfo(10, 20, ChannelType.DRUM)

    def test_self_remap_uses_default_type(self, build_index):
        """Test a program without a rule remaps to itself with its default type."""
        index = build_index("A,10,10,-1,2,false,DRUM")
        assert index.resolve_program(10) == RemapInfo(10, 10, ChannelType.DRUM)

    def test_self_remap_fallback(self, empty_index):
        """Test the fallback type and program are used for unknown programs."""
        info = empty_index.resolve_program(
            133, fallback_program=5, fallback_type=ChannelType.DRUM
        )
        assert info == RemapInfo(5, 5, ChannelType.DRUM)


class TestRuleTableFiles:
    """Test cases for reading rule table files."""

    def test_read_file(self, rules_file):
        """Test reading a rule table from disk."""
        path = rules_file("Kit,60,40,-999,-999,false,DRUM")
        index = RuleRepository.read(path)
        assert index.program_change_rule(60).remapped_program == 40

    def test_missing_file(self, tmp_path):
        """Test a missing rule table is a fatal load error."""
        with pytest.raises(RuleTableNotFoundError):
            RuleRepository.read(tmp_path / "missing.csv")

    def test_not_text(self, tmp_path):
        """Test undecodable bytes are a fatal load error."""
        path = tmp_path / "rules.csv"
        path.write_bytes(b"\xff\xfe\x00\x81")

        with pytest.raises(FatalLoadError):
            RuleRepository.read(path)

    def test_strict_mode(self, rules_file):
        """Test strict loading lists every skipped row."""
        path = rules_file(
            "X,1,2",
            "Ok,1,2,-999,-999,false,MELODIC",
            "Y,1,2,-999,-999,false,BASS",
        )

        with pytest.raises(RuleTableParseError) as excinfo:
            RuleRepository.read(path, strict=True)

        assert [row[0] for row in excinfo.value.skipped_rows] == [2, 4]
        assert isinstance(excinfo.value, FatalLoadError)

    def test_strict_mode_clean_table(self, rules_file):
        """Test strict loading accepts a clean table."""
        path = rules_file("Ok,1,2,-999,-999,false,MELODIC")
        assert len(RuleRepository.read(path, strict=True)) == 1

    def test_warnings_go_to_report(self, rules_file):
        """Test rule warnings are collected in the caller's report."""
        report = ProcessingReport()
        RuleRepository.read(rules_file("X,1,2"), report=report)

        assert len(report.rule_issues) == 1
        assert report.event_issues == []
