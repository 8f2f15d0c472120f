"""
File-level entry points.

process_file() runs one input file end to end: load the rule table (or
reuse an already loaded RuleIndex), read the sequence, assemble, write.
process_files() runs a batch, isolating failures per file.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from stemsplit.engine.assembler import SequenceAssembler
from stemsplit.errors import StemSplitError
from stemsplit.formats.smf.reader import MidiReader
from stemsplit.formats.smf.writer import MidiWriter
from stemsplit.models.settings import SplitterSettings
from stemsplit.report import Issue, ProcessingReport
from stemsplit.rules.index import RuleIndex
from stemsplit.rules.repository import RuleRepository

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
RulesSource = Union[PathLike, RuleIndex]

MIDI_SUFFIXES = (".mid", ".midi")


@dataclass
class ProcessResult:
    """Result of processing one file."""

    input_path: Path
    output_path: Path
    tracks_written: int
    report: ProcessingReport = field(default_factory=ProcessingReport)

    @property
    def warnings(self) -> int:
        return self.report.warnings

    @property
    def issues(self) -> List[Issue]:
        return self.report.issues


@dataclass
class FileFailure:
    """A file of a batch that could not be processed."""

    input_path: Path
    error: StemSplitError


@dataclass
class BatchResult:
    """Result of processing several files with one rule table."""

    rules: RuleIndex
    rule_report: ProcessingReport
    results: List[ProcessResult] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def warnings(self) -> int:
        return self.rule_report.warnings + sum(r.warnings for r in self.results)


def output_path_for(
    input_path: PathLike, output_dir: PathLike, settings: Optional[SplitterSettings] = None
) -> Path:
    """
    Output file path for an input file.

    "song.mid" becomes "<output_dir>/song_split_remapped.mid".
    """
    settings = settings or SplitterSettings()
    input_path = Path(input_path)
    stem = input_path.stem if input_path.suffix.lower() in MIDI_SUFFIXES else input_path.name
    return Path(output_dir) / f"{stem}{settings.output_suffix}{settings.output_extension}"


def load_rules(
    rules: RulesSource, report: Optional[ProcessingReport] = None, strict: bool = False
) -> RuleIndex:
    """Load a rule table, or pass an already loaded RuleIndex through."""
    if isinstance(rules, RuleIndex):
        return rules
    return RuleRepository.read(rules, report=report, strict=strict)


def process_file(
    input_path: PathLike,
    output_dir: PathLike,
    rules: RulesSource,
    settings: Optional[SplitterSettings] = None,
    strict_rules: bool = False,
) -> ProcessResult:
    """
    Split and remap one MIDI file.

    Args:
        input_path: Input MIDI file
        output_dir: Directory receiving <stem>_split_remapped.mid
        rules: Rule table path, or a loaded RuleIndex
        settings: Run settings
        strict_rules: Fail if the rule table has invalid rows

    Returns:
        ProcessResult with the number of tracks written and all warnings

    Raises:
        FatalLoadError: If the rule table or the input cannot be loaded
        FatalWriteError: If the output cannot be written
    """
    settings = settings or SplitterSettings()
    input_path = Path(input_path)
    report = ProcessingReport()

    index = load_rules(rules, report=report, strict=strict_rules)

    logger.info("Processing MIDI file: %s", input_path.name)
    midi = MidiReader.read(input_path)

    assembler = SequenceAssembler(index, settings, report)
    output = assembler.assemble(midi)

    output_path = output_path_for(input_path, output_dir, settings)
    logger.info("Saving the combined MIDI sequence to: %s", output_path)
    MidiWriter.write(output, output_path)

    return ProcessResult(input_path, output_path, len(output.tracks), report)


def process_files(
    input_paths: Iterable[PathLike],
    output_dir: PathLike,
    rules: RulesSource,
    settings: Optional[SplitterSettings] = None,
    strict_rules: bool = False,
) -> BatchResult:
    """
    Process several files with one rule table.

    The rule table is loaded once; a load failure aborts the batch. A file
    that fails to load or write is recorded and the batch continues.
    """
    settings = settings or SplitterSettings()
    rule_report = ProcessingReport()
    index = load_rules(rules, report=rule_report, strict=strict_rules)
    batch = BatchResult(rules=index, rule_report=rule_report)

    for input_path in input_paths:
        try:
            batch.results.append(process_file(input_path, output_dir, index, settings))
        except StemSplitError as e:
            logger.error("Failed to process %s: %s", input_path, e)
            batch.failures.append(FileFailure(Path(input_path), e))

    logger.info(
        "Processed %d file(s), %d failed", len(batch.results), len(batch.failures)
    )
    return batch
