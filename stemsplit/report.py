"""
Structured warning stream for one processing run.

Every recoverable problem is recorded as an Issue and logged, so a caller
can either read the report or listen to the ``stemsplit`` loggers.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class IssueKind(Enum):
    """Category of a recoverable problem."""

    RULE = "rule"  # malformed row, redundant rule, out-of-range rule target
    EVENT = "event"  # a single event's remap/layer/rechannel step was skipped


@dataclass
class Issue:
    """A single recoverable problem."""

    kind: IssueKind
    message: str
    line: Optional[int] = None  # rule table line (1-based)
    tick: Optional[int] = None  # absolute tick of the event
    channel: Optional[int] = None  # original channel (0-15)

    def __str__(self) -> str:
        where = []
        if self.line is not None:
            where.append(f"line {self.line}")
        if self.tick is not None:
            where.append(f"tick {self.tick}")
        if self.channel is not None:
            where.append(f"ch {self.channel + 1}")
        prefix = f"[{', '.join(where)}] " if where else ""
        return f"{prefix}{self.message}"


@dataclass
class ProcessingReport:
    """Issues collected while loading rules or assembling one file."""

    issues: List[Issue] = field(default_factory=list)

    @property
    def warnings(self) -> int:
        return len(self.issues)

    @property
    def rule_issues(self) -> List[Issue]:
        return [i for i in self.issues if i.kind == IssueKind.RULE]

    @property
    def event_issues(self) -> List[Issue]:
        return [i for i in self.issues if i.kind == IssueKind.EVENT]

    def add(self, issue: Issue) -> Issue:
        """Record an issue and log it as a warning."""
        self.issues.append(issue)
        logger.warning("%s", issue)
        return issue

    def rule_warning(self, message: str, line: Optional[int] = None) -> Issue:
        return self.add(Issue(IssueKind.RULE, message, line=line))

    def extend(self, issues: List[Issue]) -> None:
        """Record issues produced by a pure transformation step."""
        for issue in issues:
            self.add(issue)
