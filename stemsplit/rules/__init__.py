"""Rule table loading and indexing."""

from stemsplit.rules.index import RuleIndex
from stemsplit.rules.repository import RuleRepository

__all__ = ["RuleIndex", "RuleRepository"]
