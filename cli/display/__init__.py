"""
CLI display modules.
"""

from cli.display.tables import (
    display_rule_index,
    display_issues,
    display_batch_result,
)

__all__ = [
    "display_rule_index",
    "display_issues",
    "display_batch_result",
]
