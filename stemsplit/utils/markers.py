"""
Marker text rewriting.

Loop points in marker text are written with brackets ("[A]" ... "[B]");
the output replaces them with explicit loop tokens.
"""

from typing import Optional

MARKER_META_TYPES = ("marker", "cue_marker")


def replace_loop_brackets(
    text: Optional[str], loop_start: str = "loopStart", loop_end: str = "loopEnd"
) -> Optional[str]:
    """
    Replace "[" and "]" with the loop start/end tokens.

    Example:
        >>> replace_loop_brackets("[A][B]")
        'loopStartAloopEndloopStartBloopEnd'
    """
    if not text:
        return text
    return text.replace("[", loop_start).replace("]", loop_end)
