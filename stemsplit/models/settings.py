"""
Run settings for the splitter.
"""

from dataclasses import dataclass


@dataclass
class SplitterSettings:
    """
    Settings shared by every component of a run.

    Channels are 0-indexed: the default drum channel 9 is MIDI channel 10.
    """

    drum_channel: int = 9
    max_channel: int = 15

    # Bank select LSB the drum channel starts with (percussion bank).
    # Program changes on that channel are looked up at 128 + program.
    drum_bank_lsb: int = 1

    # Marker text substitution
    loop_start_token: str = "loopStart"
    loop_end_token: str = "loopEnd"

    # Output file naming
    output_suffix: str = "_split_remapped"
    output_extension: str = ".mid"

    def __post_init__(self) -> None:
        if not 0 <= self.drum_channel <= self.max_channel:
            raise ValueError(
                f"drum_channel must be 0-{self.max_channel}, got {self.drum_channel}"
            )
        if not 0 <= self.max_channel <= 15:
            raise ValueError(f"max_channel must be 0-15, got {self.max_channel}")

    def initial_bank_lsb(self, channel: int) -> int:
        """Bank select LSB a channel starts a run with."""
        return self.drum_bank_lsb if channel == self.drum_channel else 0
