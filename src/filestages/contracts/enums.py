# src/filestages/contracts/enums.py
"""Enumerations for channel lifecycle and stage roles.

Uses (str, Enum) so values serialize cleanly into structured log events.
"""

from enum import Enum


class ChannelState(str, Enum):
    """Lifecycle of a channel.

    Transitions:
        OPEN -> END_REQUESTED   producer called end() while pushes are pending
        OPEN -> ENDED           end() with nothing pending, or consumer close()
        END_REQUESTED -> ENDED  pending pushes flushed, or consumer close()

    ENDED is terminal.
    """

    OPEN = "open"
    END_REQUESTED = "end_requested"
    ENDED = "ended"


class StageKind(str, Enum):
    """Role a stage plays in a pipeline."""

    SOURCE = "source"
    TRANSFORM = "transform"
    EXPANSION = "expansion"
