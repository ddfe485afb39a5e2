"""Shared contracts for filestages.

Enums, error types, and record aliases used by channels and every stage.
Import from here rather than from the submodules.
"""

from filestages.contracts.enums import ChannelState, StageKind
from filestages.contracts.errors import ChannelClosedError, RecordTypeError, StageSetupError
from filestages.contracts.records import Record, StartAction

__all__ = [
    "ChannelClosedError",
    "ChannelState",
    "Record",
    "RecordTypeError",
    "StageKind",
    "StageSetupError",
    "StartAction",
]
