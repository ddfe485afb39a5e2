# src/filestages/contracts/errors.py
"""Exceptions raised by channels and stages."""


class ChannelClosedError(RuntimeError):
    """Raised when a record is pushed to a channel that is no longer open.

    Stages check ``writer.ended`` before pushing, so seeing this error
    means a producer kept writing after its output signalled end.
    """

    def __init__(self, channel_name: str, state: str) -> None:
        super().__init__(f"Cannot push to channel '{channel_name}': channel is {state}")
        self.channel_name = channel_name
        self.state = state


class StageSetupError(Exception):
    """Raised when a stage is created without the channels its role requires."""

    pass


class RecordTypeError(TypeError):
    """Raised when a stage receives a record of the wrong type (text vs bytes)."""

    def __init__(self, stage_name: str, expected: str, record: object) -> None:
        super().__init__(f"{stage_name} expects {expected} records, got {type(record).__name__}")
        self.stage_name = stage_name
        self.expected = expected
