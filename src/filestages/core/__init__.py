"""Core runtime pieces: channels, resource probes, logging, and settings."""

from filestages.core.channel import Channel, collect
from filestages.core.pressure import PressureProbe, ProcessMemoryProbe

__all__ = [
    "Channel",
    "PressureProbe",
    "ProcessMemoryProbe",
    "collect",
]
