# src/filestages/core/pressure.py
"""Resource-pressure probes used for admission control.

The folder reader samples a probe before each file and pauses when usage is
above its configured ceiling. Probes are pluggable so tests can drive the
pause deterministically instead of depending on real process memory.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import psutil


@runtime_checkable
class PressureProbe(Protocol):
    """Source of a current resource-usage reading, in bytes."""

    def current_usage(self) -> int:
        """Return current usage in bytes."""
        ...


class ProcessMemoryProbe:
    """Samples resident set size of the current process via psutil."""

    def __init__(self, pid: int | None = None) -> None:
        self._process = psutil.Process(pid)

    def current_usage(self) -> int:
        return int(self._process.memory_info().rss)


def bytes_to_mb(value: int) -> float:
    """Convert bytes to megabytes rounded to two decimals (for log output)."""
    return round(value / 1024 / 1024, 2)
