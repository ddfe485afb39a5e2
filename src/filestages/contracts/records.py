"""Type aliases for data flowing between stages."""

from collections.abc import Awaitable, Callable

# Text or raw bytes. Which one travels on an edge is a per-stage option.
type Record = str | bytes

# Deferred start returned by source stages from prepare().
type StartAction = Callable[[], Awaitable[None]]
