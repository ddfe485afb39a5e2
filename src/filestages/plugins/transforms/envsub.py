# src/filestages/plugins/transforms/envsub.py
"""Environment interpolation transform stage.

Replaces ${NAME} placeholders in each text record with the value of the
matching environment variable.
"""

import os
import re
from collections.abc import Callable
from typing import Any

from filestages.contracts import Record, RecordTypeError
from filestages.core.channel import Channel
from filestages.plugins.base import BaseTransform
from filestages.plugins.config_base import StageConfig

type EnvironmentLookup = Callable[[str], str | None]

_PLACEHOLDER_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def process_environment(name: str) -> str | None:
    """Read a variable from the process environment at call time."""
    return os.environ.get(name)


def interpolate(text: str, lookup: EnvironmentLookup) -> str:
    """Expand ${NAME} placeholders in text.

    Unset and empty variables leave the placeholder untouched. Substituted
    values are not scanned again.

    Args:
        text: Text containing placeholders
        lookup: Returns a variable's value, or None if unset

    Returns:
        Text with every defined placeholder replaced
    """

    def replacer(match: re.Match[str]) -> str:
        value = lookup(match.group(1))
        if value:
            return value
        return match.group(0)

    return _PLACEHOLDER_PATTERN.sub(replacer, text)


class EnvSubConfig(StageConfig):
    """The envsub transform takes no options."""

    pass


class EnvSub(BaseTransform):
    """Substitute environment variables into every record.

    Variables are looked up when each record is processed, not when the
    stage is built. Pass ``lookup`` to read from another table (tests, or a
    host that snapshots the environment).
    """

    name = "envsub"
    plugin_version = "1.0.0"

    def __init__(
        self,
        config: dict[str, Any],
        *,
        reader: Channel[Record],
        writer: Channel[Record],
        lookup: EnvironmentLookup | None = None,
    ) -> None:
        super().__init__(config, reader=reader, writer=writer)
        EnvSubConfig.from_dict(config)
        self._lookup = lookup if lookup is not None else process_environment

    def process(self, record: Record) -> Record:
        if not isinstance(record, str):
            raise RecordTypeError(self.name, "text", record)

        self._logger.info("Replacing environment variables in input record")
        return interpolate(record, self._lookup)
