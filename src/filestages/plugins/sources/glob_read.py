# src/filestages/plugins/sources/glob_read.py
"""Glob source stage.

Reads every file matching a glob pattern and pushes one record per file.

Pattern expansion and file reading happen once, in prepare(), before
anything is emitted. The returned start action then streams the buffered
contents downstream at an optional fixed pace.
"""

import asyncio
import glob
import os
from typing import Any

from pydantic import Field, field_validator

from filestages.contracts import Record, StartAction
from filestages.core.channel import Channel
from filestages.plugins.base import BaseSource
from filestages.plugins.config_base import TextConfig


class GlobReadConfig(TextConfig):
    """Configuration for the glob source."""

    pattern: str = Field(..., description="Glob pattern; '**' matches recursively")
    wait_ms: int = Field(default=0, ge=0, description="Delay between records, in milliseconds")
    close_on_end: bool = Field(
        default=True,
        description="End the writer after the last record. Disable when several producers share one writer.",
    )
    binary: bool = Field(default=False, description="Emit raw bytes instead of decoded text")

    @field_validator("pattern")
    @classmethod
    def validate_pattern_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("pattern cannot be empty")
        return v


class GlobRead(BaseSource):
    """Read all files matching a glob pattern.

    Config options:
        pattern: Glob pattern (required)
        wait_ms: Pause between records (default: 0)
        close_on_end: End the writer when done (default: True)
        binary: Emit bytes instead of text (default: False)
        encoding: Text codec (default: "utf-8")

    A pattern matching nothing is not an error: a warning is logged and
    the writer is ended without emitting anything.
    """

    name = "glob_read"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any], *, writer: Channel[Record]) -> None:
        super().__init__(config, writer=writer)
        self._cfg = GlobReadConfig.from_dict(config)
        self._files: list[Record] = []

    async def prepare(self) -> StartAction:
        pattern = self._cfg.pattern
        paths = sorted(p for p in glob.glob(pattern, recursive=True) if os.path.isfile(p))

        if not paths:
            self._logger.warning(
                "No files found for glob pattern. Double check the pattern if this is unexpected.",
                pattern=pattern,
            )

        files: list[Record] = []
        for path in paths:
            self._logger.info("Reading file", file=path, pattern=pattern)
            with open(path, "rb") as f:
                data = f.read()
            files.append(data if self._cfg.binary else self._cfg.decode(data))
        self._files = files

        return self._start

    async def _start(self) -> None:
        with self.log_context():
            await self._emit_all()

    async def _emit_all(self) -> None:
        delay = self._cfg.wait_ms / 1000

        for index, record in enumerate(self._files):
            if self._writer.ended:
                self._logger.info("Writer closed, so stopping pushing data")
                break

            if not await self.emit(record):
                self._logger.info("Writer closed, so stopping pushing data")
                break

            if delay and index < len(self._files) - 1:
                await asyncio.sleep(delay)

        if self._cfg.close_on_end:
            await self._writer.end()
