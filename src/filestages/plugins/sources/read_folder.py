# src/filestages/plugins/sources/read_folder.py
"""Folder source stage.

Walks a directory recursively and pushes the text of every file.

This is the only stage with memory-based admission control: before each
file the pressure probe is sampled, and if usage is above the ceiling the
stage sleeps for a fixed pause before continuing. It is a crude breaker
against unbounded buffering when downstream is slower than the disk.
"""

import asyncio
import os
from pathlib import Path
from typing import Any

from pydantic import Field

from filestages.contracts import Record, StartAction
from filestages.core.channel import Channel
from filestages.core.pressure import PressureProbe, ProcessMemoryProbe, bytes_to_mb
from filestages.plugins.base import BaseSource
from filestages.plugins.config_base import PathConfig

DEFAULT_MAX_MEMORY_BYTES = 3 * 1024 * 1024 * 1024


class ReadFolderConfig(PathConfig):
    """Configuration for the folder source."""

    max_memory_bytes: int = Field(
        default=DEFAULT_MAX_MEMORY_BYTES,
        gt=0,
        description="Pause emission while sampled memory usage is above this many bytes",
    )
    pause_ms: int = Field(default=5000, ge=0, description="How long to pause under memory pressure")


class ReadFolder(BaseSource):
    """Emit the text content of every file below a directory.

    Config options:
        path: Directory to walk (required)
        max_memory_bytes: Memory ceiling (default: 3 GiB)
        pause_ms: Pause when above the ceiling (default: 5000)
        encoding: Text codec (default: "utf-8")

    Files are emitted in sorted relative-path order. The writer is always
    ended, including when a listed file can no longer be read; that OSError
    is logged and re-raised from the start action.
    """

    name = "read_folder"
    plugin_version = "1.0.0"

    def __init__(
        self,
        config: dict[str, Any],
        *,
        writer: Channel[Record],
        probe: PressureProbe | None = None,
    ) -> None:
        super().__init__(config, writer=writer)
        self._cfg = ReadFolderConfig.from_dict(config)
        self._probe = probe if probe is not None else ProcessMemoryProbe()
        self._root = Path(os.path.normpath(self._cfg.resolved_path()))
        self._file_names: list[str] = []

    async def prepare(self) -> StartAction:
        """Check the folder is readable and enumerate its files.

        Raises:
            FileNotFoundError: If the folder doesn't exist or can't be read
            NotADirectoryError: If the path is not a directory
        """
        root = self._root
        if not os.access(root, os.R_OK):
            raise FileNotFoundError(f"Folder not accessible: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Not a folder: {root}")

        self._file_names = sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())
        self._logger.info("Reading these files", path=str(root), files=self._file_names)

        return self._start

    async def _start(self) -> None:
        with self.log_context():
            try:
                for file_name in self._file_names:
                    if self._writer.ended:
                        self._logger.info("Writer closed, so stopping pushing data")
                        break

                    self._logger.info("Processing file", file=file_name)
                    await self._wait_for_memory()

                    try:
                        data = (self._root / file_name).read_bytes()
                    except OSError as exc:
                        self._logger.error("Failed to read file, stopping", file=file_name, error=str(exc))
                        raise

                    if not await self.emit(self._cfg.decode(data)):
                        self._logger.info("Writer closed, so stopping pushing data")
                        break
            finally:
                await self._writer.end()

    async def _wait_for_memory(self) -> None:
        used = self._probe.current_usage()
        if used > self._cfg.max_memory_bytes:
            self._logger.warning(
                "Too much data in memory, pausing",
                used_mb=bytes_to_mb(used),
                pause_s=self._cfg.pause_ms / 1000,
            )
            await asyncio.sleep(self._cfg.pause_ms / 1000)
