# src/filestages/plugins/expansions/gunzip.py
"""GZIP decompression expansion stage.

Decompresses each binary record as a gzip stream and emits exactly one
record with the result.
"""

import gzip
import zlib
from collections.abc import Generator
from typing import Any

from filestages.contracts import Record, RecordTypeError
from filestages.core.channel import Channel
from filestages.plugins.base import BaseExpansion
from filestages.plugins.config_base import OutputModeConfig

# gzip.BadGzipFile is an OSError; truncated streams raise EOFError
_MALFORMED_STREAM_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    EOFError,
    zlib.error,
    RecordTypeError,
)


class GunzipConfig(OutputModeConfig):
    """Configuration for the gunzip expansion."""

    pass


class GunzipFile(BaseExpansion):
    """Decompress every incoming gzip payload.

    Config options:
        output_as_buffer: Emit raw bytes instead of text (default: False)
        encoding: Text codec when emitting text (default: "utf-8")

    Multi-member streams are concatenated into one record. An input that
    isn't valid gzip is logged and dropped.
    """

    name = "gunzip_file"
    plugin_version = "1.0.0"

    malformed_errors = _MALFORMED_STREAM_ERRORS
    malformed_message = "Ignoring invalid GZIP file received"

    def __init__(self, config: dict[str, Any], *, reader: Channel[Record], writer: Channel[Record]) -> None:
        super().__init__(config, reader=reader, writer=writer)
        self._cfg = GunzipConfig.from_dict(config)

    def expand(self, record: Record) -> Generator[Record, None, None]:
        if not isinstance(record, bytes):
            raise RecordTypeError(self.name, "binary", record)

        data = gzip.decompress(record)
        self._logger.info("Unzipping received file", size=len(data))
        yield self._cfg.render(data)
