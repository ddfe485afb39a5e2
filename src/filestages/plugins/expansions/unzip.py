# src/filestages/plugins/expansions/unzip.py
"""ZIP extraction expansion stage.

Parses each binary record as a ZIP archive and emits the content of every
entry, in archive order.
"""

import io
import lzma
import zipfile
import zlib
from collections.abc import Generator
from typing import Any

from filestages.contracts import Record, RecordTypeError
from filestages.core.channel import Channel
from filestages.plugins.base import BaseExpansion
from filestages.plugins.config_base import OutputModeConfig

# A text record, input that is not an archive, a truncated or corrupt
# archive, or one we can't read (encrypted entries, unsupported
# compression). All are treated alike.
_MALFORMED_ARCHIVE_ERRORS: tuple[type[BaseException], ...] = (
    RecordTypeError,
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    lzma.LZMAError,
    EOFError,
    NotImplementedError,
)

# General purpose bit 0 of a ZIP entry header
_ENCRYPTED_FLAG = 0x1


class UnzipConfig(OutputModeConfig):
    """Configuration for the unzip expansion."""

    pass


class UnzipFile(BaseExpansion):
    """Emit every file inside each incoming ZIP archive.

    Config options:
        output_as_buffer: Emit raw bytes instead of text (default: False)
        encoding: Text codec when emitting text (default: "utf-8")

    Directory entries are skipped. An input that can't be read as an
    archive is logged and dropped; the next input is processed normally.
    """

    name = "unzip_file"
    plugin_version = "1.0.0"

    malformed_errors = _MALFORMED_ARCHIVE_ERRORS
    malformed_message = "Ignoring invalid ZIP file received"

    def __init__(self, config: dict[str, Any], *, reader: Channel[Record], writer: Channel[Record]) -> None:
        super().__init__(config, reader=reader, writer=writer)
        self._cfg = UnzipConfig.from_dict(config)

    def expand(self, record: Record) -> Generator[Record, None, None]:
        if not isinstance(record, bytes):
            raise RecordTypeError(self.name, "binary", record)

        with zipfile.ZipFile(io.BytesIO(record)) as archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                if info.flag_bits & _ENCRYPTED_FLAG:
                    raise zipfile.BadZipFile(f"Entry {info.filename!r} is encrypted")
                self._logger.info("Unzipping received file", entry=info.filename)
                yield self._cfg.render(archive.read(info))
