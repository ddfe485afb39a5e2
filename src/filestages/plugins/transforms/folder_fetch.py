# src/filestages/plugins/transforms/folder_fetch.py
"""Folder fetch transform stage.

Treats each input record as a file name relative to a base folder and
emits that file's text content.
"""

from pathlib import Path
from typing import Any

from filestages.contracts import Record
from filestages.core.channel import Channel
from filestages.plugins.base import BaseTransform
from filestages.plugins.config_base import PathConfig


class FolderFetchConfig(PathConfig):
    """Configuration for the folder fetch transform.

    ``path`` is the base folder input names are resolved against.
    """

    pass


class GetFileFromFolder(BaseTransform):
    """Read files named by the input stream from a base folder.

    Config options:
        path: Base folder (required)
        encoding: Text codec (default: "utf-8")

    Names are always joined onto the base folder: "/a.txt" reads
    "<path>/a.txt". ".." segments are joined as given.

    A missing or unreadable file is fatal: run() logs it, stops the
    neighbouring stages, and re-raises the OSError.
    """

    name = "get_file_from_folder"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any], *, reader: Channel[Record], writer: Channel[Record]) -> None:
        super().__init__(config, reader=reader, writer=writer)
        self._cfg = FolderFetchConfig.from_dict(config)
        self._folder = Path(self._cfg.path).resolve()

    def process(self, record: Record) -> Record:
        name = record.decode(self._cfg.encoding) if isinstance(record, bytes) else record
        # Leading separators are dropped so absolute names stay under the base folder
        file_path = self._folder / name.lstrip("/\\")
        self._logger.info("Reading file", file=str(file_path))
        return self._cfg.decode(file_path.read_bytes())
