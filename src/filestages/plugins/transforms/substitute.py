# src/filestages/plugins/transforms/substitute.py
"""Substitute transform stage.

Replaces every occurrence of a literal string or regular expression in
each text record with a literal replacement.
"""

import re
from typing import Any, Self

from pydantic import Field, model_validator

from filestages.contracts import Record, RecordTypeError
from filestages.core.channel import Channel
from filestages.plugins.base import BaseTransform
from filestages.plugins.config_base import StageConfig


class SubstituteConfig(StageConfig):
    """Configuration for the substitute transform."""

    source: str = Field(..., min_length=1, description="Literal text, or a regular expression when regexp is true")
    replace: str = Field(..., description="Literal replacement text")
    regexp: bool = Field(default=False, description="Treat source as a regular expression")

    @model_validator(mode="after")
    def _validate_pattern(self) -> Self:
        if self.regexp:
            try:
                re.compile(self.source)
            except re.error as e:
                raise ValueError(f"invalid regular expression {self.source!r}: {e}") from e
        return self


class Substitute(BaseTransform):
    """Replace text in every record.

    Config options:
        source: Text or pattern to find (required)
        replace: Replacement text (required). Always literal: backslashes
            and group references are not expanded.
        regexp: Interpret source as a regular expression (default: False)

    Example config:
        - stage: substitute
          options:
            source: "http://localhost"
            replace: "https://example.org"
    """

    name = "substitute"
    plugin_version = "1.0.0"

    def __init__(self, config: dict[str, Any], *, reader: Channel[Record], writer: Channel[Record]) -> None:
        super().__init__(config, reader=reader, writer=writer)
        cfg = SubstituteConfig.from_dict(config)
        self._source = cfg.source
        self._replace = cfg.replace
        self._pattern = re.compile(cfg.source) if cfg.regexp else None

    def process(self, record: Record) -> Record:
        if not isinstance(record, str):
            raise RecordTypeError(self.name, "text", record)

        self._logger.info("Replacing text in input record", source=self._source, replace=self._replace)
        if self._pattern is None:
            return record.replace(self._source, self._replace)
        return self._pattern.sub(lambda _match: self._replace, record)
