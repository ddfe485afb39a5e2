# tests/plugins/test_config_base.py
"""Tests for stage configuration base classes."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from filestages.plugins.config_base import OutputModeConfig, PathConfig, PluginConfigError, StageConfig, TextConfig


class TestStageConfig:
    """Tests for StageConfig base class."""

    def test_rejects_extra_fields(self) -> None:
        class MyConfig(StageConfig):
            name: str

        with pytest.raises(ValidationError) as exc_info:
            MyConfig(name="test", unknown_field="value")  # type: ignore[call-arg]

        assert "Extra inputs are not permitted" in str(exc_info.value)

    def test_from_dict_wraps_validation_error(self) -> None:
        class MyConfig(StageConfig):
            required_field: str

        with pytest.raises(PluginConfigError) as exc_info:
            MyConfig.from_dict({})

        assert "Invalid configuration for MyConfig" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ValidationError)

    def test_from_dict_success(self) -> None:
        class MyConfig(StageConfig):
            name: str
            count: int = 10

        cfg = MyConfig.from_dict({"name": "test"})

        assert cfg.name == "test"
        assert cfg.count == 10

    def test_from_dict_rejects_non_dict(self) -> None:
        with pytest.raises(PluginConfigError, match="config must be a dict, got list"):
            StageConfig.from_dict([])  # type: ignore[arg-type]


class TestTextConfig:
    def test_default_encoding(self) -> None:
        assert TextConfig.from_dict({}).encoding == "utf-8"

    def test_unknown_encoding_rejected(self) -> None:
        with pytest.raises(PluginConfigError, match="unknown encoding"):
            TextConfig.from_dict({"encoding": "no-such-codec"})

    def test_decode_replaces_invalid_bytes(self) -> None:
        cfg = TextConfig.from_dict({})

        assert cfg.decode(b"ok \xff!") == "ok �!"

    def test_decode_with_other_encoding(self) -> None:
        cfg = TextConfig.from_dict({"encoding": "latin-1"})

        assert cfg.decode("café".encode("latin-1")) == "café"


class TestOutputModeConfig:
    def test_render_text_by_default(self) -> None:
        assert OutputModeConfig.from_dict({}).render(b"abc") == "abc"

    def test_render_bytes_when_requested(self) -> None:
        assert OutputModeConfig.from_dict({"output_as_buffer": True}).render(b"abc") == b"abc"


class TestPathConfig:
    def test_path_required(self) -> None:
        with pytest.raises(PluginConfigError):
            PathConfig.from_dict({})

    def test_whitespace_path_rejected(self) -> None:
        with pytest.raises(PluginConfigError, match="path cannot be empty"):
            PathConfig.from_dict({"path": "   "})

    def test_resolved_path_relative_to_base(self) -> None:
        cfg = PathConfig.from_dict({"path": "data/in"})

        assert cfg.resolved_path(Path("/srv")) == Path("/srv/data/in")
        assert cfg.resolved_path() == Path("data/in")

    def test_resolved_path_absolute_ignores_base(self) -> None:
        cfg = PathConfig.from_dict({"path": "/abs/in"})

        assert cfg.resolved_path(Path("/srv")) == Path("/abs/in")
