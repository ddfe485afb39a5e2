# src/filestages/plugins/hookspecs.py
"""pluggy hook specifications for filestages stages.

Stage packs implement these hooks to register their stage classes.
The plugin manager calls them during discovery.

Usage (implementing a stage pack):
    from filestages.plugins.hookspecs import hookimpl

    class MyStages:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def filestages_get_transforms(self):
            return [MyTransform]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from filestages.plugins.base import BaseExpansion, BaseSource, BaseTransform

PROJECT_NAME = "filestages"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class FilestagesSourceSpec:
    """Hook specifications for source stages."""

    @hookspec
    def filestages_get_sources(self) -> list[type["BaseSource"]]:  # type: ignore[empty-body]
        """Return source stage classes (not instances)."""


class FilestagesTransformSpec:
    """Hook specifications for transform stages."""

    @hookspec
    def filestages_get_transforms(self) -> list[type["BaseTransform"]]:  # type: ignore[empty-body]
        """Return transform stage classes."""


class FilestagesExpansionSpec:
    """Hook specifications for expansion stages."""

    @hookspec
    def filestages_get_expansions(self) -> list[type["BaseExpansion"]]:  # type: ignore[empty-body]
        """Return expansion stage classes."""
