# tests/plugins/test_hookspecs.py
"""Tests for pluggy hook specifications."""

import pluggy

from filestages.plugins.hookspecs import (
    PROJECT_NAME,
    FilestagesExpansionSpec,
    FilestagesSourceSpec,
    FilestagesTransformSpec,
    hookimpl,
)


class TestHookSpecs:
    def test_project_name(self) -> None:
        assert PROJECT_NAME == "filestages"

    def test_specs_register_with_pluggy(self) -> None:
        pm = pluggy.PluginManager(PROJECT_NAME)
        pm.add_hookspecs(FilestagesSourceSpec)
        pm.add_hookspecs(FilestagesTransformSpec)
        pm.add_hookspecs(FilestagesExpansionSpec)

        assert hasattr(pm.hook, "filestages_get_sources")
        assert hasattr(pm.hook, "filestages_get_transforms")
        assert hasattr(pm.hook, "filestages_get_expansions")

    def test_hookimpl_results_collected(self) -> None:
        pm = pluggy.PluginManager(PROJECT_NAME)
        pm.add_hookspecs(FilestagesTransformSpec)

        class Pack:
            @hookimpl
            def filestages_get_transforms(self) -> list[type]:
                return [str]

        pm.register(Pack())

        assert pm.hook.filestages_get_transforms() == [[str]]
