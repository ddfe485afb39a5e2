# src/filestages/plugins/manager.py
"""Stage manager for discovery, registration, and instantiation.

Uses pluggy for hook-based stage registration.
"""

from dataclasses import dataclass
from typing import Any

import pluggy

from filestages.contracts import Record, StageKind, StageSetupError
from filestages.core.channel import Channel
from filestages.core.config import FilestagesSettings
from filestages.plugins.base import BaseExpansion, BaseSource, BaseStage, BaseTransform
from filestages.plugins.discovery import get_stage_description
from filestages.plugins.hookspecs import (
    PROJECT_NAME,
    FilestagesExpansionSpec,
    FilestagesSourceSpec,
    FilestagesTransformSpec,
)


@dataclass(frozen=True)
class StageSpec:
    """Registration record for a stage class."""

    name: str
    kind: StageKind
    version: str
    description: str

    @classmethod
    def from_stage(cls, stage_cls: type[BaseStage]) -> "StageSpec":
        return cls(
            name=stage_cls.name,
            kind=stage_cls.kind,
            version=stage_cls.plugin_version,
            description=get_stage_description(stage_cls),
        )


class PluginManager:
    """Manages stage discovery, registration, and lookup.

    Usage:
        manager = PluginManager()
        manager.register_builtin_plugins()

        stage = manager.create_stage("substitute", {"source": "a", "replace": "b"}, reader=upstream, writer=downstream)
        await stage.run()
    """

    def __init__(self, settings: FilestagesSettings | None = None) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(FilestagesSourceSpec)
        self._pm.add_hookspecs(FilestagesTransformSpec)
        self._pm.add_hookspecs(FilestagesExpansionSpec)

        self._settings = settings if settings is not None else FilestagesSettings()

        self._sources: dict[str, type[BaseSource]] = {}
        self._transforms: dict[str, type[BaseTransform]] = {}
        self._expansions: dict[str, type[BaseExpansion]] = {}

    def register_builtin_plugins(self) -> None:
        """Discover and register all built-in stages.

        Call this once at startup to make built-in stages available.
        """
        from filestages.plugins.discovery import create_dynamic_hookimpl, discover_all_stages

        discovered = discover_all_stages()

        self.register(create_dynamic_hookimpl(discovered["sources"], "filestages_get_sources"))
        self.register(create_dynamic_hookimpl(discovered["transforms"], "filestages_get_transforms"))
        self.register(create_dynamic_hookimpl(discovered["expansions"], "filestages_get_expansions"))

    def register(self, plugin: Any) -> None:
        """Register a stage pack.

        Args:
            plugin: Instance implementing one or more hook methods
        """
        self._pm.register(plugin)
        self._refresh_caches()

    def _refresh_caches(self) -> None:
        """Refresh stage caches from hooks.

        Raises:
            ValueError: If two registered stages share a name (across all roles)
        """
        seen: dict[str, type[BaseStage]] = {}

        def collect[S: BaseStage](results: list[list[type[S]]]) -> dict[str, type[S]]:
            found: dict[str, type[S]] = {}
            for classes in results:
                for cls in classes:
                    name = cls.name
                    if name in seen:
                        raise ValueError(f"Duplicate stage name: '{name}'. Already registered by {seen[name].__name__}")
                    seen[name] = cls
                    found[name] = cls
            return found

        sources = collect(self._pm.hook.filestages_get_sources())
        transforms = collect(self._pm.hook.filestages_get_transforms())
        expansions = collect(self._pm.hook.filestages_get_expansions())

        self._sources = sources
        self._transforms = transforms
        self._expansions = expansions

    # === Getters ===

    def get_sources(self) -> list[type[BaseSource]]:
        """Get all registered source stages."""
        return list(self._sources.values())

    def get_transforms(self) -> list[type[BaseTransform]]:
        """Get all registered transform stages."""
        return list(self._transforms.values())

    def get_expansions(self) -> list[type[BaseExpansion]]:
        """Get all registered expansion stages."""
        return list(self._expansions.values())

    def get_stage_by_name(self, name: str) -> type[BaseStage] | None:
        """Get a stage class by name, whatever its role."""
        if name in self._sources:
            return self._sources[name]
        if name in self._transforms:
            return self._transforms[name]
        return self._expansions.get(name)

    def get_specs(self) -> list[StageSpec]:
        """Describe every registered stage, sorted by name."""
        classes: list[type[BaseStage]] = [*self._sources.values(), *self._transforms.values(), *self._expansions.values()]
        return sorted((StageSpec.from_stage(cls) for cls in classes), key=lambda spec: spec.name)

    # === Instantiation ===

    def create_stage(
        self,
        name: str,
        options: dict[str, Any] | None = None,
        *,
        writer: Channel[Record],
        reader: Channel[Record] | None = None,
    ) -> BaseStage:
        """Instantiate a stage with its channels.

        Settings-level stage_defaults are applied underneath ``options``.

        Args:
            name: Registered stage name
            options: Stage options from the host
            writer: Output channel
            reader: Input channel (required for transforms and expansions,
                rejected for sources)

        Returns:
            The constructed stage

        Raises:
            ValueError: If no stage is registered under ``name``
            StageSetupError: If the channels don't match the stage's role
            PluginConfigError: If the merged options are invalid
        """
        stage_cls = self.get_stage_by_name(name)
        if stage_cls is None:
            available = sorted([*self._sources, *self._transforms, *self._expansions])
            raise ValueError(f"Unknown stage: '{name}'. Available stages: {available}")

        config = {**self._settings.defaults_for(name), **(options or {})}

        if issubclass(stage_cls, BaseSource):
            if reader is not None:
                raise StageSetupError(f"Source stage '{name}' has no input; got a reader channel")
            return stage_cls(config, writer=writer)

        if reader is None or not issubclass(stage_cls, BaseTransform):
            raise StageSetupError(f"Stage '{name}' requires a reader channel")
        return stage_cls(config, reader=reader, writer=writer)
