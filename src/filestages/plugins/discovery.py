# src/filestages/plugins/discovery.py
"""Built-in stage discovery by package scanning.

Imports every module in the stage subpackages and collects classes that:
1. Inherit from the role's base class (BaseSource, BaseTransform, BaseExpansion)
2. Have a non-empty `name` class attribute
3. Are not abstract
"""

import importlib
import inspect
import logging
import pkgutil
from typing import Any

from filestages.plugins.hookspecs import hookimpl

logger = logging.getLogger(__name__)

# Subpackage (under filestages.plugins) scanned for each stage role
STAGE_SCAN_CONFIG: dict[str, str] = {
    "sources": "filestages.plugins.sources",
    "transforms": "filestages.plugins.transforms",
    "expansions": "filestages.plugins.expansions",
}


def _get_base_classes() -> dict[str, type]:
    """Get base classes for discovery (deferred import)."""
    from filestages.plugins.base import BaseExpansion, BaseSource, BaseTransform

    return {
        "sources": BaseSource,
        "transforms": BaseTransform,
        "expansions": BaseExpansion,
    }


def discover_stages_in_package(package_name: str, base_class: type, exclude: type | None = None) -> list[type]:
    """Discover stage classes in a package.

    Args:
        package_name: Dotted package to scan (non-recursive)
        base_class: Base class that stages must inherit from
        exclude: Subclasses of this base are skipped (expansions are
            also transforms, but register under their own role)

    Returns:
        Discovered stage classes, in module then definition order
    """
    package = importlib.import_module(package_name)
    discovered: list[type] = []

    for module_info in sorted(pkgutil.iter_modules(package.__path__), key=lambda m: m.name):
        # Stage modules are our own code; import errors are bugs and propagate
        module = importlib.import_module(f"{package_name}.{module_info.name}")

        for name, obj in inspect.getmembers(module, inspect.isclass):
            if obj.__module__ != module.__name__:
                continue
            if not issubclass(obj, base_class) or obj is base_class:
                continue
            if exclude is not None and issubclass(obj, exclude):
                continue
            if inspect.isabstract(obj):
                continue

            stage_name = getattr(obj, "name", None)
            if not stage_name:
                logger.warning(
                    "Class %s in %s inherits from %s but has no/empty 'name' attribute - skipping",
                    name,
                    module.__name__,
                    base_class.__name__,
                )
                continue

            discovered.append(obj)

    return discovered


def discover_all_stages() -> dict[str, list[type]]:
    """Discover all built-in stages.

    Returns:
        Dict mapping role to stage classes:
        {
            "sources": [GlobRead, ReadFolder],
            "transforms": [EnvSub, GetFileFromFolder, Substitute],
            "expansions": [GunzipFile, UnzipFile],
        }

    Raises:
        ValueError: If two stages share a name
    """
    base_classes = _get_base_classes()
    result: dict[str, list[type]] = {}
    seen: dict[str, type] = {}

    for role, package_name in STAGE_SCAN_CONFIG.items():
        exclude = base_classes["expansions"] if role == "transforms" else None
        discovered = discover_stages_in_package(package_name, base_classes[role], exclude=exclude)

        for cls in discovered:
            stage_name: str = cls.name  # type: ignore[attr-defined]
            if stage_name in seen:
                raise ValueError(
                    f"Duplicate stage name '{stage_name}': found in both {seen[stage_name].__module__} and {cls.__module__}. "
                    f"Stage names must be unique."
                )
            seen[stage_name] = cls

        result[role] = discovered

    return result


def get_stage_description(stage_cls: type) -> str:
    """Return the first non-empty docstring line, or a name-based fallback."""
    if stage_cls.__doc__:
        for line in stage_cls.__doc__.strip().split("\n"):
            cleaned = line.strip()
            if cleaned:
                return cleaned

    name = getattr(stage_cls, "name", stage_cls.__name__)
    return f"{name} stage"


def create_dynamic_hookimpl(stage_classes: list[type], hook_method_name: str) -> object:
    """Create a pluggy hookimpl object returning the given stage classes.

    Args:
        stage_classes: Stage classes to register
        hook_method_name: Hook to implement (e.g., "filestages_get_sources")

    Returns:
        Object instance with the decorated hook method
    """

    class DynamicHookImpl:
        """Dynamically generated hook implementer."""

        pass

    def hook_method(self: Any) -> list[type]:
        return stage_classes

    setattr(DynamicHookImpl, hook_method_name, hookimpl(hook_method))
    return DynamicHookImpl()
