"""Stage system for filestages.

Exports the stage base classes, the stage registry, and the config base
classes. Concrete stages live in the sources, transforms and expansions
subpackages and are looked up through PluginManager.
"""

from filestages.plugins.base import BaseExpansion, BaseSource, BaseStage, BaseTransform
from filestages.plugins.config_base import PluginConfigError, StageConfig
from filestages.plugins.hookspecs import hookimpl
from filestages.plugins.manager import PluginManager, StageSpec

__all__ = [
    "BaseExpansion",
    "BaseSource",
    "BaseStage",
    "BaseTransform",
    "PluginConfigError",
    "PluginManager",
    "StageConfig",
    "StageSpec",
    "hookimpl",
]
