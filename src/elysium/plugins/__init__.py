"""Macro family plugins and the registry used to enable them."""

from collections.abc import Iterable

from elysium.config.constants import HOOKS_PLUGIN, INIT_DEPS_PLUGIN
from elysium.core.errors import PluginError
from elysium.plugins.base import MacroPlugin, MacroSpec
from elysium.plugins.hooks import HookPlugin
from elysium.plugins.init_deps import InitDependencyPlugin

PLUGIN_TYPES: dict[str, type[MacroPlugin]] = {
    INIT_DEPS_PLUGIN: InitDependencyPlugin,
    HOOKS_PLUGIN: HookPlugin,
}


def instantiate_plugins(
    names: Iterable[str], extensions: Iterable[str] = (".c",)
) -> list[MacroPlugin]:
    """Create one plugin per name, in the given order, skipping repeats.

    Raises:
        PluginError: If a name is not a known plugin.
    """
    suffixes = tuple(extensions)
    plugins: list[MacroPlugin] = []
    for name in dict.fromkeys(names):
        plugin_type = PLUGIN_TYPES.get(name)
        if plugin_type is None:
            raise PluginError.unknown(name, sorted(PLUGIN_TYPES))
        plugins.append(plugin_type(extensions=suffixes))
    return plugins


__all__ = [
    "HookPlugin",
    "InitDependencyPlugin",
    "MacroPlugin",
    "MacroSpec",
    "PLUGIN_TYPES",
    "instantiate_plugins",
]
