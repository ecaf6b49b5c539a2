"""Configuration constants.

Values that are part of the macro dialect or of the client-facing contract
and therefore not user-configurable. For configurable values, see models.py.
"""

# =============================================================================
# Plugins
# =============================================================================

INIT_DEPS_PLUGIN = "init-deps"
HOOKS_PLUGIN = "hooks"

PLUGIN_NAMES: tuple[str, ...] = (INIT_DEPS_PLUGIN, HOOKS_PLUGIN)
"""Known macro families, in default dispatch order."""

# =============================================================================
# Macro dialect
# =============================================================================

INIT_TARGET_MACRO = "INIT_TARGET"
INIT_TARGET_MIN_ARGS = 4
"""INIT_TARGET(name, stage, scope, deps...)."""

HOOK_MACRO = "HOOK"
HOOK_RUN_MACRO = "HOOK_RUN"

# =============================================================================
# Diagnostics
# =============================================================================

INIT_DIAGNOSTIC_SOURCE = "elysium-init"
HOOKS_DIAGNOSTIC_SOURCE = "elysium-hooks"

# =============================================================================
# Language server
# =============================================================================

SERVER_NAME = "elysium-lsp"

COMPLETION_TRIGGER_CHARACTERS: tuple[str, ...] = ("(", ",", '"')

CONFIG_DIR_NAME = ".elysium"
