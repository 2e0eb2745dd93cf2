"""Default plugin set.

Registration order is part of the contract: the first plugin returning a
result wins. Imports and exports come first so export modifiers are
consumed before any declaration plugin sees the statement.
"""

from ..context import PluginFactory
from .control import control_plugin
from .expressions import access_plugin, identifiers_plugin, operators_plugin
from .functions import functions_plugin
from .literals import literals_plugin
from .modules import export_table, exports_plugin, imports_plugin
from .statements import statements_plugin
from .types import types_plugin
from .variables import variables_plugin

DEFAULT_PLUGINS: list[PluginFactory] = [
    imports_plugin,
    exports_plugin,
    types_plugin,
    literals_plugin,
    identifiers_plugin,
    operators_plugin,
    access_plugin,
    functions_plugin,
    variables_plugin,
    control_plugin,
    statements_plugin,
]

__all__ = ["DEFAULT_PLUGINS", "export_table"]
