"""Go-to-definition, references, implementations, symbols and call hierarchy."""

from kitescope.navigation.calls import CallHierarchyOps
from kitescope.navigation.ops import NavigationOps
from kitescope.navigation.symbols import document_symbols, workspace_symbols

__all__ = ["CallHierarchyOps", "NavigationOps", "document_symbols", "workspace_symbols"]
