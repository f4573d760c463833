"""
Compiled artifact representation.

A compiled artifact is the loaded module produced from a generated unit,
together with what is needed to instantiate its class and map errors back
to template lines.
"""

import types
from dataclasses import dataclass, field
from typing import Any, Dict

from .line_map import LineDirectiveMap


@dataclass
class CompiledArtifact:
    """
    Represents a compiled generated unit with metadata.

    This class encapsulates the executed module, the name of the generated
    class and the provenance map of the source it was compiled from.
    """

    filename: str                       # Pseudo filename the unit was compiled under
    artifact_type: str                  # Type: 'module'
    entry_point: str                    # Name of the generated class
    module: types.ModuleType
    line_map: LineDirectiveMap
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_valid(self) -> bool:
        """Check if the module defines the entry point class."""
        return isinstance(getattr(self.module, self.entry_point, None), type)

    def get_entry_class(self) -> type:
        """
        Return the generated class.

        Raises:
            RuntimeError: If the module does not define it
        """
        if not self.is_valid():
            raise RuntimeError(f"Entry point class '{self.entry_point}' not found in {self.filename}")
        return getattr(self.module, self.entry_point)
