"""
Debug Artifacts Management for generated compilation units.

This module provides utilities for saving generated template units to disk
so they can be inspected when a transformation misbehaves.
"""

import re
import tempfile
from pathlib import Path
from typing import Optional

from .logging import get_logger

logger = get_logger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


class DebugArtifactManager:
    """Manages debugging artifacts for the transformation pipeline."""

    def __init__(self, artifacts_dir: Optional[str] = None):
        """
        Initialize debug artifact manager.

        Args:
            artifacts_dir: Directory receiving artifacts (default:
                ``<tempdir>/loom-debug``)
        """
        if artifacts_dir is None:
            self.debug_dir = Path(tempfile.gettempdir()) / "loom-debug"
        else:
            self.debug_dir = Path(artifacts_dir)

        logger.debug(f"Debug artifacts will be saved to: {self.debug_dir}")

    def get_generated_source_path(self, template_name: str) -> Path:
        """Get path for the generated unit of a template."""
        stem = _UNSAFE_NAME_CHARS.sub("_", Path(template_name).name) or "template"
        return self.debug_dir / f"{stem}.generated.py"

    def save_generated_source(self, template_name: str, source: str) -> Path:
        """
        Save a generated compilation unit to the debug directory.

        Args:
            template_name: Name or path of the template the unit came from
            source: Generated source text

        Returns:
            Path to saved file
        """
        self.debug_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.get_generated_source_path(template_name)
        file_path.write_text(source, encoding="utf-8")

        logger.info(f"Saved generated source: {file_path}")
        return file_path
