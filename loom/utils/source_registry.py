"""
Source path registry.

Backends cannot always address original template paths directly (network
shares, URLs). Such paths are replaced in generated code by an opaque token
registered here, and translated back when diagnostics are reported. A local
copy of each registered source is staged so debuggers and tooling can still
open it.

Entries are never evicted: a token minted by one transformer must stay
resolvable for diagnostics processed later, by any transformer.
"""

import os
import shutil
import tempfile
import threading
import uuid
from pathlib import Path
from typing import Dict, Optional

from .config import get_config
from .logging import get_logger

logger = get_logger(__name__)


def is_local_path(path: str) -> bool:
    """
    Return whether a path can be addressed directly by a backend.

    UNC style paths (``\\\\server\\share`` or ``//server/share``) and URLs are
    not local.
    """
    if not path:
        return True
    if path.startswith(("\\\\", "//")):
        return False
    return "://" not in path


class SourceRegistry:
    """
    Thread-safe token <-> path table.

    Every public operation runs inside a single lock so lookups and inserts
    from concurrent transformers are consistent.
    """

    def __init__(self, staging_dir: Optional[str] = None):
        """
        Initialize the registry.

        Args:
            staging_dir: Directory receiving local copies of registered
                sources (default: ``<tempdir>/loom-sources``)
        """
        self._lock = threading.Lock()
        self._paths: Dict[str, str] = {}
        self._tokens: Dict[str, str] = {}
        self.staging_dir = Path(staging_dir) if staging_dir else Path(tempfile.gettempdir()) / "loom-sources"

    def register(self, path: str, text: Optional[str] = None) -> str:
        """
        Return the token for ``path``, minting one on first use.

        Paths are matched case-insensitively. A local copy of the source is
        staged under the token's name if none exists yet.

        Args:
            path: Original source path
            text: Source text, used to stage the local copy without
                re-reading ``path``

        Returns:
            The token registered for ``path``
        """
        key = path.casefold()
        with self._lock:
            token = self._tokens.get(key)
            if token is None:
                token = str(uuid.uuid4())
                self._tokens[key] = token
                self._paths[token] = path
                logger.debug(f"Registered source {path} as {token}")
            self._stage_local_copy(token, path, text)
        return token

    def resolve(self, token: str) -> Optional[str]:
        """Return the path registered for ``token``, or None."""
        with self._lock:
            return self._paths.get(token)

    def token_for(self, path: str) -> Optional[str]:
        """Return the token registered for ``path``, or None."""
        with self._lock:
            return self._tokens.get(path.casefold())

    def translate(self, filename: str) -> str:
        """
        Translate a filename reported by a backend into an original path.

        Existing files are returned unchanged. Otherwise the last path
        segment is interpreted as a token; unknown tokens leave the filename
        unchanged.
        """
        if not filename or os.path.exists(filename):
            return filename

        segment = filename.replace("\\", "/").rsplit("/", 1)[-1]
        try:
            token = str(uuid.UUID(segment))
        except ValueError:
            return filename

        path = self.resolve(token)
        return path if path is not None else filename

    def local_copy_path(self, token: str) -> Path:
        """Return where the local copy for ``token`` is staged."""
        return self.staging_dir / token

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._paths

    def _stage_local_copy(self, token: str, path: str, text: Optional[str]) -> None:
        target = self.local_copy_path(token)
        if target.exists():
            return

        if text is not None:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        elif os.path.isfile(path):
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(path, target)
        else:
            logger.debug(f"No readable source for {path}; local copy not staged")
            return

        logger.debug(f"Staged local copy of {path} at {target}")


# Process-wide registry instance
_global_registry: Optional[SourceRegistry] = None
_global_registry_lock = threading.Lock()


def get_source_registry() -> SourceRegistry:
    """
    Get the process-wide source registry, creating it on first use.

    A registry created here stages local copies under the configured
    ``compilation.staging_dir``.
    """
    global _global_registry
    with _global_registry_lock:
        if _global_registry is None:
            _global_registry = SourceRegistry(get_config().compilation.staging_dir)
        return _global_registry


def set_source_registry(registry: Optional[SourceRegistry]) -> None:
    """Replace the process-wide source registry."""
    global _global_registry
    with _global_registry_lock:
        _global_registry = registry
