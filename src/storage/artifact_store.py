"""Artifact store — reads, writes and removes reference/screenshot/diff images."""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path

from src.errors import StorageError

logger = logging.getLogger(__name__)


class ArtifactStore:
    """Filesystem access for image artifacts.

    Every OS-level failure surfaces as a ``StorageError``; removing a file
    that does not exist is not a failure.
    """

    def exists(self, path: str | Path) -> bool:
        return Path(path).is_file()

    def read_file(self, path: str | Path) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as e:
            logger.error("Failed to read artifact %s: %s", path, e)
            raise StorageError(f"Cannot read artifact {path}: {e}") from e

    def write_file(self, path: str | Path, data: bytes) -> Path:
        """Write bytes to ``path``, creating parent directories and overwriting."""
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error("Failed to write artifact %s: %s", path, e)
            raise StorageError(f"Cannot write artifact {path}: {e}") from e
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return path

    def write_base64(self, path: str | Path, encoded: str) -> Path:
        """Decode a base64 image and write the raw bytes."""
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise StorageError(f"Screenshot for {path} is not valid base64: {e}") from e
        return self.write_file(path, data)

    def remove_file(self, path: str | Path) -> bool:
        """Delete ``path`` if present. Returns True if a file was removed."""
        path = Path(path)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error("Failed to remove artifact %s: %s", path, e)
            raise StorageError(f"Cannot remove artifact {path}: {e}") from e
        logger.debug("Removed %s", path)
        return True
