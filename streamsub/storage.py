"""Persists serialized subtitles without exposing partially written files."""

import logging
import os
import tempfile
from abc import ABC, abstractmethod

from .exceptions import StorageError, FileSystemError
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)


class StorageSink(ABC):
    """Abstract destination for finished subtitle files."""

    @abstractmethod
    def write(self, name: str, mime_type: str, data: bytes) -> str:
        """
        Stores `data` under `name`.

        The artifact becomes visible only once it is complete; a failed
        write leaves nothing behind.

        Returns:
            A reference to the stored artifact (a path for file sinks).

        Raises:
            StorageError: If the data cannot be stored.
        """


class FileStorageSink(StorageSink):
    """Writes into a directory through a pending temp file and an atomic rename."""

    def __init__(self, output_dir: str):
        self.output_dir = output_dir

    def write(self, name: str, mime_type: str, data: bytes) -> str:
        if not name or os.path.basename(name) != name:
            raise StorageError(f"Invalid output file name: {name!r}")
        try:
            ensure_dir_exists(self.output_dir)
        except FileSystemError as e:
            raise StorageError(f"Output directory unavailable: {e}") from e

        final_path = os.path.join(self.output_dir, name)
        logger.info(f"Writing {len(data)} bytes ({mime_type}) to {final_path}")
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=self.output_dir,
                prefix=f".{name}.",
                suffix=".pending",
                delete=False,
            ) as tmp:
                pending_path = tmp.name
                try:
                    tmp.write(data)
                    tmp.flush()
                    os.fsync(tmp.fileno())
                except Exception:
                    tmp.close()
                    os.remove(pending_path)
                    raise
            try:
                os.replace(pending_path, final_path)
            except OSError:
                os.remove(pending_path)
                raise
        except OSError as e:
            logger.error(f"Failed to write {final_path}: {e}", exc_info=True)
            raise StorageError(f"Could not write {final_path}: {e}") from e

        logger.info(f"Saved {final_path}")
        return final_path
