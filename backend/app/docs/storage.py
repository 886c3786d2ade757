"""Local file storage for uploaded documents."""

import asyncio
import logging
import re
import uuid
from pathlib import Path

from backend.app.errors import StorageError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_file_name(filename: str) -> str:
    """Strip directories and unsafe characters from a client-supplied name."""
    base = Path(filename).name or "upload"
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned[:120] or "upload"


class LocalFileStore:
    """Stores one file per document under a base directory."""

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)

    async def save(self, filename: str, data: bytes) -> str:
        """Write data to a new uniquely named file.

        Returns:
            Stored file path

        Raises:
            StorageError: If the file cannot be written
        """
        path = self._base_dir / f"{uuid.uuid4().hex}_{safe_file_name(filename)}"
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            logger.error(f"Failed to store upload {filename}: {e}")
            raise StorageError("Could not store uploaded file") from e
        return str(path)

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def delete(self, file_path: str) -> None:
        """Delete a stored file. A file that is already gone is not an error."""
        try:
            await asyncio.to_thread(Path(file_path).unlink)
        except FileNotFoundError:
            logger.warning(f"Stored file already missing: {file_path}")
        except OSError as e:
            logger.error(f"Failed to delete stored file {file_path}: {e}")
