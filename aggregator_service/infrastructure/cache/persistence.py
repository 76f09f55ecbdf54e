import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from aggregator_service.adapters.interfaces.cache import PersistenceBackend, PersistenceKind
from aggregator_service.core.exceptions import CacheError
from aggregator_service.core.logging import get_logger

logger = get_logger(__name__)


class NullPersistence(PersistenceBackend):
    """Keeps nothing; the cache lives only in memory."""

    kind = PersistenceKind.NONE

    def load(self) -> Optional[str]:
        return None

    def save(self, payload: str) -> None:
        pass


class JsonFilePersistence(PersistenceBackend):
    """
    Stores the cache image as a single JSON file.

    Each save writes a temporary file in the same directory and renames it over
    the target, so readers never observe a half-written image.
    """

    kind = PersistenceKind.FILE

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            logger.info(f"No persisted cache image at {self.path}")
            return None
        return self.path.read_text(encoding="utf-8")

    def save(self, payload: str) -> None:
        directory = self.path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(directory), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error(f"Failed to persist cache image to {self.path}: {str(e)}")
            raise CacheError(
                f"Failed to persist cache image: {str(e)}",
                context={"path": str(self.path)}
            )
