"""Record store that keeps one JSON file per collection."""

from dataclasses import dataclass
from pathlib import Path

from macro_manager.domain.errors import PersistenceError
from macro_manager.services.records import RecordStore


@dataclass
class JsonFileRecordStore(RecordStore):
    """Local-disk record store."""

    data_dir: Path

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def load(self, collection: str) -> str | None:
        """Return the file contents for a collection, if the file exists."""
        path = self._path(collection)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError(f"Failed to read {path}") from exc

    def save(self, collection: str, blob: str) -> None:
        """Write a collection blob, replacing the previous file atomically."""
        path = self._path(collection)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(blob, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Failed to write {path}") from exc
