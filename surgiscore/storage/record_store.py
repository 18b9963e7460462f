"""
JSON-file record store.

Each collection is one JSON file under the store root::

    {
      "collection": "admissions",
      "records": {
        "<id>": {"schema_version": 1, "record": {...}}
      }
    }

Records are validated through their pydantic model on every read, so a file
edited by hand or written by an incompatible version fails loudly with a
StorageError instead of yielding a half-valid record.
"""

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from surgiscore.core.exceptions import StorageError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

T = TypeVar("T", bound=BaseModel)


class RecordStore(Generic[T]):
    """
    Store of one record type, keyed by the record's ``id`` field.

    Args:
        root: Directory holding the collection files
        collection: Collection name; the file is ``<root>/<collection>.json``
        model: Pydantic model class of the records
    """

    def __init__(self, root: Path, collection: str, model: Type[T]):
        if "id" not in model.model_fields:
            raise StorageError(f"{model.__name__} has no 'id' field", collection=collection)
        self.root = Path(root)
        self.collection = collection
        self.model = model
        self.path = self.root / f"{collection}.json"

    # ------------------------------------------------------------------ I/O

    def _load_raw(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {self.path}: {e}")
            raise StorageError(f"Failed to read collection file {self.path}", collection=self.collection) from e

        if not isinstance(document, dict) or not isinstance(document.get("records"), dict):
            raise StorageError(f"Malformed collection file {self.path}", collection=self.collection)
        return document["records"]

    def _decode(self, record_id: str, envelope: Any) -> T:
        if not isinstance(envelope, dict) or "record" not in envelope:
            raise StorageError(
                f"Record {record_id} has no envelope", collection=self.collection, details={"id": record_id}
            )
        version = envelope.get("schema_version")
        if version != SCHEMA_VERSION:
            raise StorageError(
                f"Record {record_id} has schema version {version}, expected {SCHEMA_VERSION}",
                collection=self.collection,
                details={"id": record_id, "schema_version": version},
            )
        try:
            return self.model.model_validate(envelope["record"])
        except ValidationError as e:
            raise StorageError(
                f"Record {record_id} failed validation as {self.model.__name__}",
                collection=self.collection,
                details={"id": record_id, "errors": e.errors(include_url=False)},
            ) from e

    def _load(self) -> Dict[str, T]:
        return {record_id: self._decode(record_id, envelope) for record_id, envelope in self._load_raw().items()}

    def _save(self, records: Dict[str, T]) -> None:
        document = {
            "collection": self.collection,
            "records": {
                record_id: {"schema_version": SCHEMA_VERSION, "record": record.model_dump(mode="json")}
                for record_id, record in records.items()
            },
        }
        tmp_path = self.path.with_suffix(".json.tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write {self.path}: {e}")
            raise StorageError(f"Failed to write collection file {self.path}", collection=self.collection) from e

    # ------------------------------------------------------------------ CRUD

    def add(self, record: T) -> T:
        """Insert a record, assigning an id if it has none. Returns the stored record."""
        records = self._load()
        record_id = getattr(record, "id", None)
        if not record_id:
            record_id = uuid.uuid4().hex
            record = record.model_copy(update={"id": record_id})
        elif record_id in records:
            raise StorageError(
                f"Record {record_id} already exists", collection=self.collection, details={"id": record_id}
            )
        records[record_id] = record
        self._save(records)
        logger.debug(f"Added {self.collection}/{record_id}")
        return record

    def get(self, record_id: str) -> Optional[T]:
        return self._load().get(record_id)

    def update(self, record_id: str, **changes: Any) -> T:
        """
        Apply field changes to a stored record.

        The merged record is validated through the model again, so an invalid
        change is rejected and the stored record left as it was. So is a change
        naming a field the model does not have.
        """
        unknown = sorted(set(changes) - set(self.model.model_fields))
        if unknown:
            raise StorageError(
                f"Unknown fields for {self.model.__name__}: {', '.join(unknown)}",
                collection=self.collection,
                details={"id": record_id, "fields": unknown},
            )
        records = self._load()
        current = records.get(record_id)
        if current is None:
            raise StorageError(
                f"Record {record_id} not found", collection=self.collection, details={"id": record_id}
            )
        try:
            updated = self.model.model_validate({**current.model_dump(), **changes, "id": record_id})
        except ValidationError as e:
            raise StorageError(
                f"Update to {record_id} failed validation",
                collection=self.collection,
                details={"id": record_id, "errors": e.errors(include_url=False)},
            ) from e
        records[record_id] = updated
        self._save(records)
        return updated

    def delete(self, record_id: str) -> bool:
        records = self._load()
        if records.pop(record_id, None) is None:
            return False
        self._save(records)
        return True

    def all(self) -> List[T]:
        return list(self._load().values())

    def where(self, predicate: Callable[[T], bool]) -> List[T]:
        return [record for record in self._load().values() if predicate(record)]

    def sorted(self, key: Callable[[T], Any], reverse: bool = False, predicate: Optional[Callable[[T], bool]] = None) -> List[T]:
        records = self.where(predicate) if predicate is not None else self.all()
        return sorted(records, key=key, reverse=reverse)

    def count(self) -> int:
        return len(self._load_raw())
