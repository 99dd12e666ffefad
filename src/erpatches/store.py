"""Document store for characters, patch notes and dataset metadata.

Collections mirror the hosted database layout: one JSON document per record
under ``<root>/<collection>/<doc_id>.json``. Writes go through ``batch_set``
in fixed-size chunks; a failed chunk is recovered by re-running the job,
which is idempotent by patch id.
"""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .models import Character, PatchNote, utc_now

CHARACTERS = "characters"
PATCH_NOTES = "patchNotes"
METADATA = "metadata"
BALANCE_CHANGES = "balanceChanges"

BATCH_SIZE = 500


class StoreError(Exception):
    """Raised when the store is unavailable or holds an unreadable document."""


class JsonStore:
    """A directory of JSON documents grouped into collections."""

    def __init__(self, root: Path):
        self.root = root

    def check_available(self) -> None:
        """Fail fast if the store directory cannot be created or written.

        Raises:
            StoreError: If the root is not a writable directory
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            probe = self.root / ".write-check"
            probe.write_text("ok", encoding="utf-8")
            probe.unlink()
        except OSError as e:
            raise StoreError(f"Store not writable at {self.root}: {e}") from e

    def _path(self, collection: str, doc_id: str | int) -> Path:
        return self.root / collection / f"{doc_id}.json"

    def get(self, collection: str, doc_id: str | int) -> dict[str, Any] | None:
        """Read one document, or None if it does not exist.

        Raises:
            StoreError: If the document exists but is not valid JSON
        """
        path = self._path(collection, doc_id)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt document {collection}/{doc_id}: {e}") from e

    def set(self, collection: str, doc_id: str | int, data: dict[str, Any], merge: bool = False) -> None:
        """Write one document, optionally merging into what is stored."""
        if merge:
            existing = self.get(collection, doc_id) or {}
            data = {**existing, **data}
        path = self._path(collection, doc_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    def update(self, collection: str, doc_id: str | int, fields: dict[str, Any]) -> None:
        """Merge fields into an existing document.

        Raises:
            StoreError: If the document does not exist
        """
        if self.get(collection, doc_id) is None:
            raise StoreError(f"No document {collection}/{doc_id} to update")
        self.set(collection, doc_id, fields, merge=True)

    def all(self, collection: str) -> list[dict[str, Any]]:
        """Every document in a collection, ordered by document id."""
        directory = self.root / collection
        if not directory.exists():
            return []
        return [self.get(collection, p.stem) for p in sorted(directory.glob("*.json"))]  # type: ignore[misc]

    def batch_set(
        self,
        collection: str,
        docs: Iterable[tuple[str | int, dict[str, Any]]],
        batch_size: int = BATCH_SIZE,
    ) -> int:
        """Write documents in chunks of ``batch_size``.

        Returns:
            Number of documents written
        """
        pending = list(docs)
        written = 0
        for start in range(0, len(pending), batch_size):
            for doc_id, data in pending[start : start + batch_size]:
                self.set(collection, doc_id, data)
                written += 1
        return written

    # Typed access

    def get_character(self, name: str) -> Character | None:
        data = self.get(CHARACTERS, name)
        if data is None:
            return None
        try:
            return Character.model_validate(data)
        except ValidationError as e:
            raise StoreError(f"Invalid character document {name}: {e}") from e

    def all_characters(self) -> list[Character]:
        try:
            return [Character.model_validate(d) for d in self.all(CHARACTERS)]
        except ValidationError as e:
            raise StoreError(f"Invalid character document: {e}") from e

    def save_characters(self, characters: Iterable[Character]) -> int:
        return self.batch_set(CHARACTERS, ((c.name, c.to_json_dict()) for c in characters))

    def get_patch_note(self, patch_id: int) -> PatchNote | None:
        data = self.get(PATCH_NOTES, patch_id)
        return PatchNote.model_validate(data) if data is not None else None

    def all_patch_notes(self) -> list[PatchNote]:
        """Every stored patch note, newest id first."""
        try:
            notes = [PatchNote.model_validate(d) for d in self.all(PATCH_NOTES)]
        except ValidationError as e:
            raise StoreError(f"Invalid patch note document: {e}") from e
        return sorted(notes, key=lambda n: n.id, reverse=True)

    def save_patch_notes(self, notes: Iterable[PatchNote]) -> int:
        return self.batch_set(PATCH_NOTES, ((n.id, n.to_json_dict()) for n in notes))

    def update_patch_note(self, patch_id: int, **fields: Any) -> None:
        """Merge camelCase-converted fields into a stored patch note."""
        note = self.get_patch_note(patch_id)
        if note is None:
            raise StoreError(f"No document {PATCH_NOTES}/{patch_id} to update")
        updated = note.model_copy(update=fields)
        self.set(PATCH_NOTES, patch_id, updated.to_json_dict())

    def get_unvalidated_patch_notes(self) -> list[PatchNote]:
        """Patch notes the link validator has not visited yet."""
        return [n for n in self.all_patch_notes() if n.status is None]

    def get_unparsed_patch_notes(self) -> list[PatchNote]:
        """Valid patch notes with character data that were never parsed."""
        return [
            n
            for n in self.all_patch_notes()
            if n.has_character_data and n.status == "success" and not n.is_parsed
        ]

    def stamp_metadata(self, dataset: str, **fields: Any) -> None:
        """Record a last-updated timestamp (plus extra fields) for a dataset."""
        self.set(METADATA, dataset, {"updatedAt": utc_now(), **fields}, merge=True)
