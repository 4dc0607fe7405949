from pathlib import Path
import json
from typing import Any, Dict, List, Optional, Tuple

from ..errors import ClientError, NotFound, StorageCorruption, StorageWriteError
from .formats import FormatDescriptor

Document = Any  # list of items, or dict wrapping one
Item = Dict[str, Any]


def is_int_id(value) -> bool:
    # bool is an int subclass but never a usable id
    return isinstance(value, int) and not isinstance(value, bool)


def shape_matches(doc: Document, fmt: FormatDescriptor) -> bool:
    if fmt.root_is_array:
        return isinstance(doc, list)
    return isinstance(doc, dict) and isinstance(doc.get(fmt.array_key), list)


def target_array(doc: Document, fmt: FormatDescriptor) -> Tuple[Document, List[Item]]:
    """Return (root, array) for doc, creating the wrapping structure if absent.

    A root of the wrong kind is replaced by the format's empty document; an
    object root that lacks a list at array_key gets an empty one, other
    top-level fields are kept.
    """
    if fmt.root_is_array:
        if not isinstance(doc, list):
            doc = fmt.empty_document()
        return doc, doc
    if not isinstance(doc, dict):
        doc = fmt.empty_document()
    if not isinstance(doc.get(fmt.array_key), list):
        doc[fmt.array_key] = []
    return doc, doc[fmt.array_key]


def find_by_id(array: List[Item], item_id: int) -> Optional[int]:
    for i, item in enumerate(array):
        if isinstance(item, dict) and is_int_id(item.get("id")) and item["id"] == item_id:
            return i
    return None


def next_id(array: List[Item]) -> int:
    max_id = 0
    for item in array:
        if isinstance(item, dict) and is_int_id(item.get("id")):
            max_id = max(max_id, item["id"])
    return max_id + 1


class DocumentStore:
    """One JSON document per (Type, file reference) under a storage root.

    Nothing is cached: every operation reads the file, and every mutation
    rewrites it in full.
    """

    def __init__(self, storage_dir: Path):
        self.storage_dir = Path(storage_dir)

    def resolve_path(self, file_ref: str) -> Path:
        if not file_ref:
            raise ClientError("Filename not specified.")
        if "\x00" in file_ref:
            raise ClientError("Invalid file reference: embedded null byte")
        root = self.storage_dir.resolve()
        p = (root / file_ref).resolve()
        if p == root or not p.is_relative_to(root) or p.is_dir():
            raise ClientError(f"Invalid file reference: {file_ref}")
        return p

    def _read(self, path: Path) -> str:
        with path.open("r", encoding="utf-8") as f:
            return f.read()

    def _parse(self, path: Path, text: str) -> Document:
        try:
            return json.loads(text)
        except ValueError as e:
            raise StorageCorruption(f"Could not parse JSON from file: {path}") from e

    def load_or_init(self, path: Path, fmt: FormatDescriptor) -> Document:
        """Load for a mutation: missing or blank files start as the empty shape."""
        if not path.exists():
            return fmt.empty_document()
        text = self._read(path)
        if not text.strip():
            return fmt.empty_document()
        doc, _ = target_array(self._parse(path, text), fmt)
        return doc

    def load_existing(self, path: Path, fmt: FormatDescriptor, type_name: str = "") -> Document:
        """Strict load: the file must exist, parse, and match fmt. Never repairs."""
        if not path.exists():
            raise NotFound(f"Target file not found: {path}")
        doc = self._parse(path, self._read(path))
        if not shape_matches(doc, fmt):
            if fmt.root_is_array:
                raise StorageCorruption(f"File for Type '{type_name}' is not a JSON array as expected.")
            raise StorageCorruption(
                f"File for Type '{type_name}' does not contain expected object/array structure "
                f"('{fmt.array_key}')."
            )
        return doc

    def persist(self, path: Path, doc: Document):
        # encode fully before the file is truncated
        try:
            data = json.dumps(doc, indent=2, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"Could not serialize document for {path}: {e}") from e
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageWriteError(f"Could not open file for writing: {path} ({e})") from e
