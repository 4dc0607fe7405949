from dataclasses import dataclass
from pathlib import Path
import json
from typing import Any, Dict, Iterable, List, Mapping

from ..errors import FormatError, UnknownType

FORMAT_FILE_PREFIX = "F_"

# Root-shape descriptors provisioned on every start.
BUILTIN_FORMATS: Dict[str, Dict[str, Any]] = {
    "MarketProduct": {"root_is_array": False, "array_key": "products"},
    "StoreProduct": {"root_is_array": False, "array_key": "products"},
    "News": {"root_is_array": False, "array_key": "articles"},
    "User@Account": {"root_is_array": False, "array_key": "Accounts"},
}

# Field map for account items. Informational only, never registered as a Type.
ACCOUNT_FIELDS: Dict[str, str] = {
    "id": "string",
    "username": "string",
    "email": "string",
    "password_hash": "string",
    "full_name": "string",
    "created_at": "string_datetime",
    "last_login": "string_datetime",
    "is_active": "boolean",
    "roles": "array_of_strings",
    "Account_Type": "string",
    "Member_Ship": "string",
}


@dataclass(frozen=True)
class FormatDescriptor:
    root_is_array: bool
    array_key: str = ""

    @classmethod
    def from_dict(cls, data: Any, source: str = "<memory>") -> "FormatDescriptor":
        if not isinstance(data, dict) or not isinstance(data.get("root_is_array"), bool):
            raise FormatError(f"Format file {source} missing 'root_is_array' boolean.")
        if data["root_is_array"]:
            return cls(root_is_array=True)
        key = data.get("array_key")
        if not isinstance(key, str) or not key:
            raise FormatError(
                f"Format file {source} missing 'array_key' string when 'root_is_array' is false."
            )
        return cls(root_is_array=False, array_key=key)

    def to_dict(self) -> Dict[str, Any]:
        if self.root_is_array:
            return {"root_is_array": True}
        return {"root_is_array": False, "array_key": self.array_key}

    def empty_document(self):
        """Minimal document this format allows: [] or {array_key: []}."""
        if self.root_is_array:
            return []
        return {self.array_key: []}


def format_path(formats_dir: Path, type_name: str) -> Path:
    return Path(formats_dir) / f"{FORMAT_FILE_PREFIX}{type_name}.json"


def _read_format_json(p: Path) -> Any:
    try:
        with p.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise FormatError(f"Error parsing format file {p}: {e.msg} at offset {e.pos}") from e
    except OSError as e:
        raise FormatError(f"Could not open format file {p}: {e}") from e


def load_format_file(path: Path) -> FormatDescriptor:
    p = Path(path)
    return FormatDescriptor.from_dict(_read_format_json(p), str(p))


class FormatRegistry:
    """Read-only mapping of Type name -> FormatDescriptor, built once at startup."""

    def __init__(self, formats: Mapping[str, FormatDescriptor]):
        self._formats = dict(formats)

    def __contains__(self, type_name) -> bool:
        return type_name in self._formats

    def __len__(self) -> int:
        return len(self._formats)

    def resolve(self, type_name) -> FormatDescriptor:
        fmt = self._formats.get(type_name) if isinstance(type_name, str) else None
        if fmt is None:
            raise UnknownType("" if type_name is None else str(type_name))
        return fmt

    def types(self) -> List[str]:
        return sorted(self._formats)

    @classmethod
    def from_definitions(cls, definitions: Mapping[str, Mapping[str, Any]]) -> "FormatRegistry":
        return cls({name: FormatDescriptor.from_dict(d, name) for name, d in definitions.items()})

    @classmethod
    def load_dir(cls, formats_dir: Path) -> "FormatRegistry":
        """Load every F_<Type>.json under formats_dir that declares a root shape."""
        formats = {}
        for p in sorted(Path(formats_dir).glob(f"{FORMAT_FILE_PREFIX}*.json")):
            data = _read_format_json(p)
            # field maps such as F_Account.json are not root-shape descriptors
            if not isinstance(data, dict) or "root_is_array" not in data:
                continue
            formats[p.stem[len(FORMAT_FILE_PREFIX):]] = FormatDescriptor.from_dict(data, str(p))
        return cls(formats)


def _write_json(path: Path, obj: Any):
    with path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)


def provision_formats(
    formats_dir: Path,
    definitions: Mapping[str, Mapping[str, Any]] = BUILTIN_FORMATS,
    extra_files: Iterable = (("Account", ACCOUNT_FIELDS),),
) -> FormatRegistry:
    """Write the built-in format files, then load the registry back from disk."""
    formats_dir = Path(formats_dir)
    formats_dir.mkdir(parents=True, exist_ok=True)
    for type_name, definition in definitions.items():
        _write_json(format_path(formats_dir, type_name), dict(definition))
    for name, content in extra_files:
        _write_json(format_path(formats_dir, name), dict(content))
    return FormatRegistry.load_dir(formats_dir)
