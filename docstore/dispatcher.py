"""
Request dispatcher: turns one decoded request object into a store operation.

A request looks like::

    {"Method": "POST", "Type": "News", "file": ["News", "today.json"],
     "Data_ID": "auto",
     "Surface_content": "{\\"title\\": \\"A\\"}", "Main_content": "{\\"body\\": \\"x\\"}"}

and the answer is ``(status_code, {"status": ..., "message": ..., "data": ...})``.
"""
import json
import logging
from typing import Any, Dict, Optional, Tuple

from .errors import ClientError, NotFound, StoreError
from .storage.documents import DocumentStore, find_by_id, is_int_id, next_id, target_array
from .storage.formats import FormatDescriptor, FormatRegistry
from .storage.merge import build_created_item, build_updated_item

ALL = "ALL"
AUTO_ID = "auto"
CONTENT_FIELDS = ("Surface_content", "Main_content")


def api_response(status: str, message: str, data: Any = None) -> Dict[str, Any]:
    body = {"status": status, "message": message}
    if data is not None:
        body["data"] = data
    return body


def file_reference(request_obj: Dict[str, Any]) -> str:
    """'file' is a path segment, or two segments joined with '/'."""
    value = request_obj.get("file")
    if isinstance(value, str):
        return value
    if isinstance(value, list) and len(value) == 2 and all(isinstance(v, str) for v in value):
        return f"{value[0]}/{value[1]}"
    return ""


def _reject_constant(name):
    raise ValueError(f"{name} is not valid JSON")


def parse_contents(request_obj: Dict[str, Any], method: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    suffix = "" if method == "POST" else f" for {method}"
    raw = [request_obj.get(name) for name in CONTENT_FIELDS]
    if not all(isinstance(r, str) for r in raw):
        raise ClientError(f"Missing 'Surface_content' or 'Main_content' for {method} operation.")

    parsed = []
    for name, text in zip(CONTENT_FIELDS, raw):
        try:
            value = json.loads(text, parse_constant=_reject_constant)
        except json.JSONDecodeError as e:
            raise ClientError(f"Invalid JSON in '{name}'{suffix}: {e.msg} at offset {e.pos}") from e
        except ValueError as e:
            # NaN/Infinity, or an integer past the digit limit
            raise ClientError(f"Invalid JSON in '{name}'{suffix}: {e}") from e
        try:
            json.dumps(value, ensure_ascii=False).encode("utf-8")
        except UnicodeEncodeError as e:
            raise ClientError(f"Invalid JSON in '{name}'{suffix}: unpaired surrogate in string") from e
        parsed.append(value)
    if not all(isinstance(p, dict) for p in parsed):
        raise ClientError(f"Content must be JSON objects in 'Surface_content' and 'Main_content'{suffix}.")
    return parsed[0], parsed[1]


def parse_selector(request_obj: Dict[str, Any], method: str):
    """Return ALL or an int id from Data_ID."""
    if "Data_ID" not in request_obj:
        raise ClientError(f"Data_ID not specified for {method} operation.")
    value = request_obj["Data_ID"]
    if value == ALL and isinstance(value, str):
        return ALL
    if is_int_id(value):
        return value
    raise ClientError(f"Invalid Data_ID format for {method} operation. Expected 'ALL' or a number.")


class Dispatcher:
    """Runs GET/POST/PUT/DELETE requests against a DocumentStore.

    Every failure is converted to an error response here; handle() never raises.
    """

    def __init__(self, registry: FormatRegistry, store: DocumentStore, logger: Optional[logging.Logger] = None):
        self.registry = registry
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self._handlers = {
            "GET": self.read,
            "POST": self.create,
            "PUT": self.update,
            "DELETE": self.delete,
        }

    def handle(self, request_obj: Any) -> Tuple[int, Dict[str, Any]]:
        if not isinstance(request_obj, dict):
            return 400, api_response("error", "Invalid JSON in request body.")
        method = request_obj.get("Method")
        if not isinstance(method, str):
            return 400, api_response("error", "Missing or invalid 'Method' field in JSON request.")

        type_name = request_obj.get("Type")
        try:
            fmt = self.registry.resolve(type_name)
            handler = self._handlers.get(method)
            if handler is None:
                raise ClientError(f"Unknown 'Method' specified in JSON request: {method}")
            message, data = handler(request_obj, type_name, fmt)
        except StoreError as e:
            log = self.logger.warning if e.status_code < 500 else self.logger.error
            log("%s %s failed (%s): %s", method, type_name, e.status_code, e.message)
            return e.status_code, api_response("error", e.message)
        except Exception as e:
            self.logger.exception("Unexpected failure during %s operation", method)
            return 500, api_response("error", f"Server error during {method} operation: {e}")
        return 200, api_response("success", message, data)

    def _path_for(self, request_obj: Dict[str, Any], method: str):
        ref = file_reference(request_obj)
        if not ref:
            raise ClientError(f"Filename not specified for {method} operation.")
        return self.store.resolve_path(ref)

    def read(self, request_obj: Dict[str, Any], type_name: str, fmt: FormatDescriptor):
        path = self._path_for(request_obj, "GET")
        selector = parse_selector(request_obj, "GET")
        doc = self.store.load_existing(path, fmt, type_name)
        if selector == ALL:
            return "Data retrieved successfully.", doc

        _, array = target_array(doc, fmt)
        index = find_by_id(array, selector)
        if index is None:
            raise NotFound(f"Item with Data_ID {selector} not found.")
        return "Item retrieved successfully.", array[index]

    def create(self, request_obj: Dict[str, Any], type_name: str, fmt: FormatDescriptor):
        data_id = request_obj.get("Data_ID")
        if not isinstance(data_id, str):
            raise ClientError("Missing or invalid 'Data_ID' for POST. Expected 'auto'.")
        if data_id != AUTO_ID:
            raise ClientError("Invalid 'Data_ID' for POST. Expected 'auto'.")
        path = self._path_for(request_obj, "POST")
        surface, main = parse_contents(request_obj, "POST")

        doc, array = target_array(self.store.load_or_init(path, fmt), fmt)
        item = build_created_item(surface, main, next_id(array))
        array.append(item)
        self.store.persist(path, doc)
        self.logger.info("Data saved to %s with ID: %s", path, item["id"])
        return "Data saved successfully.", item

    def update(self, request_obj: Dict[str, Any], type_name: str, fmt: FormatDescriptor):
        path = self._path_for(request_obj, "PUT")
        item_id = request_obj.get("Data_ID")
        if not is_int_id(item_id):
            raise ClientError("Missing or invalid 'Data_ID' for PUT operation. Expected an integer ID.")
        surface, main = parse_contents(request_obj, "PUT")

        if not path.exists():
            raise NotFound(f"Target file not found for PUT: {path}")
        doc, array = target_array(self.store.load_or_init(path, fmt), fmt)
        index = find_by_id(array, item_id)
        if index is None:
            raise NotFound(f"Item with Data_ID {item_id} not found in {type_name} for update.")
        array[index] = build_updated_item(array[index], surface, main, item_id)
        self.store.persist(path, doc)
        self.logger.info("Item with ID %s updated in %s", item_id, path)
        return "Item updated successfully.", array[index]

    def delete(self, request_obj: Dict[str, Any], type_name: str, fmt: FormatDescriptor):
        path = self._path_for(request_obj, "DELETE")
        selector = parse_selector(request_obj, "DELETE")
        doc = self.store.load_existing(path, fmt, type_name)
        _, array = target_array(doc, fmt)

        if selector == ALL:
            array.clear()
            message = f"All items deleted from {type_name}"
        else:
            index = find_by_id(array, selector)
            if index is None:
                raise NotFound(f"Item with Data_ID {selector} not found in {type_name}.")
            del array[index]
            message = f"Item with ID {selector} deleted from {type_name}"

        self.store.persist(path, doc)
        self.logger.info("%s. File: %s", message, path)
        return message, None
