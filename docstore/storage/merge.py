from typing import Any, Dict


def merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge: fields of a, then fields of b; b wins on collisions."""
    merged = dict(a)
    merged.update(b)
    return merged


def build_created_item(surface: Dict[str, Any], main: Dict[str, Any], new_id: int) -> Dict[str, Any]:
    item = merge(surface, main)
    # the allocator owns ids
    item.pop("id", None)
    item["id"] = new_id
    return item


def build_updated_item(
    existing: Dict[str, Any], surface: Dict[str, Any], main: Dict[str, Any], item_id: int
) -> Dict[str, Any]:
    item = merge(merge(existing, surface), main)
    item["id"] = item_id
    return item
