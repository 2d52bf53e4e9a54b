"""Update operations on JSON documents such as package.json."""

import json
import re
from pathlib import Path

from .errors import ManifestError

SUPPORTED_OPERATORS = {"$set"}


def detect_indent(content: str) -> int | str:
    """Indentation used by the first indented line, 2 spaces by default."""
    match = re.search(r"^([ \t]+)\S", content, re.MULTILINE)
    if not match:
        return 2
    indent = match.group(1)
    return indent if "\t" in indent else len(indent)


def _split_path(path: str) -> tuple[str, str]:
    # Only the first dot separates; package names may contain dots
    section, sep, key = path.partition(".")
    if not sep or not section or not key:
        raise ManifestError(f"Invalid update path: {path!r}")
    return section, key


def apply_set(document: dict, update_info: dict[str, str]) -> dict:
    """Apply a $set of dotted paths to a document in place.

    Existing keys keep their position; new keys are appended to their section.
    """
    for path, value in update_info.items():
        section, key = _split_path(path)
        target = document.setdefault(section, {})
        if not isinstance(target, dict):
            raise ManifestError(f"Cannot set {path!r}: {section!r} is not an object")
        target[key] = value
    return document


def matches_query(document: dict, query: dict) -> bool:
    """True when every query key equals the document's value. {} matches all."""
    return all(document.get(key) == value for key, value in query.items())


def update_json_text(content: str, update: dict) -> str:
    """Apply an update operation to JSON text, keeping its formatting.

    Args:
        content: JSON document text
        update: Operation of the form {"query": {...}, "update": {"$set": {...}}}

    Returns:
        Updated JSON text, or the original text if the query doesn't match
    """
    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON document: {e}") from e

    if not isinstance(document, dict):
        raise ManifestError("JSON document must be an object")

    operators = update.get("update", {})
    unsupported = set(operators) - SUPPORTED_OPERATORS
    if unsupported:
        raise ManifestError(f"Unsupported update operators: {', '.join(sorted(unsupported))}")

    if not matches_query(document, update.get("query", {})):
        return content

    apply_set(document, operators.get("$set", {}))

    updated = json.dumps(document, indent=detect_indent(content), ensure_ascii=False)
    if content.endswith("\n"):
        updated += "\n"
    return updated


def update_json_file(path: str | Path, update: dict) -> str:
    """Apply an update operation to a JSON file and write it back."""
    file_path = Path(path)
    content = file_path.read_text(encoding="utf-8")
    updated = update_json_text(content, update)
    if updated != content:
        file_path.write_text(updated, encoding="utf-8")
    return updated
