"""Change files: one JSON document per author-declared change.

A change file looks like:

    {
      "type": "minor",
      "packageName": "pkg-1",
      "dependentChangeType": "patch",
      "comment": "Add retry option",
      "email": "dev@example.com",
      "commit": "3f2a9c1",
      "date": "2019-01-01T00:00:00+00:00"
    }

A file may also hold several changes as {"changes": [{...}, {...}]}.
"""

from __future__ import annotations

import json
import re
import uuid
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .errors import ChangeFileError
from .models import ChangeMetadata, ChangeRecord

_METADATA_FIELDS = ("comment", "email", "commit", "date")
_RECORD_FIELDS = ("packageName", "type", "dependentChangeType")


def to_change_record(data: dict[str, Any]) -> ChangeRecord:
    """Build a ChangeRecord from one change entry.

    Known metadata keys go to ChangeMetadata fields; unknown keys are kept
    in ChangeMetadata.extra.

    Raises:
        ValidationError: If required fields are missing or invalid.
    """
    fields = {k: data[k] for k in _RECORD_FIELDS if k in data}
    metadata = {k: data[k] for k in _METADATA_FIELDS if k in data}
    extra = {
        k: v
        for k, v in data.items()
        if k not in _RECORD_FIELDS and k not in _METADATA_FIELDS
    }
    return ChangeRecord.model_validate(
        {**fields, "metadata": ChangeMetadata(**metadata, extra=extra)}
    )


def to_change_entry(record: ChangeRecord) -> dict[str, Any]:
    """Inverse of to_change_record(): the JSON object for a change file."""
    meta = record.metadata
    entry: dict[str, Any] = {
        "type": record.severity.value,
        "packageName": record.package_name,
        "dependentChangeType": record.dependent_severity.value,
        "comment": meta.comment,
        "email": meta.email,
        "commit": meta.commit,
    }
    if meta.date is not None:
        entry["date"] = meta.date.isoformat()
    entry.update(meta.extra)
    return entry


def read_change_file(path: Path) -> list[ChangeRecord]:
    """Read every change in one change file.

    Raises:
        ChangeFileError: If the file is not JSON or a change is invalid.
    """
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        raise ChangeFileError(f"Cannot read change file {path}: {exc}") from exc

    if isinstance(data, dict) and "changes" in data:
        entries = data["changes"]
    else:
        entries = [data]
    if not isinstance(entries, list):
        raise ChangeFileError(f"Invalid change file {path}: 'changes' must be a list")

    records: list[ChangeRecord] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ChangeFileError(f"Invalid change file {path}: expected an object")
        try:
            records.append(to_change_record(entry))
        except (ValidationError, ValueError) as exc:
            raise ChangeFileError(f"Invalid change file {path}:\n{exc}") from exc
    return records


def read_change_files(change_dir: Path) -> list[tuple[Path, ChangeRecord]]:
    """Read all *.json change files in a directory, in file-name order.

    A missing directory means there are no changes.

    Returns:
        List of (file path, change record) pairs.
    """
    if not change_dir.is_dir():
        return []

    changes: list[tuple[Path, ChangeRecord]] = []
    for path in sorted(change_dir.glob("*.json")):
        for record in read_change_file(path):
            changes.append((path, record))
    return changes


def change_file_name(package_name: str) -> str:
    """Unique file name for a new change to a package.

    Example:
        "@scope/pkg-1" → "scope-pkg-1-<uuid>.json"
    """
    safe = re.sub(r"[^A-Za-z0-9._-]+", "-", package_name).strip("-")
    return f"{safe}-{uuid.uuid4()}.json"


def write_change_file(change_dir: Path, record: ChangeRecord) -> Path:
    """Write a change record to a new file in change_dir and return its path."""
    change_dir.mkdir(parents=True, exist_ok=True)
    path = change_dir / change_file_name(record.package_name)
    path.write_text(json.dumps(to_change_entry(record), indent=2) + "\n")
    return path


def delete_change_files(paths: Iterable[Path]) -> list[Path]:
    """Delete consumed change files. Returns the paths actually removed."""
    removed: list[Path] = []
    for path in sorted(set(paths)):
        if path.exists():
            path.unlink()
            removed.append(path)
    return removed
