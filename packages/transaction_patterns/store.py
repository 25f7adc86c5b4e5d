"""Transaction store collaborator: protocol, in-memory store, snapshot loader.

The engine never talks to the remote REST API itself. Callers hand it a
store that speaks the REST record shape (``type``, ``amount``, ``category``,
``date``, ``description``, ``_id``):

- ``TransactionStore``: the fetch/create/update/delete contract.
- ``InMemoryStore``: a process-local implementation used by the CLI and tests.
- ``load_snapshot``: read a JSON export of ``GET /api/expenses``.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Iterable, Mapping
from os import PathLike
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from .logging_setup import get_logger
from .models import StoredTransaction

_logger = get_logger("transaction_patterns.store")

# Keys accepted when the snapshot is a wrapper object rather than a bare list
_SNAPSHOT_LIST_KEYS: tuple[str, ...] = ("expenses", "transactions")


class SubmissionError(RuntimeError):
    """The store rejected a create/update/delete request."""


class SnapshotError(ValueError):
    """A transaction snapshot could not be read or has the wrong shape."""


@runtime_checkable
class TransactionStore(Protocol):
    def fetch(self) -> list[dict[str, Any]]: ...

    def create(self, payload: Mapping[str, Any]) -> dict[str, Any]: ...

    def update(self, record_id: str, payload: Mapping[str, Any]) -> dict[str, Any]: ...

    def delete(self, record_id: str) -> None: ...


def _validated_record(payload: Mapping[str, Any], record_id: str) -> dict[str, Any]:
    try:
        StoredTransaction.model_validate({**payload, "_id": record_id})
    except ValidationError as exc:
        raise SubmissionError(
            f"invalid transaction payload: {exc.error_count()} error(s)"
        ) from exc
    record = {k: v for k, v in payload.items() if k not in {"_id", "id"}}
    record["_id"] = record_id
    return record


class InMemoryStore:
    """Process-local store keeping records in insertion order.

    Created/updated payloads are validated with the same rules the detector
    applies, so a record this store accepts is never skipped as malformed.
    Not thread-safe; one store belongs to one session.
    """

    def __init__(self, records: Iterable[Mapping[str, Any]] = ()) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        for rec in records:
            # Seed as-is: snapshots may legitimately contain malformed rows.
            rid = rec.get("_id")
            rid = str(rid) if rid is not None else uuid.uuid4().hex
            self._records[rid] = {**rec, "_id": rid}

    def __len__(self) -> int:
        return len(self._records)

    def fetch(self) -> list[dict[str, Any]]:
        return [dict(rec) for rec in self._records.values()]

    def create(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        rid = uuid.uuid4().hex
        record = _validated_record(payload, rid)
        self._records[rid] = record
        _logger.info("store:create id=%s type=%s", rid, record.get("type"))
        return dict(record)

    def update(self, record_id: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        if record_id not in self._records:
            raise SubmissionError(f"unknown transaction id: {record_id!r}")
        merged = {**self._records[record_id], **payload}
        record = _validated_record(merged, record_id)
        self._records[record_id] = record
        _logger.info("store:update id=%s", record_id)
        return dict(record)

    def delete(self, record_id: str) -> None:
        if self._records.pop(record_id, None) is None:
            raise SubmissionError(f"unknown transaction id: {record_id!r}")
        _logger.info("store:delete id=%s", record_id)


def load_snapshot(path: str | PathLike[str]) -> list[dict[str, Any]]:
    """Read a JSON snapshot of store records.

    Accepts a bare JSON array or an object wrapping the array under
    ``"expenses"`` or ``"transactions"``. Elements are returned untouched;
    malformed elements are left for the detector to skip. Raises
    :class:`SnapshotError` for unreadable files, invalid JSON or a non-list
    payload.
    """

    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise SnapshotError(f"file not found: {p}") from exc
    except OSError as exc:
        raise SnapshotError(f"cannot read {p}: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"invalid JSON in {p}: {exc.msg} (line {exc.lineno})") from exc

    if isinstance(data, Mapping):
        for key in _SNAPSHOT_LIST_KEYS:
            if isinstance(data.get(key), list):
                data = data[key]
                break
    if not isinstance(data, list):
        raise SnapshotError(f"expected a JSON array of transactions in {p}")
    if not all(isinstance(item, Mapping) for item in data):
        raise SnapshotError(f"every transaction in {p} must be a JSON object")

    _logger.debug("snapshot:loaded path=%s records=%d", p, len(data))
    return data


__all__ = [
    "InMemoryStore",
    "SnapshotError",
    "SubmissionError",
    "TransactionStore",
    "load_snapshot",
]
