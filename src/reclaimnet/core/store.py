"""
Record store used as the persistence substrate.

The engine never touches storage directly; the ledger and engine talk to a
RecordStore, namespaced by table name. Every public engine operation runs
inside store.transaction(): either all of its writes land or none do.

InMemoryStore is the in-process implementation. It serialises all work
behind one re-entrant lock (single writer) and undoes the writes of a
transaction whose body raises.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple, runtime_checkable

COMMITMENTS = "commitments"
IDENTIFIER_INDEX = "identifier_to_commitment"
PROOFS = "proofs"
PROOF_BY_COMMITMENT = "proof_by_commitment"
EXPIRED_COMMITMENTS = "expired_commitments"
EPOCHS = "epochs"


@runtime_checkable
class RecordStore(Protocol):
    """Transactional key-value store interface."""

    def get(self, table: str, key: Any) -> Optional[Any]:  # pragma: no cover - interface
        ...

    def put(self, table: str, key: Any, value: Any) -> None:  # pragma: no cover - interface
        ...

    def delete(self, table: str, key: Any) -> None:  # pragma: no cover - interface
        ...

    def exists(self, table: str, key: Any) -> bool:  # pragma: no cover - interface
        ...

    def keys(self, table: str) -> List[Any]:  # pragma: no cover - interface
        ...

    def new_id(self) -> str:  # pragma: no cover - interface
        ...

    def transaction(self):  # pragma: no cover - interface
        ...


class InMemoryStore:
    def __init__(self) -> None:
        self._tables: Dict[str, Dict[Any, Any]] = {}
        self._lock = threading.RLock()
        self._journals: List[Dict[Tuple[str, Any], Tuple[bool, Any]]] = []

    def _record(self, table: str, key: Any) -> None:
        if self._journals:
            journal = self._journals[-1]
            if (table, key) not in journal:
                rows = self._table(table)
                journal[(table, key)] = (key in rows, rows.get(key))

    def _table(self, table: str) -> Dict[Any, Any]:
        return self._tables.setdefault(table, {})

    def get(self, table: str, key: Any) -> Optional[Any]:
        with self._lock:
            return self._table(table).get(key)

    def put(self, table: str, key: Any, value: Any) -> None:
        with self._lock:
            self._record(table, key)
            self._table(table)[key] = value

    def delete(self, table: str, key: Any) -> None:
        with self._lock:
            self._record(table, key)
            self._table(table).pop(key, None)

    def exists(self, table: str, key: Any) -> bool:
        with self._lock:
            return key in self._table(table)

    def keys(self, table: str) -> List[Any]:
        with self._lock:
            return list(self._table(table).keys())

    def new_id(self) -> str:
        return str(uuid.uuid4())

    @contextmanager
    def transaction(self) -> Iterator["InMemoryStore"]:
        """
        Run a unit of work atomically.

        Each transaction keeps an undo journal holding the prior value of
        every key it writes, so rollback costs O(keys touched). Nested
        transactions fold their journal into the enclosing one on success.
        """
        with self._lock:
            journal: Dict[Tuple[str, Any], Tuple[bool, Any]] = {}
            self._journals.append(journal)
            try:
                yield self
            except BaseException:
                self._journals.pop()
                for (table, key), (existed, value) in journal.items():
                    rows = self._table(table)
                    if existed:
                        rows[key] = value
                    else:
                        rows.pop(key, None)
                raise
            self._journals.pop()
            if self._journals:
                parent = self._journals[-1]
                for entry, prior in journal.items():
                    parent.setdefault(entry, prior)
