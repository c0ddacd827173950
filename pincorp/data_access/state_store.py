# pincorp/data_access/state_store.py

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Tuple

logger = logging.getLogger(__name__)

# listener(collection_name, changed_entities, deleted_ids)
StateListener = Callable[[str, List[Any], List[str]], None]

_MISSING = object()


class DataStore:
    """
    Owns every in-memory collection of the application.

    Repositories register their collection here and only write inside
    transaction(). A transaction holds a re-entrant lock, so a second writer
    waits instead of interleaving with a check-then-act sequence. Each
    nesting level keeps an undo log of the rows it touched and puts them back
    if it exits with an exception.

    Once the outermost transaction commits, listeners are told which rows
    changed. A failing listener is logged and its rows are kept as unsaved;
    they are sent again with the next commit or flush().
    """

    def __init__(self):
        self._collections: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()
        # one undo log per open transaction level: (collection, row_id) -> row before the change
        self._undo_logs: List[Dict[Tuple[str, str], Any]] = []
        # collection -> row ids, kept in the order they were first touched
        self._dirty: Dict[str, Dict[str, None]] = {}
        self._unsaved: Dict[str, Dict[str, None]] = {}
        self._listeners: List[StateListener] = []

    def register_collection(self, name: str) -> Dict[str, Any]:
        with self._lock:
            if name not in self._collections:
                self._collections[name] = {}
                logger.debug(f"Collection '{name}' registered in data store.")
            return self._collections[name]

    def collection(self, name: str) -> Dict[str, Any]:
        if name not in self._collections:
            raise KeyError(f"Collection '{name}' is not registered.")
        return self._collections[name]

    @property
    def in_transaction(self) -> bool:
        return bool(self._undo_logs)

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self._unsaved)

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def mark_dirty(self, name: str, row_id: str) -> None:
        """Must be called before the row is replaced, added or removed."""
        if not self.in_transaction:
            raise RuntimeError("Collections can only change inside DataStore.transaction().")
        key = (name, row_id)
        # rows are replaced, never mutated in place, so the old object is the undo value
        previous = self.collection(name).get(row_id, _MISSING)
        for undo_log in self._undo_logs:
            if key not in undo_log:
                undo_log[key] = previous
        self._dirty.setdefault(name, {})[row_id] = None

    @contextmanager
    def transaction(self) -> Iterator["DataStore"]:
        with self._lock:
            outermost = not self._undo_logs
            if outermost:
                self._dirty = {}
            self._undo_logs.append({})
            try:
                yield self
            except Exception:
                self._rollback(self._undo_logs.pop())
                if outermost:
                    self._dirty = {}
                logger.warning("Transaction rolled back.")
                raise
            else:
                self._undo_logs.pop()

            if outermost:
                changed, self._dirty = self._dirty, {}
                self._merge_unsaved(changed)
                self._notify(changed)

    def flush(self) -> bool:
        """Sends unsaved rows to the listeners again. Returns True when nothing is left unsaved."""
        with self._lock:
            if self.in_transaction:
                raise RuntimeError("flush() cannot run inside a transaction.")
            pending, self._unsaved = self._unsaved, {}
            self._notify(pending)
            return not self._unsaved

    def load_collection(self, name: str, rows: Dict[str, Any]) -> None:
        """Replaces a collection's contents without notifying listeners (start-up loading)."""
        with self._lock:
            live = self.register_collection(name)
            live.clear()
            live.update(rows)

    def _rollback(self, undo_log: Dict[Tuple[str, str], Any]) -> None:
        # repositories keep references to the live dicts, so restore in place
        for (name, row_id), previous in undo_log.items():
            live = self._collections[name]
            if previous is _MISSING:
                live.pop(row_id, None)
            else:
                live[row_id] = previous

    def _merge_unsaved(self, changed: Dict[str, Dict[str, None]]) -> None:
        for name, row_ids in self._unsaved.items():
            changed.setdefault(name, {}).update(row_ids)
        self._unsaved = {}

    def _notify(self, changed: Dict[str, Dict[str, None]]) -> None:
        for name in sorted(changed):
            live = self._collections[name]
            row_ids = list(changed[name])
            rows = [copy.deepcopy(live[row_id]) for row_id in row_ids if row_id in live]
            deleted_ids = [row_id for row_id in row_ids if row_id not in live]
            logger.debug(f"Notifying {len(self._listeners)} listener(s) about '{name}' "
                         f"({len(rows)} changed, {len(deleted_ids)} deleted).")
            for listener in list(self._listeners):
                try:
                    listener(name, rows, deleted_ids)
                except Exception as e:
                    # the commit already happened in memory; keep the rows for the next attempt
                    logger.error(f"State listener failed for collection '{name}': {e}", exc_info=True)
                    self._unsaved.setdefault(name, {}).update(changed[name])
