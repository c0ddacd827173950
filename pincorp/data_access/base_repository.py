# pincorp/data_access/base_repository.py

import copy
import logging
import uuid
from dataclasses import fields
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Type, TypeVar, TYPE_CHECKING

from pincorp.data_access.state_store import DataStore

if TYPE_CHECKING:
    from ..business_logic.entities.base_entity import BaseEntity

logger = logging.getLogger(__name__)

T = TypeVar('T', bound='BaseEntity')


class BaseRepository(Generic[T]):
    """
    Generic repository over one DataStore collection.

    Entities are copied on the way in and on the way out, so callers never
    hold a live reference into the store and every change goes through
    add/update/delete.
    """

    def __init__(self, store: DataStore, model_type: Type[T], table_name: str, id_prefix: str = ""):
        if store is None:
            raise ValueError("store cannot be None")
        self.store = store
        self.model_type = model_type
        self._table_name = table_name
        self._id_prefix = id_prefix
        self._rows: Dict[str, T] = store.register_collection(table_name)
        self._columns = [f.name for f in fields(model_type) if f.init]
        logger.debug(f"BaseRepository for {self._table_name} initialized. Columns: {self._columns}")

    @property
    def table_name(self) -> str:
        return self._table_name

    def new_id(self) -> str:
        while True:
            candidate = f"{self._id_prefix}{uuid.uuid4().hex[:16].upper()}"
            if candidate not in self._rows:
                return candidate

    def count(self) -> int:
        return len(self._rows)

    def exists(self, entity_id: Optional[str]) -> bool:
        return entity_id is not None and entity_id in self._rows

    def get_by_id(self, entity_id: Optional[str]) -> Optional[T]:
        if entity_id is None:
            return None
        entity = self._rows.get(entity_id)
        return copy.deepcopy(entity) if entity is not None else None

    def get_all(self, order_by: Optional[str] = None, limit: Optional[int] = None) -> List[T]:
        rows = list(self._rows.values())
        return self._finish(rows, order_by, limit)

    def find_by_criteria(self, criteria: Dict[str, Any], order_by: Optional[str] = None,
                         limit: Optional[int] = None) -> List[T]:
        """
        Finds entities matching every criterion. A value is either a plain value
        (equality) or a ("BETWEEN", (low, high)) tuple with inclusive bounds.
        """
        if not criteria:
            return self.get_all(order_by=order_by, limit=limit)

        for key in criteria:
            if key not in self._columns:
                raise ValueError(f"Unknown field '{key}' for {self._table_name}.")

        matched = [row for row in self._rows.values()
                   if all(self._matches(getattr(row, key), condition) for key, condition in criteria.items())]
        logger.debug(f"BaseRepository.find_by_criteria on {self._table_name}: {criteria} -> {len(matched)} rows")
        return self._finish(matched, order_by, limit)

    def search(self, term: Optional[str], search_fields: Sequence[str], order_by: Optional[str] = None,
               limit: Optional[int] = None) -> List[T]:
        """Case-insensitive substring search over the given text fields; a blank term returns everything."""
        needle = (term or "").strip().casefold()
        if not needle:
            return self.get_all(order_by=order_by, limit=limit)
        matched = []
        for row in self._rows.values():
            for field_name in search_fields:
                value = getattr(row, field_name, None)
                if value is not None and needle in str(value).casefold():
                    matched.append(row)
                    break
        return self._finish(matched, order_by, limit)

    def add(self, entity: T) -> T:
        with self.store.transaction():
            if entity.id is None:
                entity.id = self.new_id()
            elif entity.id in self._rows:
                raise ValueError(f"{self._table_name}: an entity with id '{entity.id}' already exists.")
            self.store.mark_dirty(self._table_name, entity.id)
            self._rows[entity.id] = copy.deepcopy(entity)
        logger.debug(f"BaseRepository.add: {type(entity).__name__} '{entity.id}' added to '{self._table_name}'.")
        return entity

    def update(self, entity: T) -> Optional[T]:
        if entity.id is None:
            logger.error(f"Entity of type {type(entity).__name__} must have an ID to be updated.")
            return None
        if entity.id not in self._rows:
            logger.warning(f"BaseRepository.update: id '{entity.id}' not found in '{self._table_name}'.")
            return None
        with self.store.transaction():
            self.store.mark_dirty(self._table_name, entity.id)
            self._rows[entity.id] = copy.deepcopy(entity)
        logger.debug(f"BaseRepository.update: '{entity.id}' in '{self._table_name}' updated.")
        return entity

    def delete(self, entity_id: str) -> bool:
        if entity_id not in self._rows:
            logger.warning(f"BaseRepository.delete: id '{entity_id}' not found in '{self._table_name}'.")
            return False
        with self.store.transaction():
            self.store.mark_dirty(self._table_name, entity_id)
            del self._rows[entity_id]
        logger.debug(f"BaseRepository.delete: '{entity_id}' removed from '{self._table_name}'.")
        return True

    def replace_all(self, entities: Iterable[T]) -> None:
        """Loads stored entities at start-up; listeners are not notified."""
        rows = {}
        for entity in entities:
            if entity.id is None:
                entity.id = self.new_id()
            rows[entity.id] = copy.deepcopy(entity)
        self.store.load_collection(self._table_name, rows)
        logger.info(f"{len(rows)} rows loaded into '{self._table_name}'.")

    # --- helpers ---

    def _finish(self, rows: List[T], order_by: Optional[str], limit: Optional[int]) -> List[T]:
        if order_by:
            rows = self._sorted(rows, order_by)
        if limit is not None:
            rows = rows[:limit]
        return [copy.deepcopy(row) for row in rows]

    def _sorted(self, rows: List[T], order_by: str) -> List[T]:
        # "creation_date DESC, product_name ASC"; applied last key first so the sort is stable
        for clause in reversed([part.strip() for part in order_by.split(",") if part.strip()]):
            parts = clause.split()
            field_name = parts[0]
            descending = len(parts) > 1 and parts[1].upper() == "DESC"
            if field_name not in self._columns:
                raise ValueError(f"Cannot order {self._table_name} by unknown field '{field_name}'.")
            present = [r for r in rows if getattr(r, field_name) is not None]
            missing = [r for r in rows if getattr(r, field_name) is None]
            present.sort(key=lambda r: _sort_key(getattr(r, field_name)), reverse=descending)
            rows = present + missing
        return rows

    @staticmethod
    def _matches(value: Any, condition: Any) -> bool:
        if isinstance(condition, tuple) and len(condition) == 2:
            operator, expected = condition
            if str(operator).upper() != "BETWEEN" or len(expected) != 2:
                raise ValueError(f"Unsupported criterion {condition!r}.")
            value, low, high = _normalize(value), _normalize(expected[0]), _normalize(expected[1])
            return value is not None and low <= value <= high
        return _normalize(value) == _normalize(condition)


def _normalize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Decimal(str(value))
    return value


def _sort_key(value: Any) -> Any:
    if isinstance(value, str):
        return value.casefold()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return value

