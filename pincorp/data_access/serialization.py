# pincorp/data_access/serialization.py

import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Type, TypeVar, Union, get_args, get_origin, get_type_hints

logger = logging.getLogger(__name__)

T = TypeVar('T')


def entity_to_dict(entity: Any) -> Dict[str, Any]:
    """
    Converts a dataclass entity to plain JSON-friendly values.
    Display-only fields (declared with compare=False) are not persisted.
    """
    data = {}
    for f in fields(entity):
        if not f.init or not f.compare:
            continue
        data[f.name] = _to_plain(getattr(entity, f.name))
    return data


def _to_plain(value: Any) -> Any:
    if value is None:
        return None
    if is_dataclass(value):
        return entity_to_dict(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value


def entity_from_dict(model_type: Type[T], data: Dict[str, Any]) -> T:
    if data is None:
        raise ValueError(f"Input data cannot be None for {model_type.__name__}")
    hints = get_type_hints(model_type)
    entity_data = {}
    for f in fields(model_type):
        if not f.init or not f.compare or f.name not in data:
            continue
        raw = data[f.name]
        if raw is None:
            entity_data[f.name] = None
            continue
        try:
            entity_data[f.name] = _from_plain(hints[f.name], raw)
        except (ValueError, TypeError, InvalidOperation) as e:
            logger.error(f"Type conversion failed for {model_type.__name__}.{f.name} with value '{raw}': {e}")
            raise ValueError(f"Stored value for '{f.name}' is invalid: {raw!r}") from e
    return model_type(**entity_data)


def _from_plain(field_type: Any, raw: Any) -> Any:
    origin = get_origin(field_type)
    if origin is Union:
        possible_types = [arg for arg in get_args(field_type) if arg is not type(None)]
        return _from_plain(possible_types[0], raw) if possible_types else raw
    if origin is list:
        (item_type,) = get_args(field_type) or (Any,)
        return [_from_plain(item_type, item) for item in raw]
    if isinstance(field_type, type):
        if is_dataclass(field_type):
            return entity_from_dict(field_type, raw)
        if issubclass(field_type, Enum):
            return field_type(raw)
        if field_type is Decimal:
            return Decimal(str(raw))
        if field_type is datetime:
            return datetime.fromisoformat(raw)
        if field_type is date:
            return date.fromisoformat(str(raw)[:10])
    return raw
