"""Shallow field access over pattern-shaped input.

Validation and conflict scanning accept either pydantic models or plain
mappings (possibly malformed, possibly self-referencing). Only the
requested key is ever read, so extra or circular attributes are never
traversed.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def get_field(obj: Any, *names: str) -> Any:
    """Return the first present field among ``names``, or MISSING.

    For pydantic models a field counts as present only when it was set
    explicitly, so optional fields left at their default are absent while
    an explicit ``None`` is present (and can be reported).
    """
    if obj is None or obj is MISSING:
        return MISSING

    for name in names:
        if isinstance(obj, Mapping):
            if name in obj:
                return obj[name]
        elif isinstance(obj, BaseModel):
            if name in type(obj).model_fields:
                if name in obj.model_fields_set:
                    return getattr(obj, name)
            elif hasattr(obj, name):
                return getattr(obj, name)
        else:
            value = getattr(obj, name, MISSING)
            if value is not MISSING:
                return value
    return MISSING


def is_present(value: Any) -> bool:
    """A field is present when it is neither missing nor None."""
    return value is not MISSING and value is not None


def is_structured(value: Any) -> bool:
    """True for values whose fields can be read with get_field."""
    return isinstance(value, (Mapping, BaseModel))


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def in_unit_range(value: Any) -> bool:
    """Number in [0, 1] inclusive (NaN excluded)."""
    return is_number(value) and 0.0 <= value <= 1.0
