"""
Sparse payload construction for partial updates and filters.

Request fields that the caller did not send are represented by the UNSET
sentinel rather than None, because an explicit JSON null is a real value
("clear this field") while an omitted key means "leave it alone".
"""
from typing import Any, Dict, Mapping


class _Unset:
    """Marker for a field that was not supplied."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def is_unset(value: Any) -> bool:
    return value is UNSET


def build_partial(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Keep only the fields that were actually supplied.

    Falsy values such as 0, "", False and None are kept; only UNSET is
    dropped. Key order is preserved.

    Example:
        >>> build_partial({"diagnosis": "Flu", "notes": UNSET, "patient_id": 0})
        {'diagnosis': 'Flu', 'patient_id': 0}
    """
    return {key: value for key, value in fields.items() if value is not UNSET}


def has_any_field(fields: Mapping[str, Any]) -> bool:
    """True if at least one value in the mapping was supplied."""
    return any(value is not UNSET for value in fields.values())
