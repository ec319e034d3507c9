"""Per-student, per-field replacements for generated report content."""

import logging
from enum import Enum
from typing import List, Optional, Union

from ..database.kv_store import KeyValueStore, override_key


logger = logging.getLogger(__name__)


class OverrideField(str, Enum):
    """Report fields a user may override."""
    GROWTH_SUMMARY = "growthSummary"
    STRENGTHS = "strengths"
    FOCUS_AREAS = "focusAreas"


LIST_FIELDS = {OverrideField.STRENGTHS, OverrideField.FOCUS_AREAS}

OverrideValue = Union[str, List[str]]


def split_items(value: Union[str, List[str]], delimiter: str = ",") -> List[str]:
    """Split delimited text (or clean a list), trimming items and dropping empties."""
    items = value.split(delimiter) if isinstance(value, str) else value
    return [str(item).strip() for item in items if str(item).strip()]


class OverrideStore:
    """
    Stores overrides under override:<field>:<student_id>.

    get() returning None means no override was ever set; an empty list is a
    real override meaning the user cleared the field.
    """

    def __init__(self, kv_store: KeyValueStore):
        self.kv_store = kv_store

    def get(self, student_id: str, field: Union[str, OverrideField]) -> Optional[OverrideValue]:
        field = self._field(field)
        return self.kv_store.get(override_key(field.value, student_id))

    def set(self, student_id: str, field: Union[str, OverrideField], value: OverrideValue) -> OverrideValue:
        """Store an override and return the normalized value."""
        field = self._field(field)
        if field in LIST_FIELDS:
            stored = split_items(value)
        elif isinstance(value, str):
            stored = value
        else:
            raise ValueError(f"{field.value} override must be text")

        self.kv_store.set(override_key(field.value, student_id), stored)
        logger.info(f"Override set for {field.value}", extra={"student_id": student_id})
        return stored

    def clear_all(self, student_id: str) -> int:
        """Remove every field override for the student. Returns how many were removed."""
        removed = 0
        for field in OverrideField:
            if self.kv_store.delete(override_key(field.value, student_id)):
                removed += 1
        logger.info(f"Cleared {removed} overrides", extra={"student_id": student_id})
        return removed

    def _field(self, field: Union[str, OverrideField]) -> OverrideField:
        try:
            return OverrideField(field)
        except ValueError:
            known = ", ".join(f.value for f in OverrideField)
            raise ValueError(f"Unknown override field: {field}. Known fields: {known}") from None
