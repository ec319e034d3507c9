"""A student's free-text current goal."""

import logging
from typing import Optional

from ..database.kv_store import KeyValueStore, goal_key


logger = logging.getLogger(__name__)


class GoalStore:
    def __init__(self, kv_store: KeyValueStore):
        self.kv_store = kv_store

    def get(self, student_id: str) -> Optional[str]:
        goal = self.kv_store.get(goal_key(student_id))
        return goal if isinstance(goal, str) else None

    def set(self, student_id: str, text: str) -> str:
        goal = (text or "").strip()
        if not goal:
            raise ValueError("Goal cannot be empty")
        self.kv_store.set(goal_key(student_id), goal)
        logger.info("Goal updated", extra={"student_id": student_id})
        return goal
