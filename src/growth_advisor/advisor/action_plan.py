"""Session-scoped completion tracking over a report's actionable steps."""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from ..models import GrowthReport


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionableStepState:
    """Completion flag for one actionable step, with its display fields."""
    step_id: str
    task: str
    category: str
    explanation: Optional[str] = None
    completed: bool = False


class ActionPlanTracker:
    """
    Completion marks are never persisted: accepting a new report resets every
    step to incomplete.
    """

    def __init__(self):
        self._steps: Dict[str, ActionableStepState] = {}

    def init_from(self, report: GrowthReport) -> List[ActionableStepState]:
        self._steps = {
            step.id: ActionableStepState(
                step_id=step.id,
                task=step.task,
                category=step.category,
                explanation=step.explanation,
            )
            for step in report.actionable_steps
        }
        return self.steps

    def toggle(self, step_id: str) -> ActionableStepState:
        """Flip one step's completion flag. Raises KeyError for unknown ids."""
        if step_id not in self._steps:
            raise KeyError(f"Unknown actionable step: {step_id}")
        step = replace(self._steps[step_id], completed=not self._steps[step_id].completed)
        self._steps[step_id] = step
        logger.debug(f"Step {step_id} marked {'complete' if step.completed else 'incomplete'}")
        return step

    def clear(self):
        self._steps = {}

    @property
    def steps(self) -> List[ActionableStepState]:
        return list(self._steps.values())

    @property
    def completed_count(self) -> int:
        return sum(1 for step in self._steps.values() if step.completed)

    @property
    def progress(self) -> float:
        """Fraction of steps completed, 0.0 when there are none."""
        if not self._steps:
            return 0.0
        return self.completed_count / len(self._steps)
