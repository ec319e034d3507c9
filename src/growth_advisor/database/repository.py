"""
Read-only repository ports over student records.

The advisor consumes records through the StudentRepository interface. Queries
return copies, so callers can never mutate the underlying collections; writes
on the in-memory implementation go through named operations only.
"""

import logging
from abc import ABC, abstractmethod
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..models import (
    Assignment,
    AssignmentSubmission,
    DailyAttendance,
    ReportCard,
    StudentProfile,
)


logger = logging.getLogger(__name__)


class StudentRepository(ABC):
    """Query interface over the school's student records."""

    @abstractmethod
    def get_profile(self, student_id: str) -> Optional[StudentProfile]:
        """Get a student profile, or None if the student is unknown."""
        pass

    @abstractmethod
    def get_attendance(self, student_id: str) -> List[DailyAttendance]:
        """Get all daily attendance marks for a student."""
        pass

    @abstractmethod
    def get_assignments(self, class_id: str, student_id: str) -> List[Assignment]:
        """Get the assignments set for a class, with the student's submissions attached."""
        pass

    @abstractmethod
    def get_report_cards(self, student_id: str) -> List[ReportCard]:
        """Get all report cards issued to a student."""
        pass


class InMemoryStudentRepository(StudentRepository):
    """Student repository held in memory, seeded from code or a YAML file."""

    def __init__(self):
        self._students: Dict[str, StudentProfile] = {}
        self._attendance: List[DailyAttendance] = []
        self._assignments: Dict[str, Assignment] = {}
        self._report_cards: List[ReportCard] = []

    # Queries

    def get_profile(self, student_id: str) -> Optional[StudentProfile]:
        profile = self._students.get(student_id)
        return profile.model_copy(deep=True) if profile else None

    def get_attendance(self, student_id: str) -> List[DailyAttendance]:
        return [
            record.model_copy(deep=True)
            for record in self._attendance
            if record.student_id == student_id
        ]

    def get_assignments(self, class_id: str, student_id: str) -> List[Assignment]:
        results = []
        for assignment in self._assignments.values():
            if class_id not in assignment.class_ids:
                continue
            # Only this student's submission is visible to the caller
            submissions = [s.model_copy() for s in assignment.submissions if s.student_id == student_id]
            results.append(assignment.model_copy(update={"submissions": submissions}, deep=True))
        return results

    def get_report_cards(self, student_id: str) -> List[ReportCard]:
        return [
            card.model_copy(deep=True)
            for card in self._report_cards
            if card.student_id == student_id
        ]

    # Named write operations

    def add_student(self, profile: StudentProfile) -> None:
        if profile.id in self._students:
            raise ValueError(f"Student {profile.id} already exists")
        self._students[profile.id] = profile.model_copy(deep=True)

    def record_attendance(self, record: DailyAttendance) -> None:
        self._attendance.append(record.model_copy(deep=True))

    def add_assignment(self, assignment: Assignment) -> None:
        if assignment.id in self._assignments:
            raise ValueError(f"Assignment {assignment.id} already exists")
        self._assignments[assignment.id] = assignment.model_copy(deep=True)

    def submit_assignment(self, assignment_id: str, submission: AssignmentSubmission) -> None:
        assignment = self._assignments.get(assignment_id)
        if assignment is None:
            raise KeyError(f"Assignment {assignment_id} not found")
        if assignment.submission_for(submission.student_id) is not None:
            raise ValueError(
                f"Student {submission.student_id} already submitted assignment {assignment_id}"
            )
        self._assignments[assignment_id] = assignment.model_copy(
            update={"submissions": [*assignment.submissions, submission.model_copy(deep=True)]},
            deep=True
        )

    def add_report_card(self, report_card: ReportCard) -> None:
        self._report_cards.append(report_card.model_copy(deep=True))

    # Loading

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryStudentRepository":
        """Build a repository from a mapping of record collections."""
        repository = cls()
        try:
            for item in data.get("students", []):
                repository.add_student(StudentProfile.model_validate(item))
            for item in data.get("attendance", []):
                repository.record_attendance(DailyAttendance.model_validate(item))
            for item in data.get("assignments", []):
                repository.add_assignment(Assignment.model_validate(item))
            for item in data.get("report_cards", []):
                repository.add_report_card(ReportCard.model_validate(item))
        except PydanticValidationError as e:
            raise ValueError(f"Invalid student records: {e}") from e

        logger.info(
            "Loaded student records",
            extra={
                "students": len(repository._students),
                "attendance": len(repository._attendance),
                "assignments": len(repository._assignments),
                "report_cards": len(repository._report_cards),
            }
        )
        return repository

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "InMemoryStudentRepository":
        """Load records from a YAML file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a mapping of record collections")
        return cls.from_dict(data)


def load_demo_repository() -> InMemoryStudentRepository:
    """Load the bundled demo school records."""
    content = resources.files("growth_advisor").joinpath("data/demo_school.yaml").read_text(encoding="utf-8")
    return InMemoryStudentRepository.from_dict(yaml.safe_load(content))
