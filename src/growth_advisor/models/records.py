"""
Student record models served by the repository ports.

These Pydantic models map to the school's record collections:
- student profiles
- daily attendance
- assignments and their submissions
- term report cards

Dates are ISO calendar dates; absence of a record is expressed by the
repository returning an empty list (or None for a profile), never by a
placeholder record.
"""

import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, validator


class AttendanceStatus(str, Enum):
    """Daily attendance status."""
    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    HOLIDAY = "Holiday"
    NOT_MARKED = "Not Marked"


class StudentProfile(BaseModel):
    """A student's profile record."""
    id: str
    name: str
    class_name: str
    section: str
    class_id: str
    roll_number: Optional[str] = None
    attendance: Optional[float] = None  # overall percentage, None when not tracked
    interests: List[str] = Field(default_factory=list)

    email: Optional[str] = None
    phone: Optional[str] = None
    parent_id: Optional[str] = None
    date_of_birth: Optional[datetime.date] = None

    @validator('interests', pre=True)
    def default_interests(cls, v):
        """Treat a missing interest list as empty."""
        return v or []

    @validator('attendance')
    def validate_attendance(cls, v):
        """Attendance is a percentage."""
        if v is not None and not 0 <= v <= 100:
            raise ValueError("attendance must be between 0 and 100")
        return v

    @property
    def class_label(self) -> str:
        return f"{self.class_name} {self.section}".strip()


class DailyAttendance(BaseModel):
    """One day's attendance mark for a student."""
    id: str
    student_id: str
    date: datetime.date
    status: AttendanceStatus
    class_id: str
    remarks: Optional[str] = None


class AssignmentSubmission(BaseModel):
    """A student's submission against an assignment."""
    student_id: str
    student_name: str
    submission_date: datetime.date
    grade: Optional[str] = None
    marks_obtained: Optional[float] = None
    max_marks: Optional[float] = None
    comments: Optional[str] = None


class Assignment(BaseModel):
    """An assignment set for one or more classes."""
    id: str
    title: str
    description: str = ""
    due_date: datetime.date
    subject: str
    teacher_id: str
    teacher_name: str
    class_ids: List[str] = Field(default_factory=list)
    max_marks: Optional[float] = None
    submissions: List[AssignmentSubmission] = Field(default_factory=list)

    def submission_for(self, student_id: str) -> Optional[AssignmentSubmission]:
        """Return the given student's submission, if any."""
        for submission in self.submissions:
            if submission.student_id == student_id:
                return submission
        return None


class SubjectGrade(BaseModel):
    """Marks and grade for one subject on a report card."""
    subject_name: str
    marks_obtained: float
    max_marks: float
    grade: str
    remarks: Optional[str] = None


class ReportCard(BaseModel):
    """A term report card."""
    id: str
    student_id: str
    term_name: str
    issue_date: datetime.date
    overall_percentage: Optional[float] = None
    overall_grade: Optional[str] = None
    subjects: List[SubjectGrade] = Field(default_factory=list)
    teacher_comments: Optional[str] = None
