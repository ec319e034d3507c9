"""
Compact student summary fed to report generation.

A StudentSummary is built fresh for every generation request and never
persisted. Its text rendering is deterministic: identical records always
produce byte-identical prompt text.
"""

import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .records import AttendanceStatus


class AttendanceEntry(BaseModel):
    """One recent attendance mark."""
    date: datetime.date
    status: AttendanceStatus
    remarks: Optional[str] = None

    class Config:
        frozen = True


class AssignmentEntry(BaseModel):
    """One recent assignment with the student's submission status."""
    assignment_id: str
    title: str
    subject: str
    due_date: datetime.date
    submitted: bool
    submission_date: Optional[datetime.date] = None
    grade: Optional[str] = None
    marks_obtained: Optional[float] = None
    max_marks: Optional[float] = None

    class Config:
        frozen = True


class SubjectResult(BaseModel):
    subject_name: str
    marks_obtained: float
    max_marks: float
    grade: str

    class Config:
        frozen = True


class TermEntry(BaseModel):
    """One report-card term."""
    report_card_id: str
    term_name: str
    issue_date: datetime.date
    overall_percentage: Optional[float] = None
    overall_grade: Optional[str] = None
    subjects: List[SubjectResult] = Field(default_factory=list)
    teacher_comments: Optional[str] = None

    class Config:
        frozen = True


class StudentSummary(BaseModel):
    """Bounded, ordered summary of a student's records."""
    student_id: str
    name: str
    class_label: str
    interests: List[str] = Field(default_factory=list)
    attendance_percentage: Optional[float] = None  # None means unknown
    recent_attendance: List[AttendanceEntry] = Field(default_factory=list)  # date descending
    recent_assignments: List[AssignmentEntry] = Field(default_factory=list)  # due date descending
    report_terms: List[TermEntry] = Field(default_factory=list)  # issue date descending

    class Config:
        frozen = True

    def to_prompt_text(self) -> str:
        """Render the summary as the text block embedded in the generation prompt."""
        lines = [
            "Student Profile:",
            f"Name: {self.name} (ID: {self.student_id})",
            f"Class: {self.class_label}",
            f"Interests: {', '.join(self.interests) or 'Not specified'}",
            f"Overall Attendance: {_format_percentage(self.attendance_percentage)}",
            "",
            "Report Cards (Recent First):",
        ]

        if not self.report_terms:
            lines.append("No report cards found.")
        for term in self.report_terms:
            lines.append(f"Term: {term.term_name} (Issued: {term.issue_date.isoformat()})")
            lines.append(
                f"Overall Grade: {term.overall_grade or 'N/A'}, "
                f"Percentage: {_format_percentage(term.overall_percentage, unknown='N/A')}"
            )
            lines.append("Subjects:")
            for subject in term.subjects:
                lines.append(
                    f"- {subject.subject_name}: Marks {_format_number(subject.marks_obtained)}/"
                    f"{_format_number(subject.max_marks)}, Grade: {subject.grade}"
                )
            lines.append(f"Teacher Comments: {term.teacher_comments or 'None'}")
            lines.append("---")

        lines.append("")
        lines.append("Assignment Submissions Summary (Recent First):")
        if not self.recent_assignments:
            lines.append("No assignment submissions found.")
        for entry in self.recent_assignments:
            lines.append(
                f'- Assignment "{entry.title}" (Subject: {entry.subject}): Due {entry.due_date.isoformat()}.'
            )
            if entry.submitted:
                marks = _format_number(entry.marks_obtained) if entry.marks_obtained is not None else "-"
                max_marks = _format_number(entry.max_marks) if entry.max_marks is not None else "-"
                submitted_on = entry.submission_date.isoformat() if entry.submission_date else "unknown date"
                lines.append(
                    f"  Submitted {submitted_on}, Grade: {entry.grade or 'N/G'}, Marks: {marks}/{max_marks}"
                )
            else:
                lines.append("  Status: Pending/Not Submitted")

        lines.append("")
        lines.append("Recent Attendance Snippet (last 5 days if available):")
        if not self.recent_attendance:
            lines.append("No daily attendance records.")
        for mark in self.recent_attendance:
            remark = f" ({mark.remarks})" if mark.remarks else ""
            lines.append(f"- {mark.date.isoformat()}: {mark.status.value}{remark}")

        return "\n".join(lines) + "\n"


def _format_number(value: float) -> str:
    """Render whole numbers without a trailing .0."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def _format_percentage(value: Optional[float], unknown: str = "unknown") -> str:
    if value is None:
        return unknown
    return f"{value:.1f}%"
