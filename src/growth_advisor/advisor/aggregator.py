"""Compiles repository records into the bounded StudentSummary."""

import logging

from ..database.repository import StudentRepository
from ..errors import NotFoundError
from ..models import (
    AssignmentEntry,
    AttendanceEntry,
    StudentSummary,
    SubjectResult,
    TermEntry,
)


logger = logging.getLogger(__name__)


class DataAggregator:
    """
    Read-and-transform step feeding report generation.

    Attendance and assignments are bounded to the most recent entries; all
    report-card terms are kept since their order carries the trend. Every sort
    is keyed on (date, id) descending so identical records always yield an
    identical summary.
    """

    def __init__(self, repository: StudentRepository, max_attendance: int = 5, max_assignments: int = 5):
        self.repository = repository
        self.max_attendance = max_attendance
        self.max_assignments = max_assignments

    def compile(self, student_id: str) -> StudentSummary:
        """Build the summary for a student. Raises NotFoundError for unknown students."""
        profile = self.repository.get_profile(student_id)
        if profile is None:
            raise NotFoundError(f"Student profile not found: {student_id}")

        attendance = sorted(
            self.repository.get_attendance(student_id),
            key=lambda record: (record.date, record.id),
            reverse=True
        )[:self.max_attendance]

        assignments = sorted(
            self.repository.get_assignments(profile.class_id, student_id),
            key=lambda assignment: (assignment.due_date, assignment.id),
            reverse=True
        )[:self.max_assignments]

        report_cards = sorted(
            self.repository.get_report_cards(student_id),
            key=lambda card: (card.issue_date, card.id),
            reverse=True
        )

        assignment_entries = []
        for assignment in assignments:
            submission = assignment.submission_for(student_id)
            assignment_entries.append(AssignmentEntry(
                assignment_id=assignment.id,
                title=assignment.title,
                subject=assignment.subject,
                due_date=assignment.due_date,
                submitted=submission is not None,
                submission_date=submission.submission_date if submission else None,
                grade=submission.grade if submission else None,
                marks_obtained=submission.marks_obtained if submission else None,
                max_marks=(submission.max_marks or assignment.max_marks) if submission else assignment.max_marks,
            ))

        summary = StudentSummary(
            student_id=profile.id,
            name=profile.name,
            class_label=profile.class_label,
            interests=list(profile.interests),
            attendance_percentage=profile.attendance,
            recent_attendance=[
                AttendanceEntry(date=record.date, status=record.status, remarks=record.remarks)
                for record in attendance
            ],
            recent_assignments=assignment_entries,
            report_terms=[
                TermEntry(
                    report_card_id=card.id,
                    term_name=card.term_name,
                    issue_date=card.issue_date,
                    overall_percentage=card.overall_percentage,
                    overall_grade=card.overall_grade,
                    subjects=[
                        SubjectResult(
                            subject_name=subject.subject_name,
                            marks_obtained=subject.marks_obtained,
                            max_marks=subject.max_marks,
                            grade=subject.grade,
                        )
                        for subject in card.subjects
                    ],
                    teacher_comments=card.teacher_comments,
                )
                for card in report_cards
            ],
        )

        logger.debug(
            f"Compiled summary for {student_id}",
            extra={
                "attendance_entries": len(summary.recent_attendance),
                "assignment_entries": len(summary.recent_assignments),
                "report_terms": len(summary.report_terms),
            }
        )
        return summary
