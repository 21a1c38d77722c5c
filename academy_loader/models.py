# academy_loader/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List


@dataclass(frozen=True)
class Student:
    id: int
    name: str
    start_year: int

    def to_row(self) -> Dict[str, Any]:
        """Converts the Student to insert parameters for the students table."""
        return {"s_id": self.id, "name": self.name, "start_year": self.start_year}


@dataclass(frozen=True)
class Course:
    id: int
    title: str
    hours: int

    def to_row(self) -> Dict[str, Any]:
        """Converts the Course to insert parameters for the courses table."""
        return {"c_no": self.id, "title": self.title, "hours": self.hours}


@dataclass(frozen=True)
class Exam:
    student_id: int
    course_id: int
    score: Decimal

    def to_row(self) -> Dict[str, Any]:
        """Converts the Exam to insert parameters for the exams table."""
        return {"s_id": self.student_id, "c_no": self.course_id, "score": self.score}


@dataclass
class AcademyDataset:
    """All records generated for a single load."""

    students: List[Student] = field(default_factory=list)
    courses: List[Course] = field(default_factory=list)
    exams: List[Exam] = field(default_factory=list)

    @property
    def counts(self) -> Dict[str, int]:
        return {
            "courses": len(self.courses),
            "students": len(self.students),
            "exams": len(self.exams),
        }
