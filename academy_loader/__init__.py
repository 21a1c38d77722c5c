# academy_loader/__init__.py

"""Fake academic records generator and single-transaction PostgreSQL loader."""

from .exceptions import (
    ConfigurationError,
    DatabaseError,
    GenerationError,
    IncompleteBatchError,
    LoaderError,
)
from .generator import (
    generate_courses,
    generate_dataset,
    generate_exams,
    generate_students,
)
from .loader import AcademyLoader, LoadPhase, LoadResult
from .models import AcademyDataset, Course, Exam, Student

__version__ = "1.0.0"

__all__ = [
    # Records
    "Student",
    "Course",
    "Exam",
    "AcademyDataset",
    # Generation
    "generate_students",
    "generate_courses",
    "generate_exams",
    "generate_dataset",
    # Loading
    "AcademyLoader",
    "LoadPhase",
    "LoadResult",
    # Errors
    "LoaderError",
    "GenerationError",
    "ConfigurationError",
    "DatabaseError",
    "IncompleteBatchError",
]
