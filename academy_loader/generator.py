# academy_loader/generator.py

"""
Random generation of students, courses and exam scores.

Every function takes the random source explicitly so a seeded
``random.Random`` reproduces the same dataset.
"""

import logging
import random
from collections import Counter
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from .exceptions import GenerationError
from .models import AcademyDataset, Course, Exam, Student

logger = logging.getLogger(__name__)

NAME_TEMPLATES = [f"Student_{n}" for n in range(1, 11)]
START_YEAR_RANGE = (2020, 2024)
COURSE_HOURS_RANGE = (10, 60)
EXAMS_PER_STUDENT = (0, 6)
MAX_SCORE = 100
SCORE_QUANTUM = Decimal("0.01")

DEFAULT_STUDENT_COUNT = 100
DEFAULT_COURSE_COUNT = 10


def _check_count(count: int, entity: str) -> None:
    if count < 0:
        raise GenerationError(
            f"Cannot generate a negative number of {entity}",
            context={"entity": entity, "count": count},
        )


def round_score(value: float) -> Decimal:
    """Round a raw score to two decimals, midpoints away from zero."""
    # repr gives the shortest decimal string that round-trips the float
    return Decimal(repr(value)).quantize(SCORE_QUANTUM, rounding=ROUND_HALF_UP)


def generate_students(count: int, rng: Optional[random.Random] = None) -> List[Student]:
    rng = rng or random.Random()
    _check_count(count, "students")
    return [
        Student(
            id=i,
            name=rng.choice(NAME_TEMPLATES),
            start_year=rng.randint(*START_YEAR_RANGE),
        )
        for i in range(1, count + 1)
    ]


def generate_courses(count: int, rng: Optional[random.Random] = None) -> List[Course]:
    rng = rng or random.Random()
    _check_count(count, "courses")
    return [
        Course(id=i, title=f"Course_{i}", hours=rng.randint(*COURSE_HOURS_RANGE))
        for i in range(1, count + 1)
    ]


def generate_exams(
    students: List[Student],
    courses: List[Course],
    rng: Optional[random.Random] = None,
) -> List[Exam]:
    """Generate 0-6 exams per student and return them in shuffled order.

    Courses are drawn with replacement, so one student may sit the same
    course more than once. Scores lie in [0.00, 100.00].
    """
    rng = rng or random.Random()
    exams: List[Exam] = []

    for student in students:
        exam_count = rng.randint(*EXAMS_PER_STUDENT)
        if exam_count and not courses:
            raise GenerationError(
                "Cannot assign exams without any courses",
                context={"student_id": student.id, "exam_count": exam_count},
            )
        for _ in range(exam_count):
            course = rng.choice(courses)
            score = round_score(rng.random() * MAX_SCORE)
            exams.append(Exam(student_id=student.id, course_id=course.id, score=score))

    # Storage order must not be grouped by student
    rng.shuffle(exams)
    return exams


def exam_counts_by_student(exams: List[Exam]) -> Dict[int, int]:
    return dict(Counter(exam.student_id for exam in exams))


def generate_dataset(
    student_count: int = DEFAULT_STUDENT_COUNT,
    course_count: int = DEFAULT_COURSE_COUNT,
    rng: Optional[random.Random] = None,
) -> AcademyDataset:
    """Generate students, courses and their exams from one random source."""
    rng = rng or random.Random()
    students = generate_students(student_count, rng)
    courses = generate_courses(course_count, rng)
    exams = generate_exams(students, courses, rng)

    dataset = AcademyDataset(students=students, courses=courses, exams=exams)
    logger.info(
        f"Generated {len(students)} students, {len(courses)} courses "
        f"and {len(exams)} exams"
    )
    return dataset


__all__ = [
    "NAME_TEMPLATES",
    "START_YEAR_RANGE",
    "COURSE_HOURS_RANGE",
    "EXAMS_PER_STUDENT",
    "DEFAULT_STUDENT_COUNT",
    "DEFAULT_COURSE_COUNT",
    "round_score",
    "generate_students",
    "generate_courses",
    "generate_exams",
    "exam_counts_by_student",
    "generate_dataset",
]
