# academy_loader/schema.py
"""Table definitions for the academy database.

The tables normally exist already; ``DatabaseManager.create_all_tables``
creates any that are missing.
"""

from sqlalchemy import Column, ForeignKey, Integer, MetaData, Numeric, String, Table

metadata = MetaData()

courses_table = Table(
    "courses",
    metadata,
    Column("c_no", Integer, primary_key=True),
    Column("title", String(100), nullable=False),
    Column("hours", Integer, nullable=False),
)

students_table = Table(
    "students",
    metadata,
    Column("s_id", Integer, primary_key=True),
    Column("name", String(100), nullable=False),
    Column("start_year", Integer, nullable=False),
)

exams_table = Table(
    "exams",
    metadata,
    Column("s_id", Integer, ForeignKey("students.s_id"), nullable=False),
    Column("c_no", Integer, ForeignKey("courses.c_no"), nullable=False),
    Column("score", Numeric(5, 2), nullable=False),
)

# Child table first; TRUNCATE resolves the order itself but reports read better
LOAD_TABLES = [exams_table, students_table, courses_table]

__all__ = [
    "metadata",
    "courses_table",
    "students_table",
    "exams_table",
    "LOAD_TABLES",
]
