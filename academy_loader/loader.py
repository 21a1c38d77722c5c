# academy_loader/loader.py

"""
Bulk loading of a generated dataset inside one transaction.

The stages always run in the same order:

    CONNECT -> CLEAR -> INSERT_COURSES -> INSERT_STUDENTS -> INSERT_EXAMS
    -> VERIFY -> COMMIT

A failure at any stage rolls the whole transaction back, so either every
table is replaced or nothing changes.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import asyncpg
from sqlalchemy import func, insert, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from .database import DatabaseManager
from .exceptions import DatabaseError, IncompleteBatchError, LoaderError
from .models import AcademyDataset, Course, Exam, Student
from .schema import LOAD_TABLES, courses_table, exams_table, students_table

logger = logging.getLogger(__name__)

CLEAR_STATEMENT = "TRUNCATE TABLE {tables} RESTART IDENTITY".format(
    tables=", ".join(table.name for table in LOAD_TABLES)
)


class LoadPhase(Enum):
    """Stages of a load, in execution order"""

    CONNECT = "connect"
    CLEAR = "clear"
    INSERT_COURSES = "insert_courses"
    INSERT_STUDENTS = "insert_students"
    INSERT_EXAMS = "insert_exams"
    VERIFY = "verify"
    COMMIT = "commit"


@dataclass
class LoadResult:
    """Outcome of a load, returned to the entry point instead of raising."""

    success: bool
    phase: LoadPhase
    row_counts: Dict[str, int] = field(default_factory=dict)
    error: Optional[LoaderError] = None
    elapsed_seconds: float = 0.0

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "phase": self.phase.value,
            "row_counts": dict(self.row_counts),
            "error": self.error.to_dict()["error"] if self.error else None,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }


async def _execute_batch(
    conn: AsyncConnection, table, rows: List[Dict[str, Any]], phase: LoadPhase
) -> int:
    if not rows:
        logger.debug(f"No rows to insert into {table.name}")
        return 0
    try:
        # A list of parameter sets runs as a single executemany batch
        await conn.execute(insert(table), rows)
    except SQLAlchemyError as e:
        raise DatabaseError(
            f"Batch insert into {table.name} failed: {e}",
            phase=phase.value,
            table=table.name,
            cause=e,
            context={"rows": len(rows)},
        ) from e
    logger.info(f"Inserted {len(rows)} rows into {table.name}")
    return len(rows)


async def clear_tables(conn: AsyncConnection) -> None:
    """Remove all rows from the three tables and reset identity counters."""
    try:
        await conn.execute(text(CLEAR_STATEMENT))
    except SQLAlchemyError as e:
        raise DatabaseError(
            f"Could not clear tables: {e}", phase=LoadPhase.CLEAR.value, cause=e
        ) from e
    logger.info("Cleared tables: " + ", ".join(t.name for t in LOAD_TABLES))


async def save_courses(conn: AsyncConnection, courses: List[Course]) -> int:
    return await _execute_batch(
        conn, courses_table, [c.to_row() for c in courses], LoadPhase.INSERT_COURSES
    )


async def save_students(conn: AsyncConnection, students: List[Student]) -> int:
    return await _execute_batch(
        conn, students_table, [s.to_row() for s in students], LoadPhase.INSERT_STUDENTS
    )


async def save_exams(conn: AsyncConnection, exams: List[Exam]) -> int:
    return await _execute_batch(
        conn, exams_table, [e.to_row() for e in exams], LoadPhase.INSERT_EXAMS
    )


async def count_rows(conn: AsyncConnection) -> Dict[str, int]:
    """Row count of every load table as seen inside the open transaction."""
    counts: Dict[str, int] = {}
    for table in LOAD_TABLES:
        result = await conn.execute(select(func.count()).select_from(table))
        counts[table.name] = int(result.scalar_one())
    return counts


async def verify_counts(conn: AsyncConnection, dataset: AcademyDataset) -> Dict[str, int]:
    """
    Compare stored row counts with the staged records.

    Tables were truncated in the same transaction, so any difference means a
    batch did not land completely and the load must not be committed.
    """
    try:
        actual = await count_rows(conn)
    except SQLAlchemyError as e:
        raise DatabaseError(
            f"Could not count loaded rows: {e}", phase=LoadPhase.VERIFY.value, cause=e
        ) from e

    for table_name, expected in dataset.counts.items():
        if actual.get(table_name) != expected:
            raise IncompleteBatchError(
                table_name,
                expected,
                actual.get(table_name, 0),
                phase=LoadPhase.VERIFY.value,
            )
    return actual


class AcademyLoader:
    """Loads an AcademyDataset through a DatabaseManager."""

    def __init__(self, db: DatabaseManager) -> None:
        self.db = db

    async def load(self, dataset: AcademyDataset) -> LoadResult:
        started = time.perf_counter()
        phase = LoadPhase.CONNECT
        row_counts: Dict[str, int] = {}

        try:
            try:
                async with self.db.connection() as conn:
                    phase = LoadPhase.CLEAR
                    await clear_tables(conn)

                    # Parents before children so the foreign keys resolve
                    phase = LoadPhase.INSERT_COURSES
                    await save_courses(conn, dataset.courses)
                    phase = LoadPhase.INSERT_STUDENTS
                    await save_students(conn, dataset.students)
                    phase = LoadPhase.INSERT_EXAMS
                    await save_exams(conn, dataset.exams)

                    phase = LoadPhase.VERIFY
                    row_counts = await verify_counts(conn, dataset)

                    phase = LoadPhase.COMMIT
                    await conn.commit()
            except (
                SQLAlchemyError,
                asyncpg.PostgresError,
                asyncpg.InterfaceError,
                OSError,
            ) as e:
                # Stage helpers wrap their own errors; this is connect or commit
                raise DatabaseError(
                    f"Database failure during {phase.value}: {e}",
                    phase=phase.value,
                    cause=e,
                ) from e
        except DatabaseError as e:
            elapsed = time.perf_counter() - started
            logger.error(
                f"Load failed during {phase.value}: {e.message}", exc_info=True
            )
            return LoadResult(
                success=False, phase=phase, error=e, elapsed_seconds=elapsed
            )

        elapsed = time.perf_counter() - started
        logger.info(f"Load committed in {elapsed:.2f}s: {row_counts}")
        return LoadResult(
            success=True,
            phase=LoadPhase.COMMIT,
            row_counts=row_counts,
            elapsed_seconds=elapsed,
        )


__all__ = [
    "CLEAR_STATEMENT",
    "LoadPhase",
    "LoadResult",
    "AcademyLoader",
    "clear_tables",
    "save_courses",
    "save_students",
    "save_exams",
    "count_rows",
    "verify_counts",
]
