# academy_loader/tests/conftest.py

"""
Pytest configuration and fixtures for academy loader unit tests.

The fake engine below keeps a committed and a working copy of each table's
row count so transactional behaviour can be checked without PostgreSQL.
"""

import logging
import random
from decimal import Decimal
from typing import Dict, List, Optional

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.sql.dml import Insert

from academy_loader.database import DatabaseManager
from academy_loader.models import AcademyDataset, Course, Exam, Student

# Configure logging for tests
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

TABLES = ("courses", "students", "exams")


class FakeResult:
    def __init__(self, value: int) -> None:
        self._value = value

    def scalar_one(self) -> int:
        return self._value


class FakeConnection:
    """Records statements and tracks per-table row counts transactionally."""

    def __init__(
        self,
        fail_on_table: Optional[str] = None,
        drop_rows: Optional[Dict[str, int]] = None,
        fail_commit: bool = False,
        initial: Optional[Dict[str, int]] = None,
    ) -> None:
        self.fail_on_table = fail_on_table
        self.drop_rows = drop_rows or {}
        self.fail_commit = fail_commit
        self.committed: Dict[str, int] = {t: 0 for t in TABLES}
        self.committed.update(initial or {})
        self.working = dict(self.committed)
        self.statements: List[str] = []
        self.batches: List[tuple] = []
        self.commit_count = 0
        self.rollback_count = 0
        self.closed = False
        self._dirty = False

    def in_transaction(self) -> bool:
        return self._dirty

    async def execute(self, statement, params=None):
        sql = str(statement)
        self.statements.append(sql)
        self._dirty = True

        if sql.startswith("TRUNCATE"):
            self.working = {t: 0 for t in TABLES}
            return FakeResult(0)

        if isinstance(statement, Insert):
            table = statement.table.name
            self.batches.append((table, list(params or [])))
            if table == self.fail_on_table:
                raise IntegrityError(
                    sql, params, Exception(f"foreign key violation on {table}")
                )
            inserted = len(params or []) - self.drop_rows.get(table, 0)
            self.working[table] += inserted
            return FakeResult(inserted)

        if sql.startswith("SELECT count"):
            table = sql.split()[-1]
            return FakeResult(self.working[table])

        return FakeResult(1)

    async def commit(self) -> None:
        if self.fail_commit:
            raise IntegrityError("COMMIT", None, Exception("deferred constraint"))
        self.committed = dict(self.working)
        self.commit_count += 1
        self._dirty = False

    async def rollback(self) -> None:
        self.working = dict(self.committed)
        self.rollback_count += 1
        self._dirty = False


class _ConnectContext:
    def __init__(self, engine: "FakeEngine") -> None:
        self.engine = engine

    async def __aenter__(self) -> FakeConnection:
        if self.engine.connect_error is not None:
            raise self.engine.connect_error
        return self.engine.conn

    async def __aexit__(self, exc_type, exc, tb) -> None:
        conn = self.engine.conn
        # Closing a connection discards whatever was not committed
        if conn.in_transaction():
            await conn.rollback()
        conn.closed = True


class FakeEngine:
    def __init__(self, conn: FakeConnection, connect_error=None) -> None:
        self.conn = conn
        self.connect_error = connect_error
        self.disposed = False

    def connect(self) -> _ConnectContext:
        return _ConnectContext(self)

    async def dispose(self) -> None:
        self.disposed = True


def make_manager(conn: FakeConnection, connect_error=None) -> DatabaseManager:
    """A DatabaseManager wired to a fake engine, already initialized."""
    manager = DatabaseManager()
    manager.engine = FakeEngine(conn, connect_error=connect_error)
    manager._is_initialized = True
    return manager


@pytest.fixture
def rng():
    return random.Random(20240901)


@pytest.fixture
def fake_connection():
    return FakeConnection()


@pytest.fixture
def small_dataset():
    students = [
        Student(id=1, name="Student_3", start_year=2021),
        Student(id=2, name="Student_7", start_year=2023),
    ]
    courses = [
        Course(id=1, title="Course_1", hours=12),
        Course(id=2, title="Course_2", hours=48),
    ]
    exams = [
        Exam(student_id=2, course_id=1, score=Decimal("71.25")),
        Exam(student_id=1, course_id=2, score=Decimal("99.10")),
        Exam(student_id=2, course_id=1, score=Decimal("0.00")),
    ]
    return AcademyDataset(students=students, courses=courses, exams=exams)


@pytest.fixture
def connection_factory():
    """Build FakeConnection instances with failure knobs."""
    return FakeConnection


@pytest.fixture
def manager_factory():
    """Build initialized DatabaseManager instances over a fake engine."""
    return make_manager
