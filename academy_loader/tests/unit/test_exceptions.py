# academy_loader/tests/unit/test_exceptions.py

from academy_loader.exceptions import (
    ConfigurationError,
    DatabaseError,
    GenerationError,
    IncompleteBatchError,
    LoaderError,
)


class TestLoaderError:
    def test_str_includes_context_and_cause(self):
        cause = ValueError("bad")
        err = LoaderError("failed", cause=cause, context={"table": "exams"})

        text = str(err)

        assert text.startswith("LoaderError(loader_error): failed")
        assert "context={'table': 'exams'}" in text
        assert "cause=ValueError('bad')" in text

    def test_to_dict(self):
        data = GenerationError("no courses", details={"count": 3}).to_dict()

        assert data["error"]["type"] == "GenerationError"
        assert data["error"]["code"] == "generation_error"
        assert data["error"]["details"] == {"count": 3}
        assert data["error"]["timestamp"]


class TestDatabaseErrors:
    def test_phase_and_table_in_context(self):
        err = DatabaseError("insert failed", phase="insert_exams", table="exams")

        assert err.phase == "insert_exams"
        assert err.context == {"phase": "insert_exams", "table": "exams"}

    def test_incomplete_batch(self):
        err = IncompleteBatchError("students", expected=100, actual=99, phase="verify")

        assert isinstance(err, DatabaseError)
        assert err.code == "incomplete_batch"
        assert err.message == "Table students holds 99 rows after loading, expected 100"
        assert err.context["expected"] == 100
        assert err.context["actual"] == 99

    def test_configuration_error_counts_issues(self):
        err = ConfigurationError(issues=["a", "b"])

        assert err.issues == ["a", "b"]
        assert err.context == {"issue_count": 2}
