"""Tests for the segment import loop and its runners."""

from pathlib import Path
from typing import Dict, List

import pytest

from dump_splitter.config.settings import Settings
from dump_splitter.exceptions import ImportConfigurationError
from dump_splitter.io import importer
from dump_splitter.io.importer import (
    MAX_ERROR_CHARS,
    DdevRunner,
    ImportOutcome,
    ImportRunner,
    MySQLClientRunner,
    build_runner,
    import_directory,
    list_segment_files,
)


class FakeRunner:
    """Records imported files; fails for the names it is told to."""

    name = "fake"

    def __init__(self, failing: tuple = ()):
        self.failing = set(failing)
        self.imported: List[str] = []

    def run(self, path: Path) -> ImportOutcome:
        self.imported.append(path.name)
        if path.name in self.failing:
            return ImportOutcome(path=path, success=False, returncode=1, error="boom")
        return ImportOutcome(path=path, success=True, returncode=0)


@pytest.fixture
def segment_dir(tmp_path):
    directory = tmp_path / "split-sql"
    directory.mkdir()
    for name in ("orders.sql", "accounts.sql", "users.sql"):
        (directory / name).write_text("SELECT 1;\n", encoding="utf-8")
    (directory / "notes.txt").write_text("not a segment\n", encoding="utf-8")
    return directory


@pytest.mark.unit
class TestListSegmentFiles:
    def test_sorted_sql_files_only(self, segment_dir):
        names = [p.name for p in list_segment_files(segment_dir)]
        assert names == ["accounts.sql", "orders.sql", "users.sql"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ImportConfigurationError, match="not found"):
            list_segment_files(tmp_path / "nowhere")

    def test_empty_directory(self, tmp_path):
        with pytest.raises(ImportConfigurationError, match="No .sql files"):
            list_segment_files(tmp_path)


@pytest.mark.unit
class TestImportDirectory:
    def test_all_files_succeed(self, segment_dir):
        runner = FakeRunner()

        summary = import_directory(segment_dir, runner)

        assert runner.imported == ["accounts.sql", "orders.sql", "users.sql"]
        assert summary.total == 3
        assert summary.succeeded == 3
        assert summary.ok

    def test_failure_does_not_stop_the_batch(self, segment_dir):
        runner = FakeRunner(failing=("orders.sql",))

        summary = import_directory(segment_dir, runner)

        assert runner.imported == ["accounts.sql", "orders.sql", "users.sql"]
        assert summary.succeeded == 2
        assert summary.failed == 1
        assert summary.failed_files == [segment_dir / "orders.sql"]
        assert not summary.ok

    def test_fake_runner_satisfies_protocol(self):
        assert isinstance(FakeRunner(), ImportRunner)
        assert isinstance(DdevRunner(), ImportRunner)


@pytest.mark.unit
class TestBuildRunner:
    def test_ddev_mode_needs_no_connection_settings(self):
        runner = build_runner(Settings(use_ddev=True))
        assert isinstance(runner, DdevRunner)
        assert runner.build_command() == ["ddev", "mysql"]

    def test_mysql_mode_requires_connection_settings(self):
        with pytest.raises(ImportConfigurationError) as exc_info:
            build_runner(Settings(db_host="localhost"))

        message = str(exc_info.value)
        assert "--database" in message
        assert "--user" in message
        assert "--host" not in message
        assert "--ddev" in message

    def test_mysql_mode(self):
        runner = build_runner(
            Settings(
                db_host="db.local",
                db_port=3307,
                db_name="shop",
                db_user="root",
                db_password="s3cret",
            )
        )

        assert isinstance(runner, MySQLClientRunner)
        assert runner.build_command() == [
            "mysql",
            "-hdb.local",
            "-P3307",
            "-uroot",
            "shop",
        ]
        assert runner.environment() == {"MYSQL_PWD": "s3cret"}
        assert "s3cret" not in runner.describe()

    def test_no_password_sets_no_environment(self):
        runner = MySQLClientRunner(host="h", database="d", user="u")
        assert runner.environment() == {}


class _Completed:
    def __init__(self, returncode: int, stderr: bytes = b""):
        self.returncode = returncode
        self.stderr = stderr


@pytest.mark.unit
class TestSubprocessRunner:
    def test_file_is_fed_on_stdin_with_password_env(self, monkeypatch, tmp_path):
        segment = tmp_path / "users.sql"
        segment.write_bytes(b"CREATE TABLE `users` (id INT);\n")
        calls: List[Dict] = []

        def fake_run(command, stdin, capture_output, env):
            calls.append({"command": command, "stdin": stdin.read(), "env": env})
            return _Completed(0)

        monkeypatch.setattr(importer.subprocess, "run", fake_run)
        runner = MySQLClientRunner(host="h", database="d", user="u", password="pw")

        outcome = runner.run(segment)

        assert outcome.success
        [call] = calls
        assert call["command"] == ["mysql", "-hh", "-P3306", "-uu", "d"]
        assert call["stdin"] == b"CREATE TABLE `users` (id INT);\n"
        assert call["env"]["MYSQL_PWD"] == "pw"

    def test_non_zero_exit_reports_stderr(self, monkeypatch, tmp_path):
        segment = tmp_path / "users.sql"
        segment.write_text("x\n", encoding="utf-8")
        monkeypatch.setattr(
            importer.subprocess,
            "run",
            lambda *a, **kw: _Completed(1, b"ERROR 1064 (42000): syntax error"),
        )

        outcome = DdevRunner().run(segment)

        assert not outcome.success
        assert outcome.returncode == 1
        assert outcome.error == "ERROR 1064 (42000): syntax error"

    def test_long_stderr_is_truncated(self, monkeypatch, tmp_path):
        segment = tmp_path / "users.sql"
        segment.write_text("x\n", encoding="utf-8")
        monkeypatch.setattr(
            importer.subprocess,
            "run",
            lambda *a, **kw: _Completed(2, b"e" * (MAX_ERROR_CHARS * 2)),
        )

        outcome = DdevRunner().run(segment)

        assert len(outcome.error) == MAX_ERROR_CHARS

    def test_missing_executable_is_a_per_file_failure(self, tmp_path):
        segment = tmp_path / "users.sql"
        segment.write_text("x\n", encoding="utf-8")

        outcome = DdevRunner(executable="no-such-ddev-binary").run(segment)

        assert not outcome.success
        assert "no-such-ddev-binary" in outcome.error
