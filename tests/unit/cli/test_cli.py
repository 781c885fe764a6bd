"""CLI tests for the split and import commands (plain console output)."""

from pathlib import Path

import pytest

from dump_splitter.cli import importing
from dump_splitter.cli.__main__ import main
from dump_splitter.cli.console import PlainConsole, get_console
from dump_splitter.io.importer import ImportOutcome

DUMP = """\
-- MySQL dump
SET FOREIGN_KEY_CHECKS = 0;
CREATE TABLE `users` (
  `id` int NOT NULL
);
LOCK TABLES `users` WRITE;
INSERT INTO `users` VALUES (1),(2);
UNLOCK TABLES;
CREATE TABLE `_tmp` (id INT);
INSERT INTO `_tmp` VALUES (1);
CREATE TABLE `sessions` (id INT);
INSERT INTO `sessions` VALUES (1);
"""


class FakeRunner:
    name = "fake"

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.imported = []

    def describe(self) -> str:
        return "fake database"

    def run(self, path: Path) -> ImportOutcome:
        self.imported.append(path.name)
        if path.name in self.failing:
            return ImportOutcome(path=path, success=False, returncode=1, error="denied")
        return ImportOutcome(path=path, success=True, returncode=0)


@pytest.fixture
def fake_runner(monkeypatch):
    def _install(failing=()):
        runner = FakeRunner(failing)
        monkeypatch.setattr(importing, "build_runner", lambda settings: runner)
        return runner

    return _install


@pytest.mark.unit
class TestSplitCommand:
    def test_split_reports_files(self, write_dump, tmp_path, capsys):
        dump = write_dump(DUMP)

        exit_code = main(
            ["split", str(dump), "--no-rich", "--create-only", "sessions"]
        )

        out = capsys.readouterr().out
        assert exit_code == 0
        assert sorted(p.name for p in (tmp_path / "split-sql").iterdir()) == [
            "sessions.sql",
            "users.sql",
        ]
        assert "Skipping excluded table: _tmp" in out
        assert "users.sql (structure + data)" in out
        assert "sessions.sql (create-only)" in out
        assert "Total files: 2" in out
        assert "Create-only tables: sessions" in out
        assert "ddev mysql < split-sql/table_name.sql" in out

    def test_output_dir_flag(self, write_dump, tmp_path, capsys):
        dump = write_dump(DUMP)
        out_dir = tmp_path / "tables"

        assert main(["split", str(dump), "--no-rich", "-o", str(out_dir)]) == 0
        assert (out_dir / "users.sql").exists()

    def test_exclude_flag_replaces_default(self, write_dump, tmp_path, capsys):
        dump = write_dump(DUMP)

        assert main(["split", str(dump), "--no-rich", "--exclude", ""]) == 0
        assert (tmp_path / "split-sql" / "_tmp.sql").exists()
        assert "Excluding entirely: (none)" in capsys.readouterr().out

    def test_output_dir_from_environment(self, write_dump, tmp_path, monkeypatch):
        monkeypatch.setenv("DSPLIT_OUTPUT_DIR", str(tmp_path / "from-env"))
        dump = write_dump(DUMP)

        assert main(["split", str(dump), "--no-rich"]) == 0
        assert (tmp_path / "from-env" / "users.sql").exists()

    def test_missing_input_fails_without_output(self, tmp_path, capsys):
        exit_code = main(["split", str(tmp_path / "absent.sql"), "--no-rich"])

        assert exit_code == 1
        assert "Error: Cannot open dump" in capsys.readouterr().out
        assert not (tmp_path / "split-sql").exists()

    def test_unknown_encoding_fails(self, write_dump, capsys):
        dump = write_dump(DUMP)

        exit_code = main(
            ["split", str(dump), "--no-rich", "--encoding", "no-such-codec"]
        )

        assert exit_code == 1

    def test_diagnostics_are_reported(self, write_dump, capsys):
        dump = write_dump("CREATE TABLE `t` (\n  id INT\n")

        assert main(["split", str(dump), "--no-rich"]) == 0
        out = capsys.readouterr().out
        assert "Warning: line 2:" in out
        assert "Warnings: 0 unattributable, 1 unterminated" in out

    def test_clean_dump_prints_no_warning_summary(self, write_dump, capsys):
        dump = write_dump(DUMP)

        assert main(["split", str(dump), "--no-rich"]) == 0
        assert "Warnings:" not in capsys.readouterr().out

    @pytest.mark.parametrize(
        "name,value",
        [
            ("DSPLIT_DB_PORT", "not-a-port"),
            ("DSPLIT_EXCLUDE_PATTERNS", '["a",'),
        ],
    )
    def test_invalid_environment_value_fails_cleanly(
        self, write_dump, tmp_path, monkeypatch, capsys, name, value
    ):
        monkeypatch.setenv(name, value)
        dump = write_dump(DUMP)

        exit_code = main(["split", str(dump), "--no-rich"])

        assert exit_code == 1
        assert "Error: Invalid settings" in capsys.readouterr().out
        assert not (tmp_path / "split-sql").exists()

    def test_import_without_connection_fails_before_splitting(
        self, write_dump, tmp_path, capsys
    ):
        dump = write_dump(DUMP)

        exit_code = main(["split", str(dump), "--no-rich", "--import"])

        assert exit_code == 1
        assert "MySQL import requires" in capsys.readouterr().out
        assert not (tmp_path / "split-sql").exists()

    def test_split_then_import(self, write_dump, fake_runner, capsys):
        runner = fake_runner()
        dump = write_dump(DUMP)

        exit_code = main(["split", str(dump), "--no-rich", "--import", "--ddev"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert runner.imported == ["sessions.sql", "users.sql"]
        assert "Using fake database" in out
        assert "Successfully imported: 2 files" in out


@pytest.mark.unit
class TestImportCommand:
    @pytest.fixture
    def segments(self, tmp_path):
        directory = tmp_path / "split-sql"
        directory.mkdir()
        for name in ("a.sql", "b.sql", "c.sql"):
            (directory / name).write_text("SELECT 1;\n", encoding="utf-8")
        return directory

    def test_all_imported(self, segments, fake_runner, capsys):
        runner = fake_runner()

        assert main(["import", "--no-rich", "--ddev"]) == 0
        assert runner.imported == ["a.sql", "b.sql", "c.sql"]
        out = capsys.readouterr().out
        assert "Files to import (3):" in out
        assert "✓ Successfully imported: b.sql" in out

    def test_failure_continues_and_sets_exit_code(self, segments, fake_runner, capsys):
        runner = fake_runner(failing=("b.sql",))

        exit_code = main(["import", "--no-rich", "--ddev"])

        out = capsys.readouterr().out
        assert exit_code == 1
        assert runner.imported == ["a.sql", "b.sql", "c.sql"]
        assert "✗ Failed to import: b.sql (denied)" in out
        assert "Successfully imported: 2 files" in out
        assert "Failed imports: 1 files" in out

    def test_missing_directory(self, tmp_path, capsys):
        exit_code = main(
            ["import", "--no-rich", "--ddev", "-o", str(tmp_path / "none")]
        )

        assert exit_code == 1
        assert "not found" in capsys.readouterr().out

    def test_missing_connection_settings(self, segments, capsys):
        exit_code = main(["import", "--no-rich", "--host", "localhost"])

        assert exit_code == 1
        assert "--database" in capsys.readouterr().out

    def test_invalid_environment_value_fails_cleanly(
        self, segments, fake_runner, monkeypatch, capsys
    ):
        runner = fake_runner()
        monkeypatch.setenv("DSPLIT_DB_PORT", "not-a-port")

        exit_code = main(["import", "--no-rich", "--ddev"])

        assert exit_code == 1
        assert runner.imported == []
        assert "Error: Invalid settings" in capsys.readouterr().out


@pytest.mark.unit
def test_command_is_required():
    with pytest.raises(SystemExit):
        main([])


@pytest.mark.unit
def test_no_rich_selects_plain_console():
    assert isinstance(get_console(no_rich=True), PlainConsole)
