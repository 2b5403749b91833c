"""
Integration tests for the command line.

Tests cover:
- --version
- init
- append (hex and file payloads, errors)
- doctor
"""

import json
from pathlib import Path

from typer.testing import CliRunner

from translog import __version__
from translog.cli import app

runner = CliRunner()


class TestVersion:
    """Tests for --version."""

    def test_version(self) -> None:
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestInit:
    """Tests for translog init."""

    def test_init_creates_log(self, log_path: Path, read_rows) -> None:
        """init creates a file with the log schema."""
        result = runner.invoke(app, ["init", str(log_path)])
        assert result.exit_code == 0
        assert "Created log" in result.output
        assert read_rows(log_path, "SELECT to_version FROM migrations") == [("0.1.0",)]

    def test_init_existing_file(self, log_path: Path) -> None:
        """init refuses to touch an existing file."""
        log_path.write_bytes(b"")
        result = runner.invoke(app, ["init", str(log_path)])
        assert result.exit_code == 1
        assert "already exists" in result.output


class TestAppend:
    """Tests for translog append."""

    def test_append_hex(self, log_path: Path, read_rows) -> None:
        """A hex payload is stored with the given time."""
        runner.invoke(app, ["init", str(log_path)])
        result = runner.invoke(app, [
            "append", str(log_path),
            "--topic", "/odom", "--type", "Pose",
            "--sec", "10", "--nsec", "500",
            "--data", "010203",
        ])
        assert result.exit_code == 0
        assert "Appended" in result.output
        rows = read_rows(log_path, "SELECT time_recv_sec, time_recv_nano, message FROM messages")
        assert rows == [(10, 500, b"\x01\x02\x03")]

    def test_append_file(self, log_path: Path, temp_dir: Path, read_rows) -> None:
        """A payload file is stored verbatim."""
        payload = temp_dir / "payload.bin"
        payload.write_bytes(b"\x00\xff\x10")
        result = runner.invoke(app, [
            "append", str(log_path), "--create",
            "--topic", "/scan", "--type", "LaserScan",
            "--file", str(payload),
        ])
        assert result.exit_code == 0
        assert read_rows(log_path, "SELECT message FROM messages") == [(b"\x00\xff\x10",)]

    def test_append_json(self, log_path: Path) -> None:
        """--json prints a machine-readable summary."""
        result = runner.invoke(app, [
            "append", str(log_path), "--create", "--json",
            "--topic", "/odom", "--type", "Pose",
            "--sec", "1", "--data", "ff",
        ])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["time"] == {"sec": 1, "nsec": 0}
        assert data["size"] == 1

    def test_append_missing_log(self, log_path: Path) -> None:
        """Without --create a missing log is an error."""
        result = runner.invoke(app, [
            "append", str(log_path),
            "--topic", "/odom", "--type", "Pose", "--data", "00",
        ])
        assert result.exit_code == 1
        assert not log_path.exists()

    def test_append_requires_one_payload(self, log_path: Path) -> None:
        """Exactly one of --data and --file must be given."""
        result = runner.invoke(app, [
            "append", str(log_path), "--topic", "/odom", "--type", "Pose",
        ])
        assert result.exit_code == 2

    def test_append_bad_hex(self, log_path: Path) -> None:
        """Invalid hex is rejected."""
        result = runner.invoke(app, [
            "append", str(log_path), "--create",
            "--topic", "/odom", "--type", "Pose", "--data", "zz",
        ])
        assert result.exit_code == 2
        assert "Invalid hex" in result.output


class TestDoctor:
    """Tests for translog doctor."""

    def test_doctor_ok(self) -> None:
        """All checks pass with the installed package."""
        result = runner.invoke(app, ["doctor"])
        assert result.exit_code == 0
        assert "All checks passed" in result.output

    def test_doctor_missing_schema(self, temp_dir: Path) -> None:
        """A schema_path without the script fails the check."""
        config = temp_dir / "translog.yaml"
        config.write_text(f"schema_path: {temp_dir / 'nowhere'}\n")
        result = runner.invoke(app, ["doctor", "--json", "--config", str(config)])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        checks = {check["name"]: check for check in data["checks"]}
        assert checks["Schema script"]["ok"] is False
