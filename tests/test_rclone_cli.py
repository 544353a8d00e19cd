"""Tests for the rclone command-line backend."""

from __future__ import annotations

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from save_pruner.core.pruner import BackupPruner, RetentionSettings
from save_pruner.remote.base import RemoteError
from save_pruner.remote.rclone_cli import RcloneCli

LSJSON = [
    {
        "Path": "backup-20240101000000Z.zip",
        "Name": "backup-20240101000000Z.zip",
        "Size": 2048,
        "MimeType": "application/zip",
        "ModTime": "2024-01-01T00:00:05.123456789Z",
        "IsDir": False,
    },
    {
        "Path": "Celeste",
        "Name": "Celeste",
        "Size": -1,
        "MimeType": "inode/directory",
        "ModTime": "2024-01-02T00:00:00Z",
        "IsDir": True,
    },
]


def _completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> MagicMock:
    proc = MagicMock()
    proc.stdout = stdout
    proc.stderr = stderr
    proc.returncode = returncode
    return proc


@pytest.fixture
def cli() -> RcloneCli:
    return RcloneCli("gdrive:ludusavi", rclone_path="/usr/bin/rclone", timeout=5)


class TestList:
    def test_parses_lsjson(self, cli: RcloneCli) -> None:
        with patch("subprocess.run", return_value=_completed(json.dumps(LSJSON))) as run:
            entries = cli.list("Hollow Knight")
        assert run.call_args.args[0] == ["/usr/bin/rclone", "lsjson", "gdrive:ludusavi/Hollow Knight"]
        assert entries[0].name == "backup-20240101000000Z.zip"
        assert entries[0].size == 2048
        assert entries[0].mod_time.microsecond == 123456
        assert entries[1].is_dir
        assert entries[1].size == 0

    def test_root_path(self, cli: RcloneCli) -> None:
        with patch("subprocess.run", return_value=_completed("[]")) as run:
            assert cli.list("") == []
        assert run.call_args.args[0][-1] == "gdrive:ludusavi"

    def test_bare_remote_has_no_extra_slash(self) -> None:
        bare = RcloneCli("gdrive:")
        with patch("subprocess.run", return_value=_completed("[]")) as run:
            bare.list("Celeste")
        assert run.call_args.args[0][-1] == "gdrive:Celeste"

    def test_nonzero_exit(self, cli: RcloneCli) -> None:
        with patch("subprocess.run", return_value=_completed(returncode=3, stderr="directory not found")):
            with pytest.raises(RemoteError, match="directory not found"):
                cli.list("Missing")

    def test_invalid_json(self, cli: RcloneCli) -> None:
        with patch("subprocess.run", return_value=_completed("not json")):
            with pytest.raises(RemoteError):
                cli.list("")

    def test_malformed_entry(self, cli: RcloneCli) -> None:
        with patch("subprocess.run", return_value=_completed(json.dumps([{"Name": "x"}]))):
            with pytest.raises(RemoteError):
                cli.list("")

    def test_missing_binary(self, cli: RcloneCli) -> None:
        with patch("subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(RemoteError, match="not found"):
                cli.list("")

    def test_not_executable(self, cli: RcloneCli) -> None:
        with patch("subprocess.run", side_effect=PermissionError("denied")):
            with pytest.raises(RemoteError, match="denied"):
                cli.list("")

    def test_permission_error_recorded_per_folder(self) -> None:
        pruner = BackupPruner(RcloneCli("r:"), RetentionSettings())
        with patch("subprocess.run", side_effect=PermissionError("denied")):
            result = pruner.run(["Celeste"])
        assert [f.folder for f in result.folders] == ["Celeste"]
        assert len(result.errors) == 1
        assert "denied" in result.errors[0]

    def test_timeout(self, cli: RcloneCli) -> None:
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="rclone", timeout=5)):
            with pytest.raises(RemoteError, match="timed out"):
                cli.list("")


class TestDelete:
    def test_deletefile(self, cli: RcloneCli) -> None:
        with patch("subprocess.run", return_value=_completed()) as run:
            cli.delete("Celeste/backup-20240101000000Z.zip")
        assert run.call_args.args[0] == [
            "/usr/bin/rclone",
            "deletefile",
            "gdrive:ludusavi/Celeste/backup-20240101000000Z.zip",
        ]

    def test_failure(self, cli: RcloneCli) -> None:
        with patch("subprocess.run", return_value=_completed(returncode=1, stderr="object not found")):
            with pytest.raises(RemoteError):
                cli.delete("Celeste/gone.zip")
