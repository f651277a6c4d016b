"""Tests for main.py CLI functionality."""

import io
import logging
from unittest.mock import patch

import pytest
from PIL import Image

from imgmanager.core.logging_config import set_package_level
from imgmanager.drives import LocalDrive, S3Drive
from imgmanager.main import build_drive, build_parser, main
from imgmanager.testing.fakes import create_test_image


def _run(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestMainCLI:
    """Tests for the main CLI functionality."""

    def test_main_with_no_args_shows_help(self):
        """Test that running main without arguments shows help."""
        with patch("argparse.ArgumentParser.print_help") as mock_help:
            assert _run([]) == 1
            mock_help.assert_called_once()

    def test_main_version_command(self, capsys):
        """Test version command output."""
        assert _run(["version"]) == 0
        out = capsys.readouterr().out
        assert "imgmanager CLI" in out
        assert "Version 0.1.0" in out

    def test_invalid_list_date_rejected(self):
        """Test malformed dates are rejected by the parser."""
        assert _run(["list", "--start", "01/05/2023"]) == 2

    def test_debug_enables_drive_and_error_loggers(self, tmp_path):
        """Test --debug reaches the drive and error loggers, not just the root one."""
        try:
            code = _run(
                [
                    "--root",
                    str(tmp_path),
                    "--debug",
                    "list",
                    "--start",
                    "2023-05-01",
                    "--end",
                    "2023-05-01",
                ]
            )

            assert code == 0
            for name in ("imgmanager", "imgmanager.drives.local", "imgmanager.errors"):
                assert logging.getLogger(name).level == logging.DEBUG
        finally:
            set_package_level("INFO")

    def test_build_drive_local_by_default(self, tmp_path):
        """Test the local drive is used without --bucket."""
        args = build_parser().parse_args(["--root", str(tmp_path), "version"])
        drive = build_drive(args)

        assert isinstance(drive, LocalDrive)
        assert drive.root == tmp_path.resolve()

    def test_build_drive_s3(self):
        """Test --bucket selects the S3 drive."""
        args = build_parser().parse_args(["--bucket", "photos", "--prefix", "p", "version"])
        with patch("imgmanager.drives.s3.boto3.Session"):
            drive = build_drive(args)

        assert isinstance(drive, S3Drive)
        assert drive.bucket == "photos"
        assert drive.prefix == "p"


class TestCommandsAgainstLocalDrive:
    """Run the commands end to end on a temporary directory."""

    def test_upload_with_date_hint(self, tmp_path, capsys):
        """Test upload files the image by the fallback date."""
        source = tmp_path / "in.jpg"
        source.write_bytes(create_test_image(64, 64))
        root = tmp_path / "store"

        code = _run(
            ["--root", str(root), "upload", str(source), "--date", "2023:05:01 10:00:00"]
        )

        assert code == 0
        assert "2023/05/01/in.jpg" in capsys.readouterr().out
        assert (root / "2023" / "05" / "01" / "in.jpg").read_bytes() == source.read_bytes()

    def test_upload_name_with_several_files_rejected(self, tmp_path):
        """Test --name is refused for multiple files."""
        a = tmp_path / "a.jpg"
        b = tmp_path / "b.jpg"
        a.write_bytes(b"a")
        b.write_bytes(b"b")

        assert _run(["--root", str(tmp_path), "upload", str(a), str(b), "--name", "x.jpg"]) == 2

    def test_thumbnail_command(self, tmp_path):
        """Test thumbnail writes a bounded JPEG."""
        drive = LocalDrive(tmp_path / "store")
        data = create_test_image(400, 200)
        drive.upload("2023/05/01/a.jpg", io.BytesIO(data), len(data))
        output = tmp_path / "thumb.jpg"

        code = _run(
            [
                "--root",
                str(tmp_path / "store"),
                "--thumbnail-size",
                "100",
                "thumbnail",
                "2023/05/01/a.jpg",
                "-o",
                str(output),
            ]
        )

        assert code == 0
        with Image.open(output) as img:
            assert img.size == (100, 50)

    def test_thumbnail_missing_original_fails(self, tmp_path):
        """Test a missing original gives a non-zero exit."""
        assert _run(["--root", str(tmp_path), "thumbnail", "nope.jpg"]) == 1

    def test_list_and_delete(self, tmp_path, capsys):
        """Test listing a date range and deleting what was listed."""
        drive = LocalDrive(tmp_path)
        drive.upload("2023/05/01/a.jpg", io.BytesIO(b"aa"), 2)
        drive.upload("2023/05/02/b.jpg", io.BytesIO(b"b"), 1)

        code = _run(
            ["--root", str(tmp_path), "list", "--start", "2023-05-01", "--end", "2023-05-02"]
        )
        out = capsys.readouterr().out

        assert code == 0
        assert "2023/05/01/a.jpg" in out
        assert "2023/05/02/b.jpg" in out

        code = _run(["--root", str(tmp_path), "delete", "2023/05/01/a.jpg"])

        assert code == 0
        assert not drive.exists("2023/05/01/a.jpg")
        assert drive.exists("2023/05/02/b.jpg")

    def test_list_limit(self, tmp_path, capsys):
        """Test --limit stops the walk early."""
        drive = LocalDrive(tmp_path)
        for name in ("a.jpg", "b.jpg", "c.jpg"):
            drive.upload(f"2023/05/01/{name}", io.BytesIO(b"x"), 1)

        _run(
            [
                "--root",
                str(tmp_path),
                "list",
                "--start",
                "2023-05-01",
                "--end",
                "2023-05-01",
                "--limit",
                "2",
            ]
        )

        lines = [line for line in capsys.readouterr().out.splitlines() if ".jpg" in line]
        assert len(lines) == 2
