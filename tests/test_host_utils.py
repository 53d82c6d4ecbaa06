"""Tests for lib/host_utils.py: dry-run mode, OS detection, file helpers."""

from __future__ import annotations

import io
import os
import subprocess
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from lib.host_utils import (
    set_dry_run,
    is_dry_run,
    run,
    detect_os,
    read_os_release,
    file_contains,
    read_file,
    write_file,
    make_dirs,
)

UBUNTU_2404 = """PRETTY_NAME="Ubuntu 24.04.1 LTS"
NAME="Ubuntu"
VERSION_ID="24.04"
VERSION_CODENAME=noble
ID=ubuntu
ID_LIKE=debian
"""


def _write_temp(content: str) -> str:
    with tempfile.NamedTemporaryFile(mode='w', suffix='.txt', delete=False) as f:
        f.write(content)
        return f.name


class TestDryRun(unittest.TestCase):
    def setUp(self):
        set_dry_run(False)

    def tearDown(self):
        set_dry_run(False)

    def test_default_not_dry_run(self):
        self.assertFalse(is_dry_run())

    def test_set_dry_run_true(self):
        set_dry_run(True)
        self.assertTrue(is_dry_run())

    def test_set_dry_run_false(self):
        set_dry_run(True)
        set_dry_run(False)
        self.assertFalse(is_dry_run())


class TestRunDryRun(unittest.TestCase):
    def setUp(self):
        set_dry_run(True)

    def tearDown(self):
        set_dry_run(False)

    @patch("lib.host_utils.subprocess.run")
    def test_dry_run_does_not_execute(self, mock_run):
        result = run("ufw --force enable")
        mock_run.assert_not_called()
        self.assertEqual(result.returncode, 0)
        self.assertEqual(result.stdout, "")

    def test_dry_run_type(self):
        result = run("echo hello")
        self.assertIsInstance(result, subprocess.CompletedProcess)


class TestRun(unittest.TestCase):
    def test_returns_failure_without_raising(self):
        result = run("exit 3", check=True)
        self.assertEqual(result.returncode, 3)

    def test_capture_output(self):
        result = run("echo hello", capture_output=True)
        self.assertEqual(result.stdout.strip(), "hello")


class TestDetectOs(unittest.TestCase):
    def test_ubuntu_2404(self):
        path = _write_temp(UBUNTU_2404)
        try:
            self.assertEqual(detect_os(path), "24.04")
        finally:
            os.unlink(path)

    def test_other_ubuntu_release_warns_but_passes(self):
        path = _write_temp(UBUNTU_2404.replace('VERSION_ID="24.04"', 'VERSION_ID="22.04"'))
        try:
            self.assertEqual(detect_os(path), "22.04")
        finally:
            os.unlink(path)

    def test_debian_rejected(self):
        path = _write_temp('PRETTY_NAME="Debian GNU/Linux 12"\nID=debian\nVERSION_ID="12"\n')
        try:
            self.assertIsNone(detect_os(path))
        finally:
            os.unlink(path)

    def test_missing_file(self):
        self.assertIsNone(detect_os('/nonexistent/os-release'))

    def test_read_os_release_strips_quotes(self):
        path = _write_temp(UBUNTU_2404)
        try:
            info = read_os_release(path)
            self.assertEqual(info['VERSION_CODENAME'], 'noble')
            self.assertEqual(info['NAME'], 'Ubuntu')
        finally:
            os.unlink(path)


class TestFileContains(unittest.TestCase):
    def test_file_contains_string(self):
        path = _write_temp("hello world\nfoo bar\n")
        try:
            self.assertTrue(file_contains(path, 'hello'))
            self.assertTrue(file_contains(path, 'foo bar'))
            self.assertFalse(file_contains(path, 'missing'))
        finally:
            os.unlink(path)

    def test_file_not_found(self):
        self.assertFalse(file_contains('/nonexistent/file/xyz', 'content'))


class TestReadWriteFile(unittest.TestCase):
    def tearDown(self):
        set_dry_run(False)

    def test_read_missing_file_is_empty(self):
        self.assertEqual(read_file('/nonexistent/file/xyz'), "")

    def test_dry_run_unreadable_file_is_empty(self):
        set_dry_run(True)
        with patch('builtins.open', side_effect=PermissionError(13, 'Permission denied')), \
             redirect_stdout(io.StringIO()) as out:
            self.assertEqual(read_file('/root/.ssh/authorized_keys'), "")
        self.assertIn('[DRY-RUN] cannot read /root/.ssh/authorized_keys', out.getvalue())

    def test_unreadable_file_raises(self):
        set_dry_run(False)
        with patch('builtins.open', side_effect=PermissionError(13, 'Permission denied')):
            with self.assertRaises(PermissionError):
                read_file('/root/.ssh/authorized_keys')

    def test_write_and_append(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'authorized_keys')
            write_file(path, "first\n", mode=0o600)
            write_file(path, "second\n", append=True)
            self.assertEqual(read_file(path), "first\nsecond\n")
            self.assertEqual(os.stat(path).st_mode & 0o777, 0o600)

    def test_dry_run_write_skipped(self):
        set_dry_run(True)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'sshd_config')
            write_file(path, "Port 2222\n")
            self.assertFalse(os.path.exists(path))

    def test_make_dirs_mode(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, '.ssh')
            make_dirs(path, 0o700)
            self.assertTrue(os.path.isdir(path))
            self.assertEqual(os.stat(path).st_mode & 0o777, 0o700)

    def test_make_dirs_dry_run(self):
        set_dry_run(True)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, '.ssh')
            make_dirs(path, 0o700)
            self.assertFalse(os.path.exists(path))


if __name__ == '__main__':
    unittest.main()
