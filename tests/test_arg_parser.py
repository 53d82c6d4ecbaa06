"""Tests for lib/arg_parser.py."""

from __future__ import annotations

import io
import os
import sys
import unittest
from contextlib import redirect_stderr

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from lib.arg_parser import create_setup_argument_parser
from lib.config import HardeningConfig

KEY = "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIFakeKeyBodyForTests admin@laptop"


class TestSetupArgumentParser(unittest.TestCase):
    def setUp(self):
        self.parser = create_setup_argument_parser("test")

    def _fails(self, argv: list) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                self.parser.parse_args(argv)

    def test_defaults(self):
        args = self.parser.parse_args([])
        self.assertIsNone(args.ssh_port)
        self.assertIsNone(args.ssh_key)
        self.assertIsNone(args.ssh_key_file)
        self.assertFalse(args.assume_yes)
        self.assertEqual(args.machine_type, "vm")
        self.assertEqual(args.log_level, "INFO")
        self.assertFalse(args.dry_run)

    def test_all_flags(self):
        args = self.parser.parse_args([
            "--port", "42022", "--key", KEY, "-y", "--machine", "hardware",
            "--skip-upgrade", "--keep-ipv6", "--extra-packages", "htop vim",
            "--log-level", "DEBUG", "--dry-run",
        ])
        self.assertEqual(args.ssh_port, 42022)
        self.assertEqual(args.ssh_key, KEY)
        self.assertTrue(args.assume_yes)
        self.assertEqual(args.machine_type, "hardware")
        self.assertTrue(args.skip_upgrade)
        self.assertTrue(args.keep_ipv6)
        self.assertEqual(args.log_level, "DEBUG")
        self.assertTrue(args.dry_run)

    def test_port_out_of_range(self):
        self._fails(["--port", "22"])
        self._fails(["--port", "65536"])
        self._fails(["--port", "ssh"])

    def test_key_and_key_file_exclusive(self):
        self._fails(["--key", KEY, "--key-file", "id_ed25519.pub"])

    def test_empty_key(self):
        self._fails(["--key", "   "])

    def test_unknown_machine_type(self):
        self._fails(["--machine", "laptop"])

    def test_config_from_args(self):
        args = self.parser.parse_args(["--keep-ipv6", "--extra-packages", "htop curl", "--machine", "oci"])
        config = HardeningConfig.from_args(args, 42022, KEY)
        self.assertFalse(config.disable_ipv6)
        self.assertEqual(config.machine_type, "oci")
        self.assertEqual(config.packages, ["curl", "wget", "nano", "htop"])


if __name__ == '__main__':
    unittest.main()
