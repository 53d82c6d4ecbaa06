#!/usr/bin/env python3

from __future__ import annotations

import argparse

from lib.config import MACHINE_TYPES, DEFAULT_MACHINE_TYPE, SSH_PORT_MIN, SSH_PORT_MAX
from lib.validators import parse_ssh_port, validate_public_key


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def ssh_port_type(value: str) -> int:
    port = parse_ssh_port(value)
    if port is None:
        raise argparse.ArgumentTypeError(f"invalid SSH port {value!r} (must be {SSH_PORT_MIN}-{SSH_PORT_MAX})")
    return port


def public_key_arg(value: str) -> str:
    if not validate_public_key(value):
        raise argparse.ArgumentTypeError("public key must be a non-empty single line")
    return value.strip()


def create_setup_argument_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)

    parser.add_argument("--port", dest="ssh_port", type=ssh_port_type,
                       help=f"SSH port ({SSH_PORT_MIN}-{SSH_PORT_MAX}); prompted for when omitted")
    key_group = parser.add_mutually_exclusive_group()
    key_group.add_argument("--key", dest="ssh_key", type=public_key_arg,
                          help="Public key line to install for root; prompted for when omitted")
    key_group.add_argument("--key-file", dest="ssh_key_file",
                          help="Read the public key from a file (e.g. id_ed25519.pub)")
    parser.add_argument("-y", "--yes", dest="assume_yes", action="store_true",
                       help="Do not ask for confirmation")
    parser.add_argument("--machine", dest="machine_type",
                       choices=MACHINE_TYPES,
                       default=DEFAULT_MACHINE_TYPE,
                       help="Machine type: vm (default), unprivileged (LXC), privileged, hardware, oci (Docker/Podman)")
    parser.add_argument("--skip-upgrade", dest="skip_upgrade", action="store_true",
                       help="Refresh package lists but do not run apt-get upgrade")
    parser.add_argument("--keep-ipv6", dest="keep_ipv6", action="store_true",
                       help="Leave IPv6 enabled")
    parser.add_argument("--extra-packages", dest="extra_packages",
                       help="Space-separated list of additional packages to install")
    parser.add_argument("--log-level", dest="log_level", choices=LOG_LEVELS, default="INFO",
                       help="Log file verbosity (default: INFO)")
    parser.add_argument("--dry-run", action="store_true",
                       help="Show what would be done without executing commands")

    return parser
