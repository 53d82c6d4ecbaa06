#!/usr/bin/env python3
"""Preliminary hardening of a fresh Ubuntu 24.04 server.

Configures SSH on a chosen (or random) port with key-only root login, enables
UFW and fail2ban for that port, and disables IPv6. Run as root on the server.

Usage:
    sudo ./server_setup.py
    sudo ./server_setup.py --port 42022 --key-file id_ed25519.pub -y
    ./server_setup.py --dry-run
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from lib.arg_parser import create_setup_argument_parser
from lib.config import HardeningConfig
from lib.display import print_setup_menu, print_setup_summary, print_completion
from lib.host_utils import set_dry_run, is_root, detect_os
from lib.logging_utils import get_service_logger
from lib.machine_state import load_setup_state, save_setup_state, STATE_FILE
from lib.progress import run_steps
from lib.prompts import SetupAborted, confirm_setup, prompt_ssh_port, prompt_public_key
from lib.validators import validate_public_key
from lib.verification import verify_hardening
from security.steps import get_hardening_steps


def read_key_file(path: str) -> str:
    with open(path, "r") as f:
        lines = [line.strip() for line in f if line.strip() and not line.lstrip().startswith("#")]
    if not lines or not validate_public_key(lines[0]):
        raise SetupAborted(f"No public key found in {path}")
    return lines[0]


def collect_inputs(args: argparse.Namespace) -> tuple[int, str]:
    """Confirm, then resolve the SSH port and key from flags or prompts."""
    if not args.assume_yes:
        print_setup_menu()
        if not confirm_setup():
            raise SetupAborted("Setup not confirmed")

    ssh_port = args.ssh_port if args.ssh_port else prompt_ssh_port()

    if args.ssh_key:
        ssh_key = args.ssh_key
    elif args.ssh_key_file:
        ssh_key = read_key_file(args.ssh_key_file)
    else:
        ssh_key = prompt_public_key()

    return ssh_port, ssh_key


def main() -> int:
    parser = create_setup_argument_parser("Preliminary server hardening for Ubuntu 24.04")
    args = parser.parse_args()

    if args.dry_run:
        set_dry_run(True)
        print("=" * 60)
        print("DRY-RUN MODE ENABLED")
        print("=" * 60)
    elif not is_root():
        print("✗ This script must be run as root")
        print("  Please run: sudo python3 server_setup.py")
        return 1

    if detect_os() is None and not args.dry_run:
        return 1

    logger = get_service_logger("server_setup", level=logging.getLevelName(args.log_level))

    previous = load_setup_state()
    if previous:
        print(f"Note: this host was already hardened at {previous['completed_at']} "
              f"(SSH port {previous['ssh_port']})")

    try:
        ssh_port, ssh_key = collect_inputs(args)
    except SetupAborted as e:
        print(f"✗ Setup aborted: {e}")
        logger.warning(f"Setup aborted: {e}")
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\n✗ Setup aborted")
        return 1
    except OSError as e:
        print(f"✗ Could not read public key: {e}")
        return 1

    config = HardeningConfig.from_args(args, ssh_port, ssh_key)
    print_setup_summary(config)
    logger.info(f"Starting hardening run: {config.to_dict()}")

    try:
        run_steps(get_hardening_steps(config), config)
    except OSError as e:
        logger.exception(f"Hardening step failed: {e}")
        print(f"\n✗ Setup failed: {e}")
        return 1

    if not config.dry_run:
        problems = verify_hardening(config)
        for problem in problems:
            logger.warning(f"⚠ {problem}")
        if not problems:
            logger.info("✓ Post-run checks passed")

        try:
            save_setup_state(config)
        except OSError as e:
            logger.warning(f"⚠ Could not save setup state to {STATE_FILE}: {e}")

    logger.info(f"Hardening run finished (SSH port {config.ssh_port})")
    print_completion(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
