"""Post-run checks of the files the hardening steps edit."""

from __future__ import annotations

import configparser
from typing import Optional

from lib.config import HardeningConfig, SSHD_CONFIG, AUTHORIZED_KEYS, FAIL2BAN_JAIL
from lib.host_utils import read_file
from lib.machine_state import is_container
from lib.sshd_config import get_directive_values


def check_sshd_config(content: str, port: int) -> list[str]:
    problems = []

    ports = get_directive_values(content, "Port")
    if ports != [str(port)]:
        found = ", ".join(ports) if ports else "none"
        problems.append(f"sshd_config should have exactly one active Port {port} line (found: {found})")

    password_auth = get_directive_values(content, "PasswordAuthentication")
    if not password_auth or password_auth[0].lower() != "no":
        problems.append("sshd_config does not set PasswordAuthentication no")

    return problems


def check_jail_port(content: str) -> Optional[str]:
    """Return the port configured for the sshd jail, if any."""
    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read_string(content)
    except configparser.Error:
        return None
    if not parser.has_option("sshd", "port"):
        return None
    return parser.get("sshd", "port").strip()


def verify_hardening(config: HardeningConfig) -> list[str]:
    """Return a list of problems; empty when the host matches the config."""
    problems = check_sshd_config(read_file(SSHD_CONFIG), config.ssh_port)

    keys = [line.strip() for line in read_file(AUTHORIZED_KEYS).splitlines()]
    if config.ssh_key not in keys:
        problems.append(f"Public key not found in {AUTHORIZED_KEYS}")

    if not is_container(config.machine_type):
        jail_port = check_jail_port(read_file(FAIL2BAN_JAIL))
        if jail_port != str(config.ssh_port):
            problems.append(f"fail2ban jail port is {jail_port or 'unset'}, expected {config.ssh_port}")

    return problems
