"""Security hardening steps."""

from __future__ import annotations

from lib.config import HardeningConfig
from lib.progress import Step
from .security_steps import (
    update_packages,
    install_essential_packages,
    install_ssh_key,
    harden_ssh,
    configure_firewall,
    configure_fail2ban,
    disable_ipv6,
)

HARDENING_STEPS: list[Step] = [
    ("Updating and upgrading packages", update_packages),
    ("Installing essential packages", install_essential_packages),
    ("Installing SSH public key", install_ssh_key),
    ("Hardening SSH configuration", harden_ssh),
    ("Configuring firewall", configure_firewall),
    ("Configuring fail2ban", configure_fail2ban),
    ("Disabling IPv6", disable_ipv6),
]


def get_hardening_steps(config: HardeningConfig) -> list[Step]:
    steps = list(HARDENING_STEPS)
    if not config.disable_ipv6:
        steps = [step for step in steps if step[1] is not disable_ipv6]
    return steps


__all__ = [
    'update_packages',
    'install_essential_packages',
    'install_ssh_key',
    'harden_ssh',
    'configure_firewall',
    'configure_fail2ban',
    'disable_ipv6',
    'HARDENING_STEPS',
    'get_hardening_steps',
]
