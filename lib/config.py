#!/usr/bin/env python3

import argparse
from dataclasses import dataclass, asdict
from typing import Optional, Dict, List, Any


SSH_PORT_MIN = 1024
SSH_PORT_MAX = 65535

ESSENTIAL_PACKAGES = ["curl", "wget", "nano"]

SSHD_CONFIG = "/etc/ssh/sshd_config"
SSHD_CONFIG_BACKUP = "/etc/ssh/sshd_config.bak"
ROOT_SSH_DIR = "/root/.ssh"
AUTHORIZED_KEYS = "/root/.ssh/authorized_keys"
FAIL2BAN_JAIL = "/etc/fail2ban/jail.d/sshd.conf"
SYSCTL_CONF = "/etc/sysctl.conf"

FAIL2BAN_MAXRETRY = 3
FAIL2BAN_FINDTIME = 600
FAIL2BAN_BANTIME = 3600

IPV6_SYSCTL_LINES = [
    "net.ipv6.conf.all.disable_ipv6 = 1",
    "net.ipv6.conf.default.disable_ipv6 = 1",
    "net.ipv6.conf.lo.disable_ipv6 = 1",
]

MACHINE_TYPES = [
    "unprivileged",
    "vm",
    "privileged",
    "hardware",
    "oci",
]

DEFAULT_MACHINE_TYPE = "vm"


@dataclass
class HardeningConfig:
    ssh_port: int
    ssh_key: str
    machine_type: str = DEFAULT_MACHINE_TYPE
    dry_run: bool = False
    assume_yes: bool = False
    skip_upgrade: bool = False
    disable_ipv6: bool = True
    extra_packages: Optional[List[str]] = None

    @property
    def packages(self) -> List[str]:
        packages = list(ESSENTIAL_PACKAGES)
        for package in self.extra_packages or []:
            if package not in packages:
                packages.append(package)
        return packages

    @property
    def key_summary(self) -> str:
        parts = self.ssh_key.split()
        if not parts:
            return ""
        if len(parts) >= 3:
            return f"{parts[0]} {' '.join(parts[2:])}"
        return parts[0]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop('ssh_key', None)
        data['ssh_key'] = self.key_summary
        return data

    @classmethod
    def from_args(cls, args: argparse.Namespace, ssh_port: int, ssh_key: str) -> 'HardeningConfig':
        extra_packages = None
        if getattr(args, 'extra_packages', None):
            extra_packages = [p for p in args.extra_packages.split() if p]

        return cls(
            ssh_port=ssh_port,
            ssh_key=ssh_key.strip(),
            machine_type=getattr(args, 'machine_type', None) or DEFAULT_MACHINE_TYPE,
            dry_run=getattr(args, 'dry_run', False),
            assume_yes=getattr(args, 'assume_yes', False),
            skip_upgrade=getattr(args, 'skip_upgrade', False),
            disable_ipv6=not getattr(args, 'keep_ipv6', False),
            extra_packages=extra_packages,
        )
