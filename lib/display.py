#!/usr/bin/env python3

"""Display utilities for the setup run."""

from lib.config import HardeningConfig
from lib.machine_state import can_manage_firewall, can_modify_kernel, is_container


def print_setup_menu() -> None:
    print("=== Server Setup Menu ===")
    print("This script will configure SSH, UFW, Fail2ban, and disable IPv6.")


def print_setup_summary(config: HardeningConfig) -> None:
    """Print the configuration about to be applied."""
    print("=" * 60)
    print("Server Hardening (Ubuntu 24.04)")
    print("=" * 60)
    print(f"SSH port: {config.ssh_port}")
    print(f"SSH key: {config.key_summary}")
    print(f"Machine: {config.machine_type}")
    print(f"Packages: {' '.join(config.packages)}")
    if config.skip_upgrade:
        print("Upgrade: skipped")
    if not config.disable_ipv6:
        print("IPv6: kept")
    if config.dry_run:
        print("Dry-run: Yes")
    print("=" * 60)


def print_completion(config: HardeningConfig) -> None:
    print()
    print("=" * 60)
    print("=== Setup Complete ===")
    print("=" * 60)
    print("Server is now configured with:")
    print("- Updated packages")
    print(f"- SSH on port {config.ssh_port} with public key authentication")
    if can_manage_firewall(config.machine_type):
        print("- UFW enabled")
    if not is_container(config.machine_type):
        print("- Fail2ban protecting SSH")
    if config.disable_ipv6 and can_modify_kernel(config.machine_type):
        print("- IPv6 disabled")
    print()
    print(f"Reconnect with: ssh -p {config.ssh_port} root@<host>")
    print("Keep this session open until the new connection works.")
    print("=" * 60)
