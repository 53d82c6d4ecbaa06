"""Security hardening steps."""

from __future__ import annotations

import glob
import os
import re
import shlex
from logging import getLogger

from lib.config import (
    HardeningConfig,
    SSHD_CONFIG,
    SSHD_CONFIG_BACKUP,
    ROOT_SSH_DIR,
    AUTHORIZED_KEYS,
    FAIL2BAN_JAIL,
    FAIL2BAN_MAXRETRY,
    FAIL2BAN_FINDTIME,
    FAIL2BAN_BANTIME,
    SYSCTL_CONF,
    IPV6_SYSCTL_LINES,
)
from lib.host_utils import run, is_service_active, is_package_installed, read_file, write_file, make_dirs
from lib.logging_utils import log_subprocess_result
from lib.machine_state import can_manage_firewall, can_modify_kernel, is_container
from lib.sshd_config import apply_directives, comment_out_directive, get_directive_values, set_directive

SSHD_CONFIG_DIR = "/etc/ssh/sshd_config.d"

logger = getLogger("server_setup")


def update_packages(config: HardeningConfig) -> None:
    os.environ["DEBIAN_FRONTEND"] = "noninteractive"
    result = run("apt-get update -qq", check=False)
    log_subprocess_result(logger, "Updated package lists", result)

    if config.skip_upgrade:
        print("  ✓ Package lists updated (upgrade skipped)")
        return

    result = run("apt-get upgrade -y -qq", check=False)
    if log_subprocess_result(logger, "Upgraded packages", result):
        print("  ✓ Packages updated and upgraded")
    else:
        print("  ⚠ Package upgrade reported errors (check logs)")


def install_essential_packages(config: HardeningConfig) -> None:
    packages = " ".join(shlex.quote(p) for p in config.packages)
    result = run(f"apt-get install -y -qq {packages}", check=False)
    if log_subprocess_result(logger, f"Installed {', '.join(config.packages)}", result):
        print(f"  ✓ Installed {', '.join(config.packages)}")
    else:
        print("  ⚠ Some packages could not be installed (check logs)")


def install_ssh_key(config: HardeningConfig) -> None:
    make_dirs(ROOT_SSH_DIR, 0o700)

    existing = read_file(AUTHORIZED_KEYS)
    if config.ssh_key in (line.strip() for line in existing.splitlines()):
        print("  ✓ Public key already in authorized_keys")
        return

    prefix = "\n" if existing and not existing.endswith("\n") else ""
    write_file(AUTHORIZED_KEYS, f"{prefix}{config.ssh_key}\n", mode=0o600, append=True)
    logger.info(f"Added {config.key_summary} to {AUTHORIZED_KEYS}")
    print(f"  ✓ Public key added to {AUTHORIZED_KEYS}")


def sshd_directives(config: HardeningConfig) -> list[tuple[str, str]]:
    return [
        ("Port", str(config.ssh_port)),
        ("PermitRootLogin", "prohibit-password"),
        ("PasswordAuthentication", "no"),
    ]


def _fix_sshd_drop_ins(directives: list[tuple[str, str]]) -> None:
    """Rewrite included drop-ins that would override the main config.

    sshd keeps the first value it reads, and sshd_config includes
    sshd_config.d/*.conf before its own settings. Port lines accumulate
    instead, so drop-in Port lines are commented out.
    """
    for path in sorted(glob.glob(os.path.join(SSHD_CONFIG_DIR, "*.conf"))):
        content = read_file(path)
        overrides = [(key, value) for key, value in directives if get_directive_values(content, key)]
        if not overrides:
            continue

        updated = content
        for key, value in overrides:
            if key.lower() == "port":
                updated = comment_out_directive(updated, key)
            else:
                updated = set_directive(updated, key, value)
        write_file(path, updated)

        names = ", ".join(key for key, _ in overrides)
        logger.info(f"Rewrote {names} in {path}")
        print(f"  ✓ Updated {names} in {path}")


def restart_ssh() -> bool:
    # Ubuntu 24.04 starts sshd through ssh.socket; the generator reads Port on daemon-reload
    if is_service_active("ssh.socket"):
        run("systemctl daemon-reload", check=False)
        result = run("systemctl restart ssh.socket", check=False, capture_output=True)
        if not log_subprocess_result(logger, "Restarted ssh.socket", result):
            return False
        run("systemctl restart ssh", check=False)
        return True

    result = run("systemctl restart ssh || systemctl restart sshd", check=False, capture_output=True)
    return log_subprocess_result(logger, "Restarted ssh", result)


def harden_ssh(config: HardeningConfig) -> None:
    if not os.path.exists(SSHD_CONFIG_BACKUP):
        run(f"cp {SSHD_CONFIG} {SSHD_CONFIG_BACKUP}")

    directives = sshd_directives(config)
    content = read_file(SSHD_CONFIG)
    write_file(SSHD_CONFIG, apply_directives(content, directives))
    _fix_sshd_drop_ins(directives)

    if not restart_ssh():
        print("  ⚠ SSH could not be restarted (check logs)")
        return

    print(f"  ✓ SSH configured with port {config.ssh_port} and public key authentication")


def firewall_has_rule(added_rules: str, port: int) -> bool:
    """Check `ufw show added` output for an allow rule on the port."""
    pattern = re.compile(rf'^ufw allow {port}/tcp\s*$')
    return any(pattern.match(line.strip()) for line in added_rules.splitlines())


def configure_firewall(config: HardeningConfig) -> None:
    if not can_manage_firewall(config.machine_type):
        print("  ✓ Skipping firewall configuration (host manages packet filtering)")
        return

    if not is_package_installed("ufw"):
        run("apt-get install -y -qq ufw")

    added = run("ufw show added", check=False, capture_output=True)
    if firewall_has_rule(added.stdout or "", config.ssh_port):
        print(f"  ✓ Firewall rule for {config.ssh_port}/tcp already present")
    else:
        result = run(f"ufw allow {config.ssh_port}/tcp", check=False, capture_output=True)
        log_subprocess_result(logger, f"Allowed {config.ssh_port}/tcp", result)

    result = run("ufw --force enable", check=False, capture_output=True)
    if not log_subprocess_result(logger, "Enabled ufw", result):
        if is_container(config.machine_type):
            print("  ⚠ Firewall could not be enabled (container may lack capabilities)")
        else:
            print("  ⚠ Firewall could not be enabled (check logs)")
        return

    print(f"  ✓ UFW enabled with SSH port {config.ssh_port} allowed")


def render_fail2ban_jail(port: int) -> str:
    return f"""[sshd]
enabled = true
port = {port}
maxretry = {FAIL2BAN_MAXRETRY}
findtime = {FAIL2BAN_FINDTIME}
bantime = {FAIL2BAN_BANTIME}
"""


def configure_fail2ban(config: HardeningConfig) -> None:
    if is_container(config.machine_type):
        print("  ✓ Skipping fail2ban configuration (limited functionality in containers)")
        return

    run("apt-get install -y -qq fail2ban")
    run("systemctl enable fail2ban", check=False)

    make_dirs(os.path.dirname(FAIL2BAN_JAIL))
    write_file(FAIL2BAN_JAIL, render_fail2ban_jail(config.ssh_port))

    result = run("systemctl restart fail2ban", check=False, capture_output=True)
    if not log_subprocess_result(logger, "Restarted fail2ban", result):
        print("  ⚠ fail2ban could not be restarted (check logs)")
        return

    print(f"  ✓ Fail2ban configured for SSH on port {config.ssh_port} "
          f"({FAIL2BAN_MAXRETRY} failed attempts = {FAIL2BAN_BANTIME // 3600} hour ban)")


def disable_ipv6(config: HardeningConfig) -> None:
    if not can_modify_kernel(config.machine_type):
        print("  ✓ Skipping IPv6 disable (host kernel manages these settings)")
        return

    content = read_file(SYSCTL_CONF)
    present = {line.strip() for line in content.splitlines()}
    missing = [line for line in IPV6_SYSCTL_LINES if line not in present]
    if missing:
        prefix = "\n" if content and not content.endswith("\n") else ""
        write_file(SYSCTL_CONF, prefix + "\n".join(missing) + "\n", append=True)

    result = run("sysctl -p", check=False, capture_output=True)
    if not log_subprocess_result(logger, "Applied sysctl settings", result):
        print("  ⚠ Some kernel parameters may not have applied (check logs)")
        return

    print("  ✓ IPv6 disabled")
