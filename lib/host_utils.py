"""Utility functions for running commands and editing files on the host."""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
from logging import getLogger
from typing import Optional


logger = getLogger("server_setup")

_dry_run = False


def set_dry_run(enabled: bool) -> None:
    """Set dry-run mode globally."""
    global _dry_run
    _dry_run = enabled


def is_dry_run() -> bool:
    """Check if dry-run mode is enabled."""
    return _dry_run


def run(cmd: str, check: bool = True, cwd: Optional[str] = None, capture_output: bool = False, text: bool = True) -> subprocess.CompletedProcess[str]:
    print(f"  Running: {cmd[:80]}..." if len(cmd) > 80 else f"  Running: {cmd}")
    sys.stdout.flush()
    logger.debug(f"Running: {cmd}")

    if is_dry_run():
        print("  [DRY-RUN] Command not executed")
        return subprocess.CompletedProcess(args=[cmd], returncode=0, stdout="", stderr="")

    result = subprocess.run(cmd, shell=True, capture_output=capture_output, text=text, cwd=cwd)
    if check and result.returncode != 0:
        logger.warning(f"Command exited with {result.returncode}: {cmd}")
        if getattr(result, 'stderr', None):
            print(f"    Warning: {result.stderr[:200]}")
            sys.stdout.flush()
    return result


def is_root() -> bool:
    return os.geteuid() == 0


def read_os_release(path: str = "/etc/os-release") -> dict[str, str]:
    info: dict[str, str] = {}
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            info[key] = value.strip().strip('"')
    return info


def detect_os(path: str = "/etc/os-release") -> Optional[str]:
    """Return the Ubuntu release, or None when the host is not Ubuntu."""
    try:
        info = read_os_release(path)
    except FileNotFoundError:
        print(f"Error: Cannot detect OS - {path} not found")
        return None

    if info.get("ID", "").lower() != "ubuntu":
        print(f"Error: Unsupported OS {info.get('PRETTY_NAME', info.get('ID', 'unknown'))} (only Ubuntu is supported)")
        return None

    version = info.get("VERSION_ID", "")
    if version != "24.04":
        print(f"Warning: Ubuntu {version} detected, this tool targets Ubuntu 24.04")
    return version


def is_package_installed(package: str) -> bool:
    result = subprocess.run(
        f"dpkg -l {shlex.quote(package)} 2>/dev/null | grep -q ^ii",
        shell=True, capture_output=True
    )
    return result.returncode == 0


def is_service_active(service: str) -> bool:
    result = subprocess.run(
        f"systemctl is-active {shlex.quote(service)} >/dev/null 2>&1",
        shell=True, capture_output=True
    )
    return result.returncode == 0


def file_contains(filepath: str, content: str) -> bool:
    try:
        with open(filepath, 'r') as f:
            return content in f.read()
    except (FileNotFoundError, PermissionError):
        return False


def read_file(filepath: str) -> str:
    """Read a file; missing files read as empty.

    In dry-run mode an unreadable file also reads as empty.
    """
    try:
        with open(filepath, 'r') as f:
            return f.read()
    except FileNotFoundError:
        return ""
    except PermissionError:
        if not is_dry_run():
            raise
        print(f"  [DRY-RUN] cannot read {filepath}")
        return ""


def write_file(filepath: str, content: str, mode: Optional[int] = None, append: bool = False) -> None:
    """Write (or append) content to a file, honouring dry-run mode."""
    action = "Appending to" if append else "Writing"
    if is_dry_run():
        print(f"  [DRY-RUN] {action} {filepath} not performed")
        return

    logger.debug(f"{action} {filepath}")
    with open(filepath, "a" if append else "w") as f:
        f.write(content)
    if mode is not None:
        os.chmod(filepath, mode)


def make_dirs(path: str, mode: Optional[int] = None) -> None:
    if is_dry_run():
        print(f"  [DRY-RUN] Creating {path} not performed")
        return

    os.makedirs(path, exist_ok=True)
    if mode is not None:
        os.chmod(path, mode)
